import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from fastapi.responses import FileResponse
from pydantic import EmailStr

from app.api import deps
from app.core.config import settings
from app.models.document import (
    Document,
    DocumentEmailUpdate,
    DocumentRead,
    DocumentStats,
    PaymentStatus,
)
from app.models.payment import PaymentRead
from app.services.document_store import DocumentStore
from app.services.payment_store import PaymentStore
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)

router = APIRouter()

async def get_document_or_404(documents: DocumentStore, document_id: str) -> Document:
    document = await documents.get(document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document

@router.post("/upload", response_model=DocumentRead)
async def upload_document(
    file: UploadFile = File(...),
    email: EmailStr = Form(...),
    documents: DocumentStore = Depends(deps.get_document_store),
    storage: StorageService = Depends(deps.get_storage_service),
):
    """
    Upload a document for assessment.
    The file is written before the record is created; a failed insert leaves the file behind.
    """
    stored = await storage.save_upload(file)

    document = await documents.create(Document(
        filename=stored.filename,
        original_name=stored.original_name,
        file_size=stored.file_size,
        file_type=stored.file_type,
        file_path=stored.file_path,
        email=email,
        payment_status=PaymentStatus.PENDING,
        amount=settings.DOCUMENT_FEE,
    ))
    logger.info("Document %s created for %s", document.id, email)
    return document

@router.get("", response_model=List[DocumentRead])
async def read_documents(
    status: Optional[PaymentStatus] = None,
    skip: int = 0,
    limit: Optional[int] = None,
    documents: DocumentStore = Depends(deps.get_document_store),
):
    """
    List documents, most recently uploaded first.
    """
    return await documents.list_documents(status=status, skip=skip, limit=limit)

@router.get("/stats", response_model=DocumentStats)
async def get_document_stats(
    documents: DocumentStore = Depends(deps.get_document_store),
):
    """Counters for the admin dashboard."""
    return await documents.stats()

@router.get("/{document_id}", response_model=DocumentRead)
async def read_document(
    document_id: str,
    documents: DocumentStore = Depends(deps.get_document_store),
):
    return await get_document_or_404(documents, document_id)

@router.get("/{document_id}/payments", response_model=List[PaymentRead])
async def read_document_payments(
    document_id: str,
    documents: DocumentStore = Depends(deps.get_document_store),
    payments: PaymentStore = Depends(deps.get_payment_store),
):
    """
    Payment attempts for a document, newest first.
    """
    await get_document_or_404(documents, document_id)
    return await payments.list_for_document(document_id)

@router.get("/{document_id}/download")
async def download_document(
    document_id: str,
    documents: DocumentStore = Depends(deps.get_document_store),
    storage: StorageService = Depends(deps.get_storage_service),
):
    """
    Stream the stored file. Only paid documents can be downloaded.
    """
    document = await get_document_or_404(documents, document_id)

    if document.payment_status != PaymentStatus.COMPLETED:
        logger.warning("Download of unpaid document %s refused", document_id)
        raise HTTPException(status_code=403, detail="Payment required")

    if not storage.exists(document.file_path):
        logger.warning("File for document %s missing at %s", document_id, document.file_path)
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(
        document.file_path,
        filename=document.original_name,
        media_type="application/octet-stream",
    )

@router.patch("/{document_id}/email", response_model=DocumentRead)
async def update_document_email(
    document_id: str,
    email_in: DocumentEmailUpdate,
    documents: DocumentStore = Depends(deps.get_document_store),
):
    """
    Set the address the assessment report is sent to.
    """
    document = await documents.update_email(document_id, email_in.email)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document
