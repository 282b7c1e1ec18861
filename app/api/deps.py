from fastapi import Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.db.session import get_session
from app.services.document_store import DocumentStore
from app.services.payment_store import PaymentStore
from app.services.payment_workflow import PaymentWorkflow
from app.services.storage_service import StorageService, storage_service

def get_storage_service() -> StorageService:
    return storage_service

async def get_document_store(
    session: AsyncSession = Depends(get_session),
) -> DocumentStore:
    return DocumentStore(session)

async def get_payment_store(
    session: AsyncSession = Depends(get_session),
) -> PaymentStore:
    return PaymentStore(session)

async def get_payment_workflow(
    session: AsyncSession = Depends(get_session),
    documents: DocumentStore = Depends(get_document_store),
    payments: PaymentStore = Depends(get_payment_store),
) -> PaymentWorkflow:
    return PaymentWorkflow(
        session,
        documents,
        payments,
        country_code=settings.MPESA_COUNTRY_CODE,
        simulate_confirmation=settings.MPESA_SIMULATE_CONFIRMATION,
    )
