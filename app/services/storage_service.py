import logging
import os
import uuid
from pathlib import Path
from typing import List
from fastapi import UploadFile, HTTPException
from app.core.config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

class StoredFile:
    def __init__(self, filename: str, original_name: str, file_type: str, file_path: str, file_size: int):
        self.filename = filename
        self.original_name = original_name
        self.file_type = file_type
        self.file_path = file_path
        self.file_size = file_size

class StorageService:
    """
    Writes uploaded documents to a local uploads directory.
    Files are stored under a generated unique name; the original name is kept only as metadata.
    """
    def __init__(self, upload_dir: str, max_size: int, allowed_extensions: List[str]):
        self.upload_dir = Path(upload_dir)
        self.max_size = max_size
        self.allowed_extensions = allowed_extensions

    def ensure_upload_dir(self):
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def validate_extension(self, original_name: str) -> str:
        file_ext = os.path.splitext(original_name)[1].lower()
        if file_ext not in self.allowed_extensions:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid file type. Please upload one of: {', '.join(self.allowed_extensions)}"
            )
        return file_ext

    async def read_limited(self, file: UploadFile) -> bytes:
        """Read the upload in chunks, rejecting it as soon as it exceeds max_size."""
        chunks = []
        total = 0
        while True:
            chunk = await file.read(CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > self.max_size:
                raise HTTPException(
                    status_code=400,
                    detail=f"File too large. Maximum size is {self.max_size // (1024 * 1024)}MB"
                )
            chunks.append(chunk)
        return b"".join(chunks)

    async def save_upload(self, file: UploadFile) -> StoredFile:
        """
        Validates and writes an uploaded file to disk.
        Nothing is written if validation fails.
        """
        if not file.filename:
            raise HTTPException(status_code=400, detail="No file received by server")

        file_ext = self.validate_extension(file.filename)
        content = await self.read_limited(file)

        self.ensure_upload_dir()
        clean_filename = f"{uuid.uuid4().hex}{file_ext}"
        file_path = self.upload_dir / clean_filename
        try:
            file_path.write_bytes(content)
        except OSError:
            logger.exception("Failed to write upload %s", file_path)
            raise HTTPException(status_code=500, detail="Failed to store file.")

        logger.info("Stored %s (%d bytes) as %s", file.filename, len(content), clean_filename)
        return StoredFile(
            filename=clean_filename,
            original_name=file.filename,
            file_type=file_ext,
            file_path=str(file_path),
            file_size=len(content),
        )

    def exists(self, file_path: str) -> bool:
        return Path(file_path).is_file()

storage_service = StorageService(
    upload_dir=settings.UPLOAD_DIR,
    max_size=settings.MAX_UPLOAD_SIZE,
    allowed_extensions=settings.ALLOWED_EXTENSIONS,
)
