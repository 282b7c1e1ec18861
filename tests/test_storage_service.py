import io

import pytest
from fastapi import HTTPException, UploadFile

pytestmark = pytest.mark.anyio

MiB = 1024 * 1024


def upload(name, size):
    return UploadFile(file=io.BytesIO(b"x" * size), filename=name)


async def test_accepts_docx(storage):
    stored = await storage.save_upload(upload("Report.DOCX", MiB))

    assert stored.original_name == "Report.DOCX"
    assert stored.file_type == ".docx"
    assert stored.file_size == MiB
    assert stored.filename.endswith(".docx")
    assert stored.filename != "Report.DOCX"
    assert storage.exists(stored.file_path)


async def test_rejects_pdf_without_writing(storage):
    with pytest.raises(HTTPException) as exc_info:
        await storage.save_upload(upload("report.pdf", 1024))

    assert exc_info.value.status_code == 400
    assert "file type" in exc_info.value.detail
    assert not storage.upload_dir.exists() or not any(storage.upload_dir.iterdir())


async def test_rejects_oversized_file_without_writing(storage):
    with pytest.raises(HTTPException) as exc_info:
        await storage.save_upload(upload("report.doc", 15 * MiB))

    assert exc_info.value.status_code == 400
    assert "too large" in exc_info.value.detail
    assert not storage.upload_dir.exists() or not any(storage.upload_dir.iterdir())


async def test_accepts_file_at_size_limit(storage):
    stored = await storage.save_upload(upload("report.rtf", 10 * MiB))

    assert stored.file_size == 10 * MiB


async def test_unique_names_for_same_upload(storage):
    first = await storage.save_upload(upload("report.docx", 10))
    second = await storage.save_upload(upload("report.docx", 10))

    assert first.file_path != second.file_path
