"""
Pytest fixtures: in-memory SQLite database, temporary uploads directory and an
HTTP client bound to the app with both swapped in.
"""

import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession

from app.api import deps
from app.db.session import get_session
from app.main import app
from app.models import create_db_and_tables
from app.models.document import Document, PaymentStatus
from app.services.document_store import DocumentStore
from app.services.payment_store import PaymentStore
from app.services.payment_workflow import PaymentWorkflow
from app.services.storage_service import StorageService

MiB = 1024 * 1024


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path):
    return StorageService(
        upload_dir=str(tmp_path / "uploads"),
        max_size=10 * MiB,
        allowed_extensions=[".doc", ".docx", ".rtf"],
    )


@pytest.fixture
def workflow(session):
    return PaymentWorkflow(session, DocumentStore(session), PaymentStore(session))


@pytest.fixture
def make_document(session, tmp_path):
    """Insert a document whose file exists on disk."""

    async def _make(payment_status=PaymentStatus.PENDING, content=b"assessment"):
        filename = f"{uuid.uuid4().hex}.docx"
        path = tmp_path / filename
        path.write_bytes(content)
        document = Document(
            filename=filename,
            original_name="report.docx",
            file_size=len(content),
            file_type=".docx",
            file_path=str(path),
            email="a@b.com",
            payment_status=payment_status,
        )
        return await DocumentStore(session).create(document)

    return _make


@pytest.fixture
async def client(session_factory, storage):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[deps.get_storage_service] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
