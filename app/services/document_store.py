from typing import List, Optional
from sqlalchemy import update
from sqlmodel import select, func, col
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models.document import Document, DocumentStats, PaymentStatus

class DocumentStore:
    """Persistence for uploaded documents and their payment state."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: Document) -> Document:
        self.session.add(document)
        await self.session.commit()
        await self.session.refresh(document)
        return document

    async def get(self, document_id: str) -> Optional[Document]:
        return await self.session.get(Document, document_id, populate_existing=True)

    async def list_documents(
        self,
        status: Optional[PaymentStatus] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        statement = select(Document)
        if status is not None:
            statement = statement.where(Document.payment_status == status)
        statement = statement.order_by(col(Document.uploaded_at).desc()).offset(skip)
        if limit is not None:
            statement = statement.limit(limit)
        result = await self.session.exec(statement)
        return list(result.all())

    async def update_email(self, document_id: str, email: str) -> Optional[Document]:
        document = await self.get(document_id)
        if not document:
            return None
        document.email = email
        self.session.add(document)
        await self.session.commit()
        await self.session.refresh(document)
        return document

    async def mark_pending(self, document: Document, phone_number: str) -> Document:
        document.payment_status = PaymentStatus.PENDING
        document.phone_number = phone_number
        self.session.add(document)
        return document

    async def complete_if_pending(self, document_id: str, receipt_number: str) -> bool:
        """
        Conditionally settle a pending document in one statement.
        Returns True only for the caller whose UPDATE matched; caller must commit.
        """
        statement = (
            update(Document)
            .where(Document.id == document_id)
            .where(Document.payment_status == PaymentStatus.PENDING)
            .values(
                payment_status=PaymentStatus.COMPLETED,
                mpesa_receipt_number=receipt_number,
            )
        )
        result = await self.session.execute(statement)
        return result.rowcount == 1

    async def fail_if_pending(self, document_id: str) -> bool:
        statement = (
            update(Document)
            .where(Document.id == document_id)
            .where(Document.payment_status == PaymentStatus.PENDING)
            .values(payment_status=PaymentStatus.FAILED)
        )
        result = await self.session.execute(statement)
        return result.rowcount == 1

    async def stats(self) -> DocumentStats:
        statement = select(
            Document.payment_status,
            func.count(col(Document.id)),
            func.coalesce(func.sum(Document.amount), 0),
        ).group_by(Document.payment_status)
        result = await self.session.exec(statement)

        counts = {status: 0 for status in PaymentStatus}
        revenue = 0
        for status, count, amount in result.all():
            status = PaymentStatus(status)
            counts[status] = count
            if status == PaymentStatus.COMPLETED:
                revenue = int(amount)

        return DocumentStats(
            total=sum(counts.values()),
            paid=counts[PaymentStatus.COMPLETED],
            pending=counts[PaymentStatus.PENDING],
            failed=counts[PaymentStatus.FAILED],
            revenue=revenue,
        )
