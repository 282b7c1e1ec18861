from datetime import datetime, timezone
from typing import List, Optional
from sqlmodel import select, col
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models.document import PaymentStatus
from app.models.payment import Payment

class PaymentStore:
    """Persistence for payment attempts. Writes are flushed; the caller commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, payment: Payment) -> Payment:
        self.session.add(payment)
        await self.session.flush()
        return payment

    async def latest_for_document(self, document_id: str) -> Optional[Payment]:
        statement = (
            select(Payment)
            .where(Payment.document_id == document_id)
            .order_by(col(Payment.created_at).desc())
        )
        result = await self.session.exec(statement)
        return result.first()

    async def list_for_document(self, document_id: str) -> List[Payment]:
        statement = (
            select(Payment)
            .where(Payment.document_id == document_id)
            .order_by(col(Payment.created_at).desc())
        )
        result = await self.session.exec(statement)
        return list(result.all())

    async def get_by_checkout_request_id(self, checkout_request_id: str) -> Optional[Payment]:
        statement = select(Payment).where(Payment.checkout_request_id == checkout_request_id)
        result = await self.session.exec(statement)
        return result.first()

    async def settle(
        self,
        payment: Payment,
        status: PaymentStatus,
        result_code: str,
        result_desc: Optional[str],
        receipt_number: Optional[str] = None,
    ) -> Payment:
        payment.status = status
        payment.result_code = result_code
        payment.result_desc = result_desc
        if receipt_number:
            payment.mpesa_receipt_number = receipt_number
        payment.updated_at = datetime.now(timezone.utc)
        self.session.add(payment)
        await self.session.flush()
        return payment
