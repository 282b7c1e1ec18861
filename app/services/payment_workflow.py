import logging
import random
import re
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Optional, Tuple

from fastapi import HTTPException
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models.document import Document, PaymentStatus
from app.models.mpesa import StkCallback
from app.models.payment import Payment
from app.services.document_store import DocumentStore
from app.services.payment_store import PaymentStore

logger = logging.getLogger(__name__)

SUCCESS_RESULT_CODE = "0"
SIMULATED_RESULT_DESC = "The service request is processed successfully."

def normalize_phone_number(phone_number: str, country_code: str = "254") -> str:
    """
    Rewrite a subscriber number into the canonical 2547XXXXXXXX form.
    Raises ValueError when the result is not a Kenyan mobile number.
    """
    phone = re.sub(r"\s+", "", phone_number)
    if phone.startswith("+"):
        phone = phone[1:]
    elif phone.startswith("0"):
        phone = country_code + phone[1:]

    if not re.fullmatch(rf"{country_code}[17]\d{{8}}", phone):
        raise ValueError("Please enter a valid Kenyan phone number.")
    return phone

def generate_request_ids() -> Tuple[str, str]:
    """Mock checkout/merchant correlation ids: time-seeded with a random suffix."""
    suffix = f"{random.randint(0, 999999):06d}"
    checkout_request_id = f"ws_CO_{datetime.now(timezone.utc):%d%m%Y%H%M%S}{suffix}"
    merchant_request_id = f"{int(time.time() * 1000)}-{random.randint(0, 999999):06d}-1"
    return checkout_request_id, merchant_request_id

def generate_receipt_number() -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(10))

class PaymentWorkflow:
    """
    Moves a document through NoPayment -> Pending -> Completed | Failed.
    No payment provider is contacted; confirmation is simulated when enabled.
    """

    def __init__(
        self,
        session: AsyncSession,
        documents: DocumentStore,
        payments: PaymentStore,
        country_code: str = "254",
        simulate_confirmation: bool = True,
    ):
        self.session = session
        self.documents = documents
        self.payments = payments
        self.country_code = country_code
        self.simulate_confirmation = simulate_confirmation

    async def _get_document_or_404(self, document_id: str) -> Document:
        document = await self.documents.get(document_id)
        if not document:
            raise HTTPException(status_code=404, detail="Document not found")
        return document

    async def initiate(self, document_id: str, phone_number: str) -> Payment:
        document = await self._get_document_or_404(document_id)

        try:
            phone = normalize_phone_number(phone_number, self.country_code)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        if document.payment_status == PaymentStatus.COMPLETED:
            raise HTTPException(status_code=400, detail="Payment already completed for this document")

        checkout_request_id, merchant_request_id = generate_request_ids()
        payment = await self.payments.create(Payment(
            document_id=document.id,
            checkout_request_id=checkout_request_id,
            merchant_request_id=merchant_request_id,
            amount=document.amount,
            phone_number=phone,
            status=PaymentStatus.PENDING,
        ))
        await self.documents.mark_pending(document, phone)
        await self.session.commit()

        logger.info(
            "Payment initiated for document %s (checkout %s, phone %s)",
            document.id, checkout_request_id, phone
        )
        return payment

    async def confirm(self, document_id: str) -> Document:
        document = await self._get_document_or_404(document_id)

        if document.payment_status != PaymentStatus.PENDING:
            # Completed is final; a failed document needs a new Initiate first
            return document

        if not self.simulate_confirmation:
            # Only the provider callback may settle the payment
            return document

        receipt_number = generate_receipt_number()
        if not await self.documents.complete_if_pending(document.id, receipt_number):
            # Settled concurrently by another confirmation or a callback
            await self.session.commit()
            await self.session.refresh(document)
            return document

        payment = await self.payments.latest_for_document(document.id)
        if payment is None or payment.status != PaymentStatus.PENDING:
            # Settled attempts are terminal; record the confirmation as a new attempt
            checkout_request_id, merchant_request_id = generate_request_ids()
            payment = await self.payments.create(Payment(
                document_id=document.id,
                checkout_request_id=checkout_request_id,
                merchant_request_id=merchant_request_id,
                amount=document.amount,
                phone_number=document.phone_number or "",
            ))
        await self.payments.settle(
            payment,
            PaymentStatus.COMPLETED,
            result_code=SUCCESS_RESULT_CODE,
            result_desc=SIMULATED_RESULT_DESC,
            receipt_number=receipt_number,
        )
        await self.session.commit()
        await self.session.refresh(document)

        logger.info("Payment confirmed for document %s (receipt %s)", document.id, receipt_number)
        return document

    async def handle_callback(self, callback: StkCallback) -> Optional[Payment]:
        """
        Apply a provider result push. Unknown checkout ids and already settled
        payments are ignored; returns the updated payment, if any.
        """
        payment = await self.payments.get_by_checkout_request_id(callback.checkout_request_id)
        if not payment:
            logger.warning("Callback for unknown checkout %s ignored", callback.checkout_request_id)
            return None

        if payment.status != PaymentStatus.PENDING:
            logger.info("Callback for settled payment %s ignored", payment.id)
            return None

        if callback.result_code == 0:
            receipt = callback.metadata_value("MpesaReceiptNumber")
            receipt_number = str(receipt) if receipt else generate_receipt_number()
            await self.payments.settle(
                payment,
                PaymentStatus.COMPLETED,
                result_code=str(callback.result_code),
                result_desc=callback.result_desc,
                receipt_number=receipt_number,
            )
            await self.documents.complete_if_pending(payment.document_id, receipt_number)
            logger.info("Callback completed payment %s (receipt %s)", payment.id, receipt_number)
        else:
            await self.payments.settle(
                payment,
                PaymentStatus.FAILED,
                result_code=str(callback.result_code),
                result_desc=callback.result_desc,
            )
            latest = await self.payments.latest_for_document(payment.document_id)
            if latest is not None and latest.id == payment.id:
                # Only the current attempt decides the document state
                await self.documents.fail_if_pending(payment.document_id)
            logger.info(
                "Callback failed payment %s: %s (%s)",
                payment.id, callback.result_desc, callback.result_code
            )

        await self.session.commit()
        return payment
