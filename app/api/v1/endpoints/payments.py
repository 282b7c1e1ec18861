from fastapi import APIRouter, Depends

from app.api import deps
from app.models.payment import (
    PaymentConfirmRequest,
    PaymentConfirmResponse,
    PaymentInitiateRequest,
    PaymentInitiateResponse,
)
from app.models.document import PaymentStatus
from app.services.payment_workflow import PaymentWorkflow

router = APIRouter()

@router.post("/initiate", response_model=PaymentInitiateResponse)
async def initiate_payment(
    payment_in: PaymentInitiateRequest,
    workflow: PaymentWorkflow = Depends(deps.get_payment_workflow),
):
    """
    Start a (mock) STK push for a document. No provider is contacted.
    """
    payment = await workflow.initiate(payment_in.document_id, payment_in.phone_number)
    return PaymentInitiateResponse(
        success=True,
        message="Payment request sent. Enter your M-Pesa PIN to complete payment.",
        checkout_request_id=payment.checkout_request_id,
        merchant_request_id=payment.merchant_request_id,
    )

@router.post("/confirm", response_model=PaymentConfirmResponse)
async def confirm_payment(
    payment_in: PaymentConfirmRequest,
    workflow: PaymentWorkflow = Depends(deps.get_payment_workflow),
):
    """
    Settle the latest payment for a document.
    Clients poll this until the status is completed.
    """
    document = await workflow.confirm(payment_in.document_id)
    if document.payment_status == PaymentStatus.COMPLETED:
        message = "Payment completed"
    elif document.payment_status == PaymentStatus.FAILED:
        message = "Payment failed. Initiate a new payment to retry"
    else:
        message = "Payment not yet completed"
    return PaymentConfirmResponse(
        status=document.payment_status,
        document_id=document.id,
        mpesa_receipt_number=document.mpesa_receipt_number,
        message=message,
    )
