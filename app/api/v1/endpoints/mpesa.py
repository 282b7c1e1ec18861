import logging
from fastapi import APIRouter, Depends, Request

from app.api import deps
from app.models.mpesa import CallbackAck, MpesaCallback
from app.services.payment_workflow import PaymentWorkflow

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/callback", response_model=CallbackAck)
async def mpesa_callback(
    request: Request,
    workflow: PaymentWorkflow = Depends(deps.get_payment_workflow),
):
    """
    Receive an STK push result. Always acknowledged so the provider does not retry;
    failures are only logged.
    """
    try:
        payload = await request.json()
        callback = MpesaCallback.model_validate(payload)
        await workflow.handle_callback(callback.body.stk_callback)
    except ValueError as e:
        # Covers undecodable JSON and pydantic ValidationError
        logger.warning("Malformed M-Pesa callback ignored: %s", e)
    except Exception:
        logger.exception("Error processing M-Pesa callback")
    return CallbackAck()
