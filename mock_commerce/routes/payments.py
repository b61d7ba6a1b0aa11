"""Payment API routes for the mock backend"""

from fastapi import APIRouter, HTTPException

from ..database.payments import PaymentError, payment_db
from ..models.payment import (
    CancelResponse,
    ConfirmRequest,
    ConfirmResponse,
    CreateIntentRequest,
    PaymentIntent,
    Refund,
    RefundRequest,
)

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.post("/intents", response_model=PaymentIntent)
async def create_intent(request: CreateIntentRequest):
    """Create a payment intent for an amount in cents"""
    return payment_db.create_intent(request.amount, request.currency, request.metadata)


@router.get("/intents/{intent_id}", response_model=PaymentIntent)
async def get_intent(intent_id: str):
    intent = payment_db.get_intent(intent_id)
    if not intent:
        raise HTTPException(status_code=404, detail="Payment intent not found")
    return intent


@router.post("/confirm", response_model=ConfirmResponse)
async def confirm(request: ConfirmRequest):
    """Confirm an intent; declines are reported in the body"""
    try:
        intent = payment_db.confirm(request.client_secret, request.payment_method)
    except PaymentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return ConfirmResponse(
        intent_id=intent.id,
        status=intent.status,
        order_ref=intent.charge_id,
        failure_reason=intent.failure_reason,
    )


@router.post("/intents/{intent_id}/cancel", response_model=CancelResponse)
async def cancel_intent(intent_id: str):
    try:
        intent = payment_db.cancel(intent_id)
    except PaymentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return CancelResponse(id=intent.id, status=intent.status)


@router.post("/refund", response_model=Refund)
async def refund(request: RefundRequest):
    """Refund a succeeded payment, in full unless an amount is given"""
    try:
        return payment_db.refund(request.payment_intent_id, request.amount, request.reason)
    except PaymentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
