"""Checkout API routes"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..core.config import settings
from ..core.errors import (
    CartNotFoundError,
    CheckoutError,
    ContractViolationError,
    EmptyCartError,
    InventoryUnavailableError,
    OrderInProgressError,
    OrderNotFoundError,
    PaymentDeclinedError,
    ReservationExpiredError,
    SessionNotFoundError,
    StepMismatchError,
)
from ..core.session import CheckoutSession
from ..models import (
    Address,
    CartSnapshot,
    CustomerIdentity,
    CustomerInfo,
    Order,
    PricingBreakdown,
    SessionStatus,
    ShippingRate,
    StepId,
)
from ..services.orchestrator import CheckoutOrchestrator, build_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])

# Initialize services (replaced through dependency_overrides in tests)
orchestrator: Optional[CheckoutOrchestrator] = None


def get_orchestrator() -> CheckoutOrchestrator:
    """Get or create the checkout orchestrator"""
    global orchestrator
    if orchestrator is None:
        orchestrator = build_orchestrator(settings)
    return orchestrator


STATUS_CODES: dict[type[CheckoutError], int] = {
    SessionNotFoundError: 404,
    CartNotFoundError: 404,
    OrderNotFoundError: 404,
    OrderInProgressError: 409,
    StepMismatchError: 409,
    InventoryUnavailableError: 409,
    ReservationExpiredError: 409,
    PaymentDeclinedError: 402,
    EmptyCartError: 422,
}


def to_http_exception(error: Exception) -> HTTPException:
    """Map a checkout error to its HTTP response; contract violations become a bare 500"""
    if isinstance(error, ContractViolationError):
        logger.exception("Checkout contract violation", exc_info=error)
        return HTTPException(status_code=500, detail={"code": "internal_error", "message": "Internal error"})

    status_code = 503
    for error_type, code in STATUS_CODES.items():
        if isinstance(error, error_type):
            status_code = code
            break
    return HTTPException(status_code=status_code, detail=error.to_dict())


# ==================== Request / response models ====================

class StartCheckoutRequest(BaseModel):
    cart_id: str
    identity: CustomerIdentity


class ShippingUpdateRequest(BaseModel):
    address: Address
    shipping_rate_id: Optional[str] = None


class PaymentUpdateRequest(BaseModel):
    payment_method: Optional[str] = None
    same_as_shipping: bool = True
    billing_address: Optional[Address] = None


class SessionResponse(BaseModel):
    """Client view of a checkout session"""
    session_id: str
    cart_id: str
    status: SessionStatus
    current_step: StepId
    step_history: list[StepId]
    snapshot: CartSnapshot
    customer: CustomerInfo
    shipping_address: Address
    billing_address: Address
    same_as_shipping: bool
    selected_shipping_rate_id: Optional[str] = None
    available_rates: list[ShippingRate]
    payment_method: Optional[str] = None
    payment_intent_id: Optional[str] = None
    pricing: Optional[PricingBreakdown] = None
    last_error: Optional[dict] = None
    order_id: Optional[str] = None
    updated_at: datetime

    @classmethod
    def from_session(cls, session: CheckoutSession) -> "SessionResponse":
        return cls(
            session_id=session.session_id,
            cart_id=session.cart_id,
            status=session.status,
            current_step=session.current_step,
            step_history=session.step_history,
            snapshot=session.snapshot,
            customer=session.customer,
            shipping_address=session.shipping_address,
            billing_address=session.effective_billing_address,
            same_as_shipping=session.same_as_shipping,
            selected_shipping_rate_id=session.selected_shipping_rate_id,
            available_rates=session.available_rates,
            payment_method=session.payment_method_ref,
            payment_intent_id=session.payment_intent.intent_id if session.payment_intent else None,
            pricing=session.pricing,
            last_error=session.last_error,
            order_id=session.order_id,
            updated_at=session.updated_at,
        )


class StepResponse(BaseModel):
    session_id: str
    current_step: StepId
    session: SessionResponse


class RatesResponse(BaseModel):
    session_id: str
    shipping_rates: list[ShippingRate]


class OrderResponse(BaseModel):
    order: Order
    message: Optional[str] = None


# ==================== Routes ====================

@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def start_checkout(
    request: StartCheckoutRequest,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """Start a checkout from a cart; the cart is snapshotted here"""
    try:
        session = checkout.start_checkout_for_cart(request.cart_id, request.identity)
    except (CheckoutError, ContractViolationError) as e:
        raise to_http_exception(e) from e
    return SessionResponse.from_session(session)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    try:
        session = checkout.get_session(session_id)
    except CheckoutError as e:
        raise to_http_exception(e) from e
    return SessionResponse.from_session(session)


@router.put("/sessions/{session_id}/customer", response_model=SessionResponse)
async def update_customer(
    session_id: str,
    request: CustomerInfo,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    try:
        session = checkout.update_customer(session_id, request)
    except CheckoutError as e:
        raise to_http_exception(e) from e
    return SessionResponse.from_session(session)


@router.put("/sessions/{session_id}/shipping", response_model=SessionResponse)
async def update_shipping(
    session_id: str,
    request: ShippingUpdateRequest,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """Set the shipping address and method. Changing either clears the price."""
    try:
        session = checkout.update_shipping(session_id, request.address, request.shipping_rate_id)
    except CheckoutError as e:
        raise to_http_exception(e) from e
    return SessionResponse.from_session(session)


@router.get("/sessions/{session_id}/shipping-rates", response_model=RatesResponse)
async def get_shipping_rates(
    session_id: str,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """Shipping options for the session's current address"""
    try:
        rates = await checkout.get_shipping_rates(session_id)
    except CheckoutError as e:
        raise to_http_exception(e) from e
    return RatesResponse(session_id=session_id, shipping_rates=rates)


@router.put("/sessions/{session_id}/payment", response_model=SessionResponse)
async def update_payment(
    session_id: str,
    request: PaymentUpdateRequest,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    try:
        session = checkout.update_payment(
            session_id,
            request.payment_method,
            same_as_shipping=request.same_as_shipping,
            billing_address=request.billing_address,
        )
    except CheckoutError as e:
        raise to_http_exception(e) from e
    return SessionResponse.from_session(session)


@router.post("/sessions/{session_id}/advance", response_model=StepResponse)
async def advance(
    session_id: str,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """
    Validate the current step and continue.

    Field errors come back as 422 with a field -> message map, a pricing or
    payment outage as 503; either way the step does not change.
    """
    try:
        result = await checkout.advance(session_id)
        session = checkout.get_session(session_id)
    except (CheckoutError, ContractViolationError) as e:
        raise to_http_exception(e) from e

    if result.failure is not None:
        raise to_http_exception(result.failure)
    if not result.ok:
        raise HTTPException(
            status_code=422,
            detail={
                "code": "validation_failed",
                "message": "Please correct the highlighted fields",
                "current_step": result.next_step.value,
                "errors": result.errors,
            },
        )
    return StepResponse(
        session_id=session_id,
        current_step=result.next_step,
        session=SessionResponse.from_session(session),
    )


@router.post("/sessions/{session_id}/retreat", response_model=StepResponse)
async def retreat(
    session_id: str,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """Go back one step"""
    try:
        step = checkout.retreat(session_id)
        session = checkout.get_session(session_id)
    except (CheckoutError, ContractViolationError) as e:
        raise to_http_exception(e) from e
    return StepResponse(
        session_id=session_id,
        current_step=step,
        session=SessionResponse.from_session(session),
    )


@router.post("/sessions/{session_id}/place-order", response_model=OrderResponse)
async def place_order(
    session_id: str,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """
    Place the order from Review.

    A repeated request while the first is still running gets 409.
    """
    try:
        order = await checkout.place_order(session_id)
    except (CheckoutError, ContractViolationError) as e:
        raise to_http_exception(e) from e
    return OrderResponse(order=order, message=f"Order {order.order_number} confirmed")


@router.delete("/sessions/{session_id}")
async def cancel_checkout(
    session_id: str,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """Abandon a checkout"""
    try:
        checkout.cancel(session_id)
    except CheckoutError as e:
        raise to_http_exception(e) from e
    return {"message": "Checkout cancelled", "session_id": session_id}


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    try:
        order = checkout.get_order(order_id)
    except CheckoutError as e:
        raise to_http_exception(e) from e
    return OrderResponse(order=order)
