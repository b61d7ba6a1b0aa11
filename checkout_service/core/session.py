"""Session management for in-progress checkouts"""

import uuid
from datetime import datetime, timezone
from typing import Optional
from dataclasses import dataclass, field

from ..models.cart import CartSnapshot
from ..models.checkout import (
    Address,
    CustomerIdentity,
    CustomerInfo,
    PaymentIntent,
    PricingBreakdown,
    SessionStatus,
    ShippingRate,
    StepId,
)
from ..models.reservation import ReservationTicket
from .errors import SessionNotFoundError


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CheckoutSession:
    """One customer's checkout, from cart capture to placement or abandonment"""
    session_id: str
    cart_id: str
    identity: CustomerIdentity
    snapshot: CartSnapshot
    created_at: datetime
    updated_at: datetime
    customer: CustomerInfo = field(default_factory=CustomerInfo)
    shipping_address: Address = field(default_factory=Address)
    billing_address: Address = field(default_factory=Address)
    same_as_shipping: bool = True
    selected_shipping_rate_id: Optional[str] = None
    available_rates: list[ShippingRate] = field(default_factory=list)
    payment_method_ref: Optional[str] = None
    payment_intent: Optional[PaymentIntent] = None
    pricing: Optional[PricingBreakdown] = None
    current_step: StepId = StepId.CUSTOMER_INFO
    status: SessionStatus = SessionStatus.ACTIVE
    step_history: list[StepId] = field(default_factory=lambda: [StepId.CUSTOMER_INFO])
    last_error: Optional[dict] = None
    reservation: Optional[ReservationTicket] = None
    order_id: Optional[str] = None
    attempts: int = 0

    @property
    def holder_id(self) -> str:
        return self.identity.holder_id

    @property
    def effective_billing_address(self) -> Address:
        """Billing address as displayed on review"""
        if self.same_as_shipping:
            return self.shipping_address
        return self.billing_address

    @property
    def is_terminal(self) -> bool:
        return self.status in (
            SessionStatus.PLACED,
            SessionStatus.ABORTED,
            SessionStatus.CANCELLED,
        )

    def move_to(self, step: StepId) -> None:
        """Record a sequencer transition"""
        self.current_step = step
        self.step_history.append(step)
        self.touch()

    def invalidate_pricing(self) -> None:
        """Shipping inputs changed; price and intent must be rebuilt"""
        self.pricing = None
        self.payment_intent = None
        self.touch()

    def touch(self) -> None:
        self.updated_at = _now()


class SessionManager:
    """Manages checkout sessions"""

    def __init__(self):
        self.sessions: dict[str, CheckoutSession] = {}

    def create_session(
        self,
        cart_id: str,
        identity: CustomerIdentity,
        snapshot: CartSnapshot,
    ) -> CheckoutSession:
        """Create a new session"""
        now = _now()
        session = CheckoutSession(
            session_id=str(uuid.uuid4()),
            cart_id=cart_id,
            identity=identity,
            snapshot=snapshot,
            created_at=now,
            updated_at=now,
        )
        if identity.email:
            session.customer.email = identity.email
        self.sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[CheckoutSession]:
        """Get session by ID"""
        return self.sessions.get(session_id)

    def require_session(self, session_id: str) -> CheckoutSession:
        session = self.get_session(session_id)
        if not session:
            raise SessionNotFoundError(session_id=session_id)
        return session

    def delete_session(self, session_id: str) -> bool:
        """Delete a session"""
        if session_id in self.sessions:
            del self.sessions[session_id]
            return True
        return False

    def cleanup_old_sessions(self, max_age_hours: int = 24) -> int:
        """
        Remove sessions idle for longer than max_age_hours.

        Reservations held by abandoned sessions are not released here; they
        lapse at their expiry on the inventory side.
        """
        now = _now()
        old_sessions = [
            sid for sid, session in self.sessions.items()
            if (now - session.updated_at).total_seconds() > max_age_hours * 3600
        ]
        for sid in old_sessions:
            del self.sessions[sid]
        return len(old_sessions)
