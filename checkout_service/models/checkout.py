"""Checkout models for the checkout service"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .money import to_money, ZERO


class StepId(str, Enum):
    """Checkout wizard steps, in order"""
    CUSTOMER_INFO = "customer_info"
    SHIPPING = "shipping"
    PAYMENT = "payment"
    REVIEW = "review"
    PLACED = "placed"
    FAILED = "failed"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    PROCESSING = "processing"
    PLACED = "placed"
    PAYMENT_FAILED = "payment_failed"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


class LoyaltyTier(str, Enum):
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"


class CustomerIdentity(BaseModel):
    """Who is checking out: a signed-in user or a guest browser session"""
    user_id: Optional[str] = None
    guest_session_id: Optional[str] = None
    email: Optional[str] = None
    loyalty_tier: Optional[LoyaltyTier] = None

    @model_validator(mode="after")
    def _require_holder(self) -> "CustomerIdentity":
        if not self.user_id and not self.guest_session_id:
            raise ValueError("either user_id or guest_session_id is required")
        return self

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    @property
    def holder_id(self) -> str:
        """Reservation holder: the user, or the guest session"""
        if self.user_id:
            return self.user_id
        return f"guest-{self.guest_session_id}"


class CustomerInfo(BaseModel):
    """Contact information collected on the first step"""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None
    create_account: bool = False
    password: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Address(BaseModel):
    """Shipping or billing address; fields are validated per step"""
    first_name: str = ""
    last_name: str = ""
    company: Optional[str] = None
    address1: str = ""
    address2: Optional[str] = None
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "US"
    phone: Optional[str] = None

    def fingerprint(self) -> str:
        """Normalized form of the parts that affect shipping and tax"""
        parts = [
            self.address1,
            self.address2 or "",
            self.city,
            self.state,
            self.zip_code,
            self.country,
        ]
        return "|".join(part.strip().lower() for part in parts)


class ShippingRate(BaseModel):
    """A shipping option quoted for an address"""
    id: str
    display_name: str
    amount: Decimal = Field(ge=0)
    eta_min_days: int = Field(ge=0)
    eta_max_days: int = Field(ge=0)

    @field_validator("amount")
    @classmethod
    def _quantize_amount(cls, value: Decimal) -> Decimal:
        return to_money(value)


class PricingBreakdown(BaseModel):
    """
    Subtotal, shipping and tax for one checkout.

    Always rebuilt from scratch by the pricing accumulator; the validator
    refuses any breakdown whose total is not the exact sum of its parts.
    """
    model_config = ConfigDict(frozen=True)

    subtotal: Decimal = Field(ge=0)
    shipping_cost: Decimal = Field(ge=0)
    tax: Decimal = Field(ge=0)
    total: Decimal = Field(ge=0)
    currency: str = "USD"
    shipping_rate_id: Optional[str] = None
    address_fingerprint: Optional[str] = None
    computed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _check_total(self) -> "PricingBreakdown":
        if self.total != self.subtotal + self.shipping_cost + self.tax:
            raise ValueError("total must equal subtotal + shipping_cost + tax")
        return self

    @classmethod
    def build(
        cls,
        subtotal: Decimal,
        shipping_cost: Decimal = ZERO,
        tax: Decimal = ZERO,
        currency: str = "USD",
        shipping_rate_id: Optional[str] = None,
        address_fingerprint: Optional[str] = None,
    ) -> "PricingBreakdown":
        subtotal = to_money(subtotal)
        shipping_cost = to_money(shipping_cost)
        tax = to_money(tax)
        return cls(
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            tax=tax,
            total=subtotal + shipping_cost + tax,
            currency=currency,
            shipping_rate_id=shipping_rate_id,
            address_fingerprint=address_fingerprint,
        )

    def is_current_for(self, address: Address, rate_id: Optional[str]) -> bool:
        """True when this breakdown was computed for these shipping inputs"""
        return (
            rate_id is not None
            and self.shipping_rate_id == rate_id
            and self.address_fingerprint == address.fingerprint()
        )


class PaymentIntentStatus(str, Enum):
    REQUIRES_CONFIRMATION = "requires_confirmation"
    SUCCEEDED = "succeeded"
    DECLINED = "declined"
    FAILED = "failed"
    CANCELED = "canceled"


class PaymentIntent(BaseModel):
    """Payment intent created for the session's priced total"""
    intent_id: str
    client_secret: str
    amount: Decimal
    currency: str
    status: PaymentIntentStatus = PaymentIntentStatus.REQUIRES_CONFIRMATION


class PaymentConfirmation(BaseModel):
    """Outcome of confirming a payment intent"""
    intent_id: str
    status: PaymentIntentStatus
    order_ref: Optional[str] = None
    failure_reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == PaymentIntentStatus.SUCCEEDED
