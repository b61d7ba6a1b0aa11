"""Payment models for the mock backend; amounts are in cents"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PaymentIntentStatus(str, Enum):
    REQUIRES_CONFIRMATION = "requires_confirmation"
    SUCCEEDED = "succeeded"
    DECLINED = "declined"
    FAILED = "failed"
    CANCELED = "canceled"


class PaymentIntent(BaseModel):
    id: str
    client_secret: str
    amount: int = Field(gt=0)
    currency: str = "usd"
    status: PaymentIntentStatus = PaymentIntentStatus.REQUIRES_CONFIRMATION
    metadata: dict[str, str] = Field(default_factory=dict)
    payment_method: Optional[str] = None
    charge_id: Optional[str] = None
    failure_reason: Optional[str] = None
    amount_refunded: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CreateIntentRequest(BaseModel):
    amount: int = Field(gt=0)
    currency: str = "usd"
    metadata: dict[str, str] = Field(default_factory=dict)


class ConfirmRequest(BaseModel):
    client_secret: str
    payment_method: Optional[str] = None


class ConfirmResponse(BaseModel):
    intent_id: str
    status: PaymentIntentStatus
    order_ref: Optional[str] = None
    failure_reason: Optional[str] = None


class CancelResponse(BaseModel):
    id: str
    status: PaymentIntentStatus


class RefundRequest(BaseModel):
    payment_intent_id: str
    amount: Optional[int] = Field(default=None, gt=0)
    reason: Optional[str] = None


class Refund(BaseModel):
    refund_id: str
    payment_intent_id: str
    amount: int
    status: str = "succeeded"
    reason: Optional[str] = None
