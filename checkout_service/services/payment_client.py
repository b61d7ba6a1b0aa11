"""
Payment API Client

Payment intents are created for the priced total and confirmed only after
inventory is held. Amounts travel in minor units (cents).
"""

import logging
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..models.checkout import PaymentConfirmation, PaymentIntent, PaymentIntentStatus
from ..models.money import from_minor_units, to_minor_units
from .base_client import ServiceClient

logger = logging.getLogger(__name__)


class IntentResponse(BaseModel):
    id: str
    client_secret: str
    amount: int = Field(ge=0)
    currency: str
    status: PaymentIntentStatus


class ConfirmResponse(BaseModel):
    intent_id: str
    status: PaymentIntentStatus
    order_ref: Optional[str] = None
    failure_reason: Optional[str] = None


class IntentStatusResponse(BaseModel):
    id: str
    status: PaymentIntentStatus
    charge_id: Optional[str] = None
    failure_reason: Optional[str] = None


class RefundResponse(BaseModel):
    refund_id: str
    status: str
    amount: int = Field(ge=0)


class CancelResponse(BaseModel):
    id: str
    status: PaymentIntentStatus


class PaymentClient(ServiceClient):
    """Client for the payment processor API"""

    service_name = "payments"

    async def create_intent(
        self,
        amount: Decimal,
        currency: str = "USD",
        metadata: Optional[dict[str, str]] = None,
    ) -> PaymentIntent:
        """Create a payment intent for the given total"""
        data = await self._request(
            "POST",
            "/api/payments/intents",
            body={
                "amount": to_minor_units(amount),
                "currency": currency.lower(),
                "metadata": metadata or {},
            },
        )
        response = self._parse(IntentResponse, data)
        logger.info(f"Payment intent {response.id} created for {response.amount} {response.currency}")

        return PaymentIntent(
            intent_id=response.id,
            client_secret=response.client_secret,
            amount=from_minor_units(response.amount),
            currency=response.currency.upper(),
            status=response.status,
        )

    async def confirm(self, client_secret: str, payment_method: Optional[str] = None) -> PaymentConfirmation:
        """Confirm an intent; a declined card comes back as a status, not an error"""
        body = {"client_secret": client_secret}
        if payment_method:
            body["payment_method"] = payment_method

        data = await self._request("POST", "/api/payments/confirm", body=body)
        response = self._parse(ConfirmResponse, data)

        return PaymentConfirmation(
            intent_id=response.intent_id,
            status=response.status,
            order_ref=response.order_ref,
            failure_reason=response.failure_reason,
        )

    async def get_confirmation(self, intent_id: str) -> PaymentConfirmation:
        """Current outcome of an intent, as the processor records it"""
        data = await self._request("GET", f"/api/payments/intents/{intent_id}")
        response = self._parse(IntentStatusResponse, data)

        return PaymentConfirmation(
            intent_id=response.id,
            status=response.status,
            order_ref=response.charge_id,
            failure_reason=response.failure_reason,
        )

    async def cancel_intent(self, intent_id: str) -> bool:
        """Cancel an unconfirmed intent so it can never be captured"""
        data = await self._request("POST", f"/api/payments/intents/{intent_id}/cancel")
        return self._parse(CancelResponse, data).status == PaymentIntentStatus.CANCELED

    async def refund(
        self,
        intent_id: str,
        amount: Optional[Decimal] = None,
        reason: Optional[str] = None,
    ) -> RefundResponse:
        """Refund a confirmed payment, in full unless an amount is given"""
        body: dict = {"payment_intent_id": intent_id}
        if amount is not None:
            body["amount"] = to_minor_units(amount)
        if reason:
            body["reason"] = reason

        data = await self._request("POST", "/api/payments/refund", body=body)
        return self._parse(RefundResponse, data)
