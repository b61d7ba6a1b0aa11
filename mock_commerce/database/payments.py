"""Mock payment processor"""

import logging
import uuid
from typing import Optional

from ..config import MockSettings, mock_settings
from ..models.payment import PaymentIntent, PaymentIntentStatus, Refund

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """Request the processor refuses; carries the HTTP status to answer with"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PaymentDatabase:
    """
    In-memory payment intents.

    The payment method decides the outcome of a confirmation: the configured
    decline method is declined, the error method fails, anything else
    succeeds.
    """

    def __init__(self, settings: MockSettings):
        self.settings = settings
        self.reset()

    def reset(self) -> None:
        self.intents: dict[str, PaymentIntent] = {}
        self.refunds: dict[str, Refund] = {}

    def create_intent(self, amount: int, currency: str, metadata: dict[str, str]) -> PaymentIntent:
        intent_id = f"pi_{uuid.uuid4().hex[:24]}"
        intent = PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid.uuid4().hex[:16]}",
            amount=amount,
            currency=currency.lower(),
            metadata=metadata,
        )
        self.intents[intent.id] = intent
        logger.info(f"Created intent {intent.id} for {amount} {intent.currency}")
        return intent

    def get_intent(self, intent_id: str) -> Optional[PaymentIntent]:
        return self.intents.get(intent_id)

    def _by_secret(self, client_secret: str) -> Optional[PaymentIntent]:
        return next((i for i in self.intents.values() if i.client_secret == client_secret), None)

    def confirm(self, client_secret: str, payment_method: Optional[str]) -> PaymentIntent:
        intent = self._by_secret(client_secret)
        if not intent:
            raise PaymentError("Payment intent not found", status_code=404)

        if intent.status in (PaymentIntentStatus.SUCCEEDED, PaymentIntentStatus.CANCELED):
            return intent

        intent.payment_method = payment_method
        if payment_method == self.settings.decline_payment_method:
            intent.status = PaymentIntentStatus.DECLINED
            intent.failure_reason = "card_declined"
        elif payment_method == self.settings.error_payment_method:
            intent.status = PaymentIntentStatus.FAILED
            intent.failure_reason = "processing_error"
        else:
            intent.status = PaymentIntentStatus.SUCCEEDED
            intent.failure_reason = None
            intent.charge_id = f"ch_{uuid.uuid4().hex[:24]}"

        logger.info(f"Confirmed {intent.id}: {intent.status.value}")
        return intent

    def cancel(self, intent_id: str) -> PaymentIntent:
        intent = self.get_intent(intent_id)
        if not intent:
            raise PaymentError("Payment intent not found", status_code=404)
        if intent.status == PaymentIntentStatus.SUCCEEDED:
            raise PaymentError("A succeeded payment cannot be canceled; refund it instead")

        intent.status = PaymentIntentStatus.CANCELED
        logger.info(f"Canceled {intent.id}")
        return intent

    def refund(self, intent_id: str, amount: Optional[int] = None, reason: Optional[str] = None) -> Refund:
        intent = self.get_intent(intent_id)
        if not intent:
            raise PaymentError("Payment intent not found", status_code=404)
        if intent.status != PaymentIntentStatus.SUCCEEDED:
            raise PaymentError(f"Cannot refund a {intent.status.value} payment")

        remaining = intent.amount - intent.amount_refunded
        amount = remaining if amount is None else amount
        if amount <= 0 or amount > remaining:
            raise PaymentError(f"Refund amount must be between 1 and {remaining}")

        refund = Refund(
            refund_id=f"re_{uuid.uuid4().hex[:24]}",
            payment_intent_id=intent.id,
            amount=amount,
            reason=reason,
        )
        intent.amount_refunded += amount
        self.refunds[refund.refund_id] = refund
        logger.info(f"Refunded {amount} on {intent.id} ({reason})")
        return refund


# Singleton instance
payment_db = PaymentDatabase(mock_settings)
