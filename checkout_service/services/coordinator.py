"""
Reservation / Payment Coordinator

Places an order with the strict ordering reserve -> validity check ->
confirm payment -> commit. Every failure after a successful reserve unwinds
the hold before the error leaves this module, and a charge that cannot be
committed is refunded. When a confirmation response is lost the intent is
looked up before anything is unwound.
"""

import logging
from typing import Optional

from ..core.config import Settings
from ..core.errors import (
    ContractViolationError,
    InventoryUnavailableError,
    PaymentDeclinedError,
    ReservationExpiredError,
    ServiceUnavailableError,
)
from ..core.session import CheckoutSession
from ..models.checkout import PaymentConfirmation, PaymentIntent, PaymentIntentStatus
from ..models.order import Order
from ..models.reservation import ReservationTicket, TicketStatus
from .inventory_client import InventoryClient
from .payment_client import PaymentClient

logger = logging.getLogger(__name__)

SETTLED_STATUSES = (
    PaymentIntentStatus.SUCCEEDED,
    PaymentIntentStatus.DECLINED,
    PaymentIntentStatus.FAILED,
)


class ReservationPaymentCoordinator:
    """Runs the reserve / pay / commit protocol for one checkout attempt"""

    def __init__(self, inventory: InventoryClient, payments: PaymentClient, settings: Settings):
        self.inventory = inventory
        self.payments = payments
        self.ttl_minutes = settings.reservation_ttl_minutes
        self.release_attempts = max(1, settings.release_attempts)

    @staticmethod
    def reservation_key(session: CheckoutSession) -> str:
        """Stable per attempt, so a retried reserve never holds stock twice"""
        return f"{session.session_id}:{session.attempts}"

    async def place_order(self, session: CheckoutSession) -> Order:
        """
        Reserve, pay and commit the session's snapshot.

        Raises InventoryUnavailableError, ReservationExpiredError,
        PaymentDeclinedError or ServiceUnavailableError. Whichever it is, no
        reservation created here is left RESERVED on the way out.
        """
        intent = session.payment_intent
        if intent is None or session.pricing is None:
            raise ContractViolationError(
                f"Session {session.session_id} reached place_order without pricing and a payment intent"
            )

        lines = session.snapshot.reservation_lines()
        holder_id = session.holder_id

        # 1. Reserve
        key = self.reservation_key(session)
        logger.info(f"Reserving {len(lines)} lines for {holder_id} (session {session.session_id})")
        try:
            outcome = await self.inventory.reserve(lines, holder_id, key, ttl_minutes=self.ttl_minutes)
        except ServiceUnavailableError:
            logger.warning(f"Reserve failed for session {session.session_id}; releasing any hold made under {key}")
            await self._release(lines, holder_id, "reservation_error", reservation_key=key)
            raise

        if not outcome.success:
            raise InventoryUnavailableError(failures=[f.model_dump() for f in outcome.failures])

        ticket = outcome.ticket
        session.reservation = ticket
        logger.info(f"Reserved ticket {ticket.ticket_id} until {ticket.expires_at.isoformat()}")

        # 2. Validity check
        if ticket.is_expired():
            await self._release_ticket(ticket, "reservation_expired")
            raise ReservationExpiredError(ticket_id=ticket.ticket_id)

        # 3. Confirm payment
        try:
            confirmation = await self.payments.confirm(intent.client_secret, session.payment_method_ref)
        except ServiceUnavailableError:
            logger.warning(f"Payment confirmation failed for intent {intent.intent_id}; checking its outcome")
            confirmation = await self._settled_outcome(intent)
            if confirmation is None:
                await self._void_charge(intent)
                await self._release_ticket(ticket, "payment_error")
                raise

        if not confirmation.succeeded:
            logger.info(
                f"Payment {confirmation.status.value} for intent {intent.intent_id}: "
                f"{confirmation.failure_reason}"
            )
            await self._release_ticket(ticket, "payment_declined")
            raise PaymentDeclinedError(reason=confirmation.failure_reason)

        logger.info(f"Payment confirmed for intent {intent.intent_id}")

        # 4. Commit
        if ticket.is_expired():
            logger.warning(f"Ticket {ticket.ticket_id} expired after payment; refunding")
            await self._unwind_charge(ticket, intent, "reservation_expired")
            raise ReservationExpiredError(ticket_id=ticket.ticket_id)

        try:
            committed = await self.inventory.commit(ticket.ticket_id)
        except ServiceUnavailableError:
            logger.warning(f"Commit failed for ticket {ticket.ticket_id}; refunding")
            await self._unwind_charge(ticket, intent, "commit_error")
            raise

        if not committed:
            logger.warning(f"Inventory refused commit of ticket {ticket.ticket_id}; refunding")
            await self._unwind_charge(ticket, intent, "reservation_expired")
            raise ReservationExpiredError(ticket_id=ticket.ticket_id)

        ticket.mark_committed()
        logger.info(f"Committed ticket {ticket.ticket_id}")

        return Order.from_commit(
            session_id=session.session_id,
            snapshot=session.snapshot,
            pricing=session.pricing,
            customer=session.customer,
            shipping_address=session.shipping_address,
            billing_address=session.effective_billing_address,
            ticket=ticket,
            confirmation=confirmation,
        )

    # ==================== Unwinding ====================

    async def _release(
        self,
        lines: list[dict],
        holder_id: str,
        reason: str,
        ticket_id: Optional[str] = None,
        reservation_key: Optional[str] = None,
    ) -> bool:
        """Release with retries; on exhaustion the hold is left to expire"""
        for attempt in range(1, self.release_attempts + 1):
            try:
                released = await self.inventory.release(
                    lines,
                    holder_id,
                    reason,
                    ticket_id=ticket_id,
                    reservation_key=reservation_key,
                )
            except ServiceUnavailableError as e:
                logger.warning(
                    f"Release attempt {attempt}/{self.release_attempts} for {holder_id} failed: {e.code}"
                )
                continue
            if not released:
                logger.info(f"Nothing to release for {holder_id} ({reason})")
            return released

        logger.error(
            f"Could not release hold for {holder_id} (ticket {ticket_id}, reason {reason}); "
            f"leaving it to expire"
        )
        return False

    async def _release_ticket(self, ticket: ReservationTicket, reason: str) -> None:
        if ticket.status != TicketStatus.RESERVED:
            return
        lines = [item.model_dump() for item in ticket.items]
        if await self._release(lines, ticket.holder_id, reason, ticket_id=ticket.ticket_id):
            logger.info(f"Released ticket {ticket.ticket_id} ({reason})")
        ticket.mark_released(reason)

    async def _settled_outcome(self, intent: PaymentIntent) -> Optional[PaymentConfirmation]:
        """
        Outcome of a confirmation whose response was lost.

        None while the intent is unsettled or the processor cannot be asked.
        """
        try:
            confirmation = await self.payments.get_confirmation(intent.intent_id)
        except ServiceUnavailableError as e:
            logger.warning(f"Could not look up intent {intent.intent_id}: {e.code}")
            return None

        if confirmation.status in SETTLED_STATUSES:
            logger.info(f"Intent {intent.intent_id} settled as {confirmation.status.value} despite the lost response")
            return confirmation
        return None

    async def _void_charge(self, intent: PaymentIntent) -> None:
        """Make sure an intent of unknown outcome leaves nothing charged"""
        if await self._cancel_intent(intent):
            return
        await self._refund(intent, "payment_error")

    async def _cancel_intent(self, intent: PaymentIntent) -> bool:
        try:
            return await self.payments.cancel_intent(intent.intent_id)
        except ServiceUnavailableError as e:
            logger.warning(f"Could not cancel intent {intent.intent_id}: {e.code}")
            return False

    async def _refund(self, intent: PaymentIntent, reason: str) -> bool:
        try:
            refund = await self.payments.refund(intent.intent_id, reason=reason)
        except ServiceUnavailableError as e:
            logger.error(f"Refund of intent {intent.intent_id} failed ({e.code}); needs manual follow-up")
            return False
        logger.info(f"Refunded intent {intent.intent_id} ({refund.refund_id})")
        return True

    async def _unwind_charge(self, ticket: ReservationTicket, intent: PaymentIntent, reason: str) -> None:
        """Refund a confirmed payment whose reservation cannot be committed"""
        await self._refund(intent, reason)
        await self._release_ticket(ticket, reason)
