"""
Checkout Orchestrator

Owns checkout sessions and drives them through the wizard:
1. Captures the cart and the customer identity at session start
2. Accepts step input for the step the session is on
3. Prices shipping and tax when Shipping completes
4. Creates the payment intent when Payment completes
5. Hands Review to the reservation/payment coordinator

Cart and identity are passed in explicitly; nothing here reads ambient state.
"""

import json
import logging
from typing import Optional

import httpx

from ..core.carts import CartStore
from ..core.config import Settings
from ..core.errors import (
    ContractViolationError,
    InventoryUnavailableError,
    OrderInProgressError,
    OrderNotFoundError,
    PaymentDeclinedError,
    PricingError,
    ReservationExpiredError,
    ServiceUnavailableError,
    ShippingRateNotOfferedError,
    StepMismatchError,
)
from ..core.session import CheckoutSession, SessionManager
from ..models.cart import Cart, CartSnapshot
from ..models.checkout import (
    Address,
    CustomerIdentity,
    CustomerInfo,
    PaymentIntent,
    SessionStatus,
    ShippingRate,
    StepId,
)
from ..models.order import Order
from . import sequencer
from .analytics_client import AnalyticsClient
from .coordinator import ReservationPaymentCoordinator
from .inventory_client import InventoryClient
from .loyalty_client import LoyaltyClient
from .payment_client import PaymentClient
from .pricing import PricingAccumulator
from .sequencer import AdvanceResult, StepEvent
from .shipping_client import ShippingTaxClient

logger = logging.getLogger(__name__)


class CheckoutOrchestrator:
    """
    Checkout flow over the commerce backend.

    A Place Order for a session already being placed is refused rather than
    queued; the in-flight set is checked and claimed before the first await.
    """

    def __init__(
        self,
        settings: Settings,
        carts: CartStore,
        sessions: SessionManager,
        inventory: InventoryClient,
        payments: PaymentClient,
        shipping: ShippingTaxClient,
        analytics: AnalyticsClient,
        loyalty: LoyaltyClient,
    ):
        self.settings = settings
        self.carts = carts
        self.sessions = sessions
        self.inventory = inventory
        self.payments = payments
        self.shipping = shipping
        self.analytics = analytics
        self.loyalty = loyalty
        self.pricing = PricingAccumulator(shipping, currency=settings.currency)
        self.coordinator = ReservationPaymentCoordinator(inventory, payments, settings)
        self.orders: dict[str, Order] = {}
        self._in_flight: set[str] = set()

    async def close(self) -> None:
        for client in (self.inventory, self.payments, self.shipping, self.analytics, self.loyalty):
            await client.close()

    # ==================== Sessions ====================

    def start_checkout(self, cart: Cart, identity: CustomerIdentity) -> CheckoutSession:
        """Snapshot the cart and open a session on CustomerInfo"""
        snapshot = CartSnapshot.capture(cart)
        session = self.sessions.create_session(cart.cart_id, identity, snapshot)
        logger.info(
            f"Checkout {session.session_id} started for {identity.holder_id}: "
            f"{snapshot.item_count} items, subtotal {snapshot.subtotal}"
        )
        self.analytics.begin_checkout(session.session_id, snapshot)
        return session

    def start_checkout_for_cart(self, cart_id: str, identity: CustomerIdentity) -> CheckoutSession:
        return self.start_checkout(self.carts.require_cart(cart_id), identity)

    def get_session(self, session_id: str) -> CheckoutSession:
        return self.sessions.require_session(session_id)

    def cancel(self, session_id: str) -> CheckoutSession:
        """Abandon a checkout. Sessions hold no reservation between attempts."""
        session = self.sessions.require_session(session_id)
        if session_id in self._in_flight:
            raise OrderInProgressError(session_id=session_id)
        if session.status == SessionStatus.PLACED:
            raise StepMismatchError("This order has already been placed", current_step=session.current_step.value)

        session.status = SessionStatus.CANCELLED
        session.touch()
        self.sessions.delete_session(session_id)
        logger.info(f"Checkout {session_id} cancelled")
        return session

    def cleanup(self) -> int:
        removed = self.sessions.cleanup_old_sessions(self.settings.session_max_age_hours)
        if removed:
            logger.info(f"Removed {removed} stale checkout sessions")
        return removed

    def get_order(self, order_id: str) -> Order:
        order = self.orders.get(order_id)
        if not order:
            raise OrderNotFoundError(order_id=order_id)
        return order

    def _editable(self, session_id: str, step: StepId) -> CheckoutSession:
        """Session that may take input for ``step`` right now"""
        session = self.sessions.require_session(session_id)
        if session_id in self._in_flight:
            raise OrderInProgressError(session_id=session_id)
        if session.is_terminal:
            raise StepMismatchError(
                f"This checkout is {session.status.value}",
                current_step=session.current_step.value,
            )
        if session.current_step != step:
            raise StepMismatchError(current_step=session.current_step.value, requested_step=step.value)
        return session

    # ==================== Step input ====================

    def update_customer(self, session_id: str, customer: CustomerInfo) -> CheckoutSession:
        session = self._editable(session_id, StepId.CUSTOMER_INFO)
        session.customer = customer
        session.touch()
        return session

    def update_shipping(
        self,
        session_id: str,
        address: Address,
        shipping_rate_id: Optional[str] = None,
    ) -> CheckoutSession:
        """Store the shipping address and method; any change voids the price"""
        session = self._editable(session_id, StepId.SHIPPING)

        changed = (
            address.fingerprint() != session.shipping_address.fingerprint()
            or shipping_rate_id != session.selected_shipping_rate_id
        )
        session.shipping_address = address
        session.selected_shipping_rate_id = shipping_rate_id
        if changed:
            session.invalidate_pricing()
        else:
            session.touch()
        return session

    async def get_shipping_rates(self, session_id: str, address: Optional[Address] = None) -> list[ShippingRate]:
        """Quote rates for the given address, or the session's shipping address"""
        session = self._editable(session_id, StepId.SHIPPING)
        rates = await self.pricing.quote_rates(address or session.shipping_address)
        session.available_rates = rates
        session.touch()
        return rates

    def update_payment(
        self,
        session_id: str,
        payment_method_ref: Optional[str],
        same_as_shipping: bool = True,
        billing_address: Optional[Address] = None,
    ) -> CheckoutSession:
        session = self._editable(session_id, StepId.PAYMENT)
        session.payment_method_ref = payment_method_ref
        session.same_as_shipping = same_as_shipping
        if billing_address is not None:
            session.billing_address = billing_address
        session.touch()
        return session

    # ==================== Moves ====================

    async def advance(self, session_id: str) -> AdvanceResult:
        """
        Validate the current step and move forward.

        Field problems come back in the result and leave the step unchanged;
        so does a collaborator outage, carried as the result's ``failure``.
        Review cannot be advanced; it completes through ``place_order``.
        """
        session = self.sessions.require_session(session_id)
        step = session.current_step
        if step in (StepId.REVIEW, StepId.PLACED, StepId.FAILED):
            raise StepMismatchError(f"Cannot continue from {step.value}", current_step=step.value)
        session = self._editable(session_id, step)

        if step == StepId.SHIPPING:
            try:
                errors = await self._price_shipping(session)
            except PricingError as e:
                session.last_error = e.to_dict()
                return AdvanceResult(next_step=step, errors={"general": e.message}, failure=e)
            if errors:
                return AdvanceResult(next_step=step, errors=errors)

        result = sequencer.advance(step, session)
        if not result.ok:
            return result

        if step == StepId.PAYMENT:
            try:
                session.payment_intent = await self._create_intent(session)
            except ServiceUnavailableError as e:
                session.last_error = e.to_dict()
                return AdvanceResult(next_step=step, errors={"general": e.message}, failure=e)
            self.analytics.add_payment_info(session.session_id, session.snapshot, session.pricing.total)

        session.move_to(result.next_step)
        session.last_error = None
        if session.status == SessionStatus.PAYMENT_FAILED:
            session.status = SessionStatus.ACTIVE
        self.analytics.checkout_step(session.session_id, step, result.next_step)
        logger.debug(f"Checkout {session_id}: {step.value} -> {result.next_step.value}")
        return result

    def retreat(self, session_id: str) -> StepId:
        """Go back one step; entered values are kept"""
        session = self.sessions.require_session(session_id)
        if session_id in self._in_flight:
            raise OrderInProgressError(session_id=session_id)
        if session.is_terminal:
            raise StepMismatchError(
                f"This checkout is {session.status.value}",
                current_step=session.current_step.value,
            )

        step = session.current_step
        previous = sequencer.retreat(step)
        if previous != step:
            session.move_to(previous)
            self.analytics.checkout_step(session.session_id, step, previous)
        return previous

    async def _price_shipping(self, session: CheckoutSession) -> dict[str, str]:
        errors = sequencer.validate_shipping(session)
        if errors:
            return errors

        current = session.pricing is not None and session.pricing.is_current_for(
            session.shipping_address, session.selected_shipping_rate_id
        )
        if current:
            return {}

        try:
            pricing, rates = await self.pricing.price_shipping(
                session.snapshot,
                session.shipping_address,
                session.selected_shipping_rate_id,
            )
        except ShippingRateNotOfferedError as e:
            return {"shipping": e.message}

        session.pricing = pricing
        session.available_rates = rates
        session.payment_intent = None
        session.touch()
        self.analytics.add_shipping_info(session.session_id, session.snapshot, pricing)
        return {}

    async def _create_intent(self, session: CheckoutSession) -> PaymentIntent:
        """Intent for the current total; the previous one is reused if it still matches"""
        intent = session.payment_intent
        if intent is not None and intent.amount == session.pricing.total:
            return intent

        metadata = {
            "session_id": session.session_id,
            "customer_email": session.customer.email,
            "customer_name": session.customer.full_name,
            "cart_items": json.dumps(session.snapshot.reservation_lines()),
        }
        return await self.payments.create_intent(
            session.pricing.total,
            currency=session.pricing.currency,
            metadata=metadata,
        )

    # ==================== Placement ====================

    async def place_order(self, session_id: str) -> Order:
        """
        Reserve, charge and commit the session's order.

        A second call while the first is running raises
        OrderInProgressError without touching any collaborator. Once placed,
        the session is gone; the order keeps its id.
        """
        if session_id in self._in_flight:
            logger.info(f"Ignoring duplicate Place Order for {session_id}")
            raise OrderInProgressError(session_id=session_id)

        session = self.sessions.require_session(session_id)
        if session.is_terminal or session.current_step != StepId.REVIEW:
            raise StepMismatchError(current_step=session.current_step.value, requested_step=StepId.REVIEW.value)

        errors = sequencer.validate_step(StepId.REVIEW, session)
        if errors:
            raise ContractViolationError(f"Session {session_id} is on review with invalid data: {errors}")

        self._in_flight.add(session_id)
        session.status = SessionStatus.PROCESSING
        session.attempts += 1
        try:
            if session.payment_intent is None:
                session.payment_intent = await self._create_intent(session)
            order = await self.coordinator.place_order(session)
        except InventoryUnavailableError as e:
            session.status = SessionStatus.ABORTED
            session.last_error = e.to_dict()
            session.touch()
            logger.info(f"Checkout {session_id} aborted: items unavailable")
            self.analytics.checkout_failed(session_id, e.code)
            raise
        except (PaymentDeclinedError, ReservationExpiredError) as e:
            self._return_to_payment(session, e)
            raise
        except ServiceUnavailableError as e:
            session.status = SessionStatus.ACTIVE
            session.last_error = e.to_dict()
            session.payment_intent = None
            session.touch()
            self.analytics.checkout_failed(session_id, e.code)
            raise
        finally:
            self._in_flight.discard(session_id)
            if session.status == SessionStatus.PROCESSING:
                session.status = SessionStatus.ACTIVE

        session.move_to(sequencer.transition(session.current_step, StepEvent.ORDER_PLACED))
        session.status = SessionStatus.PLACED
        session.order_id = order.order_id
        session.last_error = None
        self.orders[order.order_id] = order
        self.carts.clear_cart(session.cart_id)
        self.sessions.delete_session(session_id)

        logger.info(f"Order {order.order_number} placed for {session.holder_id}: {order.pricing.total}")
        self.analytics.purchase(order)
        if session.identity.is_authenticated:
            self.loyalty.award_purchase_points(
                session.identity.user_id,
                order.pricing.subtotal,
                session.identity.loyalty_tier,
                order.order_id,
            )
        return order

    def _return_to_payment(self, session: CheckoutSession, error: Exception) -> None:
        """Failed then Retry: the customer lands back on Payment with the error"""
        failed = sequencer.transition(session.current_step, StepEvent.PAYMENT_FAILED)
        session.move_to(failed)
        session.move_to(sequencer.transition(failed, StepEvent.RETRY))
        session.status = SessionStatus.PAYMENT_FAILED
        session.last_error = error.to_dict()
        session.payment_intent = None
        logger.info(f"Checkout {session.session_id} returned to payment: {error.code}")
        self.analytics.checkout_failed(session.session_id, error.code)


def build_orchestrator(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
    carts: Optional[CartStore] = None,
) -> CheckoutOrchestrator:
    """Wire the orchestrator to the configured backend services"""
    timeout = settings.http_timeout_seconds
    return CheckoutOrchestrator(
        settings=settings,
        carts=carts or CartStore(),
        sessions=SessionManager(),
        inventory=InventoryClient(settings.inventory_base_url, timeout, http_client),
        payments=PaymentClient(settings.payments_base_url, timeout, http_client),
        shipping=ShippingTaxClient(settings.shipping_base_url, timeout, http_client),
        analytics=AnalyticsClient(
            settings.analytics_base_url, timeout, http_client, enabled=settings.analytics_enabled
        ),
        loyalty=LoyaltyClient(
            settings.loyalty_base_url, timeout, http_client, enabled=settings.loyalty_enabled
        ),
    )
