"""Order models for the checkout service"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import ContractViolationError
from .cart import CartSnapshot
from .checkout import Address, CustomerInfo, PaymentConfirmation, PricingBreakdown
from .reservation import ReservationTicket, TicketStatus


class OrderStatus(str, Enum):
    CONFIRMED = "confirmed"


class OrderItem(BaseModel):
    """Item in an order"""
    product_id: str
    product_name: str
    shade_id: Optional[str] = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class Order(BaseModel):
    """Placed order; the terminal artifact of a successful checkout"""
    model_config = ConfigDict(frozen=True)

    order_id: str
    order_number: str
    session_id: str
    holder_id: str
    status: OrderStatus = OrderStatus.CONFIRMED
    items: list[OrderItem]
    pricing: PricingBreakdown
    customer: CustomerInfo
    shipping_address: Address
    billing_address: Address
    payment_intent_id: str
    payment_order_ref: Optional[str] = None
    ticket_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_commit(
        cls,
        session_id: str,
        snapshot: CartSnapshot,
        pricing: PricingBreakdown,
        customer: CustomerInfo,
        shipping_address: Address,
        billing_address: Address,
        ticket: ReservationTicket,
        confirmation: PaymentConfirmation,
    ) -> "Order":
        """
        Build the order for a committed reservation and a confirmed payment.

        This is the only constructor the checkout flow uses; anything short of
        a COMMITTED ticket plus a succeeded payment is a protocol bug.
        """
        if ticket.status != TicketStatus.COMMITTED:
            raise ContractViolationError(
                f"Order requires a committed ticket, got {ticket.status.value}"
            )
        if not confirmation.succeeded:
            raise ContractViolationError(
                f"Order requires a succeeded payment, got {confirmation.status.value}"
            )

        order_id = str(uuid.uuid4())
        return cls(
            order_id=order_id,
            order_number=f"VEL-{order_id[:8].upper()}",
            session_id=session_id,
            holder_id=ticket.holder_id,
            items=[
                OrderItem(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    shade_id=item.shade_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=item.line_total,
                )
                for item in snapshot.items
            ],
            pricing=pricing,
            customer=customer,
            shipping_address=shipping_address,
            billing_address=billing_address,
            payment_intent_id=confirmation.intent_id,
            payment_order_ref=confirmation.order_ref,
            ticket_id=ticket.ticket_id,
        )
