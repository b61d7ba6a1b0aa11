# Checkout Service Models

from .cart import Cart, CartLineItem, CartSnapshot, SnapshotLineItem
from .checkout import (
    Address,
    CustomerIdentity,
    CustomerInfo,
    LoyaltyTier,
    PaymentConfirmation,
    PaymentIntent,
    PaymentIntentStatus,
    PricingBreakdown,
    SessionStatus,
    ShippingRate,
    StepId,
)
from .order import Order, OrderItem, OrderStatus
from .reservation import ReservationFailure, ReservationItem, ReservationTicket, TicketStatus

__all__ = [
    "Cart",
    "CartLineItem",
    "CartSnapshot",
    "SnapshotLineItem",
    "Address",
    "CustomerIdentity",
    "CustomerInfo",
    "LoyaltyTier",
    "PaymentConfirmation",
    "PaymentIntent",
    "PaymentIntentStatus",
    "PricingBreakdown",
    "SessionStatus",
    "ShippingRate",
    "StepId",
    "Order",
    "OrderItem",
    "OrderStatus",
    "ReservationFailure",
    "ReservationItem",
    "ReservationTicket",
    "TicketStatus",
]
