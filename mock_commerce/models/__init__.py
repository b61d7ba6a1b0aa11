# Mock Commerce Models

from .product import Product, ProductSearchResponse, Shade
from .inventory import (
    AckResponse,
    CommitRequest,
    LineItem,
    ReleaseRequest,
    Reservation,
    ReservationStatus,
    ReserveFailure,
    ReserveRequest,
    ReserveResponse,
    StockLevel,
)
from .payment import (
    CancelResponse,
    ConfirmRequest,
    ConfirmResponse,
    CreateIntentRequest,
    PaymentIntent,
    PaymentIntentStatus,
    Refund,
    RefundRequest,
)
from .shipping import (
    DeliveryBound,
    DeliveryEstimate,
    FixedAmount,
    PostalAddress,
    RatesRequest,
    RatesResponse,
    ShippingRate,
    TaxRequest,
    TaxResponse,
)
from .events import AnalyticsEvent, AwardPointsRequest, LoyaltyAccount, PointsTransaction

__all__ = [
    "Product",
    "ProductSearchResponse",
    "Shade",
    "AckResponse",
    "CommitRequest",
    "LineItem",
    "ReleaseRequest",
    "Reservation",
    "ReservationStatus",
    "ReserveFailure",
    "ReserveRequest",
    "ReserveResponse",
    "StockLevel",
    "CancelResponse",
    "ConfirmRequest",
    "ConfirmResponse",
    "CreateIntentRequest",
    "PaymentIntent",
    "PaymentIntentStatus",
    "Refund",
    "RefundRequest",
    "DeliveryBound",
    "DeliveryEstimate",
    "FixedAmount",
    "PostalAddress",
    "RatesRequest",
    "RatesResponse",
    "ShippingRate",
    "TaxRequest",
    "TaxResponse",
    "AnalyticsEvent",
    "AwardPointsRequest",
    "LoyaltyAccount",
    "PointsTransaction",
]
