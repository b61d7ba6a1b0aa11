# Checkout Services

from .analytics_client import AnalyticsClient
from .coordinator import ReservationPaymentCoordinator
from .inventory_client import InventoryClient
from .loyalty_client import LoyaltyClient, calculate_purchase_points
from .orchestrator import CheckoutOrchestrator, build_orchestrator
from .payment_client import PaymentClient
from .pricing import PricingAccumulator
from .shipping_client import ShippingTaxClient

__all__ = [
    "AnalyticsClient",
    "ReservationPaymentCoordinator",
    "InventoryClient",
    "LoyaltyClient",
    "calculate_purchase_points",
    "CheckoutOrchestrator",
    "build_orchestrator",
    "PaymentClient",
    "PricingAccumulator",
    "ShippingTaxClient",
]
