# Mock Commerce Routes

from .products import router as products_router
from .inventory import router as inventory_router
from .payments import router as payments_router
from .shipping import shipping_router, tax_router
from .analytics import router as analytics_router
from .loyalty import router as loyalty_router

__all__ = [
    "products_router",
    "inventory_router",
    "payments_router",
    "shipping_router",
    "tax_router",
    "analytics_router",
    "loyalty_router",
]
