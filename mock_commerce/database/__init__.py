# Database modules

from .products import product_db, ProductDatabase
from .inventory import inventory_db, InventoryDatabase
from .payments import payment_db, PaymentDatabase, PaymentError
from .shipping import shipping_db, ShippingDatabase
from .events import event_log, loyalty_ledger, EventLog, LoyaltyLedger


def reset_all() -> None:
    """Return every store to its initial state"""
    inventory_db.reset()
    payment_db.reset()
    event_log.reset()
    loyalty_ledger.reset()


__all__ = [
    "product_db",
    "ProductDatabase",
    "inventory_db",
    "InventoryDatabase",
    "payment_db",
    "PaymentDatabase",
    "PaymentError",
    "shipping_db",
    "ShippingDatabase",
    "event_log",
    "loyalty_ledger",
    "EventLog",
    "LoyaltyLedger",
    "reset_all",
]
