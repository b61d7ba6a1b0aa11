"""
Analytics API Client

Checkout funnel events. Every send is fire-and-forget: a slow or failing
analytics backend never delays or fails a checkout.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import httpx

from ..models.cart import CartSnapshot
from ..models.checkout import PricingBreakdown, StepId
from ..models.order import Order
from .base_client import ServiceClient

logger = logging.getLogger(__name__)

ITEM_BRAND = "Veloura"


def _ecommerce_items(snapshot: CartSnapshot) -> list[dict]:
    return [
        {
            "item_id": item.product_id,
            "item_name": item.product_name,
            "item_variant": item.shade_id,
            "item_brand": ITEM_BRAND,
            "quantity": item.quantity,
            "price": str(item.unit_price),
        }
        for item in snapshot.items
    ]


class AnalyticsClient(ServiceClient):
    """Client for the analytics event collector"""

    service_name = "analytics"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
        enabled: bool = True,
    ):
        super().__init__(base_url, timeout=timeout, http_client=http_client)
        self.enabled = enabled

    def track(self, event: str, params: dict) -> None:
        """Queue an event; returns immediately"""
        if not self.enabled:
            return

        body = {
            "event": event,
            "params": params,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self._fire_and_forget(
            self._request("POST", "/api/analytics/events", body=body),
            f"event {event}",
        )

    def begin_checkout(self, session_id: str, snapshot: CartSnapshot) -> None:
        self.track("begin_checkout", {
            "session_id": session_id,
            "currency": snapshot.currency,
            "value": str(snapshot.subtotal),
            "items": _ecommerce_items(snapshot),
        })

    def checkout_step(self, session_id: str, from_step: StepId, to_step: StepId) -> None:
        self.track("checkout_step", {
            "session_id": session_id,
            "from_step": from_step.value,
            "to_step": to_step.value,
        })

    def add_shipping_info(self, session_id: str, snapshot: CartSnapshot, pricing: PricingBreakdown) -> None:
        self.track("add_shipping_info", {
            "session_id": session_id,
            "currency": pricing.currency,
            "value": str(pricing.total),
            "shipping_tier": pricing.shipping_rate_id,
            "items": _ecommerce_items(snapshot),
        })

    def add_payment_info(self, session_id: str, snapshot: CartSnapshot, value: Decimal) -> None:
        self.track("add_payment_info", {
            "session_id": session_id,
            "currency": snapshot.currency,
            "value": str(value),
            "items": _ecommerce_items(snapshot),
        })

    def purchase(self, order: Order) -> None:
        self.track("purchase", {
            "transaction_id": order.order_number,
            "currency": order.pricing.currency,
            "value": str(order.pricing.total),
            "shipping": str(order.pricing.shipping_cost),
            "tax": str(order.pricing.tax),
            "items": [
                {
                    "item_id": item.product_id,
                    "item_name": item.product_name,
                    "item_variant": item.shade_id,
                    "item_brand": ITEM_BRAND,
                    "quantity": item.quantity,
                    "price": str(item.unit_price),
                }
                for item in order.items
            ],
        })

    def checkout_failed(self, session_id: str, code: str) -> None:
        self.track("checkout_failed", {"session_id": session_id, "reason": code})
