"""Loyalty (Veloura Society) API client"""

import logging
import math
from decimal import Decimal
from typing import Optional

import httpx

from ..models.checkout import LoyaltyTier
from .base_client import ServiceClient

logger = logging.getLogger(__name__)

# Purchase points earned per dollar, by tier
POINTS_PER_DOLLAR: dict[LoyaltyTier, Decimal] = {
    LoyaltyTier.BRONZE: Decimal("1"),
    LoyaltyTier.SILVER: Decimal("1.25"),
    LoyaltyTier.GOLD: Decimal("1.5"),
    LoyaltyTier.PLATINUM: Decimal("2"),
}


def calculate_purchase_points(amount: Decimal, tier: Optional[LoyaltyTier]) -> int:
    """Points for a purchase; one per dollar when the tier is unknown"""
    rate = POINTS_PER_DOLLAR.get(tier, Decimal("1")) if tier else Decimal("1")
    return max(0, math.floor(amount * rate))


class LoyaltyClient(ServiceClient):
    """Client for the loyalty points API"""

    service_name = "loyalty"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
        enabled: bool = True,
    ):
        super().__init__(base_url, timeout=timeout, http_client=http_client)
        self.enabled = enabled

    async def award_points(self, user_id: str, points: int, reason: str, order_id: Optional[str] = None) -> dict:
        """Credit points to a member"""
        return await self._request(
            "POST",
            "/api/loyalty/points/award",
            body={
                "user_id": user_id,
                "points": points,
                "reason": reason,
                "order_id": order_id,
            },
        )

    def award_purchase_points(
        self,
        user_id: str,
        amount: Decimal,
        tier: Optional[LoyaltyTier],
        order_id: str,
    ) -> int:
        """
        Award purchase points in the background.

        Returns the points requested; the award itself never blocks or fails
        the order that earned it.
        """
        points = calculate_purchase_points(amount, tier)
        if not self.enabled or points <= 0:
            return points

        logger.info(f"Awarding {points} points to {user_id} for order {order_id}")
        self._fire_and_forget(
            self.award_points(user_id, points, "purchase", order_id),
            f"award for order {order_id}",
        )
        return points
