"""Tests for loyalty point calculation."""

from decimal import Decimal

import pytest

from checkout_service.models import LoyaltyTier
from checkout_service.services.loyalty_client import calculate_purchase_points


@pytest.mark.parametrize("tier, expected", [
    (LoyaltyTier.BRONZE, 84),
    (LoyaltyTier.SILVER, 105),
    (LoyaltyTier.GOLD, 126),
    (LoyaltyTier.PLATINUM, 168),
    (None, 84),
])
def test_points_per_dollar_by_tier(tier, expected):
    assert calculate_purchase_points(Decimal("84.00"), tier) == expected


def test_partial_points_are_floored():
    assert calculate_purchase_points(Decimal("25.99"), LoyaltyTier.SILVER) == 32
