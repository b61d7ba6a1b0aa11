"""Money helpers shared by the checkout models"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Quantize a number to the currency minor unit (cents)"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """Convert a money amount to integer cents for the payment service"""
    return int(to_money(amount) * 100)


def from_minor_units(cents: int) -> Decimal:
    """Convert integer cents back to a money amount"""
    return to_money(Decimal(cents) / 100)
