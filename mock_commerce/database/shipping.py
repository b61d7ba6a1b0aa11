"""Mock shipping rates and sales tax"""

from decimal import Decimal, ROUND_HALF_UP

from ..config import MockSettings, mock_settings
from ..models.shipping import (
    DeliveryBound,
    DeliveryEstimate,
    FixedAmount,
    PostalAddress,
    ShippingRate,
)

SHIPPING_RATES: list[ShippingRate] = [
    ShippingRate(
        id="standard",
        display_name="Standard Shipping",
        fixed_amount=FixedAmount(amount=0),
        delivery_estimate=DeliveryEstimate(
            minimum=DeliveryBound(unit="day", value=5),
            maximum=DeliveryBound(unit="day", value=7),
        ),
    ),
    ShippingRate(
        id="express",
        display_name="Express Shipping",
        fixed_amount=FixedAmount(amount=1000),
        delivery_estimate=DeliveryEstimate(
            minimum=DeliveryBound(unit="day", value=2),
            maximum=DeliveryBound(unit="day", value=3),
        ),
    ),
    ShippingRate(
        id="overnight",
        display_name="Overnight Shipping",
        fixed_amount=FixedAmount(amount=2500),
        delivery_estimate=DeliveryEstimate(
            minimum=DeliveryBound(unit="day", value=1),
            maximum=DeliveryBound(unit="day", value=1),
        ),
    ),
]

# State sales tax rates; states without sales tax charge nothing
TAX_RATES: dict[str, Decimal] = {
    "AK": Decimal("0"),
    "DE": Decimal("0"),
    "MT": Decimal("0"),
    "NH": Decimal("0"),
    "OR": Decimal("0"),
    "CA": Decimal("0.0725"),
    "NY": Decimal("0.04"),
    "TX": Decimal("0.0625"),
    "FL": Decimal("0.06"),
    "WA": Decimal("0.065"),
}


class ShippingDatabase:
    """Rate table and tax calculation"""

    def __init__(self, settings: MockSettings):
        self.settings = settings

    def quote_rates(self, address: PostalAddress) -> list[ShippingRate]:
        """Domestic rates only"""
        if address.country.upper() != "US":
            return []
        return [rate.model_copy(deep=True) for rate in SHIPPING_RATES]

    def tax_rate(self, address: PostalAddress) -> Decimal:
        return TAX_RATES.get(address.state.strip().upper(), self.settings.default_tax_rate)

    def calculate_tax(self, address: PostalAddress, amount: int) -> tuple[int, Decimal]:
        """Tax in cents on ``amount`` cents, rounded half up"""
        rate = self.tax_rate(address)
        tax = (Decimal(amount) * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return int(tax), rate


# Singleton instance
shipping_db = ShippingDatabase(mock_settings)
