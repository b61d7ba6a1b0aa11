"""Shipping rate and tax API client"""

import logging
from decimal import Decimal

from pydantic import BaseModel, Field

from ..models.checkout import Address, ShippingRate
from ..models.money import from_minor_units, to_minor_units
from .base_client import ServiceClient

logger = logging.getLogger(__name__)


class FixedAmount(BaseModel):
    amount: int = Field(ge=0)
    currency: str


class DeliveryBound(BaseModel):
    unit: str = Field(pattern="^(day|week)$")
    value: int = Field(ge=0)

    @property
    def days(self) -> int:
        return self.value * 7 if self.unit == "week" else self.value


class DeliveryEstimate(BaseModel):
    minimum: DeliveryBound
    maximum: DeliveryBound


class RateResponse(BaseModel):
    id: str
    display_name: str
    fixed_amount: FixedAmount
    delivery_estimate: DeliveryEstimate


class RatesResponse(BaseModel):
    shipping_rates: list[RateResponse]


class TaxResponse(BaseModel):
    tax: int = Field(ge=0)


def _address_body(address: Address) -> dict:
    return {
        "line1": address.address1,
        "line2": address.address2,
        "city": address.city,
        "state": address.state,
        "postal_code": address.zip_code,
        "country": address.country,
    }


class ShippingTaxClient(ServiceClient):
    """Client for shipping rate quotes and tax calculation"""

    service_name = "shipping"

    async def get_rates(self, address: Address) -> list[ShippingRate]:
        """Shipping options available for an address"""
        data = await self._request(
            "POST",
            "/api/shipping/rates",
            body={"address": _address_body(address)},
        )
        response = self._parse(RatesResponse, data)

        return [
            ShippingRate(
                id=rate.id,
                display_name=rate.display_name,
                amount=from_minor_units(rate.fixed_amount.amount),
                eta_min_days=rate.delivery_estimate.minimum.days,
                eta_max_days=rate.delivery_estimate.maximum.days,
            )
            for rate in response.shipping_rates
        ]

    async def calculate_tax(self, address: Address, amount: Decimal) -> Decimal:
        """Tax owed on ``amount`` shipped to ``address``; never negative"""
        data = await self._request(
            "POST",
            "/api/tax/calculate",
            body={"address": _address_body(address), "amount": to_minor_units(amount)},
        )
        return from_minor_units(self._parse(TaxResponse, data).tax)
