"""Shipping rate and tax models for the mock backend"""

from typing import Optional

from pydantic import BaseModel, Field


class PostalAddress(BaseModel):
    line1: str
    line2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str = "US"


class FixedAmount(BaseModel):
    amount: int
    currency: str = "usd"


class DeliveryBound(BaseModel):
    unit: str = "day"
    value: int


class DeliveryEstimate(BaseModel):
    minimum: DeliveryBound
    maximum: DeliveryBound


class ShippingRate(BaseModel):
    id: str
    display_name: str
    fixed_amount: FixedAmount
    delivery_estimate: DeliveryEstimate


class RatesRequest(BaseModel):
    address: PostalAddress


class RatesResponse(BaseModel):
    shipping_rates: list[ShippingRate]


class TaxRequest(BaseModel):
    address: PostalAddress
    amount: int = Field(ge=0)


class TaxResponse(BaseModel):
    tax: int
    rate: str
    jurisdiction: str
