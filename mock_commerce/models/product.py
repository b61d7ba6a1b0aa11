"""Product models for the mock backend"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class Shade(BaseModel):
    """A purchasable shade of a product; stock is kept per shade"""
    id: str
    name: str
    hex_code: str
    description: Optional[str] = None


class Product(BaseModel):
    """Product in the catalog"""
    id: str
    name: str
    description: str
    price: Decimal = Field(gt=0)
    currency: str = "USD"
    category: str = "lip-gloss"
    sku: str
    shades: list[Shade]
    image_url: Optional[str] = None

    def default_shade_id(self) -> str:
        return self.shades[0].id

    def has_shade(self, shade_id: str) -> bool:
        return any(shade.id == shade_id for shade in self.shades)


class ProductSearchResponse(BaseModel):
    """Response from product search"""
    products: list[Product]
    total: int
    limit: int
    offset: int
