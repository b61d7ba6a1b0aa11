"""Cart models for the checkout service"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.errors import EmptyCartError
from .money import to_money, ZERO


class CartLineItem(BaseModel):
    """Item in a shopping cart, priced at the moment it was added"""
    product_id: str
    product_name: str = ""
    shade_id: Optional[str] = None
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)

    @field_validator("unit_price")
    @classmethod
    def _quantize_price(cls, value: Decimal) -> Decimal:
        return to_money(value)

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)

    def same_line(self, product_id: str, shade_id: Optional[str]) -> bool:
        return self.product_id == product_id and self.shade_id == shade_id


class Cart(BaseModel):
    """Live shopping cart; mutated by the storefront, never by checkout"""
    cart_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    items: list[CartLineItem] = Field(default_factory=list)
    currency: str = "USD"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def subtotal(self) -> Decimal:
        return to_money(sum((item.line_total for item in self.items), ZERO))

    def find_item(self, product_id: str, shade_id: Optional[str] = None) -> Optional[CartLineItem]:
        return next(
            (item for item in self.items if item.same_line(product_id, shade_id)),
            None,
        )

    def add_item(self, item: CartLineItem) -> None:
        """Add an item, merging quantities for an existing product/shade line"""
        existing = self.find_item(item.product_id, item.shade_id)
        if existing:
            existing.quantity += item.quantity
        else:
            self.items.append(item)
        self._touch()

    def update_quantity(self, product_id: str, quantity: int, shade_id: Optional[str] = None) -> bool:
        """Set a line's quantity; zero or less removes the line"""
        existing = self.find_item(product_id, shade_id)
        if not existing:
            return False

        if quantity <= 0:
            self.items = [i for i in self.items if not i.same_line(product_id, shade_id)]
        else:
            existing.quantity = quantity
        self._touch()
        return True

    def remove_item(self, product_id: str, shade_id: Optional[str] = None) -> bool:
        return self.update_quantity(product_id, 0, shade_id)

    def clear(self) -> None:
        self.items = []
        self._touch()

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


class SnapshotLineItem(CartLineItem):
    """Frozen copy of a cart line held by a snapshot"""
    model_config = ConfigDict(frozen=True)


class CartSnapshot(BaseModel):
    """
    Immutable view of a cart at the moment checkout begins.

    Line items are deep copies, so later edits to the live cart (another tab,
    another device) never change what this checkout charges for.
    """
    model_config = ConfigDict(frozen=True)

    items: tuple[SnapshotLineItem, ...]
    currency: str = "USD"
    captured_at: datetime

    @classmethod
    def capture(cls, cart: Cart) -> "CartSnapshot":
        if not cart.items:
            raise EmptyCartError()

        return cls(
            items=tuple(SnapshotLineItem.model_validate(item.model_dump()) for item in cart.items),
            currency=cart.currency,
            captured_at=datetime.now(timezone.utc),
        )

    @property
    def subtotal(self) -> Decimal:
        return to_money(sum((item.line_total for item in self.items), ZERO))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def reservation_lines(self) -> list[dict]:
        """Line items in the shape the inventory service reserves"""
        return [
            {
                "product_id": item.product_id,
                "shade_id": item.shade_id,
                "quantity": item.quantity,
            }
            for item in self.items
        ]
