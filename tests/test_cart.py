"""Tests for carts and cart snapshots."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from checkout_service.core.carts import CartStore
from checkout_service.core.errors import CartNotFoundError, EmptyCartError
from checkout_service.models import CartLineItem, CartSnapshot

from support import golden_hour, make_cart, ruby_velvet


def test_adding_the_same_shade_merges_quantities():
    store = CartStore()
    cart = make_cart(store, ruby_velvet(1), ruby_velvet(2), golden_hour(1))

    assert len(cart.items) == 2
    assert cart.find_item("ruby-velvet", "ruby-velvet-01").quantity == 3
    assert cart.subtotal == Decimal("112.00")


def test_zero_quantity_removes_the_line():
    store = CartStore()
    cart = make_cart(store, ruby_velvet(2), golden_hour(1))

    store.update_item_quantity(cart.cart_id, "ruby-velvet", 0, "ruby-velvet-01")

    assert [item.product_id for item in cart.items] == ["golden-hour"]


def test_updating_a_missing_line_returns_none():
    store = CartStore()
    cart = make_cart(store, ruby_velvet())

    assert store.update_item_quantity(cart.cart_id, "rouge-noir", 1) is None


def test_unknown_cart_raises():
    with pytest.raises(CartNotFoundError):
        CartStore().require_cart("missing")


def test_unit_price_is_quantized_to_cents():
    item = CartLineItem(product_id="p", quantity=3, unit_price=Decimal("9.995"))
    assert item.unit_price == Decimal("10.00")
    assert item.line_total == Decimal("30.00")


def test_snapshot_is_isolated_from_later_cart_edits():
    store = CartStore()
    cart = make_cart(store, ruby_velvet(2), golden_hour(1))
    snapshot = CartSnapshot.capture(cart)

    store.update_item_quantity(cart.cart_id, "ruby-velvet", 5, "ruby-velvet-01")
    store.add_item(cart.cart_id, golden_hour(4))
    store.clear_cart(cart.cart_id)

    assert snapshot.subtotal == Decimal("84.00")
    assert snapshot.item_count == 3
    assert snapshot.reservation_lines() == [
        {"product_id": "ruby-velvet", "shade_id": "ruby-velvet-01", "quantity": 2},
        {"product_id": "golden-hour", "shade_id": "golden-hour-01", "quantity": 1},
    ]


def test_snapshot_lines_are_frozen():
    snapshot = CartSnapshot.capture(make_cart(CartStore(), ruby_velvet()))

    with pytest.raises(ValidationError):
        snapshot.items[0].quantity = 10


def test_empty_cart_cannot_be_snapshotted():
    with pytest.raises(EmptyCartError):
        CartSnapshot.capture(CartStore().create_cart())
