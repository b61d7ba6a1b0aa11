"""Builders and flow helpers shared by the checkout tests."""

from decimal import Decimal
from typing import Optional

from checkout_service.core.carts import CartStore
from checkout_service.models import (
    Address,
    Cart,
    CartLineItem,
    CustomerIdentity,
    CustomerInfo,
    LoyaltyTier,
    StepId,
)
from checkout_service.services.orchestrator import CheckoutOrchestrator

GOOD_CARD = "pm_card_visa"
DECLINED_CARD = "pm_card_declined"


def ruby_velvet(quantity: int = 1) -> CartLineItem:
    return CartLineItem(
        product_id="ruby-velvet",
        product_name="Ruby Velvet",
        shade_id="ruby-velvet-01",
        quantity=quantity,
        unit_price=Decimal("28.00"),
    )


def golden_hour(quantity: int = 1) -> CartLineItem:
    return CartLineItem(
        product_id="golden-hour",
        product_name="Golden Hour",
        shade_id="golden-hour-01",
        quantity=quantity,
        unit_price=Decimal("28.00"),
    )


def rouge_noir(quantity: int = 1) -> CartLineItem:
    return CartLineItem(
        product_id="rouge-noir",
        product_name="Rouge Noir",
        shade_id="rouge-noir-01",
        quantity=quantity,
        unit_price=Decimal("35.00"),
    )


def make_cart(store: CartStore, *items: CartLineItem) -> Cart:
    cart = store.create_cart()
    for item in items:
        store.add_item(cart.cart_id, item)
    return cart


def guest(name: str = "browser-1") -> CustomerIdentity:
    return CustomerIdentity(guest_session_id=name)


def member(user_id: str = "user-1", tier: Optional[LoyaltyTier] = LoyaltyTier.GOLD) -> CustomerIdentity:
    return CustomerIdentity(user_id=user_id, email=f"{user_id}@example.com", loyalty_tier=tier)


def customer_info(email: str = "ada@example.com") -> CustomerInfo:
    return CustomerInfo(email=email, first_name="Ada", last_name="Lovelace")


def oregon_address() -> Address:
    """Ships to a state without sales tax"""
    return Address(
        first_name="Ada",
        last_name="Lovelace",
        address1="100 Pearl St",
        city="Portland",
        state="OR",
        zip_code="97209",
    )


def california_address() -> Address:
    return Address(
        first_name="Ada",
        last_name="Lovelace",
        address1="1 Market St",
        city="San Francisco",
        state="CA",
        zip_code="94105",
    )


async def drive_to_review(
    checkout: CheckoutOrchestrator,
    session_id: str,
    address: Optional[Address] = None,
    rate_id: str = "standard",
    payment_method: str = GOOD_CARD,
) -> None:
    """Fill in and complete CustomerInfo, Shipping and Payment"""
    checkout.update_customer(session_id, customer_info())
    result = await checkout.advance(session_id)
    assert result.ok, result.errors

    checkout.update_shipping(session_id, address or oregon_address(), rate_id)
    result = await checkout.advance(session_id)
    assert result.ok, result.errors

    checkout.update_payment(session_id, payment_method)
    result = await checkout.advance(session_id)
    assert result.ok, result.errors
    assert result.next_step == StepId.REVIEW
