"""Tests for the checkout step sequencer."""

from decimal import Decimal

import pytest

from checkout_service.core.carts import CartStore
from checkout_service.core.errors import InvalidTransitionError
from checkout_service.core.session import SessionManager
from checkout_service.models import Address, CartSnapshot, PricingBreakdown, StepId
from checkout_service.services import sequencer
from checkout_service.services.sequencer import StepEvent

from support import customer_info, golden_hour, guest, make_cart, oregon_address


def _session():
    cart = make_cart(CartStore(), golden_hour(2))
    return SessionManager().create_session(cart.cart_id, guest(), CartSnapshot.capture(cart))


def _priced(session, rate_id: str = "standard") -> None:
    session.pricing = PricingBreakdown.build(
        subtotal=session.snapshot.subtotal,
        shipping_cost=Decimal("0"),
        tax=Decimal("0"),
        shipping_rate_id=rate_id,
        address_fingerprint=session.shipping_address.fingerprint(),
    )


# ==================== transition ====================

@pytest.mark.parametrize("step, event, expected", [
    (StepId.CUSTOMER_INFO, StepEvent.NEXT, StepId.SHIPPING),
    (StepId.SHIPPING, StepEvent.NEXT, StepId.PAYMENT),
    (StepId.PAYMENT, StepEvent.NEXT, StepId.REVIEW),
    (StepId.REVIEW, StepEvent.ORDER_PLACED, StepId.PLACED),
    (StepId.REVIEW, StepEvent.PAYMENT_FAILED, StepId.FAILED),
    (StepId.FAILED, StepEvent.RETRY, StepId.PAYMENT),
    (StepId.CUSTOMER_INFO, StepEvent.BACK, StepId.CUSTOMER_INFO),
    (StepId.REVIEW, StepEvent.BACK, StepId.PAYMENT),
])
def test_transition_table(step, event, expected):
    assert sequencer.transition(step, event) == expected


@pytest.mark.parametrize("step, event", [
    (StepId.CUSTOMER_INFO, StepEvent.ORDER_PLACED),
    (StepId.SHIPPING, StepEvent.PAYMENT_FAILED),
    (StepId.PLACED, StepEvent.BACK),
    (StepId.PLACED, StepEvent.NEXT),
    (StepId.REVIEW, StepEvent.NEXT),
])
def test_transition_rejects_pairs_outside_the_table(step, event):
    with pytest.raises(InvalidTransitionError):
        sequencer.transition(step, event)


# ==================== validation ====================

def test_customer_info_requires_name_and_valid_email():
    session = _session()
    session.customer.email = "not-an-email"

    errors = sequencer.validate_step(StepId.CUSTOMER_INFO, session)

    assert errors == {
        "email": "Enter a valid email address",
        "firstName": "First name is required",
        "lastName": "Last name is required",
    }


def test_account_creation_requires_password():
    session = _session()
    session.customer = customer_info()
    session.customer.create_account = True

    assert sequencer.validate_step(StepId.CUSTOMER_INFO, session) == {
        "password": "Password is required for account creation"
    }


def test_shipping_reports_every_missing_field():
    session = _session()

    errors = sequencer.validate_step(StepId.SHIPPING, session)

    assert set(errors) == {"address1", "city", "state", "zipCode", "shipping"}
    assert errors["zipCode"] == "ZIP code is required"


def test_billing_validated_only_when_different_from_shipping():
    session = _session()
    session.payment_method_ref = "pm_card_visa"
    assert sequencer.validate_step(StepId.PAYMENT, session) == {}

    session.same_as_shipping = False
    session.billing_address = Address(address1="1 Main St")

    errors = sequencer.validate_step(StepId.PAYMENT, session)

    assert errors == {
        "billingCity": "Billing city is required",
        "billingState": "Billing state is required",
        "billingZipCode": "Billing ZIP code is required",
    }


# ==================== advance / retreat ====================

def test_advance_with_errors_keeps_the_step():
    session = _session()

    result = sequencer.advance(StepId.CUSTOMER_INFO, session)

    assert not result.ok
    assert result.next_step == StepId.CUSTOMER_INFO


def test_advance_into_payment_requires_current_pricing():
    session = _session()
    session.shipping_address = oregon_address()
    session.selected_shipping_rate_id = "standard"

    result = sequencer.advance(StepId.SHIPPING, session)
    assert result.errors == {"pricing": "Shipping and tax must be calculated before payment"}

    _priced(session)
    assert sequencer.advance(StepId.SHIPPING, session).next_step == StepId.PAYMENT


def test_pricing_for_another_rate_is_stale():
    session = _session()
    session.shipping_address = oregon_address()
    session.selected_shipping_rate_id = "standard"
    _priced(session)

    session.selected_shipping_rate_id = "express"

    assert "pricing" in sequencer.advance(StepId.SHIPPING, session).errors


def test_retreat_never_validates_and_stops_at_customer_info():
    assert sequencer.retreat(StepId.REVIEW) == StepId.PAYMENT
    assert sequencer.retreat(StepId.SHIPPING) == StepId.CUSTOMER_INFO
    assert sequencer.retreat(StepId.CUSTOMER_INFO) == StepId.CUSTOMER_INFO
    assert sequencer.retreat(StepId.FAILED) == StepId.PAYMENT


def test_placed_checkout_cannot_go_back():
    with pytest.raises(InvalidTransitionError):
        sequencer.retreat(StepId.PLACED)
