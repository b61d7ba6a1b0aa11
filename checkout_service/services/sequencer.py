"""
Checkout Step Sequencer

Drives the wizard CustomerInfo -> Shipping -> Payment -> Review -> Placed,
with Failed reachable from Payment or Review. ``transition`` is a pure table
lookup; ``advance`` adds the per-step validation that decides whether NEXT is
allowed. Nothing here performs I/O.

User-input problems come back as a field -> message map, never as an
exception. Only a transition the table does not contain raises.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..core.errors import CheckoutError, InvalidTransitionError
from ..core.session import CheckoutSession
from ..models.checkout import Address, CustomerInfo, StepId


class StepEvent(str, Enum):
    NEXT = "next"
    BACK = "back"
    ORDER_PLACED = "order_placed"
    PAYMENT_FAILED = "payment_failed"
    RETRY = "retry"


TRANSITIONS: dict[tuple[StepId, StepEvent], StepId] = {
    (StepId.CUSTOMER_INFO, StepEvent.NEXT): StepId.SHIPPING,
    (StepId.SHIPPING, StepEvent.NEXT): StepId.PAYMENT,
    (StepId.PAYMENT, StepEvent.NEXT): StepId.REVIEW,
    (StepId.REVIEW, StepEvent.ORDER_PLACED): StepId.PLACED,
    (StepId.PAYMENT, StepEvent.PAYMENT_FAILED): StepId.FAILED,
    (StepId.REVIEW, StepEvent.PAYMENT_FAILED): StepId.FAILED,
    (StepId.FAILED, StepEvent.RETRY): StepId.PAYMENT,
    (StepId.CUSTOMER_INFO, StepEvent.BACK): StepId.CUSTOMER_INFO,
    (StepId.SHIPPING, StepEvent.BACK): StepId.CUSTOMER_INFO,
    (StepId.PAYMENT, StepEvent.BACK): StepId.SHIPPING,
    (StepId.REVIEW, StepEvent.BACK): StepId.PAYMENT,
    (StepId.FAILED, StepEvent.BACK): StepId.PAYMENT,
}

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class AdvanceResult:
    """Where the session ends up, with field errors or a collaborator failure"""
    next_step: StepId
    errors: dict[str, str] = field(default_factory=dict)
    failure: Optional[CheckoutError] = None

    @property
    def ok(self) -> bool:
        return not self.errors and self.failure is None


def transition(step: StepId, event: StepEvent) -> StepId:
    """Next step for an event; raises for pairs the wizard does not allow"""
    try:
        return TRANSITIONS[(step, event)]
    except KeyError:
        raise InvalidTransitionError(f"No transition from {step.value} on {event.value}") from None


# ==================== Per-step validation ====================

def validate_customer_info(customer: CustomerInfo) -> dict[str, str]:
    errors = {}
    if not customer.email.strip():
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.match(customer.email.strip()):
        errors["email"] = "Enter a valid email address"
    if not customer.first_name.strip():
        errors["firstName"] = "First name is required"
    if not customer.last_name.strip():
        errors["lastName"] = "Last name is required"
    if customer.create_account and not customer.password:
        errors["password"] = "Password is required for account creation"
    return errors


ADDRESS_FIELDS = (
    ("address1", "address1", "Address is required", "Billing address is required"),
    ("city", "city", "City is required", "Billing city is required"),
    ("state", "state", "State is required", "Billing state is required"),
    ("zip_code", "zipCode", "ZIP code is required", "Billing ZIP code is required"),
)


def _validate_address(address: Address, billing: bool = False) -> dict[str, str]:
    errors = {}
    for attr, key, message, billing_message in ADDRESS_FIELDS:
        if getattr(address, attr).strip():
            continue
        if billing:
            errors[f"billing{key[0].upper()}{key[1:]}"] = billing_message
        else:
            errors[key] = message
    return errors


def validate_shipping(session: CheckoutSession) -> dict[str, str]:
    errors = _validate_address(session.shipping_address)
    if not session.selected_shipping_rate_id:
        errors["shipping"] = "Please select a shipping method"
    return errors


def validate_payment(session: CheckoutSession) -> dict[str, str]:
    errors = {}
    if not session.payment_method_ref:
        errors["payment"] = "Please select a payment method"
    if not session.same_as_shipping:
        errors.update(_validate_address(session.billing_address, billing=True))
    return errors


def pricing_errors(session: CheckoutSession) -> dict[str, str]:
    """Payment needs a total priced for the current shipping inputs"""
    pricing = session.pricing
    if (
        pricing is None
        or not pricing.is_current_for(session.shipping_address, session.selected_shipping_rate_id)
        or pricing.total <= 0
    ):
        return {"pricing": "Shipping and tax must be calculated before payment"}
    return {}


def validate_step(step: StepId, session: CheckoutSession) -> dict[str, str]:
    """Field errors blocking NEXT from ``step``"""
    if step == StepId.CUSTOMER_INFO:
        return validate_customer_info(session.customer)
    if step == StepId.SHIPPING:
        return validate_shipping(session)
    if step == StepId.PAYMENT:
        return validate_payment(session)
    if step == StepId.REVIEW:
        errors = validate_customer_info(session.customer)
        errors.update(validate_shipping(session))
        errors.update(validate_payment(session))
        errors.update(pricing_errors(session))
        return errors
    return {}


# ==================== Moves ====================

def advance(step: StepId, session: CheckoutSession) -> AdvanceResult:
    """
    Validate ``step`` and move forward one step.

    On any error the step is unchanged. Entering Payment or Review also
    requires pricing that matches the current address and shipping method.
    """
    next_step = transition(step, StepEvent.NEXT)

    errors = validate_step(step, session)
    if next_step in (StepId.PAYMENT, StepId.REVIEW):
        errors.update(pricing_errors(session))

    if errors:
        return AdvanceResult(next_step=step, errors=errors)
    return AdvanceResult(next_step=next_step)


def retreat(step: StepId) -> StepId:
    """Move back one step without re-validating; refused once placed"""
    if step == StepId.PLACED:
        raise InvalidTransitionError("A placed order cannot go back")
    return transition(step, StepEvent.BACK)
