"""
Checkout error taxonomy.

Field-level validation problems are never raised: the sequencer returns them
as a field -> message map. Everything here is either a session-level
recoverable error (``CheckoutError`` subclasses) or a programmer error
(``ContractViolationError``).
"""

from typing import Optional


class CheckoutError(Exception):
    """Base exception for recoverable checkout errors"""

    code = "checkout_error"
    message = "Something went wrong during checkout. Please try again."

    def __init__(self, message: Optional[str] = None, **details):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, **self.details}


class SessionNotFoundError(CheckoutError):
    code = "session_not_found"
    message = "Checkout session not found"


class CartNotFoundError(CheckoutError):
    code = "cart_not_found"
    message = "Cart not found"


class OrderNotFoundError(CheckoutError):
    code = "order_not_found"
    message = "Order not found"


class EmptyCartError(CheckoutError):
    code = "empty_cart"
    message = "Your cart is empty"


class StepMismatchError(CheckoutError):
    """Input was submitted for a step the session is not on"""
    code = "step_mismatch"
    message = "This checkout step is not active"


class OrderInProgressError(CheckoutError):
    """A second Place Order arrived while the first is still running"""
    code = "order_in_progress"
    message = "Your order is already being placed"


class InventoryUnavailableError(CheckoutError):
    code = "item_unavailable"
    message = "An item in your cart is no longer available. Please update your cart."

    def __init__(self, failures: Optional[list[dict]] = None, message: Optional[str] = None):
        super().__init__(message, failures=failures or [])
        self.failures = failures or []


class PaymentDeclinedError(CheckoutError):
    code = "payment_declined"
    message = "Your payment was declined. Please try another payment method."


class ReservationExpiredError(CheckoutError):
    code = "reservation_expired"
    message = "Your reservation expired before the order completed. Please try again."


class ServiceUnavailableError(CheckoutError):
    """An external collaborator could not be reached or failed"""
    code = "service_unavailable"
    message = "We couldn't reach one of our services. Please try again in a moment."


class MalformedResponseError(ServiceUnavailableError):
    """An external collaborator answered with a body we could not accept"""
    code = "malformed_response"


class PricingError(CheckoutError):
    code = "pricing_unavailable"
    message = "We couldn't calculate shipping and tax. Please try again."


class ShippingRateNotOfferedError(PricingError):
    """The selected rate is not quoted for the finalized address"""
    code = "shipping_rate_unavailable"
    message = "The selected shipping method is no longer available"


class ContractViolationError(Exception):
    """
    Programmer error: the checkout protocol was driven out of order.

    Unreachable when the coordinator and sequencer are used as designed;
    never translated into a user-facing message.
    """


class InvalidTransitionError(ContractViolationError):
    """The sequencer was asked for a transition its table does not allow"""
