"""Checkout failures surfaced to callers.

``CheckoutRejected`` covers precondition failures the caller can act on
(4xx); ``PersistenceFailure`` wraps storage errors (5xx). In both cases the
unit of work has been rolled back and nothing was written.
"""


class CheckoutError(Exception):
    """Base class for checkout failures."""

    code = "checkout_failed"

    def __init__(self, message, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self):
        return {"error": self.code, "message": self.message, **self.context}


class CheckoutRejected(CheckoutError):
    """A checkout precondition was not met."""


class EmptyCart(CheckoutRejected):
    code = "empty_cart"


class AlreadyCheckedOut(CheckoutRejected):
    code = "already_checked_out"


class InvalidOwnerReference(CheckoutRejected):
    code = "invalid_owner_reference"


class PersistenceFailure(CheckoutError):
    code = "persistence_failure"
