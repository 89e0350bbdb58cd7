"""Translate domain failures into HTTP responses.

Checkout failures carry a machine-readable ``error`` code; Protean's
validation and lookup failures map to 400 and 404.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.checkout.errors import (
    AlreadyCheckedOut,
    CheckoutError,
    EmptyCart,
    InvalidOwnerReference,
    PersistenceFailure,
)

STATUS_CODES = {
    EmptyCart: 400,
    InvalidOwnerReference: 400,
    AlreadyCheckedOut: 409,
    PersistenceFailure: 500,
}


def status_for(exc: CheckoutError) -> int:
    for error_cls, status_code in STATUS_CODES.items():
        if isinstance(exc, error_cls):
            return status_code
    return 500


async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
    return JSONResponse(status_code=status_for(exc), content=exc.to_dict())


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "validation_error", "messages": exc.messages})


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "not_found", "message": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CheckoutError, checkout_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
