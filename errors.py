# src/errors.py
from typing import Any, Optional


class AppError(Exception):
    """Base class for errors raised by the service layer.

    `detail` is what the client sees; `context` is for logs only.
    """
    status_code: int = 500
    default_detail: str = "Something went wrong"

    def __init__(self, detail: Optional[str] = None, context: Any = None):
        self.detail = detail or self.default_detail
        self.context = context
        super().__init__(self.detail)


class NotFound(AppError):
    """User, plan or payment does not exist."""
    status_code = 404
    default_detail = "Resource not found"


class GatewayError(AppError):
    """Transport failure, timeout or unexpected response from the payment gateway."""
    status_code = 502
    default_detail = "Payment gateway is unavailable, try again later"


class InvalidTransition(AppError):
    """Attempt to move a payment that has already reached a terminal status."""
    status_code = 409
    default_detail = "Payment has already been processed"


class InconsistentState(AppError):
    """A SUCCESS payment whose entitlement was never applied to the user."""
    status_code = 500
    default_detail = "Subscription state is inconsistent"


class BadRequest(AppError):
    """Input that passed schema validation but breaks a business rule."""
    status_code = 400
    default_detail = "Invalid request"


class Forbidden(AppError):
    status_code = 403
    default_detail = "You are not allowed to do this"


class PremiumRequired(Forbidden):
    default_detail = "A premium subscription is required"


class Conflict(AppError):
    status_code = 409
    default_detail = "Resource already exists"
