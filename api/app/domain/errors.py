"""Domain errors raised by repositories and services.

Each error carries the HTTP status and machine readable ``code`` used when it
is rendered by the API's exception handler.
"""

from __future__ import annotations


class DeliveryError(Exception):
    """Base class for expected, client-visible failures."""

    status_code = 400
    code = "ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(DeliveryError):
    status_code = 404
    code = "NOT_FOUND"


class InvalidTransition(DeliveryError):
    status_code = 400
    code = "INVALID_TRANSITION"


class ActorNotAllowed(DeliveryError):
    status_code = 403
    code = "ACTOR_NOT_ALLOWED"


class AlreadyClaimed(DeliveryError):
    status_code = 409
    code = "ALREADY_CLAIMED"


class StaleOrder(DeliveryError):
    """The order changed between read and write."""

    status_code = 409
    code = "STALE_ORDER"


class ValidationError(DeliveryError):
    status_code = 400
    code = "VALIDATION_ERROR"


class Unauthorized(DeliveryError):
    status_code = 401
    code = "UNAUTHORIZED"


class PaymentNotConfigured(DeliveryError):
    status_code = 500
    code = "PAYMENT_NOT_CONFIGURED"


class UpstreamPaymentError(DeliveryError):
    """The payment gateway rejected or failed the request."""

    status_code = 502
    code = "UPSTREAM_PAYMENT_ERROR"
