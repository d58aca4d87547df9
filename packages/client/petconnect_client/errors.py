"""
Errors raised by the API gateway.

Every failure surfaces as a ``GatewayError`` subclass chosen from the store's
HTTP status, so callers never handle transport exceptions directly.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class: any store call that did not succeed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(GatewayError):
    """Bad credentials or no valid session (401)."""


class ForbiddenError(GatewayError):
    """The store's access policy refused the action (403)."""


class NotFoundError(GatewayError):
    """The addressed record does not exist (404)."""


class ConflictError(GatewayError):
    """Duplicate registration or a state transition that is not allowed (409)."""


class ValidationError(GatewayError):
    """The payload was rejected by the store's schema (422)."""


class NetworkError(GatewayError):
    """Transport failure or any other store error."""


_STATUS_ERRORS: dict[int, type[GatewayError]] = {
    401: AuthError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def error_for_status(status_code: int, message: str) -> GatewayError:
    return _STATUS_ERRORS.get(status_code, NetworkError)(message, status_code)
