"""Classified authentication failures.

Every business-rule failure raised by the auth flows is an ``AuthError``
carrying one ``ErrorKind``. The API layer renders the kind as an HTTP status
and the message as the response detail.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds surfaced to callers."""

    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    FORBIDDEN = "FORBIDDEN"
    UNAUTHORIZED = "UNAUTHORIZED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.INTERNAL_SERVER_ERROR: 500,
}


class AuthError(Exception):
    """Base class for classified authentication failures."""

    kind: ErrorKind = ErrorKind.INTERNAL_SERVER_ERROR
    default_message = "Authentication failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConflictError(AuthError):
    kind = ErrorKind.CONFLICT
    default_message = "Conflict"


class NotFoundError(AuthError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class BadRequestError(AuthError):
    kind = ErrorKind.BAD_REQUEST
    default_message = "Bad request"


class ForbiddenError(AuthError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden"


class UnauthorizedError(AuthError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Unauthorized"


class UpstreamError(AuthError):
    """A third-party dependency (GitHub, email delivery) failed."""

    kind = ErrorKind.INTERNAL_SERVER_ERROR
    default_message = "Upstream service error"


class VerificationTokenNotFound(NotFoundError):
    default_message = "Invalid or expired verification link"


class VerificationTokenExpired(BadRequestError):
    default_message = "Verification link has expired. Please sign up again."


class OAuthExchangeError(BadRequestError):
    """The provider rejected the authorization code."""

    default_message = "Failed to exchange code for token"
