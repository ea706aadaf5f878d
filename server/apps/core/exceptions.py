"""API error taxonomy shared by all apps.

Every error raised at a service boundary is an ``ApiError`` carrying
the HTTP status it maps to. Views never build error responses by hand,
the ``api_view`` decorator does it.
"""

from typing import ClassVar


class ApiError(Exception):
    """Base class for errors reported to API clients."""

    status_code: ClassVar[int] = 500
    default_message: ClassVar[str] = 'Internal server error'

    def __init__(self, message: str | None = None) -> None:
        """Initialize ApiError.

        Args:
            message: Client-facing message, class default when omitted.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    """Raised when a request is missing fields or references a bad parent."""

    status_code = 400
    default_message = 'Bad request'


class AuthError(ApiError):
    """Raised for missing, unknown or expired tokens and bad credentials."""

    status_code = 401
    default_message = 'Unauthorized'


class NotFoundError(ApiError):
    """Raised when a record doesn't exist or isn't visible to the caller."""

    status_code = 404
    default_message = 'Not found'


class ConflictError(ApiError):
    """Raised when creating a record that already exists."""

    status_code = 400
    default_message = 'Already exist'


class InternalError(ApiError):
    """Raised for unexpected failures and misconfiguration."""


class StoreError(InternalError):
    """Raised when the Redis backed stores fail."""
