"""Custom exception hierarchy for library-client."""

from __future__ import annotations

from typing import Any


class LibraryClientError(Exception):
    """Base exception for all library-client errors."""


class ConfigurationError(LibraryClientError):
    """Raised when configuration is invalid or missing."""


class EntityNotFoundError(LibraryClientError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class InvalidEntityStateError(LibraryClientError):
    """Raised when an entity is in an invalid state for the operation."""


class FormValidationError(LibraryClientError):
    """Raised when form input is rejected before any network call.

    ``errors`` maps each field name to its list of messages.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        first = next(iter(errors.items()), ("form", ["invalid input"]))
        super().__init__(f"{first[0]}: {first[1][0]}")

    def first_message(self) -> str:
        """Return the first field message."""
        for messages in self.errors.values():
            if messages:
                return messages[0]
        return "Invalid input"


class ApiError(LibraryClientError):
    """Raised when the API answers with a non-success status."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        code: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details or {}


class AuthenticationError(ApiError):
    """Raised on 401/403 responses."""


class SessionExpiredError(AuthenticationError):
    """Raised when the refresh endpoint rejects the refresh token."""


class BorrowRejectedError(ApiError):
    """Raised when a borrow is refused, locally or by the server."""

    def __init__(self, reason: Any, message: str, decision: Any = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.reason = reason
        self.decision = decision


class NetworkError(LibraryClientError):
    """Raised when the API cannot be reached (connection, CORS, timeout)."""

    def __init__(self, message: str = "Network error occurred", original: BaseException | None = None) -> None:
        super().__init__(message)
        self.original = original


class PaymentError(LibraryClientError):
    """Raised when a late-fee payment cannot be started."""
