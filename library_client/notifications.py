"""User-facing notifications and the error-to-message mapping.

Failures are caught where an action is invoked and turned into a toast
style ``Notification``; they are not re-raised into the caller. Messages
are chosen from structured reasons and error codes only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from library_client.exceptions import (
    ApiError,
    BorrowRejectedError,
    FormValidationError,
    LibraryClientError,
    NetworkError,
    PaymentError,
    SessionExpiredError,
)
from library_client.models import ErrorCode, NotificationLevel, RejectionReason

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONNECTIVITY_MESSAGE = "Unable to connect to the server. Please check your connection and try again."
GENERIC_MESSAGE = "An error occurred"

REJECTION_MESSAGES: dict[RejectionReason, str] = {
    RejectionReason.NOT_AUTHENTICATED: "You must log in to borrow books.",
    RejectionReason.BANNED: "Your account is banned until {ban_until}. You can borrow books again after that date.",
    RejectionReason.UNPAID_FEES: "You have unpaid late fees of {amount} TL. Please pay them before borrowing another book.",
    RejectionReason.LOAN_LIMIT: "You can only borrow {limit} book(s) at a time. Please return your current book first.",
}

ERROR_CODE_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.BOOK_UNAVAILABLE: "This book is not available right now.",
    ErrorCode.ADMIN_NOT_ALLOWED: "Admin users are not allowed to borrow books.",
    ErrorCode.INVALID_CREDENTIALS: "Invalid email or password.",
    ErrorCode.INVALID_TOKEN: "Your session is no longer valid. Please log in again.",
    ErrorCode.SESSION_EXPIRED: "Session expired. Please login again.",
    ErrorCode.EMAIL_EXISTS: "This email address is already registered.",
    ErrorCode.FORBIDDEN: "You do not have permission for this operation.",
    ErrorCode.NOT_FOUND: "The requested item was not found.",
    ErrorCode.ALREADY_REVIEWED: "You have already reviewed this book.",
    ErrorCode.REVIEW_REQUIRES_LOAN: "You need to borrow and return this book before reviewing it.",
    ErrorCode.ALREADY_FAVORITE: "Book is already in your favorites.",
    ErrorCode.FEE_ALREADY_PAID: "Late fee has already been paid.",
    ErrorCode.NO_FEE_DUE: "No late fee to pay.",
}


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str


def rejection_message(
    reason: RejectionReason,
    *,
    ban_until: Any = None,
    amount: Any = None,
    limit: int | None = None,
) -> str:
    """Render the message for a borrow rejection reason."""
    template = REJECTION_MESSAGES[reason]
    ban_text = ban_until.strftime("%d.%m.%Y") if hasattr(ban_until, "strftime") else "a later date"
    return template.format(
        ban_until=ban_text,
        amount=amount if amount is not None else "",
        limit=limit if limit is not None else 1,
    )


def message_for_error(exc: BaseException) -> Notification:
    """Pick the notification for a failure."""
    if isinstance(exc, FormValidationError):
        return Notification(NotificationLevel.ERROR, exc.first_message())
    if isinstance(exc, BorrowRejectedError):
        return Notification(NotificationLevel.ERROR, exc.message)
    if isinstance(exc, SessionExpiredError):
        return Notification(NotificationLevel.ERROR, ERROR_CODE_MESSAGES[ErrorCode.SESSION_EXPIRED])
    if isinstance(exc, ApiError):
        text = ERROR_CODE_MESSAGES.get(exc.code) if isinstance(exc.code, ErrorCode) else None
        return Notification(NotificationLevel.ERROR, text or exc.message or GENERIC_MESSAGE)
    if isinstance(exc, NetworkError):
        return Notification(NotificationLevel.ERROR, CONNECTIVITY_MESSAGE)
    if isinstance(exc, PaymentError):
        return Notification(NotificationLevel.ERROR, str(exc) or "Unable to create payment page")
    return Notification(NotificationLevel.ERROR, str(exc) or GENERIC_MESSAGE)


@dataclass
class Notifier:
    """Collects toasts for the presentation layer and mirrors them to logging."""

    history: list[Notification] = field(default_factory=list)
    listeners: list[Callable[[Notification], None]] = field(default_factory=list)

    def push(self, notification: Notification) -> Notification:
        self.history.append(notification)
        level = logging.WARNING if notification.level in (NotificationLevel.WARNING, NotificationLevel.ERROR) else logging.INFO
        logger.log(level, "notify[%s] %s", notification.level.value, notification.message)
        for listener in self.listeners:
            listener(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.push(Notification(NotificationLevel.SUCCESS, message))

    def info(self, message: str) -> Notification:
        return self.push(Notification(NotificationLevel.INFO, message))

    def warning(self, message: str) -> Notification:
        return self.push(Notification(NotificationLevel.WARNING, message))

    def error(self, message: str) -> Notification:
        return self.push(Notification(NotificationLevel.ERROR, message))

    def notify_error(self, exc: BaseException) -> Notification:
        return self.push(message_for_error(exc))

    @property
    def last(self) -> Notification | None:
        return self.history[-1] if self.history else None


def safe_call(
    action: Callable[[], T],
    notifier: Notifier,
    fallback: T | None = None,
    success_message: str | None = None,
) -> T | None:
    """Run a user-triggered action, turning failures into a notification.

    Returns the action result, or ``fallback`` when it failed.
    """
    try:
        result = action()
    except LibraryClientError as exc:
        logger.error("Action failed: %s", exc, exc_info=True)
        notifier.notify_error(exc)
        return fallback
    if success_message:
        notifier.success(success_message)
    return result


def best_effort(action: Callable[[], T], default: T) -> T:
    """Run a non-critical enrichment; failures are logged and give ``default``."""
    try:
        return action()
    except LibraryClientError as exc:
        logger.warning("Best-effort call failed, using default: %s", exc)
        return default
