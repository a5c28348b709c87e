"""Library domain models."""

from library_client.models.book import Book, Favorite, LibraryStats, Review
from library_client.models.enums import (
    ErrorCode,
    LoanFilter,
    LoanStatus,
    MessageStatus,
    NotificationLevel,
    PaymentProvider,
    PaymentSignal,
    PaymentState,
    RejectionReason,
    Role,
    SessionState,
    SortOrder,
    UserFilter,
)
from library_client.models.loan import LateFeeAssessment, LateFeeHistory, LateFeeStats, Loan
from library_client.models.message import CheckoutSession, ContactMessage, Page
from library_client.models.user import TokenPair, User

__all__ = [
    "Book",
    "CheckoutSession",
    "ContactMessage",
    "ErrorCode",
    "Favorite",
    "LateFeeAssessment",
    "LateFeeHistory",
    "LateFeeStats",
    "LibraryStats",
    "Loan",
    "LoanFilter",
    "LoanStatus",
    "MessageStatus",
    "NotificationLevel",
    "Page",
    "PaymentProvider",
    "PaymentSignal",
    "PaymentState",
    "RejectionReason",
    "Review",
    "Role",
    "SessionState",
    "SortOrder",
    "TokenPair",
    "User",
    "UserFilter",
]
