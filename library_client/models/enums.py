"""Enumeration types for library domain entities."""

from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class LoanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    OVERDUE = "OVERDUE"
    RETURNED = "RETURNED"


class LoanFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    OVERDUE = "overdue"
    RETURNED = "returned"


class UserFilter(str, Enum):
    ALL = "all"
    BANNED = "banned"
    ACTIVE = "active"


class PaymentProvider(str, Enum):
    STRIPE = "stripe"
    IYZICO = "iyzico"


class PaymentSignal(str, Enum):
    """Value of the ``payment`` query parameter on the return URL."""

    SUCCESS = "success"
    CANCELED = "canceled"


class PaymentState(str, Enum):
    IDLE = "IDLE"
    REDIRECTING = "REDIRECTING"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"
    CONFIRM_FAILED = "CONFIRM_FAILED"


class SessionState(str, Enum):
    ANONYMOUS = "ANONYMOUS"
    AUTHENTICATED = "AUTHENTICATED"
    REFRESHING = "REFRESHING"


class RejectionReason(str, Enum):
    """Why a borrow was refused, in guard precedence order."""

    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    BANNED = "BANNED"
    UNPAID_FEES = "UNPAID_FEES"
    LOAN_LIMIT = "LOAN_LIMIT"


class ErrorCode(str, Enum):
    """Structured error codes returned by the API."""

    BANNED = "BANNED"
    UNPAID_FEES = "UNPAID_FEES"
    LOAN_LIMIT = "LOAN_LIMIT"
    BOOK_UNAVAILABLE = "BOOK_UNAVAILABLE"
    ADMIN_NOT_ALLOWED = "ADMIN_NOT_ALLOWED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    EMAIL_EXISTS = "EMAIL_EXISTS"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_REVIEWED = "ALREADY_REVIEWED"
    REVIEW_REQUIRES_LOAN = "REVIEW_REQUIRES_LOAN"
    ALREADY_FAVORITE = "ALREADY_FAVORITE"
    FEE_ALREADY_PAID = "FEE_ALREADY_PAID"
    NO_FEE_DUE = "NO_FEE_DUE"
    VALIDATION = "VALIDATION"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: object) -> "ErrorCode":
        """Map a raw code from a response body; anything unrecognised is UNKNOWN."""
        if isinstance(value, str):
            try:
                return cls(value.upper())
            except ValueError:
                pass
        return cls.UNKNOWN


class MessageStatus(str, Enum):
    NEW = "new"
    READ = "read"
    REPLIED = "replied"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
