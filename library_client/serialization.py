"""Conversion between API JSON payloads and domain dataclasses.

The API speaks camelCase JSON with Mongo-style ``_id`` keys; the domain
models are snake_case dataclasses with ``Decimal`` money and timezone-aware
datetimes.
"""

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from library_client.exceptions import ApiError
from library_client.models import (
    Book,
    ContactMessage,
    Favorite,
    LateFeeHistory,
    LateFeeStats,
    LibraryStats,
    Loan,
    MessageStatus,
    Review,
    Role,
    TokenPair,
    User,
)

logger = logging.getLogger(__name__)


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return obj
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization."""
    result = {}
    for key, value in asdict(obj).items():
        result[key] = serialize_value(value)
    return result


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_decimal(value: Any) -> Decimal:
    """Parse an amount; missing or malformed values count as zero."""
    if value in (None, ""):
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def entity_id(data: Any) -> str | None:
    """Return the id of a populated reference or the bare id itself."""
    if data is None:
        return None
    if isinstance(data, dict):
        raw = data.get("_id", data.get("id"))
        return str(raw) if raw is not None else None
    return str(data)


def _ref(data: Any, key: str) -> Any:
    return data.get(key) if isinstance(data, dict) else None


def parse_user(data: dict[str, Any]) -> User:
    """Build a User from an API payload or a stored profile snapshot."""
    role = data.get("role") or Role.USER.value
    return User(
        user_id=entity_id(data) or "",
        username=data.get("username", ""),
        email=data.get("email", ""),
        role=Role(role) if role in {r.value for r in Role} else Role.USER,
        ban_until=parse_datetime(data.get("banUntil")),
        created_at=parse_datetime(data.get("createdAt")),
    )


def user_to_api(user: User) -> dict[str, Any]:
    """Serialize a User back into the API's camelCase shape."""
    return {
        "_id": user.user_id,
        "username": user.username,
        "email": user.email,
        "role": user.role.value,
        "banUntil": serialize_value(user.ban_until),
        "createdAt": serialize_value(user.created_at),
    }


def parse_tokens(data: dict[str, Any]) -> TokenPair:
    return TokenPair(access_token=data["accessToken"], refresh_token=data["refreshToken"])


def parse_loan(data: dict[str, Any]) -> Loan:
    """Build a Loan; ``user`` and ``book`` may be populated objects or ids.

    Raises:
        ApiError: If the payload is not an object or lacks loanDate/dueDate.
    """
    if not isinstance(data, dict):
        raise ApiError("Malformed loan payload", details={"payload": data})
    loan_date = parse_datetime(data.get("loanDate"))
    due_date = parse_datetime(data.get("dueDate"))
    if loan_date is None or due_date is None:
        raise ApiError(f"Loan {entity_id(data)} is missing loanDate or dueDate", details={"payload": data})
    user = data.get("user")
    book = data.get("book")
    return Loan(
        loan_id=entity_id(data) or "",
        user_id=entity_id(user) or "",
        book_id=entity_id(book) or "",
        loan_date=loan_date,
        due_date=due_date,
        return_date=parse_datetime(data.get("returnDate")),
        is_returned=bool(data.get("isReturned", False)),
        days_late=int(data.get("daysLate") or 0),
        late_fee=parse_decimal(data.get("lateFee")),
        late_fee_paid=bool(data.get("lateFeePaid", False)),
        late_fee_payment_date=parse_datetime(data.get("lateFeePaymentDate")),
        payment_method=data.get("paymentMethod"),
        fee_waived=bool(data.get("lateFeeWaived", False)),
        book_title=_ref(book, "title"),
        username=_ref(user, "username"),
        user_email=_ref(user, "email"),
    )


def parse_loans(data: Any) -> list[Loan]:
    """Accept either a bare list or ``{"loans": [...]}``."""
    items = data.get("loans", []) if isinstance(data, dict) else data or []
    return [parse_loan(item) for item in items]


def parse_late_fee_history(data: dict[str, Any]) -> LateFeeHistory:
    return LateFeeHistory(
        loans=parse_loans(data.get("loans") or []),
        total_late_fees=parse_decimal(data.get("totalLateFees")),
    )


def parse_late_fee_stats(data: dict[str, Any]) -> LateFeeStats:
    return LateFeeStats(
        total_late_fees=parse_decimal(data.get("totalLateFees")),
        paid_late_fees=parse_decimal(data.get("paidLateFees")),
        unpaid_late_fees=parse_decimal(data.get("unpaidLateFees")),
        overdue_loans=int(data.get("overdueLoans") or 0),
        active_loans=int(data.get("activeLoans") or 0),
        total_loans=int(data.get("totalLoans") or 0),
    )


def parse_book(data: dict[str, Any]) -> Book:
    avg = data.get("avgRating")
    return Book(
        book_id=entity_id(data) or "",
        title=data.get("title", ""),
        author=data.get("author", ""),
        category=data.get("category", ""),
        available=bool(data.get("available", True)),
        image_url=data.get("imageUrl"),
        description=data.get("description"),
        review_count=int(data.get("reviewCount") or 0),
        avg_rating=float(avg) if avg is not None else None,
        is_favorite=bool(data.get("isFavorite", False)),
        created_at=parse_datetime(data.get("createdAt")),
    )


def parse_books(data: Any) -> list[Book]:
    """Accept a bare list, the paged ``{"items": [...]}`` or ``{"books": [...]}``."""
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict) and isinstance(data.get("items"), list):
        items = data["items"]
    elif isinstance(data, dict) and isinstance(data.get("books"), list):
        items = data["books"]
    else:
        logger.warning("Unexpected book list payload: %s", type(data).__name__)
        items = []
    return [parse_book(item) for item in items]


def parse_review(data: dict[str, Any]) -> Review:
    user = data.get("user")
    return Review(
        review_id=entity_id(data) or "",
        book_id=entity_id(data.get("book")) or "",
        user_id=entity_id(user),
        rating=int(data.get("rating") or 0),
        review_text=data.get("reviewText", ""),
        username=_ref(user, "username"),
        created_at=parse_datetime(data.get("createdAt")),
    )


def parse_favorite(data: dict[str, Any]) -> Favorite:
    book = data.get("book")
    return Favorite(
        favorite_id=entity_id(data) or "",
        book_id=entity_id(book) or "",
        book_title=_ref(book, "title"),
    )


def parse_message(data: dict[str, Any]) -> ContactMessage:
    status = data.get("status") or MessageStatus.NEW.value
    return ContactMessage(
        message_id=entity_id(data) or "",
        name=data.get("name", ""),
        email=data.get("email", ""),
        subject=data.get("subject", ""),
        message=data.get("message", ""),
        status=MessageStatus(status) if status in {s.value for s in MessageStatus} else MessageStatus.NEW,
        reply=data.get("replyMessage"),
        created_at=parse_datetime(data.get("createdAt")),
    )


def parse_library_stats(data: dict[str, Any]) -> LibraryStats:
    return LibraryStats(
        total_books=int(data.get("totalBooks") or 0),
        total_users=int(data.get("totalUsers") or 0),
        total_loans=int(data.get("totalLoans") or 0),
        active_loans=int(data.get("activeLoans") or 0),
    )
