"""Admin and profile reporting over fetched loans and users."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from library_client.models import Favorite, LoanFilter, Loan, LoanStatus, Review, User, UserFilter
from library_client.policy import is_banned, loan_status

_STATUS_FOR_FILTER = {
    LoanFilter.ACTIVE: LoanStatus.ACTIVE,
    LoanFilter.OVERDUE: LoanStatus.OVERDUE,
    LoanFilter.RETURNED: LoanStatus.RETURNED,
}


@dataclass
class ProfileStats:
    """Figures shown on a user's profile."""

    active_loans: int = 0
    completed_loans: int = 0
    favorites: int = 0
    reviews: int = 0
    total_late_fees: Decimal = Decimal("0")


def _contains(haystack: str | None, needle: str) -> bool:
    return needle in (haystack or "").lower()


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def filter_loans(
    loans: Iterable[Loan],
    now: datetime,
    status: LoanFilter = LoanFilter.ALL,
    user_search: str | None = None,
    book_search: str | None = None,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
) -> list[Loan]:
    """Filter loans the way the admin loan table does.

    Parameters
    ----------
    loans : Iterable[Loan]
        Loans to filter.
    now : datetime
        Instant used to tell active loans from overdue ones.
    status : LoanFilter
        ``all``, ``active`` (out and not yet due), ``overdue`` or ``returned``.
    user_search : str | None
        Case-insensitive match on username or email.
    book_search : str | None
        Case-insensitive match on the book title.
    start, end : date | datetime | None
        Inclusive range on the loan date, compared by calendar day.

    Returns
    -------
    list[Loan]
        Matching loans in their original order.
    """
    status = LoanFilter(status)
    user_needle = (user_search or "").strip().lower()
    book_needle = (book_search or "").strip().lower()
    start_day = _as_date(start) if start is not None else None
    end_day = _as_date(end) if end is not None else None

    result = []
    for loan in loans:
        if status != LoanFilter.ALL and loan_status(loan, now) != _STATUS_FOR_FILTER[status]:
            continue
        if user_needle and not (_contains(loan.username, user_needle) or _contains(loan.user_email, user_needle)):
            continue
        if book_needle and not _contains(loan.book_title, book_needle):
            continue
        loan_day = loan.loan_date.date()
        if start_day is not None and loan_day < start_day:
            continue
        if end_day is not None and loan_day > end_day:
            continue
        result.append(loan)
    return result


def sort_user_loans(loans: Iterable[Loan]) -> list[Loan]:
    """Unreturned loans first by newest loan date, then returned ones by newest return date."""
    loans = list(loans)
    open_loans = sorted(
        (loan for loan in loans if not loan.is_returned),
        key=lambda loan: loan.loan_date,
        reverse=True,
    )
    returned = sorted(
        (loan for loan in loans if loan.is_returned),
        key=lambda loan: loan.return_date or loan.loan_date,
        reverse=True,
    )
    return open_loans + returned


def late_fee_total(loans: Iterable[Loan], unpaid_only: bool = False) -> Decimal:
    """Sum of late fees, optionally only those still unpaid."""
    return sum(
        (loan.late_fee for loan in loans if not (unpaid_only and loan.late_fee_paid)),
        Decimal("0"),
    )


def filter_users(
    users: Iterable[User],
    now: datetime,
    status: UserFilter = UserFilter.ALL,
    search: str | None = None,
) -> list[User]:
    """Filter users by ban status and a username/email search."""
    status = UserFilter(status)
    needle = (search or "").strip().lower()

    result = []
    for user in users:
        banned = is_banned(user, now)
        if status == UserFilter.BANNED and not banned:
            continue
        if status == UserFilter.ACTIVE and banned:
            continue
        if needle and not (_contains(user.username, needle) or _contains(user.email, needle)):
            continue
        result.append(user)
    return result


def user_counts(users: Iterable[User], now: datetime) -> dict[str, int]:
    """Return total, banned, active and admin counts."""
    users = list(users)
    banned = sum(1 for user in users if is_banned(user, now))
    return {
        "total": len(users),
        "banned": banned,
        "active": len(users) - banned,
        "admins": sum(1 for user in users if user.is_admin),
    }


def profile_stats(
    loans: Iterable[Loan],
    favorites: Iterable[Favorite] = (),
    reviews: Iterable[Review] = (),
) -> ProfileStats:
    loans = list(loans)
    return ProfileStats(
        active_loans=sum(1 for loan in loans if not loan.is_returned),
        completed_loans=sum(1 for loan in loans if loan.is_returned),
        favorites=len(list(favorites)),
        reviews=len(list(reviews)),
        total_late_fees=late_fee_total(loans),
    )
