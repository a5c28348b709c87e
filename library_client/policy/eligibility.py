"""Borrow eligibility guard.

The checks run in a fixed order and the first failing one is reported:
authentication, active ban, unpaid late fees, concurrent loan limit.
The guard only gives early, specific feedback; the API remains the
authority and its structured rejection codes win.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from library_client.models import Loan, RejectionReason, User
from library_client.policy.ban import is_banned
from library_client.policy.constants import LOAN_DURATION, MAX_ACTIVE_LOANS
from library_client.policy.fees import has_unpaid_fee


@dataclass(frozen=True)
class BorrowDecision:
    """Outcome of the eligibility guard."""

    allowed: bool
    reason: RejectionReason | None = None
    ban_until: datetime | None = None
    unpaid_total: Decimal = Decimal("0")
    active_loans: int = 0
    limit: int = MAX_ACTIVE_LOANS


@dataclass(frozen=True)
class LoanPlan:
    loan_date: datetime
    due_date: datetime


def check_borrow_eligibility(
    user: User | None,
    loans: Iterable[Loan],
    now: datetime,
) -> BorrowDecision:
    """Decide whether ``user`` may start a new loan at ``now``.

    Parameters
    ----------
    user : User | None
        The signed-in user, or ``None`` when anonymous.
    loans : Iterable[Loan]
        All of the user's loans, active and returned.
    now : datetime
        Evaluation instant.

    Returns
    -------
    BorrowDecision
        ``allowed`` with no reason, or the first failing reason.
    """
    if user is None:
        return BorrowDecision(allowed=False, reason=RejectionReason.NOT_AUTHENTICATED)

    if is_banned(user, now):
        return BorrowDecision(allowed=False, reason=RejectionReason.BANNED, ban_until=user.ban_until)

    loans = list(loans)
    unpaid = [loan for loan in loans if has_unpaid_fee(loan)]
    if unpaid:
        total = sum((loan.late_fee for loan in unpaid), Decimal("0"))
        return BorrowDecision(allowed=False, reason=RejectionReason.UNPAID_FEES, unpaid_total=total)

    active = sum(1 for loan in loans if not loan.is_returned)
    if active >= MAX_ACTIVE_LOANS:
        return BorrowDecision(allowed=False, reason=RejectionReason.LOAN_LIMIT, active_loans=active)

    return BorrowDecision(allowed=True, active_loans=active)


def plan_loan(now: datetime) -> LoanPlan:
    """Dates for a loan starting at ``now``."""
    return LoanPlan(loan_date=now, due_date=now + LOAN_DURATION)
