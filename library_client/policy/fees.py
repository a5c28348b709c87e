"""Late-fee calculator.

Days late count every started day past the due date. For a loan that is
still out the figures are provisional and move with ``now``; once the loan
is returned they are frozen at the return instant.
"""

from datetime import datetime, timedelta
from decimal import Decimal

from library_client.exceptions import InvalidEntityStateError
from library_client.models import LateFeeAssessment, Loan, LoanStatus
from library_client.policy.constants import LATE_FEE_PER_DAY, ONE_DAY


def _whole_days_up(delta: timedelta) -> int:
    """Ceiling of ``delta / ONE_DAY`` for a positive delta, without float error."""
    days, remainder = divmod(delta, ONE_DAY)
    return days + (1 if remainder else 0)


def days_late(due_date: datetime, as_of: datetime) -> int:
    """Return ``max(0, ceil((as_of - due_date) / 1 day))``."""
    delta = as_of - due_date
    if delta <= timedelta(0):
        return 0
    return _whole_days_up(delta)


def late_fee_for(days: int) -> Decimal:
    """Fee owed for ``days`` days late."""
    return LATE_FEE_PER_DAY * max(0, days)


def assessment_time(loan: Loan, now: datetime) -> datetime:
    """Instant the loan is measured at: its return date, or ``now`` while out."""
    if loan.is_returned and loan.return_date is not None:
        return loan.return_date
    return now


def assess(loan: Loan, now: datetime) -> LateFeeAssessment:
    """Compute days late and fee for ``loan`` as of ``now``.

    Waived loans always assess to a zero fee.
    """
    days = days_late(loan.due_date, assessment_time(loan, now))
    fee = Decimal("0") if loan.fee_waived else late_fee_for(days)
    return LateFeeAssessment(days_late=days, late_fee=fee, provisional=not loan.is_returned)


def refresh_assessment(loan: Loan, now: datetime) -> Loan:
    """Write the current assessment into an active loan.

    Returned loans keep the figures frozen at return, and paid fees are
    never rewritten.
    """
    if loan.is_returned or loan.late_fee_paid:
        return loan
    result = assess(loan, now)
    loan.days_late = result.days_late
    loan.late_fee = result.late_fee
    return loan


def waive(loan: Loan) -> Loan:
    """Zero the loan's fee permanently."""
    if loan.late_fee_paid:
        raise InvalidEntityStateError(f"Late fee for loan {loan.loan_id} has already been paid")
    loan.late_fee = Decimal("0")
    loan.fee_waived = True
    return loan


def has_unpaid_fee(loan: Loan) -> bool:
    return loan.late_fee > 0 and not loan.late_fee_paid


def loan_status(loan: Loan, now: datetime) -> LoanStatus:
    if loan.is_returned:
        return LoanStatus.RETURNED
    if days_late(loan.due_date, now) > 0:
        return LoanStatus.OVERDUE
    return LoanStatus.ACTIVE


def days_remaining(loan: Loan, now: datetime) -> int:
    """Whole days until due, rounded up; negative once overdue."""
    delta = loan.due_date - now
    if delta <= timedelta(0):
        return -days_late(loan.due_date, now)
    return _whole_days_up(delta)


def status_text(loan: Loan, now: datetime) -> str:
    if loan.is_returned:
        return "Returned"
    remaining = days_remaining(loan, now)
    if remaining < 0:
        return f"{abs(remaining)} days overdue"
    if remaining == 0:
        return "Due today"
    if remaining == 1:
        return "Due tomorrow"
    return f"{remaining} days left"
