"""Loan models for the library domain."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass
class Loan:
    """One borrow transaction and its lifecycle fields."""

    loan_id: str
    user_id: str
    book_id: str
    loan_date: datetime
    due_date: datetime  # loan_date + LOAN_DURATION
    return_date: datetime | None = None
    is_returned: bool = False
    days_late: int = 0
    late_fee: Decimal = Decimal("0")
    late_fee_paid: bool = False
    late_fee_payment_date: datetime | None = None
    payment_method: str | None = None
    fee_waived: bool = False  # sticky: waived loans never re-accrue
    # Display references populated by the API
    book_title: str | None = None
    username: str | None = None
    user_email: str | None = None


@dataclass
class LateFeeAssessment:
    """Days late and fee for a loan at a given instant."""

    days_late: int
    late_fee: Decimal
    provisional: bool  # True while the loan is still out


@dataclass
class LateFeeHistory:
    """The current user's loans that carried a late fee."""

    loans: list[Loan] = field(default_factory=list)
    total_late_fees: Decimal = Decimal("0")

    @property
    def unpaid_count(self) -> int:
        return sum(1 for loan in self.loans if not loan.late_fee_paid)


@dataclass
class LateFeeStats:
    """Aggregate late-fee figures for administrators."""

    total_late_fees: Decimal = Decimal("0")
    paid_late_fees: Decimal = Decimal("0")
    unpaid_late_fees: Decimal = Decimal("0")
    overdue_loans: int = 0
    active_loans: int = 0
    total_loans: int = 0
