"""Loan lifecycle policy: constants, late fees, bans and borrow eligibility."""

from library_client.policy.ban import (
    apply_return_ban,
    ban_days_remaining,
    clear_ban,
    compute_ban_until,
    impose_ban,
    is_banned,
)
from library_client.policy.constants import (
    BAN_MULTIPLIER,
    LATE_FEE_PER_DAY,
    LOAN_DURATION,
    LOAN_DURATION_DAYS,
    MAX_ACTIVE_LOANS,
    ONE_DAY,
    REMINDER_DAY,
)
from library_client.policy.eligibility import (
    BorrowDecision,
    LoanPlan,
    check_borrow_eligibility,
    plan_loan,
)
from library_client.policy.fees import (
    assess,
    days_late,
    days_remaining,
    has_unpaid_fee,
    late_fee_for,
    loan_status,
    refresh_assessment,
    status_text,
    waive,
)

__all__ = [
    "BAN_MULTIPLIER",
    "BorrowDecision",
    "LATE_FEE_PER_DAY",
    "LOAN_DURATION",
    "LOAN_DURATION_DAYS",
    "LoanPlan",
    "MAX_ACTIVE_LOANS",
    "ONE_DAY",
    "REMINDER_DAY",
    "apply_return_ban",
    "assess",
    "ban_days_remaining",
    "check_borrow_eligibility",
    "clear_ban",
    "compute_ban_until",
    "days_late",
    "days_remaining",
    "has_unpaid_fee",
    "impose_ban",
    "is_banned",
    "late_fee_for",
    "loan_status",
    "plan_loan",
    "refresh_assessment",
    "status_text",
    "waive",
]
