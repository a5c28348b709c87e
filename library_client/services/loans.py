"""Loan endpoints and the borrow flow."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from library_client.exceptions import ApiError, BorrowRejectedError, LibraryClientError
from library_client.http import ApiClient
from library_client.models import ErrorCode, LateFeeHistory, LateFeeStats, Loan, RejectionReason, User
from library_client.notifications import rejection_message
from library_client.policy import check_borrow_eligibility, plan_loan
from library_client.reports import sort_user_loans
from library_client.serialization import (
    parse_late_fee_history,
    parse_late_fee_stats,
    parse_loan,
    parse_loans,
)

logger = logging.getLogger(__name__)

# Server rejection codes that carry a borrow rejection reason
_CODE_REASONS = {
    ErrorCode.BANNED: RejectionReason.BANNED,
    ErrorCode.UNPAID_FEES: RejectionReason.UNPAID_FEES,
    ErrorCode.LOAN_LIMIT: RejectionReason.LOAN_LIMIT,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LoanService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def borrow(
        self,
        book_id: str,
        user: User | None,
        loans: Iterable[Loan],
        now: datetime | None = None,
    ) -> Loan:
        """Borrow a book after the local eligibility guard.

        Raises
        ------
        BorrowRejectedError
            The guard or the server refused the loan.
        """
        now = now or _utcnow()
        decision = check_borrow_eligibility(user, loans, now)
        if not decision.allowed:
            logger.info("Borrow of %s refused locally: %s", book_id, decision.reason.value)
            raise BorrowRejectedError(
                decision.reason,
                rejection_message(
                    decision.reason,
                    ban_until=decision.ban_until,
                    amount=decision.unpaid_total,
                    limit=decision.limit,
                ),
                decision=decision,
            )

        plan = plan_loan(now)
        try:
            body = self.api.post(
                "/loans/borrow",
                json={"bookId": book_id, "dueDate": plan.due_date.date().isoformat()},
            )
        except ApiError as exc:
            reason = _CODE_REASONS.get(exc.code)
            if reason is None:
                raise
            logger.info("Borrow of %s refused by server: %s", book_id, reason.value)
            raise BorrowRejectedError(
                reason,
                exc.message,
                status=exc.status,
                code=exc.code,
                details=exc.details,
            ) from exc
        return parse_loan(body.get("loan", body) if isinstance(body, dict) else body)

    def return_loan(self, loan_id: str) -> Loan:
        body = self.api.put(f"/loans/return/{loan_id}")
        return parse_loan(body.get("loan", body))

    def my_loans(self) -> list[Loan]:
        return sort_user_loans(parse_loans(self.api.get("/loans/my-loans")))

    def my_late_fees(self) -> LateFeeHistory:
        return parse_late_fee_history(self.api.get("/loans/my-late-fees"))

    def all_loans(self, **filters: Any) -> list[Loan]:
        """Every loan (admin); filters go to the query string."""
        return parse_loans(self.api.get("/loans/admin/all", params=filters))

    def late_fee_stats(self) -> LateFeeStats:
        return parse_late_fee_stats(self.api.get("/loans/admin/stats"))

    def waive_fee(self, loan_id: str) -> Any:
        return self.api.patch(f"/loans/admin/waive-fee/{loan_id}")

    def waive_and_refresh(self, loan_id: str) -> tuple[list[Loan], LateFeeStats]:
        """Waive a fee, then re-fetch loans and stats once the waiver landed."""
        self.waive_fee(loan_id)
        return self.all_loans(), self.late_fee_stats()

    def user_loans_or_empty(self) -> list[Loan]:
        try:
            return self.my_loans()
        except LibraryClientError as exc:
            logger.warning("Could not load loans: %s", exc)
            return []
