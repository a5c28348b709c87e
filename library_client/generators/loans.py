"""Loan history generator.

Histories are produced by driving ``LibraryDataStore`` through the real
lifecycle transitions, so every generated record obeys the loan policy:
one loan at a time, bans after late returns, no borrowing with unpaid fees.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta

from library_client.generators.base import BaseGenerator
from library_client.models import Book, Loan, PaymentProvider
from library_client.policy.constants import LOAN_DURATION_DAYS
from library_client.store import LibraryDataStore

logger = logging.getLogger(__name__)


class LoanGenerator(BaseGenerator):
    """Generate per-user loan histories inside a store.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    late_rate : float
        Probability that a loan is returned after its due date.
    unpaid_rate : float
        Probability that a late fee is left unpaid, which ends the history.
    waive_rate : float
        Probability that an admin waives a late fee instead of it being paid.
    """

    PROVIDERS = [p.value for p in PaymentProvider]

    def __init__(
        self,
        seed: int | None = None,
        late_rate: float = 0.25,
        unpaid_rate: float = 0.3,
        waive_rate: float = 0.1,
    ) -> None:
        super().__init__(seed)
        self.late_rate = late_rate
        self.unpaid_rate = unpaid_rate
        self.waive_rate = waive_rate

    def generate_history(
        self,
        store: LibraryDataStore,
        user_id: str,
        now: datetime,
        max_loans: int = 4,
    ) -> list[Loan]:
        """Borrow and return books for ``user_id`` up to ``now``.

        The last loan may still be out (active or overdue). A late fee left
        unpaid stops the history because the user could not borrow again.

        Returns
        -------
        list[Loan]
            The user's generated loans, oldest first.
        """
        user = store.users[user_id]
        loans: list[Loan] = []
        start = now - timedelta(days=random.randint(60, 400), hours=random.randint(0, 23))

        for _ in range(random.randint(0, max_loans)):
            if start >= now:
                break
            book = self._pick_book(store)
            if book is None:
                break

            loan = store.open_loan(self.new_id(), user_id, book.book_id, start)
            loans.append(loan)

            returned_at = self._return_time(loan)
            if returned_at >= now:
                break

            store.return_loan(loan.loan_id, returned_at)
            if loan.late_fee > 0:
                roll = random.random()
                if roll < self.unpaid_rate:
                    break
                if roll < self.unpaid_rate + self.waive_rate:
                    store.waive_fee(loan.loan_id)
                else:
                    paid_at = min(returned_at + timedelta(hours=random.randint(1, 20)), now)
                    store.mark_fee_paid(loan.loan_id, random.choice(self.PROVIDERS), paid_at)

            resume = max(returned_at, user.ban_until or returned_at)
            start = resume + timedelta(days=random.randint(1, 30), hours=random.randint(0, 23))

        store.refresh(now)
        return loans

    def _return_time(self, loan: Loan) -> datetime:
        if random.random() < self.late_rate:
            return loan.due_date + timedelta(days=random.randint(0, 9), hours=random.randint(1, 23))
        return loan.loan_date + timedelta(
            days=random.randint(1, LOAN_DURATION_DAYS - 1),
            hours=random.randint(0, 23),
        )

    def _pick_book(self, store: LibraryDataStore) -> Book | None:
        available = [book for book in store.books.values() if book.available]
        if not available:
            logger.debug("No available book left to lend")
            return None
        return random.choice(available)
