"""Sample library scenario: catalog, members and policy-consistent loans."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone

from library_client.generators.catalog import BookGenerator, UserGenerator
from library_client.generators.loans import LoanGenerator
from library_client.store import LibraryDataStore

logger = logging.getLogger(__name__)


class LibraryScenario:
    """Generate a populated library.

    This scenario creates:
    - Books across the catalog categories
    - Members and a few administrators
    - Loan histories per member: on-time returns, late returns with
      bans and paid, waived or unpaid fees, and loans still out
    """

    def __init__(
        self,
        num_users: int = 50,
        num_books: int = 100,
        admin_count: int = 1,
        late_rate: float = 0.25,
        seed: int | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize the scenario.

        Parameters
        ----------
        num_users : int
            Number of users to generate, admins included.
        num_books : int
            Number of books to generate.
        admin_count : int
            How many of the users are admins; admins never borrow.
        late_rate : float
            Probability that a loan is returned late.
        seed : int | None
            Random seed for reproducibility.
        now : datetime | None
            Reference instant; defaults to the current UTC time.
        """
        self.num_users = num_users
        self.num_books = num_books
        self.admin_count = min(admin_count, num_users)
        self.seed = seed
        self.now = now or datetime.now(timezone.utc)

        if seed is not None:
            random.seed(seed)

        self.store = LibraryDataStore()
        self._book_gen = BookGenerator(seed=seed)
        self._user_gen = UserGenerator(seed=seed)
        self._loan_gen = LoanGenerator(seed=seed, late_rate=late_rate)

    def generate(self) -> LibraryDataStore:
        """Generate all data for the scenario.

        Returns
        -------
        LibraryDataStore
            Store containing all generated data.
        """
        logger.info(
            "Starting library scenario: %d users, %d books",
            self.num_users,
            self.num_books,
        )

        for book in self._book_gen.generate_batch(self.num_books):
            self.store.add_book(book)

        for user in self._user_gen.generate_batch(self.num_users, admin_count=self.admin_count):
            self.store.add_user(user)

        for user in list(self.store.users.values()):
            if user.is_admin:
                continue
            self._loan_gen.generate_history(self.store, user.user_id, self.now)

        logger.info("Library scenario complete: %s", self.store.summary())
        return self.store
