"""Book and user generators."""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Iterator

from library_client.generators.base import BaseGenerator
from library_client.models import Book, Role, User
from library_client.policy.constants import BOOK_CATEGORIES


class BookGenerator(BaseGenerator):
    """Generate synthetic catalog entries."""

    CATEGORIES = list(BOOK_CATEGORIES)

    def generate(self) -> Book:
        """Generate a single book.

        Returns
        -------
        Book
            Generated book, available for loan.
        """
        book_id = self.new_id()
        return Book(
            book_id=book_id,
            title=self.fake.sentence(nb_words=random.randint(1, 4)).rstrip("."),
            author=self.fake.name(),
            category=random.choice(self.CATEGORIES),
            available=True,
            image_url=f"https://picsum.photos/seed/{book_id}/300/450",
            description=self.fake.paragraph(nb_sentences=3),
            created_at=self.fake.date_time_between(start_date="-3y", end_date="-1y", tzinfo=timezone.utc),
        )

    def generate_batch(self, count: int) -> Iterator[Book]:
        """Generate multiple books.

        Parameters
        ----------
        count : int
            Number of books to generate.

        Yields
        ------
        Book
            Generated books.
        """
        for _ in range(count):
            yield self.generate()


class UserGenerator(BaseGenerator):
    """Generate synthetic library members."""

    def generate(self, role: Role = Role.USER, created_before: datetime | None = None) -> User:
        """Generate a user; accounts predate any generated loan by default."""
        first = self.fake.first_name()
        last = self.fake.last_name()
        username = f"{first}{last}".lower().replace(" ", "")
        end = created_before or "-400d"
        return User(
            user_id=self.new_id(),
            username=username,
            email=f"{username}{random.randint(1, 999)}@{self.fake.free_email_domain()}",
            role=role,
            created_at=self.fake.date_time_between(start_date="-3y", end_date=end, tzinfo=timezone.utc),
        )

    def generate_batch(self, count: int, admin_count: int = 0) -> Iterator[User]:
        """Generate ``count`` users, the first ``admin_count`` of them admins."""
        for i in range(count):
            yield self.generate(Role.ADMIN if i < admin_count else Role.USER)
