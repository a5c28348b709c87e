"""Library data store with referential integrity and loan lifecycle rules."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from library_client.exceptions import (
    BorrowRejectedError,
    EntityNotFoundError,
    InvalidEntityStateError,
    ReferentialIntegrityError,
)
from library_client.models import Book, Loan, User
from library_client.notifications import rejection_message
from library_client.policy import (
    apply_return_ban,
    assess,
    check_borrow_eligibility,
    plan_loan,
    refresh_assessment,
    waive,
)


@dataclass
class LibraryDataStore:
    """In-memory store for library entities with relationship tracking.

    Holds records fetched from the API (or generated samples) and applies the
    loan lifecycle transitions locally: a loan is returned at most once, a
    fee is paid or waived at most once, and returns impose bans.
    """

    # Primary entities
    users: dict[str, User] = field(default_factory=dict)
    books: dict[str, Book] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)

    # Relationship indexes
    _user_loans: dict[str, list[str]] = field(default_factory=dict)
    _book_loans: dict[str, list[str]] = field(default_factory=dict)

    def add_user(self, user: User) -> None:
        """Add a user to the store."""
        self.users[user.user_id] = user
        self._user_loans.setdefault(user.user_id, [])

    def add_book(self, book: Book) -> None:
        """Add a book to the store."""
        self.books[book.book_id] = book
        self._book_loans.setdefault(book.book_id, [])

    def add_loan(self, loan: Loan) -> None:
        """Add an existing loan to the store."""
        if loan.user_id not in self.users:
            raise ReferentialIntegrityError(f"User {loan.user_id} not found")

        if loan.book_id not in self.books:
            raise ReferentialIntegrityError(f"Book {loan.book_id} not found")

        if loan.is_returned != (loan.return_date is not None):
            raise InvalidEntityStateError(f"Loan {loan.loan_id} has inconsistent return fields")

        if loan.loan_id not in self.loans:
            self._user_loans[loan.user_id].append(loan.loan_id)
            self._book_loans[loan.book_id].append(loan.loan_id)
        self.loans[loan.loan_id] = loan

    def get_loan(self, loan_id: str) -> Loan:
        try:
            return self.loans[loan_id]
        except KeyError:
            raise EntityNotFoundError(f"Loan {loan_id} not found") from None

    # Lifecycle transitions
    def open_loan(self, loan_id: str, user_id: str, book_id: str, now: datetime) -> Loan:
        """Start a loan after the eligibility guard approves it."""
        user = self.users.get(user_id)
        if user is None:
            raise ReferentialIntegrityError(f"User {user_id} not found")
        book = self.books.get(book_id)
        if book is None:
            raise ReferentialIntegrityError(f"Book {book_id} not found")

        decision = check_borrow_eligibility(user, self.get_user_loans(user_id), now)
        if not decision.allowed:
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
        if not book.available:
            raise InvalidEntityStateError(f"Book {book_id} is not available")

        plan = plan_loan(now)
        loan = Loan(
            loan_id=loan_id,
            user_id=user_id,
            book_id=book_id,
            loan_date=plan.loan_date,
            due_date=plan.due_date,
            book_title=book.title,
            username=user.username,
            user_email=user.email,
        )
        book.available = False
        self.add_loan(loan)
        return loan

    def return_loan(self, loan_id: str, now: datetime) -> Loan:
        """Return a loan: freeze its fee and impose any ban on the borrower."""
        loan = self.get_loan(loan_id)
        if loan.is_returned:
            raise InvalidEntityStateError(f"Loan {loan_id} has already been returned")

        loan.return_date = now
        loan.is_returned = True
        result = assess(loan, now)
        loan.days_late = result.days_late
        loan.late_fee = result.late_fee

        user = self.users[loan.user_id]
        apply_return_ban(user, now, result.days_late)

        book = self.books.get(loan.book_id)
        if book is not None:
            book.available = True
        return loan

    def mark_fee_paid(self, loan_id: str, payment_method: str, now: datetime) -> Loan:
        """Record the late-fee payment; a fee is paid only once."""
        loan = self.get_loan(loan_id)
        if loan.late_fee_paid:
            raise InvalidEntityStateError(f"Late fee for loan {loan_id} has already been paid")
        if loan.late_fee <= 0:
            raise InvalidEntityStateError(f"Loan {loan_id} has no late fee to pay")

        loan.late_fee_paid = True
        loan.late_fee_payment_date = now
        loan.payment_method = payment_method
        return loan

    def waive_fee(self, loan_id: str) -> Loan:
        """Zero a loan's fee for good."""
        return waive(self.get_loan(loan_id))

    def refresh(self, now: datetime) -> None:
        """Recompute provisional fees of loans still out."""
        for loan in self.loans.values():
            refresh_assessment(loan, now)

    # Query methods
    def get_user_loans(self, user_id: str) -> list[Loan]:
        """Get all loans for a user."""
        loan_ids = self._user_loans.get(user_id, [])
        return [self.loans[lid] for lid in loan_ids]

    def get_book_loans(self, book_id: str) -> list[Loan]:
        """Get all loans for a book."""
        loan_ids = self._book_loans.get(book_id, [])
        return [self.loans[lid] for lid in loan_ids]

    def get_active_loans(self, user_id: str) -> list[Loan]:
        return [loan for loan in self.get_user_loans(user_id) if not loan.is_returned]

    def unpaid_total(self, user_id: str) -> Decimal:
        return sum(
            (loan.late_fee for loan in self.get_user_loans(user_id) if loan.late_fee > 0 and not loan.late_fee_paid),
            Decimal("0"),
        )

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "users": len(self.users),
            "books": len(self.books),
            "loans": len(self.loans),
            "active_loans": sum(1 for loan in self.loans.values() if not loan.is_returned),
        }
