"""Tests for LibraryDataStore."""

from datetime import timedelta
from decimal import Decimal

import pytest

from library_client.exceptions import (
    BorrowRejectedError,
    EntityNotFoundError,
    InvalidEntityStateError,
    ReferentialIntegrityError,
)
from library_client.models import Book, Loan, RejectionReason, User
from library_client.policy import BAN_MULTIPLIER, LATE_FEE_PER_DAY, LOAN_DURATION, ONE_DAY
from library_client.store import LibraryDataStore


@pytest.fixture
def store(user: User, admin: User, book: Book) -> LibraryDataStore:
    """Store with one member, one admin and one book."""
    store = LibraryDataStore()
    store.add_user(user)
    store.add_user(admin)
    store.add_book(book)
    return store


class TestAddEntities:
    """Tests for adding entities."""

    def test_add_loan_requires_user(self, store, make_loan, now) -> None:
        with pytest.raises(ReferentialIntegrityError, match="User ghost not found"):
            store.add_loan(make_loan(now, user_id="ghost"))

    def test_add_loan_requires_book(self, store, make_loan, now) -> None:
        with pytest.raises(ReferentialIntegrityError, match="Book ghost not found"):
            store.add_loan(make_loan(now, book_id="ghost"))

    def test_return_fields_must_agree(self, store, make_loan, now) -> None:
        with pytest.raises(InvalidEntityStateError):
            store.add_loan(make_loan(now, is_returned=True))

    def test_add_loan_indexes_relationships(self, store, make_loan, now) -> None:
        loan = make_loan(now)
        store.add_loan(loan)

        assert store.get_user_loans("user-001") == [loan]
        assert store.get_book_loans("book-001") == [loan]

    def test_re_adding_replaces_without_duplicate_index(self, store, make_loan, now) -> None:
        store.add_loan(make_loan(now))
        updated = make_loan(now, book_title="Dune")
        store.add_loan(updated)

        assert store.get_user_loans("user-001") == [updated]

    def test_get_loan_unknown(self, store) -> None:
        with pytest.raises(EntityNotFoundError):
            store.get_loan("missing")


class TestOpenLoan:
    """Tests for opening loans through the eligibility guard."""

    def test_open_loan_sets_dates(self, store, now) -> None:
        loan = store.open_loan("loan-1", "user-001", "book-001", now)

        assert loan.loan_date == now
        assert loan.due_date == now + LOAN_DURATION
        assert loan.book_title == "Dune"
        assert loan.username == "reader"
        assert store.books["book-001"].available is False

    def test_second_loan_hits_limit(self, store, now) -> None:
        store.add_book(Book(book_id="book-002", title="Emma", author="Jane Austen", category="Classic"))
        store.open_loan("loan-1", "user-001", "book-001", now)

        with pytest.raises(BorrowRejectedError) as exc_info:
            store.open_loan("loan-2", "user-001", "book-002", now)

        assert exc_info.value.reason == RejectionReason.LOAN_LIMIT
        assert "loan-2" not in store.loans

    def test_banned_user_rejected(self, store, now) -> None:
        store.users["user-001"].ban_until = now + ONE_DAY

        with pytest.raises(BorrowRejectedError) as exc_info:
            store.open_loan("loan-1", "user-001", "book-001", now)

        assert exc_info.value.reason == RejectionReason.BANNED
        assert store.loans == {}

    def test_unavailable_book(self, store, now) -> None:
        store.books["book-001"].available = False

        with pytest.raises(InvalidEntityStateError):
            store.open_loan("loan-1", "user-001", "book-001", now)

    def test_unknown_references(self, store, now) -> None:
        with pytest.raises(ReferentialIntegrityError):
            store.open_loan("loan-1", "ghost", "book-001", now)
        with pytest.raises(ReferentialIntegrityError):
            store.open_loan("loan-1", "user-001", "ghost", now)


class TestReturnLoan:
    """Tests for returns, fees and bans."""

    def test_on_time_return(self, store, now) -> None:
        store.open_loan("loan-1", "user-001", "book-001", now)

        loan = store.return_loan("loan-1", now + 5 * ONE_DAY)

        assert loan.is_returned
        assert loan.days_late == 0
        assert loan.late_fee == 0
        assert store.users["user-001"].ban_until is None
        assert store.books["book-001"].available is True

    def test_late_return_freezes_fee_and_bans(self, store, now) -> None:
        loan = store.open_loan("loan-1", "user-001", "book-001", now)
        returned_at = loan.due_date + 3 * ONE_DAY

        store.return_loan("loan-1", returned_at)
        store.refresh(returned_at + 20 * ONE_DAY)

        assert loan.days_late == 3
        assert loan.late_fee == 3 * LATE_FEE_PER_DAY
        assert store.users["user-001"].ban_until == returned_at + timedelta(days=3 * BAN_MULTIPLIER)

    def test_double_return_rejected(self, store, now) -> None:
        store.open_loan("loan-1", "user-001", "book-001", now)
        store.return_loan("loan-1", now + ONE_DAY)

        with pytest.raises(InvalidEntityStateError):
            store.return_loan("loan-1", now + 2 * ONE_DAY)


class TestFees:
    """Tests for fee payment and waivers."""

    @pytest.fixture
    def late_loan(self, store, now) -> Loan:
        loan = store.open_loan("loan-1", "user-001", "book-001", now)
        store.return_loan("loan-1", loan.due_date + 2 * ONE_DAY)
        return loan

    def test_mark_fee_paid(self, store, late_loan, now) -> None:
        paid_at = now + 30 * ONE_DAY

        store.mark_fee_paid("loan-1", "stripe", paid_at)

        assert late_loan.late_fee_paid
        assert late_loan.late_fee_payment_date == paid_at
        assert late_loan.payment_method == "stripe"
        assert store.unpaid_total("user-001") == Decimal("0")

    def test_fee_paid_once(self, store, late_loan, now) -> None:
        store.mark_fee_paid("loan-1", "stripe", now)

        with pytest.raises(InvalidEntityStateError):
            store.mark_fee_paid("loan-1", "iyzico", now)

    def test_nothing_to_pay(self, store, now) -> None:
        store.open_loan("loan-1", "user-001", "book-001", now)
        store.return_loan("loan-1", now + ONE_DAY)

        with pytest.raises(InvalidEntityStateError):
            store.mark_fee_paid("loan-1", "stripe", now)

    def test_unpaid_fee_blocks_next_loan(self, store, late_loan, now) -> None:
        store.users["user-001"].ban_until = None

        with pytest.raises(BorrowRejectedError) as exc_info:
            store.open_loan("loan-2", "user-001", "book-001", now + 60 * ONE_DAY)

        assert exc_info.value.reason == RejectionReason.UNPAID_FEES

    def test_waived_fee_unblocks(self, store, late_loan, now) -> None:
        store.waive_fee("loan-1")
        store.refresh(now + 90 * ONE_DAY)

        assert late_loan.late_fee == 0
        loan = store.open_loan("loan-2", "user-001", "book-001", now + 60 * ONE_DAY)
        assert loan.loan_id == "loan-2"


class TestQueries:
    """Tests for store queries."""

    def test_active_loans_and_summary(self, store, now) -> None:
        store.open_loan("loan-1", "user-001", "book-001", now)

        assert [loan.loan_id for loan in store.get_active_loans("user-001")] == ["loan-1"]
        assert store.summary() == {"users": 2, "books": 1, "loans": 1, "active_loans": 1}

    def test_unknown_user_has_no_loans(self, store) -> None:
        assert store.get_user_loans("ghost") == []
        assert store.get_book_loans("ghost") == []
