"""Pytest configuration and fixtures."""

import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest
import requests

from library_client.config import ApiConfig
from library_client.http import ApiClient
from library_client.models import Book, Loan, Role, TokenPair, User
from library_client.policy import LOAN_DURATION
from library_client.session import Session
from library_client.storage import MemoryStorage

API_BASE = "http://api.test/api"


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation instant."""
    return datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def user() -> User:
    """Regular member with no ban."""
    return User(user_id="user-001", username="reader", email="reader@example.com")


@pytest.fixture
def admin() -> User:
    """Administrator."""
    return User(user_id="admin-001", username="librarian", email="admin@example.com", role=Role.ADMIN)


@pytest.fixture
def book() -> Book:
    """Available book."""
    return Book(book_id="book-001", title="Dune", author="Frank Herbert", category="Novel")


@pytest.fixture
def make_loan() -> Callable[..., Loan]:
    """Factory for loans starting at ``loan_date`` with the policy due date."""

    def _make(
        loan_date: datetime,
        loan_id: str = "loan-001",
        user_id: str = "user-001",
        book_id: str = "book-001",
        **overrides: Any,
    ) -> Loan:
        fields: dict[str, Any] = {
            "loan_id": loan_id,
            "user_id": user_id,
            "book_id": book_id,
            "loan_date": loan_date,
            "due_date": loan_date + LOAN_DURATION,
        }
        fields.update(overrides)
        if "late_fee" in fields:
            fields["late_fee"] = Decimal(str(fields["late_fee"]))
        return Loan(**fields)

    return _make


@pytest.fixture
def storage() -> MemoryStorage:
    """Empty in-memory storage."""
    return MemoryStorage()


@pytest.fixture
def session(storage: MemoryStorage) -> Session:
    """Anonymous session over ``storage``."""
    return Session(storage)


@pytest.fixture
def logged_in(session: Session, user: User) -> Session:
    """Session holding a token pair for ``user``."""
    session.login(TokenPair(access_token="access-1", refresh_token="refresh-1"), user)
    return session


@pytest.fixture
def http() -> MagicMock:
    """Mocked ``requests.Session``."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api(session: Session, http: MagicMock) -> ApiClient:
    """ApiClient over the mocked HTTP session."""
    return ApiClient(ApiConfig(base_url=API_BASE), session, http=http)


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    """Factory for real ``requests.Response`` objects with a JSON body."""

    def _make(status: int = 200, body: Any = None) -> requests.Response:
        response = requests.Response()
        response.status_code = status
        response._content = b"" if body is None else json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
        response.encoding = "utf-8"
        return response

    return _make


@pytest.fixture
def mock_api() -> MagicMock:
    """ApiClient double for service tests."""
    api = MagicMock(spec=ApiClient)
    api.session = MagicMock(spec=Session)
    return api
