"""Catalog models: books, reviews and favorites."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Book:
    """Catalog entry."""

    book_id: str
    title: str
    author: str
    category: str
    available: bool = True
    image_url: str | None = None
    description: str | None = None
    review_count: int = 0
    avg_rating: float | None = None
    is_favorite: bool = False
    created_at: datetime | None = None


@dataclass
class Review:
    review_id: str
    book_id: str
    user_id: str | None
    rating: int
    review_text: str
    username: str | None = None
    created_at: datetime | None = None


@dataclass
class Favorite:
    favorite_id: str
    book_id: str
    book_title: str | None = None


@dataclass
class LibraryStats:
    """Library-wide counters shown on the home page."""

    total_books: int = 0
    total_users: int = 0
    total_loans: int = 0
    active_loans: int = 0
