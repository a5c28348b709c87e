"""Book catalog endpoints."""

from __future__ import annotations

import logging
from typing import Any, BinaryIO

from library_client.exceptions import ApiError
from library_client.http import ApiClient
from library_client.models import Book, LibraryStats, SortOrder
from library_client.notifications import best_effort
from library_client.policy.constants import (
    BOOK_CATEGORIES,
    POPULAR_BOOKS_DEFAULT_DAYS,
    POPULAR_BOOKS_DEFAULT_LIMIT,
)
from library_client.serialization import parse_book, parse_books, parse_library_stats
from library_client.services.favorites import FavoriteService
from library_client.validation import BookForm, validate_form

logger = logging.getLogger(__name__)


def normalize_category(category: str | None) -> str | None:
    """Map to the catalog spelling, or capitalise (``"sCIENCE"`` -> ``"Science"``)."""
    if not category:
        return None
    for known in BOOK_CATEGORIES:
        if known.lower() == category.lower():
            return known
    return category[:1].upper() + category[1:].lower()


class BookService:
    def __init__(self, api: ApiClient, favorites: FavoriteService | None = None) -> None:
        self.api = api
        self.favorites = favorites or FavoriteService(api)

    def list_books(
        self,
        category: str | None = None,
        sort_by: str | None = None,
        order: SortOrder | str | None = None,
        search: str | None = None,
        stats: bool = True,
    ) -> list[Book]:
        """List books; review stats are requested unless ``stats`` is False."""
        params = {
            "category": normalize_category(category),
            "sortBy": sort_by,
            "order": order.value if isinstance(order, SortOrder) else order,
            "search": search,
            "stats": "1" if stats else "0",
        }
        return parse_books(self.api.get("/books", params=params))

    def list_books_with_favorites(self, **filters: Any) -> list[Book]:
        """List books and flag the user's favorites.

        A favorites failure leaves every flag as the server sent it.
        """
        books = self.list_books(**filters)
        favorite_ids = best_effort(lambda: {f.book_id for f in self.favorites.list()}, set())
        for book in books:
            book.is_favorite = book.is_favorite or book.book_id in favorite_ids
        return books

    def get_book(self, book_id: str) -> Book | None:
        """Fetch one book; ``None`` when the id is invalid or unknown."""
        try:
            return parse_book(self.api.get(f"/books/{book_id}"))
        except ApiError as exc:
            if exc.status in (400, 404):
                logger.warning("Book %s not found or invalid id: %s", book_id, exc.message)
                return None
            raise

    def create_book(self, image: BinaryIO | None = None, **fields: Any) -> Book:
        form = validate_form(BookForm, fields)
        return parse_book(self._save("POST", "/books", form, image))

    def update_book(self, book_id: str, image: BinaryIO | None = None, **fields: Any) -> Book:
        form = validate_form(BookForm, fields)
        return parse_book(self._save("PUT", f"/books/{book_id}", form, image))

    def delete_book(self, book_id: str) -> Any:
        return self.api.delete(f"/books/{book_id}")

    def popular_books(
        self,
        limit: int = POPULAR_BOOKS_DEFAULT_LIMIT,
        days: int = POPULAR_BOOKS_DEFAULT_DAYS,
    ) -> list[Book]:
        return parse_books(self.api.get("/books/popular", params={"limit": limit, "days": days}))

    def library_stats(self) -> LibraryStats:
        return parse_library_stats(self.api.get("/books/stats/library"))

    def _save(self, method: str, path: str, form: BookForm, image: BinaryIO | None) -> Any:
        payload = form.to_api()
        if image is None:
            return self.api.request(method, path, json=payload)
        payload.pop("imageUrl", None)
        fields = {k: str(v) for k, v in payload.items() if v is not None}
        name = getattr(image, "name", "cover")
        return self.api.request(method, path, data=fields, files={"image": (str(name), image)})
