"""Book review endpoints."""

from __future__ import annotations

from typing import Any

from library_client.http import ApiClient
from library_client.models import Review
from library_client.serialization import parse_review
from library_client.validation import ReviewForm, validate_form


def _reviews(body: Any) -> list[Review]:
    items = body.get("reviews", []) if isinstance(body, dict) else body or []
    return [parse_review(item) for item in items]


class ReviewService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def for_book(self, book_id: str) -> list[Review]:
        return _reviews(self.api.get("/reviews", params={"bookId": book_id}))

    def add(self, book_id: str, review_text: str, rating: int = 5) -> Review:
        form = validate_form(ReviewForm, {"review_text": review_text, "rating": rating})
        body = self.api.post(
            "/reviews",
            json={"bookId": book_id, "reviewText": form.review_text, "rating": form.rating},
        )
        return parse_review(body)

    def delete(self, review_id: str) -> Any:
        return self.api.delete(f"/reviews/{review_id}")

    def mine(self) -> list[Review]:
        return _reviews(self.api.get("/reviews/my-reviews"))

    def all(self) -> list[Review]:
        """Every review in the library (admin only)."""
        return _reviews(self.api.get("/reviews/all"))
