"""Favorite book endpoints."""

from __future__ import annotations

from typing import Any

from library_client.http import ApiClient
from library_client.models import Favorite
from library_client.serialization import parse_favorite


class FavoriteService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def add(self, book_id: str) -> Any:
        return self.api.post("/users/favorites", json={"bookId": book_id})

    def remove(self, favorite_id: str) -> Any:
        return self.api.delete(f"/users/favorites/{favorite_id}")

    def list(self) -> list[Favorite]:
        # The API answers either {"favorites": [...]} or a bare list
        body = self.api.get("/users/favorites")
        items = body.get("favorites", []) if isinstance(body, dict) else body or []
        return [parse_favorite(item) for item in items]
