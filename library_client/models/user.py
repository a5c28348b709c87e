"""User and session models."""

from dataclasses import dataclass
from datetime import datetime

from library_client.models.enums import Role


@dataclass
class User:
    """Library user; only ``ban_until`` matters to the loan policy."""

    user_id: str
    username: str
    email: str
    role: Role = Role.USER
    ban_until: datetime | None = None
    created_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass
class TokenPair:
    """Access and refresh tokens issued by the auth endpoints."""

    access_token: str
    refresh_token: str
