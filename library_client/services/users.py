"""User profile and admin user-management endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from library_client.exceptions import InvalidEntityStateError
from library_client.http import ApiClient
from library_client.models import Role, User
from library_client.serialization import parse_user, serialize_value
from library_client.validation import BanForm, ChangePasswordForm, ProfileForm, validate_form

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def profile(self) -> User:
        return parse_user(self.api.get("/users/profile"))

    def update_profile(self, **fields: Any) -> User:
        """Update the profile and the stored session snapshot."""
        form = validate_form(ProfileForm, fields)
        body = self.api.put("/users/profile", json=form.to_api())
        user = parse_user(body.get("user", body))
        self.api.session.update_profile(user)
        return user

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> Any:
        form = validate_form(
            ChangePasswordForm,
            {
                "current_password": current_password,
                "new_password": new_password,
                "confirm_password": confirm_password,
            },
        )
        return self.api.put(
            "/users/password",
            json={"currentPassword": form.current_password, "newPassword": form.new_password},
        )

    # Admin
    def list_users(self) -> list[User]:
        body = self.api.get("/users")
        items = body.get("users", []) if isinstance(body, dict) else body or []
        return [parse_user(item) for item in items]

    def update_user(self, user_id: str, **changes: Any) -> Any:
        """Update role and/or ban; ``ban_until=None`` lifts a ban."""
        payload: dict[str, Any] = {}
        if "role" in changes:
            role = changes["role"]
            payload["role"] = role.value if isinstance(role, Role) else role
        if "ban_until" in changes:
            payload["banUntil"] = serialize_value(changes["ban_until"])
        return self.api.put(f"/users/{user_id}", json=payload)

    def set_role(self, user_id: str, role: Role) -> Any:
        return self.update_user(user_id, role=role)

    def ban_user(self, user: User, days: int, now: datetime | None = None) -> datetime:
        """Ban ``user`` for ``days`` days; admins cannot be banned."""
        if user.is_admin:
            raise InvalidEntityStateError("Admin users cannot be banned")
        form = validate_form(BanForm, {"days": days})
        ban_until = (now or datetime.now(timezone.utc)) + timedelta(days=form.days)
        self.update_user(user.user_id, ban_until=ban_until)
        logger.info("Banned user %s until %s", user.user_id, ban_until.isoformat())
        return ban_until

    def unban_user(self, user_id: str) -> Any:
        return self.update_user(user_id, ban_until=None)

    def delete_user(self, user_id: str) -> Any:
        return self.api.delete(f"/users/{user_id}")
