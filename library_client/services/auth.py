"""Authentication endpoints."""

from __future__ import annotations

import logging
from typing import Any

from library_client.exceptions import LibraryClientError
from library_client.http import ApiClient
from library_client.models import User
from library_client.serialization import parse_tokens, parse_user
from library_client.validation import (
    LoginForm,
    RegisterForm,
    ResetPasswordForm,
    validate_form,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Register, log in and out, refresh and reset passwords."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def register(self, **fields: Any) -> dict[str, Any]:
        form = validate_form(RegisterForm, fields)
        return self.api.post("/auth/register", json=form.to_api(), auth=False)

    def login(self, email: str, password: str) -> User:
        """Log in and store the session in one write."""
        form = validate_form(LoginForm, {"email": email, "password": password})
        body = self.api.post("/auth/login", json=form.model_dump(), auth=False)
        tokens = parse_tokens(body)
        user = parse_user(body["user"])
        self.api.session.login(tokens, user)
        return user

    def logout(self) -> None:
        """Tell the server, then clear local credentials whatever it answered."""
        try:
            self.api.post("/auth/logout")
        except LibraryClientError as exc:
            logger.warning("Server logout failed, clearing local session anyway: %s", exc)
        finally:
            self.api.session.logout()

    def refresh(self) -> str:
        return self.api.refresh()

    def forgot_password(self, email: str) -> dict[str, Any]:
        return self.api.post("/auth/forgot-password", json={"email": email}, auth=False)

    def reset_password(self, token: str, new_password: str, confirm_password: str) -> dict[str, Any]:
        form = validate_form(
            ResetPasswordForm,
            {"token": token, "new_password": new_password, "confirm_password": confirm_password},
        )
        return self.api.post(
            "/auth/reset-password",
            json={"token": form.token, "newPassword": form.new_password},
            auth=False,
        )
