"""Session state machine over durable token storage.

States move ``ANONYMOUS -> AUTHENTICATED -> REFRESHING -> AUTHENTICATED``
(refresh succeeded or failed transiently) or ``-> ANONYMOUS`` (refresh token
rejected, or logout). Every transition writes its storage keys in a single
``update`` call so tokens and profile are never left half-written.
"""

from __future__ import annotations

import json
import logging

from library_client.exceptions import InvalidEntityStateError
from library_client.models import SessionState, TokenPair, User
from library_client.serialization import parse_user, user_to_api
from library_client.storage import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    USER_KEY,
    MemoryStorage,
    read_clean,
)

logger = logging.getLogger(__name__)


class Session:
    """Current user and tokens, persisted through ``storage``."""

    def __init__(self, storage: MemoryStorage) -> None:
        self.storage = storage
        self.state = SessionState.ANONYMOUS
        self.user: User | None = None

    @property
    def access_token(self) -> str | None:
        return read_clean(self.storage, ACCESS_TOKEN_KEY)

    @property
    def refresh_token(self) -> str | None:
        return read_clean(self.storage, REFRESH_TOKEN_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.state != SessionState.ANONYMOUS

    def restore(self) -> SessionState:
        """Load the session left in storage by a previous run."""
        raw_user = read_clean(self.storage, USER_KEY)
        if raw_user is None:
            return self.state
        try:
            self.user = parse_user(json.loads(raw_user))
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Stored user profile is unreadable: %s", exc)
            return self.state

        if self.refresh_token is not None:
            self.state = SessionState.AUTHENTICATED
            if self.access_token is None:
                logger.warning("Access token missing but refresh token present; refreshing on next call")
        elif self.access_token is not None:
            self.state = SessionState.AUTHENTICATED
        return self.state

    def login(self, tokens: TokenPair, user: User) -> None:
        """Store tokens and profile from a successful login."""
        self.storage.update(
            {
                ACCESS_TOKEN_KEY: tokens.access_token,
                REFRESH_TOKEN_KEY: tokens.refresh_token,
                USER_KEY: json.dumps(user_to_api(user)),
            }
        )
        self.user = user
        self.state = SessionState.AUTHENTICATED
        logger.info("Logged in as %s", user.username)

    def logout(self) -> None:
        """Forget tokens and profile."""
        self._clear()
        logger.info("Logged out")

    def begin_refresh(self) -> str:
        """Enter ``REFRESHING``; returns the refresh token to present."""
        token = self.refresh_token
        if token is None:
            raise InvalidEntityStateError("No refresh token available")
        self.state = SessionState.REFRESHING
        return token

    def complete_refresh(self, tokens: TokenPair) -> None:
        self.storage.update(
            {
                ACCESS_TOKEN_KEY: tokens.access_token,
                REFRESH_TOKEN_KEY: tokens.refresh_token,
            }
        )
        self.state = SessionState.AUTHENTICATED
        logger.debug("Access token refreshed")

    def abort_refresh(self) -> None:
        """Leave ``REFRESHING`` after a transient failure; credentials are kept."""
        if self.state == SessionState.REFRESHING:
            self.state = SessionState.AUTHENTICATED
        logger.warning("Token refresh failed transiently; keeping stored credentials")

    def expire(self) -> None:
        """The refresh token was rejected: the session is over."""
        logger.warning("Refresh token rejected; session expired")
        self._clear()

    def update_profile(self, user: User) -> None:
        self.storage.set(USER_KEY, json.dumps(user_to_api(user)))
        self.user = user

    def _clear(self) -> None:
        self.storage.update({ACCESS_TOKEN_KEY: None, REFRESH_TOKEN_KEY: None, USER_KEY: None})
        self.user = None
        self.state = SessionState.ANONYMOUS
