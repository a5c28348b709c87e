"""Top-level client wiring storage, session, HTTP and every service."""

from __future__ import annotations

import logging
from typing import Any

from library_client.config import ClientConfig
from library_client.http import ApiClient
from library_client.logging import RemoteLogHandler, setup_logging
from library_client.notifications import Notifier
from library_client.payments import PaymentConfirmationFlow
from library_client.services import (
    AuthService,
    BookService,
    FavoriteService,
    LoanService,
    MessageService,
    PaymentService,
    ReviewService,
    UserService,
)
from library_client.session import Session
from library_client.storage import MemoryStorage, open_storage
from library_client.store import LibraryDataStore

logger = logging.getLogger(__name__)


class LibraryClient:
    """Entry point for applications talking to the library API.

    Examples
    --------
    >>> client = LibraryClient.from_config(ClientConfig.from_env())
    >>> client.auth.login("reader@example.com", "secret1")
    >>> client.books.list_books(category="science")
    """

    def __init__(
        self,
        config: ClientConfig,
        storage: MemoryStorage,
        api: ApiClient,
        notifier: Notifier | None = None,
    ) -> None:
        self.config = config
        self.storage = storage
        self.api = api
        self.session = api.session
        self.notifier = notifier or Notifier()
        self.store = LibraryDataStore()

        self.auth = AuthService(api)
        self.favorites = FavoriteService(api)
        self.books = BookService(api, favorites=self.favorites)
        self.loans = LoanService(api)
        self.reviews = ReviewService(api)
        self.messages = MessageService(api)
        self.payments = PaymentService(api)
        self.users = UserService(api)
        self.payment_flow = PaymentConfirmationFlow(self.payments, storage, self.notifier, store=self.store)
        self.log_handler: RemoteLogHandler | None = None

    @classmethod
    def from_config(cls, config: ClientConfig | None = None, configure_logging: bool = False) -> "LibraryClient":
        """Build a client and restore any session left in storage."""
        config = config or ClientConfig.from_env()
        if configure_logging:
            setup_logging(config.log_level, config.log_format)

        storage = open_storage(config.storage.path)
        session = Session(storage)
        session.restore()
        client = cls(config, storage, ApiClient(config.api, session))

        if config.remote_logs.enabled:
            client.enable_remote_logs()
        logger.debug("Client ready (session %s)", session.state.value)
        return client

    def enable_remote_logs(self) -> RemoteLogHandler:
        """Attach a handler shipping ``library_client`` records to the API."""
        settings = self.config.remote_logs
        handler = RemoteLogHandler(
            self._post_logs,
            capacity=settings.batch_size,
            max_entry_size=settings.max_entry_size,
            user_context=self._log_user,
        )
        handler.setLevel(logging.INFO)
        logging.getLogger("library_client").addHandler(handler)
        self.log_handler = handler
        return handler

    def close(self) -> None:
        if self.log_handler is not None:
            self.log_handler.close()
            logging.getLogger("library_client").removeHandler(self.log_handler)
            self.log_handler = None
        self.api.http.close()

    def _post_logs(self, entries: list[dict[str, Any]]) -> bool:
        # Sent on the raw HTTP session so shipping never goes through token refresh.
        settings = self.config.remote_logs
        headers = {"x-log-key": settings.api_key} if settings.api_key else {}
        response = self.api.http.post(
            self.config.api.url(settings.endpoint),
            json={"logs": entries},
            headers=headers,
            timeout=self.config.api.timeout,
        )
        return response.ok

    def _log_user(self) -> dict[str, Any] | None:
        user = self.session.user
        if user is None:
            return None
        return {"id": user.user_id, "username": user.username}
