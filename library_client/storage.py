"""Durable client-side storage for tokens, the profile snapshot and the payment marker."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Mapping

from library_client.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"
PENDING_PAYMENT_KEY = "pendingLateFeePayment"

# Values a careless writer may leave behind; treated as absent.
_BLANK_VALUES = {"", "undefined", "null", "None"}


class MemoryStorage:
    """String key-value storage kept in memory."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self.update({key: value})

    def remove(self, key: str) -> None:
        self.update({key: None})

    def update(self, changes: Mapping[str, str | None]) -> None:
        """Apply several sets (and removals, for ``None``) as one write."""
        with self._lock:
            data = dict(self._data)
            _apply(data, changes)
            self._write(data)
            self._data = data

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def _write(self, data: dict[str, str]) -> None:
        """Persist hook; memory storage has nothing to do."""


class JsonFileStorage(MemoryStorage):
    """Storage persisted to a single JSON file.

    Every update rewrites the file through a temporary file and
    ``os.replace`` so a crash never leaves half of a multi-key update.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Cannot read client storage {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Client storage {self.path} is not a JSON object")
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".storage-", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug("Client storage written: %s", sorted(data))


def _apply(data: dict[str, str], changes: Mapping[str, str | None]) -> None:
    for key, value in changes.items():
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value


def read_clean(storage: MemoryStorage, key: str) -> str | None:
    """Read ``key``, purging placeholder values such as ``"undefined"``."""
    value = storage.get(key)
    if value is None:
        return None
    if value.strip() in _BLANK_VALUES:
        storage.remove(key)
        return None
    return value


def open_storage(path: str | Path | None) -> MemoryStorage:
    """Return file-backed storage for ``path``, or memory storage for ``None``."""
    if path is None:
        return MemoryStorage()
    return JsonFileStorage(path)
