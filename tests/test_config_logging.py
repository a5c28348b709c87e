"""Tests for config and logging."""

import json
import logging
import os
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from library_client.config import (
    DEFAULT_API_URL,
    ApiConfig,
    ClientConfig,
    RemoteLogConfig,
    StorageConfig,
)
from library_client.exceptions import ConfigurationError
from library_client.logging import JsonFormatter, RemoteLogHandler, setup_logging


def _record(msg: str = "Test message", level: int = logging.INFO, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="library_client.test",
        level=level,
        pathname="/path/to/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestApiConfig:
    """Tests for ApiConfig."""

    def test_default_values(self) -> None:
        config = ApiConfig()

        assert config.base_url == DEFAULT_API_URL
        assert config.timeout == 10.0

    @pytest.mark.parametrize(
        "base, path",
        [("http://h/api", "/books"), ("http://h/api/", "books"), ("http://h/api/", "/books")],
    )
    def test_url_join(self, base: str, path: str) -> None:
        assert ApiConfig(base_url=base).url(path) == "http://h/api/books"


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_default_values(self) -> None:
        config = ClientConfig()

        assert config.storage == StorageConfig()
        assert config.remote_logs == RemoteLogConfig()
        assert config.remote_logs.batch_size == 12
        assert config.log_level == "INFO"

    def test_from_env_default(self) -> None:
        """Test loading config from environment with defaults."""
        with patch.dict(os.environ, {}, clear=True):
            config = ClientConfig.from_env()

        assert config.api.base_url == DEFAULT_API_URL
        assert config.storage.path is None
        assert config.remote_logs.enabled is False
        assert config.log_format == "standard"

    def test_from_env_custom(self) -> None:
        """Test loading config from environment with custom values."""
        env = {
            "LIBRARY_API_URL": "https://library.example.com/api",
            "LIBRARY_API_TIMEOUT": "2.5",
            "LIBRARY_STORAGE_PATH": "/tmp/library.json",
            "LIBRARY_REMOTE_LOGS": "TRUE",
            "LIBRARY_LOG_ENDPOINT": "/client-logs",
            "LIBRARY_LOG_API_KEY": "k",
            "LOG_LEVEL": "DEBUG",
            "LOG_FORMAT": "json",
        }
        with patch.dict(os.environ, env, clear=True):
            config = ClientConfig.from_env()

        assert config.api.base_url == "https://library.example.com/api"
        assert config.api.timeout == 2.5
        assert config.storage.path == Path("/tmp/library.json")
        assert config.remote_logs.enabled is True
        assert config.remote_logs.endpoint == "/client-logs"
        assert config.remote_logs.api_key == "k"
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    @pytest.mark.parametrize("value", ["soon", "0", "-1"])
    def test_from_env_bad_timeout(self, value: str) -> None:
        with patch.dict(os.environ, {"LIBRARY_API_TIMEOUT": value}, clear=True):
            with pytest.raises(ConfigurationError):
                ClientConfig.from_env()


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_debug(self) -> None:
        setup_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("library_client").level == logging.DEBUG

    def test_setup_logging_invalid_level(self) -> None:
        """Test that an invalid level falls back to INFO."""
        setup_logging(level="LOUD")

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_json_format(self) -> None:
        setup_logging(format_type="json")

        assert any(isinstance(h.formatter, JsonFormatter) for h in logging.getLogger().handlers)

    def test_setup_logging_replaces_handlers(self) -> None:
        logger = logging.getLogger()
        logger.addHandler(logging.StreamHandler())
        logger.addHandler(logging.StreamHandler())

        setup_logging()

        assert len(logger.handlers) == 1

    def test_external_loggers_quieted(self) -> None:
        setup_logging(level="DEBUG")

        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("faker").level == logging.WARNING


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_format_basic(self) -> None:
        data = json.loads(JsonFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "library_client.test"
        assert data["message"] == "Test message"
        assert "timestamp" in data

    def test_format_with_exception(self) -> None:
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(_record("Error occurred", logging.ERROR, exc_info)))

        assert "ValueError" in data["exception"]

    def test_format_with_extra(self) -> None:
        record = _record()
        record.extra = {"loan_id": "loan-1"}

        data = json.loads(JsonFormatter().format(record))

        assert data["loan_id"] == "loan-1"


class TestRemoteLogHandler:
    """Tests for batched remote log shipping."""

    def test_flushes_when_batch_full(self) -> None:
        poster = MagicMock(return_value=True)
        handler = RemoteLogHandler(poster, capacity=3)

        for i in range(3):
            handler.handle(_record(f"message {i}"))

        poster.assert_called_once()
        batch = poster.call_args.args[0]
        assert [entry["message"] for entry in batch] == ["message 0", "message 1", "message 2"]
        assert batch[0]["level"] == "info"
        assert handler.buffer == []

    def test_waits_for_full_batch(self) -> None:
        poster = MagicMock(return_value=True)
        handler = RemoteLogHandler(poster, capacity=3)

        handler.handle(_record())

        poster.assert_not_called()

    def test_failed_delivery_retried_with_next_batch(self) -> None:
        poster = MagicMock(side_effect=[False, True])
        handler = RemoteLogHandler(poster, capacity=1)

        handler.handle(_record("first"))
        assert [entry["message"] for entry in handler.pending] == ["first"]

        handler.handle(_record("second"))

        assert [entry["message"] for entry in poster.call_args.args[0]] == ["first", "second"]
        assert handler.pending == []

    def test_poster_exception_never_raises(self) -> None:
        handler = RemoteLogHandler(MagicMock(side_effect=ConnectionError("down")), capacity=1)

        handler.handle(_record())

        assert len(handler.pending) == 1

    def test_retry_queue_is_bounded(self) -> None:
        handler = RemoteLogHandler(MagicMock(return_value=False), capacity=1, max_queue=2)

        for i in range(5):
            handler.handle(_record(f"m{i}"))

        assert [entry["message"] for entry in handler.pending] == ["m3", "m4"]

    def test_long_message_truncated(self) -> None:
        handler = RemoteLogHandler(MagicMock(), max_entry_size=200)

        entry = handler.serialize(_record("x" * 500))

        assert entry["message"].endswith("...[truncated]")
        assert len(entry["message"]) < 200

    def test_user_context_attached(self) -> None:
        handler = RemoteLogHandler(MagicMock(), user_context=lambda: {"id": "u1", "username": "ada"})

        assert handler.serialize(_record())["user"] == {"id": "u1", "username": "ada"}

    def test_broken_user_context(self) -> None:
        def broken() -> dict:
            raise RuntimeError("no session")

        handler = RemoteLogHandler(MagicMock(), user_context=broken)

        assert handler.serialize(_record())["user"] is None

    def test_close_flushes(self) -> None:
        poster = MagicMock(return_value=True)
        handler = RemoteLogHandler(poster, capacity=10)
        handler.handle(_record())

        handler.close()

        poster.assert_called_once()


class TestPackageInit:
    """Tests for library_client __init__.py."""

    def test_version_exported(self) -> None:
        from library_client import __version__

        assert isinstance(__version__, str)
