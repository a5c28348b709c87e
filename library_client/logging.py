"""Structured logging configuration for library-client."""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from typing import Any, Callable

# Called with a list of serialized entries; returns True when delivered.
LogPoster = Callable[[list[dict[str, Any]]], bool]


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
) -> None:
    """Configure logging for library-client.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    format_type : str
        Format type: "standard" or "json".
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("library_client").setLevel(log_level)

    # Reduce noise from external libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("faker").setLevel(logging.WARNING)


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra"):
            log_data.update(record.extra)

        return json.dumps(log_data, default=str)


class RemoteLogHandler(logging.handlers.BufferingHandler):
    """Buffer log records and ship them in batches to the API log endpoint.

    Records are flushed once ``capacity`` entries are buffered, or when
    ``flush()``/``close()`` is called. Entries that fail to deliver are kept
    (up to ``max_queue``) and retried with the next batch. Delivery problems
    are never raised into the caller.

    Parameters
    ----------
    poster : LogPoster
        Callable that delivers a batch.
    capacity : int
        Batch size.
    max_entry_size : int
        Maximum serialized message length; longer messages are truncated.
    user_context : Callable[[], dict | None] | None
        Returns ``{"id": ..., "username": ...}`` for the signed-in user.
    max_queue : int
        Maximum undelivered entries kept for retry.
    """

    def __init__(
        self,
        poster: LogPoster,
        capacity: int = 12,
        max_entry_size: int = 16 * 1024,
        user_context: Callable[[], dict[str, Any] | None] | None = None,
        max_queue: int = 200,
    ) -> None:
        super().__init__(capacity)
        self.poster = poster
        self.max_entry_size = max_entry_size
        self.user_context = user_context
        self.max_queue = max_queue
        self.pending: list[dict[str, Any]] = []

    def _truncate(self, text: str) -> str:
        if len(text) <= self.max_entry_size:
            return text
        return text[: self.max_entry_size - 100] + "...[truncated]"

    def serialize(self, record: logging.LogRecord) -> dict[str, Any]:
        """Convert a record into the wire entry."""
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": self._truncate(record.getMessage()),
        }
        if record.exc_info:
            entry["stack"] = self._truncate(logging.Formatter().formatException(record.exc_info))
        if hasattr(record, "extra"):
            entry["meta"] = record.extra
        if self.user_context is not None:
            try:
                entry["user"] = self.user_context()
            except Exception:  # noqa: BLE001 - context lookup is best effort
                entry["user"] = None
        return entry

    def flush(self) -> None:
        """Deliver buffered records, keeping them for retry on failure."""
        self.acquire()
        try:
            batch = self.pending + [self.serialize(r) for r in self.buffer]
            self.buffer = []
            if not batch:
                return
            try:
                delivered = self.poster(batch)
            except Exception:  # noqa: BLE001 - log shipping must never raise
                delivered = False
            self.pending = [] if delivered else batch[-self.max_queue :]
        finally:
            self.release()
