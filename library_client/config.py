"""Configuration management for library-client."""

from dataclasses import dataclass, field
from pathlib import Path

from library_client.exceptions import ConfigurationError

DEFAULT_API_URL = "http://localhost:3000/api"


@dataclass
class ApiConfig:
    """REST API connection configuration."""

    base_url: str = DEFAULT_API_URL
    timeout: float = 10.0

    def url(self, path: str) -> str:
        """Join an endpoint path onto the base URL."""
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


@dataclass
class StorageConfig:
    """Durable client storage configuration.

    ``path`` of ``None`` keeps tokens in memory only.
    """

    path: Path | None = None


@dataclass
class RemoteLogConfig:
    """Remote log shipping configuration."""

    enabled: bool = False
    endpoint: str = "/logs"
    api_key: str = ""
    batch_size: int = 12
    max_entry_size: int = 16 * 1024


@dataclass
class ClientConfig:
    """Main configuration for library-client."""

    api: ApiConfig = field(default_factory=ApiConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    remote_logs: RemoteLogConfig = field(default_factory=RemoteLogConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Create config from environment variables."""
        import os

        try:
            timeout = float(os.getenv("LIBRARY_API_TIMEOUT", "10"))
        except ValueError as exc:
            raise ConfigurationError(f"LIBRARY_API_TIMEOUT must be a number: {exc}") from exc
        if timeout <= 0:
            raise ConfigurationError("LIBRARY_API_TIMEOUT must be positive")

        api = ApiConfig(
            base_url=os.getenv("LIBRARY_API_URL", DEFAULT_API_URL),
            timeout=timeout,
        )

        storage_path = os.getenv("LIBRARY_STORAGE_PATH")
        storage = StorageConfig(path=Path(storage_path) if storage_path else None)

        remote_logs = RemoteLogConfig(
            enabled=os.getenv("LIBRARY_REMOTE_LOGS", "false").lower() == "true",
            endpoint=os.getenv("LIBRARY_LOG_ENDPOINT", "/logs"),
            api_key=os.getenv("LIBRARY_LOG_API_KEY", ""),
        )

        return cls(
            api=api,
            storage=storage,
            remote_logs=remote_logs,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
