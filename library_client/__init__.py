"""Python client for the library-management REST API."""

from library_client.client import LibraryClient
from library_client.config import ClientConfig

__version__ = "0.1.0"

__all__ = ["ClientConfig", "LibraryClient", "__version__"]
