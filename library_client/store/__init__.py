"""In-memory stores for library entities."""

from library_client.store.library import LibraryDataStore

__all__ = ["LibraryDataStore"]
