"""Local storage used as the catalogue cache."""

from .base import (
    CatalogueTable,
    CommitFailed,
    PersistedRecord,
    StorageError,
    StorageUnavailable,
    UserRecord,
    UserTable,
)
from .factory import get_tables
from .memory import InMemoryCatalogueTable, InMemoryUserTable

__all__ = [
    "CatalogueTable",
    "CommitFailed",
    "InMemoryCatalogueTable",
    "InMemoryUserTable",
    "PersistedRecord",
    "StorageError",
    "StorageUnavailable",
    "UserRecord",
    "UserTable",
    "get_tables",
]
