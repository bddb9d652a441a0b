"""Factory for creating storage tables."""

from bookxpert.config import settings
from bookxpert.infrastructure.database import DatabasePool

from .base import CatalogueTable, UserTable
from .memory import InMemoryCatalogueTable, InMemoryUserTable
from .postgres import PostgresCatalogueTable, PostgresUserTable


def get_tables(db_pool: DatabasePool | None) -> tuple[CatalogueTable, UserTable]:
    """Build the catalogue and user tables for the configured backend.

    Uses STORAGE_BACKEND from settings. The postgres backend needs an
    initialized pool; the memory backend ignores it.
    """
    if settings.storage_backend == "memory":
        return InMemoryCatalogueTable(), InMemoryUserTable()

    if settings.storage_backend == "postgres":
        if db_pool is None:
            raise ValueError("STORAGE_BACKEND=postgres requires a database pool")
        return PostgresCatalogueTable(db_pool), PostgresUserTable(db_pool)

    # This should never happen due to validation in settings
    raise ValueError(
        f"Unknown storage backend: {settings.storage_backend}. "
        f"Valid options: postgres, memory"
    )
