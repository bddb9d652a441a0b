"""Base protocols, records and exceptions for local storage."""

from dataclasses import dataclass
from typing import Protocol


class StorageError(Exception):
    """Base exception for all local storage errors."""

    pass


class StorageUnavailable(StorageError):  # noqa: N818
    """Raised when the store cannot be read."""

    pass


class CommitFailed(StorageError):  # noqa: N818
    """Raised when staged changes cannot be written."""

    pass


@dataclass(frozen=True)
class PersistedRecord:
    """A catalogue table row.

    ``encoded_fields`` is the serialized field mapping, or None when the
    item has no extra data.
    """

    id: str
    name: str
    encoded_fields: bytes | None = None


@dataclass(frozen=True)
class UserRecord:
    """The locally cached signed-in user."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    profile_image: bytes | None = None


class CatalogueTable(Protocol):
    """Protocol for the key-indexed catalogue table.

    Contract:
    - Reads return committed rows in insertion order
    - insert/update/delete/delete_all only stage a change
    - commit applies every staged change atomically, or none of them
    - A failed commit raises CommitFailed and discards the staged changes
    """

    async def fetch_all(self) -> list[PersistedRecord]:
        """Return every committed record.

        Raises:
            StorageUnavailable: The store cannot be read
        """
        ...

    async def fetch_by_id(self, item_id: str) -> PersistedRecord | None:
        """Return the committed record with this id, if any."""
        ...

    def insert(self, record: PersistedRecord) -> None:
        """Stage a new record."""
        ...

    def update(self, record: PersistedRecord) -> None:
        """Stage an in-place overwrite of the record with the same id."""
        ...

    def delete(self, item_id: str) -> None:
        """Stage removal of one record."""
        ...

    def delete_all(self) -> None:
        """Stage removal of every record."""
        ...

    async def commit(self) -> None:
        """Apply staged changes.

        Raises:
            CommitFailed: Nothing was written
        """
        ...

    def rollback(self) -> None:
        """Discard staged changes."""
        ...


class UserTable(Protocol):
    """Protocol for the single-row user details table."""

    async def fetch(self) -> UserRecord | None:
        """Return the stored user, if any."""
        ...

    async def save(self, record: UserRecord) -> None:
        """Create or overwrite the stored user."""
        ...

    async def delete(self) -> None:
        """Remove the stored user."""
        ...
