"""In-memory storage for tests and offline runs."""

from collections.abc import Callable

from .base import CommitFailed, PersistedRecord, StorageUnavailable, UserRecord

StagedChange = Callable[[dict[str, PersistedRecord]], None]


class InMemoryCatalogueTable:
    """Catalogue table kept in a dict.

    Follows the same staged-commit contract as the Postgres table and lets
    tests inject read and commit failures.
    """

    def __init__(self, records: list[PersistedRecord] | None = None):
        """Initialize, optionally pre-populated with committed records."""
        self._rows: dict[str, PersistedRecord] = {r.id: r for r in records or []}
        self._pending: list[StagedChange] = []

        # Failure injection and call tracking for tests
        self.fail_reads = False
        self.fail_commits = False
        self.commit_count = 0

    @property
    def records(self) -> list[PersistedRecord]:
        """Committed records, for assertions."""
        return list(self._rows.values())

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._pending)

    async def fetch_all(self) -> list[PersistedRecord]:
        if self.fail_reads:
            raise StorageUnavailable("In-memory table is failing reads")
        return list(self._rows.values())

    async def fetch_by_id(self, item_id: str) -> PersistedRecord | None:
        if self.fail_reads:
            raise StorageUnavailable("In-memory table is failing reads")
        return self._rows.get(item_id)

    def insert(self, record: PersistedRecord) -> None:
        def apply(rows: dict[str, PersistedRecord]) -> None:
            if record.id in rows:
                raise CommitFailed(f"Duplicate id: {record.id}")
            rows[record.id] = record

        self._pending.append(apply)

    def update(self, record: PersistedRecord) -> None:
        def apply(rows: dict[str, PersistedRecord]) -> None:
            if record.id not in rows:
                raise CommitFailed(f"No record to update: {record.id}")
            rows[record.id] = record

        self._pending.append(apply)

    def delete(self, item_id: str) -> None:
        self._pending.append(lambda rows: rows.pop(item_id, None))

    def delete_all(self) -> None:
        self._pending.append(lambda rows: rows.clear())

    async def commit(self) -> None:
        pending, self._pending = self._pending, []
        if self.fail_commits:
            raise CommitFailed("In-memory table is failing commits")

        # Apply to a copy so a failing change leaves nothing half-written
        rows = dict(self._rows)
        for apply in pending:
            apply(rows)
        self._rows = rows
        self.commit_count += 1

    def rollback(self) -> None:
        self._pending = []


class InMemoryUserTable:
    """User details table kept in memory."""

    def __init__(self, record: UserRecord | None = None):
        self._record = record
        self.fetch_count = 0

    async def fetch(self) -> UserRecord | None:
        self.fetch_count += 1
        return self._record

    async def save(self, record: UserRecord) -> None:
        self._record = record

    async def delete(self) -> None:
        self._record = None
