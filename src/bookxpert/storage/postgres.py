"""PostgreSQL-backed storage."""

import logging
from collections.abc import Awaitable, Callable

import asyncpg
from asyncpg import Connection

from bookxpert.infrastructure.database import DatabasePool

from .base import CommitFailed, PersistedRecord, StorageUnavailable, UserRecord

logger = logging.getLogger(__name__)

StagedStatement = Callable[[Connection], Awaitable[None]]


class PostgresCatalogueTable:
    """Catalogue table stored in ``catalogue_items``.

    Staged changes run inside a single transaction on commit.
    """

    def __init__(self, db_pool: DatabasePool):
        self.db_pool = db_pool
        self._pending: list[StagedStatement] = []

    async def fetch_all(self) -> list[PersistedRecord]:
        try:
            async with self.db_pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT id, name, encoded_fields
                    FROM catalogue_items
                    ORDER BY seq
                    """
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise StorageUnavailable(f"Cannot read catalogue: {e}") from e
        return [self._row_to_record(row) for row in rows]

    async def fetch_by_id(self, item_id: str) -> PersistedRecord | None:
        try:
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT id, name, encoded_fields FROM catalogue_items WHERE id = $1",
                    item_id,
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise StorageUnavailable(f"Cannot read catalogue item {item_id}: {e}") from e
        return self._row_to_record(row) if row else None

    def insert(self, record: PersistedRecord) -> None:
        async def run(conn: Connection) -> None:
            await conn.execute(
                """
                INSERT INTO catalogue_items (id, name, encoded_fields)
                VALUES ($1, $2, $3)
                """,
                record.id,
                record.name,
                record.encoded_fields,
            )

        self._pending.append(run)

    def update(self, record: PersistedRecord) -> None:
        async def run(conn: Connection) -> None:
            status = await conn.execute(
                """
                UPDATE catalogue_items
                SET name = $2, encoded_fields = $3
                WHERE id = $1
                """,
                record.id,
                record.name,
                record.encoded_fields,
            )
            # asyncpg returns the command tag, e.g. "UPDATE 1"
            if status.split()[-1] == "0":
                raise CommitFailed(f"No record to update: {record.id}")

        self._pending.append(run)

    def delete(self, item_id: str) -> None:
        async def run(conn: Connection) -> None:
            await conn.execute("DELETE FROM catalogue_items WHERE id = $1", item_id)

        self._pending.append(run)

    def delete_all(self) -> None:
        async def run(conn: Connection) -> None:
            await conn.execute("DELETE FROM catalogue_items")

        self._pending.append(run)

    async def commit(self) -> None:
        pending, self._pending = self._pending, []
        if not pending:
            return

        try:
            async with self.db_pool.acquire() as conn:
                async with conn.transaction():
                    for run in pending:
                        await run(conn)
        except (asyncpg.PostgresError, OSError) as e:
            raise CommitFailed(f"Catalogue commit failed: {e}") from e

        logger.debug(f"Committed {len(pending)} catalogue change(s)")

    def rollback(self) -> None:
        self._pending = []

    @staticmethod
    def _row_to_record(row) -> PersistedRecord:
        blob = row["encoded_fields"]
        return PersistedRecord(
            id=row["id"],
            name=row["name"],
            encoded_fields=bytes(blob) if blob is not None else None,
        )


class PostgresUserTable:
    """User details stored in the single-row ``user_details`` table."""

    def __init__(self, db_pool: DatabasePool):
        self.db_pool = db_pool

    async def fetch(self) -> UserRecord | None:
        try:
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT uid, email, display_name, profile_image FROM user_details"
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise StorageUnavailable(f"Cannot read user details: {e}") from e

        if row is None:
            return None
        image = row["profile_image"]
        return UserRecord(
            uid=row["uid"],
            email=row["email"],
            display_name=row["display_name"],
            profile_image=bytes(image) if image is not None else None,
        )

    async def save(self, record: UserRecord) -> None:
        try:
            async with self.db_pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO user_details (singleton, uid, email, display_name, profile_image)
                    VALUES (true, $1, $2, $3, $4)
                    ON CONFLICT (singleton) DO UPDATE
                    SET uid = $1, email = $2, display_name = $3, profile_image = $4
                    """,
                    record.uid,
                    record.email,
                    record.display_name,
                    record.profile_image,
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise CommitFailed(f"Cannot save user details: {e}") from e

    async def delete(self) -> None:
        try:
            async with self.db_pool.acquire() as conn:
                await conn.execute("DELETE FROM user_details")
        except (asyncpg.PostgresError, OSError) as e:
            raise CommitFailed(f"Cannot delete user details: {e}") from e
