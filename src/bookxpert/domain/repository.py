"""Catalogue repository: cache policy and item mutations."""

from __future__ import annotations

import logging
import time

from bookxpert.metrics import (
    catalogue_fetches,
    catalogue_items,
    catalogue_mutations,
    operation_errors,
    remote_fetch_duration,
)
from bookxpert.services.catalogue import CatalogueSource, CatalogueSourceError
from bookxpert.storage import (
    CatalogueTable,
    PersistedRecord,
    StorageError,
)

from .base import ItemNotFound, PersistenceFailure, TransportFailure
from .item import CatalogueItem
from .snapshot import CatalogueSnapshot, SnapshotCallback, Subscription
from .values import ValueDecodeError, ValueEncodeError, fields_from_blob, fields_to_blob

logger = logging.getLogger(__name__)


class CatalogueRepository:
    """Keeps the persisted catalogue table and the in-memory snapshot in step.

    All calls are expected from a single event loop, one at a time: the
    repository does no locking of its own.
    """

    def __init__(
        self,
        table: CatalogueTable,
        source: CatalogueSource,
        prune_stale: bool = True,
        snapshot: CatalogueSnapshot | None = None,
    ):
        """Initialize with an injected table and remote source.

        Args:
            table: Persisted catalogue table, owned by this repository
            source: Remote catalogue source
            prune_stale: Delete cached ids missing from a fresh remote response
            snapshot: Snapshot to publish into (a new one by default)
        """
        self.table = table
        self.source = source
        self.prune_stale = prune_stale
        self.snapshot = snapshot or CatalogueSnapshot()

    @property
    def items(self) -> tuple[CatalogueItem, ...]:
        """Current snapshot value."""
        return self.snapshot.items

    def subscribe(self, callback: SnapshotCallback) -> Subscription:
        """Observe the snapshot; the callback gets every full new value."""
        return self.snapshot.subscribe(callback)

    async def fetch_catalogue(self, force_update: bool = False) -> tuple[CatalogueItem, ...]:
        """Publish the catalogue from the cache, or from the remote source.

        Without force_update a non-empty table is served as-is and the
        network is not touched. Otherwise the remote source is called once
        and its result is written to the table and published.

        Raises:
            TransportFailure: The remote source failed; snapshot unchanged
        """
        if not force_update:
            cached = await self._read_cache()
            if cached:
                items = [self._record_to_item(record) for record in cached]
                self.snapshot.publish(items)
                catalogue_fetches.labels(source="cache").inc()
                catalogue_items.set(len(items))
                logger.info(f"Served {len(items)} catalogue items from cache")
                return self.snapshot.items

        start = time.perf_counter()
        try:
            items = await self.source.fetch_all()
        except CatalogueSourceError as e:
            operation_errors.labels(
                operation="fetch", error_type=type(e).__name__
            ).inc()
            logger.warning(f"Catalogue fetch from {self.source.name} failed: {e}")
            raise TransportFailure(f"Unable to fetch catalogue: {e}") from e
        finally:
            remote_fetch_duration.labels(source=self.source.name).observe(
                time.perf_counter() - start
            )

        items = self._dedupe(items)
        await self._write_batch(items)

        self.snapshot.publish(items)
        catalogue_fetches.labels(source="remote").inc()
        catalogue_items.set(len(items))
        logger.info(f"Fetched {len(items)} catalogue items from {self.source.name}")
        return self.snapshot.items

    async def get(self, item_id: str) -> CatalogueItem | None:
        """Find an item in the snapshot, falling back to the persisted table.

        Raises:
            PersistenceFailure: The table could not be read
        """
        item = self.snapshot.get(item_id)
        if item is not None:
            return item
        record = await self._fetch_record(item_id, operation="get")
        return self._record_to_item(record) if record else None

    async def save(self, item: CatalogueItem) -> CatalogueItem:
        """Overwrite a persisted item and reflect it in the snapshot.

        Validation is the caller's job (see ItemEditor).

        Raises:
            ItemNotFound: No persisted record has this id
            PersistenceFailure: Read, encode or commit failed; snapshot unchanged
        """
        existing = await self._fetch_record(item.id, operation="save")
        if existing is None:
            raise ItemNotFound(item.id)

        try:
            blob = fields_to_blob(item.fields)
        except ValueEncodeError as e:
            self._count_error("save", e)
            raise PersistenceFailure(f"Unable to save '{item.name}': {e}") from e

        self.table.update(PersistedRecord(id=item.id, name=item.name, encoded_fields=blob))
        await self._commit("save")

        self.snapshot.replace(item)
        catalogue_mutations.labels(operation="save").inc()
        logger.info(f"Saved catalogue item {item.id}")
        return item

    async def delete(self, item: CatalogueItem, *, missing_ok: bool = False) -> None:
        """Delete a persisted item and drop it from the snapshot.

        Raises:
            ItemNotFound: No persisted record has this id and missing_ok is False
            PersistenceFailure: Read or commit failed; snapshot unchanged
        """
        existing = await self._fetch_record(item.id, operation="delete")
        if existing is None:
            if missing_ok:
                return
            raise ItemNotFound(item.id)

        self.table.delete(item.id)
        await self._commit("delete")

        self.snapshot.remove(item.id)
        catalogue_mutations.labels(operation="delete").inc()
        catalogue_items.set(len(self.snapshot))
        logger.info(f"Deleted catalogue item {item.id}")

    async def delete_all(self) -> None:
        """Clear the persisted table and publish an empty snapshot.

        Raises:
            PersistenceFailure: Commit failed; snapshot unchanged, not retried
        """
        self.table.delete_all()
        await self._commit("delete_all")

        self.snapshot.clear()
        catalogue_mutations.labels(operation="delete_all").inc()
        catalogue_items.set(0)
        logger.info("Deleted the whole catalogue")

    async def _read_cache(self) -> list[PersistedRecord]:
        """Read every cached record; an unreadable cache counts as a miss."""
        try:
            return await self.table.fetch_all()
        except StorageError as e:
            logger.warning(f"Catalogue cache unreadable, going to network: {e}")
            return []

    async def _write_batch(self, items: list[CatalogueItem]) -> None:
        """Write fetched items into the table.

        Failures are logged, never raised: the fetched list is published
        whatever happens to the cache.
        """
        try:
            existing_ids = {record.id for record in await self.table.fetch_all()}
        except StorageError as e:
            logger.error(f"Cannot read catalogue table, skipping cache write: {e}")
            return

        fresh_ids = set()
        for item in items:
            try:
                blob = fields_to_blob(item.fields)
            except ValueEncodeError as e:
                logger.warning(f"Failed to encode fields for item {item.id}: {e}")
                blob = None

            record = PersistedRecord(id=item.id, name=item.name, encoded_fields=blob)
            if item.id in existing_ids:
                self.table.update(record)
            else:
                self.table.insert(record)
            fresh_ids.add(item.id)

        if self.prune_stale:
            for stale_id in existing_ids - fresh_ids:
                self.table.delete(stale_id)

        try:
            await self.table.commit()
        except StorageError as e:
            self.table.rollback()
            operation_errors.labels(
                operation="cache_write", error_type=type(e).__name__
            ).inc()
            logger.error(f"Failed to save catalogue items: {e}")

    @staticmethod
    def _dedupe(items: list[CatalogueItem]) -> list[CatalogueItem]:
        """One item per id; a repeated id keeps its first position and last value."""
        by_id = {}
        for item in items:
            by_id[item.id] = item
        if len(by_id) < len(items):
            logger.warning(
                f"Remote catalogue repeated {len(items) - len(by_id)} item id(s), "
                "keeping the last copy of each"
            )
        return list(by_id.values())

    async def _fetch_record(self, item_id: str, operation: str) -> PersistedRecord | None:
        try:
            return await self.table.fetch_by_id(item_id)
        except StorageError as e:
            self._count_error(operation, e)
            raise PersistenceFailure(f"Unable to read catalogue item: {e}") from e

    async def _commit(self, operation: str) -> None:
        try:
            await self.table.commit()
        except StorageError as e:
            self.table.rollback()
            self._count_error(operation, e)
            logger.error(f"Catalogue {operation} failed: {e}")
            raise PersistenceFailure(f"Unable to {operation.replace('_', ' ')}: {e}") from e

    @staticmethod
    def _count_error(operation: str, error: Exception) -> None:
        operation_errors.labels(operation=operation, error_type=type(error).__name__).inc()

    @staticmethod
    def _record_to_item(record: PersistedRecord) -> CatalogueItem:
        """Decode a record; an undecodable blob yields an item with no fields."""
        try:
            fields = fields_from_blob(record.encoded_fields)
        except ValueDecodeError as e:
            logger.warning(f"Dropping undecodable fields for item {record.id}: {e}")
            fields = None
        return CatalogueItem(id=record.id, name=record.name, fields=fields or None)
