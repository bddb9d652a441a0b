"""Tests for the catalogue repository cache policy and mutations."""

import pytest

from bookxpert.domain.base import ItemNotFound, PersistenceFailure, TransportFailure
from bookxpert.domain.item import CatalogueItem
from bookxpert.domain.repository import CatalogueRepository
from bookxpert.domain.values import DoubleValue, IntValue, StringValue, fields_to_blob
from bookxpert.services.catalogue import CatalogueServiceUnavailable, CatalogueTimeout
from bookxpert.services.catalogue.mock import MockCatalogueSource
from bookxpert.storage import InMemoryCatalogueTable, PersistedRecord


def _record(item_id: str, name: str, fields=None) -> PersistedRecord:
    return PersistedRecord(id=item_id, name=name, encoded_fields=fields_to_blob(fields))


class TestFetchCatalogue:
    """Cache-first fetch policy."""

    @pytest.mark.asyncio
    async def test_single_item_cached_after_first_fetch(self, catalogue_table):
        phone = CatalogueItem.from_dict(
            {"id": "1", "name": "iPhone 15", "data": {"color": "Black", "capacity": "128 GB"}}
        )
        source = MockCatalogueSource(items=[phone])
        repository = CatalogueRepository(catalogue_table, source)

        first = await repository.fetch_catalogue()
        assert source.call_count == 1
        assert first == (phone,)

        second = await CatalogueRepository(catalogue_table, source).fetch_catalogue()
        assert source.call_count == 1
        assert second == (phone,)

    @pytest.mark.asyncio
    async def test_empty_cache_goes_remote(
        self, catalogue_repository, catalogue_table, mock_source, sample_items
    ):
        items = await catalogue_repository.fetch_catalogue()

        assert mock_source.call_count == 1
        assert list(items) == sample_items
        assert [r.id for r in catalogue_table.records] == ["1", "2", "3"]

    @pytest.mark.asyncio
    async def test_cache_hit_skips_network(self, mock_source):
        table = InMemoryCatalogueTable(
            [_record("1", "iPhone 15", {"color": StringValue("Blue")})]
        )
        repository = CatalogueRepository(table, mock_source)

        items = await repository.fetch_catalogue()

        assert mock_source.call_count == 0
        assert items == (
            CatalogueItem(id="1", name="iPhone 15", fields={"color": StringValue("Blue")}),
        )

    @pytest.mark.asyncio
    async def test_second_fetch_served_from_cache(self, catalogue_repository, mock_source):
        await catalogue_repository.fetch_catalogue()
        await catalogue_repository.fetch_catalogue()
        assert mock_source.call_count == 1

    @pytest.mark.asyncio
    async def test_force_update_calls_remote_exactly_once(self, mock_source):
        table = InMemoryCatalogueTable([_record("1", "Old name")])
        repository = CatalogueRepository(table, mock_source)

        items = await repository.fetch_catalogue(force_update=True)

        assert mock_source.call_count == 1
        assert items[0].name == "iPhone 15"
        assert next(r for r in table.records if r.id == "1").name == "iPhone 15"

    @pytest.mark.asyncio
    async def test_force_update_prunes_stale_rows(self, mock_source):
        table = InMemoryCatalogueTable([_record("99", "Discontinued")])
        repository = CatalogueRepository(table, mock_source)

        await repository.fetch_catalogue(force_update=True)

        assert {r.id for r in table.records} == {"1", "2", "3"}

    @pytest.mark.asyncio
    async def test_stale_rows_kept_without_pruning(self, mock_source):
        table = InMemoryCatalogueTable([_record("99", "Discontinued")])
        repository = CatalogueRepository(table, mock_source, prune_stale=False)

        await repository.fetch_catalogue(force_update=True)

        assert {r.id for r in table.records} == {"1", "2", "3", "99"}

    @pytest.mark.asyncio
    async def test_remote_failure_keeps_snapshot(self, catalogue_repository, mock_source):
        first = await catalogue_repository.fetch_catalogue()
        mock_source.set_error(CatalogueServiceUnavailable("offline"))

        with pytest.raises(TransportFailure, match="offline"):
            await catalogue_repository.fetch_catalogue(force_update=True)

        assert catalogue_repository.items == first

    @pytest.mark.asyncio
    async def test_remote_failure_on_empty_cache(self, catalogue_table, mock_source):
        mock_source.set_error(CatalogueTimeout("timed out"))
        repository = CatalogueRepository(catalogue_table, mock_source)

        with pytest.raises(TransportFailure):
            await repository.fetch_catalogue()

        assert repository.items == ()
        assert catalogue_table.records == []

    @pytest.mark.asyncio
    async def test_unreadable_cache_counts_as_miss(self, catalogue_table, mock_source):
        catalogue_table.fail_reads = True
        repository = CatalogueRepository(catalogue_table, mock_source)

        items = await repository.fetch_catalogue()

        assert mock_source.call_count == 1
        assert len(items) == 3

    @pytest.mark.asyncio
    async def test_cache_write_failure_still_publishes(self, catalogue_table, mock_source):
        catalogue_table.fail_commits = True
        repository = CatalogueRepository(catalogue_table, mock_source)

        items = await repository.fetch_catalogue()

        assert len(items) == 3
        assert catalogue_table.records == []
        assert not catalogue_table.has_pending_changes

    @pytest.mark.asyncio
    async def test_cached_whole_double_reloads_as_int(self, mock_source):
        table = InMemoryCatalogueTable(
            [_record("1", "iPhone 15", {"price": DoubleValue(1099.0)})]
        )
        repository = CatalogueRepository(table, mock_source)

        items = await repository.fetch_catalogue()

        assert items[0].fields == {"price": IntValue(1099)}

    @pytest.mark.asyncio
    async def test_undecodable_blob_yields_no_fields(self, mock_source):
        table = InMemoryCatalogueTable(
            [PersistedRecord(id="1", name="Broken", encoded_fields=b"{not json")]
        )
        repository = CatalogueRepository(table, mock_source)

        items = await repository.fetch_catalogue()

        assert items == (CatalogueItem(id="1", name="Broken"),)

    @pytest.mark.asyncio
    async def test_repeated_remote_id_keeps_last_copy(self, catalogue_table):
        source = MockCatalogueSource(
            items=[
                CatalogueItem(id="1", name="iPhone 15"),
                CatalogueItem(id="2", name="Galaxy S24"),
                CatalogueItem(id="1", name="iPhone 15 Plus"),
            ]
        )
        repository = CatalogueRepository(catalogue_table, source)

        items = await repository.fetch_catalogue()

        assert [(item.id, item.name) for item in items] == [
            ("1", "iPhone 15 Plus"),
            ("2", "Galaxy S24"),
        ]
        assert {r.id: r.name for r in catalogue_table.records} == {
            "1": "iPhone 15 Plus",
            "2": "Galaxy S24",
        }

        await repository.save(CatalogueItem(id="1", name="iPhone 15 Pro"))
        assert [item.name for item in repository.items] == ["iPhone 15 Pro", "Galaxy S24"]

    @pytest.mark.asyncio
    async def test_subscribers_see_each_publish(self, catalogue_repository):
        seen = []
        catalogue_repository.subscribe(lambda items: seen.append(len(items)))

        await catalogue_repository.fetch_catalogue()

        assert seen == [0, 3]


class TestSave:
    @pytest.mark.asyncio
    async def test_save_keeps_position(self, catalogue_repository, iphone_item):
        await catalogue_repository.fetch_catalogue()
        before = [item.id for item in catalogue_repository.items]

        renamed = iphone_item.with_changes("iPhone 15 Pro", iphone_item.fields)
        await catalogue_repository.save(renamed)

        assert [item.id for item in catalogue_repository.items] == before
        assert catalogue_repository.items[0].name == "iPhone 15 Pro"

    @pytest.mark.asyncio
    async def test_save_unknown_item(self, catalogue_repository):
        await catalogue_repository.fetch_catalogue()

        with pytest.raises(ItemNotFound):
            await catalogue_repository.save(CatalogueItem(id="404", name="Ghost"))

    @pytest.mark.asyncio
    async def test_commit_failure_leaves_snapshot(
        self, catalogue_repository, catalogue_table, iphone_item
    ):
        await catalogue_repository.fetch_catalogue()
        catalogue_table.fail_commits = True

        with pytest.raises(PersistenceFailure):
            await catalogue_repository.save(iphone_item.with_changes("Changed", None))

        assert catalogue_repository.snapshot.get("1") == iphone_item
        assert not catalogue_table.has_pending_changes

    @pytest.mark.asyncio
    async def test_unencodable_fields(self, catalogue_repository, iphone_item):
        await catalogue_repository.fetch_catalogue()

        with pytest.raises(PersistenceFailure):
            await catalogue_repository.save(
                iphone_item.with_changes("iPhone 15", {"ratio": DoubleValue(float("inf"))})
            )


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_shrinks_snapshot_by_one(
        self, catalogue_repository, catalogue_table, iphone_item
    ):
        await catalogue_repository.fetch_catalogue()

        await catalogue_repository.delete(iphone_item)

        assert len(catalogue_repository.items) == 2
        assert catalogue_repository.snapshot.get("1") is None
        assert "1" not in {r.id for r in catalogue_table.records}

    @pytest.mark.asyncio
    async def test_delete_missing_item(self, catalogue_repository):
        await catalogue_repository.fetch_catalogue()
        ghost = CatalogueItem(id="404", name="Ghost")

        with pytest.raises(ItemNotFound):
            await catalogue_repository.delete(ghost)

        await catalogue_repository.delete(ghost, missing_ok=True)
        assert len(catalogue_repository.items) == 3

    @pytest.mark.asyncio
    async def test_delete_all(self, catalogue_repository, catalogue_table):
        await catalogue_repository.fetch_catalogue()

        await catalogue_repository.delete_all()

        assert catalogue_repository.items == ()
        assert catalogue_table.records == []

    @pytest.mark.asyncio
    async def test_delete_all_failure(self, catalogue_repository, catalogue_table):
        await catalogue_repository.fetch_catalogue()
        catalogue_table.fail_commits = True

        with pytest.raises(PersistenceFailure):
            await catalogue_repository.delete_all()

        assert len(catalogue_repository.items) == 3


class TestGet:
    @pytest.mark.asyncio
    async def test_get_falls_back_to_table(self, mock_source):
        table = InMemoryCatalogueTable([_record("5", "Cached only")])
        repository = CatalogueRepository(table, mock_source)

        item = await repository.get("5")

        assert item == CatalogueItem(id="5", name="Cached only")
        assert await repository.get("6") is None

    @pytest.mark.asyncio
    async def test_get_read_failure(self, catalogue_table, mock_source):
        catalogue_table.fail_reads = True
        repository = CatalogueRepository(catalogue_table, mock_source)

        with pytest.raises(PersistenceFailure):
            await repository.get("1")
