"""Tests for the command line interface."""

import pytest
from click.testing import CliRunner

from bookxpert.cli.main import cli
from bookxpert.domain.values import (
    DoubleValue,
    IntValue,
    StringValue,
    fields_from_blob,
    fields_to_blob,
)
from bookxpert.storage import InMemoryCatalogueTable, InMemoryUserTable, PersistedRecord


@pytest.fixture
def cached_table(memory_settings, monkeypatch) -> InMemoryCatalogueTable:
    """One table shared by every CLI invocation in a test."""
    table = InMemoryCatalogueTable(
        [
            PersistedRecord(
                id="1",
                name="iPhone 15",
                encoded_fields=fields_to_blob(
                    {"price": DoubleValue(999.99), "color": StringValue("Blue")}
                ),
            ),
            PersistedRecord(id="2", name="Galaxy S24"),
        ]
    )
    monkeypatch.setattr(
        "bookxpert.cli.main.get_tables", lambda pool: (table, InMemoryUserTable())
    )
    return table


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestCatalogueCommands:
    def test_fetch_from_cache(self, runner, cached_table):
        result = runner.invoke(cli, ["catalogue", "fetch"])

        assert result.exit_code == 0
        assert "Found 2 item(s):" in result.output
        assert "[1] iPhone 15" in result.output
        assert "price: 999.99" in result.output

    def test_force_fetch_uses_remote(self, runner, cached_table):
        result = runner.invoke(cli, ["catalogue", "fetch", "--force"])

        assert result.exit_code == 0
        assert "Found 5 item(s):" in result.output
        assert "Apple MacBook Pro 16" in result.output

    def test_show(self, runner, cached_table):
        result = runner.invoke(cli, ["catalogue", "show", "2"])

        assert result.exit_code == 0
        assert "[2] Galaxy S24" in result.output

    def test_show_missing(self, runner, cached_table):
        result = runner.invoke(cli, ["catalogue", "show", "404"])

        assert result.exit_code == 1
        assert "Item '404' is not cached." in result.output

    def test_delete(self, runner, cached_table):
        result = runner.invoke(cli, ["catalogue", "delete", "2"])

        assert result.exit_code == 0
        assert "You deleted: Galaxy S24" in result.output
        assert [r.id for r in cached_table.records] == ["1"]

    def test_clear(self, runner, cached_table):
        result = runner.invoke(cli, ["catalogue", "clear", "--yes"])

        assert result.exit_code == 0
        assert cached_table.records == []

    def test_edit_keeps_types(self, runner, cached_table):
        result = runner.invoke(
            cli,
            ["catalogue", "edit", "1", "--field", "price=1099.00", "--field", "year=2023"],
        )

        assert result.exit_code == 0
        assert "✓ Saved" in result.output
        stored = fields_from_blob(cached_table.records[0].encoded_fields)
        # Whole-number doubles come back from storage as ints
        assert stored["price"] == IntValue(1099)
        assert stored["year"] == IntValue(2023)

    def test_edit_validation_failure(self, runner, cached_table):
        result = runner.invoke(cli, ["catalogue", "edit", "1", "--field", "price=-5"])

        assert result.exit_code == 1
        assert "Price cannot be negative" in result.output
        assert cached_table.commit_count == 0

    def test_edit_bad_field_syntax(self, runner, cached_table):
        result = runner.invoke(cli, ["catalogue", "edit", "1", "--field", "price"])

        assert result.exit_code == 1
        assert "key=value" in result.output

    def test_edit_without_changes(self, runner, cached_table):
        result = runner.invoke(cli, ["catalogue", "edit", "1", "--name", "iPhone 15"])

        assert result.exit_code == 0
        assert "Nothing to change." in result.output


class TestSchemaCommands:
    def test_init_needs_postgres(self, runner, memory_settings):
        result = runner.invoke(cli, ["schema", "init"])

        assert result.exit_code == 1
        assert "STORAGE_BACKEND=postgres" in result.output
