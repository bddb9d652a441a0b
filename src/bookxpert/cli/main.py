"""Bookxpert CLI main entry point."""

import asyncio
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import click
import structlog

from bookxpert.config import settings
from bookxpert.domain.base import CatalogueError, InvalidInput
from bookxpert.domain.editing import ItemEditor
from bookxpert.domain.item import CatalogueItem, sort_for_display, use_system_collation
from bookxpert.domain.repository import CatalogueRepository
from bookxpert.infrastructure.database import DatabasePool
from bookxpert.infrastructure.schema import ensure_schema, get_catalogue_stats
from bookxpert.services.catalogue import get_catalogue_source
from bookxpert.storage import get_tables

# Configure logging for CLI
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def open_repository() -> AsyncIterator[CatalogueRepository]:
    """Build a catalogue repository for the configured backend."""
    pool = None
    if settings.storage_backend == "postgres":
        pool = DatabasePool()
        await pool.initialize()
        async with pool.acquire() as conn:
            await ensure_schema(conn)

    try:
        catalogue_table, _ = get_tables(pool)
        yield CatalogueRepository(
            catalogue_table,
            get_catalogue_source(),
            prune_stale=settings.prune_stale_records,
        )
    finally:
        if pool is not None:
            await pool.close()


def _echo_item(item: CatalogueItem) -> None:
    click.echo(f"[{item.id}] {item.name}")
    for key, value in item.key_value_list:
        click.echo(f"    {key}: {value}")


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


async def _require_item(repository: CatalogueRepository, item_id: str) -> CatalogueItem:
    try:
        item = await repository.get(item_id)
    except CatalogueError as e:
        _fail(str(e))
    if item is None:
        _fail(f"Item '{item_id}' is not cached.")
    return item


@click.group()
@click.pass_context
def cli(ctx):
    """Bookxpert - Catalogue browser with a local cache.

    Administration tool for the cached catalogue.
    """
    ctx.ensure_object(dict)
    use_system_collation()


@cli.group()
@click.pass_context
def schema(ctx):
    """Manage the database schema."""
    pass


@schema.command(name="init")
@click.pass_context
def schema_init(ctx):
    """Create the cache tables if they are missing."""
    if settings.storage_backend != "postgres":
        _fail("schema init needs STORAGE_BACKEND=postgres")

    async def _init():
        pool = DatabasePool()
        try:
            await pool.initialize()
            async with pool.acquire() as conn:
                await ensure_schema(conn)
                stats = await get_catalogue_stats(conn)
            click.echo("✓ Schema is ready")
            click.echo(f"  Cached items: {stats['item_count']}")
        finally:
            await pool.close()

    asyncio.run(_init())


@cli.group()
@click.pass_context
def catalogue(ctx):
    """Browse and edit the cached catalogue."""
    pass


@catalogue.command(name="fetch")
@click.option("--force", is_flag=True, help="Ignore the cache and download again")
@click.pass_context
def catalogue_fetch(ctx, force: bool):
    """Show the catalogue, downloading it when the cache is empty."""
    async def _fetch():
        async with open_repository() as repository:
            try:
                items = await repository.fetch_catalogue(force_update=force)
            except CatalogueError as e:
                _fail(str(e))

            if not items:
                click.echo("No catalogue items found.")
                return

            click.echo(f"Found {len(items)} item(s):")
            for item in sort_for_display(items):
                _echo_item(item)

    asyncio.run(_fetch())


@catalogue.command(name="show")
@click.argument("item_id")
@click.pass_context
def catalogue_show(ctx, item_id: str):
    """Show one cached item."""
    async def _show():
        async with open_repository() as repository:
            item = await _require_item(repository, item_id)
            _echo_item(item)

    asyncio.run(_show())


@catalogue.command(name="delete")
@click.argument("item_id")
@click.pass_context
def catalogue_delete(ctx, item_id: str):
    """Delete one cached item."""
    async def _delete():
        async with open_repository() as repository:
            item = await _require_item(repository, item_id)
            try:
                await repository.delete(item)
            except CatalogueError as e:
                _fail(str(e))
            click.echo(f"✓ You deleted: {item.name}")

    asyncio.run(_delete())


@catalogue.command(name="clear")
@click.confirmation_option(prompt="Delete every cached item?")
@click.pass_context
def catalogue_clear(ctx):
    """Delete every cached item."""
    async def _clear():
        async with open_repository() as repository:
            try:
                await repository.delete_all()
            except CatalogueError as e:
                _fail(str(e))
            click.echo("✓ Cleared the catalogue cache")

    asyncio.run(_clear())


@catalogue.command(name="edit")
@click.argument("item_id")
@click.option("--name", help="New item name")
@click.option(
    "--field",
    "fields",
    multiple=True,
    help="Field to set as key=value; an empty value removes the field",
)
@click.pass_context
def catalogue_edit(ctx, item_id: str, name: str | None, fields: tuple[str, ...]):
    """Edit a cached item's name and fields."""
    async def _edit():
        async with open_repository() as repository:
            item = await _require_item(repository, item_id)

            editor = ItemEditor(item, repository)
            if name is not None:
                editor.edited_name = name
            for entry in fields:
                key, sep, value = entry.partition("=")
                if not sep or not key.strip():
                    _fail(f"Field must look like key=value, got '{entry}'")
                editor.update_field(key.strip(), value)

            if not editor.has_changes:
                click.echo("Nothing to change.")
                return

            try:
                updated = await editor.save()
            except InvalidInput as e:
                click.echo("Error: Validation failed", err=True)
                for message in e.messages:
                    click.echo(f"  - {message}", err=True)
                sys.exit(1)
            except CatalogueError as e:
                _fail(str(e))

            click.echo("✓ Saved")
            _echo_item(updated)

    asyncio.run(_edit())


if __name__ == "__main__":
    cli()
