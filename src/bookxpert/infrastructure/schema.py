"""Database schema management."""

import logging

from asyncpg import Connection

logger = logging.getLogger(__name__)


async def ensure_schema(conn: Connection) -> None:
    """Ensure the catalogue and user tables exist.

    This function is idempotent - safe to call multiple times.
    """
    logger.info("Ensuring catalogue schema exists")

    # seq keeps insertion order; updates leave it alone
    await conn.execute("""
        CREATE TABLE IF NOT EXISTS catalogue_items (
            seq BIGSERIAL,
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            encoded_fields BYTEA
        )
    """)

    await conn.execute("""
        CREATE INDEX IF NOT EXISTS idx_catalogue_items_seq
        ON catalogue_items (seq)
    """)

    # Single-row table: the locally cached signed-in user
    await conn.execute("""
        CREATE TABLE IF NOT EXISTS user_details (
            singleton BOOLEAN PRIMARY KEY DEFAULT true,
            uid TEXT NOT NULL,
            email TEXT,
            display_name TEXT,
            profile_image BYTEA,

            CONSTRAINT user_details_single_row CHECK (singleton)
        )
    """)

    logger.info("Catalogue schema is ready")


async def drop_schema(conn: Connection) -> None:
    """Drop every table created by ensure_schema."""
    await conn.execute("DROP TABLE IF EXISTS catalogue_items")
    await conn.execute("DROP TABLE IF EXISTS user_details")


async def get_catalogue_stats(conn: Connection) -> dict:
    """Get statistics for the cached catalogue.

    Returns:
        Dict with item_count and items_with_fields
    """
    stats = await conn.fetchrow("""
        SELECT
            COUNT(*) as item_count,
            COUNT(encoded_fields) as items_with_fields
        FROM catalogue_items
    """)

    return dict(stats) if stats else {"item_count": 0, "items_with_fields": 0}
