"""Startup configuration checks."""

import sys

import asyncpg
import httpx
import structlog

logger = structlog.get_logger()


async def check_database() -> bool:
    """Check PostgreSQL connectivity and table creation permissions."""
    from bookxpert.config import settings

    print("  Checking PostgreSQL...", flush=True)

    if settings.storage_backend == "memory":
        print("    ✓ In-memory storage selected, no database needed", flush=True)
        return True

    try:
        conn = await asyncpg.connect(settings.database_url)

        try:
            await conn.execute(
                "CREATE TEMPORARY TABLE _bookxpert_startup_test_ (id INTEGER)"
            )
            await conn.execute("DROP TABLE _bookxpert_startup_test_")
            print("    ✓ Database connection established", flush=True)
            print("    ✓ Table creation permissions verified", flush=True)
        except asyncpg.PostgresError as e:
            print(f"    ✗ Insufficient database permissions: {e}", flush=True)
            print("      User needs CREATE privilege", flush=True)
            return False
        finally:
            await conn.close()

        return True

    except asyncpg.InvalidCatalogNameError:
        print("    ✗ Database does not exist", flush=True)
        print(f"      Create it with: createdb {settings.database_url.split('/')[-1]}", flush=True)
        return False
    except (asyncpg.PostgresError, OSError) as e:
        print(f"    ✗ Cannot connect to PostgreSQL: {e}", flush=True)
        print("      Check DATABASE_URL environment variable", flush=True)
        return False


async def check_catalogue_source() -> bool:
    """Check the remote catalogue is reachable.

    An unreachable catalogue is reported but does not block startup: the
    local cache still serves reads.
    """
    from bookxpert.config import settings

    print(f"  Checking catalogue source ({settings.catalogue_source})...", flush=True)

    if settings.catalogue_source == "mock":
        print("    ✓ Mock catalogue always ready", flush=True)
        return True

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(settings.catalogue_url, timeout=5.0)
            response.raise_for_status()
        print(f"    ✓ Catalogue reachable at {settings.catalogue_url}", flush=True)
    except httpx.HTTPStatusError as e:
        print(f"    ! Catalogue answered HTTP {e.response.status_code}", flush=True)
        print("      Cached items will be served until it recovers", flush=True)
    except httpx.HTTPError as e:
        print(f"    ! Cannot reach catalogue at {settings.catalogue_url}: {e}", flush=True)
        print("      Cached items will be served until it recovers", flush=True)

    return True


async def run_startup_checks() -> bool:
    """Run all startup checks and return success status."""
    print("\nStarting Bookxpert - Checking dependencies...\n", flush=True)
    sys.stdout.flush()

    if not await check_database():
        return False
    if not await check_catalogue_source():
        return False

    print("\n✓ All checks passed - Bookxpert is ready!\n", flush=True)
    sys.stdout.flush()
    return True
