"""Main FastAPI application."""

import asyncio
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import REGISTRY, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator

from bookxpert.config import settings
from bookxpert.domain.documents import DocumentRepository
from bookxpert.domain.item import use_system_collation
from bookxpert.domain.repository import CatalogueRepository
from bookxpert.domain.users import UserDetailsRepository
from bookxpert.infrastructure.database import DatabasePool
from bookxpert.infrastructure.schema import ensure_schema
from bookxpert.services.catalogue import get_catalogue_source
from bookxpert.services.documents import HttpDocumentSource
from bookxpert.startup_check import run_startup_checks
from bookxpert.storage import get_tables

from .middleware import (
    ErrorHandlingMiddleware,
    LoggingMiddleware,
    RequestIDMiddleware,
)

# Configure structlog for our app only
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    if not await run_startup_checks():
        print("\nStartup failed. Exiting.\n", flush=True)
        import sys
        sys.exit(1)

    db_pool = None
    if settings.storage_backend == "postgres":
        logger.info("initializing_database_pool")
        db_pool = DatabasePool()
        await db_pool.initialize()
        async with db_pool.acquire() as conn:
            await ensure_schema(conn)
        logger.info("database_pool_ready")
    app.state.db_pool = db_pool

    catalogue_table, user_table = get_tables(db_pool)
    app.state.catalogue_repository = CatalogueRepository(
        catalogue_table,
        get_catalogue_source(),
        prune_stale=settings.prune_stale_records,
    )
    app.state.document_repository = DocumentRepository(HttpDocumentSource())
    app.state.user_repository = UserDetailsRepository(user_table)
    app.state.catalogue_lock = asyncio.Lock()
    use_system_collation()
    logger.info(
        "repositories_ready",
        storage_backend=settings.storage_backend,
        catalogue_source=settings.catalogue_source,
    )

    yield

    if db_pool is not None:
        logger.info("closing_database_pool")
        await db_pool.close()


# Create v1 API app
api_v1 = FastAPI(
    title="Bookxpert API v1",
    description="Catalogue browser and editor with a local cache",
    version="1.0.0",
    docs_url="/docs",
    openapi_url="/openapi.json",
)

# Include v1 routes
from .routes import catalogue, documents, health, users  # noqa: E402

api_v1.include_router(health.router)
api_v1.include_router(catalogue.router)
api_v1.include_router(documents.router)
api_v1.include_router(users.router)

# Routes live on the sub-app; map domain errors before its ServerErrorMiddleware does
api_v1.add_middleware(ErrorHandlingMiddleware)

# Create main app and mount v1
app = FastAPI(
    title="Bookxpert",
    description="Catalogue browser and editor with a local cache",
    lifespan=lifespan,
    docs_url=None,  # Disable docs at root
    openapi_url=None,  # Disable openapi at root
    redoc_url=None,  # Disable redoc at root
)

# Share the main app's state with the sub-app
api_v1.state = app.state
app.mount("/api/v1", api_v1)

app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)

# Add Prometheus instrumentation for automatic HTTP metrics
instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_respect_env_var=True,  # Respects ENABLE_METRICS env var
    should_instrument_requests_inprogress=True,
    excluded_handlers=["/metrics"],
    env_var_name="ENABLE_METRICS",
    inprogress_name="bookxpert_http_requests_inprogress",
    inprogress_labels=True,
)

instrumentator.instrument(app)


@app.get("/metrics", include_in_schema=False)
async def get_metrics() -> Response:
    """Prometheus metrics endpoint."""
    metrics = generate_latest(REGISTRY)
    return Response(content=metrics, media_type="text/plain; version=0.0.4")
