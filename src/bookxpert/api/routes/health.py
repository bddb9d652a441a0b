"""Health check endpoints."""

import structlog
from fastapi import APIRouter, Depends

from bookxpert.api.dependencies import get_catalogue_repository
from bookxpert.api.models import HealthResponse
from bookxpert.config import settings
from bookxpert.domain.repository import CatalogueRepository
from bookxpert.storage import StorageError

logger = structlog.get_logger()
router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    repository: CatalogueRepository = Depends(get_catalogue_repository),  # noqa: B008
) -> HealthResponse:
    """Report whether the local catalogue cache can be read."""
    try:
        records = await repository.table.fetch_all()
        storage_status = "healthy"
        cached_items = len(records)
    except StorageError as e:
        logger.warning("storage_unhealthy", error=str(e))
        storage_status = "unhealthy"
        cached_items = 0

    return HealthResponse(
        status="healthy" if storage_status == "healthy" else "degraded",
        storage=storage_status,
        storage_backend=settings.storage_backend,
        catalogue_source=repository.source.name,
        cached_items=cached_items,
    )
