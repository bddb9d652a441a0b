"""Document endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from bookxpert.api.dependencies import get_document_repository
from bookxpert.config import settings
from bookxpert.domain.documents import DocumentRepository
from bookxpert.services.documents import DocumentError

logger = structlog.get_logger()
router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("/balance-sheet")
async def get_balance_sheet(
    refresh: bool = Query(default=False, description="Download again even if cached"),
    repository: DocumentRepository = Depends(get_document_repository),  # noqa: B008
) -> Response:
    """Return the balance sheet PDF."""
    url = settings.balance_sheet_url
    try:
        if refresh:
            document = await repository.refresh(url)
        else:
            document = await repository.fetch(url)
    except DocumentError as e:
        logger.warning("document_fetch_failed", url=url, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to Load PDF",
        ) from e

    return Response(content=document, media_type="application/pdf")
