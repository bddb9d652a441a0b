"""Catalogue API endpoints.

Every route holds the catalogue lock for its whole body. Domain errors
propagate to ErrorHandlingMiddleware, which maps them to status codes.
"""

import structlog
from fastapi import APIRouter, Depends, Query, status

from bookxpert.api.dependencies import get_exclusive_catalogue_repository
from bookxpert.api.models import (
    CatalogueItemResponse,
    CatalogueResponse,
    DeleteResponse,
    EditItemRequest,
    ValidationResponse,
)
from bookxpert.domain.base import ItemNotFound
from bookxpert.domain.editing import ItemEditor
from bookxpert.domain.item import CatalogueItem, sort_for_display
from bookxpert.domain.repository import CatalogueRepository

logger = structlog.get_logger()

router = APIRouter(
    prefix="/catalogue",
    tags=["catalogue"],
)


async def _require_item(repository: CatalogueRepository, item_id: str) -> CatalogueItem:
    item = await repository.get(item_id)
    if item is None:
        raise ItemNotFound(item_id)
    return item


def _editor_for(item: CatalogueItem, edit: EditItemRequest, repository: CatalogueRepository) -> ItemEditor:
    editor = ItemEditor(item, repository)
    editor.edited_name = edit.name
    editor.editable_fields = dict(edit.fields)
    return editor


@router.get("", response_model=CatalogueResponse)
async def get_catalogue(
    force: bool = Query(default=False, description="Skip the cache and refetch"),
    repository: CatalogueRepository = Depends(get_exclusive_catalogue_repository),  # noqa: B008
) -> CatalogueResponse:
    """Return the catalogue, from cache when possible, sorted by name."""
    items = await repository.fetch_catalogue(force_update=force)

    logger.info("catalogue_fetched", force=force, count=len(items))
    responses = [CatalogueItemResponse.from_item(i) for i in sort_for_display(items)]
    return CatalogueResponse(items=responses, count=len(responses))


@router.post("/{item_id}/validate", response_model=ValidationResponse)
async def validate_item(
    item_id: str,
    edit: EditItemRequest,
    repository: CatalogueRepository = Depends(get_exclusive_catalogue_repository),  # noqa: B008
) -> ValidationResponse:
    """Validate an edit without saving it."""
    item = await _require_item(repository, item_id)
    result = _editor_for(item, edit, repository).validate()
    return ValidationResponse(valid=result.is_valid, errors=list(result.errors))


@router.put("/{item_id}", response_model=CatalogueItemResponse)
async def update_item(
    item_id: str,
    edit: EditItemRequest,
    repository: CatalogueRepository = Depends(get_exclusive_catalogue_repository),  # noqa: B008
) -> CatalogueItemResponse:
    """Validate and save an edited item, keeping each field's original type."""
    item = await _require_item(repository, item_id)
    saved = await _editor_for(item, edit, repository).save()

    logger.info("item_saved", item_id=item_id)
    return CatalogueItemResponse.from_item(saved)


@router.delete("/{item_id}", response_model=DeleteResponse)
async def delete_item(
    item_id: str,
    repository: CatalogueRepository = Depends(get_exclusive_catalogue_repository),  # noqa: B008
) -> DeleteResponse:
    """Delete one item."""
    item = await _require_item(repository, item_id)
    await repository.delete(item)

    logger.info("item_deleted", item_id=item_id)
    return DeleteResponse(id=item_id, notification=f"You deleted: {item.name}")


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_catalogue(
    repository: CatalogueRepository = Depends(get_exclusive_catalogue_repository),  # noqa: B008
) -> None:
    """Delete the whole cached catalogue."""
    await repository.delete_all()
    logger.info("catalogue_deleted")
