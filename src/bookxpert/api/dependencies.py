"""Dependency injection for API endpoints."""

from collections.abc import AsyncIterator

from fastapi import Request

from bookxpert.domain.documents import DocumentRepository
from bookxpert.domain.repository import CatalogueRepository
from bookxpert.domain.users import UserDetailsRepository


async def get_catalogue_repository(request: Request) -> CatalogueRepository:
    """Get the catalogue repository from app state, for read-only use."""
    return request.app.state.catalogue_repository


async def get_exclusive_catalogue_repository(
    request: Request,
) -> AsyncIterator[CatalogueRepository]:
    """Get the catalogue repository while holding the app's catalogue lock.

    The repository expects one operation at a time, so every catalogue
    route runs its reads and writes under this lock.
    """
    async with request.app.state.catalogue_lock:
        yield request.app.state.catalogue_repository


async def get_document_repository(request: Request) -> DocumentRepository:
    """Get the document repository from app state."""
    return request.app.state.document_repository


async def get_user_repository(request: Request) -> UserDetailsRepository:
    """Get the user details repository from app state."""
    return request.app.state.user_repository
