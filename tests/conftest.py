"""Shared test fixtures and configuration."""

import asyncio
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from bookxpert.api.main import app
from bookxpert.domain.documents import DocumentRepository
from bookxpert.domain.repository import CatalogueRepository
from bookxpert.domain.users import UserDetailsRepository
from bookxpert.services.catalogue.mock import MockCatalogueSource
from bookxpert.services.documents import DocumentTransportError
from bookxpert.storage import InMemoryCatalogueTable, InMemoryUserTable

PDF_BYTES = b"%PDF-1.7\n%%EOF\n"


class ScriptedDocumentSource:
    """Document source returning fixed bytes, or failing on demand."""

    def __init__(self):
        self.calls = 0
        self.fail = False

    async def fetch(self, url: str) -> bytes:
        self.calls += 1
        if self.fail:
            raise DocumentTransportError("HTTP 500")
        return PDF_BYTES


class YieldingCatalogueTable(InMemoryCatalogueTable):
    """In-memory table that hands control back to the loop after every read."""

    async def fetch_all(self):
        records = await super().fetch_all()
        await asyncio.sleep(0.01)
        return records

    async def fetch_by_id(self, item_id: str):
        record = await super().fetch_by_id(item_id)
        await asyncio.sleep(0.01)
        return record


@pytest.fixture
def catalogue_table() -> InMemoryCatalogueTable:
    return InMemoryCatalogueTable()


@pytest.fixture
def yielding_table() -> YieldingCatalogueTable:
    return YieldingCatalogueTable()


@pytest.fixture
def mock_source() -> MockCatalogueSource:
    return MockCatalogueSource()


@pytest.fixture
def document_source() -> ScriptedDocumentSource:
    return ScriptedDocumentSource()


@pytest.fixture
def user_table() -> InMemoryUserTable:
    return InMemoryUserTable()


@pytest.fixture
def test_app(catalogue_table, mock_source, document_source, user_table):
    """The real app with in-memory repositories in its state.

    ASGITransport does not run the lifespan, so no startup checks or
    database pool are involved.
    """
    app.state.db_pool = None
    app.state.catalogue_repository = CatalogueRepository(catalogue_table, mock_source)
    app.state.document_repository = DocumentRepository(document_source)
    app.state.user_repository = UserDetailsRepository(user_table)
    app.state.catalogue_lock = asyncio.Lock()
    return app


@pytest.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
