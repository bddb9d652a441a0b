"""
Shared test fixtures for Bookxpert.
"""
import pytest

from bookxpert.config import reset_settings
from fixtures.catalogue import (  # noqa: F401
    catalogue_repository,
    catalogue_table,
    iphone_item,
    mock_source,
    sample_items,
)
from fixtures.config import memory_settings  # noqa: F401
from fixtures.database import test_db_pool  # noqa: F401


def pytest_addoption(parser):
    parser.addoption(
        "--run-postgres",
        action="store_true",
        default=False,
        help="Run integration tests against a real PostgreSQL database",
    )


@pytest.fixture(autouse=True)
def fresh_settings():
    """Re-read settings from the environment for every test."""
    reset_settings()
    yield
    reset_settings()
