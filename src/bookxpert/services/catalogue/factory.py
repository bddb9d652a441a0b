"""Factory for creating catalogue sources."""

from bookxpert.config import settings

from .base import CatalogueSource
from .mock import MockCatalogueSource
from .rest import RestCatalogueSource


def get_catalogue_source() -> CatalogueSource:
    """Get the configured catalogue source.

    Uses CATALOGUE_SOURCE from settings to determine which source to
    instantiate.
    """
    if settings.catalogue_source == "rest":
        return RestCatalogueSource()
    elif settings.catalogue_source == "mock":
        return MockCatalogueSource()
    else:
        # This should never happen due to validation in settings
        raise ValueError(
            f"Unknown catalogue source: {settings.catalogue_source}. "
            f"Valid options: rest, mock"
        )
