"""Remote catalogue sources."""

from .base import (
    CatalogueServerError,
    CatalogueServiceUnavailable,
    CatalogueSource,
    CatalogueSourceError,
    CatalogueTimeout,
)
from .factory import get_catalogue_source

__all__ = [
    "CatalogueServerError",
    "CatalogueServiceUnavailable",
    "CatalogueSource",
    "CatalogueSourceError",
    "CatalogueTimeout",
    "get_catalogue_source",
]
