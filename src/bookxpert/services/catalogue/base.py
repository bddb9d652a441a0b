"""Base protocol and exceptions for remote catalogue sources."""

from typing import Protocol

from bookxpert.domain.item import CatalogueItem


class CatalogueSourceError(Exception):
    """Base exception for all catalogue source errors."""

    pass


class CatalogueServiceUnavailable(CatalogueSourceError):  # noqa: N818
    """Raised when the catalogue endpoint is unreachable."""

    pass


class CatalogueServerError(CatalogueSourceError):
    """Raised when the endpoint answers with an error or malformed payload."""

    pass


class CatalogueTimeout(CatalogueSourceError):  # noqa: N818
    """Raised when the catalogue request times out."""

    pass


class CatalogueSource(Protocol):
    """Protocol for remote catalogue sources.

    Contract:
    - fetch_all returns the whole catalogue in remote order
    - All failures raise CatalogueSourceError subclasses
    - No retries; callers decide whether to try again
    """

    @property
    def name(self) -> str:
        """Return the source name for logging/metrics."""
        ...

    async def fetch_all(self) -> list[CatalogueItem]:
        """Fetch every catalogue item.

        Raises:
            CatalogueServiceUnavailable: Can't reach the endpoint
            CatalogueServerError: Non-200 response or undecodable payload
            CatalogueTimeout: Request timed out
        """
        ...
