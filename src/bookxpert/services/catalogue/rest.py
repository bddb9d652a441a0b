"""REST catalogue source implementation."""

import aiohttp

from bookxpert.config import settings
from bookxpert.domain.item import CatalogueItem

from .base import CatalogueServerError, CatalogueServiceUnavailable, CatalogueTimeout


class RestCatalogueSource:
    """Catalogue source backed by a JSON list endpoint."""

    def __init__(self, url: str | None = None, timeout: float | None = None):
        """Initialize from arguments, falling back to settings."""
        self.url = url or settings.catalogue_url
        self.timeout = timeout or settings.http_timeout

    @property
    def name(self) -> str:
        return "rest"

    async def fetch_all(self) -> list[CatalogueItem]:
        """GET the catalogue endpoint and decode every entry."""
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    self.url,
                    headers={"Accept": "application/json"},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        raise CatalogueServerError(
                            f"Catalogue endpoint returned HTTP {response.status}"
                        )
                    payload = await response.json(content_type=None)

        except TimeoutError as e:
            raise CatalogueTimeout(
                f"Catalogue request timed out after {self.timeout}s"
            ) from e
        except aiohttp.ClientError as e:
            raise CatalogueServiceUnavailable(
                f"Cannot connect to catalogue at {self.url}: {e}"
            ) from e
        except ValueError as e:
            # json.JSONDecodeError
            raise CatalogueServerError(f"Catalogue response is not JSON: {e}") from e

        if not isinstance(payload, list):
            raise CatalogueServerError("Catalogue response is not a JSON list")

        try:
            return [CatalogueItem.from_dict(entry) for entry in payload]
        except (ValueError, AttributeError) as e:
            raise CatalogueServerError(f"Malformed catalogue entry: {e}") from e
