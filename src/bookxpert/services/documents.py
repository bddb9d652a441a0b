"""Remote PDF document source."""

from typing import Protocol

import aiohttp

from bookxpert.config import settings

PDF_MAGIC = b"%PDF-"


class DocumentError(Exception):
    """Base exception for all document errors."""

    pass


class DocumentTransportError(DocumentError):
    """Raised when the document cannot be downloaded."""

    pass


class InvalidDocument(DocumentError):  # noqa: N818
    """Raised when the downloaded bytes are not a PDF."""

    pass


class DocumentSource(Protocol):
    """Protocol for remote document sources."""

    async def fetch(self, url: str) -> bytes:
        """Download the document at url.

        Raises:
            DocumentTransportError: Network failure or non-200 response
            InvalidDocument: Body is not a PDF
        """
        ...


class HttpDocumentSource:
    """Downloads PDFs over HTTP, bypassing any intermediate cache."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout or settings.http_timeout

    async def fetch(self, url: str) -> bytes:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers={"Accept": "application/pdf", "Cache-Control": "no-cache"},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        raise DocumentTransportError(f"HTTP {response.status}")
                    body = await response.read()

        except TimeoutError as e:
            raise DocumentTransportError(
                f"Document download timed out after {self.timeout}s"
            ) from e
        except aiohttp.ClientError as e:
            raise DocumentTransportError(f"Network error: {e}") from e

        if not body.startswith(PDF_MAGIC):
            raise InvalidDocument("Invalid PDF data")
        return body
