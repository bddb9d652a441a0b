"""Document repository with an in-memory cache."""

import logging

from bookxpert.metrics import document_fetches
from bookxpert.services.documents import DocumentSource

logger = logging.getLogger(__name__)


class DocumentRepository:
    """Fetch-or-cache access to remote documents, keyed by URL."""

    def __init__(self, source: DocumentSource):
        self.source = source
        self._cache: dict[str, bytes] = {}

    def is_cached(self, url: str) -> bool:
        return url in self._cache

    async def fetch(self, url: str) -> bytes:
        """Return the cached document, downloading it on first use.

        Failed downloads are not cached.
        """
        cached = self._cache.get(url)
        if cached is not None:
            document_fetches.labels(result="hit").inc()
            return cached

        document_fetches.labels(result="miss").inc()
        document = await self.source.fetch(url)
        self._cache[url] = document
        logger.info(f"Cached document {url} ({len(document)} bytes)")
        return document

    async def refresh(self, url: str) -> bytes:
        """Drop any cached copy and download again."""
        self._cache.pop(url, None)
        return await self.fetch(url)
