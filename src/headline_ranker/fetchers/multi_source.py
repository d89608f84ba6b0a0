"""Multi-source fetcher coordinator for aggregating headlines from all sources."""

import asyncio
from typing import Dict, List, Optional

from ..models import Document, SourceDescriptor
from ..processing.deduplicator import Deduplicator
from ..logger import get_logger
from .base import SourceFetcher
from .feed import FeedFetcher
from .page import PageFetcher
from .reddit import RedditFetcher


class MultiSourceFetcher:
    """Fetches every enabled source concurrently and merges the results."""

    def __init__(
        self,
        sources: List[SourceDescriptor],
        fetchers: Optional[Dict[str, SourceFetcher]] = None,
        max_concurrency: int = 5
    ):
        """
        Initialize multi-source fetcher.

        Args:
            sources: Configured sources
            fetchers: Fetcher per source type (default: feed, page and social-list fetchers)
            max_concurrency: Maximum sources fetched at the same time
        """
        self.sources = sources
        self.fetchers = fetchers or {
            'feed': FeedFetcher(),
            'page': PageFetcher(),
            'social-list': RedditFetcher(),
        }
        self.semaphore = asyncio.Semaphore(max_concurrency)
        self.deduplicator = Deduplicator()
        self.logger = get_logger()

    async def fetch_all(self) -> List[Document]:
        """
        Fetch documents from all enabled sources in parallel.

        Returns:
            Combined documents with repeated links removed
        """
        enabled = [source for source in self.sources if source.enabled]
        self.logger.info(f"Fetching {len(enabled)} sources")

        results = await asyncio.gather(*(self._safe_fetch(source) for source in enabled))

        all_documents = []
        for documents in results:
            all_documents.extend(documents)

        unique = self.deduplicator.deduplicate_by_url(all_documents)
        self.logger.info(
            f"Fetch complete: {len(all_documents)} documents, "
            f"{len(unique)} unique links from {len(enabled)} sources"
        )
        return unique

    def _fetcher_for(self, source: SourceDescriptor) -> SourceFetcher:
        # Unknown types are scraped as plain pages
        return self.fetchers.get(source.type) or self.fetchers['page']

    async def _safe_fetch(self, source: SourceDescriptor) -> List[Document]:
        """
        Fetch one source, turning any failure into an empty result.

        Args:
            source: Source to fetch

        Returns:
            List of documents or empty list if fetch fails
        """
        async with self.semaphore:
            try:
                documents = await self._fetcher_for(source).fetch(source)
                self.logger.debug(f"{source.name}: fetched {len(documents)} documents")
                return documents
            except Exception as e:
                self.logger.error(f"{source.name}: fetch failed - {e}")
                return []
