"""RSS/Atom feed fetcher."""

from datetime import datetime, timezone
from typing import List, Optional

import feedparser

from ..models import Document, SourceDescriptor, utcnow
from .base import SourceFetcher


UNTITLED = "Untitled"


class FeedFetcher(SourceFetcher):
    """Fetches documents from RSS and Atom feeds."""

    async def fetch(self, source: SourceDescriptor) -> List[Document]:
        content = await self._get_text(source.url)
        feed = feedparser.parse(content)

        if feed.bozo and not feed.entries:
            self.logger.warning(f"{source.name}: unparseable feed ({feed.get('bozo_exception')})")
            return []

        documents = []
        for entry in feed.entries:
            document = self._parse_entry(entry, source)
            if document:
                documents.append(document)

        self.logger.debug(f"{source.name}: parsed {len(documents)} feed entries")
        return documents

    def _parse_entry(self, entry, source: SourceDescriptor) -> Optional[Document]:
        """
        Parse a single feed entry into a Document.

        Args:
            entry: feedparser entry object
            source: Source the entry came from

        Returns:
            Document, or None if the entry has no link
        """
        link = entry.get('link', '')
        if not link:
            return None

        description = (
            entry.get('summary', '') or
            entry.get('description', '') or
            (entry.get('content') or [{}])[0].get('value', '')
        )

        return Document(
            title=entry.get('title', '') or UNTITLED,
            link=link,
            source=source.name,
            published_at=self._entry_time(entry) or utcnow(),
            description=description
        )

    @staticmethod
    def _entry_time(entry) -> Optional[datetime]:
        # feedparser normalizes parsed dates to UTC struct_time
        for key in ('published_parsed', 'updated_parsed'):
            parsed = entry.get(key)
            if parsed:
                try:
                    return datetime(*parsed[:6], tzinfo=timezone.utc)
                except (TypeError, ValueError):
                    continue
        return None
