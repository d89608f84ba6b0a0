"""Headline scraper for plain HTML pages."""

from typing import List
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..models import Document, SourceDescriptor, utcnow
from .base import SourceFetcher


MIN_ANCHOR_TEXT = 20
MAX_TITLE_LENGTH = 200


class PageFetcher(SourceFetcher):
    """Treats every sufficiently long link text on a page as a headline."""

    async def fetch(self, source: SourceDescriptor) -> List[Document]:
        html = await self._get_text(source.url)
        return self.parse_page(html, source)

    def parse_page(self, html: str, source: SourceDescriptor) -> List[Document]:
        """
        Extract headline links from HTML.

        Args:
            html: Page content
            source: Source the page belongs to

        Returns:
            One Document per anchor whose text is at least 20 characters
        """
        soup = BeautifulSoup(html, 'html.parser')
        fetched_at = utcnow()
        documents = []

        for anchor in soup.select('a[href]'):
            href = anchor.get('href', '').strip()
            text = anchor.get_text(strip=True)
            if not href or len(text) < MIN_ANCHOR_TEXT:
                continue

            documents.append(Document(
                title=text[:MAX_TITLE_LENGTH],
                link=urljoin(source.url, href),
                source=source.name,
                published_at=fetched_at
            ))

        return documents
