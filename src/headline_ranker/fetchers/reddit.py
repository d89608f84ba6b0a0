"""Subreddit listing fetcher."""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..models import Document, SourceDescriptor, utcnow
from .base import SourceFetcher


class RedditFetcher(SourceFetcher):
    """Fetches hot posts of a subreddit. The source URL is the subreddit name."""

    LISTING_URL = "https://www.reddit.com/r/{subreddit}/hot.json?limit=25"
    MAX_DESCRIPTION = 300

    async def fetch(self, source: SourceDescriptor) -> List[Document]:
        subreddit = source.url.strip().strip('/')
        if subreddit.startswith('r/'):
            subreddit = subreddit[2:]

        payload = await self._get_json(self.LISTING_URL.format(subreddit=subreddit))
        children = ((payload or {}).get('data') or {}).get('children') or []

        documents = []
        for child in children:
            post = child.get('data') if isinstance(child, dict) else None
            if not isinstance(post, dict) or post.get('stickied'):
                continue
            documents.append(self._parse_post(post, subreddit))

        return documents

    def _parse_post(self, post: Dict, subreddit: str) -> Document:
        url = post.get('url') or ''
        if url and 'reddit.com' not in url:
            link = url
        else:
            link = f"https://www.reddit.com{post.get('permalink', '')}"

        return Document(
            title=post.get('title') or "Untitled",
            link=link,
            source=f"Reddit r/{subreddit}",
            published_at=self._created_at(post) or utcnow(),
            description=(post.get('selftext') or '')[:self.MAX_DESCRIPTION]
        )

    @staticmethod
    def _created_at(post: Dict) -> Optional[datetime]:
        created = post.get('created_utc')
        if created is None:
            return None
        try:
            return datetime.fromtimestamp(float(created), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError):
            return None
