"""Hacker News engagement lookup through the Algolia search API."""

from typing import Any, List
from urllib.parse import quote

from ..models import SocialSignal
from .base import SocialSignalProvider


class HackerNewsSignalProvider(SocialSignalProvider):
    """Finds Hacker News submissions of a URL."""

    provider_id = "hacker_news"

    SEARCH_URL = (
        "https://hn.algolia.com/api/v1/search"
        "?query={query}&restrictSearchableAttributes=url&hitsPerPage=5"
    )

    def search_url(self, url: str) -> str:
        return self.SEARCH_URL.format(query=quote(url, safe=''))

    def parse_candidates(self, payload: Any) -> List[SocialSignal]:
        if not isinstance(payload, dict):
            raise ValueError(f"unexpected search response: {type(payload).__name__}")
        hits = payload.get('hits') or []
        if not isinstance(hits, list):
            raise ValueError("'hits' is not a list")
        return [
            SocialSignal(
                score=self._as_int(hit.get('points')),
                comments=self._as_int(hit.get('num_comments'))
            )
            for hit in hits
            if isinstance(hit, dict)
        ]
