"""Reddit engagement lookup through the public search endpoint."""

from typing import Any, List
from urllib.parse import quote

from ..models import SocialSignal
from .base import SocialSignalProvider


class RedditSignalProvider(SocialSignalProvider):
    """Finds Reddit posts linking to a URL."""

    provider_id = "reddit"

    SEARCH_URL = "https://www.reddit.com/search.json?q=url:{query}&sort=top&limit=5"

    def search_url(self, url: str) -> str:
        return self.SEARCH_URL.format(query=quote(url, safe=''))

    def parse_candidates(self, payload: Any) -> List[SocialSignal]:
        data = payload.get('data') if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise ValueError("search response has no listing data")
        children = data.get('children') or []
        if not isinstance(children, list):
            raise ValueError("'children' is not a list")
        candidates = []
        for child in children:
            post = child.get('data') if isinstance(child, dict) else None
            if not isinstance(post, dict):
                continue
            candidates.append(SocialSignal(
                score=self._as_int(post.get('score')),
                comments=self._as_int(post.get('num_comments'))
            ))
        return candidates
