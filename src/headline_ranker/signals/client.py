"""Combined social score across all configured providers."""

import asyncio
from typing import Dict, List, Optional

import httpx

from ..logger import get_logger
from .base import SocialSignalProvider
from .hacker_news import HackerNewsSignalProvider
from .reddit import RedditSignalProvider


DEFAULT_USER_AGENT = "HeadlineRanker/1.0"
MAX_SOCIAL_SCORE = 50


class SocialSignalClient:
    """Queries every provider for a URL and folds the results into one score."""

    def __init__(
        self,
        providers: Optional[List[SocialSignalProvider]] = None,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize social signal client.

        Args:
            providers: Providers to query (default: Hacker News and Reddit)
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header sent to providers
            transport: Optional httpx transport, used to stub the network
        """
        if providers is None:
            providers = [HackerNewsSignalProvider(), RedditSignalProvider()]
        self.providers = providers
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport
        self.logger = get_logger()

    async def social_score(self, url: str) -> int:
        """
        Engagement score for a document link, capped at 50.

        Each provider contributes its best candidate's score plus twice its
        comment count. A failing provider contributes nothing.

        Args:
            url: Document link

        Returns:
            Score between 0 and 50
        """
        if not url:
            return 0

        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self.transport
        ) as client:
            results = await asyncio.gather(
                *(provider.best_signal(url, client) for provider in self.providers),
                return_exceptions=True
            )

        raw = 0
        for provider, result in zip(self.providers, results):
            if isinstance(result, BaseException):
                self.logger.warning(f"{provider.provider_id} lookup crashed for {url}: {result}")
                continue
            raw += result.weight
        return min(raw, MAX_SOCIAL_SCORE)

    def get_stats(self) -> Dict[str, dict]:
        """Lookup statistics per provider."""
        return {provider.provider_id: provider.stats.to_dict() for provider in self.providers}
