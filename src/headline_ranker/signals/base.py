"""Abstract base class for social signal providers."""

import time
from abc import ABC, abstractmethod
from typing import Any, List

import httpx

from ..models import SocialSignal
from ..logger import get_logger
from .exceptions import SignalProviderError
from .metrics import LookupStats


class SocialSignalProvider(ABC):
    """Looks up engagement for a URL on one discussion site."""

    provider_id = "base"

    def __init__(self):
        self.logger = get_logger()
        self.stats = LookupStats(self.provider_id)

    @abstractmethod
    def search_url(self, url: str) -> str:
        """
        Build the search endpoint for a document URL.

        Args:
            url: Canonical document link

        Returns:
            Fully encoded request URL
        """
        pass

    @abstractmethod
    def parse_candidates(self, payload: Any) -> List[SocialSignal]:
        """
        Extract candidate signals from a decoded JSON response.

        Args:
            payload: Decoded response body

        Returns:
            Zero or more candidates
        """
        pass

    async def search(self, url: str, client: httpx.AsyncClient) -> List[SocialSignal]:
        """
        Query the provider for posts linking to ``url``.

        Raises:
            SignalProviderError: If the request or decoding fails
        """
        start = time.monotonic()
        try:
            response = await client.get(self.search_url(url))
            response.raise_for_status()
            candidates = self.parse_candidates(response.json())
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            self.stats.record_failure()
            raise SignalProviderError(f"{self.provider_id} lookup failed for {url}: {e}") from e

        self.stats.record_success(time.monotonic() - start, matched=bool(candidates))
        return candidates

    async def best_signal(self, url: str, client: httpx.AsyncClient) -> SocialSignal:
        """
        Highest-scored candidate for ``url``, or a zero signal on any failure.

        Ties keep the first candidate; candidates with score 0 never win.
        """
        try:
            candidates = await self.search(url, client)
        except SignalProviderError as e:
            self.logger.debug(str(e))
            return SocialSignal()

        best = SocialSignal()
        for candidate in candidates:
            if candidate.score > best.score:
                best = candidate
        return best

    @staticmethod
    def _as_int(value: Any) -> int:
        try:
            return max(int(value or 0), 0)
        except (TypeError, ValueError):
            return 0
