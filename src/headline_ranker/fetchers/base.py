"""Base class for source fetchers."""

from abc import ABC, abstractmethod
from typing import List, Optional

import httpx

from ..models import Document, SourceDescriptor
from ..logger import get_logger


DEFAULT_USER_AGENT = "HeadlineRanker/1.0"


class SourceFetcher(ABC):
    """Turns one configured source into documents."""

    def __init__(
        self,
        timeout: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize fetcher.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with every request
            transport: Optional httpx transport, used to stub the network
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport
        self.logger = get_logger()

    @abstractmethod
    async def fetch(self, source: SourceDescriptor) -> List[Document]:
        """
        Fetch documents from a source.

        This method must be implemented by subclasses.

        Args:
            source: Source to fetch

        Returns:
            List of Document objects

        Raises:
            httpx.HTTPError: If the request fails
        """
        pass

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self.transport
        )

    async def _get_text(self, url: str) -> str:
        """
        Fetch a URL and return the response body as text.

        Raises:
            httpx.HTTPError: If request fails
        """
        async with self._client() as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text

    async def _get_json(self, url: str):
        """
        Fetch a URL and decode the JSON body.

        Raises:
            httpx.HTTPError: If request fails
            ValueError: If the body is not JSON
        """
        async with self._client() as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()
