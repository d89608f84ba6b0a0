"""Social signal providers used for relevance enrichment."""

from .exceptions import SignalProviderError
from .metrics import LookupStats
from .base import SocialSignalProvider
from .hacker_news import HackerNewsSignalProvider
from .reddit import RedditSignalProvider
from .client import SocialSignalClient

__all__ = [
    "SignalProviderError",
    "LookupStats",
    "SocialSignalProvider",
    "HackerNewsSignalProvider",
    "RedditSignalProvider",
    "SocialSignalClient",
]
