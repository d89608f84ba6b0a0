"""Fetchers package for the supported source types."""

from .base import SourceFetcher
from .feed import FeedFetcher
from .page import PageFetcher
from .reddit import RedditFetcher
from .multi_source import MultiSourceFetcher

__all__ = [
    'SourceFetcher',
    'FeedFetcher',
    'PageFetcher',
    'RedditFetcher',
    'MultiSourceFetcher'
]
