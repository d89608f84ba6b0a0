"""Relevance scoring from corroboration, trending keywords, recency and social signals."""

import asyncio
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set

from ..models import Document, ensure_utc, utcnow
from ..signals.client import SocialSignalClient
from ..logger import get_logger
from .tokenizer import extract_keywords


CROSS_FEED_MIN_OVERLAP = 0.4
TRENDING_MIN_DOCUMENTS = 3
TRENDING_POINTS_PER_HIT = 5
TRENDING_MAX_SCORE = 30
RECENCY_MAX_SCORE = 20
RECENCY_WINDOW_HOURS = 24.0


def cross_feed_points(matching_sources: int) -> int:
    """Map the number of corroborating sources to cross-feed points."""
    if matching_sources >= 3:
        return 50
    if matching_sources == 2:
        return 40
    if matching_sources == 1:
        return 30
    return 0


@dataclass
class CandidateIndex:
    """Keyword tables for one candidate set, built before any document is scored."""
    title_keywords: List[Set[str]] = field(default_factory=list)
    content_keywords: List[Set[str]] = field(default_factory=list)
    keyword_frequency: Dict[str, int] = field(default_factory=dict)
    trending: Set[str] = field(default_factory=set)

    @classmethod
    def build(cls, documents: List[Document]) -> 'CandidateIndex':
        """
        Build keyword tables from the complete candidate set.

        Args:
            documents: All candidates of this run

        Returns:
            CandidateIndex aligned with ``documents`` by position
        """
        title_keywords = [set(extract_keywords(d.title)) for d in documents]
        content_keywords = [
            set(extract_keywords(f"{d.title} {d.description or ''}"))
            for d in documents
        ]

        frequency: Dict[str, int] = {}
        for keywords in content_keywords:
            for keyword in keywords:
                frequency[keyword] = frequency.get(keyword, 0) + 1

        trending = {kw for kw, count in frequency.items() if count >= TRENDING_MIN_DOCUMENTS}

        return cls(
            title_keywords=title_keywords,
            content_keywords=content_keywords,
            keyword_frequency=frequency,
            trending=trending
        )


class RelevanceScorer:
    """Populates each document's ScoreBreakdown."""

    def __init__(
        self,
        social_client: Optional[SocialSignalClient] = None,
        top_candidates: int = 20,
        batch_size: int = 5,
        batch_delay: float = 0.4
    ):
        """
        Initialize relevance scorer.

        Args:
            social_client: Client for social lookups, or None to skip them
            top_candidates: Number of best pre-scored documents that get social lookups
            batch_size: Concurrent lookups per batch
            batch_delay: Pause between batches in seconds
        """
        self.social_client = social_client
        self.top_candidates = top_candidates
        self.batch_size = max(batch_size, 1)
        self.batch_delay = batch_delay
        self.logger = get_logger()

    async def score_all(self, documents: List[Document], now: Optional[datetime] = None) -> List[Document]:
        """
        Compute all four sub-scores for every document.

        Args:
            documents: Candidate documents
            now: Reference time for recency (default: current UTC time)

        Returns:
            The same documents, in input order, with scores populated
        """
        if not documents:
            return []

        now = ensure_utc(now) if now is not None else utcnow()
        self.logger.info(f"Computing local scores for {len(documents)} documents")

        index = CandidateIndex.build(documents)
        for i, document in enumerate(documents):
            document.score.cross_feed = self.cross_feed_score(i, documents, index)
            document.score.trending = self.trending_score(i, index)
            document.score.recency = self.recency_score(document, now)
            document.score.social = 0

        social_scores = await self._social_scores(documents)
        for i, score in social_scores.items():
            documents[i].score.social = score

        top = sorted(documents, key=lambda d: d.relevance_score, reverse=True)[:5]
        self.logger.info(
            "Scores computed. Top 5: " + ", ".join(
                f"{d.relevance_score} ({d.source}: {d.title[:40]})" for d in top
            )
        )
        return documents

    def cross_feed_score(self, i: int, documents: List[Document], index: CandidateIndex) -> int:
        """
        Points for other sources carrying the same story as document ``i``.

        A source counts once when one of its titles shares at least 40% of
        document ``i``'s title keywords.
        """
        keywords = index.title_keywords[i]
        if not keywords:
            return 0

        source = documents[i].source
        matched_sources: Set[str] = set()

        for j, other in enumerate(documents):
            if j == i or other.source == source or other.source in matched_sources:
                continue
            shared = len(index.title_keywords[j] & keywords)
            if shared / len(keywords) >= CROSS_FEED_MIN_OVERLAP:
                matched_sources.add(other.source)

        return cross_feed_points(len(matched_sources))

    def trending_score(self, i: int, index: CandidateIndex) -> int:
        """Five points per trending keyword in document ``i``, capped at 30."""
        hits = len(index.content_keywords[i] & index.trending)
        return min(hits * TRENDING_POINTS_PER_HIT, TRENDING_MAX_SCORE)

    def recency_score(self, document: Document, now: datetime) -> int:
        """Linear decay from 20 points when new to 0 at 24 hours."""
        age_hours = max(document.age_hours(now), 0.0)
        raw = RECENCY_MAX_SCORE * (1 - age_hours / RECENCY_WINDOW_HOURS)
        # Half-up rounding
        return max(0, math.floor(raw + 0.5))

    async def _social_scores(self, documents: List[Document]) -> Dict[int, int]:
        """Social lookups for the best pre-scored documents, in rate-limited batches."""
        if self.social_client is None or self.top_candidates <= 0:
            return {}

        ranked = sorted(
            range(len(documents)),
            key=lambda i: documents[i].score.total,
            reverse=True
        )
        candidates = ranked[:self.top_candidates]
        self.logger.info(f"Querying social providers for top {len(candidates)} candidates")

        scores: Dict[int, int] = {}
        for start in range(0, len(candidates), self.batch_size):
            batch = candidates[start:start + self.batch_size]
            results = await asyncio.gather(
                *(self.social_client.social_score(documents[i].link) for i in batch),
                return_exceptions=True
            )

            for i, result in zip(batch, results):
                if isinstance(result, BaseException):
                    self.logger.warning(f"Social lookup failed for {documents[i].link}: {result}")
                    scores[i] = 0
                else:
                    scores[i] = result

            if start + self.batch_size < len(candidates):
                await asyncio.sleep(self.batch_delay)

        for provider_id, stats in self.social_client.get_stats().items():
            self.logger.info(
                f"Social provider {provider_id}: {stats['lookups']} lookups, "
                f"{stats['matches']} matches, {stats['failures']} failures, "
                f"avg {stats['average_latency_seconds']:.2f}s"
            )
        return scores
