"""Diversified ranking of scored documents with delivery bookkeeping."""

from datetime import datetime
from typing import Dict, List, Optional

from ..models import Document, ensure_utc, utcnow
from ..storage import DeliveredStore
from ..logger import get_logger
from .deduplicator import Deduplicator, canonical_url


TOP_OF_DAY_HOURS = 24


class Ranker:
    """Selects the documents to deliver and remembers what was delivered."""

    def __init__(
        self,
        store: DeliveredStore,
        deduplicator: Optional[Deduplicator] = None,
        max_per_source: int = 3
    ):
        """
        Initialize ranker.

        Args:
            store: Delivered-links store shared across runs
            deduplicator: Deduplicator for title similarity (default: new instance)
            max_per_source: Maximum documents accepted from a single source
        """
        self.store = store
        self.deduplicator = deduplicator or Deduplicator()
        self.max_per_source = max_per_source
        self.logger = get_logger()

    def rank(
        self,
        documents: List[Document],
        max_items: int,
        max_age_hours: float,
        now: Optional[datetime] = None
    ) -> List[Document]:
        """
        Pick up to ``max_items`` new documents and mark them as delivered.

        Args:
            documents: Scored candidates
            max_items: Maximum documents to return
            max_age_hours: Documents older than this are dropped
            now: Reference time (default: current UTC time)

        Returns:
            Diversified, deduplicated documents in descending relevance order
        """
        now = ensure_utc(now) if now is not None else utcnow()
        delivered = self.store.load_urls(now)

        fresh = []
        for document in documents:
            if not document.link:
                continue
            if canonical_url(document.link) in delivered:
                continue
            if document.age_hours(now) > max_age_hours:
                continue
            fresh.append(document)

        self.logger.info(
            f"Ranking {len(fresh)}/{len(documents)} documents "
            f"({len(delivered)} links already delivered)"
        )

        unique = self.deduplicator.deduplicate_by_similarity(fresh)
        ordered = sorted(unique, key=lambda d: d.relevance_score, reverse=True)
        selected = self._diversified_pick(ordered, max_items)

        delivered.update(canonical_url(d.link) for d in selected)
        self.store.save_urls(delivered, now)

        self.logger.info(f"Selected {len(selected)} documents for delivery")
        return selected

    def get_top_of_day(
        self,
        documents: List[Document],
        count: int = 5,
        now: Optional[datetime] = None,
        max_age_hours: float = TOP_OF_DAY_HOURS
    ) -> List[Document]:
        """
        Best documents of the last ``max_age_hours`` (24 by default), ignoring delivered state.

        The delivered store is neither read nor written.
        """
        now = ensure_utc(now) if now is not None else utcnow()
        recent = [
            d for d in documents
            if d.link and d.age_hours(now) <= max_age_hours
        ]
        unique = self.deduplicator.deduplicate_by_similarity(recent)
        ordered = sorted(unique, key=lambda d: d.relevance_score, reverse=True)
        return self._diversified_pick(ordered, count)

    def _diversified_pick(self, ordered: List[Document], max_items: int) -> List[Document]:
        """Greedy pick that accepts at most ``max_per_source`` documents per source."""
        selected: List[Document] = []
        per_source: Dict[str, int] = {}

        for document in ordered:
            if len(selected) >= max_items:
                break
            count = per_source.get(document.source, 0)
            if count >= self.max_per_source:
                continue
            selected.append(document)
            per_source[document.source] = count + 1

        return selected
