"""Pipeline orchestrator for coordinating fetch, scoring, ranking and delivery."""

import asyncio
import time
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Tuple

from .config import Config
from .exceptions import StageTimeoutError
from .models import Document, ExecutionResult, ensure_utc, utcnow
from .fetchers.multi_source import MultiSourceFetcher
from .processing.deduplicator import Deduplicator
from .processing.ranker import Ranker
from .processing.scorer import RelevanceScorer
from .signals.client import SocialSignalClient
from .storage import JsonFileDeliveredStore
from .logger import get_logger


DeliverCallback = Callable[[List[Document]], Awaitable[None]]

MARKET_EXTRA_PICKS = 5


class PipelineOrchestrator:
    """Runs the headline pipelines end to end."""

    def __init__(
        self,
        config: Config,
        fetcher: Optional[MultiSourceFetcher] = None,
        scorer: Optional[RelevanceScorer] = None,
        ranker: Optional[Ranker] = None,
        deliver: Optional[DeliverCallback] = None,
        market_fetcher: Optional[MultiSourceFetcher] = None
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            config: Application configuration
            fetcher: Source fetcher (default: built from config.feeds)
            scorer: Relevance scorer (default: built from config.social)
            ranker: Ranker (default: file-backed delivered state from config)
            deliver: Coroutine receiving the final documents of a trending run
            market_fetcher: Fetcher for the market pipeline (default: built from config.market_feeds)
        """
        self.config = config
        self.logger = get_logger()
        self.deduplicator = Deduplicator()

        self.fetcher = fetcher or MultiSourceFetcher(config.feeds)

        if scorer is None:
            social = config.social
            client = SocialSignalClient(
                timeout=social.request_timeout,
                user_agent=social.user_agent
            ) if social.enabled else None
            scorer = RelevanceScorer(
                social_client=client,
                top_candidates=social.top_candidates,
                batch_size=social.batch_size,
                batch_delay=social.batch_delay_seconds
            )
        self.scorer = scorer

        if ranker is None:
            store = JsonFileDeliveredStore(
                config.delivered_state_file,
                retention_hours=config.retention_hours
            )
            ranker = Ranker(store, self.deduplicator, max_per_source=config.pipeline.max_per_source)
        self.ranker = ranker

        self.deliver = deliver

        # Market headlines are scored locally only, without social lookups
        self.market_fetcher = market_fetcher or MultiSourceFetcher(config.market_feeds)
        self.market_scorer = RelevanceScorer(social_client=None)

    async def run_trending(self, now: Optional[datetime] = None) -> Tuple[ExecutionResult, List[Document]]:
        """
        Fetch -> score -> rank -> final dedup -> deliver.

        Stage timeouts abort the run; nothing is ranked or delivered from a
        partial candidate set.

        Returns:
            Tuple of (ExecutionResult, delivered documents)
        """
        start_time = time.time()
        now = ensure_utc(now) if now is not None else utcnow()
        pipeline = self.config.pipeline
        self.logger.info("Starting trending pipeline")

        fetched = 0
        try:
            documents = await self._fetch()
            fetched = len(documents)

            recent = [
                d for d in documents
                if d.link and d.age_hours(now) <= pipeline.news_max_age_hours
            ]
            recent.sort(key=lambda d: d.published_at, reverse=True)
            self.logger.info(f"{len(recent)}/{fetched} documents within {pipeline.news_max_age_hours}h")

            scored = await self._run_stage(
                "enrichment",
                self.scorer.score_all(recent, now=now),
                self.config.timeouts.enrichment_seconds
            )
        except StageTimeoutError as e:
            return self._failure("trending", fetched, e, start_time), []

        ranked = self.ranker.rank(scored, pipeline.max_news_per_send, pipeline.news_max_age_hours, now=now)
        final = self.deduplicator.final_dedup(ranked)
        self.logger.info(f"{len(ranked)} ranked -> {len(final)} after final dedup")

        errors = []
        if self.deliver is not None and final:
            try:
                await self.deliver(final)
            except Exception as e:
                error_msg = f"Delivery failed: {e}"
                self.logger.error(error_msg, exc_info=True)
                errors.append(error_msg)

        execution_time = time.time() - start_time
        self.logger.info(f"Trending pipeline finished in {execution_time:.2f} seconds")
        return ExecutionResult(
            success=not errors,
            pipeline="trending",
            documents_fetched=fetched,
            documents_delivered=0 if errors else len(final),
            errors=errors,
            execution_time=execution_time
        ), final

    async def run_latest(self, now: Optional[datetime] = None) -> Tuple[ExecutionResult, List[Document]]:
        """
        Newest documents of the last hour, deduplicated, without scoring.

        Delivered state is not consulted or updated.
        """
        start_time = time.time()
        now = ensure_utc(now) if now is not None else utcnow()
        pipeline = self.config.pipeline

        try:
            documents = await self._fetch()
        except StageTimeoutError as e:
            return self._failure("latest", 0, e, start_time), []

        recent = [
            d for d in documents
            if d.link and 0 <= d.age_hours(now) <= pipeline.latest_max_age_hours
        ]
        recent.sort(key=lambda d: d.published_at, reverse=True)
        latest = self.deduplicator.final_dedup(recent)[:pipeline.latest_max_items]

        return ExecutionResult(
            success=True,
            pipeline="latest",
            documents_fetched=len(documents),
            documents_delivered=len(latest),
            execution_time=time.time() - start_time
        ), latest

    async def top_of_day(self, now: Optional[datetime] = None) -> Tuple[ExecutionResult, List[Document]]:
        """Best scored documents of the last 24 hours, read-only."""
        start_time = time.time()
        now = ensure_utc(now) if now is not None else utcnow()

        fetched = 0
        try:
            documents = await self._fetch()
            fetched = len(documents)
            scored = await self._run_stage(
                "enrichment",
                self.scorer.score_all([d for d in documents if d.link], now=now),
                self.config.timeouts.enrichment_seconds
            )
        except StageTimeoutError as e:
            return self._failure("top", fetched, e, start_time), []

        top = self.ranker.get_top_of_day(scored, self.config.pipeline.top_of_day_count, now=now)
        return ExecutionResult(
            success=True,
            pipeline="top",
            documents_fetched=fetched,
            documents_delivered=len(top),
            execution_time=time.time() - start_time
        ), top

    async def run_market(self, now: Optional[datetime] = None) -> Tuple[ExecutionResult, List[Document]]:
        """
        Best market headlines of the last ``market_max_age_hours``.

        Market feeds are scored without social lookups. Delivered state is
        not consulted or updated.
        """
        start_time = time.time()
        now = ensure_utc(now) if now is not None else utcnow()
        pipeline = self.config.pipeline
        self.logger.info("Starting market pipeline")

        fetched = 0
        try:
            documents = await self._fetch(self.market_fetcher)
            fetched = len(documents)

            recent = [
                d for d in documents
                if d.link and 0 <= d.age_hours(now) <= pipeline.market_max_age_hours
            ]
            scored = await self._run_stage(
                "enrichment",
                self.market_scorer.score_all(recent, now=now),
                self.config.timeouts.enrichment_seconds
            )
        except StageTimeoutError as e:
            return self._failure("market", fetched, e, start_time), []

        # A few spare picks so the final dedup can still fill the count
        picks = self.ranker.get_top_of_day(
            scored,
            pipeline.market_max_items + MARKET_EXTRA_PICKS,
            now=now,
            max_age_hours=pipeline.market_max_age_hours
        )
        market = self.deduplicator.final_dedup(picks)[:pipeline.market_max_items]
        self.logger.info(f"{len(recent)} recent market documents -> {len(market)} selected")

        return ExecutionResult(
            success=True,
            pipeline="market",
            documents_fetched=fetched,
            documents_delivered=len(market),
            execution_time=time.time() - start_time
        ), market

    async def _fetch(self, fetcher: Optional[MultiSourceFetcher] = None) -> List[Document]:
        fetcher = fetcher or self.fetcher
        documents = await self._run_stage(
            "fetch",
            fetcher.fetch_all(),
            self.config.timeouts.fetch_seconds
        )
        self.logger.info(f"Fetched {len(documents)} documents")
        return documents

    async def _run_stage(self, stage: str, coroutine, timeout: float):
        """
        Await a stage with an absolute wall-clock budget.

        Raises:
            StageTimeoutError: If the stage does not finish in time
        """
        try:
            return await asyncio.wait_for(coroutine, timeout=timeout)
        except asyncio.TimeoutError:
            self.logger.error(f"Stage '{stage}' exceeded {timeout:g}s, aborting run")
            raise StageTimeoutError(stage, timeout)

    def _failure(
        self, pipeline: str, fetched: int, error: StageTimeoutError, start_time: float
    ) -> ExecutionResult:
        return ExecutionResult(
            success=False,
            pipeline=pipeline,
            documents_fetched=fetched,
            documents_delivered=0,
            errors=[str(error)],
            execution_time=time.time() - start_time,
            timed_out_stage=error.stage
        )
