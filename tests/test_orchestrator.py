"""Unit tests for pipeline orchestration."""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from headline_ranker.config import Config, PipelineConfig, SocialConfig, TimeoutConfig
from headline_ranker.models import DeliveredRecord, Document, SourceDescriptor
from headline_ranker.orchestrator import PipelineOrchestrator
from headline_ranker.processing.ranker import Ranker
from headline_ranker.storage import MemoryDeliveredStore, to_epoch_ms


NOW = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


def make_document(title, source, minutes_old, link=None):
    slug = title.lower().replace(' ', '-')
    return Document(
        title=title,
        link=link or f"https://{source.lower().replace(' ', '-')}.example.com/{slug}",
        source=source,
        published_at=NOW - timedelta(minutes=minutes_old)
    )


def make_documents():
    return [
        make_document("Fed raises interest rates by quarter point", "Source A", 30),
        make_document("Fed raises interest rates a quarter point", "Source B", 20),
        make_document("Federal Reserve raises interest rates quarter point", "Source C", 50),
        make_document("Heavy snowstorm closes Colorado schools", "Source D", 10),
        make_document("Museum returns looted bronze statues", "Source E", 60 * 5),
        make_document("Drought threatens coffee harvest Brazil", "Source F", 60 * 30),
    ]


@pytest.fixture
def config(tmp_path):
    return Config(
        feeds=[SourceDescriptor(name="Source A", url="https://a.example.com/rss")],
        pipeline=PipelineConfig(max_news_per_send=10, news_max_age_hours=24),
        timeouts=TimeoutConfig(fetch_seconds=5, enrichment_seconds=5),
        social=SocialConfig(enabled=False),
        delivered_state_file=tmp_path / "data" / "delivered.json",
        log_file=tmp_path / "logs" / "test.log"
    )


def make_fetcher(documents=None, delay=0.0):
    async def fetch_all():
        if delay:
            await asyncio.sleep(delay)
        return list(documents or [])

    fetcher = Mock()
    fetcher.fetch_all = AsyncMock(side_effect=fetch_all)
    return fetcher


class TestRunTrending:
    """Test the trending pipeline."""

    @pytest.mark.asyncio
    async def test_end_to_end(self, config):
        deliver = AsyncMock()
        orchestrator = PipelineOrchestrator(config, fetcher=make_fetcher(make_documents()), deliver=deliver)

        result, documents = await orchestrator.run_trending(now=NOW)

        assert result.success is True
        assert result.pipeline == "trending"
        assert result.documents_fetched == 6
        assert result.documents_delivered == len(documents) == 3
        titles = [d.title for d in documents]
        assert "Drought threatens coffee harvest Brazil" not in titles
        assert sum(1 for t in titles if "interest rates" in t) == 1
        assert [d.relevance_score for d in documents] == sorted(
            (d.relevance_score for d in documents), reverse=True
        )
        deliver.assert_awaited_once_with(documents)

        state = json.loads(config.delivered_state_file.read_text(encoding='utf-8'))
        assert sorted(state['urls']) == sorted(d.link for d in documents)
        assert state['timestamp'] == to_epoch_ms(NOW)

    @pytest.mark.asyncio
    async def test_second_run_never_redelivers_links(self, config):
        orchestrator = PipelineOrchestrator(config, fetcher=make_fetcher(make_documents()))

        _, first = await orchestrator.run_trending(now=NOW)
        _, second = await orchestrator.run_trending(now=NOW + timedelta(minutes=5))

        assert len(first) == 3
        assert not {d.link for d in first} & {d.link for d in second}

    @pytest.mark.asyncio
    async def test_fetch_timeout_aborts_without_state(self, config):
        config.timeouts.fetch_seconds = 0.01
        deliver = AsyncMock()
        orchestrator = PipelineOrchestrator(
            config, fetcher=make_fetcher(make_documents(), delay=1.0), deliver=deliver
        )

        result, documents = await orchestrator.run_trending(now=NOW)

        assert result.success is False
        assert documents == []
        assert "fetch" in result.errors[0]
        assert result.timed_out_stage == "fetch"
        assert not config.delivered_state_file.exists()
        deliver.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enrichment_timeout_aborts_without_state(self, config):
        config.timeouts.enrichment_seconds = 0.01

        async def slow_score(documents, now=None):
            await asyncio.sleep(1.0)
            return documents

        scorer = Mock()
        scorer.score_all = slow_score
        store = MemoryDeliveredStore()
        orchestrator = PipelineOrchestrator(
            config,
            fetcher=make_fetcher(make_documents()),
            scorer=scorer,
            ranker=Ranker(store)
        )

        result, documents = await orchestrator.run_trending(now=NOW)

        assert result.success is False
        assert result.documents_fetched == 6
        assert "enrichment" in result.errors[0]
        assert result.timed_out_stage == "enrichment"
        assert documents == []
        assert store.record is None

    @pytest.mark.asyncio
    async def test_delivery_failure_is_reported(self, config):
        deliver = AsyncMock(side_effect=ConnectionError("consumer offline"))
        orchestrator = PipelineOrchestrator(config, fetcher=make_fetcher(make_documents()), deliver=deliver)

        result, documents = await orchestrator.run_trending(now=NOW)

        assert result.success is False
        assert result.documents_delivered == 0
        assert "consumer offline" in result.errors[0]
        assert result.timed_out_stage is None
        assert len(documents) == 3


class TestRunLatest:
    """Test the latest pipeline."""

    @pytest.mark.asyncio
    async def test_newest_first_and_stateless(self, config):
        store = MemoryDeliveredStore(DeliveredRecord(
            urls=["https://source-d.example.com/heavy-snowstorm-closes-colorado-schools"],
            timestamp=to_epoch_ms(NOW)
        ))
        future = make_document("Scheduled launch window opens", "Source G", -30)
        orchestrator = PipelineOrchestrator(
            config,
            fetcher=make_fetcher(make_documents() + [future]),
            ranker=Ranker(store)
        )

        result, documents = await orchestrator.run_latest(now=NOW)

        assert result.success is True
        assert [d.source for d in documents] == ["Source D", "Source B"]
        assert store.record.timestamp == to_epoch_ms(NOW)
        assert len(store.record.urls) == 1

    @pytest.mark.asyncio
    async def test_item_limit(self, config):
        config.pipeline.latest_max_items = 1
        orchestrator = PipelineOrchestrator(config, fetcher=make_fetcher(make_documents()))

        _, documents = await orchestrator.run_latest(now=NOW)

        assert [d.source for d in documents] == ["Source D"]


class TestTopOfDay:
    """Test the top-of-day pipeline."""

    @pytest.mark.asyncio
    async def test_does_not_touch_state(self, config):
        orchestrator = PipelineOrchestrator(config, fetcher=make_fetcher(make_documents()))

        result, documents = await orchestrator.top_of_day(now=NOW)

        assert result.success is True
        assert result.pipeline == "top"
        assert 0 < len(documents) <= config.pipeline.top_of_day_count
        assert "Drought threatens coffee harvest Brazil" not in [d.title for d in documents]
        assert not config.delivered_state_file.exists()


def make_market_documents():
    return [
        make_document("Stocks rally as inflation cools sharply", "Market A", 30),
        make_document("Stocks rally as inflation cools", "Market B", 45),
        make_document("Oil prices slide on weak demand outlook", "Market C", 90),
        make_document("Central bank holds benchmark rate steady", "Market D", 120),
        make_document("Copper futures jump on supply worries", "Market E", 60 * 30),
        make_document("Earnings season kicks off tomorrow", "Market F", -60),
    ]


class TestRunMarket:
    """Test the market pipeline."""

    @pytest.mark.asyncio
    async def test_selects_recent_market_headlines_without_state(self, config):
        store = MemoryDeliveredStore()
        feed_fetcher = make_fetcher(make_documents())
        orchestrator = PipelineOrchestrator(
            config,
            fetcher=feed_fetcher,
            ranker=Ranker(store),
            market_fetcher=make_fetcher(make_market_documents())
        )

        result, documents = await orchestrator.run_market(now=NOW)

        assert result.success is True
        assert result.pipeline == "market"
        assert result.documents_fetched == 6
        assert result.documents_delivered == len(documents) == 3
        sources = [d.source for d in documents]
        assert "Market E" not in sources
        assert "Market F" not in sources
        assert sum(1 for s in sources if s in ("Market A", "Market B")) == 1
        feed_fetcher.fetch_all.assert_not_awaited()
        assert store.record is None

    @pytest.mark.asyncio
    async def test_item_limit(self, config):
        config.pipeline.market_max_items = 2
        orchestrator = PipelineOrchestrator(
            config, fetcher=make_fetcher(), market_fetcher=make_fetcher(make_market_documents())
        )

        _, documents = await orchestrator.run_market(now=NOW)

        assert len(documents) == 2

    @pytest.mark.asyncio
    async def test_scores_without_social_lookups(self, config):
        orchestrator = PipelineOrchestrator(
            config, fetcher=make_fetcher(), market_fetcher=make_fetcher(make_market_documents())
        )

        _, documents = await orchestrator.run_market(now=NOW)

        assert orchestrator.market_scorer.social_client is None
        assert all(d.score.social == 0 for d in documents)

    @pytest.mark.asyncio
    async def test_fetch_timeout(self, config):
        config.timeouts.fetch_seconds = 0.01
        orchestrator = PipelineOrchestrator(
            config, fetcher=make_fetcher(),
            market_fetcher=make_fetcher(make_market_documents(), delay=1.0)
        )

        result, documents = await orchestrator.run_market(now=NOW)

        assert result.success is False
        assert result.pipeline == "market"
        assert result.timed_out_stage == "fetch"
        assert documents == []
