"""Unit tests for the scheduler and the command-line entry point."""

import asyncio
import json
from unittest.mock import AsyncMock, Mock, patch

import pytest
import yaml

from headline_ranker.__main__ import main
from headline_ranker.models import ExecutionResult
from headline_ranker.scheduler import Scheduler


def make_pipeline(result=None, side_effect=None):
    pipeline = Mock()
    pipeline.run_trending = AsyncMock(return_value=(result, []), side_effect=side_effect)
    return pipeline


class TestScheduler:
    """Test scheduled execution."""

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError, match="Invalid interval"):
            Scheduler(make_pipeline(), interval_minutes=0)

    @pytest.mark.asyncio
    async def test_run_once_returns_result(self):
        result = ExecutionResult(success=True, pipeline="trending", documents_fetched=3, documents_delivered=1)
        scheduler = Scheduler(make_pipeline(result))

        assert await scheduler.run_once() is result

    @pytest.mark.asyncio
    async def test_run_once_survives_pipeline_crash(self):
        scheduler = Scheduler(make_pipeline(side_effect=RuntimeError("boom")))

        assert await scheduler.run_once() is None

    @pytest.mark.asyncio
    async def test_start_registers_single_instance_job(self):
        scheduler = Scheduler(make_pipeline(), interval_minutes=15)

        scheduler.start()
        try:
            job = scheduler.scheduler.get_job(Scheduler.JOB_ID)
            assert job is not None
            assert job.max_instances == 1
            assert job.trigger.interval.total_seconds() == 15 * 60
        finally:
            scheduler.stop()

        # AsyncIOScheduler may finish shutting down on the next loop iteration
        await asyncio.sleep(0)
        assert not scheduler.scheduler.running


class TestMain:
    """Test the command-line entry point."""

    def test_missing_config(self, tmp_path, capsys):
        code = main(["trending", "--config", str(tmp_path / "absent.yaml")])

        assert code == 2
        assert "Configuration error" in capsys.readouterr().err

    def test_latest_prints_json(self, tmp_path, capsys):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({
            'feeds': [{'name': 'Example', 'url': 'https://example.com/rss'}],
            'paths': {
                'delivered_state_file': str(tmp_path / "data" / "delivered.json"),
                'log_file': str(tmp_path / "logs" / "app.log"),
            },
        }), encoding='utf-8')
        result = ExecutionResult(success=True, pipeline="latest", documents_fetched=0, documents_delivered=0)

        with patch('headline_ranker.__main__.setup_logger'), \
                patch('headline_ranker.__main__.PipelineOrchestrator') as orchestrator_cls:
            orchestrator_cls.return_value.run_latest = AsyncMock(return_value=(result, []))
            code = main(["latest", "--config", str(config_path)])

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output['result']['pipeline'] == "latest"
        assert output['documents'] == []

    def test_market_runs_market_pipeline(self, tmp_path, capsys):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({
            'feeds': [{'name': 'Example', 'url': 'https://example.com/rss'}],
            'paths': {
                'delivered_state_file': str(tmp_path / "data" / "delivered.json"),
                'log_file': str(tmp_path / "logs" / "app.log"),
            },
        }), encoding='utf-8')
        result = ExecutionResult(success=True, pipeline="market", documents_fetched=3, documents_delivered=0)

        with patch('headline_ranker.__main__.setup_logger'), \
                patch('headline_ranker.__main__.PipelineOrchestrator') as orchestrator_cls:
            run_market = AsyncMock(return_value=(result, []))
            orchestrator_cls.return_value.run_market = run_market
            code = main(["market", "--config", str(config_path)])

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        run_market.assert_awaited_once_with()
        assert output['result']['pipeline'] == "market"
