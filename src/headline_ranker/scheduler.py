"""Scheduler for periodic trending pipeline execution."""

import asyncio
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .orchestrator import PipelineOrchestrator
from .logger import get_logger


class Scheduler:
    """Runs the trending pipeline every ``interval_minutes``."""

    JOB_ID = 'trending_pipeline'

    def __init__(self, pipeline: PipelineOrchestrator, interval_minutes: int = 30):
        """
        Initialize scheduler.

        Args:
            pipeline: Pipeline orchestrator instance
            interval_minutes: Minutes between runs
        """
        if interval_minutes <= 0:
            raise ValueError(f"Invalid interval: {interval_minutes}. Must be greater than 0.")

        self.pipeline = pipeline
        self.interval_minutes = interval_minutes
        self.logger = get_logger()
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._stopped: Optional[asyncio.Event] = None

    def start(self):
        """Register the job and start the scheduler on the running event loop."""
        self.logger.info(f"Starting scheduler: trending pipeline every {self.interval_minutes} minutes")

        # Serialized runs: the delivered-state store has a single writer
        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self._run_pipeline_wrapper,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=self.JOB_ID,
            name='Trending Headline Pipeline',
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        self.logger.info("Scheduler started successfully")

    async def run_forever(self):
        """Start the scheduler and block until ``stop`` is called."""
        self._stopped = asyncio.Event()
        self.start()
        await self.run_once()
        try:
            await self._stopped.wait()
        finally:
            self.stop()

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler is not None and self.scheduler.running:
            self.logger.info("Stopping scheduler")
            self.scheduler.shutdown(wait=False)
            self.logger.info("Scheduler stopped")
        if self._stopped is not None:
            self._stopped.set()

    async def run_once(self):
        """Execute the trending pipeline once immediately."""
        self.logger.info("Running trending pipeline once (manual execution)")
        return await self._run_pipeline_wrapper()

    async def _run_pipeline_wrapper(self):
        """Wrapper for scheduled pipeline execution."""
        try:
            result, _ = await self.pipeline.run_trending()
            if not result.success:
                self.logger.warning(f"Trending run failed: {'; '.join(result.errors)}")
            return result
        except Exception as e:
            self.logger.error(f"Scheduled pipeline execution failed: {e}", exc_info=True)
            return None
