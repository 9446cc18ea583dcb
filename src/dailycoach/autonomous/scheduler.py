"""Scheduler for the daily dailycoach routines."""

import asyncio
import signal
from collections.abc import Sequence
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from dailycoach.adapters.base import BaseRepository
from dailycoach.config.logging import configure_logging
from dailycoach.config.settings import settings
from dailycoach.engine.daily import DailyEngine

logger = structlog.get_logger()


class DailyCoachScheduler:
    """Runs win detection overnight and Today's Focus generation each morning."""

    def __init__(
        self,
        repository: BaseRepository,
        user_ids: Sequence[str] | None = None,
        timezone: str | None = None,
    ) -> None:
        self.engine = DailyEngine(repository)
        self.user_ids = list(settings.scheduler.user_ids if user_ids is None else user_ids)
        self.timezone = ZoneInfo(timezone or settings.timezone)
        self.scheduler = AsyncIOScheduler(timezone=self.timezone)
        self._setup_jobs()

    def _setup_jobs(self) -> None:
        """Configure all scheduled jobs."""

        # Yesterday's wins, after midnight
        self.scheduler.add_job(
            self.detect_wins,
            CronTrigger(hour=settings.scheduler.wins_hour, minute=settings.scheduler.wins_minute),
            id="detect_wins",
            name="Detect Wins",
            replace_existing=True,
        )

        # Today's Focus before the user wakes up
        self.scheduler.add_job(
            self.generate_focus,
            CronTrigger(hour=settings.scheduler.focus_hour, minute=settings.scheduler.focus_minute),
            id="generate_focus",
            name="Generate Focus Tasks",
            replace_existing=True,
        )

        logger.info("Scheduled jobs configured", users=len(self.user_ids))

    async def detect_wins(self) -> int:
        """Detect and save wins for the previous day. Returns wins saved."""
        logger.info("Running win detection")
        yesterday = datetime.now(self.timezone).date() - timedelta(days=1)
        saved = 0
        for user_id in self.user_ids:
            try:
                result = await self.engine.detect_wins(user_id, yesterday)
                saved += result.saved
            except Exception as e:
                logger.error("Win detection failed", user_id=user_id, error=str(e))
        logger.info("Win detection complete", saved=saved)
        return saved

    async def generate_focus(self) -> int:
        """Generate today's focus batch for every user. Returns tasks generated."""
        logger.info("Running focus generation")
        now = datetime.now(self.timezone).replace(tzinfo=None)
        count = 0
        for user_id in self.user_ids:
            try:
                count += len(await self.engine.get_focus_tasks(user_id, now))
            except Exception as e:
                logger.error("Focus generation failed", user_id=user_id, error=str(e))
        logger.info("Focus generation complete", tasks=count)
        return count

    def start(self) -> None:
        """Start the scheduler."""
        self.scheduler.start()
        logger.info("dailycoach scheduler started")

    def stop(self) -> None:
        """Stop the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("dailycoach scheduler stopped")


async def run_scheduler() -> None:
    """Run the scheduler against the configured database until signalled."""
    from dailycoach.adapters.sql import SQLRepository
    from dailycoach.db import close_db, init_db

    await init_db()
    scheduler = DailyCoachScheduler(SQLRepository())
    scheduler.start()

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    try:
        await stop.wait()
    finally:
        logger.info("Shutting down scheduler...")
        scheduler.stop()
        await close_db()


def start_scheduler() -> None:
    """Entry point for scheduler service."""
    configure_logging()
    asyncio.run(run_scheduler())


if __name__ == "__main__":
    start_scheduler()
