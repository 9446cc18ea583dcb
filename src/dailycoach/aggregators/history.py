"""History aggregator building the personal-record baseline."""

import asyncio
from datetime import date, timedelta

import structlog

from dailycoach.adapters.base import BaseRepository
from dailycoach.aggregators.daily import DailyAggregator
from dailycoach.config.settings import settings
from dailycoach.models import DerivedDailyTotals, HistoricalWindow

logger = structlog.get_logger()


def window_days(target_date: date, days: int) -> list[date]:
    """The ``days`` calendar days strictly before ``target_date``, oldest first."""
    return [target_date - timedelta(days=offset) for offset in range(days, 0, -1)]


def build_window(day_totals: list[DerivedDailyTotals]) -> HistoricalWindow:
    """Fold per-day totals into per-metric maxima."""
    window = HistoricalWindow()
    for totals in day_totals:
        window = window.include(totals)
    return window


class HistoryAggregator:
    """Re-runs the daily aggregation over a trailing window.

    Days are independent, so reads are fanned out under a semaphore. The
    evaluated date itself is never part of its own baseline.
    """

    def __init__(self, repository: BaseRepository, concurrency: int | None = None) -> None:
        self.daily = DailyAggregator(repository)
        self.concurrency = max(1, concurrency or settings.engine.history_concurrency)

    async def get_window(
        self, user_id: str, target_date: date, days: int | None = None
    ) -> HistoricalWindow:
        """Compute the historical maxima for ``target_date``.

        Args:
            user_id: Owner of the logs.
            target_date: Date being evaluated (excluded from the window).
            days: Window length (defaults to settings.engine.history_days).

        Returns:
            Per-metric maxima over the window.
        """
        days = settings.engine.history_days if days is None else days
        semaphore = asyncio.Semaphore(self.concurrency)

        async def load(day: date) -> DerivedDailyTotals:
            async with semaphore:
                state = await self.daily.get_day(user_id, day)
                return state.totals

        day_totals = await asyncio.gather(*(load(d) for d in window_days(target_date, days)))
        window = build_window(list(day_totals))

        logger.debug(
            "Historical window built",
            user_id=user_id,
            target_date=target_date.isoformat(),
            days=days,
            days_with_data=window.days_with_data,
        )
        return window
