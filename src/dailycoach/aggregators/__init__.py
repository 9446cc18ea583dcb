"""Aggregators turning raw logs into derived daily totals."""

from dailycoach.aggregators.daily import (
    DailyAggregator,
    DayState,
    aggregate_day,
    completions_on,
    day_bounds,
    mindful_played_since,
    occurs_on,
)
from dailycoach.aggregators.history import HistoryAggregator, build_window, window_days

__all__ = [
    "DailyAggregator",
    "DayState",
    "HistoryAggregator",
    "aggregate_day",
    "build_window",
    "completions_on",
    "day_bounds",
    "mindful_played_since",
    "occurs_on",
    "window_days",
]
