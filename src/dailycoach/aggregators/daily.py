"""State aggregator turning one day's raw logs into derived totals."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

import structlog

from dailycoach.adapters.base import BaseRepository
from dailycoach.models import (
    BreathingExerciseLog,
    DailyTotals,
    DerivedDailyTotals,
    HabitCompletion,
    JournalEntry,
    LogVariant,
    MealLog,
    MeditationLog,
    MindfulSession,
    MoodLog,
    SleepLog,
    SupplementLog,
    WaterLog,
    WeightLog,
    WinEntry,
    WorkoutLog,
    local_time,
)

logger = structlog.get_logger()

MAX_SLEEP_HOURS = 24.0
BREATHING_EMOTION = "breathing_exercise_completed"


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Wall-clock boundaries ``[00:00, next 00:00)`` of a day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def occurs_on(moment: datetime, day: date) -> bool:
    """Check whether a timestamp falls on the given local calendar day."""
    start, end = day_bounds(day)
    return start <= local_time(moment) < end


def completions_on(completions: Iterable[HabitCompletion], day: date) -> list[HabitCompletion]:
    """Filter completions down to those made on ``day``."""
    return [c for c in completions if occurs_on(c.completed_at, day)]


def mindful_played_since(logs: Iterable[LogVariant], since: datetime) -> bool:
    """Check whether any mindful session in ``logs`` was played at or after ``since``."""
    return any(
        local_time(log.last_played_at or log.timestamp) >= since
        for log in logs
        if isinstance(log, MindfulSession) and log.played_count > 0
    )


def valid_sleep_hours(log: SleepLog) -> float | None:
    """Duration of a sleep session, or None when outside (0, 24] hours."""
    hours = log.duration_hours
    if 0.0 < hours <= MAX_SLEEP_HOURS:
        return hours
    return None


def aggregate_day(
    logs: Sequence[LogVariant], daily_totals: DailyTotals | None = None
) -> DerivedDailyTotals:
    """Derive one day's totals from raw logs.

    Merge rules:
    - Water: a positive explicit override is used as-is; otherwise the sum
      of discrete water logs. The two sources are never added together.
    - Sleep: the longest session within (0, 24] hours. Naps are not summed
      onto the main sleep.
    - Steps: only from the daily-totals record.

    Negative quantities are skipped. A missing daily-totals record yields
    zeros rather than an error.
    """
    meals = [log for log in logs if isinstance(log, MealLog)]
    workouts = [log for log in logs if isinstance(log, WorkoutLog)]
    sleep_logs = [log for log in logs if isinstance(log, SleepLog)]
    water_logs = [log for log in logs if isinstance(log, WaterLog) and log.ml >= 0]
    weight_logs = [log for log in logs if isinstance(log, WeightLog) and log.weight > 0]
    journals = [log for log in logs if isinstance(log, JournalEntry)]
    mindful = [log for log in logs if isinstance(log, MindfulSession)]
    moods = [log for log in logs if isinstance(log, MoodLog)]

    # Water
    override = daily_totals.water_ml_override if daily_totals else None
    if override is not None and override > 0:
        total_water = override
    else:
        total_water = sum(log.ml for log in water_logs)

    # Sleep (longest valid session)
    sleep_hours = [h for h in (valid_sleep_hours(log) for log in sleep_logs) if h is not None]
    total_sleep = max(sleep_hours, default=0.0)

    # Steps (external feed only)
    steps = daily_totals.steps if daily_totals and daily_totals.steps else 0
    total_steps = max(steps, 0)

    logged = [
        bool(meals),
        bool(workouts),
        bool(sleep_hours),
        total_water > 0,
        total_steps > 0,
        bool(weight_logs),
    ]

    return DerivedDailyTotals(
        total_water=total_water,
        total_sleep_hours=total_sleep,
        total_steps=total_steps,
        total_calories=sum(max(m.calories, 0) for m in meals),
        workout_count=len(workouts),
        meal_count=len(meals),
        has_weight_log=bool(weight_logs),
        metrics_logged_count=sum(logged),
        total_workout_minutes=sum(max(w.duration_min, 0) for w in workouts),
        calories_burned=sum(max(w.calories_burned, 0) for w in workouts),
        total_protein=sum(max(m.protein, 0) for m in meals),
        total_carbs=sum(max(m.carbs, 0) for m in meals),
        total_fat=sum(max(m.fat, 0) for m in meals),
        has_sleep_log=bool(sleep_hours),
        has_water_log=bool(water_logs),
        has_mood_log=bool(moods),
        has_meditation=any(isinstance(log, MeditationLog) for log in logs),
        has_journal=bool(journals),
        journal_completed=any(j.is_completed for j in journals),
        has_mindful_session=bool(mindful),
        mindful_session_played=any(s.played_count > 0 for s in mindful),
        has_breathing=bool(mindful)
        or any(isinstance(log, BreathingExerciseLog) for log in logs)
        or any(BREATHING_EMOTION in m.emotions for m in moods),
        has_win_entry=any(isinstance(log, WinEntry) for log in logs),
        has_supplement=any(isinstance(log, SupplementLog) for log in logs),
        has_social_interaction=any(
            m.social_interaction not in (None, "", "none") for m in moods
        ),
    )


@dataclass
class DayState:
    """Everything read for one (user, day), plus its derived totals."""

    day: date
    logs: list[LogVariant] = field(default_factory=list)
    daily_totals: DailyTotals | None = None
    totals: DerivedDailyTotals = field(default_factory=DerivedDailyTotals)


class DailyAggregator:
    """Reads one day from a repository and aggregates it.

    Read failures degrade to an empty day so callers always get a
    renderable state.
    """

    def __init__(self, repository: BaseRepository) -> None:
        self.repository = repository

    async def get_day(self, user_id: str, day: date) -> DayState:
        """Fetch logs and the daily-totals record, then aggregate.

        Args:
            user_id: Owner of the logs.
            day: Calendar day to aggregate.

        Returns:
            The raw inputs and the derived totals.
        """
        logs: list[LogVariant] = []
        daily_totals: DailyTotals | None = None

        try:
            logs = await self.repository.get_logs_for_date(user_id, day)
        except Exception as e:
            logger.warning("Failed to fetch logs", user_id=user_id, day=day.isoformat(), error=str(e))

        try:
            daily_totals = await self.repository.get_daily_totals(user_id, day)
        except Exception as e:
            logger.warning(
                "Failed to fetch daily totals", user_id=user_id, day=day.isoformat(), error=str(e)
            )

        return DayState(
            day=day,
            logs=logs,
            daily_totals=daily_totals,
            totals=aggregate_day(logs, daily_totals),
        )
