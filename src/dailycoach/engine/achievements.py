"""Achievement detection: personal records, goals, habits and macros.

Compares one evaluated date against the maxima of the preceding days and
emits :class:`WinEntry` records. Every win carries a ``rule_id`` so that
persisting the same date twice replaces rather than duplicates.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

import structlog

from dailycoach.adapters.base import BaseRepository
from dailycoach.aggregators.daily import DailyAggregator, completions_on
from dailycoach.aggregators.history import HistoryAggregator
from dailycoach.config.settings import settings
from dailycoach.engine.macros import macro_hits, resolve_macro_targets
from dailycoach.models import (
    DerivedDailyTotals,
    Goals,
    Habit,
    HabitCompletion,
    HistoricalWindow,
    MacroTargets,
    WinEntry,
)

logger = structlog.get_logger()

ACHIEVEMENT_MARKER = "achievement_win"
ACHIEVEMENT_TAG = "achievement"
ML_PER_GLASS = 240.0
RECORD_SLEEP_RANGE = (6.0, 12.0)
GOAL_SLEEP_RANGE = (7.0, 9.0)
STREAK_STEP = 7
MILESTONES = {
    7: "7-day streak! One week strong!",
    30: "30-day streak! A full month of consistency!",
    100: "100-day streak! Incredible dedication!",
}


def format_steps(steps: int) -> str:
    return f"{steps // 1000}k" if steps >= 10000 else str(steps)


def glasses(water_ml: int) -> int:
    return int(water_ml / ML_PER_GLASS)


def plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def create_win(day: date, rule_id: str, text: str, tags: Sequence[str]) -> WinEntry:
    """Build a detected win; the achievement tag is always present."""
    all_tags = list(dict.fromkeys([*tags, ACHIEVEMENT_TAG]))
    return WinEntry(
        journal_entry_id=ACHIEVEMENT_MARKER,
        date=day,
        win=text,
        tags=all_tags,
        rule_id=rule_id,
    )


def detect_personal_records(
    day: date,
    today: DerivedDailyTotals,
    window: HistoricalWindow,
    min_steps: int | None = None,
    min_water: int | None = None,
) -> list[WinEntry]:
    """Metrics that beat the historical maximum, subject to thresholds.

    Steps and water need at least one prior day of data, sleep needs a prior
    sleep maximum. Workouts and calories burned follow their own guards.
    """
    has_baseline = window.days_with_data > 0
    min_steps = settings.engine.min_steps_for_record if min_steps is None else min_steps
    min_water = settings.engine.min_water_for_record if min_water is None else min_water
    wins = []

    if has_baseline and today.total_steps > window.steps and today.total_steps >= min_steps:
        wins.append(create_win(
            day, "record:steps",
            f"Personal record: {format_steps(today.total_steps)} steps! Your best day yet!",
            ["fitness", "steps", "personal-record"],
        ))

    if has_baseline and today.total_water > window.water and today.total_water >= min_water:
        wins.append(create_win(
            day, "record:water",
            f"Personal record: {glasses(today.total_water)} glasses of water! Stay hydrated!",
            ["health", "water", "personal-record"],
        ))

    # A first-ever single workout is not a record
    workouts = today.workout_count
    if (
        workouts > window.workout_count
        and workouts > 0
        and (workouts > 1 or window.workout_count > 0)
    ):
        wins.append(create_win(
            day, "record:workouts",
            f"Personal record: {plural(workouts, 'workout')} in one day! You're on fire!",
            ["fitness", "workouts", "personal-record"],
        ))

    if today.calories_burned > window.calories and today.calories_burned > 0:
        wins.append(create_win(
            day, "record:calories",
            f"Personal record: {today.calories_burned} calories burned! Amazing effort!",
            ["fitness", "calories", "personal-record"],
        ))

    # No sleep record without a prior baseline
    low, high = RECORD_SLEEP_RANGE
    sleep = today.total_sleep_hours
    if low <= sleep <= high and sleep > window.sleep_hours and window.sleep_hours > 0:
        wins.append(create_win(
            day, "record:sleep",
            f"Personal record: {sleep:.1f} hours of sleep! Great recovery!",
            ["health", "sleep", "personal-record"],
        ))

    return wins


def detect_goal_achievements(
    day: date, today: DerivedDailyTotals, goals: Goals | None = None
) -> list[WinEntry]:
    """Targets met today, independent of history."""
    goals = goals or Goals()
    wins = []

    if today.total_steps >= goals.step_goal:
        wins.append(create_win(
            day, "goal:steps",
            f"Hit your step goal! {format_steps(today.total_steps)} steps today!",
            ["fitness", "steps", "goal"],
        ))

    if today.total_water >= goals.water_goal_ml:
        wins.append(create_win(
            day, "goal:water",
            f"Hit your water goal! {glasses(today.total_water)} glasses today!",
            ["health", "water", "goal"],
        ))

    if today.workout_count >= 1:
        wins.append(create_win(
            day, "goal:workouts",
            f"Completed {plural(today.workout_count, 'workout')}! Great job staying active!",
            ["fitness", "workouts", "goal"],
        ))

    low, high = GOAL_SLEEP_RANGE
    if low <= today.total_sleep_hours <= high:
        wins.append(create_win(
            day, "goal:sleep",
            f"Perfect sleep! {today.total_sleep_hours:.1f} hours of quality rest!",
            ["health", "sleep", "goal"],
        ))

    return wins


def detect_habit_wins(
    day: date, habits: Sequence[Habit], completions: Sequence[HabitCompletion]
) -> list[WinEntry]:
    """One combined completion win, plus a streak win per weekly multiple."""
    done_ids = {c.habit_id for c in completions_on(completions, day)}
    completed = [h for h in habits if h.id in done_ids]
    if not completed:
        return []

    names = ", ".join(h.title for h in completed)
    wins = [
        create_win(
            day, "habit:completed",
            f"Completed {plural(len(completed), 'habit')}: {names}!",
            ["habits", "consistency"],
        )
    ]
    for habit in completed:
        if habit.streak_count > 0 and habit.streak_count % STREAK_STEP == 0:
            wins.append(create_win(
                day, f"habit:streak:{habit.id}",
                f"{habit.title} streak: {habit.streak_count} days! Keep it going!",
                ["habits", "streak", "milestone"],
            ))
    return wins


def detect_streak_milestones(day: date, habits: Sequence[Habit]) -> list[WinEntry]:
    """Fixed milestones at 7, 30 and 100 days."""
    return [
        create_win(
            day, f"habit:milestone:{habit.id}",
            f"{habit.title}: {MILESTONES[habit.streak_count]}",
            ["habits", "streak", "milestone"],
        )
        for habit in habits
        if habit.streak_count in MILESTONES
    ]


def detect_macro_wins(
    day: date, today: DerivedDailyTotals, targets: MacroTargets
) -> list[WinEntry]:
    """Perfect macro day beats protein-only; carbs or fat alone are not reported."""
    if today.meal_count == 0:
        return []

    protein_hit, carbs_hit, fat_hit = macro_hits(today, targets)
    if protein_hit and carbs_hit and fat_hit:
        return [create_win(
            day, "macro:perfect",
            "Perfect macro day! Hit all your protein, carbs, and fat goals!",
            ["nutrition", "macros", "goal"],
        )]
    if protein_hit:
        return [create_win(
            day, "macro:protein",
            f"Hit your protein goal! {int(today.total_protein)}g of protein today!",
            ["nutrition", "protein", "goal"],
        )]
    return []


def detect_wins(
    day: date,
    today: DerivedDailyTotals,
    window: HistoricalWindow,
    habits: Sequence[Habit],
    completions: Sequence[HabitCompletion],
    goals: Goals | None = None,
    macro_targets: MacroTargets | None = None,
) -> list[WinEntry]:
    """Run every rule family over one day."""
    targets = macro_targets or resolve_macro_targets(None)
    return [
        *detect_personal_records(day, today, window),
        *detect_goal_achievements(day, today, goals),
        *detect_habit_wins(day, habits, completions),
        *detect_macro_wins(day, today, targets),
        *detect_streak_milestones(day, habits),
    ]


@dataclass
class DetectionResult:
    """Wins detected for one date and how persisting them went."""

    day: date
    wins: list[WinEntry] = field(default_factory=list)
    saved: int = 0
    failed: int = 0


class AchievementDetector:
    """Reads a date and its history, detects wins and persists them.

    Each win is written independently; a failed write is logged and the
    rest still go through. Writes are shielded from caller cancellation.
    """

    def __init__(self, repository: BaseRepository, history_days: int | None = None) -> None:
        self.repository = repository
        self.history_days = settings.engine.history_days if history_days is None else history_days
        self.daily = DailyAggregator(repository)
        self.history = HistoryAggregator(repository)

    async def analyze(self, user_id: str, day: date | None = None) -> list[WinEntry]:
        """Detect wins for ``day`` (defaults to yesterday) without persisting."""
        day = day or date.today() - timedelta(days=1)

        state = await self.daily.get_day(user_id, day)
        window = await self.history.get_window(user_id, day, self.history_days)
        habits = await self.repository.get_active_habits(user_id)
        completions = await self.repository.get_completions(
            user_id, since_days=settings.engine.completion_lookback_days, until=day
        )
        profile = await self.repository.get_profile(user_id)

        return detect_wins(
            day,
            state.totals,
            window,
            habits,
            completions,
            goals=Goals.resolve(profile, settings.goals),
            macro_targets=resolve_macro_targets(profile),
        )

    async def analyze_and_save(self, user_id: str, day: date | None = None) -> DetectionResult:
        """Detect wins for ``day`` and upsert each one."""
        day = day or date.today() - timedelta(days=1)
        wins = await self.analyze(user_id, day)
        result = DetectionResult(day=day, wins=wins)

        saved, failed = await asyncio.shield(self._persist(user_id, wins))
        result.saved, result.failed = saved, failed

        logger.info(
            "Detected wins",
            user_id=user_id,
            day=day.isoformat(),
            count=len(wins),
            saved=saved,
            failed=failed,
        )
        return result

    async def _persist(self, user_id: str, wins: Sequence[WinEntry]) -> tuple[int, int]:
        saved = failed = 0
        for win in wins:
            try:
                await self.repository.save_win(user_id, win)
                saved += 1
                logger.debug("Saved win", rule_id=win.rule_id, win=win.win)
            except Exception as e:
                failed += 1
                logger.error("Failed to save win", rule_id=win.rule_id, error=str(e))
        return saved, failed
