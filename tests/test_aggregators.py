"""Tests for daily and historical aggregation."""

from datetime import date, datetime, timedelta, timezone

from dailycoach.adapters.base import FetchError
from dailycoach.adapters.memory import InMemoryRepository
from dailycoach.config.settings import settings
from dailycoach.aggregators import (
    DailyAggregator,
    HistoryAggregator,
    aggregate_day,
    occurs_on,
    window_days,
)
from dailycoach.engine.reminders import ReminderGenerator
from dailycoach.engine.scoring import calculate_habits_score
from dailycoach.models import (
    DailyTotals,
    DerivedDailyTotals,
    Habit,
    HabitCompletion,
    MealLog,
    MindfulSession,
    MoodLog,
    SleepLog,
    WaterLog,
    WeightLog,
    WorkoutLog,
)


def sleep(day: date, hours: float) -> SleepLog:
    start = datetime.combine(day, datetime.min.time()) - timedelta(hours=2)
    return SleepLog(start_time=start, end_time=start + timedelta(hours=hours))


class FailingRepository(InMemoryRepository):
    async def get_logs_for_date(self, user_id, day):
        raise FetchError(self.name, "unavailable")


def test_sleep_keeps_longest_valid_session(day):
    totals = aggregate_day([sleep(day, 3.0), sleep(day, 7.5), sleep(day, 25.0)])

    assert totals.total_sleep_hours == 7.5
    assert totals.has_sleep_log


def test_water_override_replaces_logs(day):
    logs = [WaterLog(ml=250), WaterLog(ml=350)]

    assert aggregate_day(logs, DailyTotals(water_ml_override=1800)).total_water == 1800
    assert aggregate_day(logs, DailyTotals(water_ml_override=0)).total_water == 600
    assert aggregate_day(logs).total_water == 600


def test_steps_only_from_daily_totals():
    assert aggregate_day([]).total_steps == 0
    assert aggregate_day([], DailyTotals(steps=8421)).total_steps == 8421


def test_negative_quantities_are_skipped():
    logs = [
        MealLog(food_name="Bad", calories=-300),
        MealLog(food_name="Toast", calories=200, protein=8),
        WaterLog(ml=-100),
        WeightLog(weight=-1),
        WorkoutLog(duration_min=-20, calories_burned=-50),
    ]
    totals = aggregate_day(logs)

    assert totals.total_calories == 200
    assert totals.total_water == 0
    assert not totals.has_weight_log
    assert totals.total_workout_minutes == 0
    assert totals.calories_burned == 0


def test_metrics_logged_count(day):
    logs = [MealLog(calories=500), WorkoutLog(duration_min=30), sleep(day, 8), WaterLog(ml=500)]
    totals = aggregate_day(logs, DailyTotals(steps=4000))

    assert totals.metrics_logged_count == 5
    assert totals.meal_count == 1
    assert totals.workout_count == 1


def test_wellness_flags():
    logs = [
        MindfulSession(title="Reset", played_count=1),
        MoodLog(level=4, social_interaction="moderate"),
    ]
    totals = aggregate_day(logs)

    assert totals.has_mindful_session
    assert totals.mindful_session_played
    assert totals.has_breathing
    assert totals.has_mood_log
    assert totals.has_social_interaction


def test_social_interaction_none_does_not_count():
    assert not aggregate_day([MoodLog(social_interaction="none")]).has_social_interaction


def test_occurs_on_day_boundaries(day):
    assert occurs_on(datetime(2026, 1, 19, 0, 0), day)
    assert occurs_on(datetime(2026, 1, 19, 23, 59), day)
    assert not occurs_on(datetime(2026, 1, 20, 0, 0), day)


def test_aware_completion_counts_on_local_day(day, monkeypatch):
    monkeypatch.setattr(settings, "timezone", "America/Los_Angeles")
    # 21:30 on the 19th in Los Angeles, already the 20th in UTC
    late = HabitCompletion(habit_id="h1", completed_at=datetime(2026, 1, 20, 5, 30, tzinfo=timezone.utc))
    habits = [Habit(id="h1", title="Stretch"), Habit(id="h2", title="Read")]

    assert occurs_on(late.completed_at, day)
    assert not occurs_on(late.completed_at, date(2026, 1, 20))
    assert calculate_habits_score(habits, [late], day) == 50
    assert calculate_habits_score(habits, [late], date(2026, 1, 20)) == 0

    items = ReminderGenerator().generate(DerivedDailyTotals(), habits, [late], datetime(2026, 1, 19, 22))
    by_id = {r.id: r for r in items}
    assert by_id["habit_h1_2026-01-19"].is_completed
    assert not by_id["habit_h2_2026-01-19"].is_completed


def test_window_days_excludes_target(day):
    days = window_days(day, 3)

    assert days == [date(2026, 1, 16), date(2026, 1, 17), date(2026, 1, 18)]
    assert day not in days


async def test_daily_aggregator_reads_repository(repo, day):
    repo.add_logs("u1", day, WaterLog(ml=500), MealLog(calories=600))
    repo.set_totals("u1", day, DailyTotals(steps=7000))

    state = await DailyAggregator(repo).get_day("u1", day)

    assert state.totals.total_water == 500
    assert state.totals.total_steps == 7000
    assert len(state.logs) == 2


async def test_daily_aggregator_degrades_on_read_failure(day):
    repo = FailingRepository()
    repo.set_totals("u1", day, DailyTotals(steps=3000))

    state = await DailyAggregator(repo).get_day("u1", day)

    assert state.logs == []
    assert state.totals.total_steps == 3000


async def test_history_window_takes_maxima(repo, day):
    repo.set_totals("u1", day - timedelta(days=1), DailyTotals(steps=9000))
    repo.set_totals("u1", day - timedelta(days=5), DailyTotals(steps=12000))
    repo.add_logs("u1", day - timedelta(days=2), WorkoutLog(duration_min=30, calories_burned=400))
    # Evaluated date never counts toward its own baseline
    repo.set_totals("u1", day, DailyTotals(steps=50000))

    window = await HistoryAggregator(repo, concurrency=2).get_window("u1", day, days=10)

    assert window.steps == 12000
    assert window.workout_count == 1
    assert window.calories == 400
    assert window.days_with_data == 3


async def test_history_window_empty(repo, day):
    window = await HistoryAggregator(repo).get_window("u1", day, days=30)

    assert window.days_with_data == 0
    assert window.steps == 0
