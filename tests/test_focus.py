"""Tests for Today's Focus generation."""

from datetime import timedelta

import pytest

from dailycoach.engine.focus import FocusService, FocusTaskGenerator
from dailycoach.models import DerivedDailyTotals, Habit, HabitCompletion, WaterLog


@pytest.fixture
def generator() -> FocusTaskGenerator:
    return FocusTaskGenerator()


def test_empty_day_is_topped_up(generator, at, day):
    tasks = generator.generate("u1", DerivedDailyTotals(), [], [], at(6))
    ids = {t.id for t in tasks}

    assert len(tasks) == 7
    assert f"focus_sleep_{day.isoformat()}" in ids
    assert f"focus_weight_{day.isoformat()}" in ids
    assert all(t.user_id == "u1" and t.date == day for t in tasks)


def test_batch_is_capped(generator, at):
    habits = [Habit(id=f"h{i}", title=f"Habit {i}") for i in range(8)]

    tasks = generator.generate("u1", DerivedDailyTotals(), habits, [], at(6))

    assert len(tasks) == 9
    assert sum(1 for t in tasks if t.id.startswith("focus_habit_")) <= 5


def test_completed_habits_excluded(generator, at, day):
    habits = [Habit(id="h1", title="Stretch"), Habit(id="h2", title="Read")]
    done = [HabitCompletion(habit_id="h1", completed_at=at(5))]

    ids = {t.id for t in generator.generate("u1", DerivedDailyTotals(), habits, done, at(6))}

    assert f"focus_habit_h1_{day.isoformat()}" not in ids
    assert f"focus_habit_h2_{day.isoformat()}" in ids


@pytest.mark.parametrize(
    "totals",
    [
        DerivedDailyTotals(),
        DerivedDailyTotals(
            meal_count=3,
            total_water=2000,
            workout_count=1,
            has_journal=True,
            has_meditation=True,
            has_sleep_log=True,
            has_weight_log=True,
        ),
        DerivedDailyTotals(meal_count=1, has_journal=True),
    ],
)
def test_batch_size_bounds(generator, at, totals, habits):
    tasks = generator.generate("u1", totals, habits, [], at(6))

    assert 7 <= len(tasks) <= 9
    assert len({t.id for t in tasks}) == len(tasks)


async def test_generated_once_per_date(repo, at, day):
    service = FocusService(repo)

    first = await service.generate_if_needed("u1", at(6))
    repo.add_logs("u1", day, WaterLog(ml=2000))
    second = await service.generate_if_needed("u1", at(14))

    assert [t.id for t in second] == [t.id for t in first]
    assert await repo.get_focus_tasks("u1", day) == first


async def test_new_date_gets_new_batch(repo, at, day):
    service = FocusService(repo)

    today = await service.generate_if_needed("u1", at(6))
    tomorrow = await service.generate_if_needed("u1", at(6) + timedelta(days=1))

    assert {t.date for t in today} == {day}
    assert {t.date for t in tomorrow} == {day + timedelta(days=1)}
