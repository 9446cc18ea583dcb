"""Tests for the in-memory and SQL repositories."""

from datetime import date, datetime, timezone

import pytest

from dailycoach.adapters.base import FetchError
from dailycoach.adapters.memory import InMemoryRepository
from dailycoach.adapters.sql import SQLRepository
from dailycoach.config.settings import settings
from dailycoach.db import close_db, init_db
from dailycoach.models import (
    DailyTotals,
    FocusTask,
    Habit,
    HabitCompletion,
    MealLog,
    ReminderActionType,
    ReminderType,
    UserProfile,
    WinEntry,
)


# 21:30 on 2026-01-19 in Los Angeles
LATE_UTC = datetime(2026, 1, 20, 5, 30, tzinfo=timezone.utc)


@pytest.fixture
async def sql_repo(tmp_path):
    engine = await init_db(f"sqlite:///{tmp_path / 'test.db'}")
    yield SQLRepository(engine)
    await close_db()


def win(day: date, rule_id: str | None, text: str = "Nice") -> WinEntry:
    return WinEntry(date=day, win=text, tags=["achievement"], rule_id=rule_id)


def focus_task(day: date, key: str) -> FocusTask:
    return FocusTask(
        id=f"focus_{key}_{day.isoformat()}",
        type=ReminderType.HEALTH_LOG,
        title=key.title(),
        description="",
        action_type=ReminderActionType.LOG_MEAL,
        user_id="u1",
        date=day,
    )


class TestInMemoryRepository:
    async def test_from_yaml(self, fixture_file, day):
        repo = InMemoryRepository.from_yaml(fixture_file)

        logs = await repo.get_logs_for_date("alice", day)
        totals = await repo.get_daily_totals("alice", day)
        profile = await repo.get_profile("alice")

        assert [log.type for log in logs] == ["meal", "workout"]
        assert totals == DailyTotals(steps=9000, water_ml_override=2100)
        assert profile.step_goal == 8000
        assert [h.id for h in await repo.get_active_habits("alice")] == ["h1"]
        assert len(await repo.get_completions("alice", since_days=1, until=day)) == 1

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FetchError):
            InMemoryRepository.from_yaml(tmp_path / "missing.yaml")

    async def test_completion_window(self, repo, day):
        repo.add_completions(
            "u1",
            HabitCompletion(habit_id="a", completed_at=datetime(2026, 1, 19, 8)),
            HabitCompletion(habit_id="a", completed_at=datetime(2026, 1, 13, 8)),
            HabitCompletion(habit_id="a", completed_at=datetime(2026, 1, 12, 8)),
        )

        assert len(await repo.get_completions("u1", since_days=7, until=day)) == 2
        assert len(await repo.get_completions("u1", since_days=1, until=day)) == 1

    async def test_completion_window_uses_local_day(self, repo, day, monkeypatch):
        monkeypatch.setattr(settings, "timezone", "America/Los_Angeles")
        repo.add_completions("u1", HabitCompletion(habit_id="a", completed_at=LATE_UTC))

        assert len(await repo.get_completions("u1", since_days=1, until=day)) == 1
        assert await repo.get_completions("u1", since_days=1, until=date(2026, 1, 20)) == []

    async def test_win_upsert(self, repo, day):
        assert await repo.save_win("u1", win(day, "goal:steps", "first"))
        assert not await repo.save_win("u1", win(day, "goal:steps", "second"))

        logs = await repo.get_logs_for_date("u1", day)
        assert [log.win for log in logs] == ["second"]

    async def test_journaled_win_without_rule(self, repo, day):
        await repo.save_win("u1", win(day, None))
        await repo.save_win("u1", win(day, None))

        assert len(await repo.get_logs_for_date("u1", day)) == 2


class TestSQLRepository:
    async def test_import_and_read(self, sql_repo, fixture_file, day):
        count = await sql_repo.import_repository(InMemoryRepository.from_yaml(fixture_file))

        assert count > 0
        logs = await sql_repo.get_logs_for_date("alice", day)
        assert [log.type for log in logs] == ["meal", "workout"]
        assert isinstance(logs[0], MealLog)
        assert await sql_repo.get_daily_totals("alice", day) == DailyTotals(
            steps=9000, water_ml_override=2100
        )
        assert (await sql_repo.get_profile("alice")).step_goal == 8000
        habits = await sql_repo.get_active_habits("alice")
        assert habits == [Habit(id="h1", title="Stretch", streak_count=7)]
        assert len(await sql_repo.get_completions("alice", since_days=1, until=day)) == 1

    async def test_missing_rows(self, sql_repo, day):
        assert await sql_repo.get_logs_for_date("nobody", day) == []
        assert await sql_repo.get_daily_totals("nobody", day) is None
        assert await sql_repo.get_profile("nobody") is None

    async def test_win_upsert(self, sql_repo, day):
        assert await sql_repo.save_win("u1", win(day, "goal:water", "first"))
        assert not await sql_repo.save_win("u1", win(day, "goal:water", "second"))
        assert await sql_repo.save_win("u1", win(day, "goal:steps"))

        logs = await sql_repo.get_logs_for_date("u1", day)
        assert sorted(log.win for log in logs) == ["Nice", "second"]

    async def test_aware_completion_stored_as_local_time(self, sql_repo, repo, day, monkeypatch):
        monkeypatch.setattr(settings, "timezone", "America/Los_Angeles")
        repo.add_completions("u1", HabitCompletion(habit_id="a", completed_at=LATE_UTC))

        await sql_repo.import_repository(repo)

        completions = await sql_repo.get_completions("u1", since_days=1, until=day)
        assert [c.completed_at for c in completions] == [datetime(2026, 1, 19, 21, 30)]

    async def test_focus_tasks_round_trip(self, sql_repo, day):
        tasks = [focus_task(day, "meal"), focus_task(day, "water")]

        await sql_repo.save_focus_tasks("u1", day, tasks)

        assert await sql_repo.get_focus_tasks("u1", day) == tasks
        assert await sql_repo.get_focus_tasks("u1", date(2026, 1, 20)) == []

    async def test_profile_and_health(self, sql_repo, repo):
        repo.set_profile("u1", UserProfile(calorie_goal=1800))
        await sql_repo.import_repository(repo)

        assert (await sql_repo.get_profile("u1")).calorie_goal == 1800
        assert await sql_repo.health_check()
