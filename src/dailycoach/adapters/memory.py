"""In-memory repository, optionally seeded from a YAML fixture."""

from collections import defaultdict
from datetime import date, timedelta
from pathlib import Path
from typing import Any

import yaml

from dailycoach.adapters.base import BaseRepository, FetchError
from dailycoach.models import (
    LOG_ADAPTER,
    DailyTotals,
    FocusTask,
    Habit,
    HabitCompletion,
    LogVariant,
    UserProfile,
    WinEntry,
)


class InMemoryRepository(BaseRepository):
    """Dict-backed log store.

    Holds:
    - Raw logs per (user, day)
    - Daily-totals records per (user, day)
    - Habits, completions and profile per user
    - Detected wins keyed by (user, day, rule_id)
    - Today's Focus batches per (user, day)
    """

    def __init__(self) -> None:
        super().__init__("memory")
        self.logs: dict[tuple[str, date], list[LogVariant]] = defaultdict(list)
        self.totals: dict[tuple[str, date], DailyTotals] = {}
        self.habits: dict[str, list[Habit]] = defaultdict(list)
        self.completions: dict[str, list[HabitCompletion]] = defaultdict(list)
        self.profiles: dict[str, UserProfile] = {}
        self.wins: dict[tuple[str, date, str], WinEntry] = {}
        self.focus_tasks: dict[tuple[str, date], list[FocusTask]] = {}

    # Seeding helpers

    def add_logs(self, user_id: str, day: date, *logs: LogVariant) -> None:
        self.logs[(user_id, day)].extend(logs)

    def set_totals(self, user_id: str, day: date, totals: DailyTotals) -> None:
        self.totals[(user_id, day)] = totals

    def add_habits(self, user_id: str, *habits: Habit) -> None:
        self.habits[user_id].extend(habits)

    def add_completions(self, user_id: str, *completions: HabitCompletion) -> None:
        self.completions[user_id].extend(completions)

    def set_profile(self, user_id: str, profile: UserProfile) -> None:
        self.profiles[user_id] = profile

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InMemoryRepository":
        """Build a repository from a fixture mapping.

        Expected shape::

            users:
              alice:
                profile: {step_goal: 8000}
                habits: [{id: h1, title: Stretch}]
                completions: [{habit_id: h1, completed_at: 2026-01-19T08:00:00}]
                days:
                  2026-01-19:
                    totals: {steps: 9000}
                    logs: [{type: water, ml: 250}]
        """
        repo = cls()
        for user_id, user in (data.get("users") or {}).items():
            user_id = str(user_id)
            if user.get("profile"):
                repo.set_profile(user_id, UserProfile.model_validate(user["profile"]))
            repo.add_habits(user_id, *(Habit.model_validate(h) for h in user.get("habits", [])))
            repo.add_completions(
                user_id,
                *(HabitCompletion.model_validate(c) for c in user.get("completions", [])),
            )
            for raw_day, day_data in (user.get("days") or {}).items():
                day = raw_day if isinstance(raw_day, date) else date.fromisoformat(str(raw_day))
                if day_data.get("totals"):
                    repo.set_totals(user_id, day, DailyTotals.model_validate(day_data["totals"]))
                repo.add_logs(user_id, day, *LOG_ADAPTER.validate_python(day_data.get("logs", [])))
        return repo

    @classmethod
    def from_yaml(cls, path: Path) -> "InMemoryRepository":
        """Load a fixture file (see :meth:`from_dict`)."""
        path = path.expanduser()
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise FetchError("memory", f"Cannot load fixture {path}: {e}") from e
        return cls.from_dict(data)

    # Repository contract

    async def get_logs_for_date(self, user_id: str, day: date) -> list[LogVariant]:
        wins = [w for (uid, d, _), w in self.wins.items() if uid == user_id and d == day]
        return [*self.logs.get((user_id, day), []), *wins]

    async def get_daily_totals(self, user_id: str, day: date) -> DailyTotals | None:
        return self.totals.get((user_id, day))

    async def get_active_habits(self, user_id: str) -> list[Habit]:
        return [h for h in self.habits.get(user_id, []) if h.is_active]

    async def get_completions(
        self, user_id: str, since_days: int, until: date | None = None
    ) -> list[HabitCompletion]:
        until = until or date.today()
        start = until - timedelta(days=since_days)
        return [
            c
            for c in self.completions.get(user_id, [])
            if start < c.local_completed_at.date() <= until
        ]

    async def get_profile(self, user_id: str) -> UserProfile | None:
        return self.profiles.get(user_id)

    async def save_win(self, user_id: str, win: WinEntry) -> bool:
        if win.rule_id is None:
            self.add_logs(user_id, win.date, win)
            return True
        key = (user_id, win.date, win.rule_id)
        created = key not in self.wins
        self.wins[key] = win
        return created

    async def get_focus_tasks(self, user_id: str, day: date) -> list[FocusTask]:
        return list(self.focus_tasks.get((user_id, day), []))

    async def save_focus_tasks(self, user_id: str, day: date, tasks: list[FocusTask]) -> None:
        self.focus_tasks[(user_id, day)] = list(tasks)
