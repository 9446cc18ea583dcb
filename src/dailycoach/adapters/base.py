"""Base repository interface for the engine's read/write collaborators."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

import structlog

from dailycoach.models import (
    DailyTotals,
    FocusTask,
    Habit,
    HabitCompletion,
    LogVariant,
    UserProfile,
    WinEntry,
)

logger = structlog.get_logger()


class BaseRepository(ABC):
    """Abstract base class for all log stores.

    All repositories must implement:
    - get_logs_for_date(): Raw logs for one user and day
    - get_daily_totals(): External step counter / water override record
    - get_active_habits(): Habits currently being tracked
    - get_completions(): Habit completions over a recent window
    - get_profile(): Goals and macro targets
    - save_win(): Upsert one detected win
    - get_focus_tasks() / save_focus_tasks(): Today's Focus batch
    """

    def __init__(self, name: str) -> None:
        """Initialize repository with a name for logging."""
        self.name = name
        self.logger = logger.bind(repository=name)

    @abstractmethod
    async def get_logs_for_date(self, user_id: str, day: date) -> list[LogVariant]:
        """Fetch every raw log recorded for the day."""

    @abstractmethod
    async def get_daily_totals(self, user_id: str, day: date) -> DailyTotals | None:
        """Fetch the daily-totals record, or None if there is none."""

    @abstractmethod
    async def get_active_habits(self, user_id: str) -> list[Habit]:
        """Fetch the user's active habits."""

    @abstractmethod
    async def get_completions(
        self, user_id: str, since_days: int, until: date | None = None
    ) -> list[HabitCompletion]:
        """Fetch completions from the last ``since_days`` days.

        Args:
            user_id: Owner of the completions.
            since_days: Size of the lookback window in days.
            until: Last day of the window (defaults to today).
        """

    @abstractmethod
    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Fetch the user's profile, or None if it was never set up."""

    @abstractmethod
    async def save_win(self, user_id: str, win: WinEntry) -> bool:
        """Insert or replace a win keyed by (user_id, date, rule_id).

        Returns:
            True if a new row was created, False if an existing one was replaced.
        """

    @abstractmethod
    async def get_focus_tasks(self, user_id: str, day: date) -> list[FocusTask]:
        """Fetch the stored Today's Focus batch for a day."""

    @abstractmethod
    async def save_focus_tasks(self, user_id: str, day: date, tasks: list[FocusTask]) -> None:
        """Store a Today's Focus batch."""

    async def health_check(self) -> bool:
        """Verify the repository is operational."""
        return True

    async def close(self) -> None:
        """Release any held resources."""

    async def __aenter__(self) -> "BaseRepository":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()


class RepositoryError(Exception):
    """Base exception for repository errors."""

    def __init__(self, repository_name: str, message: str) -> None:
        self.repository_name = repository_name
        self.message = message
        super().__init__(f"[{repository_name}] {message}")


class FetchError(RepositoryError):
    """Raised when a read fails."""

    pass


class PersistenceError(RepositoryError):
    """Raised when a write fails."""

    pass
