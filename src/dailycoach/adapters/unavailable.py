"""Stand-in repository used when the configured store cannot be opened."""

from datetime import date

from dailycoach.adapters.base import BaseRepository, FetchError, PersistenceError
from dailycoach.models import (
    DailyTotals,
    FocusTask,
    Habit,
    HabitCompletion,
    LogVariant,
    UserProfile,
    WinEntry,
)


class UnavailableRepository(BaseRepository):
    """Fails every read and write with the reason the store is down."""

    def __init__(self, reason: str) -> None:
        super().__init__("unavailable")
        self.reason = reason

    def _fetch_error(self) -> FetchError:
        return FetchError(self.name, self.reason)

    async def get_logs_for_date(self, user_id: str, day: date) -> list[LogVariant]:
        raise self._fetch_error()

    async def get_daily_totals(self, user_id: str, day: date) -> DailyTotals | None:
        raise self._fetch_error()

    async def get_active_habits(self, user_id: str) -> list[Habit]:
        raise self._fetch_error()

    async def get_completions(
        self, user_id: str, since_days: int, until: date | None = None
    ) -> list[HabitCompletion]:
        raise self._fetch_error()

    async def get_profile(self, user_id: str) -> UserProfile | None:
        raise self._fetch_error()

    async def save_win(self, user_id: str, win: WinEntry) -> bool:
        raise PersistenceError(self.name, self.reason)

    async def get_focus_tasks(self, user_id: str, day: date) -> list[FocusTask]:
        raise self._fetch_error()

    async def save_focus_tasks(self, user_id: str, day: date, tasks: list[FocusTask]) -> None:
        raise PersistenceError(self.name, self.reason)

    async def health_check(self) -> bool:
        return False
