"""Daily engine: one entry point per dashboard surface."""

from datetime import date, datetime, timedelta
from typing import Any

import structlog

from dailycoach.adapters.base import BaseRepository
from dailycoach.aggregators.daily import DailyAggregator, DayState, mindful_played_since
from dailycoach.config.settings import settings
from dailycoach.engine.achievements import AchievementDetector, DetectionResult
from dailycoach.engine.focus import FocusService, FocusTaskGenerator
from dailycoach.engine.reminders import ReminderGenerator
from dailycoach.engine.scoring import calculate_all_scores
from dailycoach.models import (
    FocusTask,
    Goals,
    Habit,
    HabitCompletion,
    Reminder,
    ScoreCard,
    UserProfile,
    local_time,
)

logger = structlog.get_logger()


class DailyEngine:
    """Reads the repository once per call and fans out to the generators.

    Read failures are logged and degrade to empty inputs, so every method
    returns something renderable.
    """

    def __init__(
        self,
        repository: BaseRepository,
        reminders: ReminderGenerator | None = None,
        focus: FocusTaskGenerator | None = None,
    ) -> None:
        self.repository = repository
        self.daily = DailyAggregator(repository)
        self.reminders = reminders or ReminderGenerator()
        self.focus = FocusService(repository, focus)
        self.detector = AchievementDetector(repository)

    async def _habit_state(
        self, user_id: str, day: date
    ) -> tuple[list[Habit], list[HabitCompletion]]:
        habits: list[Habit] = []
        completions: list[HabitCompletion] = []
        try:
            habits = await self.repository.get_active_habits(user_id)
            completions = await self.repository.get_completions(
                user_id, since_days=settings.engine.completion_lookback_days, until=day
            )
        except Exception as e:
            logger.warning("Failed to fetch habits", user_id=user_id, error=str(e))
        return habits, completions

    async def _profile(self, user_id: str) -> UserProfile | None:
        try:
            return await self.repository.get_profile(user_id)
        except Exception as e:
            logger.warning("Failed to fetch profile", user_id=user_id, error=str(e))
            return None

    async def get_state(self, user_id: str, day: date) -> DayState:
        return await self.daily.get_day(user_id, day)

    async def get_reminders(self, user_id: str, now: datetime | None = None) -> list[Reminder]:
        """Reminder feed for the user at ``now``."""
        now = now or datetime.now()
        state = await self.daily.get_day(user_id, now.date())
        totals = state.totals
        # Sessions played late yesterday still count as recent
        if not totals.mindful_session_played:
            previous = await self.daily.get_day(user_id, now.date() - timedelta(days=1))
            if mindful_played_since(previous.logs, local_time(now) - timedelta(hours=24)):
                totals = totals.model_copy(update={"mindful_session_played": True})
        habits, completions = await self._habit_state(user_id, now.date())
        return self.reminders.generate(totals, habits, completions, now)

    async def get_focus_tasks(self, user_id: str, now: datetime | None = None) -> list[FocusTask]:
        """Today's Focus batch, generated on first request for the date."""
        try:
            return await self.focus.generate_if_needed(user_id, now)
        except Exception as e:
            logger.warning("Failed to load focus tasks", user_id=user_id, error=str(e))
            return []

    async def get_scores(self, user_id: str, day: date | None = None) -> ScoreCard:
        """Category scores and the composite for ``day``."""
        day = day or date.today()
        state = await self.daily.get_day(user_id, day)
        habits, completions = await self._habit_state(user_id, day)
        profile = await self._profile(user_id)

        focus_done = False
        try:
            tasks = await self.repository.get_focus_tasks(user_id, day)
            focus_done = bool(tasks) and all(t.is_completed for t in tasks)
        except Exception as e:
            logger.warning("Failed to fetch focus tasks", user_id=user_id, error=str(e))

        return calculate_all_scores(
            state.totals,
            habits,
            completions,
            day,
            goals=Goals.resolve(profile, settings.goals),
            all_focus_tasks_completed=focus_done,
        )

    async def detect_wins(self, user_id: str, day: date | None = None) -> DetectionResult:
        """Detect and persist wins for ``day`` (defaults to yesterday)."""
        try:
            return await self.detector.analyze_and_save(user_id, day)
        except Exception as e:
            logger.error("Win detection failed", user_id=user_id, error=str(e))
            return DetectionResult(day=day or date.today() - timedelta(days=1))

    async def summary(self, user_id: str, now: datetime | None = None) -> dict[str, Any]:
        """Everything a dashboard needs for one user in one call."""
        now = now or datetime.now()
        scores = await self.get_scores(user_id, now.date())
        return {
            "user_id": user_id,
            "date": now.date().isoformat(),
            "scores": scores.model_dump(),
            "reminders": [r.model_dump(mode="json") for r in await self.get_reminders(user_id, now)],
            "focus": [t.model_dump(mode="json") for t in await self.get_focus_tasks(user_id, now)],
        }
