"""Today's Focus task batch: 7 to 9 tasks generated once per date."""

from collections.abc import Sequence
from datetime import date, datetime

import structlog

from dailycoach.adapters.base import BaseRepository
from dailycoach.aggregators.daily import DailyAggregator
from dailycoach.config.settings import settings
from dailycoach.engine.reminders import (
    ReminderBatch,
    fill_quota,
    habit_reminder,
    latest_completions,
    sort_reminders,
)
from dailycoach.models import (
    DerivedDailyTotals,
    FocusTask,
    Habit,
    HabitCompletion,
    Reminder,
    ReminderActionType,
    ReminderType,
)

logger = structlog.get_logger()

Action = ReminderActionType

MAX_HABIT_TASKS = 5


def _task(
    day: date,
    key: str,
    reminder_type: ReminderType,
    title: str,
    description: str,
    action: ReminderActionType,
    duration: int,
) -> Reminder:
    return Reminder(
        id=f"focus_{key}_{day.isoformat()}",
        type=reminder_type,
        title=title,
        description=description,
        action_type=action,
        estimated_duration=duration,
    )


class FocusTaskGenerator:
    """Builds the Today's Focus batch.

    Health-log tasks for anything not yet logged, up to five incomplete
    habits, then wellness tasks. Short batches are topped up with sleep and
    weight tasks, further habits, and finally the generic reminder pool.
    """

    def __init__(
        self,
        min_tasks: int | None = None,
        max_tasks: int | None = None,
        max_filler_attempts: int | None = None,
    ) -> None:
        self.min_tasks = settings.engine.min_tasks if min_tasks is None else min_tasks
        self.max_tasks = settings.engine.max_tasks if max_tasks is None else max_tasks
        self.max_filler_attempts = (
            settings.engine.max_filler_attempts
            if max_filler_attempts is None
            else max_filler_attempts
        )

    def generate(
        self,
        user_id: str,
        totals: DerivedDailyTotals,
        habits: Sequence[Habit],
        completions: Sequence[HabitCompletion],
        now: datetime,
    ) -> list[FocusTask]:
        """Build a batch of ``min_tasks`` to ``max_tasks`` tasks for ``now``'s date."""
        day = now.date()
        batch = ReminderBatch()

        # Health logs
        if totals.meal_count == 0:
            batch.add(_task(
                day, "meal", ReminderType.HEALTH_LOG, "Log Your First Meal",
                "Start tracking your nutrition by logging breakfast or your first meal",
                Action.LOG_MEAL, 2,
            ))
        if totals.total_water < 1000:
            batch.add(_task(
                day, "water", ReminderType.HEALTH_LOG, "Drink Water",
                "Stay hydrated! Log at least one glass of water",
                Action.LOG_WATER, 1,
            ))
        if totals.workout_count == 0:
            batch.add(_task(
                day, "workout", ReminderType.HEALTH_LOG, "Log a Workout",
                "Track your physical activity for today",
                Action.LOG_WORKOUT, 1,
            ))

        # Habits
        done = latest_completions(completions, day)
        incomplete = [h for h in habits if h.is_active and h.id not in done]
        for habit in incomplete[:MAX_HABIT_TASKS]:
            batch.add(habit_reminder(habit, day, None, id_prefix="focus_habit"))

        # Wellness
        if not totals.has_journal:
            batch.add(_task(
                day, "journal", ReminderType.WELLNESS, "Write in Journal",
                "Take a moment to reflect and write in your journal",
                Action.START_JOURNAL, 5,
            ))
        if not totals.has_meditation and not totals.has_mindful_session:
            batch.add(_task(
                day, "meditation", ReminderType.WELLNESS, "Meditation or Mindfulness",
                "Take 5-10 minutes for meditation or a mindfulness session",
                Action.START_MEDITATION, 10,
            ))
        if batch.count_type(ReminderType.WELLNESS) < 2:
            batch.add(_task(
                day, "breathing", ReminderType.WELLNESS, "Breathing Exercise",
                "Practice deep breathing for stress relief and focus",
                Action.START_MINDFULNESS, 3,
            ))

        if len(batch) < self.min_tasks:
            self._top_up(batch, totals, incomplete[MAX_HABIT_TASKS:], day)

        ordered = sort_reminders(batch.to_list(), now)[: self.max_tasks]
        return [FocusTask(user_id=user_id, date=day, **r.model_dump()) for r in ordered]

    def _top_up(
        self,
        batch: ReminderBatch,
        totals: DerivedDailyTotals,
        extra_habits: Sequence[Habit],
        day: date,
    ) -> None:
        needed = self.min_tasks - len(batch)
        if not totals.has_sleep_log and not batch.has_action(Action.LOG_SLEEP):
            batch.add(_task(
                day, "sleep", ReminderType.HEALTH_LOG, "Log Sleep",
                "Track your sleep duration and quality",
                Action.LOG_SLEEP, 1,
            ))
        if not totals.has_weight_log and not batch.has_action(Action.LOG_WEIGHT):
            batch.add(_task(
                day, "weight", ReminderType.HEALTH_LOG, "Log Weight",
                "Track your weight for today",
                Action.LOG_WEIGHT, 1,
            ))
        for habit in extra_habits[:needed]:
            batch.add(habit_reminder(habit, day, None, id_prefix="focus_habit"))

        fill_quota(batch, day, self.min_tasks, self.max_filler_attempts)


class FocusService:
    """Generates the Today's Focus batch at most once per user and date."""

    def __init__(self, repository: BaseRepository, generator: FocusTaskGenerator | None = None) -> None:
        self.repository = repository
        self.generator = generator or FocusTaskGenerator()
        self.daily = DailyAggregator(repository)

    async def generate_if_needed(self, user_id: str, now: datetime | None = None) -> list[FocusTask]:
        """Return the stored batch for today, generating and saving it if absent."""
        now = now or datetime.now()
        day = now.date()

        existing = await self.repository.get_focus_tasks(user_id, day)
        if existing:
            logger.debug("Focus tasks already exist", user_id=user_id, count=len(existing))
            return existing

        state = await self.daily.get_day(user_id, day)
        habits = await self.repository.get_active_habits(user_id)
        completions = await self.repository.get_completions(user_id, since_days=1, until=day)

        tasks = self.generator.generate(user_id, state.totals, habits, completions, now)
        await self.repository.save_focus_tasks(user_id, day, tasks)

        logger.info("Generated focus tasks", user_id=user_id, day=day.isoformat(), count=len(tasks))
        return tasks
