"""Reminder feed generation.

Turns derived totals, habits and the time of day into a deduplicated,
quota-bounded, priority-ordered list of suggestions for right now.
"""

from collections.abc import Iterable, Iterator, Sequence
from datetime import date, datetime
from enum import Enum

import structlog

from dailycoach.aggregators.daily import completions_on
from dailycoach.config.settings import settings
from dailycoach.engine.rotation import pick
from dailycoach.models import (
    DerivedDailyTotals,
    Habit,
    HabitCompletion,
    HabitFrequency,
    Reminder,
    ReminderActionType,
    ReminderPriority,
    ReminderType,
)

logger = structlog.get_logger()

Action = ReminderActionType
Priority = ReminderPriority

# Meal windows as [start_hour, end_hour)
MEAL_WINDOWS = ((6, 10), (11, 14), (17, 21))
WATER_TERMS = ("water", "glass")


class TimeWindow(str, Enum):
    MORNING = "morning"  # [00:00, 12:00)
    AFTERNOON = "afternoon"  # [12:00, 17:00)
    EVENING = "evening"  # [17:00, 24:00)


def classify_time(now: datetime) -> TimeWindow:
    if now.hour < 12:
        return TimeWindow.MORNING
    if now.hour < 17:
        return TimeWindow.AFTERNOON
    return TimeWindow.EVENING


def is_meal_time(now: datetime) -> bool:
    return any(start <= now.hour < end for start, end in MEAL_WINDOWS)


class ReminderBatch:
    """Insertion-ordered reminders; an already-seen id is dropped, not merged."""

    def __init__(self, reminders: Iterable[Reminder] = ()) -> None:
        self._items: list[Reminder] = []
        self._ids: set[str] = set()
        for reminder in reminders:
            self.add(reminder)

    def add(self, reminder: Reminder) -> bool:
        if reminder.id in self._ids:
            return False
        self._items.append(reminder)
        self._ids.add(reminder.id)
        return True

    def __contains__(self, reminder_id: object) -> bool:
        return reminder_id in self._ids

    def __iter__(self) -> Iterator[Reminder]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def has_action(self, action: ReminderActionType) -> bool:
        return any(r.action_type == action for r in self._items)

    def count_type(self, reminder_type: ReminderType) -> int:
        return sum(1 for r in self._items if r.type == reminder_type)

    def to_list(self) -> list[Reminder]:
        return list(self._items)


def mentions_water(reminder: Reminder) -> bool:
    """Water reminders and water-themed habits sink to the end of the list."""
    if reminder.action_type == Action.LOG_WATER:
        return True
    if reminder.type != ReminderType.HABIT:
        return False
    text = f"{reminder.title} {reminder.description}".lower()
    return any(term in text for term in WATER_TERMS)


def sort_reminders(reminders: Sequence[Reminder], now: datetime) -> list[Reminder]:
    """Stable multi-key ordering.

    1. Meal reminders first, but only inside a meal window.
    2. Water reminders and water-themed habits last, whatever their priority.
    3. CRITICAL > HIGH > MEDIUM > LOW.
    Ties keep insertion order.
    """
    meal_time = is_meal_time(now)

    def key(reminder: Reminder) -> tuple[int, int, int]:
        meal_first = meal_time and reminder.action_type == Action.LOG_MEAL
        return (
            0 if meal_first else 1,
            1 if mentions_water(reminder) else 0,
            -reminder.priority.rank,
        )

    return sorted(reminders, key=key)


def _rotated(
    day: date,
    rule_id: str,
    phrasings: Sequence[tuple[str, str]],
    action: ReminderActionType,
    icon: str,
    duration: int,
    multiplier: int = 1,
    offset: int = 0,
    reminder_type: ReminderType = ReminderType.HEALTH_LOG,
    priority: ReminderPriority = Priority.MEDIUM,
) -> Reminder:
    title, description = pick(phrasings, day, multiplier=multiplier, offset=offset)
    return Reminder(
        id=f"{rule_id}_{day.isoformat()}",
        type=reminder_type,
        title=title,
        description=description,
        icon=icon,
        priority=priority,
        action_type=action,
        estimated_duration=duration,
    )


# Phrasing pools

MORNING_WATER = (
    ("Start with Water", "Kickstart your metabolism with a glass of water"),
    ("Hydrate First", "Begin your day hydrated and energized"),
    ("Morning Hydration", "Start your hydration journey for the day"),
    ("Water Your Body", "Your body needs water to function optimally"),
    ("Drink Up!", "Set a positive tone with proper hydration"),
)
AFTERNOON_WATER = (
    ("Afternoon Hydration", "Your body is working hard, keep the water flowing"),
    ("Midday Water Check", "Midday is the perfect time to check your hydration"),
    ("Keep Hydrating", "Maintain your energy with consistent water intake"),
    ("Water Boost", "A quick water break can refresh your afternoon"),
    ("Stay Refreshed", "Stay sharp and focused with proper hydration"),
)
EVENING_WATER = (
    ("Evening Hydration", "End your day properly hydrated for better recovery"),
    ("Wind Down with Water", "A final glass of water before bed aids digestion"),
    ("Final Water Check", "Finish strong with your daily hydration goal"),
    ("Nighttime Hydration", "Prepare your body for rest with proper hydration"),
    ("Complete Your Water Goal", "Complete your water intake for optimal wellness"),
)
BREAKFAST = (
    ("Fuel Your Morning", "Start your day with nutritious breakfast choices"),
    ("Breakfast Time", "What are you having for breakfast today?"),
    ("Morning Nutrition", "Log your breakfast to track your daily nutrition"),
    ("Start Strong", "A good breakfast sets the tone for your day"),
)
LUNCH = (
    ("Lunch Break", "What did you have for lunch? Let's log it!"),
    ("Midday Fuel", "Refuel your body with a nutritious lunch"),
    ("Lunch Time", "Track your midday meal for better nutrition insights"),
)
DINNER = (
    ("Evening Meal", "What did you have for dinner? Let's log it!"),
    ("Dinner Time", "Complete your nutrition tracking with dinner"),
    ("Evening Nutrition", "Log your dinner to finish your daily nutrition"),
)
AFTERNOON_WORKOUT = (
    ("Afternoon Activity", "A short workout now will boost your energy"),
    ("Movement Break", "Take a break to move your body and refresh"),
    ("Exercise Time", "Log your workout to track your fitness journey"),
)
SLEEP = (
    ("Sleep Check", "Track your sleep to understand your rest patterns"),
    ("Rest Tracking", "Log your sleep quality for better wellness insights"),
    ("Evening Wind-down", "Record your sleep to complete today's health data"),
)
JOURNAL = (
    ("Evening Reflection", "Take a moment to reflect on your day with journaling"),
    ("Daily Review", "What went well today? What could be improved?"),
    ("Mindful Moment", "Spend a few minutes reflecting on your thoughts and feelings"),
    ("Gratitude Practice", "Write down 3 things you're grateful for today"),
)

# Weekdays (Monday=1) on which the lighter-touch rules fire
MOVEMENT_DAYS = (1, 4)
WORKOUT_DAYS = (2, 4, 6)
SLEEP_DAYS = (1, 3, 5, 7)
JOURNAL_DAYS = (1, 4, 7)


def wellness_options(day: date) -> list[Reminder]:
    """The daily mindfulness/wellness rotation."""
    suffix = day.isoformat()
    return [
        Reminder(
            id=f"mindfulness_session_{suffix}",
            type=ReminderType.MINDFULNESS,
            title="3-Min Mindfulness Reset",
            description="Take 3 minutes to center yourself and start the day mindfully",
            icon="self_improvement",
            priority=Priority.HIGH,
            action_type=Action.START_MINDFULNESS,
            estimated_duration=3,
        ),
        Reminder(
            id=f"breathing_exercise_{suffix}",
            type=ReminderType.WELLNESS,
            title="Deep Breathing Break",
            description="Practice 4-7-8 breathing for instant stress relief",
            icon="air",
            priority=Priority.HIGH,
            action_type=Action.START_MINDFULNESS,
            estimated_duration=5,
        ),
        Reminder(
            id=f"gratitude_practice_{suffix}",
            type=ReminderType.WELLNESS,
            title="Gratitude Moment",
            description="Write down 3 things you're grateful for today",
            icon="favorite",
            priority=Priority.MEDIUM,
            action_type=Action.START_JOURNAL,
            estimated_duration=3,
        ),
        Reminder(
            id=f"goal_setting_{suffix}",
            type=ReminderType.WELLNESS,
            title="Set Your Intention",
            description="Define 1-2 key goals or intentions for today",
            icon="flag",
            priority=Priority.MEDIUM,
            action_type=Action.START_JOURNAL,
            estimated_duration=5,
        ),
        Reminder(
            id=f"body_scan_{suffix}",
            type=ReminderType.WELLNESS,
            title="Quick Body Check-In",
            description="Take a moment to notice how your body feels today",
            icon="accessibility",
            priority=Priority.MEDIUM,
            action_type=Action.START_MINDFULNESS,
            estimated_duration=2,
        ),
        Reminder(
            id=f"positive_affirmation_{suffix}",
            type=ReminderType.WELLNESS,
            title="Positive Affirmation",
            description="Repeat a positive affirmation to set your mindset",
            icon="psychology",
            priority=Priority.LOW,
            action_type=Action.START_JOURNAL,
            estimated_duration=2,
        ),
    ]


def backfill_pool(day: date) -> list[Reminder]:
    """Generic category reminders used to reach the minimum count."""
    suffix = day.isoformat()
    return [
        Reminder(
            id=f"nutrition_tracking_{suffix}",
            type=ReminderType.HEALTH_LOG,
            title="Track Nutrition",
            description="Keep track of your meals for better health insights",
            icon="restaurant",
            action_type=Action.LOG_MEAL,
            estimated_duration=2,
        ),
        Reminder(
            id=f"hydration_check_{suffix}",
            type=ReminderType.HEALTH_LOG,
            title="Stay Hydrated",
            description="Make sure you're drinking enough water throughout the day",
            icon="local_drink",
            action_type=Action.LOG_WATER,
            estimated_duration=1,
        ),
        Reminder(
            id=f"movement_reminder_{suffix}",
            type=ReminderType.HEALTH_LOG,
            title="Move Your Body",
            description="Even a short walk or stretch can boost your energy",
            icon="directions_walk",
            action_type=Action.LOG_WORKOUT,
            estimated_duration=10,
        ),
        Reminder(
            id=f"daily_reflection_{suffix}",
            type=ReminderType.WELLNESS,
            title="Daily Reflection",
            description="Take a moment to reflect on your day",
            icon="edit_note",
            action_type=Action.START_JOURNAL,
            estimated_duration=5,
        ),
        Reminder(
            id=f"health_check_{suffix}",
            type=ReminderType.HEALTH_LOG,
            title="Health Check-In",
            description="Take a moment to check in with your body and mind",
            icon="favorite",
            action_type=Action.VIEW_HEALTH_TRACKING,
            estimated_duration=2,
        ),
        Reminder(
            id=f"wellness_break_{suffix}",
            type=ReminderType.WELLNESS,
            title="Wellness Break",
            description="Take a short break to focus on your wellbeing",
            icon="self_improvement",
            action_type=Action.VIEW_WELLNESS,
            estimated_duration=5,
        ),
        Reminder(
            id=f"habit_review_{suffix}",
            type=ReminderType.HABIT,
            title="Review Habits",
            description="Check in on your daily habits and progress",
            icon="check_circle",
            action_type=Action.VIEW_HABITS,
            estimated_duration=3,
        ),
    ]


def filler(day: date, attempt: int) -> Reminder:
    return Reminder(
        id=f"wellness_generic_{day.isoformat()}_{attempt}",
        type=ReminderType.WELLNESS,
        title="Wellness Activity",
        description="Take time for your wellbeing today",
        icon="self_improvement",
        action_type=Action.VIEW_WELLNESS,
        estimated_duration=5,
    )


def fill_quota(batch: ReminderBatch, day: date, min_tasks: int, max_attempts: int) -> int:
    """Top ``batch`` up to ``min_tasks``.

    Generic category reminders come first, skipping any action type the
    batch already covers. Uniquely keyed fillers follow. The attempt cap
    bounds the loop.

    Returns:
        Number of reminders added.
    """
    if len(batch) >= min_tasks:
        return 0

    pool = [r for r in backfill_pool(day) if not batch.has_action(r.action_type)]
    added = 0
    attempt = 0
    while len(batch) < min_tasks and attempt < max_attempts:
        attempt += 1
        for reminder in pool:
            if len(batch) >= min_tasks:
                break
            if batch.add(reminder):
                added += 1
        if len(batch) < min_tasks and batch.add(filler(day, attempt)):
            added += 1
    return added


def habit_reminder(
    habit: Habit, day: date, completion: HabitCompletion | None, id_prefix: str = "habit"
) -> Reminder:
    """Reminder for one habit, marked completed when a completion exists."""
    if completion is not None:
        description = f"Completed! {habit.description or f'Great job on {habit.title}!'}"
    else:
        description = habit.description or f"Complete your daily habit: {habit.title}"
    return Reminder(
        id=f"{id_prefix}_{habit.id}_{day.isoformat()}",
        type=ReminderType.HABIT,
        title=habit.title,
        description=description,
        icon="check_circle",
        priority=ReminderPriority(habit.priority.value),
        action_type=Action.COMPLETE_HABIT,
        action_data={"habitId": habit.id, "habitTitle": habit.title},
        estimated_duration=5,
        completed_at=completion.completed_at if completion else None,
    )


def latest_completions(
    completions: Iterable[HabitCompletion], day: date
) -> dict[str, HabitCompletion]:
    """Most recent completion per habit id on ``day``."""
    latest: dict[str, HabitCompletion] = {}
    for completion in sorted(completions_on(completions, day), key=lambda c: c.local_completed_at):
        latest[completion.habit_id] = completion
    return latest


class ReminderGenerator:
    """Rule-based reminder feed.

    Each rule has a guard over the day's totals and the current time
    window. A true guard emits exactly one reminder whose wording is picked
    deterministically from the calendar date.
    """

    def __init__(self, min_tasks: int | None = None, max_filler_attempts: int | None = None) -> None:
        self.min_tasks = settings.engine.min_tasks if min_tasks is None else min_tasks
        self.max_filler_attempts = (
            settings.engine.max_filler_attempts
            if max_filler_attempts is None
            else max_filler_attempts
        )

    def generate(
        self,
        totals: DerivedDailyTotals,
        habits: Sequence[Habit],
        completions: Sequence[HabitCompletion],
        now: datetime,
    ) -> list[Reminder]:
        """Build the ordered reminder feed for ``now``.

        Args:
            totals: Today's derived totals.
            habits: The user's habits (inactive ones are ignored).
            completions: Recent habit completions (only today's count).
            now: Local wall-clock time the feed is generated for.

        Returns:
            Deduplicated reminders, at least ``min_tasks`` long, sorted.
        """
        day = now.date()
        batch = ReminderBatch()

        self._add_wellness(batch, totals, now)
        window = classify_time(now)
        if window is TimeWindow.MORNING:
            self._add_morning(batch, totals, day)
        elif window is TimeWindow.AFTERNOON:
            self._add_afternoon(batch, totals, now)
        else:
            self._add_evening(batch, totals, now)
        self._add_habits(batch, habits, completions, day)

        if not totals.has_weight_log and window is TimeWindow.MORNING:
            batch.add(
                Reminder(
                    id=f"weight_{day.isoformat()}",
                    type=ReminderType.HEALTH_LOG,
                    title="Log Your Weight",
                    description="Track your progress by logging your weight",
                    icon="monitor_weight",
                    priority=Priority.LOW,
                    action_type=Action.LOG_WEIGHT,
                    estimated_duration=1,
                )
            )

        added = fill_quota(batch, day, self.min_tasks, self.max_filler_attempts)
        if added:
            logger.debug("Backfilled reminders", added=added, total=len(batch))

        return sort_reminders(batch.to_list(), now)

    def _add_wellness(self, batch: ReminderBatch, totals: DerivedDailyTotals, now: datetime) -> None:
        done_today = totals.has_mindful_session or totals.journal_completed
        if now.hour < 14 and not totals.mindful_session_played and not done_today:
            batch.add(pick(wellness_options(now.date()), now.date(), with_day_of_month=True))

    def _add_morning(self, batch: ReminderBatch, totals: DerivedDailyTotals, day: date) -> None:
        if totals.total_water < 500:
            batch.add(
                _rotated(day, "water_morning", MORNING_WATER, Action.LOG_WATER, "local_drink", 1, multiplier=3)
            )
        if totals.meal_count == 0:
            batch.add(_rotated(day, "breakfast", BREAKFAST, Action.LOG_MEAL, "restaurant", 2))
        if totals.workout_count == 0 and day.isoweekday() in MOVEMENT_DAYS:
            batch.add(
                Reminder(
                    id=f"morning_movement_{day.isoformat()}",
                    type=ReminderType.HEALTH_LOG,
                    title="Morning Movement",
                    description="Start your day with some light stretching or movement",
                    icon="directions_run",
                    priority=Priority.LOW,
                    action_type=Action.LOG_WORKOUT,
                    estimated_duration=5,
                )
            )

    def _add_afternoon(self, batch: ReminderBatch, totals: DerivedDailyTotals, now: datetime) -> None:
        day = now.date()
        if totals.total_water < 1000:
            batch.add(
                _rotated(
                    day, "water_afternoon", AFTERNOON_WATER, Action.LOG_WATER, "local_drink", 1,
                    multiplier=2, offset=1,
                )
            )
        # Lunch catch-up once the lunch window has passed
        if totals.meal_count <= 1 and not 11 <= now.hour < 14:
            batch.add(_rotated(day, "lunch", LUNCH, Action.LOG_MEAL, "restaurant", 2, offset=2))
        if totals.workout_count == 0 and now.hour >= 14 and day.isoweekday() in WORKOUT_DAYS:
            batch.add(
                _rotated(day, "workout_afternoon", AFTERNOON_WORKOUT, Action.LOG_WORKOUT, "fitness_center", 10)
            )

    def _add_evening(self, batch: ReminderBatch, totals: DerivedDailyTotals, now: datetime) -> None:
        day = now.date()
        if totals.total_water < 1500:
            batch.add(
                _rotated(day, "water_evening", EVENING_WATER, Action.LOG_WATER, "local_drink", 1, multiplier=4)
            )
        # Dinner catch-up once the dinner window has passed
        if totals.meal_count < 2 and not 17 <= now.hour < 21:
            batch.add(_rotated(day, "dinner", DINNER, Action.LOG_MEAL, "restaurant", 2, offset=1))
        if not totals.has_sleep_log and now.hour >= 20 and day.isoweekday() in SLEEP_DAYS:
            batch.add(_rotated(day, "sleep", SLEEP, Action.LOG_SLEEP, "bedtime", 2))
        if not totals.journal_completed and day.isoweekday() in JOURNAL_DAYS:
            batch.add(
                _rotated(
                    day, "journal", JOURNAL, Action.START_JOURNAL, "edit_note", 5,
                    multiplier=2, reminder_type=ReminderType.WELLNESS, priority=Priority.HIGH,
                )
            )

    def _add_habits(
        self,
        batch: ReminderBatch,
        habits: Sequence[Habit],
        completions: Sequence[HabitCompletion],
        day: date,
    ) -> None:
        done = latest_completions(completions, day)
        for habit in habits:
            if habit.is_active and habit.frequency == HabitFrequency.DAILY:
                batch.add(habit_reminder(habit, day, done.get(habit.id)))
