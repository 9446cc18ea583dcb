"""Tests for the reminder feed and phrasing rotation."""

from datetime import date, datetime

import pytest

from dailycoach.engine.reminders import (
    MORNING_WATER,
    ReminderBatch,
    ReminderGenerator,
    TimeWindow,
    classify_time,
    fill_quota,
    sort_reminders,
)
from dailycoach.engine.rotation import pick, rotation_index
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

GENERIC_IDS = (
    "nutrition_tracking",
    "hydration_check",
    "movement_reminder",
    "daily_reflection",
    "health_check",
    "wellness_break",
    "habit_review",
)


def reminder(rid, action, priority=ReminderPriority.MEDIUM, rtype=ReminderType.HEALTH_LOG, title="Task"):
    return Reminder(
        id=rid, type=rtype, title=title, description="", priority=priority, action_type=action
    )


class TestRotation:
    def test_formula(self):
        # Monday is 1
        assert rotation_index(5, date(2026, 1, 19)) == 1
        assert rotation_index(5, date(2026, 1, 19), multiplier=3, offset=1) == 4
        assert rotation_index(6, date(2026, 1, 19), with_day_of_month=True) == 2

    def test_same_date_same_choice(self):
        day = date(2026, 3, 4)
        assert pick(MORNING_WATER, day, multiplier=3) == pick(MORNING_WATER, day, multiplier=3)

    def test_same_weekday_same_choice(self):
        assert pick(MORNING_WATER, date(2026, 1, 19)) == pick(MORNING_WATER, date(2026, 1, 26))

    def test_empty_pool(self):
        with pytest.raises(ValueError):
            rotation_index(0, date(2026, 1, 19))


class TestTimeWindows:
    @pytest.mark.parametrize(
        "hour, minute, expected",
        [
            (0, 0, TimeWindow.MORNING),
            (11, 59, TimeWindow.MORNING),
            (12, 0, TimeWindow.AFTERNOON),
            (16, 59, TimeWindow.AFTERNOON),
            (17, 0, TimeWindow.EVENING),
            (23, 59, TimeWindow.EVENING),
        ],
    )
    def test_boundaries(self, at, hour, minute, expected):
        assert classify_time(at(hour, minute)) is expected


class TestOrdering:
    def test_meal_first_inside_meal_window(self, at):
        meal = reminder("meal", ReminderActionType.LOG_MEAL, ReminderPriority.LOW)
        water_habit = reminder(
            "habit_water",
            ReminderActionType.COMPLETE_HABIT,
            ReminderPriority.CRITICAL,
            rtype=ReminderType.HABIT,
            title="Drink more water",
        )
        journal = reminder("journal", ReminderActionType.START_JOURNAL, ReminderPriority.HIGH)

        ordered = sort_reminders([water_habit, journal, meal], at(12, 30))

        assert [r.id for r in ordered] == ["meal", "journal", "habit_water"]

    def test_meal_by_priority_outside_meal_window(self, at):
        meal = reminder("meal", ReminderActionType.LOG_MEAL, ReminderPriority.LOW)
        journal = reminder("journal", ReminderActionType.START_JOURNAL, ReminderPriority.HIGH)
        water = reminder("water", ReminderActionType.LOG_WATER, ReminderPriority.CRITICAL)

        ordered = sort_reminders([meal, water, journal], at(15))

        assert [r.id for r in ordered] == ["journal", "meal", "water"]

    def test_ties_keep_insertion_order(self, at):
        items = [reminder(f"r{i}", ReminderActionType.VIEW_WELLNESS) for i in range(4)]

        assert sort_reminders(items, at(15)) == items


class TestBatch:
    def test_duplicate_ids_dropped(self):
        batch = ReminderBatch()
        assert batch.add(reminder("a", ReminderActionType.LOG_MEAL))
        assert not batch.add(reminder("a", ReminderActionType.LOG_WATER, title="Other"))
        assert len(batch) == 1
        assert batch.to_list()[0].action_type == ReminderActionType.LOG_MEAL

    def test_fill_quota_skips_covered_actions(self, day):
        batch = ReminderBatch([reminder("meal", ReminderActionType.LOG_MEAL)])

        added = fill_quota(batch, day, min_tasks=7, max_attempts=20)

        assert added == 6
        assert f"nutrition_tracking_{day.isoformat()}" not in batch

    def test_fill_quota_uses_fillers_when_pool_runs_out(self, day):
        batch = ReminderBatch()

        fill_quota(batch, day, min_tasks=10, max_attempts=20)

        assert len(batch) == 10
        assert f"wellness_generic_{day.isoformat()}_1" in batch


class TestReminderGenerator:
    def test_quota_with_no_habits(self, at):
        items = ReminderGenerator().generate(DerivedDailyTotals(), [], [], at(9))

        assert len(items) == 7
        assert len({r.id for r in items}) == 7
        backfilled = [r for r in items if r.id.rsplit("_", 1)[0] in GENERIC_IDS]
        assert backfilled
        actions = [r.action_type for r in backfilled]
        assert len(actions) == len(set(actions))

    def test_morning_feed_end_to_end(self, at, day):
        habit = Habit(id="h1", title="Stretch")

        items = ReminderGenerator().generate(DerivedDailyTotals(), [habit], [], at(9))
        ids = [r.id for r in items]
        suffix = day.isoformat()

        assert len(items) == 7
        assert f"water_morning_{suffix}" in ids
        assert f"breakfast_{suffix}" in ids
        assert f"habit_h1_{suffix}" in ids
        assert ids.index(f"breakfast_{suffix}") < ids.index(f"habit_h1_{suffix}")
        assert ids[0] == f"breakfast_{suffix}"
        assert ids[-1] == f"water_morning_{suffix}"
        assert not items[ids.index(f"habit_h1_{suffix}")].is_completed

    def test_morning_rules_silent_when_logged(self, at, day):
        totals = DerivedDailyTotals(
            total_water=800, meal_count=1, workout_count=1, has_weight_log=True, has_mindful_session=True
        )

        ids = [r.id for r in ReminderGenerator().generate(totals, [], [], at(9))]

        assert f"water_morning_{day.isoformat()}" not in ids
        assert f"breakfast_{day.isoformat()}" not in ids
        assert f"weight_{day.isoformat()}" not in ids
        assert len(ids) == 7

    def test_lunch_only_after_lunch_window(self, at, day):
        gen = ReminderGenerator()
        lunch = f"lunch_{day.isoformat()}"

        assert lunch not in [r.id for r in gen.generate(DerivedDailyTotals(), [], [], at(13))]
        assert lunch in [r.id for r in gen.generate(DerivedDailyTotals(), [], [], at(15))]

    def test_evening_rules(self, at, day):
        items = ReminderGenerator().generate(DerivedDailyTotals(), [], [], at(21, 30))
        ids = {r.id for r in items}
        suffix = day.isoformat()

        assert f"water_evening_{suffix}" in ids
        assert f"dinner_{suffix}" in ids
        # Monday is both a sleep and a journal day
        assert f"sleep_{suffix}" in ids
        assert f"journal_{suffix}" in ids

    def test_completed_habit_is_marked(self, at, habits, day):
        done = HabitCompletion(habit_id="h1", completed_at=at(7))
        stale = HabitCompletion(habit_id="h2", completed_at=datetime(2026, 1, 18, 7))

        items = ReminderGenerator().generate(DerivedDailyTotals(), habits, [done, stale], at(9))
        by_id = {r.id: r for r in items}

        assert by_id[f"habit_h1_{day.isoformat()}"].is_completed
        assert not by_id[f"habit_h2_{day.isoformat()}"].is_completed

    def test_inactive_and_weekly_habits_skipped(self, at, day):
        habits = [
            Habit(id="off", title="Old", is_active=False),
            Habit(id="weekly", title="Meal prep", frequency=HabitFrequency.WEEKLY),
        ]

        ids = {r.id for r in ReminderGenerator().generate(DerivedDailyTotals(), habits, [], at(9))}

        assert f"habit_off_{day.isoformat()}" not in ids
        assert f"habit_weekly_{day.isoformat()}" not in ids

    def test_water_habit_sinks_below_lower_priority(self, at, habits, day):
        items = ReminderGenerator().generate(DerivedDailyTotals(total_water=800), habits, [], at(15))
        ids = [r.id for r in items]

        assert ids.index(f"habit_h3_{day.isoformat()}") > ids.index(f"habit_h2_{day.isoformat()}")

    def test_deterministic(self, at, habits):
        gen = ReminderGenerator()
        first = gen.generate(DerivedDailyTotals(), habits, [], at(9))
        second = gen.generate(DerivedDailyTotals(), habits, [], at(9))

        assert first == second
