"""Daily score calculation.

Three category scores, each clamped to [0, 100]:

- Health (50%): progress toward calorie, water, step and sleep goals,
  plus weight, workout and consistency points.
- Wellness (30%): independent additive flags for mood, meditation,
  journaling, breathing, wins, social interaction and finished focus tasks.
- Habits (20%): share of active habits completed today.
"""

import math
from collections.abc import Sequence
from datetime import date

from dailycoach.aggregators.daily import completions_on
from dailycoach.models import (
    CategoryScores,
    DerivedDailyTotals,
    Goals,
    Habit,
    HabitCompletion,
    ScoreCard,
)

CALORIE_POINTS = 25
WATER_POINTS = 20
STEP_POINTS = 15
SLEEP_POINTS = 15
WEIGHT_POINTS = 10
SINGLE_WORKOUT_POINTS = 8
MULTI_WORKOUT_POINTS = 10
WORKOUT_MINUTES_PER_BONUS = 45.0
MAX_WORKOUT_BONUS = 2

MOOD_POINTS = 30
MEDITATION_POINTS = 25
JOURNAL_POINTS = 20
BREATHING_POINTS = 15
WIN_POINTS = 10
SOCIAL_POINTS = 10
FOCUS_COMPLETE_POINTS = 15

ALL_HABITS_BONUS = 5


def clamp_score(value: float) -> int:
    return int(min(max(value, 0), 100))


def progress_points(actual: float, goal: float, cap: int) -> int:
    """Square-root shaped progress, rounded half up.

    Partial progress is rewarded more than on a linear curve: half the goal
    earns about 71% of the points. A non-positive goal earns nothing.
    """
    if goal <= 0:
        return 0
    progress = min(max(actual / goal, 0.0), 1.0)
    return math.floor(math.sqrt(progress) * cap + 0.5)


def workout_points(workout_count: int, total_minutes: int) -> int:
    if workout_count <= 0:
        return 0
    base = MULTI_WORKOUT_POINTS if workout_count >= 2 else SINGLE_WORKOUT_POINTS
    bonus = int(min(max(total_minutes / WORKOUT_MINUTES_PER_BONUS, 0), MAX_WORKOUT_BONUS))
    return base + bonus


def consistency_points(metrics_logged: int) -> int:
    if metrics_logged >= 4:
        return 5
    if metrics_logged >= 2:
        return 3
    return 0


def calculate_health_score(totals: DerivedDailyTotals, goals: Goals | None = None) -> int:
    """Health tracking score (0-100)."""
    goals = goals or Goals()
    score = (
        progress_points(totals.total_calories, goals.calorie_goal, CALORIE_POINTS)
        + progress_points(totals.total_water, goals.water_goal_ml, WATER_POINTS)
        + progress_points(totals.total_steps, goals.step_goal, STEP_POINTS)
        + progress_points(totals.total_sleep_hours, goals.sleep_goal_hours, SLEEP_POINTS)
    )
    if totals.has_weight_log:
        score += WEIGHT_POINTS
    score += workout_points(totals.workout_count, totals.total_workout_minutes)
    score += consistency_points(totals.metrics_logged_count)
    return clamp_score(score)


def calculate_wellness_score(
    totals: DerivedDailyTotals,
    social_interaction: bool | None = None,
    all_focus_tasks_completed: bool = False,
) -> int:
    """Wellness score (0-100).

    The flags are not mutually exclusive and can sum past 100; the clamp is
    the only ceiling.
    """
    if social_interaction is None:
        social_interaction = totals.has_social_interaction

    score = 0
    if totals.has_mood_log:
        score += MOOD_POINTS
    if totals.has_meditation:
        score += MEDITATION_POINTS
    if totals.has_journal:
        score += JOURNAL_POINTS
    if totals.has_breathing:
        score += BREATHING_POINTS
    if totals.has_win_entry:
        score += WIN_POINTS
    if social_interaction:
        score += SOCIAL_POINTS
    if all_focus_tasks_completed:
        score += FOCUS_COMPLETE_POINTS
    return clamp_score(score)


def calculate_habits_score(
    habits: Sequence[Habit], completions: Sequence[HabitCompletion], day: date
) -> int:
    """Habits score (0-100); exactly 0 when there are no active habits."""
    active_ids = {h.id for h in habits if h.is_active}
    if not active_ids:
        return 0
    completed = {c.habit_id for c in completions_on(completions, day)} & active_ids
    score = len(completed) * 100 // len(active_ids)
    if len(completed) == len(active_ids):
        score += ALL_HABITS_BONUS
    return clamp_score(score)


def calculate_daily_score(scores: CategoryScores) -> int:
    """floor(0.50 * health + 0.30 * wellness + 0.20 * habits)."""
    return clamp_score(scores.daily_score())


def calculate_all_scores(
    totals: DerivedDailyTotals,
    habits: Sequence[Habit],
    completions: Sequence[HabitCompletion],
    day: date,
    goals: Goals | None = None,
    social_interaction: bool | None = None,
    all_focus_tasks_completed: bool = False,
) -> ScoreCard:
    """Compute every category score and the composite."""
    scores = CategoryScores(
        health_score=calculate_health_score(totals, goals),
        wellness_score=calculate_wellness_score(
            totals,
            social_interaction=social_interaction,
            all_focus_tasks_completed=all_focus_tasks_completed,
        ),
        habits_score=calculate_habits_score(habits, completions, day),
    )
    return ScoreCard(scores=scores, daily_score=calculate_daily_score(scores))
