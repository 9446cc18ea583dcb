"""Daily totals, derived totals and the historical baseline."""

from pydantic import BaseModel


class DailyTotals(BaseModel):
    """Externally fed daily record (step counter, explicit water total)."""

    steps: int | None = None
    water_ml_override: int | None = None


class DerivedDailyTotals(BaseModel):
    """De-duplicated summary of one user's day.

    ``total_sleep_hours`` is the longest valid session, never a sum.
    ``total_water`` is either the explicit override or the sum of water
    logs, never both.
    """

    total_water: int = 0
    total_sleep_hours: float = 0.0
    total_steps: int = 0
    total_calories: int = 0
    workout_count: int = 0
    meal_count: int = 0
    has_weight_log: bool = False
    metrics_logged_count: int = 0

    total_workout_minutes: int = 0
    calories_burned: int = 0
    total_protein: float = 0.0
    total_carbs: float = 0.0
    total_fat: float = 0.0

    has_sleep_log: bool = False
    has_water_log: bool = False
    has_mood_log: bool = False
    has_meditation: bool = False
    has_journal: bool = False
    journal_completed: bool = False
    has_mindful_session: bool = False
    mindful_session_played: bool = False
    has_breathing: bool = False
    has_win_entry: bool = False
    has_supplement: bool = False
    has_social_interaction: bool = False


class HistoricalWindow(BaseModel):
    """Per-metric maxima over the days strictly before an evaluated date."""

    steps: int = 0
    water: int = 0
    workout_count: int = 0
    calories: int = 0
    sleep_hours: float = 0.0
    days_with_data: int = 0

    def include(self, totals: DerivedDailyTotals) -> "HistoricalWindow":
        """Return a new window with one more day folded in."""
        has_data = totals.metrics_logged_count > 0 or totals.calories_burned > 0
        return HistoricalWindow(
            steps=max(self.steps, totals.total_steps),
            water=max(self.water, totals.total_water),
            workout_count=max(self.workout_count, totals.workout_count),
            calories=max(self.calories, totals.calories_burned),
            sleep_hours=max(self.sleep_hours, totals.total_sleep_hours),
            days_with_data=self.days_with_data + (1 if has_data else 0),
        )
