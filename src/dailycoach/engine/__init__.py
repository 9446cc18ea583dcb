"""Reminder, focus, scoring and achievement engines."""

from dailycoach.engine.achievements import AchievementDetector, DetectionResult, detect_wins
from dailycoach.engine.daily import DailyEngine
from dailycoach.engine.focus import FocusService, FocusTaskGenerator
from dailycoach.engine.macros import calculate_macro_targets, macro_hits, resolve_macro_targets
from dailycoach.engine.reminders import ReminderGenerator, sort_reminders
from dailycoach.engine.rotation import pick, rotation_index
from dailycoach.engine.scoring import (
    calculate_all_scores,
    calculate_daily_score,
    calculate_habits_score,
    calculate_health_score,
    calculate_wellness_score,
)

__all__ = [
    # Facade
    "DailyEngine",
    # Reminders
    "ReminderGenerator",
    "FocusTaskGenerator",
    "FocusService",
    "sort_reminders",
    "pick",
    "rotation_index",
    # Scoring
    "calculate_health_score",
    "calculate_wellness_score",
    "calculate_habits_score",
    "calculate_daily_score",
    "calculate_all_scores",
    # Achievements
    "AchievementDetector",
    "DetectionResult",
    "detect_wins",
    "calculate_macro_targets",
    "resolve_macro_targets",
    "macro_hits",
]
