"""Value objects shared by the engine, repositories and surfaces."""

from dailycoach.models.habits import Habit, HabitCompletion, HabitFrequency, HabitPriority, local_time
from dailycoach.models.logs import (
    LOG_ADAPTER,
    BreathingExerciseLog,
    JournalEntry,
    LogVariant,
    MealLog,
    MeditationLog,
    MindfulSession,
    MoodLog,
    SleepLog,
    SupplementLog,
    WaterLog,
    WeightLog,
    WinEntry,
    WorkoutLog,
)
from dailycoach.models.profile import DietaryPreference, Goals, MacroTargets, UserProfile
from dailycoach.models.reminders import (
    FocusTask,
    Reminder,
    ReminderActionType,
    ReminderPriority,
    ReminderType,
)
from dailycoach.models.scores import CategoryScores, ScoreCard
from dailycoach.models.totals import DailyTotals, DerivedDailyTotals, HistoricalWindow

__all__ = [
    # Logs
    "LOG_ADAPTER",
    "LogVariant",
    "MealLog",
    "WorkoutLog",
    "SleepLog",
    "WaterLog",
    "WeightLog",
    "SupplementLog",
    "JournalEntry",
    "MeditationLog",
    "MindfulSession",
    "MoodLog",
    "BreathingExerciseLog",
    "WinEntry",
    # Habits
    "Habit",
    "HabitCompletion",
    "HabitFrequency",
    "HabitPriority",
    "local_time",
    # Reminders
    "Reminder",
    "FocusTask",
    "ReminderType",
    "ReminderPriority",
    "ReminderActionType",
    # Totals
    "DailyTotals",
    "DerivedDailyTotals",
    "HistoricalWindow",
    # Profile
    "UserProfile",
    "Goals",
    "MacroTargets",
    "DietaryPreference",
    # Scores
    "CategoryScores",
    "ScoreCard",
]
