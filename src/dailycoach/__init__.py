"""dailycoach: daily reminders, scores and wins from health logs."""

__version__ = "0.1.0"
