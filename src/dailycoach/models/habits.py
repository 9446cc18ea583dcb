"""Habit and habit completion models."""

import datetime as dt
from enum import Enum
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field

from dailycoach.config.settings import settings


class HabitFrequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    CUSTOM = "CUSTOM"


class HabitPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Habit(BaseModel):
    """A recurring habit the user is tracking."""

    id: str
    title: str
    description: str = ""
    frequency: HabitFrequency = HabitFrequency.DAILY
    priority: HabitPriority = HabitPriority.MEDIUM
    streak_count: int = 0
    is_active: bool = True


class HabitCompletion(BaseModel):
    habit_id: str
    completed_at: dt.datetime = Field(default_factory=dt.datetime.now)
    value: int = 1

    @property
    def local_completed_at(self) -> dt.datetime:
        """Completion time as naive wall-clock time in the configured timezone."""
        return local_time(self.completed_at)


def local_time(moment: dt.datetime) -> dt.datetime:
    """Convert an aware timestamp to naive local time; naive ones are already local."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(ZoneInfo(settings.timezone)).replace(tzinfo=None)
