"""Reminder and Today's Focus task models."""

import datetime as dt
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ReminderType(str, Enum):
    HEALTH_LOG = "HEALTH_LOG"
    HABIT = "HABIT"
    WELLNESS = "WELLNESS"
    MINDFULNESS = "MINDFULNESS"
    CHALLENGE = "CHALLENGE"


class ReminderPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    ReminderPriority.CRITICAL: 4,
    ReminderPriority.HIGH: 3,
    ReminderPriority.MEDIUM: 2,
    ReminderPriority.LOW: 1,
}


class ReminderActionType(str, Enum):
    LOG_MEAL = "LOG_MEAL"
    LOG_WATER = "LOG_WATER"
    LOG_WEIGHT = "LOG_WEIGHT"
    LOG_SLEEP = "LOG_SLEEP"
    LOG_WORKOUT = "LOG_WORKOUT"
    LOG_SUPPLEMENT = "LOG_SUPPLEMENT"
    COMPLETE_HABIT = "COMPLETE_HABIT"
    START_MEDITATION = "START_MEDITATION"
    START_JOURNAL = "START_JOURNAL"
    START_MINDFULNESS = "START_MINDFULNESS"
    VIEW_HEALTH_TRACKING = "VIEW_HEALTH_TRACKING"
    VIEW_WELLNESS = "VIEW_WELLNESS"
    VIEW_HABITS = "VIEW_HABITS"
    VIEW_INSIGHTS = "VIEW_INSIGHTS"
    VIEW_CHALLENGES = "VIEW_CHALLENGES"


class Reminder(BaseModel):
    """One actionable suggestion, keyed by rule and date."""

    id: str
    type: ReminderType
    title: str
    description: str
    icon: str = ""
    priority: ReminderPriority = ReminderPriority.MEDIUM
    action_type: ReminderActionType
    action_data: dict[str, Any] = Field(default_factory=dict)
    estimated_duration: int | None = None
    completed_at: dt.datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None


class FocusTask(Reminder):
    """A Today's Focus task, persisted once per user and date."""

    user_id: str
    date: dt.date
