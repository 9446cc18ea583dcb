"""Database models for dailycoach using SQLModel.

Timestamps are stored as naive local wall-clock times.
"""

import datetime as dt
from typing import Any

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


class LogRecord(SQLModel, table=True):
    """One raw log entry; the variant is stored as its JSON payload."""

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    day: dt.date = Field(index=True)
    type: str  # "meal", "water", "sleep", ...

    payload: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    logged_at: dt.datetime = Field(default_factory=dt.datetime.now, sa_column=Column(DateTime))


class DailyTotalsRecord(SQLModel, table=True):
    """Authoritative per-day steps and water override."""

    __table_args__ = (UniqueConstraint("user_id", "day"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    day: dt.date = Field(index=True)

    steps: int | None = None
    water_ml_override: int | None = None


class HabitRecord(SQLModel, table=True):
    """A user's habit."""

    id: int | None = Field(default=None, primary_key=True)
    habit_id: str = Field(index=True)
    user_id: str = Field(index=True)

    title: str
    description: str = ""
    frequency: str = "DAILY"
    priority: str = "MEDIUM"
    streak_count: int = 0
    is_active: bool = True


class HabitCompletionRecord(SQLModel, table=True):
    """A single habit completion."""

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    habit_id: str = Field(index=True)
    completed_at: dt.datetime = Field(sa_column=Column(DateTime, index=True))
    value: int = 1


class ProfileRecord(SQLModel, table=True):
    """User goals and macro preferences."""

    user_id: str = Field(primary_key=True)
    profile: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    updated_at: dt.datetime = Field(default_factory=dt.datetime.now, sa_column=Column(DateTime))


class WinRecord(SQLModel, table=True):
    """A win entry; detected wins are unique per (user, day, rule)."""

    __table_args__ = (UniqueConstraint("user_id", "day", "rule_id"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    day: dt.date = Field(index=True)
    rule_id: str | None = Field(default=None, index=True)

    payload: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    updated_at: dt.datetime = Field(default_factory=dt.datetime.now, sa_column=Column(DateTime))


class FocusTaskRecord(SQLModel, table=True):
    """A Today's Focus task; the batch for a (user, day) is written once."""

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    day: dt.date = Field(index=True)
    position: int = 0

    task: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
