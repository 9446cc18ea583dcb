"""Raw health log variants.

Every log carries a ``type`` discriminator so a mixed list can be validated
in one pass with :data:`LOG_ADAPTER`.
"""

import datetime as dt
import uuid
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


def _new_id() -> str:
    return str(uuid.uuid4())


class BaseLog(BaseModel):
    """Fields shared by all logs."""

    entry_id: str = Field(default_factory=_new_id)
    timestamp: dt.datetime = Field(default_factory=dt.datetime.now)


class MealLog(BaseLog):
    type: Literal["meal"] = "meal"
    food_name: str = ""
    calories: int = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


class WorkoutLog(BaseLog):
    type: Literal["workout"] = "workout"
    workout_type: str = ""
    duration_min: int = 0
    calories_burned: int = 0
    intensity: str = "Medium"


class SleepLog(BaseLog):
    type: Literal["sleep"] = "sleep"
    start_time: dt.datetime
    end_time: dt.datetime
    quality: int = 3

    @property
    def duration_hours(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 3600


class WaterLog(BaseLog):
    type: Literal["water"] = "water"
    ml: int


class WeightLog(BaseLog):
    type: Literal["weight"] = "weight"
    weight: float
    unit: Literal["kg", "lbs"] = "kg"


class SupplementLog(BaseLog):
    type: Literal["supplement"] = "supplement"
    name: str


class JournalEntry(BaseLog):
    type: Literal["journal"] = "journal"
    is_completed: bool = False
    word_count: int = 0


class MeditationLog(BaseLog):
    type: Literal["meditation"] = "meditation"
    duration_minutes: int = 0
    meditation_type: str = "guided"
    completed: bool = True


class MindfulSession(BaseLog):
    type: Literal["mindful_session"] = "mindful_session"
    session_id: str = Field(default_factory=_new_id)
    title: str = ""
    duration_seconds: int = 0
    played_count: int = 0
    last_played_at: dt.datetime | None = None


class MoodLog(BaseLog):
    type: Literal["mood"] = "mood"
    level: int = 3
    emotions: list[str] = Field(default_factory=list)
    social_interaction: str | None = None  # "none", "minimal", "moderate", "extensive"


class BreathingExerciseLog(BaseLog):
    type: Literal["breathing_exercise"] = "breathing_exercise"
    duration_seconds: int = 0
    exercise_type: str = "box_breathing"


class WinEntry(BaseLog):
    """A user-facing win, either journaled or detected from the day's data."""

    type: Literal["win_entry"] = "win_entry"
    journal_entry_id: str = ""
    date: dt.date
    win: str | None = None
    gratitude: str | None = None
    mood: str | None = None
    tags: list[str] = Field(default_factory=list)
    rule_id: str | None = None


LogVariant = Annotated[
    Union[
        MealLog,
        WorkoutLog,
        SleepLog,
        WaterLog,
        WeightLog,
        SupplementLog,
        JournalEntry,
        MeditationLog,
        MindfulSession,
        MoodLog,
        BreathingExerciseLog,
        WinEntry,
    ],
    Field(discriminator="type"),
]

LOG_ADAPTER: TypeAdapter[list[LogVariant]] = TypeAdapter(list[LogVariant])
