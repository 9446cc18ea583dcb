"""Pytest configuration and fixtures for dailycoach tests."""

from datetime import date, datetime

import pytest

from dailycoach.adapters.memory import InMemoryRepository
from dailycoach.models import Habit, HabitPriority

# A Monday
DAY = date(2026, 1, 19)


@pytest.fixture
def day() -> date:
    return DAY


@pytest.fixture
def at():
    """Build a wall-clock time on the test day."""

    def make(hour: int, minute: int = 0) -> datetime:
        return datetime(DAY.year, DAY.month, DAY.day, hour, minute)

    return make


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def habits() -> list[Habit]:
    return [
        Habit(id="h1", title="Stretch", description="Ten minutes of stretching"),
        Habit(id="h2", title="Read", priority=HabitPriority.LOW, streak_count=7),
        Habit(id="h3", title="Drink 8 glasses", priority=HabitPriority.CRITICAL),
    ]


@pytest.fixture
def fixture_file(tmp_path):
    """Create a YAML fixture with one user and two days of logs."""
    path = tmp_path / "fixture.yaml"
    path.write_text("""users:
  alice:
    profile:
      step_goal: 8000
    habits:
      - id: h1
        title: Stretch
        streak_count: 7
    completions:
      - habit_id: h1
        completed_at: 2026-01-19T08:00:00
    days:
      2026-01-18:
        totals:
          steps: 6000
        logs:
          - type: water
            ml: 1200
      2026-01-19:
        totals:
          steps: 9000
          water_ml_override: 2100
        logs:
          - type: meal
            food_name: Oatmeal
            calories: 450
            protein: 20
            carbs: 60
            fat: 10
          - type: workout
            workout_type: Run
            duration_min: 40
            calories_burned: 350
""")
    return path
