"""Repositories backing the engine's read/write contract."""

from dailycoach.adapters.base import (
    BaseRepository,
    FetchError,
    PersistenceError,
    RepositoryError,
)
from dailycoach.adapters.memory import InMemoryRepository
from dailycoach.adapters.sql import SQLRepository
from dailycoach.adapters.unavailable import UnavailableRepository

__all__ = [
    # Base
    "BaseRepository",
    "RepositoryError",
    "FetchError",
    "PersistenceError",
    # Repositories
    "InMemoryRepository",
    "SQLRepository",
    "UnavailableRepository",
]
