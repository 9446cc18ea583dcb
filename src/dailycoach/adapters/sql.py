"""SQLModel-backed repository."""

import asyncio
import datetime as dt
from collections.abc import Callable
from datetime import date, timedelta
from typing import Any, TypeVar

from sqlalchemy import delete
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from dailycoach.adapters.base import BaseRepository, FetchError, PersistenceError
from dailycoach.adapters.memory import InMemoryRepository
from dailycoach.db import get_engine
from dailycoach.db.models import (
    DailyTotalsRecord,
    FocusTaskRecord,
    HabitCompletionRecord,
    HabitRecord,
    LogRecord,
    ProfileRecord,
    WinRecord,
)
from dailycoach.models import (
    LOG_ADAPTER,
    DailyTotals,
    FocusTask,
    Habit,
    HabitCompletion,
    LogVariant,
    UserProfile,
    WinEntry,
)

T = TypeVar("T")


class SQLRepository(BaseRepository):
    """Repository over the dailycoach SQL tables.

    Session work is blocking, so each call runs in a worker thread.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        super().__init__("sql")
        self.engine = engine or get_engine()

    async def _read(self, fn: Callable[[Session], T]) -> T:
        def run() -> T:
            with Session(self.engine) as session:
                return fn(session)

        try:
            return await asyncio.to_thread(run)
        except SQLAlchemyError as e:
            raise FetchError(self.name, str(e)) from e

    async def _write(self, fn: Callable[[Session], T]) -> T:
        def run() -> T:
            with Session(self.engine) as session:
                result = fn(session)
                session.commit()
                return result

        try:
            return await asyncio.to_thread(run)
        except SQLAlchemyError as e:
            raise PersistenceError(self.name, str(e)) from e

    # Seeding

    async def import_repository(self, source: InMemoryRepository) -> int:
        """Copy everything held by an in-memory repository. Returns rows written."""

        def copy(session: Session) -> int:
            rows: list[Any] = []
            for (user_id, day), logs in source.logs.items():
                rows.extend(
                    LogRecord(user_id=user_id, day=day, type=log.type, payload=log.model_dump(mode="json"))
                    for log in logs
                )
            for (user_id, day), totals in source.totals.items():
                rows.append(DailyTotalsRecord(user_id=user_id, day=day, **totals.model_dump()))
            for user_id, habits in source.habits.items():
                rows.extend(
                    HabitRecord(
                        habit_id=h.id,
                        user_id=user_id,
                        **h.model_dump(mode="json", exclude={"id"}),
                    )
                    for h in habits
                )
            for user_id, completions in source.completions.items():
                rows.extend(
                    HabitCompletionRecord(
                        user_id=user_id,
                        habit_id=c.habit_id,
                        completed_at=c.local_completed_at,
                        value=c.value,
                    )
                    for c in completions
                )
            for user_id, profile in source.profiles.items():
                rows.append(
                    ProfileRecord(user_id=user_id, profile=profile.model_dump(mode="json", exclude_none=True))
                )
            for (user_id, day, rule_id), win in source.wins.items():
                rows.append(
                    WinRecord(user_id=user_id, day=day, rule_id=rule_id, payload=win.model_dump(mode="json"))
                )
            session.add_all(rows)
            return len(rows)

        count = await self._write(copy)
        self.logger.info("Imported fixture data", rows=count)
        return count

    # Repository contract

    async def get_logs_for_date(self, user_id: str, day: date) -> list[LogVariant]:
        def query(session: Session) -> list[dict[str, Any]]:
            logs = session.exec(
                select(LogRecord)
                .where(LogRecord.user_id == user_id, LogRecord.day == day)
                .order_by(LogRecord.id)
            ).all()
            wins = session.exec(
                select(WinRecord).where(WinRecord.user_id == user_id, WinRecord.day == day)
            ).all()
            return [r.payload for r in logs] + [r.payload for r in wins]

        return LOG_ADAPTER.validate_python(await self._read(query))

    async def get_daily_totals(self, user_id: str, day: date) -> DailyTotals | None:
        def query(session: Session) -> DailyTotals | None:
            record = session.exec(
                select(DailyTotalsRecord).where(
                    DailyTotalsRecord.user_id == user_id, DailyTotalsRecord.day == day
                )
            ).first()
            if record is None:
                return None
            return DailyTotals(steps=record.steps, water_ml_override=record.water_ml_override)

        return await self._read(query)

    async def get_active_habits(self, user_id: str) -> list[Habit]:
        def query(session: Session) -> list[Habit]:
            records = session.exec(
                select(HabitRecord).where(HabitRecord.user_id == user_id, HabitRecord.is_active)
            ).all()
            return [
                Habit(
                    id=r.habit_id,
                    title=r.title,
                    description=r.description,
                    frequency=r.frequency,
                    priority=r.priority,
                    streak_count=r.streak_count,
                    is_active=r.is_active,
                )
                for r in records
            ]

        return await self._read(query)

    async def get_completions(
        self, user_id: str, since_days: int, until: date | None = None
    ) -> list[HabitCompletion]:
        until = until or date.today()
        start = dt.datetime.combine(until - timedelta(days=since_days - 1), dt.time.min)
        end = dt.datetime.combine(until + timedelta(days=1), dt.time.min)

        def query(session: Session) -> list[HabitCompletion]:
            records = session.exec(
                select(HabitCompletionRecord).where(
                    HabitCompletionRecord.user_id == user_id,
                    HabitCompletionRecord.completed_at >= start,
                    HabitCompletionRecord.completed_at < end,
                )
            ).all()
            return [
                HabitCompletion(habit_id=r.habit_id, completed_at=r.completed_at, value=r.value)
                for r in records
            ]

        return await self._read(query)

    async def get_profile(self, user_id: str) -> UserProfile | None:
        def query(session: Session) -> UserProfile | None:
            record = session.get(ProfileRecord, user_id)
            return UserProfile.model_validate(record.profile) if record else None

        return await self._read(query)

    async def save_win(self, user_id: str, win: WinEntry) -> bool:
        payload = win.model_dump(mode="json")

        def upsert(session: Session) -> bool:
            existing = None
            if win.rule_id is not None:
                existing = session.exec(
                    select(WinRecord).where(
                        WinRecord.user_id == user_id,
                        WinRecord.day == win.date,
                        WinRecord.rule_id == win.rule_id,
                    )
                ).first()
            if existing is not None:
                existing.payload = payload
                existing.updated_at = dt.datetime.now()
                session.add(existing)
                return False
            session.add(WinRecord(user_id=user_id, day=win.date, rule_id=win.rule_id, payload=payload))
            return True

        return await self._write(upsert)

    async def get_focus_tasks(self, user_id: str, day: date) -> list[FocusTask]:
        def query(session: Session) -> list[FocusTask]:
            records = session.exec(
                select(FocusTaskRecord)
                .where(FocusTaskRecord.user_id == user_id, FocusTaskRecord.day == day)
                .order_by(FocusTaskRecord.position)
            ).all()
            return [FocusTask.model_validate(r.task) for r in records]

        return await self._read(query)

    async def save_focus_tasks(self, user_id: str, day: date, tasks: list[FocusTask]) -> None:
        def replace(session: Session) -> None:
            session.execute(
                delete(FocusTaskRecord).where(
                    FocusTaskRecord.user_id == user_id, FocusTaskRecord.day == day
                )
            )
            session.add_all(
                FocusTaskRecord(user_id=user_id, day=day, position=i, task=t.model_dump(mode="json"))
                for i, t in enumerate(tasks)
            )

        await self._write(replace)

    async def health_check(self) -> bool:
        try:
            await self._read(lambda session: session.exec(select(ProfileRecord).limit(1)).all())
            return True
        except FetchError as e:
            self.logger.warning("Health check failed", error=str(e))
            return False

    async def close(self) -> None:
        self.engine.dispose()
