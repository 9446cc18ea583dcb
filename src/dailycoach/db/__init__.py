"""Database engine lifecycle."""

from pathlib import Path

import structlog
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from dailycoach.config.settings import settings
from dailycoach.db import models  # noqa: F401  (registers tables)

logger = structlog.get_logger()

_engine: Engine | None = None


def resolve_url(url: str) -> str:
    """Expand ``~`` in SQLite paths and make sure the parent directory exists."""
    prefix = "sqlite:///"
    if not url.startswith(prefix) or url == f"{prefix}:memory:":
        return url
    path = Path(url[len(prefix):]).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"{prefix}{path}"


def get_engine(url: str | None = None) -> Engine:
    """Return the shared engine, creating it on first use."""
    global _engine
    if _engine is None or url is not None:
        resolved = resolve_url(url or settings.database.database_url)
        # Repository calls run in worker threads
        connect_args = {"check_same_thread": False} if resolved.startswith("sqlite") else {}
        _engine = create_engine(resolved, echo=settings.database.echo, connect_args=connect_args)
    return _engine


async def init_db(url: str | None = None) -> Engine:
    """Create all tables."""
    engine = get_engine(url)
    SQLModel.metadata.create_all(engine)
    logger.debug("Tables created", url=str(engine.url))
    return engine


async def close_db() -> None:
    """Dispose of the shared engine."""
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None
