"""structlog setup driven by ``settings.log_level``."""

import logging

import structlog

from dailycoach.config.settings import settings


def configure_logging(level: str | None = None) -> None:
    """Configure structlog to filter below the given level.

    Args:
        level: Level name (defaults to settings.log_level).
    """
    level_name = (level or settings.log_level).upper()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level_name)
        ),
        cache_logger_on_first_use=True,
    )
