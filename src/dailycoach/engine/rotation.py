"""Deterministic phrasing rotation.

The same calendar day always yields the same wording, so the choice is
derived from the date rather than drawn at random.
"""

from collections.abc import Sequence
from datetime import date
from typing import TypeVar

T = TypeVar("T")


def rotation_index(
    pool_size: int,
    day: date,
    multiplier: int = 1,
    offset: int = 0,
    with_day_of_month: bool = False,
) -> int:
    """Index into a pool of ``pool_size`` options for ``day``.

    ``(isoweekday * multiplier + offset [+ day_of_month]) % pool_size``,
    with Monday as 1 and Sunday as 7.
    """
    if pool_size <= 0:
        raise ValueError("pool_size must be positive")
    seed = day.isoweekday() * multiplier + offset
    if with_day_of_month:
        seed += day.day
    return seed % pool_size


def pick(
    pool: Sequence[T],
    day: date,
    multiplier: int = 1,
    offset: int = 0,
    with_day_of_month: bool = False,
) -> T:
    """Choose one option from ``pool`` for ``day``."""
    return pool[rotation_index(len(pool), day, multiplier, offset, with_day_of_month)]
