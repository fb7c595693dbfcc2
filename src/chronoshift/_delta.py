"""Shifting datelike values by calendar months and years.

Ambiguous month-ends always resolve backwards: one month after Jan 31st is the
last day of February, and a shifted value keeps no memory of the day it came
from.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol, TypeVar

from ._error import ChronoshiftError

logger = logging.getLogger(__name__)


class Datelike(Protocol):
    """A proleptic Gregorian value that can be rebuilt with new fields.

    ``date`` and ``datetime`` (naive or aware) satisfy this protocol.
    ``replace`` is expected to raise ``ValueError`` for dates that do not exist.
    """

    @property
    def year(self) -> int: ...

    @property
    def month(self) -> int: ...

    @property
    def day(self) -> int: ...

    def replace(self, *, year: int = ..., month: int = ..., day: int = ...) -> Datelike: ...


D = TypeVar("D", bound=Datelike)

_THIRTY_DAY_MONTHS = (4, 6, 9, 11)


def is_leap_year(year: int) -> bool:
    """Leap years as naively defined in the proleptic Gregorian calendar."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def _normalise_day(year: int, month: int, day: int) -> int:
    # Days past the end of the month collapse onto its last day.
    if day <= 28:
        return day
    if month == 2:
        return 29 if is_leap_year(year) else 28
    if day == 31 and month in _THIRTY_DAY_MONTHS:
        return 30
    return day


def _local_time_problem(value: object) -> str | None:
    """Describe why an aware datetime's wall time cannot be used, if it can't.

    A wall time is usable when it maps to exactly one instant in its zone.
    """
    if not isinstance(value, datetime) or value.tzinfo is None:
        return None
    early = value.replace(fold=0)
    if early.utcoffset() == value.replace(fold=1).utcoffset():
        return None
    # Inside a gap the wall time does not survive a round trip through UTC
    roundtrip = early.astimezone(timezone.utc).astimezone(value.tzinfo)
    if roundtrip.replace(tzinfo=None) != early.replace(tzinfo=None):
        return "does not exist"
    return "is ambiguous"


def _replace_ymd(value: D, year: int, month: int, day: int) -> D:
    try:
        # replace() sets all three fields at once, so no invalid intermediate
        # date (e.g. April 31st) is ever built.
        replaced = value.replace(year=year, month=month, day=day)
    except (ValueError, OverflowError) as e:
        raise ChronoshiftError.shift(
            f"cannot move {value} to {year:04d}-{month:02d}-{day:02d}: {e}"
        ) from e
    problem = _local_time_problem(replaced)
    if problem is not None:
        raise ChronoshiftError.shift(f"local time {replaced} {problem} in {replaced.tzinfo}")
    return replaced  # type: ignore[return-value]


def _quiet(fn: Callable[..., D], *args: object) -> D | None:
    try:
        return fn(*args)
    except ChronoshiftError as e:
        logger.debug("%s%r failed: %s", fn.__name__, args, e)
        return None


# --- Months and years ---


def shift_months(value: D, months: int) -> D:
    """Shift a datelike value by the given number of months.

    Ambiguous month-ends are shifted backwards as necessary::

        >>> shift_months(date(2020, 1, 31), 1)
        datetime.date(2020, 2, 29)

    Raises ChronoshiftError when the result cannot be represented.
    """
    carry, month0 = divmod(value.month - 1 + months, 12)
    year = value.year + carry
    month = month0 + 1
    day = _normalise_day(year, month, value.day)
    return _replace_ymd(value, year, month, day)


def shift_months_opt(value: D, months: int) -> D | None:
    return _quiet(shift_months, value, months)


def shift_years(value: D, years: int) -> D:
    """Shift a datelike value by the given number of years.

    Feb 29th lands on Feb 28th in non-leap years.
    """
    return shift_months(value, years * 12)


def shift_years_opt(value: D, years: int) -> D | None:
    return _quiet(shift_years, value, years)


# --- Field setters ---


def with_day(value: D, day: int) -> D:
    """Move to the given day of the same month, clamped to the month's end.

    Raises ChronoshiftError if ``day`` is outside 1-31.
    """
    if not 1 <= day <= 31:
        raise ChronoshiftError.shift(f"day {day} not in range 1-31")
    normalised = _normalise_day(value.year, value.month, day)
    return _replace_ymd(value, value.year, value.month, normalised)


def with_day_opt(value: D, day: int) -> D | None:
    return _quiet(with_day, value, day)


def with_month(value: D, month: int) -> D:
    """Move to the given month of the same year, clamped to the month's end.

    Raises ChronoshiftError if ``month`` is outside 1-12.
    """
    if not 1 <= month <= 12:
        raise ChronoshiftError.shift(f"month {month} not in range 1-12")
    return shift_months(value, month - value.month)


def with_month_opt(value: D, month: int) -> D | None:
    return _quiet(with_month, value, month)


def with_year(value: D, year: int) -> D:
    return shift_years(value, year - value.year)


def with_year_opt(value: D, year: int) -> D | None:
    return _quiet(with_year, value, year)
