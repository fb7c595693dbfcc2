from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from typing import cast, overload

from ._delta import D, Datelike, shift_months
from ._error import ChronoshiftError
from ._iso import format_duration, parse_duration
from ._units import (
    I32_MAX,
    I32_MIN,
    MAX_NANOS,
    MIN_NANOS,
    NANOS_PER_DAY,
    NANOS_PER_HOUR,
    NANOS_PER_MICRO,
    NANOS_PER_MILLI,
    NANOS_PER_MINUTE,
    NANOS_PER_SECOND,
    NANOS_PER_WEEK,
    trunc_div,
)

logger = logging.getLogger(__name__)


def _is_datelike(value: object) -> bool:
    return all(hasattr(value, attr) for attr in ("year", "month", "day", "replace"))


def _timedelta_nanos(td: timedelta) -> int:
    return ((td.days * 86_400 + td.seconds) * 1_000_000 + td.microseconds) * NANOS_PER_MICRO


def _add_nanoseconds(value: D, nanoseconds: int) -> D:
    """Add an absolute span to a datelike value.

    Plain dates move by whole days, truncated toward zero. Datetimes keep
    microsecond resolution; aware ones move by elapsed time, not wall time.
    """
    if nanoseconds == 0:
        return value
    moved: object
    try:
        if isinstance(value, datetime):
            delta = timedelta(microseconds=trunc_div(nanoseconds, NANOS_PER_MICRO))
            if value.tzinfo is None:
                moved = value + delta
            else:
                moved = (value.astimezone(timezone.utc) + delta).astimezone(value.tzinfo)
        elif isinstance(value, date):
            moved = value + timedelta(days=trunc_div(nanoseconds, NANOS_PER_DAY))
        else:
            span = timedelta(microseconds=trunc_div(nanoseconds, NANOS_PER_MICRO))
            moved = value + span  # type: ignore[operator]
    except OverflowError as e:
        raise ChronoshiftError.shift(f"{value} out of range after adding {nanoseconds}ns") from e
    return cast(D, moved)


@dataclass(frozen=True, order=True, slots=True, repr=False)
class RelativeDuration:
    """A span of time made of calendar months plus an absolute duration.

    The two parts are never folded into each other: fourteen months stay
    fourteen months, and thirty days are not a month. Applying a duration to
    a date shifts by the months first (month-ends resolve backwards), then
    adds the absolute part. As a result addition is not associative when
    applied to dates::

        >>> (date(2020, 1, 31) + RelativeDuration.months(1)) + RelativeDuration.months(1)
        datetime.date(2020, 3, 29)
        >>> date(2020, 1, 31) + (RelativeDuration.months(1) + RelativeDuration.months(1))
        datetime.date(2020, 3, 31)

    Ordering compares months first, then the absolute part.
    """

    calendar_months: int = 0
    total_nanoseconds: int = 0

    def __post_init__(self) -> None:
        if not I32_MIN <= self.calendar_months <= I32_MAX:
            raise OverflowError(f"{self.calendar_months} months is out of range")
        if not MIN_NANOS <= self.total_nanoseconds <= MAX_NANOS:
            raise OverflowError(f"{self.total_nanoseconds}ns is out of range")

    # --- Constructors ---

    @classmethod
    def zero(cls) -> RelativeDuration:
        return cls()

    @classmethod
    def years(cls, years: int) -> RelativeDuration:
        """Equivalent to ``months(years * 12)``; raises OverflowError out of range."""
        if not I32_MIN <= years * 12 <= I32_MAX:
            raise OverflowError("RelativeDuration.years out of bounds")
        return cls(years * 12)

    @classmethod
    def months(cls, months: int) -> RelativeDuration:
        return cls(months)

    @classmethod
    def weeks(cls, weeks: int) -> RelativeDuration:
        return cls(0, weeks * NANOS_PER_WEEK)

    @classmethod
    def days(cls, days: int) -> RelativeDuration:
        return cls(0, days * NANOS_PER_DAY)

    @classmethod
    def hours(cls, hours: int) -> RelativeDuration:
        return cls(0, hours * NANOS_PER_HOUR)

    @classmethod
    def minutes(cls, minutes: int) -> RelativeDuration:
        return cls(0, minutes * NANOS_PER_MINUTE)

    @classmethod
    def seconds(cls, seconds: int) -> RelativeDuration:
        return cls(0, seconds * NANOS_PER_SECOND)

    @classmethod
    def milliseconds(cls, milliseconds: int) -> RelativeDuration:
        return cls(0, milliseconds * NANOS_PER_MILLI)

    @classmethod
    def microseconds(cls, microseconds: int) -> RelativeDuration:
        return cls(0, microseconds * NANOS_PER_MICRO)

    @classmethod
    def nanoseconds(cls, nanoseconds: int) -> RelativeDuration:
        return cls(0, nanoseconds)

    @classmethod
    def from_timedelta(cls, td: timedelta) -> RelativeDuration:
        return cls(0, _timedelta_nanos(td))

    def with_duration(self, td: timedelta) -> RelativeDuration:
        """Replace the absolute part, keeping the months."""
        return replace(self, total_nanoseconds=_timedelta_nanos(td))

    # --- ISO-8601 ---

    @classmethod
    def parse_iso8601(cls, input_text: str) -> RelativeDuration:
        """Parse ISO-8601 duration text such as ``P1Y2M3DT4H5M6.5S``.

        Each field may carry its own sign (``P1Y-2M``). Raises ChronoshiftError
        with kind ``"parse"`` on malformed or out-of-range input.
        """
        months, nanoseconds = parse_duration(input_text)
        return cls(months, nanoseconds)

    @classmethod
    def validate(cls, input_text: str) -> bool:
        try:
            parse_duration(input_text)
            return True
        except ChronoshiftError:
            return False

    def format_iso8601(self) -> str:
        return format_duration(self.calendar_months, self.total_nanoseconds)

    # --- Views ---

    @property
    def duration(self) -> timedelta:
        """The absolute part, truncated toward zero to microseconds."""
        return timedelta(microseconds=trunc_div(self.total_nanoseconds, NANOS_PER_MICRO))

    def is_zero(self) -> bool:
        return self.calendar_months == 0 and self.total_nanoseconds == 0

    # --- Applying to dates ---

    def apply_to(self, value: D) -> D:
        """Shift ``value`` by the months, then add the absolute part.

        Raises ChronoshiftError when the result cannot be represented,
        including wall times that fall in a DST gap or fold.
        """
        shifted = shift_months(value, self.calendar_months) if self.calendar_months else value
        return _add_nanoseconds(shifted, self.total_nanoseconds)

    def apply_to_opt(self, value: D) -> D | None:
        try:
            return self.apply_to(value)
        except ChronoshiftError as e:
            logger.debug("cannot apply %r to %r: %s", self, value, e)
            return None

    # --- Arithmetic ---

    def __neg__(self) -> RelativeDuration:
        return RelativeDuration(-self.calendar_months, -self.total_nanoseconds)

    def __pos__(self) -> RelativeDuration:
        return self

    def __add__(self, other: object) -> RelativeDuration:
        if isinstance(other, timedelta):
            other = RelativeDuration.from_timedelta(other)
        if not isinstance(other, RelativeDuration):
            return NotImplemented
        return RelativeDuration(
            self.calendar_months + other.calendar_months,
            self.total_nanoseconds + other.total_nanoseconds,
        )

    @overload
    def __radd__(self, other: timedelta) -> RelativeDuration: ...

    @overload
    def __radd__(self, other: D) -> D: ...

    def __radd__(self, other: object) -> object:
        if isinstance(other, timedelta):
            return self + other
        if _is_datelike(other):
            return self.apply_to(cast(Datelike, other))
        return NotImplemented

    def __sub__(self, other: object) -> RelativeDuration:
        if isinstance(other, (RelativeDuration, timedelta)):
            return self + (-other)
        return NotImplemented

    @overload
    def __rsub__(self, other: timedelta) -> RelativeDuration: ...

    @overload
    def __rsub__(self, other: D) -> D: ...

    def __rsub__(self, other: object) -> object:
        if isinstance(other, timedelta):
            return -self + other
        if _is_datelike(other):
            return (-self).apply_to(cast(Datelike, other))
        return NotImplemented

    def __mul__(self, other: object) -> RelativeDuration:
        if not isinstance(other, int) or isinstance(other, bool):
            return NotImplemented
        return RelativeDuration(self.calendar_months * other, self.total_nanoseconds * other)

    __rmul__ = __mul__

    def __truediv__(self, other: object) -> RelativeDuration:
        """Divide each part by an integer, truncating toward zero.

        The parts are divided independently, so ``(d / 2) * 2`` differs from
        ``d`` when the month count is odd.
        """
        if not isinstance(other, int) or isinstance(other, bool):
            return NotImplemented
        if other == 0:
            raise ZeroDivisionError("RelativeDuration division by zero")
        return RelativeDuration(
            trunc_div(self.calendar_months, other), trunc_div(self.total_nanoseconds, other)
        )

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __str__(self) -> str:
        return self.format_iso8601()

    def __repr__(self) -> str:
        return f"RelativeDuration({self.format_iso8601()!r})"
