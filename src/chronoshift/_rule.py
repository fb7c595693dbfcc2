from __future__ import annotations

import logging
from typing import Generic

from ._delta import D, with_day
from ._duration import RelativeDuration
from ._error import ChronoshiftError

logger = logging.getLogger(__name__)


class DateRule(Generic[D]):
    """An iterator yielding dates evenly spaced by a RelativeDuration.

    The n-th date is always ``start + freq * n``, computed from the start
    rather than from the previous date, so month-end truncation never
    accumulates::

        >>> list(DateRule.monthly(date(2020, 1, 30)).with_count(3))
        [datetime.date(2020, 1, 30), datetime.date(2020, 2, 29), datetime.date(2020, 3, 30)]

    A rule is configured through ``with_count``, ``with_end`` and
    ``with_rolling_day``, each returning a fresh rule and leaving the receiver
    untouched. Iterating consumes the rule; build a new one to start over.
    """

    __slots__ = ("_start", "_freq", "_end", "_count", "_rolling_day", "_cursor")

    def __init__(
        self,
        start: D,
        freq: RelativeDuration,
        *,
        end: D | None = None,
        count: int | None = None,
        rolling_day: int | None = None,
    ) -> None:
        if count is not None and count < 0:
            raise ChronoshiftError.rule(f"count {count} must not be negative")
        if rolling_day is not None and not 1 <= rolling_day <= 31:
            raise ChronoshiftError.rule(f"rolling day {rolling_day} not in range 1-31")
        self._start = start
        self._freq = freq
        self._end = end
        self._count = count
        self._rolling_day = rolling_day
        self._cursor = 0

    @classmethod
    def secondly(cls, start: D) -> DateRule[D]:
        return cls(start, RelativeDuration.seconds(1))

    @classmethod
    def minutely(cls, start: D) -> DateRule[D]:
        return cls(start, RelativeDuration.minutes(1))

    @classmethod
    def hourly(cls, start: D) -> DateRule[D]:
        return cls(start, RelativeDuration.hours(1))

    @classmethod
    def daily(cls, start: D) -> DateRule[D]:
        return cls(start, RelativeDuration.days(1))

    @classmethod
    def weekly(cls, start: D) -> DateRule[D]:
        return cls(start, RelativeDuration.weeks(1))

    @classmethod
    def monthly(cls, start: D) -> DateRule[D]:
        """Dates one month apart; ambiguous month-ends shift backwards."""
        return cls(start, RelativeDuration.months(1))

    @classmethod
    def yearly(cls, start: D) -> DateRule[D]:
        """Dates one year apart; Feb 29th falls back to Feb 28th."""
        return cls(start, RelativeDuration.years(1))

    # --- Configuration ---

    def with_count(self, count: int) -> DateRule[D]:
        """Limit the rule to ``count`` dates. Replaces any end date."""
        return DateRule(self._start, self._freq, count=count, rolling_day=self._rolling_day)

    def with_end(self, end: D) -> DateRule[D]:
        """Stop before reaching ``end`` (exclusive). Replaces any count.

        The direction of travel is read from ``end`` relative to the start:
        an ``end`` before the start stops the rule once a date is at or
        before it. A forward-moving ``freq`` with an ``end`` before the start
        never terminates.
        """
        return DateRule(self._start, self._freq, end=end, rolling_day=self._rolling_day)

    def with_rolling_day(self, rolling_day: int) -> DateRule[D]:
        """Pin every date to ``rolling_day``, clamped to each month's end.

        Raises ChronoshiftError if ``rolling_day`` is outside 1-31.
        """
        return DateRule(
            self._start,
            self._freq,
            end=self._end,
            count=self._count,
            rolling_day=rolling_day,
        )

    @property
    def start(self) -> D:
        return self._start

    @property
    def freq(self) -> RelativeDuration:
        return self._freq

    @property
    def end(self) -> D | None:
        return self._end

    @property
    def count(self) -> int | None:
        return self._count

    @property
    def rolling_day(self) -> int | None:
        return self._rolling_day

    # --- Iteration ---

    def _past_end(self, current: D) -> bool:
        end = self._end
        if end is None:
            return False
        if end >= self._start:  # type: ignore[operator]
            return current >= end  # type: ignore[operator, no-any-return]
        return current <= end  # type: ignore[operator, no-any-return]

    def __iter__(self) -> DateRule[D]:
        return self

    def __next__(self) -> D:
        if self._count is not None and self._cursor >= self._count:
            raise StopIteration
        current = (self._freq * self._cursor).apply_to(self._start)
        if self._rolling_day is not None:
            current = with_day(current, self._rolling_day)
        if self._past_end(current):
            logger.debug("%r reached its end after %d dates", self, self._cursor)
            raise StopIteration
        self._cursor += 1
        return current

    def __repr__(self) -> str:
        out = f"DateRule({self._start!r}, {self._freq!r}"
        if self._end is not None:
            out += f", end={self._end!r}"
        if self._count is not None:
            out += f", count={self._count}"
        if self._rolling_day is not None:
            out += f", rolling_day={self._rolling_day}"
        return out + ")"
