"""Calendar-aware durations: month shifts, relative durations and date rules.

Shifting by months resolves ambiguous month-ends backwards: one month after
Jan 31st is the last day of February, and a shifted date has no memory of
the day it came from.
"""

from __future__ import annotations

from ._delta import (
    Datelike,
    is_leap_year,
    shift_months,
    shift_months_opt,
    shift_years,
    shift_years_opt,
    with_day,
    with_day_opt,
    with_month,
    with_month_opt,
    with_year,
    with_year_opt,
)
from ._duration import RelativeDuration
from ._error import ChronoshiftError, ErrorKind, Span
from ._rule import DateRule

__all__ = [
    "RelativeDuration",
    "DateRule",
    "Datelike",
    "ChronoshiftError",
    "ErrorKind",
    "Span",
    "is_leap_year",
    "shift_months",
    "shift_months_opt",
    "shift_years",
    "shift_years_opt",
    "with_day",
    "with_day_opt",
    "with_month",
    "with_month_opt",
    "with_year",
    "with_year_opt",
]
