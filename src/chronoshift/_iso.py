"""ISO-8601 duration text <-> (months, nanoseconds).

The grammar is the usual ``PnYnMnWnDTnHnMnS`` with two extensions: every
field may carry its own sign, and the seconds field may carry a fraction of
up to nine digits (``.`` or ``,`` separated). Fields must appear in that
fixed order.
"""

from __future__ import annotations

import logging
import re

from ._error import ChronoshiftError, Span
from ._units import (
    I32_MAX,
    I32_MIN,
    I64_MAX,
    I64_MIN,
    MAX_NANOS,
    MIN_NANOS,
    NANOS_PER_SECOND,
    SECONDS_PER_DAY,
    SECONDS_PER_HOUR,
    SECONDS_PER_MINUTE,
    trunc_div,
)

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"([+-]?)([0-9]+)(?:[.,]([0-9]+))?")

_FRACTION_DIGITS = 9
# Digits in the widest magnitude any field can hold (2**63 - 1).
_MAX_SIGNIFICANT_DIGITS = 19


def _too_many_digits(digits: str) -> bool:
    return len(digits.lstrip("+-").lstrip("0")) > _MAX_SIGNIFICANT_DIGITS


def _to_int(digits: str) -> int:
    # int() counts leading zeros against its digit limit.
    sign = "-" if digits.startswith("-") else ""
    return int(sign + (digits.lstrip("+-").lstrip("0") or "0"))


class _DurationParser:
    def __init__(self, input_text: str) -> None:
        self._input = input_text
        self._pos = 0

    def _error(
        self, message: str, start: int, end: int, field: str | None = None
    ) -> ChronoshiftError:
        err = ChronoshiftError.parse(message, Span(start, end), self._input, field)
        logger.debug("rejected ISO-8601 duration %r: %s", self._input, err)
        return err

    def parse(self) -> tuple[int, int]:
        if not self._input.startswith("P"):
            raise self._error("duration was not prefixed with P", 0, 1)
        self._pos = 1

        t_index = self._input.find("T", 1)
        date_end = t_index if t_index != -1 else len(self._input)

        # --- date part ---
        years = self._integer_field("Y", "years", date_end, 32)
        months = self._integer_field("M", "months", date_end, 32)
        weeks = self._integer_field("W", "weeks", date_end, 64)
        days = self._integer_field("D", "days", date_end, 64)
        self._expect_consumed(1, date_end, "datespec")

        date_span = (1, date_end)
        total_months = self._checked(
            years * 12 + months, I32_MIN, I32_MAX, date_span, "years and months"
        )
        total_days = self._checked(weeks * 7 + days, I64_MIN, I64_MAX, date_span, "weeks and days")

        # --- time part ---
        hours = minutes = nanos = 0
        if t_index != -1:
            time_start = t_index + 1
            time_end = len(self._input)
            self._pos = time_start
            hours = self._integer_field("H", "hours", time_end, 64)
            minutes = self._integer_field("M", "minutes", time_end, 64)
            nanos = self._seconds_field(time_end)
            self._expect_consumed(time_start, time_end, "timespec")

        span = (1, len(self._input))
        secs = self._checked(total_days * 24 + hours, I64_MIN, I64_MAX, span, "days and hours")
        secs = self._checked(secs * 60 + minutes, I64_MIN, I64_MAX, span, "minutes")
        secs = self._checked(secs * 60, I64_MIN, I64_MAX, span, "seconds")
        total_nanos = self._checked(
            secs * NANOS_PER_SECOND + nanos, MIN_NANOS, MAX_NANOS, span, "the duration"
        )
        return total_months, total_nanos

    def _integer_field(self, terminator: str, name: str, limit: int, bits: int) -> int:
        # An absent terminator means the field is absent; nothing is consumed.
        end = self._input.find(terminator, self._pos, limit)
        if end == -1:
            return 0
        start = self._pos
        text = self._input[start:end]
        # Oversized digit runs are rejected before int() sees them.
        valid = _INTEGER.fullmatch(text) is not None and not _too_many_digits(text)
        value = _to_int(text) if valid else 0
        if not valid or not -(2 ** (bits - 1)) <= value < 2 ** (bits - 1):
            raise self._error(f"{text!r} is not a valid {bits}-bit integer", start, end, name)
        self._pos = end + 1
        return value

    def _seconds_field(self, limit: int) -> int:
        end = self._input.find("S", self._pos, limit)
        if end == -1:
            return 0
        start = self._pos
        text = self._input[start:end]
        m = _DECIMAL.fullmatch(text)
        if m is None:
            raise self._error(f"{text!r} is not a valid number of seconds", start, end, "seconds")
        sign, whole, fraction = m.groups()
        if _too_many_digits(whole) or _to_int(whole) > I64_MAX:
            raise self._error(f"{text!r} is not a valid 64-bit integer", start, end, "seconds")
        secs = _to_int(whole)
        # Sub-nanosecond digits are truncated.
        frac_nanos = int((fraction or "").ljust(_FRACTION_DIGITS, "0")[:_FRACTION_DIGITS])
        # The sign applies to the fraction too, so "-0.5S" is half a second
        # before zero and "-1.25S" is -2s + 0.75s.
        nanos = secs * NANOS_PER_SECOND + frac_nanos
        self._pos = end + 1
        return -nanos if sign == "-" else nanos

    def _expect_consumed(self, start: int, end: int, part: str) -> None:
        if self._pos < end:
            raise self._error(
                f"trailing characters: {self._input[self._pos:end]} "
                f"in {part}: {self._input[start:end]}",
                self._pos,
                end,
            )

    def _checked(self, value: int, lo: int, hi: int, span: tuple[int, int], what: str) -> int:
        if not lo <= value <= hi:
            raise self._error(f"overflow combining {what}", *span)
        return value


def parse_duration(input_text: str) -> tuple[int, int]:
    """Parse ISO-8601 duration text into ``(months, nanoseconds)``."""
    return _DurationParser(input_text).parse()


# --- Formatting ---


def _format_fields(fields: tuple[tuple[int, str], ...]) -> str:
    return "".join(f"{value}{letter}" for value, letter in fields if value != 0)


def _format_seconds(secs: int, nanos: int) -> str:
    if nanos == 0:
        return f"{secs}S" if secs else ""
    # secs and nanos share a sign here, so one "-" covers both.
    sign = "-" if secs < 0 or nanos < 0 else ""
    fraction = f"{abs(nanos):09d}".rstrip("0")
    return f"{sign}{abs(secs)}.{fraction}S"


def format_duration(months: int, nanoseconds: int) -> str:
    """Format ``(months, nanoseconds)`` as ISO-8601 duration text.

    Every emitted field carries the sign of its component, so a negative
    month count renders as ``P-1M``. Zero fields are skipped and the zero
    duration renders as a bare ``P``.
    """
    years = trunc_div(months, 12)
    months -= years * 12

    secs = trunc_div(nanoseconds, NANOS_PER_SECOND)
    nanos = nanoseconds - secs * NANOS_PER_SECOND
    days = trunc_div(secs, SECONDS_PER_DAY)
    secs -= days * SECONDS_PER_DAY
    hours = trunc_div(secs, SECONDS_PER_HOUR)
    secs -= hours * SECONDS_PER_HOUR
    minutes = trunc_div(secs, SECONDS_PER_MINUTE)
    secs -= minutes * SECONDS_PER_MINUTE

    out = "P" + _format_fields(((years, "Y"), (months, "M"), (days, "D")))
    time_spec = _format_fields(((hours, "H"), (minutes, "M"))) + _format_seconds(secs, nanos)
    if time_spec:
        out += "T" + time_spec
    return out
