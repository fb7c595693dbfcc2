from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class Span:
    start: int
    end: int


ErrorKind = Literal["parse", "shift", "rule"]


class ChronoshiftError(Exception):
    """Raised when duration text, a date shift or a date rule is invalid.

    ``kind`` tells the three apart. Parse errors also carry the input text,
    the ``span`` of the offending characters and, when the problem lies in a
    single component such as ``"months"`` or ``"seconds"``, its ``field``.
    """

    kind: ErrorKind
    span: Span | None
    input_text: str | None
    field: str | None

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        span: Span | None = None,
        input_text: str | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.span = span
        self.input_text = input_text
        self.field = field

    @classmethod
    def parse(
        cls, message: str, span: Span, input_text: str, field: str | None = None
    ) -> ChronoshiftError:
        return cls("parse", message, span, input_text, field)

    @classmethod
    def shift(cls, message: str) -> ChronoshiftError:
        return cls("shift", message)

    @classmethod
    def rule(cls, message: str) -> ChronoshiftError:
        return cls("rule", message)

    def display_rich(self) -> str:
        """Render the message with the duration text and a caret underline.

        The underline is labelled with the field it points at, if known::

            error: '1.5' is not a valid 32-bit integer
              P1Y1.5M
                 ^^^ months
        """
        if self.kind != "parse" or self.span is None or self.input_text is None:
            return f"error: {self}"
        padding = " " * (self.span.start + 2)
        underline = "^" * max(self.span.end - self.span.start, 1)
        if self.field is not None:
            underline += f" {self.field}"
        return f"error: {self}\n  {self.input_text}\n{padding}{underline}"
