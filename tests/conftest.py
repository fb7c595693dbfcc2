from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest


def parse_zoned(s: str) -> datetime:
    """Parse '2020-03-08T02:30:00[America/New_York]' into an aware datetime.

    The bracketed IANA zone is attached to the wall time as written.
    """
    m = re.match(r"^(.+)\[(.+)\]$", s)
    if not m:
        raise ValueError(f"expected format 'ISO[TZ]', got: {s}")
    iso_part, tz_name = m.group(1), m.group(2)
    return datetime.fromisoformat(iso_part).replace(tzinfo=ZoneInfo(tz_name))


@pytest.fixture
def zoned() -> Callable[[str], datetime]:
    return parse_zoned
