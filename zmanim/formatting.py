"""Clock-string and epoch-timestamp rendering of decimal local hours."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional

__all__ = ["Rounding", "to_time_string", "to_unix_timestamp"]

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400


class Rounding(str, Enum):
    """Direction used when truncating a decimal hour to whole seconds."""

    up = "up"
    down = "down"


def to_time_string(hours: Optional[float], rounding: Rounding = Rounding.up) -> Optional[str]:
    """Render decimal *hours* as ``H:MM:SS`` (24-hour clock, no leading zero).

    Values outside ``[0, 24)`` wrap onto the clock face. ``None`` and NaN
    render as ``None``.
    """

    if hours is None or math.isnan(hours):
        return None
    scaled = hours * SECONDS_PER_HOUR
    total = math.floor(scaled) if rounding is Rounding.down else math.ceil(scaled)
    total %= SECONDS_PER_DAY
    h, remainder = divmod(total, SECONDS_PER_HOUR)
    m, s = divmod(remainder, 60)
    return f"{h}:{m:02d}:{s:02d}"


def to_unix_timestamp(day: date, hours: Optional[float], utc_offset: float) -> Optional[int]:
    """Seconds since the epoch for *hours* of wall-clock time on *day*.

    The wall clock is the fixed *utc_offset* in hours; the time of day is
    rounded to the nearest second.
    """

    if hours is None or math.isnan(hours):
        return None
    offset = timezone(timedelta(hours=utc_offset))
    midnight = datetime(day.year, day.month, day.day, tzinfo=offset)
    local = midnight + timedelta(seconds=round(hours * SECONDS_PER_HOUR))
    return int(local.timestamp())
