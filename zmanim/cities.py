"""Helpers for rows of a city reference table."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .engine import LocationConfig
from .timezone import (
    CANDLE_MINUTES_DEFAULT,
    CANDLE_MINUTES_ISRAEL,
    CANDLE_MINUTES_JERUSALEM,
    UnresolvableTimezoneError,
    timezone_info,
)

__all__ = [
    "CityRow",
    "timezone_name_for_row",
    "is_jerusalem",
    "is_haifa",
    "is_israel_row",
    "config_from_row",
]

LOGGER = logging.getLogger(__name__)

_ISRAEL_NAMES = frozenset({"Israel", "ישראל"})
_US_MARKERS = frozenset({'ארה"ב', "us"})


@dataclass(frozen=True)
class CityRow:
    latitude: float
    longitude: float
    country_en: str
    city_en: Optional[str] = None
    tz_name: Optional[str] = None
    more: Optional[str] = None
    elevation: float = 0.0


def timezone_name_for_row(row: CityRow) -> str:
    """IANA zone for a row: explicit name, then Israel, then US state, then city."""

    if row.tz_name:
        return row.tz_name
    if row.country_en == "Israel":
        return "Israel"
    if row.more in _US_MARKERS:
        # US rows carry the state name in ``country_en``.
        return "America/" + row.country_en.replace(" ", "_")
    return row.city_en or ""


def is_jerusalem(row: CityRow) -> bool:
    if not row.city_en:
        return False
    return (row.country_en, row.city_en) in {("Israel", "Jerusalem"), ("ישראל", "ירושלים")}


def is_haifa(row: CityRow) -> bool:
    if not row.city_en:
        return False
    return (row.country_en, row.city_en) in {("Israel", "haifa"), ("ישראל", "חיפה")}


def is_israel_row(row: CityRow) -> bool:
    return row.country_en in _ISRAEL_NAMES


def _candle_minutes_for_row(row: CityRow) -> int:
    if is_jerusalem(row):
        return CANDLE_MINUTES_JERUSALEM
    if is_haifa(row) or is_israel_row(row):
        return CANDLE_MINUTES_ISRAEL
    return CANDLE_MINUTES_DEFAULT


def config_from_row(row: CityRow, day: date) -> LocationConfig:
    """Build a :class:`LocationConfig` for a reference-table city on *day*.

    Rows whose zone cannot be resolved fall back to UTC+0 without DST.
    """

    name = timezone_name_for_row(row)
    try:
        info = timezone_info(day, name)
        offset, dst = info.offset, info.dst
    except UnresolvableTimezoneError:
        LOGGER.warning(
            json.dumps({"event": "city_timezone_fallback", "city": row.city_en, "timezone": name})
        )
        offset, dst = 0.0, False
    return LocationConfig(
        latitude=row.latitude,
        longitude=row.longitude,
        utc_offset=offset,
        dst=dst,
        elevation=row.elevation,
        candle_minutes=_candle_minutes_for_row(row),
    )
