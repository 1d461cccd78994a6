"""Coordinate to timezone resolution and regional halachic defaults."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

__all__ = [
    "TimezoneInfo",
    "UnresolvableTimezoneError",
    "TIMEZONE_REGIONS",
    "guess_timezone_name",
    "timezone_info",
    "resolve_timezone",
    "is_israel",
    "default_candle_minutes",
    "default_tefillin_degrees",
]

LOGGER = logging.getLogger(__name__)

ISRAEL_TIMEZONE = "Asia/Jerusalem"

# (lat_min, lat_max, lon_min, lon_max, zone); first match wins.
TIMEZONE_REGIONS: Tuple[Tuple[float, float, float, float, str], ...] = (
    (29, 34, 34, 36, ISRAEL_TIMEZONE),
    # Europe
    (49, 61, -8, 2, "Europe/London"),
    (42, 51.5, -5, 8, "Europe/Paris"),
    (46, 55, 5, 15, "Europe/Berlin"),
    (36, 47, 6, 19, "Europe/Rome"),
    (36, 44, -10, 4, "Europe/Madrid"),
    (35, 42, 19, 30, "Europe/Athens"),
    (41, 45, 19, 30, "Europe/Bucharest"),
    (49, 55, 14, 24, "Europe/Warsaw"),
    (47, 52, 14, 23, "Europe/Budapest"),
    (55, 70, 5, 31, "Europe/Helsinki"),
    (54, 58, 20, 29, "Europe/Vilnius"),
    (50, 70, 30, 60, "Europe/Moscow"),
    (36, 42, 26, 45, "Europe/Istanbul"),
    # North America
    (25, 49, -82, -67, "America/New_York"),
    (25, 49, -105, -82, "America/Chicago"),
    (25, 49, -115, -105, "America/Denver"),
    (25, 49, -125, -115, "America/Los_Angeles"),
    (42, 56, -80, -53, "America/Toronto"),
    (45, 55, -98, -80, "America/Winnipeg"),
    (49, 55, -130, -110, "America/Vancouver"),
    # South America
    (-35, -22, -58, -43, "America/Sao_Paulo"),
    (-40, -22, -70, -58, "America/Argentina/Buenos_Aires"),
    # Australia
    (-44, -28, 140, 154, "Australia/Sydney"),
    (-28, -10, 140, 154, "Australia/Brisbane"),
    (-38, -30, 134, 140, "Australia/Adelaide"),
    (-36, -12, 114, 134, "Australia/Perth"),
    # Africa, Middle East and Asia
    (-35, -22, 16, 33, "Africa/Johannesburg"),
    (22, 27, 51, 57, "Asia/Dubai"),
    (8, 36, 68, 97, "Asia/Kolkata"),
    (18, 54, 73, 135, "Asia/Shanghai"),
    (24, 46, 127, 146, "Asia/Tokyo"),
    (27, 36, -13, -1, "Africa/Casablanca"),
)

_ISRAEL_BOX = (29.0, 34.0, 34.0, 36.0)
_JERUSALEM_BOX = (31.7, 31.85, 35.1, 35.25)

CANDLE_MINUTES_JERUSALEM = 40
CANDLE_MINUTES_ISRAEL = 30
CANDLE_MINUTES_DEFAULT = 18

TEFILLIN_DEGREES_ISRAEL = 11.5
TEFILLIN_DEGREES_DEFAULT = 10.2

_DST_LABELS = {
    (True, True): "שעון קיץ",
    (True, False): "שעון חורף",
    (False, True): "Summer Time",
    (False, False): "Standard Time",
}


class UnresolvableTimezoneError(ValueError):
    """Raised when no timezone can be determined for a location."""


@dataclass(frozen=True)
class TimezoneInfo:
    """UTC offset and DST state of a named zone on one civil date."""

    name: str
    offset: float
    dst: bool
    dst_label: str


def _in_box(lat: float, lon: float, box: Tuple[float, float, float, float]) -> bool:
    lat_min, lat_max, lon_min, lon_max = box
    return lat_min <= lat <= lat_max and lon_min <= lon <= lon_max


def guess_timezone_name(lat: float, lon: float) -> Optional[str]:
    """Return the IANA zone whose bounding box contains the point, if any."""

    for lat_min, lat_max, lon_min, lon_max, name in TIMEZONE_REGIONS:
        if _in_box(lat, lon, (lat_min, lat_max, lon_min, lon_max)):
            return name
    return None


def _offset_hours(moment: datetime, zone: ZoneInfo) -> float:
    offset = moment.astimezone(zone).utcoffset()
    if offset is None:
        raise UnresolvableTimezoneError(f"Timezone {zone.key!r} has no UTC offset")
    return offset.total_seconds() / 3600.0


def _load_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        # OSError covers names that are tzdata directories, e.g. "America".
        LOGGER.warning(json.dumps({"event": "timezone_unknown", "timezone": name}))
        raise UnresolvableTimezoneError(f"Unknown timezone name: {name!r}") from exc


def timezone_info(day: date, name: str) -> TimezoneInfo:
    """Offset and DST flag of zone *name* on *day*.

    The offset is sampled at 12:00 UTC. DST is active when it differs from the
    standard offset, taken as the smaller of the mid-January and mid-July
    offsets so that southern-hemisphere zones are handled too.
    """

    zone = _load_zone(name)
    offset = _offset_hours(datetime(day.year, day.month, day.day, 12, tzinfo=UTC), zone)
    january = _offset_hours(datetime(day.year, 1, 15, 12, tzinfo=UTC), zone)
    july = _offset_hours(datetime(day.year, 7, 15, 12, tzinfo=UTC), zone)
    dst = offset != min(january, july)
    label = _DST_LABELS[(name == ISRAEL_TIMEZONE, dst)]
    return TimezoneInfo(name=name, offset=offset, dst=dst, dst_label=label)


def resolve_timezone(
    lat: float,
    lon: float,
    day: date,
    timezone_name: Optional[str] = None,
) -> TimezoneInfo:
    """Resolve the zone for a location, preferring an explicit *timezone_name*.

    Raises
    ------
    UnresolvableTimezoneError
        If no name is given and the coordinates fall outside every known
        region, or the zone name is unknown.
    """

    name = timezone_name or guess_timezone_name(lat, lon)
    if not name:
        LOGGER.warning(
            json.dumps({"event": "timezone_unresolved", "lat": lat, "lon": lon})
        )
        raise UnresolvableTimezoneError(
            f"Cannot determine timezone for coordinates ({lat}, {lon}). "
            'Please provide a timezone name (e.g. "Asia/Jerusalem", "America/New_York").'
        )
    return timezone_info(day, name)


def is_israel(lat: float, lon: float) -> bool:
    return _in_box(lat, lon, _ISRAEL_BOX)


def default_candle_minutes(lat: float, lon: float) -> int:
    """Candle-lighting lead before sunset customary at the location."""

    if _in_box(lat, lon, _JERUSALEM_BOX):
        return CANDLE_MINUTES_JERUSALEM
    if is_israel(lat, lon):
        return CANDLE_MINUTES_ISRAEL
    return CANDLE_MINUTES_DEFAULT


def default_tefillin_degrees(lat: float, lon: float) -> float:
    return TEFILLIN_DEGREES_ISRAEL if is_israel(lat, lon) else TEFILLIN_DEGREES_DEFAULT
