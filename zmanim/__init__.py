"""Halachic day times computed from a low-precision solar ephemeris."""

from .engine import (
    ChabadZmanim,
    DailyZmanim,
    GraZmanim,
    LocationConfig,
    ShabbatTimes,
    compute_chabad,
    compute_zmanim,
    sun_times_for_zenith,
    zmanim_from_coordinates,
)
from .solar import calc_sun_times
from .timezone import TimezoneInfo, UnresolvableTimezoneError, resolve_timezone

__all__ = [
    "ChabadZmanim",
    "DailyZmanim",
    "GraZmanim",
    "LocationConfig",
    "ShabbatTimes",
    "TimezoneInfo",
    "UnresolvableTimezoneError",
    "calc_sun_times",
    "compute_chabad",
    "compute_zmanim",
    "resolve_timezone",
    "sun_times_for_zenith",
    "zmanim_from_coordinates",
]
