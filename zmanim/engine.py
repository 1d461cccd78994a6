"""Halachic day times (zmanim) derived from the solar ephemeris.

Two traditions are supported. The GRA (Vilna Gaon) reckoning is the default
and measures the variable hour (shaa zmanit) from sunrise to sunset. The
Alter Rebbe (Chabad) reckoning measures it from 72 minutes before sunrise to
72 minutes after sunset and adds Rabbeinu Tam nightfall and midnight. The
Shabbat boundary (candle lighting and nightfall on the following Saturday)
accompanies every query.

Every value is a decimal local hour for the configured UTC offset. A marker
whose underlying hour-angle solve has no solution is ``None``; its siblings
are unaffected.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass, fields
from datetime import date, timedelta
from typing import Callable, ClassVar, Dict, FrozenSet, Optional, Tuple, Union

from .formatting import Rounding, to_time_string, to_unix_timestamp
from .solar import SunTimes, calc_sun_times, elevated_zenith, sunrise_zenith
from .timezone import (
    CANDLE_MINUTES_DEFAULT,
    TimezoneInfo,
    default_candle_minutes,
    default_tefillin_degrees,
    resolve_timezone,
)

__all__ = [
    "LocationConfig",
    "GraZmanim",
    "ChabadZmanim",
    "ShabbatTimes",
    "DailyZmanim",
    "ZenithTimes",
    "SunTimesProvider",
    "sun_times_provider",
    "compute_gra_zmanim",
    "compute_chabad_zmanim",
    "compute_shabbat_times",
    "compute_zmanim",
    "compute_chabad",
    "zmanim_from_coordinates",
    "sun_times_for_zenith",
    "day_of_week",
]

LOGGER = logging.getLogger(__name__)

DAWN_ZENITH = 106.1  # 16.1 degrees below the horizon.
NIGHTFALL_ZENITH = 98.5  # 8.5 degrees below the horizon.
FIXED_TWILIGHT_HOURS = 72 / 60.0
FRIDAY = 5
MAX_ELEVATION_M = 9000.0

SunTimesProvider = Callable[[float, date], SunTimes]


def _optional(value: float) -> Optional[float]:
    return None if math.isnan(value) else value


def _value(hours: Optional[float]) -> float:
    return math.nan if hours is None else hours


def day_of_week(day: date) -> int:
    """Day of week with 0 for Sunday through 6 for Saturday."""

    return (day.weekday() + 1) % 7


@dataclass(frozen=True)
class LocationConfig:
    """Location and clock settings for one computation.

    ``dst`` is informational only: ``utc_offset`` must already include any
    daylight-saving shift for the date being computed.
    """

    latitude: float
    longitude: float
    utc_offset: float
    dst: bool = False
    elevation: float = 0.0
    candle_minutes: float = CANDLE_MINUTES_DEFAULT
    tefillin_deg: Optional[float] = None

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude must be within ±90 degrees: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude must be within ±180 degrees: {self.longitude}")
        if not -14.0 <= self.utc_offset <= 14.0:
            raise ValueError(f"utc_offset must be within ±14 hours: {self.utc_offset}")
        if self.candle_minutes < 0:
            raise ValueError(f"candle_minutes must not be negative: {self.candle_minutes}")
        if self.elevation > MAX_ELEVATION_M:
            raise ValueError(
                f"elevation must not exceed {MAX_ELEVATION_M:g} metres: {self.elevation}"
            )

    @property
    def tefillin_degrees(self) -> float:
        if self.tefillin_deg is not None:
            return self.tefillin_deg
        return default_tefillin_degrees(self.latitude, self.longitude)


def sun_times_provider(config: LocationConfig) -> SunTimesProvider:
    """Bind the ephemeris to a location: ``provider(zenith, day) -> SunTimes``."""

    def provider(zenith: float, day: date) -> SunTimes:
        return calc_sun_times(
            day.year,
            day.month,
            day.day,
            config.latitude,
            config.longitude,
            config.utc_offset,
            zenith,
        )

    return provider


# Durations, not clock times.
_UNFORMATTED = frozenset({"shaa_zmanit", "shaa_zmanit_ar"})


def _format_record(
    record: Union[GraZmanim, ChabadZmanim], round_down: FrozenSet[str]
) -> Dict[str, Optional[str]]:
    formatted: Dict[str, Optional[str]] = {}
    for item in fields(record):
        if item.name in _UNFORMATTED:
            continue
        rounding = Rounding.down if item.name in round_down else Rounding.up
        formatted[item.name] = to_time_string(getattr(record, item.name), rounding)
    return formatted


@dataclass(frozen=True)
class GraZmanim:
    """Day times according to the GRA, in decimal local hours."""

    alos_hashachar: Optional[float]
    misheyakir: Optional[float]
    sunrise: Optional[float]
    sof_zman_shema: Optional[float]
    sof_zman_tefila: Optional[float]
    chatzot: Optional[float]
    mincha_gedola: Optional[float]
    mincha_gedola_gra: Optional[float]  # Sunrise + 6.5 variable hours, no floor.
    mincha_ketana: Optional[float]
    plag_hamincha: Optional[float]
    sunset: Optional[float]
    tzeis: Optional[float]
    shaa_zmanit: Optional[float]

    # Latest-permissible markers are truncated so the display never runs late.
    ROUND_DOWN: ClassVar[FrozenSet[str]] = frozenset(
        {"sof_zman_shema", "sof_zman_tefila", "plag_hamincha"}
    )
    CANONICAL_ORDER: ClassVar[Tuple[str, ...]] = (
        "alos_hashachar",
        "misheyakir",
        "sunrise",
        "sof_zman_shema",
        "sof_zman_tefila",
        "chatzot",
        "mincha_gedola",
        "mincha_ketana",
        "plag_hamincha",
        "sunset",
        "tzeis",
    )

    def ordered(self) -> Tuple[Tuple[str, Optional[float]], ...]:
        return tuple((name, getattr(self, name)) for name in self.CANONICAL_ORDER)

    def formatted(self) -> Dict[str, Optional[str]]:
        return _format_record(self, self.ROUND_DOWN)


@dataclass(frozen=True)
class ChabadZmanim:
    """Day times according to the Alter Rebbe, in decimal local hours."""

    alos72: Optional[float]
    misheyakir: Optional[float]
    netz_hachama: Optional[float]
    sof_zman_shema_gra: Optional[float]
    sof_zman_shema_ar: Optional[float]
    sof_zman_tefila_gra: Optional[float]
    sof_zman_tefila_ar: Optional[float]
    chatzot: Optional[float]
    mincha_gedola: Optional[float]
    mincha_ketana: Optional[float]
    plag_hamincha: Optional[float]
    shkiah: Optional[float]
    tzeis: Optional[float]
    tzeis_rabbeinu_tam: Optional[float]
    chatzot_layla: Optional[float]
    shaa_zmanit_ar: Optional[float]

    ROUND_DOWN: ClassVar[FrozenSet[str]] = frozenset(
        {
            "sof_zman_shema_gra",
            "sof_zman_shema_ar",
            "sof_zman_tefila_gra",
            "sof_zman_tefila_ar",
            "plag_hamincha",
        }
    )

    def formatted(self) -> Dict[str, Optional[str]]:
        return _format_record(self, self.ROUND_DOWN)


@dataclass(frozen=True)
class ShabbatTimes:
    """Candle lighting on the coming Friday and nightfall the next evening."""

    friday: date
    saturday: date
    candle_lighting: Optional[float]
    shabbat_ends: Optional[float]
    candle_lighting_timestamp: Optional[int]
    shabbat_ends_timestamp: Optional[int]

    def formatted(self) -> Dict[str, Optional[str]]:
        return {
            "candle_lighting": to_time_string(self.candle_lighting),
            "shabbat_ends": to_time_string(self.shabbat_ends),
        }


def compute_gra_zmanim(
    provider: SunTimesProvider,
    day: date,
    elevation: float,
    tefillin_deg: float,
) -> GraZmanim:
    """Derive the GRA day times for *day*.

    Sunrise and sunset use the elevation-adjusted refraction zenith; dawn,
    misheyakir and nightfall are each solved at their own fixed depression.
    """

    sunrise, sunset = provider(sunrise_zenith(elevation), day)
    shaa = (sunset - sunrise) / 12.0

    dawn = provider(DAWN_ZENITH, day)
    tefillin = provider(90.0 + tefillin_deg, day)
    nightfall = provider(NIGHTFALL_ZENITH, day)

    chatzot = sunrise + 6 * shaa
    # Floor of one hour keeps mincha gedola clear of midday when the day collapses.
    mincha_gedola = chatzot + max(1.0, shaa) / 2

    return GraZmanim(
        alos_hashachar=_optional(dawn.sunrise),
        misheyakir=_optional(tefillin.sunrise),
        sunrise=_optional(sunrise),
        sof_zman_shema=_optional(sunrise + 3 * shaa),
        sof_zman_tefila=_optional(sunrise + 4 * shaa),
        chatzot=_optional(chatzot),
        mincha_gedola=_optional(mincha_gedola),
        mincha_gedola_gra=_optional(chatzot + shaa / 2),
        mincha_ketana=_optional(sunrise + 9.5 * shaa),
        plag_hamincha=_optional(sunrise + 10.75 * shaa),
        sunset=_optional(sunset),
        tzeis=_optional(nightfall.sunset),
        shaa_zmanit=_optional(shaa),
    )


def compute_chabad_zmanim(
    provider: SunTimesProvider,
    day: date,
    elevation: float,
    gra: GraZmanim,
) -> ChabadZmanim:
    """Derive the Alter Rebbe day times from the GRA sunrise/sunset of *day*.

    Only the Rabbeinu Tam nightfall (elevated-horizon sunset) and midnight
    (which needs the next morning's sunrise) query the ephemeris again.
    """

    sunrise = _value(gra.sunrise)
    sunset = _value(gra.sunset)

    alos72 = sunrise - FIXED_TWILIGHT_HOURS
    tzeis72 = sunset + FIXED_TWILIGHT_HOURS
    shaa_ar = (tzeis72 - alos72) / 12.0

    elevated = provider(elevated_zenith(elevation), day)
    tzeis_rt = elevated.sunset + FIXED_TWILIGHT_HOURS

    tomorrow = provider(sunrise_zenith(elevation), day + timedelta(days=1))
    night = (24.0 - sunset) + tomorrow.sunrise
    chatzot_layla = sunset + night / 2
    if chatzot_layla >= 24.0:
        chatzot_layla -= 24.0

    return ChabadZmanim(
        alos72=_optional(alos72),
        misheyakir=gra.misheyakir,
        netz_hachama=gra.sunrise,
        sof_zman_shema_gra=gra.sof_zman_shema,
        sof_zman_shema_ar=_optional(alos72 + 3 * shaa_ar),
        sof_zman_tefila_gra=gra.sof_zman_tefila,
        sof_zman_tefila_ar=_optional(alos72 + 4 * shaa_ar),
        chatzot=gra.chatzot,
        mincha_gedola=gra.mincha_gedola,
        mincha_ketana=gra.mincha_ketana,
        plag_hamincha=gra.plag_hamincha,
        shkiah=gra.sunset,
        tzeis=gra.tzeis,
        tzeis_rabbeinu_tam=_optional(tzeis_rt),
        chatzot_layla=_optional(chatzot_layla),
        shaa_zmanit_ar=_optional(shaa_ar),
    )


def compute_shabbat_times(
    provider: SunTimesProvider,
    day: date,
    elevation: float,
    candle_minutes: float,
    utc_offset: float,
) -> ShabbatTimes:
    """Candle lighting and Shabbat end for the Friday on or after *day*."""

    friday = day + timedelta(days=(FRIDAY - day_of_week(day) + 7) % 7)
    saturday = friday + timedelta(days=1)

    candle_lighting = _optional(
        provider(elevated_zenith(elevation), friday).sunset - candle_minutes / 60.0
    )
    shabbat_ends = _optional(provider(NIGHTFALL_ZENITH, saturday).sunset)

    return ShabbatTimes(
        friday=friday,
        saturday=saturday,
        candle_lighting=candle_lighting,
        shabbat_ends=shabbat_ends,
        candle_lighting_timestamp=to_unix_timestamp(friday, candle_lighting, utc_offset),
        shabbat_ends_timestamp=to_unix_timestamp(saturday, shabbat_ends, utc_offset),
    )


@dataclass(frozen=True)
class DailyZmanim:
    """GRA day times and Shabbat boundary for one location and date."""

    config: LocationConfig
    day: date
    gra: GraZmanim
    shabbat: ShabbatTimes
    timezone: Optional[TimezoneInfo] = None

    def chabad(self) -> ChabadZmanim:
        return compute_chabad_zmanim(
            sun_times_provider(self.config), self.day, self.config.elevation, self.gra
        )

    def as_dict(self) -> Dict[str, object]:
        """Formatted strings for every marker plus the Shabbat fields."""

        result: Dict[str, object] = dict(self.gra.formatted())
        result.update(self.shabbat.formatted())
        result["shabbat_start_unix"] = self.shabbat.candle_lighting_timestamp
        result["shabbat_ends_unix"] = self.shabbat.shabbat_ends_timestamp
        result["dst"] = self.config.dst
        result["date"] = self.day.isoformat()
        if self.timezone is not None:
            result["timezone"] = asdict(self.timezone)
        return result


def compute_zmanim(
    config: LocationConfig,
    day: date,
    timezone: Optional[TimezoneInfo] = None,
) -> DailyZmanim:
    """Compute the GRA day times and Shabbat boundary for *config* on *day*."""

    provider = sun_times_provider(config)
    gra = compute_gra_zmanim(provider, day, config.elevation, config.tefillin_degrees)
    shabbat = compute_shabbat_times(
        provider, day, config.elevation, config.candle_minutes, config.utc_offset
    )
    unresolved = [name for name, value in gra.ordered() if value is None]
    if unresolved:
        LOGGER.debug(
            json.dumps(
                {
                    "event": "zmanim_unresolved",
                    "date": day.isoformat(),
                    "lat": config.latitude,
                    "lon": config.longitude,
                    "fields": unresolved,
                }
            )
        )
    return DailyZmanim(config=config, day=day, gra=gra, shabbat=shabbat, timezone=timezone)


def compute_chabad(config: LocationConfig, day: date) -> ChabadZmanim:
    """Alter Rebbe day times for *config* on *day*."""

    provider = sun_times_provider(config)
    gra = compute_gra_zmanim(provider, day, config.elevation, config.tefillin_degrees)
    return compute_chabad_zmanim(provider, day, config.elevation, gra)


def zmanim_from_coordinates(
    lat: float,
    lon: float,
    day: date,
    *,
    timezone_name: Optional[str] = None,
    elevation: float = 0.0,
    candle_minutes: Optional[float] = None,
    tefillin_deg: Optional[float] = None,
) -> DailyZmanim:
    """Compute day times from coordinates alone.

    The UTC offset and DST flag come from the timezone resolver; candle
    lighting and misheyakir defaults come from the location's region.

    Raises
    ------
    UnresolvableTimezoneError
        If *timezone_name* is omitted and the coordinates match no known
        region.
    """

    tz = resolve_timezone(lat, lon, day, timezone_name)
    if candle_minutes is None:
        candle_minutes = default_candle_minutes(lat, lon)
    config = LocationConfig(
        latitude=lat,
        longitude=lon,
        utc_offset=tz.offset,
        dst=tz.dst,
        elevation=elevation,
        candle_minutes=candle_minutes,
        tefillin_deg=tefillin_deg,
    )
    return compute_zmanim(config, day, timezone=tz)


@dataclass(frozen=True)
class ZenithTimes:
    zenith: float
    sunrise: Optional[float]
    sunset: Optional[float]
    sunrise_text: Optional[str]
    sunset_text: Optional[str]


def sun_times_for_zenith(
    config: LocationConfig,
    day: date,
    degrees: Optional[float] = None,
    minutes: Optional[float] = None,
) -> ZenithTimes:
    """Sunrise/sunset at zenith ``degrees + minutes / 60`` (default 90°50')."""

    if degrees is None or minutes is None:
        zenith = 90.0 + 50.0 / 60.0
    else:
        zenith = degrees + minutes / 60.0
    times = sun_times_provider(config)(zenith, day)
    return ZenithTimes(
        zenith=zenith,
        sunrise=_optional(times.sunrise),
        sunset=_optional(times.sunset),
        sunrise_text=to_time_string(times.sunrise),
        sunset_text=to_time_string(times.sunset),
    )
