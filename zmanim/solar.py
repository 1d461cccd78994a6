"""Low-precision solar ephemeris for sunrise, sunset and twilight times."""

from __future__ import annotations

import json
import logging
import math
from typing import NamedTuple, Optional

__all__ = [
    "SunTimes",
    "julian_day",
    "julian_century",
    "solar_declination",
    "equation_of_time",
    "hour_angle",
    "elevation_dip",
    "pressure_at_elevation",
    "sunrise_zenith",
    "elevated_zenith",
    "calc_sun_times",
]

LOGGER = logging.getLogger(__name__)

J2000 = 2451545.0
DAYS_PER_CENTURY = 36525.0

EARTH_RADIUS_M = 6371000.0  # Mean spherical radius.
SEA_LEVEL_PRESSURE_HPA = 1013.25
SOLAR_SEMI_DIAMETER = 16.0 / 60.0
SEA_LEVEL_REFRACTION = 34.0 / 60.0
GEOMETRIC_ZENITH = 90.0 + 50.0 / 60.0

# cos(lat) * cos(dec) below this means the hour angle is undefined.
_DEGENERATE_DENOMINATOR = 1e-12


class SunTimes(NamedTuple):
    """Sunrise and sunset in decimal local hours; NaN when the sun never crosses."""

    sunrise: float
    sunset: float


def _normalize_degrees(angle: float) -> float:
    return angle % 360.0


def julian_day(year: int, month: int, day: int) -> float:
    """Return the Julian Day at 0h UT of a Gregorian calendar date (Meeus 7.1)."""

    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    return (
        math.floor(365.25 * (year + 4716))
        + math.floor(30.6001 * (month + 1))
        + day
        + b
        - 1524.5
    )


def julian_century(jd: float) -> float:
    """Julian centuries elapsed since J2000.0."""

    return (jd - J2000) / DAYS_PER_CENTURY


def _sun_mean_longitude(t: float) -> float:
    return _normalize_degrees(280.46646 + t * (36000.76983 + t * 0.0003032))


def _sun_mean_anomaly(t: float) -> float:
    return _normalize_degrees(357.52911 + t * (35999.05029 - t * 0.0001537))


def _earth_orbit_eccentricity(t: float) -> float:
    return 0.016708634 - t * (0.000042037 + t * 0.0000001267)


def _sun_equation_of_center(t: float) -> float:
    m = math.radians(_sun_mean_anomaly(t))
    return (
        math.sin(m) * (1.914602 - t * (0.004817 + t * 0.000014))
        + math.sin(2 * m) * (0.019993 - t * 0.000101)
        + math.sin(3 * m) * 0.000289
    )


def _omega(t: float) -> float:
    return 125.04 - 1934.136 * t


def _sun_apparent_longitude(t: float) -> float:
    true_longitude = _sun_mean_longitude(t) + _sun_equation_of_center(t)
    return _normalize_degrees(
        true_longitude - 0.00569 - 0.00478 * math.sin(math.radians(_omega(t)))
    )


def _obliquity_correction(t: float) -> float:
    seconds = 21.448 - t * (46.815 + t * (0.00059 - t * 0.001813))
    mean_obliquity = 23.0 + (26.0 + seconds / 60.0) / 60.0
    return mean_obliquity + 0.00256 * math.cos(math.radians(_omega(t)))


def solar_declination(t: float) -> float:
    """Apparent solar declination in degrees at Julian century *t*."""

    return math.degrees(
        math.asin(
            math.sin(math.radians(_obliquity_correction(t)))
            * math.sin(math.radians(_sun_apparent_longitude(t)))
        )
    )


def equation_of_time(t: float) -> float:
    """Apparent minus mean solar time, in minutes."""

    obliquity = math.radians(_obliquity_correction(t))
    l0 = math.radians(_sun_mean_longitude(t))
    e = _earth_orbit_eccentricity(t)
    m = math.radians(_sun_mean_anomaly(t))
    y = math.tan(obliquity / 2) ** 2
    eot = (
        y * math.sin(2 * l0)
        - 2 * e * math.sin(m)
        + 4 * e * y * math.sin(m) * math.cos(2 * l0)
        - 0.5 * y * y * math.sin(4 * l0)
        - 1.25 * e * e * math.sin(2 * m)
    )
    return 4.0 * math.degrees(eot)


def hour_angle(lat: float, dec: float, zenith: float) -> Optional[float]:
    """Solve the hour angle (degrees) at which the sun's centre reaches *zenith*.

    Parameters
    ----------
    lat:
        Observer latitude in degrees.
    dec:
        Solar declination in degrees.
    zenith:
        Zenith angle of the event in degrees.

    Returns
    -------
    float or None
        Hour angle in ``[0, 180]`` degrees, or ``None`` when the sun never
        reaches *zenith* (``|cos H| > 1``) or the geometry is degenerate
        (observer at a pole).
    """

    lat_rad = math.radians(lat)
    dec_rad = math.radians(dec)
    denominator = math.cos(lat_rad) * math.cos(dec_rad)
    if abs(denominator) < _DEGENERATE_DENOMINATOR:
        return None
    cos_ha = (
        math.cos(math.radians(zenith)) - math.sin(lat_rad) * math.sin(dec_rad)
    ) / denominator
    if abs(cos_ha) > 1.0:
        return None
    return math.degrees(math.acos(cos_ha))


def elevation_dip(elev_m: float) -> float:
    """Depression of the sea-level horizon seen from *elev_m* metres, in degrees."""

    if elev_m <= 0:
        return 0.0
    return math.degrees(math.acos(EARTH_RADIUS_M / (EARTH_RADIUS_M + elev_m)))


def pressure_at_elevation(elev_m: float) -> float:
    """Standard-atmosphere pressure in hPa at *elev_m* metres.

    The model reaches zero near 44.3 km; higher elevations return 0.
    """

    base = max(0.0, 1.0 - 2.25577e-5 * elev_m)
    return SEA_LEVEL_PRESSURE_HPA * base ** 5.25588


def sunrise_zenith(elev_m: float) -> float:
    """Zenith of visible sunrise/sunset with refraction scaled for altitude.

    At sea level this is 90 degrees plus the solar semi-diameter (16') and the
    standard refraction (34'), i.e. 90°50'. Above sea level the refraction term
    shrinks with the local-to-sea-level pressure ratio.
    """

    if elev_m <= 0:
        return 90.0 + SOLAR_SEMI_DIAMETER + SEA_LEVEL_REFRACTION
    pressure_ratio = pressure_at_elevation(elev_m) / SEA_LEVEL_PRESSURE_HPA
    return 90.0 + SOLAR_SEMI_DIAMETER + SEA_LEVEL_REFRACTION * pressure_ratio


def elevated_zenith(elev_m: float) -> float:
    """Zenith for an observer at *elev_m* looking at a sea-level horizon."""

    return GEOMETRIC_ZENITH + elevation_dip(elev_m)


def _solar_noon_minutes(lon: float, eot: float, tz: float) -> float:
    return 720.0 - 4.0 * lon - eot + tz * 60.0


def _event_parameters(jd: float, ut_hours: float) -> tuple[float, float]:
    t = julian_century(jd + ut_hours / 24.0)
    return equation_of_time(t), solar_declination(t)


def calc_sun_times(
    year: int,
    month: int,
    day: int,
    lat: float,
    lon: float,
    tz: float,
    zenith: float,
) -> SunTimes:
    """Compute rise and set of the sun's centre across *zenith* for one date.

    Parameters
    ----------
    year, month, day:
        Civil date.
    lat, lon:
        Geographic coordinates in degrees (east-positive longitude).
    tz:
        UTC offset in hours in effect on that date.
    zenith:
        Zenith angle in degrees.

    Returns
    -------
    SunTimes
        Decimal local hours. Both fields are NaN when the sun never reaches
        *zenith* around local noon.

    Notes
    -----
    The first pass evaluates the equation of time and declination at
    approximate local noon. The second re-evaluates them at the UTC instant of
    each coarse event; an event whose refined hour angle has no solution keeps
    its first-pass estimate.
    """

    jd = julian_day(year, month, day)

    noon_ut = 12.0 - tz - lon / 15.0
    eot0, dec0 = _event_parameters(jd, noon_ut)
    ha0 = hour_angle(lat, dec0, zenith)
    if ha0 is None:
        LOGGER.debug(
            json.dumps(
                {
                    "event": "sun_times_no_solution",
                    "date": f"{year:04d}-{month:02d}-{day:02d}",
                    "lat": lat,
                    "zenith": zenith,
                }
            )
        )
        return SunTimes(math.nan, math.nan)
    noon0 = _solar_noon_minutes(lon, eot0, tz)
    rise0 = (noon0 - 4.0 * ha0) / 60.0
    set0 = (noon0 + 4.0 * ha0) / 60.0

    eot_rise, dec_rise = _event_parameters(jd, rise0 - tz)
    ha_rise = hour_angle(lat, dec_rise, zenith)
    eot_set, dec_set = _event_parameters(jd, set0 - tz)
    ha_set = hour_angle(lat, dec_set, zenith)

    if ha_rise is None:
        sunrise = rise0
    else:
        sunrise = (_solar_noon_minutes(lon, eot_rise, tz) - 4.0 * ha_rise) / 60.0
    if ha_set is None:
        sunset = set0
    else:
        sunset = (_solar_noon_minutes(lon, eot_set, tz) + 4.0 * ha_set) / 60.0

    if ha_rise is None or ha_set is None:
        LOGGER.debug(
            json.dumps(
                {
                    "event": "sun_times_refinement_fallback",
                    "date": f"{year:04d}-{month:02d}-{day:02d}",
                    "lat": lat,
                    "zenith": zenith,
                    "sunrise_refined": ha_rise is not None,
                    "sunset_refined": ha_set is not None,
                }
            )
        )
    return SunTimes(sunrise, sunset)
