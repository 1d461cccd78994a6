"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ZmanimQueryParams(BaseModel):
    """Validated query parameters for the ``/zmanim`` endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    date_local: date = Field(..., alias="date", description="Civil date (YYYY-MM-DD)")
    elevation: float = Field(
        0.0, ge=0.0, le=9000.0, description="Observer elevation in meters"
    )
    timezone_name: Optional[str] = Field(
        None, description="IANA timezone; resolved from coordinates when omitted"
    )
    offset_hours: Optional[float] = Field(
        None, description="Explicit UTC offset in hours; skips timezone resolution"
    )
    dst: bool = Field(False, description="DST flag reported with an explicit offset")
    candle_minutes: Optional[float] = Field(
        None, ge=0.0, le=120.0, description="Candle lighting minutes before sunset"
    )
    tefillin_deg: Optional[float] = Field(
        None, gt=0.0, lt=20.0, description="Solar depression for misheyakir in degrees"
    )

    @field_validator("offset_hours")
    def validate_offset_hours(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return value
        if not -14.0 <= value <= 14.0:
            raise ValueError("offset_hours must be within ±14 hours")
        return value


class TimezoneResponse(BaseModel):
    name: Optional[str] = Field(None, description="IANA timezone name")
    offset_hours: float = Field(..., description="UTC offset applied to all times")
    dst: bool = Field(..., description="Whether daylight-saving time is in effect")
    dst_label: Optional[str] = Field(None, description="Human-readable DST label")


class GraTimes(BaseModel):
    """GRA day times as ``H:MM:SS`` strings; ``None`` when the sun never gets there."""

    alos_hashachar: Optional[str] = None
    misheyakir: Optional[str] = None
    sunrise: Optional[str] = None
    sof_zman_shema: Optional[str] = None
    sof_zman_tefila: Optional[str] = None
    chatzot: Optional[str] = None
    mincha_gedola: Optional[str] = None
    mincha_gedola_gra: Optional[str] = None
    mincha_ketana: Optional[str] = None
    plag_hamincha: Optional[str] = None
    sunset: Optional[str] = None
    tzeis: Optional[str] = None


class ShabbatResponse(BaseModel):
    friday: date
    saturday: date
    candle_lighting: Optional[str] = None
    shabbat_ends: Optional[str] = None
    shabbat_start_unix: Optional[int] = Field(
        None, description="Candle lighting as seconds since the epoch"
    )
    shabbat_ends_unix: Optional[int] = Field(
        None, description="Shabbat end as seconds since the epoch"
    )


class ZmanimResponse(BaseModel):
    """Successful GRA day-times payload."""

    ok: bool = True
    date_local: date = Field(..., description="Requested civil date")
    latitude: float
    longitude: float
    elevation_m: float
    timezone: TimezoneResponse
    times: GraTimes
    shabbat: ShabbatResponse


class ChabadTimes(BaseModel):
    alos72: Optional[str] = None
    misheyakir: Optional[str] = None
    netz_hachama: Optional[str] = None
    sof_zman_shema_gra: Optional[str] = None
    sof_zman_shema_ar: Optional[str] = None
    sof_zman_tefila_gra: Optional[str] = None
    sof_zman_tefila_ar: Optional[str] = None
    chatzot: Optional[str] = None
    mincha_gedola: Optional[str] = None
    mincha_ketana: Optional[str] = None
    plag_hamincha: Optional[str] = None
    shkiah: Optional[str] = None
    tzeis: Optional[str] = None
    tzeis_rabbeinu_tam: Optional[str] = None
    chatzot_layla: Optional[str] = None


class ChabadResponse(BaseModel):
    """Successful Alter Rebbe day-times payload."""

    ok: bool = True
    date_local: date
    latitude: float
    longitude: float
    elevation_m: float
    timezone: TimezoneResponse
    times: ChabadTimes


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    timezone_regions: int


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
