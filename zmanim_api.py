"""FastAPI application exposing halachic day-time computations."""

from __future__ import annotations

import json
import logging
import os
import time
from typing import List, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from models import (
    ChabadResponse,
    ChabadTimes,
    ErrorResponse,
    GraTimes,
    HealthResponse,
    ShabbatResponse,
    TimezoneResponse,
    ZmanimQueryParams,
    ZmanimResponse,
)
from zmanim.engine import LocationConfig, compute_chabad, compute_zmanim
from zmanim.timezone import (
    TIMEZONE_REGIONS,
    TimezoneInfo,
    UnresolvableTimezoneError,
    default_candle_minutes,
    resolve_timezone,
)

logging.basicConfig(level=logging.INFO, format="%(message)s")
LOGGER = logging.getLogger("zmanim-api")

APP_DESCRIPTION = (
    "Halachic day times (GRA and Alter Rebbe) from a Meeus solar ephemeris"
)


def _cors_origins() -> List[str]:
    raw = os.environ.get("ZMANIM_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


app = FastAPI(
    title="Zmanim API",
    description=APP_DESCRIPTION,
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class UnresolvableTimezoneHTTPError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=400, detail=detail)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(ValidationError)
async def model_validation_exception_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(UnresolvableTimezoneHTTPError)
async def timezone_exception_handler(
    request: Request, exc: UnresolvableTimezoneHTTPError
) -> JSONResponse:
    return _error_response(exc.status_code, "unresolvable_timezone", str(exc.detail))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


def _location(params: ZmanimQueryParams) -> Tuple[LocationConfig, Optional[TimezoneInfo]]:
    """Build the location config, resolving the timezone unless an offset is given."""

    tz: Optional[TimezoneInfo] = None
    try:
        if params.offset_hours is not None:
            offset, dst = params.offset_hours, params.dst
        else:
            tz = resolve_timezone(
                params.lat, params.lon, params.date_local, params.timezone_name
            )
            offset, dst = tz.offset, tz.dst
        candle_minutes = params.candle_minutes
        if candle_minutes is None:
            candle_minutes = default_candle_minutes(params.lat, params.lon)
        config = LocationConfig(
            latitude=params.lat,
            longitude=params.lon,
            utc_offset=offset,
            dst=dst,
            elevation=params.elevation,
            candle_minutes=candle_minutes,
            tefillin_deg=params.tefillin_deg,
        )
    except UnresolvableTimezoneError as exc:
        raise UnresolvableTimezoneHTTPError(str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return config, tz


def _timezone_response(config: LocationConfig, tz: Optional[TimezoneInfo]) -> TimezoneResponse:
    if tz is None:
        return TimezoneResponse(offset_hours=config.utc_offset, dst=config.dst)
    return TimezoneResponse(
        name=tz.name, offset_hours=tz.offset, dst=tz.dst, dst_label=tz.dst_label
    )


def _log_request(event: str, params: ZmanimQueryParams, start_time: float) -> None:
    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps(
            {
                "event": event,
                "lat": params.lat,
                "lon": params.lon,
                "date": params.date_local.isoformat(),
                "elevation": params.elevation,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, timezone_regions=len(TIMEZONE_REGIONS))


@app.get(
    "/zmanim",
    response_model=ZmanimResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def zmanim_endpoint(params: ZmanimQueryParams = Depends()) -> ZmanimResponse:
    start_time = time.perf_counter()
    config, tz = _location(params)
    result = compute_zmanim(config, params.date_local, timezone=tz)
    shabbat = result.shabbat

    response = ZmanimResponse(
        date_local=params.date_local,
        latitude=params.lat,
        longitude=params.lon,
        elevation_m=params.elevation,
        timezone=_timezone_response(config, tz),
        times=GraTimes(**result.gra.formatted()),
        shabbat=ShabbatResponse(
            friday=shabbat.friday,
            saturday=shabbat.saturday,
            shabbat_start_unix=shabbat.candle_lighting_timestamp,
            shabbat_ends_unix=shabbat.shabbat_ends_timestamp,
            **shabbat.formatted(),
        ),
    )
    _log_request("zmanim", params, start_time)
    return response


@app.get(
    "/zmanim/chabad",
    response_model=ChabadResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def chabad_endpoint(params: ZmanimQueryParams = Depends()) -> ChabadResponse:
    start_time = time.perf_counter()
    config, tz = _location(params)
    chabad = compute_chabad(config, params.date_local)

    response = ChabadResponse(
        date_local=params.date_local,
        latitude=params.lat,
        longitude=params.lon,
        elevation_m=params.elevation,
        timezone=_timezone_response(config, tz),
        times=ChabadTimes(**chabad.formatted()),
    )
    _log_request("zmanim_chabad", params, start_time)
    return response
