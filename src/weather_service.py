# ABOUTME: Service layer for Open-Meteo API calls and response normalization.
# ABOUTME: Handles city search, geocoding, forecast fetch, and the transform into WeatherSnapshot.

import logging
import math
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from statistics import fmean

import httpx
from pydantic import ValidationError

from src.errors import MalformedResponse, NotFound, UpstreamError, WeatherError
from src.models import (
    CurrentSummary,
    DailyPoint,
    DailySeries,
    ForecastPayload,
    HourlyPoint,
    HourlySeries,
    SearchResult,
    WeatherSnapshot,
)
from src.weather_codes import beaufort, code_to_condition, code_to_icon

logger = logging.getLogger(__name__)

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

CURRENT_PARAMS = (
    "temperature_2m,relative_humidity_2m,apparent_temperature,weather_code,"
    "surface_pressure,wind_speed_10m,visibility"
)
HOURLY_PARAMS = "temperature_2m,weather_code,wind_speed_10m"
DAILY_PARAMS = "weather_code,temperature_2m_max,temperature_2m_min,sunrise,sunset,uv_index_max,wind_speed_10m_max"

FORECAST_DAYS = 16
DAILY_LIMIT = 15
HOURLY_WINDOW = 12
HOURS_PER_DAY = 24
MIN_QUERY_LENGTH = 2

TODAY_LABEL = "今天"
WEEKDAY_LABELS = ("周一", "周二", "周三", "周四", "周五", "周六", "周日")

UNKNOWN_SUMMARY = CurrentSummary(temp=0, condition="未知")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def _get_json(client: httpx.AsyncClient, url: str, params: dict) -> dict:
    """GET a JSON object, translating transport and status failures into UpstreamError."""
    try:
        resp = await client.get(url, params=params)
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        raise UpstreamError(f"{url} returned HTTP {status}", status_code=status) from e
    except httpx.HTTPError as e:
        raise UpstreamError(f"Request to {url} failed: {e}") from e

    try:
        data = resp.json()
    except ValueError as e:
        raise MalformedResponse(f"{url} returned a non-JSON body") from e
    if not isinstance(data, dict):
        raise MalformedResponse(f"{url} returned {type(data).__name__}, expected an object")
    return data


async def search(
    client: httpx.AsyncClient,
    query: str,
    max_results: int = 5,
    language: str = "zh",
) -> list[SearchResult]:
    """Search the Open-Meteo geocoding API for cities matching a free-text name.

    Queries shorter than two characters return an empty list without a request.
    Results keep the upstream relevance order.
    """
    query = query.strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    data = await _get_json(
        client,
        GEOCODING_URL,
        params={"name": query, "count": max_results, "language": language, "format": "json"},
    )
    results = data.get("results") or []
    try:
        return [SearchResult.model_validate(r) for r in results[:max_results]]
    except ValidationError as e:
        raise MalformedResponse(f"Unexpected geocoding result shape for '{query}': {e}") from e


async def resolve_one(client: httpx.AsyncClient, name: str, language: str = "zh") -> SearchResult:
    """Return the best geocoding match for a city name, or raise NotFound."""
    results = await search(client, name, max_results=1, language=language)
    if not results:
        raise NotFound(name)
    return results[0]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, like JavaScript Math.round."""
    return math.floor(value + 0.5)


def format_local_time(iso_string: str) -> str:
    """Format an Open-Meteo local timestamp as zero-padded 24-hour HH:MM."""
    return datetime.fromisoformat(iso_string).strftime("%H:%M")


def day_label(index: int, day: date) -> str:
    if index == 0:
        return TODAY_LABEL
    return WEEKDAY_LABELS[day.weekday()]


def local_now(clock: Clock, utc_offset_seconds: int) -> datetime:
    """Current wall time at the forecast location, as a naive datetime.

    Naive clock values are taken to already be location-local.
    """
    now = clock()
    if now.tzinfo is None:
        return now
    return (now.astimezone(timezone.utc) + timedelta(seconds=utc_offset_seconds)).replace(tzinfo=None)


def current_hour_index(times: list[datetime], now: datetime) -> int:
    """Index of the hourly entry that represents "now".

    The first entry at or after now is located; unless it is exactly now, the
    previous (just-elapsed) hour is used instead. Falls back to 0 when every
    entry is in the past.
    """
    for i, t in enumerate(times):
        if t >= now:
            if t == now or i == 0:
                return i
            return i - 1
    return 0


def transform_hourly(hourly: HourlySeries, now: datetime, hours: int = HOURLY_WINDOW) -> tuple[HourlyPoint, ...]:
    """Slice a window of `hours` entries starting at the current hour."""
    times = [datetime.fromisoformat(t) for t in hourly.time]
    start = current_hour_index(times, now)
    return tuple(
        HourlyPoint(
            time=times[i].strftime("%H:%M"),
            temp=round_half_up(hourly.temperature_2m[i]),
            icon=code_to_icon(hourly.weather_code[i]),
            wind_speed=beaufort(hourly.wind_speed_10m[i]),
        )
        for i in range(start, min(start + hours, len(times)))
    )


def transform_daily(daily: DailySeries, hourly: HourlySeries, limit: int = DAILY_LIMIT) -> tuple[DailyPoint, ...]:
    """Build up to `limit` day rows; wind is the mean of that day's hourly samples when present."""
    result = []
    for i, d in enumerate(daily.time[:limit]):
        samples = hourly.wind_speed_10m[i * HOURS_PER_DAY : (i + 1) * HOURS_PER_DAY]
        wind = fmean(samples) if samples else daily.wind_speed_10m_max[i]
        result.append(
            DailyPoint(
                day=day_label(i, date.fromisoformat(d)),
                icon=code_to_icon(daily.weather_code[i]),
                low=round_half_up(daily.temperature_2m_min[i]),
                high=round_half_up(daily.temperature_2m_max[i]),
                wind_speed=beaufort(wind),
            )
        )
    return tuple(result)


def normalize_forecast(
    display_name: str,
    raw: dict,
    *,
    clock: Clock = utc_now,
    hours: int = HOURLY_WINDOW,
) -> WeatherSnapshot:
    """Transform a raw Open-Meteo forecast payload into a WeatherSnapshot.

    Raises MalformedResponse if any expected field is missing or unparseable.
    """
    try:
        payload = ForecastPayload.model_validate(raw)
    except ValidationError as e:
        raise MalformedResponse(f"Unexpected forecast payload for '{display_name}': {e}") from e

    current, daily, hourly = payload.current, payload.daily, payload.hourly
    now = local_now(clock, payload.utc_offset_seconds)
    try:
        return WeatherSnapshot(
            location=display_name,
            temp=round_half_up(current.temperature_2m),
            condition=code_to_condition(current.weather_code),
            high=round_half_up(daily.temperature_2m_max[0]),
            low=round_half_up(daily.temperature_2m_min[0]),
            humidity=round_half_up(current.relative_humidity_2m),
            wind_speed=beaufort(current.wind_speed_10m),
            pressure=round_half_up(current.surface_pressure),
            visibility=round_half_up(current.visibility / 1000),
            uv_index=round_half_up(daily.uv_index_max[0]),
            feels_like=round_half_up(current.apparent_temperature),
            sunrise=format_local_time(daily.sunrise[0]),
            sunset=format_local_time(daily.sunset[0]),
            hourly=transform_hourly(hourly, now, hours),
            daily=transform_daily(daily, hourly),
        )
    except ValueError as e:
        raise MalformedResponse(f"Unparseable timestamp in forecast for '{display_name}': {e}") from e


async def fetch_by_coordinates(
    client: httpx.AsyncClient,
    latitude: float,
    longitude: float,
    display_name: str,
    *,
    clock: Clock = utc_now,
    hours: int = HOURLY_WINDOW,
) -> WeatherSnapshot:
    """Fetch current, hourly, and daily forecast for a coordinate pair and normalize it."""
    data = await _get_json(
        client,
        FORECAST_URL,
        params={
            "latitude": latitude,
            "longitude": longitude,
            "current": CURRENT_PARAMS,
            "hourly": HOURLY_PARAMS,
            "daily": DAILY_PARAMS,
            "timezone": "auto",
            "forecast_days": FORECAST_DAYS,
            "wind_speed_unit": "ms",
        },
    )
    return normalize_forecast(display_name, data, clock=clock, hours=hours)


async def fetch_by_city_name(
    client: httpx.AsyncClient,
    name: str,
    *,
    clock: Clock = utc_now,
    hours: int = HOURLY_WINDOW,
    language: str = "zh",
) -> WeatherSnapshot:
    """Geocode a city name, then fetch its forecast."""
    location = await resolve_one(client, name, language=language)
    return await fetch_by_coordinates(
        client, location.latitude, location.longitude, location.name, clock=clock, hours=hours
    )


async def fetch_current_summary(client: httpx.AsyncClient, name: str, language: str = "zh") -> CurrentSummary:
    """Best-effort current temperature and condition for a city.

    Never raises: any failure yields UNKNOWN_SUMMARY so one bad city cannot
    break a saved-list refresh.
    """
    try:
        snapshot = await fetch_by_city_name(client, name, language=language)
    except WeatherError as e:
        logger.warning("Summary fetch failed for %s: %s", name, e)
        return UNKNOWN_SUMMARY
    except Exception:
        logger.exception("Unexpected error fetching summary for %s", name)
        return UNKNOWN_SUMMARY
    return CurrentSummary(temp=snapshot.temp, condition=snapshot.condition)
