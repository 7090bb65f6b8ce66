# ABOUTME: Deterministic Open-Meteo shaped payload used when the upstream service is unreachable.
# ABOUTME: The payload is run through the real normalizer so mock snapshots obey the same schema.

from datetime import date, datetime, timedelta

from src.models import WeatherSnapshot
from src.weather_service import (
    FORECAST_DAYS,
    HOURLY_WINDOW,
    HOURS_PER_DAY,
    Clock,
    local_now,
    normalize_forecast,
    utc_now,
)

# One repeating weekly pattern of (weather_code, min, max, max_wind_ms).
_DAILY_PATTERN = (
    (0, 12.0, 24.0, 3.2),
    (2, 13.0, 22.5, 4.1),
    (3, 11.5, 19.0, 5.6),
    (61, 10.0, 16.0, 7.9),
    (80, 9.5, 17.5, 6.4),
    (1, 11.0, 21.0, 2.8),
    (45, 10.5, 18.0, 1.9),
)


def build_mock_payload(today: date) -> dict:
    """Return a forecast payload covering FORECAST_DAYS days starting at today."""
    days = [today + timedelta(days=i) for i in range(FORECAST_DAYS)]
    pattern = [_DAILY_PATTERN[i % len(_DAILY_PATTERN)] for i in range(FORECAST_DAYS)]

    hourly_time, hourly_temp, hourly_code, hourly_wind = [], [], [], []
    for day, (code, low, high, wind) in zip(days, pattern):
        start = datetime.combine(day, datetime.min.time())
        for hour in range(HOURS_PER_DAY):
            # Coldest at 04:00, warmest at 16:00.
            warmth = 1 - abs(hour - 16) / 12 if hour >= 4 else 0.0
            hourly_time.append((start + timedelta(hours=hour)).strftime("%Y-%m-%dT%H:%M"))
            hourly_temp.append(round(low + (high - low) * warmth, 1))
            hourly_code.append(code)
            hourly_wind.append(round(wind * (0.6 + 0.4 * (hour % 6) / 5), 1))

    return {
        "utc_offset_seconds": 0,
        "current": {
            "temperature_2m": 18.4,
            "relative_humidity_2m": 56,
            "apparent_temperature": 17.6,
            "weather_code": pattern[0][0],
            "surface_pressure": 1013.2,
            "wind_speed_10m": 3.1,
            "visibility": 24140.0,
        },
        "hourly": {
            "time": hourly_time,
            "temperature_2m": hourly_temp,
            "weather_code": hourly_code,
            "wind_speed_10m": hourly_wind,
        },
        "daily": {
            "time": [d.isoformat() for d in days],
            "weather_code": [p[0] for p in pattern],
            "temperature_2m_max": [p[2] for p in pattern],
            "temperature_2m_min": [p[1] for p in pattern],
            "sunrise": [f"{d.isoformat()}T06:12" for d in days],
            "sunset": [f"{d.isoformat()}T18:04" for d in days],
            "uv_index_max": [5.3 if p[0] < 3 else 2.1 for p in pattern],
            "wind_speed_10m_max": [p[3] for p in pattern],
        },
    }


def mock_snapshot(display_name: str, *, clock: Clock = utc_now, hours: int = HOURLY_WINDOW) -> WeatherSnapshot:
    """Build a mock WeatherSnapshot dated from the clock's current day."""
    today = local_now(clock, 0).date()
    snapshot = normalize_forecast(display_name, build_mock_payload(today), clock=clock, hours=hours)
    return snapshot.model_copy(update={"is_mock": True})
