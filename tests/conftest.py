# ABOUTME: Shared test fixtures for the weather dashboard test suite.
# ABOUTME: Provides fixed geocoding and forecast payloads plus a fixed clock for deterministic transforms.

import copy
from datetime import datetime, timezone

import pytest

# 2025-01-15 02:30 UTC is 10:30 in Asia/Shanghai (UTC+8).
FIXED_NOW = datetime(2025, 1, 15, 2, 30, tzinfo=timezone.utc)

GEOCODE_BEIJING = {
    "results": [
        {
            "id": 1816670,
            "name": "北京",
            "latitude": 39.9075,
            "longitude": 116.39723,
            "country": "中国",
            "admin1": "北京市",
            "timezone": "Asia/Shanghai",
        }
    ]
}


def _hourly_times() -> list[str]:
    return [f"2025-01-{15 + h // 24:02d}T{h % 24:02d}:00" for h in range(48)]


FORECAST_PAYLOAD = {
    "latitude": 39.9,
    "longitude": 116.4,
    "timezone": "Asia/Shanghai",
    "utc_offset_seconds": 28800,
    "current": {
        "time": "2025-01-15T10:30",
        "temperature_2m": 3.5,
        "relative_humidity_2m": 41,
        "apparent_temperature": -1.5,
        "weather_code": 2,
        "surface_pressure": 1021.6,
        "wind_speed_10m": 7.5,
        "visibility": 24140.0,
    },
    "hourly": {
        "time": _hourly_times(),
        "temperature_2m": [float(h % 24) + 0.5 for h in range(48)],
        "weather_code": [0] * 24 + [61] * 24,
        "wind_speed_10m": [2.0] * 24 + [9.0] * 24,
    },
    "daily": {
        "time": ["2025-01-15", "2025-01-16", "2025-01-17"],
        "weather_code": [0, 61, 95],
        "temperature_2m_max": [8.4, 6.5, 3.2],
        "temperature_2m_min": [-2.6, -0.5, -4.5],
        "sunrise": ["2025-01-15T07:36", "2025-01-16T07:36", "2025-01-17T07:35"],
        "sunset": ["2025-01-15T17:12", "2025-01-16T17:13", "2025-01-17T17:14"],
        "uv_index_max": [2.35, 1.5, 0.4],
        "wind_speed_10m_max": [4.0, 11.0, 15.0],
    },
}


@pytest.fixture
def geocode_payload() -> dict:
    return copy.deepcopy(GEOCODE_BEIJING)


@pytest.fixture
def forecast_payload() -> dict:
    return copy.deepcopy(FORECAST_PAYLOAD)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
