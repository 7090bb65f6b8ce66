# ABOUTME: Contract tests for Pydantic models used in weather data parsing and display.
# ABOUTME: Validates raw payload validation, optional fields, and immutability of display models.

from typing import get_args

import pytest
from pydantic import ValidationError

from src.models import (
    Condition,
    ForecastPayload,
    HourlyPoint,
    HourlySeries,
    SavedCity,
    SearchResult,
    WeatherSnapshot,
)
from src.weather_codes import CONDITIONS
from src.weather_service import normalize_forecast


class TestSearchResult:
    def test_optional_fields_default_to_none(self):
        """SearchResult only requires id, name, and coordinates.

        Implementation: Constructs a SearchResult without country or admin1.
        Passing implies: Optional region fields default to None.
        """
        result = SearchResult(id=1, name="Test", latitude=0.0, longitude=0.0)
        assert result.country is None
        assert result.admin1 is None

    def test_ignores_extra_geocoding_fields(self):
        """SearchResult drops fields it does not model.

        Implementation: Validates a raw geocoding entry that carries timezone and population.
        Passing implies: Upstream additions do not break parsing.
        """
        result = SearchResult.model_validate(
            {"id": 5, "name": "上海", "latitude": 31.2, "longitude": 121.5, "timezone": "Asia/Shanghai", "population": 1}
        )
        assert result.name == "上海"
        assert not hasattr(result, "timezone")

    def test_is_frozen(self):
        """SearchResult cannot be mutated after creation.

        Implementation: Attempts to reassign name.
        Passing implies: Results are immutable once returned.
        """
        result = SearchResult(id=1, name="Test", latitude=0.0, longitude=0.0)
        with pytest.raises(ValidationError):
            result.name = "Other"


class TestHourlySeries:
    def test_rejects_misaligned_columns(self):
        """HourlySeries requires every column to match the time column length.

        Implementation: Provides one time entry and two temperatures.
        Passing implies: Parallel arrays are checked before indexing.
        """
        with pytest.raises(ValidationError):
            HourlySeries(time=["2025-01-15T00:00"], temperature_2m=[1.0, 2.0], weather_code=[0], wind_speed_10m=[1.0])

    def test_rejects_empty_series(self):
        """HourlySeries rejects an empty time column.

        Implementation: Constructs a series with no entries.
        Passing implies: Successful payloads always yield hourly points.
        """
        with pytest.raises(ValidationError):
            HourlySeries(time=[], temperature_2m=[], weather_code=[], wind_speed_10m=[])


class TestForecastPayload:
    def test_parses_shared_payload(self, forecast_payload):
        """ForecastPayload accepts a complete Open-Meteo response.

        Implementation: Validates the shared fixture payload.
        Passing implies: All required fields are present in the fixture.
        """
        payload = ForecastPayload.model_validate(forecast_payload)
        assert payload.utc_offset_seconds == 28800
        assert payload.current.wind_speed_10m == 7.5
        assert len(payload.hourly.time) == 48
        assert len(payload.daily.time) == 3

    def test_utc_offset_defaults_to_zero(self, forecast_payload):
        """utc_offset_seconds is optional.

        Implementation: Removes the offset from the payload.
        Passing implies: Payloads without it are treated as UTC.
        """
        del forecast_payload["utc_offset_seconds"]
        assert ForecastPayload.model_validate(forecast_payload).utc_offset_seconds == 0

    def test_null_current_value_is_rejected(self, forecast_payload):
        """A null in a required current field fails validation.

        Implementation: Sets current.temperature_2m to None.
        Passing implies: Missing values are never silently rounded.
        """
        forecast_payload["current"]["temperature_2m"] = None
        with pytest.raises(ValidationError):
            ForecastPayload.model_validate(forecast_payload)


class TestDisplayModels:
    def test_icon_is_closed_enumeration(self):
        """HourlyPoint only accepts known icon keys.

        Implementation: Constructs a point with icon 'snow'.
        Passing implies: Unknown icons cannot enter a snapshot.
        """
        with pytest.raises(ValidationError):
            HourlyPoint(time="10:00", temp=1, icon="snow", wind_speed=1)

    def test_saved_city_defaults(self):
        """SavedCity defaults to a loading placeholder summary.

        Implementation: Constructs a SavedCity with only id and name.
        Passing implies: New cities render before their first refresh.
        """
        city = SavedCity(id="1", name="北京")
        assert city.temp == 0
        assert city.condition == "加载中"

    def test_condition_is_closed_enumeration(self, forecast_payload, fixed_clock):
        """WeatherSnapshot only accepts the mapped condition labels.

        Implementation: Copies a valid snapshot's fields with an unmapped label.
        Passing implies: Conditions outside the weather-code table cannot enter a snapshot.
        """
        fields = normalize_forecast("上海", forecast_payload, clock=fixed_clock).model_dump()
        fields["condition"] = "沙尘暴"
        with pytest.raises(ValidationError):
            WeatherSnapshot(**fields)

    def test_condition_literal_matches_code_table(self):
        """The Condition literal lists exactly the labels the code table produces.

        Implementation: Compares the literal's arguments with CONDITIONS.
        Passing implies: The model and the mapping table cannot drift apart.
        """
        assert set(get_args(Condition)) == CONDITIONS
