# ABOUTME: Pydantic BaseModels for raw Open-Meteo payloads and the normalized dashboard schema.
# ABOUTME: Raw models validate upstream shape; snapshot models are frozen display-ready structures.

from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

IconKey = Literal["sun", "cloud", "rain", "drizzle"]
Condition = Literal[
    "晴朗", "多云", "阴天", "雾", "小雨", "中雨", "大雨", "雨夹雪",
    "小雪", "中雪", "大雪", "阵雨", "暴雨", "阵雪", "雷雨", "雷雨伴冰雹",
]


class SearchResult(BaseModel):
    """Candidate location returned by the geocoding API."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    latitude: float
    longitude: float
    country: str | None = None
    admin1: str | None = None


class CurrentConditions(BaseModel):
    """The `current` block of an Open-Meteo forecast response."""

    temperature_2m: float
    relative_humidity_2m: float
    apparent_temperature: float
    weather_code: int
    surface_pressure: float
    wind_speed_10m: float
    visibility: float


class HourlySeries(BaseModel):
    """Column-oriented `hourly` block of an Open-Meteo forecast response."""

    time: list[str]
    temperature_2m: list[float]
    weather_code: list[int]
    wind_speed_10m: list[float]

    @model_validator(mode="after")
    def _columns_align(self):
        if not self.time:
            raise ValueError("hourly series is empty")
        for name in ("temperature_2m", "weather_code", "wind_speed_10m"):
            if len(getattr(self, name)) != len(self.time):
                raise ValueError(f"hourly.{name} length does not match hourly.time")
        return self


class DailySeries(BaseModel):
    """Column-oriented `daily` block of an Open-Meteo forecast response."""

    time: list[str]
    weather_code: list[int]
    temperature_2m_max: list[float]
    temperature_2m_min: list[float]
    sunrise: list[str]
    sunset: list[str]
    uv_index_max: list[float]
    wind_speed_10m_max: list[float]

    @model_validator(mode="after")
    def _columns_align(self):
        if not self.time:
            raise ValueError("daily series is empty")
        for name in (
            "weather_code",
            "temperature_2m_max",
            "temperature_2m_min",
            "sunrise",
            "sunset",
            "uv_index_max",
            "wind_speed_10m_max",
        ):
            if len(getattr(self, name)) != len(self.time):
                raise ValueError(f"daily.{name} length does not match daily.time")
        return self


class ForecastPayload(BaseModel):
    """Parsed response from the Open-Meteo forecast endpoint."""

    utc_offset_seconds: int = 0
    current: CurrentConditions
    hourly: HourlySeries
    daily: DailySeries


class HourlyPoint(BaseModel):
    """One hour of the display-ready hourly forecast."""

    model_config = ConfigDict(frozen=True)

    time: str
    temp: int
    icon: IconKey
    wind_speed: int


class DailyPoint(BaseModel):
    """One day of the display-ready daily forecast."""

    model_config = ConfigDict(frozen=True)

    day: str
    icon: IconKey
    low: int
    high: int
    wind_speed: int


class WeatherSnapshot(BaseModel):
    """Normalized forecast for one location at one fetch."""

    model_config = ConfigDict(frozen=True)

    location: str
    temp: int
    condition: Condition
    high: int
    low: int
    humidity: int
    wind_speed: int
    pressure: int
    visibility: int
    uv_index: int
    feels_like: int
    sunrise: str
    sunset: str
    hourly: tuple[HourlyPoint, ...]
    daily: tuple[DailyPoint, ...]
    is_mock: bool = False


class CurrentSummary(BaseModel):
    """Lightweight temperature and condition pair for the saved-city list."""

    model_config = ConfigDict(frozen=True)

    temp: int
    condition: str


class SavedCity(BaseModel):
    """A city in the saved list with its last known summary."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    temp: int = 0
    condition: str = "加载中"
