# ABOUTME: Typed exceptions raised by the geocoding and forecast service layer.
# ABOUTME: Callers catch these to decide between an error banner, a retry button, or a sentinel value.


class WeatherError(Exception):
    """Base class for all weather service failures."""


class ConfigError(WeatherError):
    """Raised when environment configuration is invalid."""


class NotFound(WeatherError):
    """Raised when geocoding returns no candidates for a city name."""

    def __init__(self, query: str) -> None:
        super().__init__(f"City not found: {query}")
        self.query = query


class UpstreamError(WeatherError):
    """Raised on transport failure or a non-success HTTP status from Open-Meteo."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(WeatherError):
    """Raised when a successful response does not have the expected shape."""
