# ABOUTME: JSON-file key-value store for the last selected city and the saved-city list.
# ABOUTME: Mirrors browser localStorage semantics: read at startup, rewritten on every change.

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from src.models import SavedCity

logger = logging.getLogger(__name__)

LAST_CITY_KEY = "weather_last_city"
SAVED_CITIES_KEY = "weather_saved_cities"

DEFAULT_CITIES = (
    SavedCity(id="1", name="北京", temp=0, condition="加载中"),
    SavedCity(id="2", name="上海", temp=0, condition="加载中"),
)


class CityStore:
    """Persists dashboard state as a flat JSON object on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.exception("Could not read city store at %s, starting empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, key: str, value) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write beside the target and swap in, so readers never see a half-written file.
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise

    def get_last_city(self) -> str | None:
        value = self._read().get(LAST_CITY_KEY)
        return value if isinstance(value, str) and value else None

    def set_last_city(self, name: str) -> None:
        self._write(LAST_CITY_KEY, name)

    def load_saved_cities(self) -> list[SavedCity]:
        """Return the saved cities, or the defaults when nothing valid is stored."""
        raw = self._read().get(SAVED_CITIES_KEY)
        if not raw:
            return list(DEFAULT_CITIES)
        try:
            return [SavedCity.model_validate(item) for item in raw]
        except (ValidationError, TypeError):
            logger.warning("Ignoring malformed saved-city list in %s", self.path)
            return list(DEFAULT_CITIES)

    def save_saved_cities(self, cities: list[SavedCity]) -> None:
        self._write(SAVED_CITIES_KEY, [city.model_dump() for city in cities])
