# ABOUTME: Dashboard controller: selected city, load state machine, saved cities, and debounced search.
# ABOUTME: Guards against stale responses with a request token so a slow fetch never overwrites a newer city.

import asyncio
import logging
from enum import Enum
from uuid import uuid4

import httpx

from src.config import Settings
from src.errors import NotFound, UpstreamError, WeatherError
from src.mock_data import mock_snapshot
from src.models import SavedCity, SearchResult, WeatherSnapshot
from src.storage import CityStore
from src.weather_service import Clock, fetch_by_city_name, fetch_current_summary, search, utc_now

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "无法加载天气数据"


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


async def refresh_saved_cities(
    client: httpx.AsyncClient, cities: list[SavedCity], language: str = "zh"
) -> list[SavedCity]:
    """Refresh every saved city's summary concurrently.

    Uses the best-effort summary path, so a failing city comes back flagged
    with the 未知 sentinel instead of raising.
    """
    summaries = await asyncio.gather(*(fetch_current_summary(client, city.name, language) for city in cities))
    return [city.model_copy(update=summary.model_dump()) for city, summary in zip(cities, summaries)]


class Dashboard:
    """Holds what the dashboard shows and drives its loads.

    State transitions: idle -> loading -> ready | error, and back to loading on
    refetch or city change. A failed refetch of the same city keeps the last
    snapshot visible; a failed load of a different city clears it.
    """

    def __init__(self, client: httpx.AsyncClient, store: CityStore, settings: Settings, *, clock: Clock = utc_now):
        self._client = client
        self._store = store
        self._settings = settings
        self._clock = clock
        self._request_token = 0
        self._snapshot_city: str | None = None

        self.city = store.get_last_city() or settings.default_city
        self.state = LoadState.IDLE
        self.snapshot: WeatherSnapshot | None = None
        self.error: str | None = None
        self.saved_cities: list[SavedCity] = store.load_saved_cities()
        self.search_debouncer = SearchDebouncer(
            client, settings.debounce_seconds, settings.search_count, settings.language
        )

    async def search(self, query: str) -> list[SearchResult] | None:
        """Debounced autocomplete search.

        Returns None when a later query supersedes this one before the quiet period ends.
        """
        task = self.search_debouncer.submit(query)
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    async def start(self) -> None:
        """Load the last selected city and refresh the saved list together."""
        await asyncio.gather(self.refetch(), self.reload_saved_cities())

    async def select_city(self, name: str) -> WeatherSnapshot | None:
        name = name.strip()
        if not name:
            raise ValueError("City name must not be empty")
        self.city = name
        self._store.set_last_city(name)
        return await self._load(name)

    async def refetch(self) -> WeatherSnapshot | None:
        return await self._load(self.city)

    async def _load(self, name: str) -> WeatherSnapshot | None:
        self._request_token += 1
        token = self._request_token
        self.state = LoadState.LOADING
        self.error = None

        try:
            snapshot = await fetch_by_city_name(
                self._client,
                name,
                clock=self._clock,
                hours=self._settings.hourly_window,
                language=self._settings.language,
            )
        except WeatherError as e:
            if token != self._request_token:
                logger.info("Discarding stale failure for %s: %s", name, e)
                return None
            self._apply_failure(name, e)
            return self.snapshot

        if token != self._request_token:
            logger.info("Discarding stale forecast for %s", name)
            return None
        self._apply_snapshot(name, snapshot)
        return snapshot

    def _apply_snapshot(self, name: str, snapshot: WeatherSnapshot) -> None:
        self.snapshot = snapshot
        self._snapshot_city = name
        self.state = LoadState.READY
        self.error = None

    def _apply_failure(self, name: str, error: WeatherError) -> None:
        logger.warning("Weather load failed for %s: %s", name, error)
        if self._snapshot_city != name:
            self.snapshot = None
            self._snapshot_city = None

        if self.snapshot is None and self._settings.mock_fallback and isinstance(error, UpstreamError):
            logger.info("Serving mock forecast for %s", name)
            self._apply_snapshot(name, mock_snapshot(name, clock=self._clock, hours=self._settings.hourly_window))
            return

        self.state = LoadState.ERROR
        self.error = f"未找到城市: {error.query}" if isinstance(error, NotFound) else LOAD_ERROR_MESSAGE

    async def add_city(self, result: SearchResult) -> SavedCity:
        """Save a search result as a city and switch to it; existing names are returned unchanged."""
        for city in self.saved_cities:
            if city.name == result.name:
                return city

        summary = await fetch_current_summary(self._client, result.name, self._settings.language)
        # A concurrent add of the same name may have finished while the summary was in flight.
        for city in self.saved_cities:
            if city.name == result.name:
                return city
        city = SavedCity(id=uuid4().hex, name=result.name, **summary.model_dump())
        self.saved_cities = [*self.saved_cities, city]
        self._store.save_saved_cities(self.saved_cities)
        await self.select_city(city.name)
        return city

    def delete_city(self, city_id: str) -> bool:
        remaining = [c for c in self.saved_cities if c.id != city_id]
        if len(remaining) == len(self.saved_cities):
            return False
        self.saved_cities = remaining
        self._store.save_saved_cities(remaining)
        return True

    async def reload_saved_cities(self) -> list[SavedCity]:
        refreshed = await refresh_saved_cities(self._client, self.saved_cities, self._settings.language)
        by_id = {city.id: city for city in refreshed}
        # Cities added or deleted while the refresh was in flight keep their current state.
        self.saved_cities = [by_id.get(city.id, city) for city in self.saved_cities]
        self._store.save_saved_cities(self.saved_cities)
        return self.saved_cities

    def view(self) -> dict:
        return {
            "state": self.state.value,
            "city": self.city,
            "error": self.error,
            "snapshot": self.snapshot.model_dump(mode="json") if self.snapshot else None,
        }


class SearchDebouncer:
    """Issues at most one geocoding search per quiet period of `delay` seconds.

    Each submit cancels the pending search, so only the last query of a
    keystroke burst reaches the API.
    """

    def __init__(self, client: httpx.AsyncClient, delay: float = 0.5, max_results: int = 5, language: str = "zh"):
        self._client = client
        self.delay = delay
        self._max_results = max_results
        self._language = language
        self._pending: asyncio.Task | None = None

    def submit(self, query: str) -> asyncio.Task:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.create_task(self._run(query))
        return self._pending

    async def _run(self, query: str) -> list[SearchResult]:
        await asyncio.sleep(self.delay)
        return await search(self._client, query, self._max_results, self._language)
