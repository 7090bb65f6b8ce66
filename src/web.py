# ABOUTME: ASGI web entry point exposing the weather dashboard as JSON endpoints.
# ABOUTME: Builds a Starlette app around one Dashboard via the create_app factory for any ASGI server.

import contextlib
import json
import logging

from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from src.config import configure_logging, load_settings
from src.dashboard import Dashboard
from src.deps import DashboardDeps, build_deps
from src.errors import NotFound, WeatherError
from src.models import SearchResult
from src.weather_service import Clock, fetch_by_coordinates, utc_now

logger = logging.getLogger(__name__)


class BadRequest(Exception):
    """Raised for request bodies or query strings the API cannot use."""


async def read_json_body(request: Request) -> dict:
    """Parse a JSON object body, raising BadRequest on anything else."""
    try:
        data = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BadRequest(f"Invalid JSON body: {e}") from e
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return data


def _float_param(request: Request, name: str) -> float:
    try:
        return float(request.query_params[name])
    except (KeyError, ValueError) as e:
        raise BadRequest(f"Query parameter '{name}' must be a number") from e


def _dashboard(request: Request) -> Dashboard:
    return request.app.state.dashboard


async def get_weather(request: Request) -> JSONResponse:
    return JSONResponse(_dashboard(request).view())


async def select_city(request: Request) -> JSONResponse:
    body = await read_json_body(request)
    name = body.get("name")
    if not isinstance(name, str) or not name.strip():
        raise BadRequest("'name' must be a non-empty string")
    dashboard = _dashboard(request)
    await dashboard.select_city(name)
    return JSONResponse(dashboard.view())


async def refresh_weather(request: Request) -> JSONResponse:
    dashboard = _dashboard(request)
    await dashboard.refetch()
    return JSONResponse(dashboard.view())


async def weather_by_coordinates(request: Request) -> JSONResponse:
    latitude = _float_param(request, "lat")
    longitude = _float_param(request, "lon")
    name = request.query_params.get("name") or f"{latitude:.2f}, {longitude:.2f}"
    snapshot = await fetch_by_coordinates(
        request.app.state.deps.http_client,
        latitude,
        longitude,
        name,
        clock=request.app.state.clock,
        hours=request.app.state.deps.settings.hourly_window,
    )
    return JSONResponse(snapshot.model_dump(mode="json"))


async def search_cities(request: Request) -> Response:
    results = await _dashboard(request).search(request.query_params.get("q", ""))
    if results is None:
        # Superseded by a newer query from the same dashboard.
        return Response(status_code=204)
    return JSONResponse([r.model_dump() for r in results])


async def list_cities(request: Request) -> JSONResponse:
    return JSONResponse([c.model_dump() for c in _dashboard(request).saved_cities])


async def add_city(request: Request) -> JSONResponse:
    body = await read_json_body(request)
    try:
        result = SearchResult.model_validate(body)
    except ValidationError as e:
        raise BadRequest(f"Invalid city: {e}") from e
    city = await _dashboard(request).add_city(result)
    return JSONResponse(city.model_dump(), status_code=201)


async def delete_city(request: Request) -> JSONResponse:
    if not _dashboard(request).delete_city(request.path_params["city_id"]):
        return JSONResponse({"error": "City not saved"}, status_code=404)
    return JSONResponse({"deleted": request.path_params["city_id"]})


async def refresh_cities(request: Request) -> JSONResponse:
    cities = await _dashboard(request).reload_saved_cities()
    return JSONResponse([c.model_dump() for c in cities])


async def handle_bad_request(request: Request, exc: BadRequest) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=400)


async def handle_weather_error(request: Request, exc: WeatherError) -> JSONResponse:
    status = 404 if isinstance(exc, NotFound) else 502
    logger.warning("Request %s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": str(exc)}, status_code=status)


def create_app(deps: DashboardDeps | None = None, *, clock: Clock = utc_now, load_on_startup: bool = True) -> Starlette:
    """Create the dashboard ASGI app, building dependencies from the environment when none are given."""
    if deps is None:
        settings = load_settings()
        configure_logging(settings.log_level)
        deps = build_deps(settings)

    dashboard = Dashboard(deps.http_client, deps.store, deps.settings, clock=clock)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        if load_on_startup:
            await dashboard.start()
        yield
        await deps.http_client.aclose()

    app = Starlette(
        routes=[
            Route("/api/weather", get_weather, methods=["GET"]),
            Route("/api/weather/city", select_city, methods=["POST"]),
            Route("/api/weather/refresh", refresh_weather, methods=["POST"]),
            Route("/api/weather/coords", weather_by_coordinates, methods=["GET"]),
            Route("/api/search", search_cities, methods=["GET"]),
            Route("/api/cities", list_cities, methods=["GET"]),
            Route("/api/cities", add_city, methods=["POST"]),
            Route("/api/cities/refresh", refresh_cities, methods=["POST"]),
            Route("/api/cities/{city_id}", delete_city, methods=["DELETE"]),
        ],
        exception_handlers={BadRequest: handle_bad_request, WeatherError: handle_weather_error},
        lifespan=lifespan,
    )
    app.state.deps = deps
    app.state.dashboard = dashboard
    app.state.clock = clock
    return app
