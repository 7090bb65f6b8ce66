# ABOUTME: Dependency container for the dashboard using Pydantic BaseModel.
# ABOUTME: Holds the httpx.AsyncClient, settings, and city store shared by the web layer.

import httpx
from pydantic import BaseModel, ConfigDict

from src.config import Settings
from src.storage import CityStore


class DashboardDeps(BaseModel):
    """Dependencies wired into the dashboard controller."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    http_client: httpx.AsyncClient
    settings: Settings
    store: CityStore


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create an httpx client for Open-Meteo calls.

    No retry transport is installed: failures surface as UpstreamError and the
    caller decides whether to retry.
    """
    return httpx.AsyncClient(timeout=settings.http_timeout)


def build_deps(settings: Settings) -> DashboardDeps:
    """Create the HTTP client and city store described by settings."""
    return DashboardDeps(
        http_client=create_http_client(settings),
        settings=settings,
        store=CityStore(settings.store_path),
    )
