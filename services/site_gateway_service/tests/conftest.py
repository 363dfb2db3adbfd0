"""
Shared test configuration for Site Gateway Service.

Builds the real application through ``create_app`` with testing settings, a
temporary frontend bundle, and an isolated Prometheus registry. The analysis
service is mocked at the httpx transport layer with respx.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from prometheus_client import CollectorRegistry

from common_core.config_enums import Environment
from services.site_gateway_service.app import create_app
from services.site_gateway_service.config import Settings

ANALYSIS_URL = "http://analysis.test"
INDEX_HTML = "<!doctype html><html><body><div id=\"root\"></div></body></html>"
ROBOTS_TXT = "User-agent: *\nAllow: /\n"
SITEMAP_XML = "<?xml version=\"1.0\"?><urlset></urlset>"
APP_JS = "console.log('site');"


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    """A built frontend bundle on disk."""
    public = tmp_path / "public"
    (public / "assets").mkdir(parents=True)
    (public / "index.html").write_text(INDEX_HTML)
    (public / "robots.txt").write_text(ROBOTS_TXT)
    (public / "sitemap.xml").write_text(SITEMAP_XML)
    (public / "assets" / "app.js").write_text(APP_JS)
    return public


@pytest.fixture
def make_settings(static_dir: Path) -> Callable[..., Settings]:
    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "ENVIRONMENT": Environment.TESTING,
            "ANALYSIS_SERVICE_URL": ANALYSIS_URL,
            "STATIC_DIR": static_dir,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def test_settings(make_settings: Callable[..., Settings]) -> Settings:
    return make_settings()


@pytest.fixture
async def app_factory() -> AsyncIterator[Callable[[Settings], FastAPI]]:
    """Create apps with isolated registries and close their containers afterwards."""
    apps: list[FastAPI] = []

    def _create(app_settings: Settings) -> FastAPI:
        app = create_app(app_settings, registry=CollectorRegistry())
        apps.append(app)
        return app

    yield _create

    for app in apps:
        await app.state.di_container.close()


@pytest.fixture
async def client_for(
    app_factory: Callable[[Settings], FastAPI],
) -> AsyncIterator[Callable[[Settings], AsyncClient]]:
    """Build an HTTP client against an app created with the given settings."""
    clients: list[AsyncClient] = []

    def _client(app_settings: Settings) -> AsyncClient:
        app = app_factory(app_settings)
        ac = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(ac)
        return ac

    yield _client

    for ac in clients:
        await ac.aclose()


@pytest.fixture
def client(
    client_for: Callable[[Settings], AsyncClient], test_settings: Settings
) -> AsyncClient:
    return client_for(test_settings)
