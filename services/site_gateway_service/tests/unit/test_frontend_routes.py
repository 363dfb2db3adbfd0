"""Tests for static bundle serving, SEO files and the SPA fallback."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.responses import FileResponse
from httpx import AsyncClient

from services.site_gateway_service.config import Settings
from services.site_gateway_service.frontend import StaticBundleFrontend
from site_service_libs.error_handling import SiteError


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/", "/pricing", "/services/mule-migration", "/a/b/c?x=1"])
async def test_unmatched_paths_serve_index(client: AsyncClient, path: str) -> None:
    response = await client.get(path)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert '<div id="root">' in response.text


@pytest.mark.asyncio
async def test_path_with_nul_byte_serves_index(client: AsyncClient) -> None:
    response = await client.get("/foo%00bar")

    assert response.status_code == 200
    assert '<div id="root">' in response.text


@pytest.mark.asyncio
async def test_bundle_asset_served_as_is(client: AsyncClient) -> None:
    response = await client.get("/assets/app.js")

    assert response.status_code == 200
    assert response.text == "console.log('site');"
    assert "etag" in response.headers


@pytest.mark.asyncio
async def test_robots_and_sitemap_served(client: AsyncClient) -> None:
    robots = await client.get("/robots.txt")
    sitemap = await client.get("/sitemap.xml")

    assert robots.status_code == 200
    assert robots.text.startswith("User-agent: *")
    assert sitemap.status_code == 200
    assert "<urlset>" in sitemap.text


@pytest.mark.asyncio
async def test_missing_index_returns_404(
    client_for: Callable[[Settings], AsyncClient],
    make_settings: Callable[..., Settings],
    tmp_path: Path,
) -> None:
    empty_dir = tmp_path / "empty"
    empty_dir.mkdir()
    client = client_for(make_settings(STATIC_DIR=empty_dir))

    response = await client.get("/pricing")

    assert response.status_code == 404
    assert response.json() == {"error": "Frontend document 'index.html' not found"}


@pytest.mark.asyncio
async def test_missing_robots_returns_404_without_fallback(
    client_for: Callable[[Settings], AsyncClient],
    make_settings: Callable[..., Settings],
    static_dir: Path,
) -> None:
    (static_dir / "robots.txt").unlink()
    client = client_for(make_settings())

    response = await client.get("/robots.txt")

    assert response.status_code == 404
    assert "robots.txt" in response.json()["error"]


@pytest.mark.asyncio
async def test_api_routes_take_precedence_over_fallback(client: AsyncClient) -> None:
    response = await client.get("/api/health")

    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_unsupported_method_uses_error_envelope(client: AsyncClient) -> None:
    response = await client.delete("/pricing")

    assert response.status_code == 405
    assert response.json() == {"error": "Method Not Allowed"}


class TestStaticBundleFrontend:
    @pytest.mark.asyncio
    async def test_paths_outside_bundle_fall_back_to_index(
        self, static_dir: Path
    ) -> None:
        (static_dir.parent / "secret.txt").write_text("do not serve")
        frontend = StaticBundleFrontend(static_dir)

        response = await frontend.serve_path("../secret.txt", "", uuid4())

        assert isinstance(response, FileResponse)
        assert Path(response.path) == static_dir.resolve() / "index.html"

    @pytest.mark.asyncio
    async def test_unusable_path_falls_back_to_index(self, static_dir: Path) -> None:
        frontend = StaticBundleFrontend(static_dir)

        response = await frontend.serve_path("foo\x00bar", "", uuid4())

        assert isinstance(response, FileResponse)
        assert Path(response.path) == static_dir.resolve() / "index.html"

    @pytest.mark.asyncio
    async def test_serve_file_outside_bundle_not_found(self, static_dir: Path) -> None:
        (static_dir.parent / "secret.txt").write_text("do not serve")
        frontend = StaticBundleFrontend(static_dir)

        with pytest.raises(SiteError) as exc_info:
            await frontend.serve_file("../secret.txt", uuid4())

        assert exc_info.value.error_code == "RESOURCE_NOT_FOUND"

    def test_health_checks_report_bundle_state(self, static_dir: Path) -> None:
        assert StaticBundleFrontend(static_dir).health_checks() == {
            "static_dir_exists": True,
            "index_exists": True,
            "assets_dir_exists": True,
        }
