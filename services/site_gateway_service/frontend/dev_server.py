"""Relay frontend requests to the Vite dev server during development."""

from __future__ import annotations

from uuid import UUID

import httpx
from starlette.responses import Response

from site_service_libs.error_handling import raise_bad_gateway
from site_service_libs.logging_utils import create_service_logger

logger = create_service_logger("site_gateway.frontend.dev_server")

# Response headers worth passing back to the browser
RELAYED_HEADERS = frozenset({"content-type", "cache-control", "etag", "last-modified"})
DEV_SERVER_TIMEOUT_SECONDS = 30.0


class DevServerFrontend:
    """Forwards GET requests for frontend paths to the live dev toolchain."""

    def __init__(self, http_client: httpx.AsyncClient, dev_server_url: str) -> None:
        self._client = http_client
        self._base_url = dev_server_url.rstrip("/")

    async def _relay(self, path: str, query: str, correlation_id: UUID, operation: str) -> Response:
        url = f"{self._base_url}/{path.lstrip('/')}"
        if query:
            url = f"{url}?{query}"
        try:
            upstream = await self._client.get(url, timeout=DEV_SERVER_TIMEOUT_SECONDS)
        except httpx.RequestError as exc:
            logger.error("Frontend dev server unreachable", url=url, error=str(exc))
            raise_bad_gateway(
                service="site_gateway_service",
                operation=operation,
                target="frontend_dev_server",
                message=f"Frontend dev server is not reachable at {self._base_url}",
                correlation_id=correlation_id,
            )

        headers = {
            name: value
            for name, value in upstream.headers.items()
            if name.lower() in RELAYED_HEADERS
        }
        return Response(
            content=upstream.content,
            status_code=upstream.status_code,
            headers=headers,
        )

    async def serve_path(self, path: str, query: str, correlation_id: UUID) -> Response:
        return await self._relay(path, query, correlation_id, operation="serve_spa")

    async def serve_file(self, file_name: str, correlation_id: UUID) -> Response:
        return await self._relay(file_name, "", correlation_id, operation="serve_file")

    def health_checks(self) -> dict[str, bool]:
        return {"dev_server_configured": bool(self._base_url)}
