"""
Protocols for Site Gateway Service.

Routes depend on these interfaces; concrete implementations are chosen by the
DI providers in ``di.py``.
"""

from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID

import httpx
from prometheus_client import Counter, Histogram
from starlette.responses import Response


class AnalysisServiceClientProtocol(Protocol):
    """Protocol for the external Mule analysis API."""

    async def analyze_archive(
        self,
        file_name: str,
        content: bytes,
        content_type: str,
        correlation_id: UUID,
    ) -> bytes:
        """Forward an archive for analysis.

        Returns:
            The raw JSON body of the downstream response, unmodified.
        """
        ...

    async def open_csv_export(
        self, analysis: dict[str, Any], correlation_id: UUID
    ) -> httpx.Response:
        """Start a CSV export and return the open, successful streaming response.

        The caller owns the response and must close it.
        """
        ...

    async def submit_inquiry(
        self, payload: dict[str, Any], correlation_id: UUID
    ) -> Any:
        """Submit an enquiry and return the decoded downstream JSON."""
        ...


class FrontendAssetsProtocol(Protocol):
    """Serves the browser application: one implementation per runtime mode."""

    async def serve_path(self, path: str, query: str, correlation_id: UUID) -> Response:
        """Serve a frontend path, falling back to the SPA index document."""
        ...

    async def serve_file(self, file_name: str, correlation_id: UUID) -> Response:
        """Serve one fixed top-level file (no SPA fallback)."""
        ...

    def health_checks(self) -> dict[str, bool]:
        """Report readiness of the frontend assets."""
        ...


class MetricsProtocol(Protocol):
    """Protocol for metrics collection matching GatewayMetrics."""

    @property
    def http_requests_total(self) -> Counter:
        """Total HTTP requests counter."""
        ...

    @property
    def http_request_duration_seconds(self) -> Histogram:
        """HTTP request duration histogram."""
        ...

    @property
    def downstream_service_calls_total(self) -> Counter:
        """Downstream service calls counter."""
        ...

    @property
    def downstream_service_call_duration_seconds(self) -> Histogram:
        """Downstream service call duration histogram."""
        ...

    @property
    def api_errors_total(self) -> Counter:
        """API errors counter."""
        ...

    @property
    def upload_size_bytes(self) -> Histogram:
        """Accepted upload size histogram."""
        ...
