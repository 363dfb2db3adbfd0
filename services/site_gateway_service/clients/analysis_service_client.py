"""HTTP client for the external Mule analysis API.

Makes exactly one outbound attempt per call and converts every failure into a
SiteError: downstream HTTP errors keep their status code, transport failures
become connection or timeout errors.
"""

from __future__ import annotations

import json
from typing import Any
from uuid import UUID

import httpx

from services.site_gateway_service.clients._utils import (
    build_forward_headers,
    extract_downstream_message,
)
from services.site_gateway_service.config import Settings
from services.site_gateway_service.protocols import MetricsProtocol
from site_service_libs.error_handling import (
    raise_connection_error,
    raise_external_service_error,
    raise_invalid_response,
    raise_timeout_error,
)
from site_service_libs.logging_utils import create_service_logger

logger = create_service_logger("site_gateway.analysis_client")

SERVICE = "site_gateway_service"
DOWNSTREAM_SERVICE = "analysis_service"
UNAVAILABLE_MESSAGE = "Analysis service is currently unavailable. Please try again later."


class AnalysisServiceClientImpl:
    """HTTP client for the analysis service's analyze, export-csv and inquiry endpoints."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        metrics: MetricsProtocol,
    ) -> None:
        """Initialize with shared HTTP client.

        Args:
            http_client: Shared httpx AsyncClient instance
            settings: Service settings (URLs and per-call timeouts)
            metrics: Metrics sink for downstream call accounting
        """
        self._client = http_client
        self._settings = settings
        self._metrics = metrics

    def _timeout(self, seconds: float) -> httpx.Timeout:
        return httpx.Timeout(seconds, connect=self._settings.HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS)

    async def _send(
        self,
        request: httpx.Request,
        *,
        operation: str,
        endpoint: str,
        timeout_seconds: float,
        failure_message: str,
        correlation_id: UUID,
        stream: bool = False,
    ) -> httpx.Response:
        """Send one request and return the response only if it succeeded."""
        try:
            with self._metrics.downstream_service_call_duration_seconds.labels(
                service=DOWNSTREAM_SERVICE, method=request.method, endpoint=endpoint
            ).time():
                response = await self._client.send(request, stream=stream)
        except httpx.TimeoutException as exc:
            logger.error(
                "Analysis service call timed out",
                operation=operation,
                url=str(request.url),
                timeout_seconds=timeout_seconds,
                error=str(exc),
            )
            self._record_call(request.method, endpoint, "timeout")
            raise_timeout_error(
                service=SERVICE,
                operation=operation,
                timeout_seconds=timeout_seconds,
                message=UNAVAILABLE_MESSAGE,
                correlation_id=correlation_id,
            )
        except httpx.RequestError as exc:
            logger.error(
                "Analysis service connection failed",
                operation=operation,
                url=str(request.url),
                error=str(exc),
            )
            self._record_call(request.method, endpoint, "connection_error")
            raise_connection_error(
                service=SERVICE,
                operation=operation,
                target=DOWNSTREAM_SERVICE,
                message=UNAVAILABLE_MESSAGE,
                correlation_id=correlation_id,
                error_type=type(exc).__name__,
            )

        self._record_call(request.method, endpoint, str(response.status_code))

        if response.is_error:
            if stream:
                await response.aread()
                await response.aclose()
            message = extract_downstream_message(response) or failure_message
            logger.warning(
                "Analysis service returned an error",
                operation=operation,
                status_code=response.status_code,
                downstream_message=message,
            )
            raise_external_service_error(
                service=SERVICE,
                operation=operation,
                external_service=DOWNSTREAM_SERVICE,
                message=message,
                correlation_id=correlation_id,
                status_code=response.status_code,
            )

        return response

    def _record_call(self, method: str, endpoint: str, status: str) -> None:
        self._metrics.downstream_service_calls_total.labels(
            service=DOWNSTREAM_SERVICE, method=method, endpoint=endpoint, status_code=status
        ).inc()

    async def analyze_archive(
        self,
        file_name: str,
        content: bytes,
        content_type: str,
        correlation_id: UUID,
    ) -> bytes:
        """Forward a buffered archive to the analyze endpoint.

        Returns:
            The downstream JSON body exactly as received

        Raises:
            SiteError: On downstream HTTP errors, transport failures, or a
                successful response whose body is not JSON
        """
        timeout_seconds = self._settings.ANALYZE_TIMEOUT_SECONDS
        request = self._client.build_request(
            "POST",
            self._settings.analyze_url,
            files=[("file", (file_name, content, content_type))],
            headers=build_forward_headers(correlation_id, self._settings.SERVICE_NAME),
            timeout=self._timeout(timeout_seconds),
        )

        logger.info(
            "Forwarding archive for analysis",
            file_name=file_name,
            size_bytes=len(content),
        )
        response = await self._send(
            request,
            operation="analyze_archive",
            endpoint=self._settings.ANALYZE_PATH,
            timeout_seconds=timeout_seconds,
            failure_message="Failed to analyze Mule application",
            correlation_id=correlation_id,
        )

        body = response.content
        try:
            json.loads(body)
        except ValueError:
            logger.error(
                "Analysis service returned a non-JSON body",
                status_code=response.status_code,
                content_type=response.headers.get("content-type"),
            )
            raise_invalid_response(
                service=SERVICE,
                operation="analyze_archive",
                message="Analysis service returned an invalid response",
                correlation_id=correlation_id,
            )

        logger.info("Archive analysis completed", file_name=file_name)
        return body

    async def open_csv_export(
        self, analysis: dict[str, Any], correlation_id: UUID
    ) -> httpx.Response:
        """Start a CSV export; the returned response is still streaming.

        Raises:
            SiteError: On downstream HTTP errors or transport failures
        """
        timeout_seconds = self._settings.EXPORT_TIMEOUT_SECONDS
        request = self._client.build_request(
            "POST",
            self._settings.export_csv_url,
            json=analysis,
            headers=build_forward_headers(correlation_id, self._settings.SERVICE_NAME),
            timeout=self._timeout(timeout_seconds),
        )

        logger.info("Requesting CSV export")
        return await self._send(
            request,
            operation="export_csv",
            endpoint=self._settings.EXPORT_CSV_PATH,
            timeout_seconds=timeout_seconds,
            failure_message="Failed to export analysis report",
            correlation_id=correlation_id,
            stream=True,
        )

    async def submit_inquiry(self, payload: dict[str, Any], correlation_id: UUID) -> Any:
        """Submit an enquiry record.

        Returns:
            Decoded downstream JSON, or ``{"status": "ok"}`` when the
            successful response carries no JSON body
        """
        timeout_seconds = self._settings.INQUIRY_TIMEOUT_SECONDS
        request = self._client.build_request(
            "POST",
            self._settings.inquiry_url,
            json=payload,
            headers=build_forward_headers(correlation_id, self._settings.SERVICE_NAME),
            timeout=self._timeout(timeout_seconds),
        )

        response = await self._send(
            request,
            operation="submit_inquiry",
            endpoint=self._settings.INQUIRY_PATH,
            timeout_seconds=timeout_seconds,
            failure_message="Failed to submit enquiry",
            correlation_id=correlation_id,
        )

        logger.info("Enquiry submitted", status_code=response.status_code)
        try:
            return response.json()
        except ValueError:
            return {"status": "ok"}
