"""
Mule analysis routes for Site Gateway Service.

Accepts a Mule application archive from the browser, validates it, and relays
it to the external analysis API. Also streams the CSV export of a finished
analysis back to the browser.
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterator
from typing import Any
from uuid import UUID

import httpx
from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Body, Request
from fastapi.responses import Response, StreamingResponse
from slowapi import Limiter
from starlette.datastructures import UploadFile

from services.site_gateway_service.config import Settings
from services.site_gateway_service.protocols import AnalysisServiceClientProtocol, MetricsProtocol
from services.site_gateway_service.upload_validation import (
    enforce_declared_size,
    ensure_archive_upload,
    limit_request_body,
    read_upload_within_limit,
)
from site_service_libs.error_handling import (
    SiteError,
    raise_missing_required_field,
    raise_unknown_error,
    raise_validation_error,
)
from site_service_libs.logging_utils import create_service_logger

logger = create_service_logger("site_gateway.routes.analysis")

SERVICE = "site_gateway_service"
DEFAULT_EXPORT_NAME = "report"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def build_export_filename(analysis: dict[str, Any]) -> str:
    """Attachment name for a CSV export: ``mule-analysis-<name>.csv``.

    ``<name>`` is the analysed file name, else the application name, else
    ``report``; characters unsafe in a header value are replaced with ``_``.
    """
    name = DEFAULT_EXPORT_NAME
    for key in ("fileName", "applicationName"):
        value = analysis.get(key)
        if isinstance(value, str) and value.strip():
            name = value.strip()
            break
    return f"mule-analysis-{_UNSAFE_FILENAME_CHARS.sub('_', name)}.csv"


async def _relay_csv(upstream: httpx.Response) -> AsyncIterator[bytes]:
    try:
        async for chunk in upstream.aiter_bytes():
            yield chunk
    finally:
        await upstream.aclose()


def create_router(limiter: Limiter, settings: Settings) -> APIRouter:
    """Build the analysis router with this app's limiter and rate limit."""
    router = APIRouter(tags=["Analysis"])

    @router.post("/analyze-mule")
    @limiter.limit(settings.ANALYZE_RATE_LIMIT)
    @inject
    async def analyze_mule(
        request: Request,  # Required for rate limiting and form parsing
        analysis_client: FromDishka[AnalysisServiceClientProtocol],
        config: FromDishka[Settings],
        metrics: FromDishka[MetricsProtocol],
        correlation_id: FromDishka[UUID],
    ) -> Response:
        """Analyse an uploaded Mule application archive.

        Expects ``multipart/form-data`` with a single ZIP archive in the
        ``muleApp`` field. The analysis result is returned exactly as the
        analysis service produced it.
        """
        enforce_declared_size(request, config, correlation_id)
        bounded_request = limit_request_body(request, config, correlation_id)

        try:
            form = await bounded_request.form(max_files=1)
        except SiteError as e:
            metrics.api_errors_total.labels(
                endpoint="/api/analyze-mule", error_type=e.error_code
            ).inc()
            raise
        except Exception as e:
            logger.warning(f"Form parsing failed: {e}")
            raise_validation_error(
                service=SERVICE,
                operation="analyze_mule",
                field="form",
                message="Invalid upload. Please send the archive as multipart/form-data.",
                correlation_id=correlation_id,
                error_type=type(e).__name__,
            )

        try:
            upload = form.get(config.UPLOAD_FIELD_NAME)
            if not isinstance(upload, UploadFile):
                raise_missing_required_field(
                    service=SERVICE,
                    operation="analyze_mule",
                    field_name=config.UPLOAD_FIELD_NAME,
                    correlation_id=correlation_id,
                    message="No file uploaded",
                )

            ensure_archive_upload(upload, config, correlation_id)
            content = await read_upload_within_limit(
                upload, config.MAX_UPLOAD_SIZE_BYTES, correlation_id
            )
            metrics.upload_size_bytes.observe(len(content))

            logger.info(
                "Archive accepted for analysis",
                file_name=upload.filename,
                size_bytes=len(content),
            )
            body = await analysis_client.analyze_archive(
                file_name=upload.filename or "application.zip",
                content=content,
                content_type=upload.content_type or "application/zip",
                correlation_id=correlation_id,
            )
        except SiteError as e:
            metrics.api_errors_total.labels(
                endpoint="/api/analyze-mule", error_type=e.error_code
            ).inc()
            raise
        except Exception as e:
            logger.error(f"Unexpected error during analysis: {e}", exc_info=True)
            metrics.api_errors_total.labels(
                endpoint="/api/analyze-mule", error_type="unknown"
            ).inc()
            raise_unknown_error(
                service=SERVICE,
                operation="analyze_mule",
                message="Failed to analyze Mule application",
                correlation_id=correlation_id,
                error_type=type(e).__name__,
            )
        finally:
            await form.close()

        return Response(content=body, media_type="application/json")


    @router.post("/export-analysis-csv")
    @limiter.limit(settings.ANALYZE_RATE_LIMIT)
    @inject
    async def export_analysis_csv(
        request: Request,  # Required for rate limiting
        analysis_client: FromDishka[AnalysisServiceClientProtocol],
        metrics: FromDishka[MetricsProtocol],
        correlation_id: FromDishka[UUID],
        analysis: dict[str, Any] = Body(...),
    ) -> StreamingResponse:
        """Stream the CSV rendering of an analysis result as a file download."""
        try:
            upstream = await analysis_client.open_csv_export(analysis, correlation_id)
        except SiteError as e:
            metrics.api_errors_total.labels(
                endpoint="/api/export-analysis-csv", error_type=e.error_code
            ).inc()
            raise
        except Exception as e:
            logger.error(f"Unexpected error during CSV export: {e}", exc_info=True)
            metrics.api_errors_total.labels(
                endpoint="/api/export-analysis-csv", error_type="unknown"
            ).inc()
            raise_unknown_error(
                service=SERVICE,
                operation="export_analysis_csv",
                message="Failed to export analysis report",
                correlation_id=correlation_id,
                error_type=type(e).__name__,
            )

        filename = build_export_filename(analysis)
        logger.info("Streaming CSV export", filename=filename)
        return StreamingResponse(
            _relay_csv(upstream),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return router
