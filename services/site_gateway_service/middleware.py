"""Site Gateway Service middleware components."""

from __future__ import annotations

import time
from uuid import UUID, uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from services.site_gateway_service.protocols import MetricsProtocol
from site_service_libs.logging_utils import (
    bind_request_context,
    clear_request_context,
    create_service_logger,
)

logger = create_service_logger("site_gateway.middleware")

CORRELATION_HEADER = "X-Correlation-ID"
API_PREFIX = "/api"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Middleware to ensure every request has a correlation ID."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Extract or generate correlation ID and bind it to the log context."""
        x_correlation_id = request.headers.get(CORRELATION_HEADER)
        if x_correlation_id:
            try:
                correlation_id = UUID(x_correlation_id)
            except ValueError:
                logger.warning(
                    f"Invalid correlation ID format: {x_correlation_id}, generating new one"
                )
                correlation_id = uuid4()
        else:
            correlation_id = uuid4()

        request.state.correlation_id = correlation_id
        bind_request_context(str(correlation_id))
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers[CORRELATION_HEADER] = str(correlation_id)
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per API request and records request metrics.

    Frontend asset requests are not logged.
    """

    def __init__(self, app: ASGIApp, metrics: MetricsProtocol) -> None:
        super().__init__(app)
        self.metrics = metrics

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not path.startswith(API_PREFIX):
            return await call_next(request)

        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start_time
            # Label by route template so unknown paths do not create new series
            route = request.scope.get("route")
            endpoint = getattr(route, "path", API_PREFIX)
            self.metrics.http_requests_total.labels(
                method=request.method, endpoint=endpoint, http_status=str(status_code)
            ).inc()
            self.metrics.http_request_duration_seconds.labels(
                method=request.method, endpoint=endpoint
            ).observe(duration)
            log = logger.info if status_code < 500 else logger.error
            log(
                f"{request.method} {path} {status_code}",
                method=request.method,
                path=path,
                status_code=status_code,
                duration_ms=round(duration * 1000, 1),
            )
