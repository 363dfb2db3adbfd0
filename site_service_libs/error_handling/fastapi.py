"""
FastAPI integration for structured error handling.

All errors leave the service in the same envelope: ``{"error": "<message>"}``.
The correlation ID travels in the ``X-Correlation-ID`` response header.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from common_core.error_enums import ErrorCode
from site_service_libs.logging_utils import create_service_logger

from .site_error import SiteError

logger = create_service_logger("error_handling.fastapi")

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.MISSING_REQUIRED_FIELD: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.PAYLOAD_TOO_LARGE: 413,
    ErrorCode.RATE_LIMIT: 429,
    ErrorCode.EXTERNAL_SERVICE_ERROR: 502,
    ErrorCode.INVALID_RESPONSE: 502,
    ErrorCode.BAD_GATEWAY: 502,
    ErrorCode.CONNECTION_ERROR: 500,
    ErrorCode.TIMEOUT: 500,
    ErrorCode.UNKNOWN_ERROR: 500,
}


def status_code_for_error(error: SiteError) -> int:
    """Resolve the HTTP status for a SiteError.

    External service errors carry the downstream status in their details and
    are relayed as-is when it is an error status.
    """
    detail = error.error_detail
    if detail.error_code == ErrorCode.EXTERNAL_SERVICE_ERROR:
        downstream_status = detail.details.get("status_code")
        if isinstance(downstream_status, int) and 400 <= downstream_status < 600:
            return downstream_status
    return ERROR_CODE_TO_HTTP_STATUS.get(detail.error_code, 500)


def error_envelope(message: str) -> dict[str, Any]:
    return {"error": message}


def _correlation_id(request: Request) -> str | None:
    correlation_id = getattr(request.state, "correlation_id", None)
    return str(correlation_id) if correlation_id else None


def _with_correlation_header(response: JSONResponse, request: Request) -> JSONResponse:
    correlation_id = _correlation_id(request)
    if correlation_id:
        response.headers["X-Correlation-ID"] = correlation_id
    return response


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Answer exceptions no handler claimed with a generic 500 envelope.

    The exception is logged here and goes no further, so the server never
    sees it as a crash.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "Unhandled exception",
                path=request.url.path,
                error_type=type(exc).__name__,
                exc_info=exc,
            )
            response = JSONResponse(
                status_code=500, content=error_envelope("Internal Server Error")
            )
            return _with_correlation_header(response, request)


def register_error_handlers(app: FastAPI) -> None:
    """Register the error envelope handlers on a FastAPI application.

    Must run before any other middleware is added so the unexpected-error
    middleware sits directly around the routes.
    """

    @app.exception_handler(SiteError)
    async def handle_site_error(request: Request, exc: SiteError) -> JSONResponse:
        status_code = status_code_for_error(exc)
        log = logger.error if status_code >= 500 else logger.warning
        log(
            "Request failed",
            path=request.url.path,
            status_code=status_code,
            error_code=exc.error_code,
            operation=exc.operation,
            error_message=exc.message,
            details=exc.error_detail.details,
            stack_trace=exc.error_detail.stack_trace,
        )
        response = JSONResponse(status_code=status_code, content=error_envelope(exc.message))
        return _with_correlation_header(response, request)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        reason = first.get("msg", "Invalid request")
        message = f"Invalid request: {location}: {reason}" if location else f"Invalid request: {reason}"
        logger.warning("Request validation failed", path=request.url.path, errors=errors)
        response = JSONResponse(status_code=400, content=error_envelope(message))
        return _with_correlation_header(response, request)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        response = JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )
        return _with_correlation_header(response, request)

    app.add_middleware(UnhandledErrorMiddleware)
