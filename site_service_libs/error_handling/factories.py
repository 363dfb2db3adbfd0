"""
Error factory functions.

Each ``raise_*`` function builds an ErrorDetail with the matching ErrorCode and
raises it wrapped in a SiteError. Additional keyword arguments end up in
``ErrorDetail.details``.
"""

from __future__ import annotations

from typing import Any, NoReturn
from uuid import UUID

from common_core.error_enums import ErrorCode

from .error_detail_factory import create_error_detail_with_context
from .site_error import SiteError


def _raise(
    error_code: ErrorCode,
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    details: dict[str, Any],
    capture_stack: bool = False,
) -> NoReturn:
    error_detail = create_error_detail_with_context(
        error_code=error_code,
        message=message,
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details=details,
        capture_stack=capture_stack,
    )
    raise SiteError(error_detail)


def raise_unknown_error(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    # Unknown errors keep the raising stack for the error log
    _raise(
        ErrorCode.UNKNOWN_ERROR,
        service,
        operation,
        message,
        correlation_id,
        additional_context,
        capture_stack=True,
    )


def raise_validation_error(
    service: str,
    operation: str,
    field: str,
    message: str,
    correlation_id: UUID,
    value: Any = None,
    **additional_context: Any,
) -> NoReturn:
    details: dict[str, Any] = {"field": field}
    if value is not None:
        details["value"] = value
    details.update(additional_context)
    _raise(ErrorCode.VALIDATION_ERROR, service, operation, message, correlation_id, details)


def raise_missing_required_field(
    service: str,
    operation: str,
    field_name: str,
    correlation_id: UUID,
    message: str | None = None,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.MISSING_REQUIRED_FIELD,
        service,
        operation,
        message or f"Required field '{field_name}' is missing",
        correlation_id,
        {"field_name": field_name, **additional_context},
    )


def raise_invalid_request(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(ErrorCode.INVALID_REQUEST, service, operation, message, correlation_id, additional_context)


def format_size_limit(size_bytes: int) -> str:
    """Human-readable size ceiling: whole or one-decimal megabytes, bytes below 1MB."""
    mebibyte = 1024 * 1024
    if size_bytes < mebibyte:
        return f"{size_bytes} bytes"
    if size_bytes % mebibyte == 0:
        return f"{size_bytes // mebibyte}MB"
    return f"{size_bytes / mebibyte:.1f}MB"


def raise_payload_too_large(
    service: str,
    operation: str,
    max_size_bytes: int,
    correlation_id: UUID,
    message: str | None = None,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.PAYLOAD_TOO_LARGE,
        service,
        operation,
        message or f"File size exceeds maximum allowed ({format_size_limit(max_size_bytes)})",
        correlation_id,
        {"max_size_bytes": max_size_bytes, **additional_context},
    )


def raise_resource_not_found(
    service: str,
    operation: str,
    resource_type: str,
    resource_id: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.RESOURCE_NOT_FOUND,
        service,
        operation,
        f"{resource_type} '{resource_id}' not found",
        correlation_id,
        {"resource_type": resource_type, "resource_id": resource_id, **additional_context},
    )


def raise_external_service_error(
    service: str,
    operation: str,
    external_service: str,
    message: str,
    correlation_id: UUID,
    status_code: int | None = None,
    **additional_context: Any,
) -> NoReturn:
    details: dict[str, Any] = {"external_service": external_service}
    if status_code is not None:
        details["status_code"] = status_code
    details.update(additional_context)
    _raise(ErrorCode.EXTERNAL_SERVICE_ERROR, service, operation, message, correlation_id, details)


def raise_invalid_response(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(ErrorCode.INVALID_RESPONSE, service, operation, message, correlation_id, additional_context)


def raise_bad_gateway(
    service: str,
    operation: str,
    target: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.BAD_GATEWAY,
        service,
        operation,
        message,
        correlation_id,
        {"target": target, **additional_context},
    )


def raise_connection_error(
    service: str,
    operation: str,
    target: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.CONNECTION_ERROR,
        service,
        operation,
        message,
        correlation_id,
        {"target": target, **additional_context},
    )


def raise_timeout_error(
    service: str,
    operation: str,
    timeout_seconds: float,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.TIMEOUT,
        service,
        operation,
        message,
        correlation_id,
        {"timeout_seconds": timeout_seconds, **additional_context},
    )
