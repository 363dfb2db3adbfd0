"""Factory for ErrorDetail instances with automatic context capture."""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from common_core.error_enums import ErrorCode
from common_core.models.error_models import ErrorDetail


def create_error_detail_with_context(
    error_code: ErrorCode,
    message: str,
    service: str,
    operation: str,
    correlation_id: UUID | None = None,
    details: dict[str, Any] | None = None,
    capture_stack: bool = False,
) -> ErrorDetail:
    """Create an ErrorDetail, generating a correlation ID when none is given.

    Args:
        error_code: Error classification
        message: Human-readable message, safe to show to API clients
        service: Name of the service raising the error
        operation: Operation being performed when the error occurred
        correlation_id: Request correlation ID (generated if missing)
        details: Additional structured context
        capture_stack: Whether to record the current stack trace
    """
    stack_trace = "".join(traceback.format_stack()[:-1]) if capture_stack else None

    return ErrorDetail(
        error_code=error_code,
        message=message,
        correlation_id=correlation_id or uuid4(),
        timestamp=datetime.now(timezone.utc),
        service=service,
        operation=operation,
        details=details or {},
        stack_trace=stack_trace,
    )
