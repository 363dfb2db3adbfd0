"""
Core exception type for structured error handling.

SiteError wraps an ErrorDetail so that every failure raised inside a service
carries the same machine-readable shape up to the HTTP error handlers.
"""

from __future__ import annotations

from typing import Any

from common_core.models.error_models import ErrorDetail


class SiteError(Exception):
    """Exception carrying a structured ErrorDetail."""

    def __init__(self, error_detail: ErrorDetail) -> None:
        super().__init__(f"[{error_detail.error_code.value}] {error_detail.message}")
        self.error_detail = error_detail

    @property
    def correlation_id(self) -> str:
        return str(self.error_detail.correlation_id)

    @property
    def error_code(self) -> str:
        return self.error_detail.error_code.value

    @property
    def service(self) -> str:
        return self.error_detail.service

    @property
    def operation(self) -> str:
        return self.error_detail.operation

    @property
    def message(self) -> str:
        return self.error_detail.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error detail for logging."""
        return self.error_detail.model_dump(mode="json")
