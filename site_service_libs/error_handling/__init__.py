"""Structured error handling for site services."""

from .error_detail_factory import create_error_detail_with_context
from .factories import (
    raise_bad_gateway,
    raise_connection_error,
    raise_external_service_error,
    raise_invalid_request,
    raise_invalid_response,
    raise_missing_required_field,
    raise_payload_too_large,
    raise_resource_not_found,
    raise_timeout_error,
    raise_unknown_error,
    raise_validation_error,
)
from .site_error import SiteError

__all__ = [
    "SiteError",
    "create_error_detail_with_context",
    "raise_bad_gateway",
    "raise_connection_error",
    "raise_external_service_error",
    "raise_invalid_request",
    "raise_invalid_response",
    "raise_missing_required_field",
    "raise_payload_too_large",
    "raise_resource_not_found",
    "raise_timeout_error",
    "raise_unknown_error",
    "raise_validation_error",
]
