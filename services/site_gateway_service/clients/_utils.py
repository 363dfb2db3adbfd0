"""Shared utilities for Site Gateway HTTP clients."""

from __future__ import annotations

from uuid import UUID

import httpx

# Keys checked, in order, for a human-readable message in downstream error bodies
DOWNSTREAM_MESSAGE_KEYS = ("message", "error", "detail")


def build_forward_headers(correlation_id: UUID, service_name: str) -> dict[str, str]:
    """Build tracing headers for calls to the analysis service.

    Args:
        correlation_id: Request correlation ID for distributed tracing
        service_name: Name of the calling service

    Returns:
        Headers dict with service ID and correlation ID
    """
    return {
        "X-Service-ID": service_name,
        "X-Correlation-ID": str(correlation_id),
    }


def extract_downstream_message(response: httpx.Response) -> str | None:
    """Pull an error message out of a downstream body whose schema is unknown.

    Returns None unless the body is a JSON object holding a non-empty string
    under one of ``DOWNSTREAM_MESSAGE_KEYS``.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in DOWNSTREAM_MESSAGE_KEYS:
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
