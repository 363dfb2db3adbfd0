"""Metrics definitions for the Site Gateway Service."""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram


class GatewayMetrics:
    """A container for all Prometheus metrics for the Site Gateway Service."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics with optional registry for test isolation."""
        if registry is None:
            registry = REGISTRY
        self.http_requests_total = Counter(
            "site_gateway_http_requests_total",
            "Total number of API requests for Site Gateway Service.",
            ["method", "endpoint", "http_status"],
            registry=registry,
        )
        self.http_request_duration_seconds = Histogram(
            "site_gateway_http_request_duration_seconds",
            "API request duration in seconds for Site Gateway Service.",
            ["method", "endpoint"],
            registry=registry,
        )
        self.downstream_service_calls_total = Counter(
            "site_gateway_downstream_service_calls_total",
            "Total number of calls to the analysis service.",
            ["service", "method", "endpoint", "status_code"],
            registry=registry,
        )
        self.downstream_service_call_duration_seconds = Histogram(
            "site_gateway_downstream_service_call_duration_seconds",
            "Duration of calls to the analysis service in seconds.",
            ["service", "method", "endpoint"],
            buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0),
            registry=registry,
        )
        self.api_errors_total = Counter(
            "site_gateway_api_errors_total",
            "Total number of API errors.",
            ["endpoint", "error_type"],
            registry=registry,
        )
        self.upload_size_bytes = Histogram(
            "site_gateway_upload_size_bytes",
            "Size of accepted archive uploads in bytes.",
            buckets=(64 * 1024, 512 * 1024, 1024**2, 5 * 1024**2, 10 * 1024**2, 25 * 1024**2, 50 * 1024**2),
            registry=registry,
        )
