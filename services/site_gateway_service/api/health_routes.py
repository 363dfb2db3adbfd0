"""Health, version and metrics routes for Site Gateway Service."""

from __future__ import annotations

from typing import Any

from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from services.site_gateway_service.config import Settings
from services.site_gateway_service.protocols import FrontendAssetsProtocol
from site_service_libs.logging_utils import create_service_logger

logger = create_service_logger("site_gateway.routes.health")

router = APIRouter(tags=["Health"])


@router.get("/api/health")
async def api_health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/api/version")
@inject
async def api_version(config: FromDishka[Settings]) -> dict[str, str]:
    return {
        "version": config.APP_VERSION,
        "app": config.APP_NAME,
        "environment": config.ENVIRONMENT.value,
    }


@router.get("/healthz")
@inject
async def health_check(
    config: FromDishka[Settings],
    frontend: FromDishka[FrontendAssetsProtocol],
) -> dict[str, Any]:
    """Detailed health report.

    The gateway is ``healthy`` when the frontend it is configured to serve is
    ready, ``degraded`` otherwise. The analysis service is not probed.
    """
    checks = frontend.health_checks()
    overall_status = "healthy" if all(checks.values()) else "degraded"
    if overall_status != "healthy":
        logger.warning("Health check degraded", checks=checks)

    return {
        "service": config.SERVICE_NAME,
        "status": overall_status,
        "message": f"Site Gateway Service is {overall_status}",
        "version": config.APP_VERSION,
        "environment": config.ENVIRONMENT.value,
        "checks": checks,
        "dependencies": {
            "analysis_service": {
                "url": config.ANALYSIS_SERVICE_URL,
                "note": "Availability checked on request",
            },
        },
    }


@router.get("/metrics", response_class=PlainTextResponse)
@inject
async def metrics(registry: FromDishka[CollectorRegistry]) -> PlainTextResponse:
    """Prometheus metrics endpoint."""
    return PlainTextResponse(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
