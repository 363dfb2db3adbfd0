"""Dependency Injection providers for Site Gateway Service.

APP-scoped infrastructure (settings, HTTP client, metrics, analysis client,
frontend strategy) and a REQUEST-scoped correlation context provider.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from uuid import UUID, uuid4

import httpx
from dishka import Provider, Scope, provide
from fastapi import Request
from prometheus_client import CollectorRegistry

from services.site_gateway_service.clients import AnalysisServiceClientImpl
from services.site_gateway_service.config import Settings
from services.site_gateway_service.frontend import DevServerFrontend, StaticBundleFrontend
from services.site_gateway_service.protocols import (
    AnalysisServiceClientProtocol,
    FrontendAssetsProtocol,
    MetricsProtocol,
)
from site_service_libs.logging_utils import create_service_logger

logger = create_service_logger("site_gateway.di")


class SiteGatewayProvider(Provider):
    """Infrastructure provider for Site Gateway Service.

    Settings, metrics and the registry are created by the application factory
    and handed in, so middleware and routes share the same instances.
    """

    scope = Scope.APP

    def __init__(
        self,
        settings: Settings,
        metrics: MetricsProtocol,
        registry: CollectorRegistry,
    ) -> None:
        super().__init__()
        self._settings = settings
        self._metrics = metrics
        self._registry = registry

    @provide
    def get_config(self) -> Settings:
        return self._settings

    @provide
    def get_registry(self) -> CollectorRegistry:
        return self._registry

    @provide
    def get_metrics(self) -> MetricsProtocol:
        return self._metrics

    @provide
    async def get_http_client(self, config: Settings) -> AsyncIterator[httpx.AsyncClient]:
        """Provide shared HTTP client with connection pooling."""
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(
                config.HTTP_CLIENT_TIMEOUT_SECONDS,
                connect=config.HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS,
            )
        ) as client:
            yield client

    @provide
    def provide_analysis_client(
        self,
        http_client: httpx.AsyncClient,
        config: Settings,
        metrics: MetricsProtocol,
    ) -> AnalysisServiceClientProtocol:
        return AnalysisServiceClientImpl(http_client, config, metrics)

    @provide
    def provide_frontend(
        self, config: Settings, http_client: httpx.AsyncClient
    ) -> FrontendAssetsProtocol:
        """Pick the frontend strategy for this process: dev server relay or static bundle."""
        if config.is_development():
            logger.info(
                "Serving frontend from dev server",
                dev_server_url=config.FRONTEND_DEV_SERVER_URL,
            )
            return DevServerFrontend(http_client, config.FRONTEND_DEV_SERVER_URL)
        logger.info("Serving frontend from static bundle", static_dir=str(config.STATIC_DIR))
        return StaticBundleFrontend(config.STATIC_DIR)


class RequestContextProvider(Provider):
    """Request-scoped provider for correlation context.

    ``Request`` itself comes from dishka's ``FastapiProvider``.
    """

    @provide(scope=Scope.REQUEST)
    def provide_correlation_id(self, request: Request) -> UUID:
        """Provide correlation ID from request state (set by CorrelationIDMiddleware)."""
        return getattr(request.state, "correlation_id", uuid4())
