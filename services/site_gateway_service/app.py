"""Site Gateway Service - marketing site backend.

Serves the prebuilt single-page application and proxies the Mule analysis,
CSV export and enquiry calls to the external analysis API.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from dishka import make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import REGISTRY, CollectorRegistry
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse

from services.site_gateway_service.api.analysis_routes import (
    create_router as create_analysis_router,
)
from services.site_gateway_service.api.enquiry_routes import create_router as create_enquiry_router
from services.site_gateway_service.api.frontend_routes import router as frontend_router
from services.site_gateway_service.api.health_routes import router as health_router
from services.site_gateway_service.config import Settings, settings
from services.site_gateway_service.di import RequestContextProvider, SiteGatewayProvider
from services.site_gateway_service.metrics import GatewayMetrics
from services.site_gateway_service.middleware import (
    CorrelationIDMiddleware,
    RequestLoggingMiddleware,
)
from services.site_gateway_service.rate_limiter import create_limiter
from site_service_libs.error_handling.fastapi import (
    error_envelope,
    register_error_handlers as register_fastapi_error_handlers,
)
from site_service_libs.logging_utils import configure_service_logging, create_service_logger

logger = create_service_logger("site_gateway_service")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Site Gateway Service starting")
    yield
    await app.state.di_container.close()
    logger.info("Site Gateway Service stopped")


def create_app(
    app_settings: Settings | None = None,
    registry: CollectorRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings for this instance; defaults to the environment-derived
            module settings.
        registry: Prometheus registry; pass a fresh one to build several apps in one
            process.
    """
    app_settings = app_settings or settings
    registry = registry or REGISTRY

    configure_service_logging(
        app_settings.SERVICE_NAME,
        environment=app_settings.ENVIRONMENT.value,
        log_level=app_settings.LOG_LEVEL,
    )

    app = FastAPI(
        title=app_settings.SERVICE_NAME,
        version=app_settings.APP_VERSION,
        description="Aaryati Technologies site gateway - SPA hosting and analysis API proxy",
        docs_url="/docs" if app_settings.is_development() else None,
        redoc_url=None,
        openapi_url="/openapi.json" if app_settings.is_development() else None,
        lifespan=lifespan,
    )

    # Register error handlers
    register_fastapi_error_handlers(app)

    metrics = GatewayMetrics(registry=registry)

    # Request logging runs inside the correlation middleware so log lines carry the ID
    app.add_middleware(RequestLoggingMiddleware, metrics=metrics)
    app.add_middleware(CorrelationIDMiddleware)

    # Rate limiting (route decorators read the limiter from app state)
    limiter = create_limiter()
    app.state.limiter = limiter

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
        logger.warning("Rate limit exceeded", path=request.url.path, limit=str(exc.detail))
        return JSONResponse(
            status_code=429,
            content=error_envelope(f"Rate limit exceeded: {exc.detail}"),
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=app_settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=app_settings.CORS_ALLOW_METHODS,
        allow_headers=app_settings.CORS_ALLOW_HEADERS,
    )

    app.include_router(health_router)
    app.include_router(create_analysis_router(limiter, app_settings), prefix="/api")
    app.include_router(create_enquiry_router(limiter, app_settings), prefix="/api")

    container = make_async_container(
        SiteGatewayProvider(app_settings, metrics=metrics, registry=registry),
        RequestContextProvider(),
        FastapiProvider(),
    )
    setup_dishka(container, app)
    app.state.di_container = container

    # SPA fallback - must be registered after every API route
    app.include_router(frontend_router)

    logger.info(
        "Site Gateway Service configured",
        environment=app_settings.ENVIRONMENT.value,
        analysis_service_url=app_settings.ANALYSIS_SERVICE_URL,
    )
    return app


# Create application instance
app = create_app()


def main() -> None:
    uvicorn.run(
        "services.site_gateway_service.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
