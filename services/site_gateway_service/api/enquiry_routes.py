"""Enquiry (contact form) routes for Site Gateway Service."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi import Limiter

from services.site_gateway_service.config import Settings
from services.site_gateway_service.dto import EnquiryRequestV1
from services.site_gateway_service.protocols import AnalysisServiceClientProtocol, MetricsProtocol
from site_service_libs.error_handling import (
    SiteError,
    raise_invalid_request,
    raise_missing_required_field,
    raise_unknown_error,
    raise_validation_error,
)
from site_service_libs.logging_utils import create_service_logger

logger = create_service_logger("site_gateway.routes.enquiry")

SERVICE = "site_gateway_service"
ENDPOINT = "/api/submit-enquiry"


def parse_enquiry(body: Any, correlation_id: UUID) -> EnquiryRequestV1:
    """Validate a raw enquiry body, raising a 400-class SiteError on bad input."""
    if not isinstance(body, dict):
        raise_invalid_request(
            service=SERVICE,
            operation="submit_enquiry",
            message="Enquiry must be a JSON object",
            correlation_id=correlation_id,
        )
    try:
        enquiry = EnquiryRequestV1.model_validate(body)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "body"
        raise_validation_error(
            service=SERVICE,
            operation="submit_enquiry",
            field=field,
            message=f"Invalid value for {field}",
            correlation_id=correlation_id,
        )

    missing = enquiry.missing_required_fields()
    if missing:
        raise_missing_required_field(
            service=SERVICE,
            operation="submit_enquiry",
            field_name=missing[0],
            correlation_id=correlation_id,
            message="Name and email are required",
            missing_fields=missing,
        )
    return enquiry


def create_router(limiter: Limiter, settings: Settings) -> APIRouter:
    """Build the enquiry router with this app's limiter and rate limit."""
    router = APIRouter(tags=["Enquiry"])

    @router.post("/submit-enquiry")
    @limiter.limit(settings.ENQUIRY_RATE_LIMIT)
    @inject
    async def submit_enquiry(
        request: Request,  # Required for rate limiting
        analysis_client: FromDishka[AnalysisServiceClientProtocol],
        metrics: FromDishka[MetricsProtocol],
        correlation_id: FromDishka[UUID],
        body: Any = Body(None),
    ) -> JSONResponse:
        """Forward a contact-form enquiry to the analysis service."""
        try:
            enquiry = parse_enquiry(body, correlation_id)
            logger.info(
                "Submitting enquiry",
                has_company=enquiry.company is not None,
                has_requirements=enquiry.requirements is not None,
            )
            result = await analysis_client.submit_inquiry(
                enquiry.to_downstream_payload(), correlation_id
            )
        except SiteError as e:
            metrics.api_errors_total.labels(endpoint=ENDPOINT, error_type=e.error_code).inc()
            raise
        except Exception as e:
            logger.error(f"Unexpected error submitting enquiry: {e}", exc_info=True)
            metrics.api_errors_total.labels(endpoint=ENDPOINT, error_type="unknown").inc()
            raise_unknown_error(
                service=SERVICE,
                operation="submit_enquiry",
                message="Failed to submit enquiry",
                correlation_id=correlation_id,
                error_type=type(e).__name__,
            )

        return JSONResponse(content=result)

    return router
