"""Frontend routes: SEO files and the SPA catch-all.

This router must be included last so that API routes take precedence.
"""

from __future__ import annotations

from uuid import UUID

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Request
from starlette.responses import Response

from services.site_gateway_service.protocols import FrontendAssetsProtocol

router = APIRouter(include_in_schema=False)


@router.get("/robots.txt", response_model=None)
@inject
async def robots_txt(
    frontend: FromDishka[FrontendAssetsProtocol],
    correlation_id: FromDishka[UUID],
) -> Response:
    return await frontend.serve_file("robots.txt", correlation_id)


@router.get("/sitemap.xml", response_model=None)
@inject
async def sitemap_xml(
    frontend: FromDishka[FrontendAssetsProtocol],
    correlation_id: FromDishka[UUID],
) -> Response:
    return await frontend.serve_file("sitemap.xml", correlation_id)


@router.get("/{full_path:path}", response_model=None)
@inject
async def serve_spa(
    full_path: str,
    request: Request,
    frontend: FromDishka[FrontendAssetsProtocol],
    correlation_id: FromDishka[UUID],
) -> Response:
    """Serve a bundle file, or the SPA index for client-side routes."""
    return await frontend.serve_path(full_path, request.url.query, correlation_id)
