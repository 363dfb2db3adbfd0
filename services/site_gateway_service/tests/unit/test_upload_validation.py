"""Unit tests for archive upload checks."""

from __future__ import annotations

import io
from uuid import uuid4

import pytest
from starlette.datastructures import Headers, UploadFile
from starlette.requests import Request

from common_core.config_enums import Environment
from services.site_gateway_service.config import Settings
from services.site_gateway_service.upload_validation import (
    is_archive_upload,
    limit_request_body,
    normalize_content_type,
    read_upload_within_limit,
)
from site_service_libs.error_handling import SiteError


def make_upload(filename: str, content_type: str | None, content: bytes = b"PK") -> UploadFile:
    headers = Headers({"content-type": content_type}) if content_type else Headers({})
    return UploadFile(file=io.BytesIO(content), filename=filename, headers=headers)


@pytest.fixture
def settings() -> Settings:
    return Settings(ENVIRONMENT=Environment.TESTING)


def test_normalize_content_type_strips_parameters() -> None:
    assert normalize_content_type("Application/ZIP; charset=binary") == "application/zip"
    assert normalize_content_type(None) == ""


@pytest.mark.parametrize(
    "filename, content_type, accepted",
    [
        ("app.zip", "application/zip", True),
        ("app.zip", "application/x-zip-compressed", True),
        ("app", "application/x-zip", True),
        ("app.zip", "multipart/x-zip", True),
        ("APP.ZIP", "application/octet-stream", True),
        ("app.tar", "application/octet-stream", False),
        ("app.zip", "text/plain", False),
        ("app.zip", None, False),
    ],
)
def test_archive_detection(
    settings: Settings, filename: str, content_type: str | None, accepted: bool
) -> None:
    assert is_archive_upload(make_upload(filename, content_type), settings) is accepted


@pytest.mark.asyncio
async def test_read_within_limit_returns_content() -> None:
    upload = make_upload("app.zip", "application/zip", b"PK" * 100)

    content = await read_upload_within_limit(upload, 200, uuid4())

    assert content == b"PK" * 100


@pytest.mark.asyncio
async def test_read_over_limit_raises_payload_too_large() -> None:
    upload = make_upload("app.zip", "application/zip", b"x" * 201)

    with pytest.raises(SiteError) as exc_info:
        await read_upload_within_limit(upload, 200, uuid4())

    assert exc_info.value.error_code == "PAYLOAD_TOO_LARGE"


def chunked_request(chunks: list[bytes]) -> tuple[Request, list[int]]:
    """A request with no Content-Length whose body arrives in the given chunks."""
    delivered: list[int] = []
    pending = list(chunks)

    async def receive() -> dict:
        chunk = pending.pop(0)
        delivered.append(len(chunk))
        return {"type": "http.request", "body": chunk, "more_body": bool(pending)}

    scope = {"type": "http", "method": "POST", "path": "/api/analyze-mule", "headers": []}
    return Request(scope, receive=receive), delivered


@pytest.mark.asyncio
async def test_limited_body_passes_through_under_ceiling() -> None:
    tight = Settings(
        ENVIRONMENT=Environment.TESTING, MAX_UPLOAD_SIZE_BYTES=100, MULTIPART_OVERHEAD_BYTES=20
    )
    request, _ = chunked_request([b"a" * 60, b"b" * 60])

    body = await limit_request_body(request, tight, uuid4()).body()

    assert body == b"a" * 60 + b"b" * 60


@pytest.mark.asyncio
async def test_limited_body_stops_receiving_past_ceiling() -> None:
    tight = Settings(
        ENVIRONMENT=Environment.TESTING, MAX_UPLOAD_SIZE_BYTES=100, MULTIPART_OVERHEAD_BYTES=20
    )
    request, delivered = chunked_request([b"x" * 64] * 10)

    with pytest.raises(SiteError) as exc_info:
        await limit_request_body(request, tight, uuid4()).body()

    assert exc_info.value.error_code == "PAYLOAD_TOO_LARGE"
    assert delivered == [64, 64]
