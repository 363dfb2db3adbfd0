"""Tests for the archive upload and analysis proxy route.

The analysis service is mocked with respx; every client-side rejection must
happen without any outbound call.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from uuid import uuid4

import httpx
import pytest
from httpx import AsyncClient, Response
from respx import MockRouter

from services.site_gateway_service.config import Settings

ANALYSIS_URL = "http://analysis.test"
ANALYZE_URL = f"{ANALYSIS_URL}/api/analyze"
ZIP_BYTES = b"PK\x03\x04" + b"\x00" * 64


@pytest.mark.asyncio
async def test_analysis_result_returned_unmodified(
    client: AsyncClient, respx_mock: MockRouter
) -> None:
    downstream_body = b'{"applicationName": "orders-api",   "flows": 12, "complexity": "Medium"}'
    route = respx_mock.post(ANALYZE_URL).mock(
        return_value=Response(
            200, content=downstream_body, headers={"Content-Type": "application/json"}
        )
    )

    response = await client.post(
        "/api/analyze-mule",
        files={"muleApp": ("orders-api.zip", ZIP_BYTES, "application/zip")},
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.content == downstream_body
    assert route.call_count == 1

    forwarded = route.calls.last.request
    assert b'name="file"; filename="orders-api.zip"' in forwarded.content
    assert ZIP_BYTES in forwarded.content
    assert forwarded.headers["X-Service-ID"] == "site-gateway-service"


@pytest.mark.asyncio
async def test_octet_stream_zip_is_accepted(client: AsyncClient, respx_mock: MockRouter) -> None:
    respx_mock.post(ANALYZE_URL).mock(return_value=Response(200, json={"flows": 1}))

    response = await client.post(
        "/api/analyze-mule",
        files={"muleApp": ("app.zip", ZIP_BYTES, "application/octet-stream")},
    )

    assert response.status_code == 200
    assert response.json() == {"flows": 1}


@pytest.mark.asyncio
@pytest.mark.respx(assert_all_called=False)
@pytest.mark.parametrize(
    "file_name, content_type",
    [
        ("notes.txt", "text/plain"),
        ("app.jar", "application/java-archive"),
        ("app.bin", "application/octet-stream"),
    ],
)
async def test_non_archive_upload_rejected_without_forwarding(
    client: AsyncClient, respx_mock: MockRouter, file_name: str, content_type: str
) -> None:
    route = respx_mock.post(ANALYZE_URL).mock(return_value=Response(200, json={}))

    response = await client.post(
        "/api/analyze-mule",
        files={"muleApp": (file_name, b"not an archive", content_type)},
    )

    assert response.status_code == 400
    assert "ZIP" in response.json()["error"]
    assert not route.called


@pytest.mark.asyncio
@pytest.mark.respx(assert_all_called=False)
async def test_missing_file_field_rejected(client: AsyncClient, respx_mock: MockRouter) -> None:
    route = respx_mock.post(ANALYZE_URL).mock(return_value=Response(200, json={}))

    response = await client.post(
        "/api/analyze-mule",
        files={"archive": ("app.zip", ZIP_BYTES, "application/zip")},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}
    assert not route.called


@pytest.mark.asyncio
@pytest.mark.respx(assert_all_called=False)
async def test_oversized_upload_rejected_by_declared_length(
    client_for: Callable[[Settings], AsyncClient],
    make_settings: Callable[..., Settings],
    respx_mock: MockRouter,
) -> None:
    client = client_for(make_settings(MAX_UPLOAD_SIZE_BYTES=1024, MULTIPART_OVERHEAD_BYTES=256))
    route = respx_mock.post(ANALYZE_URL).mock(return_value=Response(200, json={}))

    response = await client.post(
        "/api/analyze-mule",
        files={"muleApp": ("big.zip", b"PK" + b"x" * 8192, "application/zip")},
    )

    assert response.status_code == 413
    assert "exceeds maximum" in response.json()["error"]
    assert not route.called


@pytest.mark.asyncio
@pytest.mark.respx(assert_all_called=False)
async def test_oversized_upload_rejected_while_reading(
    client_for: Callable[[Settings], AsyncClient],
    make_settings: Callable[..., Settings],
    respx_mock: MockRouter,
) -> None:
    # Declared length passes the pre-check; the part itself is over the ceiling
    client = client_for(make_settings(MAX_UPLOAD_SIZE_BYTES=1024))
    route = respx_mock.post(ANALYZE_URL).mock(return_value=Response(200, json={}))

    response = await client.post(
        "/api/analyze-mule",
        files={"muleApp": ("big.zip", b"PK" + b"x" * 4096, "application/zip")},
    )

    assert response.status_code == 413
    assert not route.called


@pytest.mark.asyncio
@pytest.mark.respx(assert_all_called=False)
async def test_chunked_upload_without_length_stops_at_ceiling(
    client_for: Callable[[Settings], AsyncClient],
    make_settings: Callable[..., Settings],
    respx_mock: MockRouter,
) -> None:
    client = client_for(make_settings(MAX_UPLOAD_SIZE_BYTES=1000, MULTIPART_OVERHEAD_BYTES=1024))
    route = respx_mock.post(ANALYZE_URL).mock(return_value=Response(200, json={}))
    boundary = "gatewayboundary"
    sent_bytes = 0

    async def body() -> AsyncIterator[bytes]:
        nonlocal sent_bytes
        head = (
            f"--{boundary}\r\n"
            'Content-Disposition: form-data; name="muleApp"; filename="big.zip"\r\n'
            "Content-Type: application/zip\r\n\r\n"
        ).encode()
        sent_bytes += len(head)
        yield head
        # 10 MiB in total, never announced through Content-Length
        for _ in range(160):
            sent_bytes += 64 * 1024
            yield b"x" * (64 * 1024)
        yield f"\r\n--{boundary}--\r\n".encode()

    response = await client.post(
        "/api/analyze-mule",
        content=body(),
        headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
    )

    assert response.status_code == 413
    assert response.json() == {"error": "File size exceeds maximum allowed (1000 bytes)"}
    assert sent_bytes < 1024 * 1024
    assert not route.called


@pytest.mark.asyncio
async def test_downstream_error_status_and_message_relayed(
    client: AsyncClient, respx_mock: MockRouter
) -> None:
    respx_mock.post(ANALYZE_URL).mock(
        return_value=Response(503, json={"message": "Analyzer is warming up"})
    )

    response = await client.post(
        "/api/analyze-mule",
        files={"muleApp": ("app.zip", ZIP_BYTES, "application/zip")},
    )

    assert response.status_code == 503
    assert response.json() == {"error": "Analyzer is warming up"}


@pytest.mark.asyncio
async def test_downstream_error_without_message_uses_generic_text(
    client: AsyncClient, respx_mock: MockRouter
) -> None:
    respx_mock.post(ANALYZE_URL).mock(
        return_value=Response(503, text="<html>Service Unavailable</html>")
    )

    response = await client.post(
        "/api/analyze-mule",
        files={"muleApp": ("app.zip", ZIP_BYTES, "application/zip")},
    )

    assert response.status_code == 503
    assert response.json() == {"error": "Failed to analyze Mule application"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [httpx.ConnectError("Connection refused"), httpx.ReadTimeout("Read timed out")],
)
async def test_transport_failures_map_to_500(
    client: AsyncClient, respx_mock: MockRouter, failure: Exception
) -> None:
    respx_mock.post(ANALYZE_URL).mock(side_effect=failure)

    response = await client.post(
        "/api/analyze-mule",
        files={"muleApp": ("app.zip", ZIP_BYTES, "application/zip")},
    )

    assert response.status_code == 500
    assert "currently unavailable" in response.json()["error"]


@pytest.mark.asyncio
async def test_non_json_success_body_is_bad_gateway(
    client: AsyncClient, respx_mock: MockRouter
) -> None:
    respx_mock.post(ANALYZE_URL).mock(return_value=Response(200, text="partial output"))

    response = await client.post(
        "/api/analyze-mule",
        files={"muleApp": ("app.zip", ZIP_BYTES, "application/zip")},
    )

    assert response.status_code == 502
    assert response.json() == {"error": "Analysis service returned an invalid response"}


@pytest.mark.asyncio
async def test_correlation_id_echoed_and_forwarded(
    client: AsyncClient, respx_mock: MockRouter
) -> None:
    correlation_id = str(uuid4())
    route = respx_mock.post(ANALYZE_URL).mock(return_value=Response(200, json={"flows": 2}))

    response = await client.post(
        "/api/analyze-mule",
        files={"muleApp": ("app.zip", ZIP_BYTES, "application/zip")},
        headers={"X-Correlation-ID": correlation_id},
    )

    assert response.headers["X-Correlation-ID"] == correlation_id
    assert route.calls.last.request.headers["X-Correlation-ID"] == correlation_id


@pytest.mark.asyncio
async def test_error_response_carries_correlation_id(client: AsyncClient) -> None:
    response = await client.post("/api/analyze-mule", data={"note": "no file"})

    assert response.status_code == 400
    assert response.headers["X-Correlation-ID"]
