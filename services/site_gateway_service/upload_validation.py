"""Pre-forwarding checks for archive uploads.

Every check here runs before any call to the analysis service is attempted.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import Request
from starlette.datastructures import UploadFile
from starlette.types import Message

from services.site_gateway_service.config import Settings
from site_service_libs.error_handling import raise_payload_too_large, raise_validation_error
from site_service_libs.logging_utils import create_service_logger

logger = create_service_logger("site_gateway.upload_validation")

SERVICE = "site_gateway_service"
READ_CHUNK_SIZE = 1024 * 1024
# Sent by some browsers for .zip files
GENERIC_BINARY_CONTENT_TYPE = "application/octet-stream"


def enforce_declared_size(request: Request, settings: Settings, correlation_id: UUID) -> None:
    """Reject a request whose declared Content-Length cannot fit the size ceiling.

    Runs before the multipart body is parsed, so oversized uploads are refused
    without being buffered.
    """
    declared = request.headers.get("content-length")
    if declared is None or not declared.isdigit():
        return
    limit = settings.MAX_UPLOAD_SIZE_BYTES + settings.MULTIPART_OVERHEAD_BYTES
    if int(declared) > limit:
        logger.warning(
            "Upload rejected by declared size",
            content_length=int(declared),
            limit_bytes=limit,
        )
        raise_payload_too_large(
            service=SERVICE,
            operation="analyze_mule",
            max_size_bytes=settings.MAX_UPLOAD_SIZE_BYTES,
            correlation_id=correlation_id,
            content_length=int(declared),
        )


def limit_request_body(request: Request, settings: Settings, correlation_id: UUID) -> Request:
    """Wrap a request so reading its body stops once the size ceiling is crossed.

    Covers bodies sent without a Content-Length (chunked transfer encoding),
    which the declared-size check cannot see. The returned request must be
    used for form parsing in place of the original.
    """
    limit = settings.MAX_UPLOAD_SIZE_BYTES + settings.MULTIPART_OVERHEAD_BYTES
    received = 0

    async def receive() -> Message:
        nonlocal received
        message = await request.receive()
        if message["type"] == "http.request":
            received += len(message.get("body", b""))
            if received > limit:
                logger.warning(
                    "Upload rejected while receiving",
                    received_bytes=received,
                    limit_bytes=limit,
                )
                raise_payload_too_large(
                    service=SERVICE,
                    operation="analyze_mule",
                    max_size_bytes=settings.MAX_UPLOAD_SIZE_BYTES,
                    correlation_id=correlation_id,
                    received_bytes=received,
                )
        return message

    return Request(request.scope, receive=receive)


def normalize_content_type(content_type: str | None) -> str:
    """Strip parameters and case from a content type header value."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_archive_upload(upload: UploadFile, settings: Settings) -> bool:
    """Check that an upload declares a ZIP archive content type."""
    content_type = normalize_content_type(upload.content_type)
    allowed = {value.lower() for value in settings.ALLOWED_ARCHIVE_CONTENT_TYPES}
    if content_type in allowed:
        return True
    file_name = (upload.filename or "").lower()
    return content_type == GENERIC_BINARY_CONTENT_TYPE and file_name.endswith(".zip")


def ensure_archive_upload(upload: UploadFile, settings: Settings, correlation_id: UUID) -> None:
    if is_archive_upload(upload, settings):
        return
    logger.warning(
        "Upload rejected by content type",
        file_name=upload.filename,
        content_type=upload.content_type,
    )
    raise_validation_error(
        service=SERVICE,
        operation="analyze_mule",
        field=settings.UPLOAD_FIELD_NAME,
        message="Only ZIP files are allowed. Please upload your Mule application as a .zip archive.",
        correlation_id=correlation_id,
        value=upload.content_type,
    )


async def read_upload_within_limit(
    upload: UploadFile, max_size_bytes: int, correlation_id: UUID
) -> bytes:
    """Buffer an upload in memory, stopping as soon as it exceeds the ceiling."""
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_size_bytes:
            logger.warning(
                "Upload rejected while reading",
                file_name=upload.filename,
                read_bytes=total,
                limit_bytes=max_size_bytes,
            )
            raise_payload_too_large(
                service=SERVICE,
                operation="analyze_mule",
                max_size_bytes=max_size_bytes,
                correlation_id=correlation_id,
            )
        chunks.append(chunk)
    return b"".join(chunks)
