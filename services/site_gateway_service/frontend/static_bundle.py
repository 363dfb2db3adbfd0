"""Serve the prebuilt single-page application bundle from disk."""

from __future__ import annotations

from pathlib import Path
from uuid import UUID

from fastapi.responses import FileResponse
from starlette.responses import Response

from site_service_libs.error_handling import raise_resource_not_found
from site_service_libs.logging_utils import create_service_logger

logger = create_service_logger("site_gateway.frontend.static")

INDEX_DOCUMENT = "index.html"


class StaticBundleFrontend:
    """Files from the build directory, with SPA fallback to ``index.html``."""

    def __init__(self, static_dir: Path) -> None:
        self._static_dir = static_dir.resolve()

    def _resolve_file(self, relative_path: str) -> Path | None:
        """Map a request path to a file inside the build directory, if any."""
        relative_path = relative_path.lstrip("/")
        if not relative_path:
            return None
        try:
            candidate = (self._static_dir / relative_path).resolve()
            # Never serve anything outside the build directory
            if not candidate.is_relative_to(self._static_dir):
                logger.warning("Rejected path outside static dir", path=relative_path)
                return None
            return candidate if candidate.is_file() else None
        except (ValueError, OSError):
            # NUL bytes, over-long names and the like cannot name a bundle file
            logger.warning("Rejected unusable path", path=relative_path)
            return None

    async def serve_path(self, path: str, query: str, correlation_id: UUID) -> Response:
        """Serve a bundle file, or the index document for client-side routes."""
        asset = self._resolve_file(path)
        if asset is not None:
            return FileResponse(asset)

        index_path = self._static_dir / INDEX_DOCUMENT
        if index_path.is_file():
            return FileResponse(index_path, media_type="text/html")

        logger.warning(
            f"Could not find {INDEX_DOCUMENT} in {self._static_dir}",
            requested_path=path,
        )
        raise_resource_not_found(
            service="site_gateway_service",
            operation="serve_spa",
            resource_type="Frontend document",
            resource_id=INDEX_DOCUMENT,
            correlation_id=correlation_id,
            static_dir=str(self._static_dir),
        )

    async def serve_file(self, file_name: str, correlation_id: UUID) -> Response:
        """Serve a fixed top-level file such as robots.txt; 404 if absent."""
        asset = self._resolve_file(file_name)
        if asset is None:
            logger.warning(f"Static file not found: {file_name}", static_dir=str(self._static_dir))
            raise_resource_not_found(
                service="site_gateway_service",
                operation="serve_file",
                resource_type="File",
                resource_id=file_name,
                correlation_id=correlation_id,
            )
        return FileResponse(asset)

    def health_checks(self) -> dict[str, bool]:
        return {
            "static_dir_exists": self._static_dir.is_dir(),
            "index_exists": (self._static_dir / INDEX_DOCUMENT).is_file(),
            "assets_dir_exists": (self._static_dir / "assets").is_dir(),
        }
