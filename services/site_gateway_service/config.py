"""Configuration for Site Gateway Service.

Uses Pydantic settings for environment-based configuration. A single
``Settings`` instance is built at startup and handed to the application
factory; everything else receives it through dependency injection.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import SettingsConfigDict

from common_core.config_enums import Environment
from site_service_libs.config import ServiceSettings


class Settings(ServiceSettings):
    """Configuration settings for Site Gateway Service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SITE_GATEWAY_",
        case_sensitive=False,
        extra="ignore",
    )

    # Service identity
    SERVICE_NAME: str = "site-gateway-service"
    APP_NAME: str = Field(default="Aaryati Technologies", description="Public application name")
    APP_VERSION: str = Field(default="1.0.0", description="Reported by /api/version")

    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias="ENVIRONMENT",
        description="Runtime environment for the service",
    )

    # HTTP server configuration
    HOST: str = Field(default="0.0.0.0", description="HTTP server host")
    PORT: int = Field(
        default=3080,
        description="HTTP server port",
        validation_alias=AliasChoices("SITE_GATEWAY_PORT", "PORT"),
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Frontend serving
    STATIC_DIR: Path = Field(
        default=Path("dist/public"),
        description="Directory containing the built frontend bundle",
    )
    FRONTEND_DEV_SERVER_URL: str = Field(
        default="http://localhost:5173",
        description="Vite dev server relayed to in development",
    )

    # CORS configuration
    CORS_ORIGINS: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:4173", "http://localhost:3000"],
        description="Allowed CORS origins",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(
        default=True, description="Allow credentials in CORS requests"
    )
    CORS_ALLOW_METHODS: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        description="Allowed HTTP methods for CORS",
    )
    CORS_ALLOW_HEADERS: list[str] = Field(
        default=["*"], description="Allowed headers for CORS requests"
    )

    # Downstream analysis service
    ANALYSIS_SERVICE_URL: str = Field(
        default="http://localhost:8080",
        description="Base URL of the external Mule analysis API",
        validation_alias=AliasChoices("SITE_GATEWAY_ANALYSIS_SERVICE_URL", "ANALYSIS_SERVICE_URL"),
    )
    ANALYZE_PATH: str = "/api/analyze"
    EXPORT_CSV_PATH: str = "/api/export-csv"
    INQUIRY_PATH: str = "/api/inquiry"

    # HTTP client timeouts
    HTTP_CLIENT_TIMEOUT_SECONDS: float = 30.0
    HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS: float = 10.0
    ANALYZE_TIMEOUT_SECONDS: float = Field(
        default=300.0, description="Archive analysis can take minutes downstream"
    )
    EXPORT_TIMEOUT_SECONDS: float = Field(
        default=120.0, description="Upper bound for the CSV export call"
    )
    INQUIRY_TIMEOUT_SECONDS: float = Field(
        default=30.0, description="Enquiry submission is a lightweight write"
    )

    # Upload constraints
    UPLOAD_FIELD_NAME: str = "muleApp"
    MAX_UPLOAD_SIZE_BYTES: int = Field(
        default=50 * 1024 * 1024, description="Maximum accepted archive size"
    )
    MULTIPART_OVERHEAD_BYTES: int = Field(
        default=64 * 1024,
        description="Allowance for multipart boundaries and headers in Content-Length checks",
    )
    ALLOWED_ARCHIVE_CONTENT_TYPES: list[str] = Field(
        default=[
            "application/zip",
            "application/x-zip-compressed",
            "application/x-zip",
            "multipart/x-zip",
        ],
        description="Content types accepted as archives",
    )

    # Rate limiting
    ANALYZE_RATE_LIMIT: str = Field(default="10/minute", description="Analyze/export limit")
    ENQUIRY_RATE_LIMIT: str = Field(default="5/minute", description="Enquiry limit")

    @property
    def analyze_url(self) -> str:
        return f"{self.ANALYSIS_SERVICE_URL.rstrip('/')}{self.ANALYZE_PATH}"

    @property
    def export_csv_url(self) -> str:
        return f"{self.ANALYSIS_SERVICE_URL.rstrip('/')}{self.EXPORT_CSV_PATH}"

    @property
    def inquiry_url(self) -> str:
        return f"{self.ANALYSIS_SERVICE_URL.rstrip('/')}{self.INQUIRY_PATH}"


# Global settings instance
settings = Settings()
