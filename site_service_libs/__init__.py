"""Shared service utilities for the site backend: logging, settings and error handling."""

from .logging_utils import configure_service_logging, create_service_logger

__all__ = ["configure_service_logging", "create_service_logger"]
