"""Configuration utilities for site services."""

from .service_base import ServiceSettings

__all__ = ["ServiceSettings"]
