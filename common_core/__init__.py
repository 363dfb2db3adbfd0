"""
Common Core Package.

Shared enums and pure data models used by the site gateway and its libraries.
"""

from .config_enums import Environment
from .error_enums import ErrorCode
from .models.error_models import ErrorDetail

__all__ = ["Environment", "ErrorCode", "ErrorDetail"]
