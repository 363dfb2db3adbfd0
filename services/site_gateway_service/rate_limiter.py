from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address


def create_limiter() -> Limiter:
    # Public marketing site: no user identity, so clients are keyed by address.
    # Limits are applied per route; static assets are never limited.
    # Each app gets its own limiter so its counters and limits stay separate.
    return Limiter(key_func=get_remote_address, storage_uri="memory://")
