"""Frontend asset serving strategies.

``StaticBundleFrontend`` serves the prebuilt bundle; ``DevServerFrontend``
relays to the live Vite dev server. One of them is chosen at startup.
"""

from services.site_gateway_service.frontend.dev_server import DevServerFrontend
from services.site_gateway_service.frontend.static_bundle import StaticBundleFrontend

__all__ = ["DevServerFrontend", "StaticBundleFrontend"]
