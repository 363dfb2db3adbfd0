"""HTTP clients for services the Site Gateway depends on."""

from services.site_gateway_service.clients.analysis_service_client import AnalysisServiceClientImpl

__all__ = ["AnalysisServiceClientImpl"]
