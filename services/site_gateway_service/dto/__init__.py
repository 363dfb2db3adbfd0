"""Request/response DTOs for the Site Gateway API."""

from services.site_gateway_service.dto.enquiry_v1 import EnquiryRequestV1

__all__ = ["EnquiryRequestV1"]
