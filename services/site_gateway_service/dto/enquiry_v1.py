"""Enquiry (contact form) DTOs.

The contact form has shipped under two field spellings over time; both are
accepted and forwarded under the canonical downstream names.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

REQUIRED_FIELDS = ("name", "email")


class EnquiryRequestV1(BaseModel):
    """Enquiry as submitted by the browser.

    Every field is optional at parse time so that missing required fields can
    be reported through the gateway's own 400 envelope.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    name: str | None = None
    email: str | None = None
    company: str | None = Field(
        default=None,
        validation_alias=AliasChoices("company", "companyName"),
        serialization_alias="company",
    )
    your_role: str | None = Field(
        default=None,
        validation_alias=AliasChoices("yourRole", "role"),
        serialization_alias="yourRole",
    )
    application_size: str | None = Field(
        default=None,
        validation_alias=AliasChoices("applicationSize", "appSize"),
        serialization_alias="applicationSize",
    )
    requirements: str | None = Field(
        default=None,
        validation_alias=AliasChoices("requirements", "message"),
        serialization_alias="requirements",
    )

    def missing_required_fields(self) -> list[str]:
        return [field for field in REQUIRED_FIELDS if not getattr(self, field)]

    def to_downstream_payload(self) -> dict[str, Any]:
        """Canonical payload for the inquiry endpoint; absent fields are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)
