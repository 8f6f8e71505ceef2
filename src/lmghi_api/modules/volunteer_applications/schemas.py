"""
Volunteer Applications Schemas

Pydantic schemas for request validation and response serialization.
The public API speaks camelCase (``fullName``, ``cvUrl``); the admin API
returns rows with the database column names.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# Re-use enums from models (they work with Pydantic too!)
from lmghi_api.modules.volunteer_applications.models import ApplicationStatus

# Tracks offered by the Get Involved form. The API also accepts free text.
VOLUNTEER_TRACKS = [
    "Community Outreach",
    "Data Collection",
    "Program Support",
    "Clinical Support",
    "Media / Communications",
]


class VolunteerApplicationCreate(BaseModel):
    """Request body for POST /api/volunteer.

    Required fields are declared optional here so that a missing name or
    email is reported by the service as a ``validation`` stage failure.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    full_name: str | None = Field(None, alias="fullName", max_length=200)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    track: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    city: str | None = Field(None, max_length=100)
    availability: str | None = Field(None, max_length=2000)
    motivation: str | None = Field(None, max_length=5000)
    cv_url: str | None = Field(None, alias="cvUrl", max_length=2048)
    turnstile_token: str | None = Field(None, alias="turnstileToken", max_length=4096)

    @field_validator(
        "full_name",
        "email",
        "phone",
        "track",
        "country",
        "city",
        "availability",
        "motivation",
        "cv_url",
        "turnstile_token",
        mode="before",
    )
    @classmethod
    def coerce_scalars(cls, value):
        """Numbers are accepted as text; other non-string values are left for pydantic."""
        if isinstance(value, bool):
            return value
        if isinstance(value, int | float):
            return str(value)
        return value

    @field_validator(
        "full_name",
        "email",
        "phone",
        "track",
        "country",
        "city",
        "availability",
        "motivation",
        "cv_url",
        "turnstile_token",
    )
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        return value or None


class ValidatedApplication(BaseModel):
    """Normalized applicant data ready to be persisted."""

    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = None
    role_interest: str | None = None
    country: str | None = None
    city: str | None = None
    availability: str | None = None
    motivation: str | None = None
    cv_url: str | None = None


class IntakeResponse(BaseModel):
    """JSON envelope returned by the public intake endpoints."""

    ok: bool
    status: int
    stage: str | None = None
    message: str | None = None
    id: UUID | None = None
    warning: str | None = None


class UploadResponse(BaseModel):
    """Response after relaying a CV to object storage."""

    ok: bool
    status: int
    url: str | None = None
    stage: str | None = None
    message: str | None = None


# ============================================
# Admin Schemas
# ============================================


class ApplicationRecord(BaseModel):
    """A volunteer application as shown to admins."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    full_name: str
    email: str
    phone: str | None = None
    role_interest: str | None = None
    country: str | None = None
    city: str | None = None
    availability: str | None = None
    motivation: str | None = None
    cv_url: str | None = None
    status: ApplicationStatus


class ApplicationListResponse(BaseModel):
    """Response for GET /api/admin/applications."""

    ok: bool
    data: list[ApplicationRecord] | None = None
    message: str | None = None


class StatusUpdateRequest(BaseModel):
    """Request body for PATCH /api/admin/applications.

    Both fields are loosely typed so bad values are reported as a 400
    with the admin envelope rather than a framework validation error.
    """

    id: str | None = None
    status: str | None = None


class AdminActionResponse(BaseModel):
    """Response for admin write operations."""

    ok: bool
    message: str | None = None
