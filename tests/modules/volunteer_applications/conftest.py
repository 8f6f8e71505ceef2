"""
Fixtures for volunteer applications tests.
"""

from datetime import UTC, datetime
from uuid import uuid4

import pytest

from lmghi_api.core.config import settings
from lmghi_api.modules.volunteer_applications.models import (
    ApplicationStatus,
    VolunteerApplication,
)


@pytest.fixture
def turnstile_configured(monkeypatch):
    monkeypatch.setattr(settings, "turnstile_secret_key", "turnstile-secret")


@pytest.fixture
def sample_payload():
    """A complete submission as sent by the Get Involved form."""
    return {
        "fullName": "  Ada Mensah ",
        "email": "ada@lmghi.org",
        "phone": "+233 20 000 0000",
        "track": "Community Outreach",
        "country": "Ghana",
        "city": "Accra",
        "availability": "Weekends",
        "motivation": "I want to help.\nI have outreach experience.",
        "cvUrl": "https://files.lmghi.org/volunteers/1700000000000_cv.pdf",
        "turnstileToken": "tok-123",
    }


@pytest.fixture
def sample_application():
    """A persisted application row."""
    return VolunteerApplication(
        id=uuid4(),
        full_name="Ada Mensah",
        email="ada@lmghi.org",
        phone="+233 20 000 0000",
        role_interest="Community Outreach",
        country="Ghana",
        city="Accra",
        availability="Weekends",
        motivation="I want to help.",
        cv_url=None,
        status=ApplicationStatus.PENDING,
        created_at=datetime(2026, 10, 1, 9, 30, tzinfo=UTC),
        updated_at=datetime(2026, 10, 1, 9, 30, tzinfo=UTC),
    )
