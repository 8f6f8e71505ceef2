"""
Shared fixtures for the LMGHI API tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from lmghi_api.core.config import settings
from lmghi_api.core.database import get_db
from lmghi_api.core.rate_limit import reset_memory_store
from lmghi_api.main import app

ADMIN_SECRET = "s3cret-admin-token"


@pytest.fixture(autouse=True)
def clear_rate_limits():
    """Each test starts with an empty in-memory rate limit window."""
    reset_memory_store()
    yield
    reset_memory_store()


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.rollback = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def admin_secret(monkeypatch):
    """Configure the admin shared secret."""
    monkeypatch.setattr(settings, "admin_dash_token", ADMIN_SECRET)
    return ADMIN_SECRET


@pytest.fixture
def client(mock_db):
    """TestClient with the database dependency replaced by the mock session."""

    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app, follow_redirects=False)
    yield test_client
    app.dependency_overrides.clear()
