"""
Shared pytest fixtures.

Environment overrides are applied before any application module is imported
so the cached settings pick them up: rate limiting is off and bcrypt uses
the minimum cost factor to keep hashing fast.
"""

import os

os.environ.setdefault("FREIGHT_API_RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("FREIGHT_API_PASSWORD_BCRYPT_ROUNDS", "4")
os.environ.setdefault("FREIGHT_API_LOG_FORMAT", "text")
os.environ.setdefault("FREIGHT_WEB_LOG_FORMAT", "text")
os.environ.setdefault("FREIGHT_WEB_API_THROTTLE_SECONDS", "0")

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from bson import ObjectId

from freight_api.src.models.auth import CurrentUser, Role


# ============================================================================
# IDS AND USERS
# ============================================================================


ADMIN_ID = ObjectId("64b7f0c2a1b2c3d4e5f60001")
CUSTOMER_ID = ObjectId("64b7f0c2a1b2c3d4e5f60002")
OTHER_CUSTOMER_ID = ObjectId("64b7f0c2a1b2c3d4e5f60003")


@pytest.fixture
def now():
    return datetime(2024, 7, 19, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def admin_user():
    return CurrentUser(_id=ADMIN_ID, name="Ops Admin", email="admin@freight.example.com", role=Role.ADMIN)


@pytest.fixture
def customer_user():
    return CurrentUser(
        _id=CUSTOMER_ID,
        name="Jane Shipper",
        email="jane@shipper.example.com",
        role=Role.CUSTOMER,
        phone="+14155550100",
        company_name="Shipper Co",
    )


@pytest.fixture
def other_customer():
    return CurrentUser(_id=OTHER_CUSTOMER_ID, name="Other", email="other@shipper.example.com")


# ============================================================================
# API APPLICATION
# ============================================================================


@pytest.fixture
def api_app():
    """The API app with dependency overrides reset after each test."""
    from freight_api.src.main import app

    app.dependency_overrides.clear()
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api_app):
    """
    Test client without the lifespan (no MongoDB connection).

    Server errors are returned as responses so the 500 envelope can be checked.
    """
    from fastapi.testclient import TestClient

    return TestClient(api_app, raise_server_exceptions=False)


@pytest.fixture
def login_as(api_app):
    """Override authentication with the given user (None for anonymous)."""
    from freight_api.src.dependencies import get_current_user, get_optional_user
    from freight_api.src.middleware.auth import create_auth_error

    def _login(user):
        async def current_user():
            if user is None:
                raise create_auth_error("Unauthorized: Token not found")
            return user

        async def optional_user():
            return user

        api_app.dependency_overrides[get_current_user] = current_user
        api_app.dependency_overrides[get_optional_user] = optional_user
        return user

    return _login


@pytest.fixture
def override_repo(api_app):
    """Replace a repository provider with an AsyncMock repository."""

    def _override(provider, repo=None):
        repo = repo or AsyncMock()
        api_app.dependency_overrides[provider] = lambda: repo
        return repo

    return _override
