"""
Fixtures for the web client page tests.

The API client is replaced by a mock whose ``get`` answers from a
path-keyed dict; writes are plain mocks the tests inspect.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from freight_web.src.client import ApiClient, ApiError
from freight_web.src.dependencies import get_api_client
from freight_web.src.main import app


@pytest.fixture
def api_responses():
    """GET responses by API path; an ApiError value is raised instead."""
    return {}


@pytest.fixture
def api(api_responses):
    mock_api = MagicMock(spec=ApiClient)

    def get(path, token=None, params=None, throttle=True):
        result = api_responses.get(path, {})
        if isinstance(result, ApiError):
            raise result
        return result

    mock_api.get.side_effect = get
    mock_api.post.return_value = {"success": True}
    mock_api.put.return_value = {"success": True}
    mock_api.delete.return_value = {"success": True}
    return mock_api


@pytest.fixture
def web(api):
    app.dependency_overrides[get_api_client] = lambda: api
    client = TestClient(app, follow_redirects=False, raise_server_exceptions=False)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def sign_in(web, api_responses):
    """Give the browser a session cookie that resolves to ``profile``."""

    def _sign_in(profile):
        api_responses["/users/profile"] = {"success": True, "user": profile}
        web.cookies.set("token", "session-token")
        return profile

    return _sign_in
