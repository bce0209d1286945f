"""
Dependencies for the web client: the shared API client and session state.

The API token lives in an HTTP-only cookie on the web client. Protected pages
resolve the current user through ``GET /users/profile``; when that fails the
visitor is redirected to the login page. Admin pages send everyone else home.
"""

import structlog
from functools import lru_cache
from typing import Optional
from fastapi import Depends, Request

from freight_web.src.client import ApiClient, ApiError
from freight_web.src.config import get_settings

logger = structlog.get_logger(__name__)


class RedirectRequired(Exception):
    """Raised by page dependencies to short-circuit into a redirect."""

    def __init__(self, location: str):
        super().__init__(location)
        self.location = location


@lru_cache()
def get_api_client() -> ApiClient:
    """Process-wide API client so the GET throttle is shared across requests."""
    settings = get_settings()
    return ApiClient(
        base_url=settings.api_base_url,
        timeout=settings.api_timeout_seconds,
        throttle_seconds=settings.api_throttle_seconds
    )


def get_token(request: Request) -> Optional[str]:
    return request.cookies.get(get_settings().auth_cookie_name) or None


def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
) -> Optional[dict]:
    """Profile of the signed-in visitor, or None. Used for navigation state."""
    if not token:
        request.state.user = None
        return None

    try:
        user = client.get("/users/profile", token=token).get("user")
    except ApiError as e:
        logger.info("web_session_invalid", status_code=e.status_code)
        user = None

    request.state.user = user
    return user


def get_current_user(user: Optional[dict] = Depends(get_optional_user)) -> dict:
    if not user:
        raise RedirectRequired("/login")
    return user


def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if user.get("role") != "admin":
        logger.warning("web_admin_page_denied", user_id=user.get("_id"))
        raise RedirectRequired("/")
    return user
