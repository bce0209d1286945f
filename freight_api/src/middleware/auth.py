"""
JWT transport helpers for FastAPI.

Provides:
- Token extraction from the auth cookie or the Authorization header
- Setting and clearing the HTTP-only auth cookie
- Standardized 401/403 errors
"""

import structlog
from typing import Optional
from fastapi import HTTPException, Request, Response, status

from freight_api.src.config import get_settings

logger = structlog.get_logger(__name__)


def extract_token(request: Request) -> Optional[str]:
    """
    Extract the JWT from a request.

    The auth cookie wins over the Authorization header; the header must use
    the Bearer scheme.

    Args:
        request: HTTP request

    Returns:
        JWT token or None if not found
    """
    settings = get_settings()

    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token

    authorization = request.headers.get("Authorization")
    if not authorization:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("auth_malformed_header", scheme=parts[0] if parts else None)
        return None

    return parts[1]


def set_auth_cookie(response: Response, token: str) -> None:
    """
    Attach the token as an HTTP-only cookie.

    The cookie lives as long as the token and is only sent over HTTPS in
    production.
    """
    settings = get_settings()
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.jwt_access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite=settings.auth_cookie_samesite,
    )


def clear_auth_cookie(response: Response) -> None:
    """Expire the auth cookie immediately."""
    settings = get_settings()
    response.set_cookie(
        key=settings.auth_cookie_name,
        value="",
        max_age=0,
        expires=0,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite=settings.auth_cookie_samesite,
    )


# ============================================================================
# AUTHENTICATION ERRORS
# ============================================================================


def create_auth_error(detail: str = "Unauthorized") -> HTTPException:
    """
    Create standardized authentication error (401).

    Args:
        detail: Error detail message

    Returns:
        HTTPException with 401 status
    """
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def create_forbidden_error(detail: str = "Forbidden: Admins only") -> HTTPException:
    """
    Create standardized forbidden error (403).

    Args:
        detail: Error detail message

    Returns:
        HTTPException with 403 status
    """
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=detail
    )
