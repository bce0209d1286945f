"""FastAPI middleware components.

This package contains the auth token transport helpers (cookie and bearer
header) shared by the dependencies and the user router.
"""

from freight_api.src.middleware.auth import (
    clear_auth_cookie,
    create_auth_error,
    create_forbidden_error,
    extract_token,
    set_auth_cookie,
)

__all__ = [
    "clear_auth_cookie",
    "create_auth_error",
    "create_forbidden_error",
    "extract_token",
    "set_auth_cookie",
]
