"""
FastAPI dependency injection for database, authentication, and authorization.

Provides injectable dependencies for:
- The MongoDB database handle
- Repository instances
- User authentication (JWT from cookie or bearer header)
- Authorization (admin role gate)
- Request metadata

All dependencies use FastAPI's dependency injection system and are designed
to be overridable in tests via ``app.dependency_overrides``.
"""

import structlog
from typing import Optional
from fastapi import Depends, Request
from pymongo.asynchronous.database import AsyncDatabase

from freight_api.src import database
from freight_api.src.middleware.auth import (
    create_auth_error, create_forbidden_error, extract_token
)
from freight_api.src.models.auth import CurrentUser
from freight_api.src.repositories.catalog_repo import (
    ContainerTypeRepository, GoodsTypeRepository, LocationRepository, ServiceRepository
)
from freight_api.src.repositories.contact_repo import ContactMessageRepository
from freight_api.src.repositories.quote_repo import QuoteRepository
from freight_api.src.repositories.shipment_repo import ShipmentRepository, TrackingEventRepository
from freight_api.src.repositories.user_repo import UserRepository
from freight_api.src.services.auth_service import AuthService

logger = structlog.get_logger(__name__)


# ============================================================================
# DATABASE
# ============================================================================


def get_db() -> AsyncDatabase:
    """
    Get the application database.

    The client itself is created once in the application lifespan.

    Example:
        @app.get("/things")
        async def list_things(db: AsyncDatabase = Depends(get_db)):
            return await db["things"].find().to_list(length=None)
    """
    return database.get_database()


# ============================================================================
# REPOSITORY DEPENDENCIES
# ============================================================================


def get_user_repository(db: AsyncDatabase = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_location_repository(db: AsyncDatabase = Depends(get_db)) -> LocationRepository:
    return LocationRepository(db)


def get_container_repository(db: AsyncDatabase = Depends(get_db)) -> ContainerTypeRepository:
    return ContainerTypeRepository(db)


def get_goods_repository(db: AsyncDatabase = Depends(get_db)) -> GoodsTypeRepository:
    return GoodsTypeRepository(db)


def get_service_repository(db: AsyncDatabase = Depends(get_db)) -> ServiceRepository:
    return ServiceRepository(db)


def get_quote_repository(db: AsyncDatabase = Depends(get_db)) -> QuoteRepository:
    return QuoteRepository(db)


def get_shipment_repository(db: AsyncDatabase = Depends(get_db)) -> ShipmentRepository:
    return ShipmentRepository(db)


def get_tracking_repository(db: AsyncDatabase = Depends(get_db)) -> TrackingEventRepository:
    return TrackingEventRepository(db)


def get_contact_repository(db: AsyncDatabase = Depends(get_db)) -> ContactMessageRepository:
    return ContactMessageRepository(db)


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository)
) -> AuthService:
    """
    Get authentication service with the request's user repository.

    Returns:
        Authentication service
    """
    return AuthService(user_repo)


# ============================================================================
# AUTHENTICATION DEPENDENCIES
# ============================================================================


async def get_current_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
) -> CurrentUser:
    """
    Get current authenticated user from the JWT cookie or bearer header.

    The user is attached to ``request.state.user`` for logging.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired, or
            the user no longer exists

    Example:
        @app.get("/profile")
        async def get_profile(user: CurrentUser = Depends(get_current_user)):
            return user.to_profile()
    """
    token = extract_token(request)

    if not token:
        logger.warning("auth_missing_token", path=request.url.path)
        raise create_auth_error("Unauthorized: Token not found")

    current_user = await auth_service.get_current_user(token)

    if not current_user:
        logger.warning("auth_invalid_token", path=request.url.path)
        raise create_auth_error("Unauthorized: Invalid or expired token")

    request.state.user = current_user

    logger.debug(
        "user_authenticated",
        user_id=current_user.id,
        role=current_user.role.value
    )

    return current_user


async def get_optional_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[CurrentUser]:
    """
    Get current user if authenticated, None otherwise.

    Does not raise for missing/invalid tokens.
    """
    token = extract_token(request)
    if not token:
        return None

    current_user = await auth_service.get_current_user(token)
    if current_user:
        request.state.user = current_user
    return current_user


# ============================================================================
# AUTHORIZATION DEPENDENCIES (ROLE-BASED)
# ============================================================================


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user)
) -> CurrentUser:
    """
    Require admin role.

    Args:
        current_user: Current authenticated user

    Returns:
        Admin user

    Raises:
        HTTPException: 403 if user is not admin

    Example:
        @app.post("/locations")
        async def create_location(admin: CurrentUser = Depends(require_admin)):
            # Only admins can access this
            pass
    """
    if not current_user.is_admin():
        logger.warning(
            "access_denied_admin_required",
            user_id=current_user.id,
            role=current_user.role.value
        )
        raise create_forbidden_error()

    logger.debug("admin_access_granted", user_id=current_user.id)

    return current_user


# ============================================================================
# UTILITY DEPENDENCIES
# ============================================================================


async def get_client_ip(request: Request) -> str:
    """
    Get client IP address from request.

    Checks X-Forwarded-For header first (for proxies),
    then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, get the first one
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"
