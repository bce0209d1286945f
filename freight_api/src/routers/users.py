"""
User account router.

Provides REST API endpoints for:
- Customer registration and login (token in body and HTTP-only cookie)
- Reading and updating the caller's profile
- Logout (clears the auth cookie)
"""

import structlog
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Response, status

from freight_api.src.dependencies import (
    get_auth_service,
    get_client_ip,
    get_current_user,
    get_optional_user,
    get_user_repository,
)
from freight_api.src.middleware.auth import clear_auth_cookie, set_auth_cookie
from freight_api.src.models.auth import (
    CurrentUser, LoginRequest, RegisterRequest, TokenResponse, UpdateProfileRequest
)
from freight_api.src.models.common import ErrorResponse, serialize_document
from freight_api.src.repositories.base import DuplicateResourceError
from freight_api.src.repositories.user_repo import UserRepository
from freight_api.src.services.auth_service import AuthService

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        400: {"model": ErrorResponse, "description": "Validation Error"},
    }
)


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Customer",
    description="""
    Create a customer account and log it in.

    **Authentication:** Not required (public endpoint)

    The token is returned in the body and also set as an HTTP-only cookie.

    **Error Responses:**
    - 400: Missing fields, invalid email or phone number
    - 409: Email already registered
    """,
    responses={409: {"model": ErrorResponse, "description": "Email already registered"}}
)
async def register(
    register_request: RegisterRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    client_ip: str = Depends(get_client_ip)
) -> TokenResponse:
    logger.info("register_attempt", email=register_request.email, ip_address=client_ip)

    try:
        token, user = await auth_service.register(register_request)
    except DuplicateResourceError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists."
        )

    set_auth_cookie(response, token)
    return auth_service.token_response(token, user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="User Login",
    description="""
    Authenticate with email and password.

    **Authentication:** Not required (public endpoint)

    **Error Responses:**
    - 400: Missing email or password
    - 401: Invalid credentials
    """,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}}
)
async def login(
    login_request: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    client_ip: str = Depends(get_client_ip)
) -> TokenResponse:
    logger.info("login_attempt", email=login_request.email, ip_address=client_ip)

    result = await auth_service.login(login_request)

    if not result:
        logger.warning("login_failed", email=login_request.email, ip_address=client_ip)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials.",
            headers={"WWW-Authenticate": "Bearer"}
        )

    token, user = result
    set_auth_cookie(response, token)
    return auth_service.token_response(token, user)


@router.get("/profile", summary="Get Profile")
async def get_profile(current_user: CurrentUser = Depends(get_current_user)):
    """Return the caller's profile (never includes the password)."""
    return {"success": True, "user": current_user.to_profile()}


@router.put("/profile", summary="Update Profile")
async def update_profile(
    update_request: UpdateProfileRequest,
    current_user: CurrentUser = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repository)
):
    """
    Update name, phone, company name and address.

    Blank or omitted values keep the current value.
    """
    changes = update_request.to_document(partial=True)
    user = await user_repo.update_profile(current_user.id, changes)

    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")

    return {"success": True, "user": serialize_document(user)}


@router.post("/logout", summary="Logout")
async def logout(
    response: Response,
    current_user: Optional[CurrentUser] = Depends(get_optional_user)
):
    """Clear the auth cookie. Works with or without a valid session."""
    clear_auth_cookie(response)
    logger.info("logout", user_id=current_user.id if current_user else None)
    return {"success": True, "message": "Logged out successfully."}
