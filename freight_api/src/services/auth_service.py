"""
Authentication service for user accounts and JWT token management.

Provides:
- Password hashing and verification (passlib + bcrypt)
- JWT token creation and validation
- Customer registration and credential login
- Resolving the user behind a token
"""

import structlog
from typing import Optional, Tuple
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
from jose import JWTError, jwt

from freight_api.src.config import get_settings
from freight_api.src.models.auth import (
    CurrentUser, LoginRequest, RegisterRequest, Role, TokenPayload, TokenResponse
)
from freight_api.src.repositories.base import DuplicateResourceError
from freight_api.src.repositories.user_repo import UserRepository

logger = structlog.get_logger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, user_repo: UserRepository):
        """
        Initialize auth service.

        Args:
            user_repo: User repository
        """
        self.user_repo = user_repo
        self.settings = get_settings()

        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=self.settings.password_bcrypt_rounds
        )

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password
        """
        try:
            hashed = self.pwd_context.hash(password)
            logger.debug("password_hashed")
            return hashed
        except Exception as e:
            logger.error("password_hash_failed", error=str(e))
            raise

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        try:
            verified = self.pwd_context.verify(plain_password, hashed_password)
            logger.debug("password_verified", verified=verified)
            return verified
        except Exception as e:
            logger.error("password_verify_failed", error=str(e))
            return False

    def create_access_token(
        self,
        user_id: str,
        role: Role,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create JWT access token.

        Args:
            user_id: User ID
            role: User role at issue time
            expires_delta: Custom expiration time (optional)

        Returns:
            JWT token string
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.settings.jwt_access_token_expire_minutes)

        now = datetime.now(timezone.utc)
        expire = now + expires_delta

        payload = {
            "userId": str(user_id),
            "role": Role(role).value,
            "exp": int(expire.timestamp()),
            "iat": int(now.timestamp())
        }

        token = jwt.encode(
            payload,
            self.settings.jwt_secret_key,
            algorithm=self.settings.jwt_algorithm
        )

        logger.info(
            "access_token_created",
            user_id=str(user_id),
            role=payload["role"],
            expires_in=expires_delta.total_seconds()
        )

        return token

    def decode_token(self, token: str) -> Optional[TokenPayload]:
        """
        Decode and validate JWT token.

        Args:
            token: JWT token string

        Returns:
            Token payload or None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm]
            )

            token_payload = TokenPayload(**payload)

            logger.debug("token_decoded", user_id=token_payload.user_id)
            return token_payload

        except JWTError as e:
            logger.warning("token_decode_failed", error=str(e))
            return None
        except Exception as e:
            logger.error("token_decode_error", error=str(e))
            return None

    async def register(self, request: RegisterRequest) -> Tuple[str, CurrentUser]:
        """
        Register a new customer and issue a token.

        Args:
            request: Registration data

        Returns:
            (token, user)

        Raises:
            DuplicateResourceError: If the email is already registered
        """
        if await self.user_repo.get_user_by_email(request.email):
            logger.warning("email_already_exists", email=request.email)
            raise DuplicateResourceError("email")

        document = await self.user_repo.create_user(
            name=request.name,
            email=request.email,
            password_hash=self.hash_password(request.password),
            role=Role.CUSTOMER,
            phone=request.phone,
            company_name=request.company_name,
            address=request.address
        )
        user = CurrentUser(**document)

        logger.info("user_registered", user_id=user.id, email=user.email)
        return self.create_access_token(user.id, user.role), user

    async def authenticate_user(self, login_request: LoginRequest) -> Optional[CurrentUser]:
        """
        Authenticate user with email and password.

        Args:
            login_request: Login credentials

        Returns:
            User if authenticated, None otherwise
        """
        document = await self.user_repo.get_user_with_password(login_request.email)

        if not document:
            logger.warning("authentication_failed_user_not_found", email=login_request.email)
            return None

        if not self.verify_password(login_request.password, document.get("password", "")):
            logger.warning("authentication_failed_invalid_password", email=login_request.email)
            return None

        user = CurrentUser(**document)
        logger.info("user_authenticated", user_id=user.id, email=user.email)
        return user

    async def login(self, login_request: LoginRequest) -> Optional[Tuple[str, CurrentUser]]:
        """
        Login user and create access token.

        Args:
            login_request: Login credentials

        Returns:
            (token, user) or None if authentication failed
        """
        user = await self.authenticate_user(login_request)

        if not user:
            return None

        logger.info("login_success", user_id=user.id, email=user.email)
        return self.create_access_token(user.id, user.role), user

    async def get_current_user(self, token: str) -> Optional[CurrentUser]:
        """
        Get current user from JWT token.

        The user is always re-read from the store, so deleted accounts and
        role changes take effect immediately.

        Args:
            token: JWT token string

        Returns:
            Current user or None if the token is invalid or the user is gone
        """
        payload = self.decode_token(token)

        if not payload:
            logger.warning("get_current_user_failed_invalid_token")
            return None

        document = await self.user_repo.get_user_by_id(payload.user_id)

        if not document:
            logger.warning("get_current_user_failed_user_not_found", user_id=payload.user_id)
            return None

        current_user = CurrentUser(**document)
        logger.debug("current_user_retrieved", user_id=current_user.id, role=current_user.role.value)
        return current_user

    @staticmethod
    def token_response(token: str, user: CurrentUser) -> TokenResponse:
        return TokenResponse(token=token, user=user.summary())
