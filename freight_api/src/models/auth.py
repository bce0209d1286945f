"""
Authentication and user account models.

Provides Pydantic schemas for:
- Registration, login and profile update requests
- Token responses and JWT payloads
- The authenticated user attached to each request
- Role management (customer / admin)
"""

from datetime import datetime
from enum import Enum
from typing import Optional
import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from freight_api.src.models.common import CamelModel, ObjectIdStr


PHONE_PATTERN = re.compile(r"^\+?\d{8,15}$")


# ============================================================================
# Role Enum
# ============================================================================


class Role(str, Enum):
    """
    User roles.

    - CUSTOMER: Requests quotes, tracks own shipments, contacts support
    - ADMIN: Manages quotes, shipments, catalogs and support messages
    """
    CUSTOMER = "customer"
    ADMIN = "admin"


def _validate_phone(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    if not PHONE_PATTERN.match(v):
        raise ValueError("Please enter a valid phone number.")
    return v


# ============================================================================
# Pydantic Request Models
# ============================================================================


class RegisterRequest(CamelModel):
    """Customer self-registration request."""
    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Display name (max 50 characters)"
    )
    email: EmailStr = Field(
        ...,
        description="Email address, used as the login"
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (minimum 8 characters)"
    )
    phone: Optional[str] = Field(
        None,
        description="Phone number, 8-15 digits with optional leading +"
    )
    company_name: Optional[str] = Field(
        None,
        description="Company name"
    )
    address: Optional[str] = Field(
        None,
        description="Postal address"
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are stored lower-cased."""
        return v.lower()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        """Validate phone format if provided."""
        return _validate_phone(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Jane Shipper",
                "email": "jane@example.com",
                "password": "SecurePassword123",
                "phone": "+441234567890",
                "companyName": "Acme Imports",
                "address": "1 Harbour Road"
            }
        }
    }


class LoginRequest(CamelModel):
    """Login request schema."""
    email: str = Field(
        ...,
        min_length=1,
        description="Email address (not format-checked; unknown addresses fail as bad credentials)"
    )
    password: str = Field(
        ...,
        min_length=1,
        description="Password"
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "jane@example.com",
                "password": "SecurePassword123"
            }
        }
    }


class UpdateProfileRequest(CamelModel):
    """
    Profile update request.

    Empty values mean "keep the current value", so every field is optional
    and blank strings are treated as absent.
    """
    name: Optional[str] = Field(None, max_length=50, description="Display name")
    phone: Optional[str] = Field(None, description="Phone number")
    company_name: Optional[str] = Field(None, description="Company name")
    address: Optional[str] = Field(None, description="Postal address")

    @field_validator("name", "company_name", "address", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return _validate_phone(v)


# ============================================================================
# Pydantic Response Models
# ============================================================================


class UserSummary(BaseModel):
    """User fields returned alongside a freshly issued token."""
    id: str = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    role: Role = Field(..., description="User role")


class TokenResponse(BaseModel):
    """Response for successful register/login."""
    success: bool = Field(default=True)
    token: str = Field(
        ...,
        min_length=10,
        description="JWT access token (also set as an HTTP-only cookie)"
    )
    user: UserSummary

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": True,
                "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "user": {
                    "id": "665f1b2c9d1e8a0012345678",
                    "name": "Jane Shipper",
                    "email": "jane@example.com",
                    "role": "customer"
                }
            }
        }
    }


# ============================================================================
# Token Models
# ============================================================================


class TokenPayload(BaseModel):
    """
    JWT token payload/claims.

    Mirrors the claims issued by earlier versions of the service so that
    tokens stay interchangeable: ``userId`` and ``role``.
    """
    user_id: str = Field(..., alias="userId", description="Subject (user ID)")
    role: Role = Field(default=Role.CUSTOMER, description="User role at issue time")
    exp: int = Field(..., description="Expiration timestamp (Unix epoch)")
    iat: Optional[int] = Field(None, description="Issued at timestamp (Unix epoch)")

    model_config = ConfigDict(populate_by_name=True)


class CurrentUser(BaseModel):
    """
    Current authenticated user.

    Built from the stored user document (without the password hash) and
    injected into handlers via dependency injection.
    """
    id: ObjectIdStr = Field(..., alias="_id", description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    role: Role = Field(default=Role.CUSTOMER, description="User role")
    phone: Optional[str] = None
    company_name: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def is_admin(self) -> bool:
        """
        Check if user has admin role.

        Returns:
            True if user is admin, False otherwise
        """
        return self.role == Role.ADMIN

    def owns(self, document: dict) -> bool:
        """Check whether a document's ``user`` reference points at this user."""
        return str(document.get("user")) == self.id

    def summary(self) -> UserSummary:
        return UserSummary(id=self.id, name=self.name, email=self.email, role=self.role)

    def to_profile(self) -> dict:
        """Profile as returned by the API (camelCase, ``_id`` key)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
