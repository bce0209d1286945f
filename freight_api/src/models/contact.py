"""Contact form / support message models."""

from enum import Enum

from pydantic import EmailStr, Field, field_validator

from freight_api.src.models.common import CamelModel


class ContactStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"


class ContactMessageCreate(CamelModel):
    """Message submitted through the public contact form."""
    name: str = Field(..., min_length=1, description="Sender name")
    email: EmailStr = Field(..., description="Reply-to address")
    phone: str = Field(..., min_length=1, description="Phone number")
    subject: str = Field(..., min_length=1, description="Subject line")
    message: str = Field(
        ...,
        min_length=10,
        description="Message body (at least 10 characters)"
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Jane Shipper",
                "email": "jane@example.com",
                "phone": "+441234567890",
                "subject": "Delayed container",
                "message": "My container TRK-0001 has not moved for a week."
            }
        }
    }


class ContactStatusUpdate(CamelModel):
    status: ContactStatus

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if not isinstance(v, str) or v not in {s.value for s in ContactStatus}:
            raise ValueError("Invalid status.")
        return v
