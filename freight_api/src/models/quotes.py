"""Quote request models."""

from enum import Enum
from typing import ClassVar, Optional, Tuple

from pydantic import Field, field_validator

from freight_api.src.models.common import CamelModel, ObjectIdStr


class PaymentTerm(str, Enum):
    PREPAID = "Prepaid"
    POSTPAID = "Postpaid"
    THIRD_PARTY = "Third Party"


class QuoteStatus(str, Enum):
    PENDING = "Pending"
    QUOTED = "Quoted"
    REJECTED = "Rejected"


class CargoDimensions(CamelModel):
    """Cargo measurements (meters) and weight (kg)."""
    length: float = Field(..., ge=0)
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)
    weight: float = Field(..., ge=0)


class QuoteRequestCreate(CamelModel):
    """
    Customer shipping inquiry.

    The owner is never taken from the body; it is the authenticated caller.
    """
    pickup_location: ObjectIdStr = Field(..., description="Location id")
    drop_location: ObjectIdStr = Field(..., description="Location id")
    goods_type: ObjectIdStr = Field(..., description="Goods type id")
    container_type: ObjectIdStr = Field(..., description="Container type id")
    dimensions: CargoDimensions
    payment_term: PaymentTerm
    additional_notes: Optional[str] = None

    REFERENCE_FIELDS: ClassVar[Tuple[str, ...]] = ("pickup_location", "drop_location", "goods_type", "container_type")

    model_config = {
        "json_schema_extra": {
            "example": {
                "pickupLocation": "665f1b2c9d1e8a0012345678",
                "dropLocation": "665f1b2c9d1e8a0012345679",
                "goodsType": "665f1b2c9d1e8a001234567a",
                "containerType": "665f1b2c9d1e8a001234567b",
                "dimensions": {"length": 5, "width": 2, "height": 2, "weight": 1200},
                "paymentTerm": "Prepaid",
                "additionalNotes": "Fragile"
            }
        }
    }


class QuoteStatusUpdate(CamelModel):
    """Admin pricing decision. Omitted amount keeps the stored one."""
    status: QuoteStatus
    final_quote_amount: Optional[float] = Field(None, ge=0)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if not isinstance(v, str) or v not in {s.value for s in QuoteStatus}:
            raise ValueError("Invalid status provided.")
        return v
