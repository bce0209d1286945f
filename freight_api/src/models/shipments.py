"""Shipment and tracking event models."""

from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Tuple

from pydantic import Field, field_validator

from freight_api.src.models.common import CamelModel, ObjectIdStr, RequiredStr


class ShipmentStatus(str, Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"


class PaymentStatus(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"
    PENDING = "pending"


class TrackingStatus(str, Enum):
    PENDING = "pending"
    PICKED_UP = "picked up"
    IN_TRANSIT = "in transit"
    CUSTOM_CLEARANCE = "custom clearance"
    ARRIVED_AT_DESTINATION = "arrived at destination"
    OUT_FOR_DELIVERY = "out for delivery"
    DELIVERED = "delivered"


class ShipmentDimensions(CamelModel):
    length: Optional[float] = Field(None, ge=0)
    width: Optional[float] = Field(None, ge=0)
    height: Optional[float] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)


class ShipmentCreate(CamelModel):
    """
    Shipment created by an admin from an approved quote.

    The owning customer is copied from the quote, not taken from the body.
    """
    quote_request_id: ObjectIdStr
    pickup_location: ObjectIdStr
    drop_off_location: ObjectIdStr
    tracking_number: RequiredStr
    goods_type: RequiredStr = Field(..., description="Goods type name")
    container_type: RequiredStr = Field(..., description="Container type name")
    dimensions: Optional[ShipmentDimensions] = None
    estimated_delivery_date: Optional[datetime] = None
    shipment_notes: Optional[str] = None

    REFERENCE_FIELDS: ClassVar[Tuple[str, ...]] = (
        "quote_request_id", "pickup_location", "drop_off_location"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "quoteRequestId": "665f1b2c9d1e8a0012345680",
                "pickupLocation": "665f1b2c9d1e8a0012345678",
                "dropOffLocation": "665f1b2c9d1e8a0012345679",
                "trackingNumber": "TRK-20240601-0001",
                "goodsType": "Electronics",
                "containerType": "20ft Standard",
                "estimatedDeliveryDate": "2024-07-01T00:00:00Z"
            }
        }
    }


class ShipmentUpdate(CamelModel):
    """
    Free-form admin update.

    Any status may be set from any other; only field types are checked.
    """
    pickup_location: Optional[ObjectIdStr] = None
    drop_off_location: Optional[ObjectIdStr] = None
    tracking_number: Optional[RequiredStr] = None
    status: Optional[ShipmentStatus] = None
    shipment_date: Optional[datetime] = None
    estimated_delivery_date: Optional[datetime] = None
    actual_delivery_date: Optional[datetime] = None
    goods_type: Optional[RequiredStr] = None
    container_type: Optional[RequiredStr] = None
    dimensions: Optional[ShipmentDimensions] = None
    payment_status: Optional[PaymentStatus] = None
    shipment_notes: Optional[str] = None

    REFERENCE_FIELDS: ClassVar[Tuple[str, ...]] = ("pickup_location", "drop_off_location")


class TrackingEventCreate(CamelModel):
    """Checkpoint in a shipment's journey."""
    shipment: ObjectIdStr
    event: RequiredStr = Field(..., description="Event title")
    location: RequiredStr = Field(..., description="Where the event happened")
    status: TrackingStatus
    event_time: datetime
    remarks: Optional[str] = None

    REFERENCE_FIELDS: ClassVar[Tuple[str, ...]] = ("shipment",)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if not isinstance(v, str) or v not in {s.value for s in TrackingStatus}:
            raise ValueError(f"Invalid status: {v}")
        return v
