"""
Reference-data models: locations, container types, goods types and services.

These catalogs populate the quote and shipment forms. Each has a create
model (all business fields required) and an update model (every field
optional, only the fields sent are written).
"""

from enum import Enum
from typing import List, Optional
import re

from pydantic import Field, field_validator

from freight_api.src.models.common import ActiveStatus, CamelModel, RequiredStr


# Letters, digits, spaces and hyphens; covers the formats used worldwide
POSTAL_CODE_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 \-]{1,9}$")


class LocationType(str, Enum):
    PICKUP = "pickup"
    DROP_OFF = "drop-off"


def _validate_postal_code(v: Optional[str]) -> Optional[str]:
    if v is not None and not POSTAL_CODE_PATTERN.match(v):
        raise ValueError("Invalid postal code")
    return v


def _validate_coordinates(v: Optional[List[float]]) -> Optional[List[float]]:
    if v is None:
        return v
    if len(v) != 2:
        raise ValueError("Coordinates must be [longitude, latitude]")
    longitude, latitude = v
    if not -180 <= longitude <= 180 or not -90 <= latitude <= 90:
        raise ValueError("Coordinates must be [longitude, latitude]")
    return v


# ============================================================================
# Locations
# ============================================================================


class LocationCreate(CamelModel):
    """Pickup hub or drop-off destination."""
    name: RequiredStr = Field(..., description="Location name")
    type: LocationType = Field(..., description="'pickup' or 'drop-off'")
    country: RequiredStr = Field(..., description="Country")
    city: RequiredStr = Field(..., description="City")
    address: RequiredStr = Field(..., description="Street address")
    postal_code: RequiredStr = Field(..., description="Postal code")
    coordinates: List[float] = Field(..., description="[longitude, latitude]")
    status: ActiveStatus = Field(default=ActiveStatus.ACTIVE)

    @field_validator("postal_code")
    @classmethod
    def validate_postal_code(cls, v):
        return _validate_postal_code(v)

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v):
        return _validate_coordinates(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Jebel Ali Hub",
                "type": "pickup",
                "country": "UAE",
                "city": "Dubai",
                "address": "Jebel Ali Free Zone, Gate 5",
                "postalCode": "00000",
                "coordinates": [55.0272, 24.9857]
            }
        }
    }


class LocationUpdate(CamelModel):
    name: Optional[RequiredStr] = None
    type: Optional[LocationType] = None
    country: Optional[RequiredStr] = None
    city: Optional[RequiredStr] = None
    address: Optional[RequiredStr] = None
    postal_code: Optional[str] = None
    coordinates: Optional[List[float]] = None
    status: Optional[ActiveStatus] = None

    @field_validator("postal_code")
    @classmethod
    def validate_postal_code(cls, v):
        return _validate_postal_code(v)

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v):
        return _validate_coordinates(v)


# ============================================================================
# Container types
# ============================================================================


class ContainerDimensions(CamelModel):
    """Inside/door measurements in meters, capacity in cubic meters."""
    inside_length: float = Field(..., ge=1)
    inside_width: float = Field(..., gt=0)
    inside_height: float = Field(..., gt=0)
    door_width: float = Field(..., gt=0)
    door_height: float = Field(..., gt=0)
    cbm_capacity: float = Field(..., gt=0)


class ContainerTypeCreate(CamelModel):
    """Freight container specification."""
    name: RequiredStr = Field(..., description="Unique container name, e.g. 20ft Standard")
    description: RequiredStr = Field(..., description="Container description")
    dimensions: ContainerDimensions
    tare_weight: float = Field(..., gt=0, description="Empty weight (kg)")
    max_cargo_weight: float = Field(..., gt=0, description="Payload limit (kg)")
    status: ActiveStatus = Field(default=ActiveStatus.ACTIVE)

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "20ft Standard",
                "description": "General purpose dry container",
                "dimensions": {
                    "insideLength": 5.9,
                    "insideWidth": 2.35,
                    "insideHeight": 2.39,
                    "doorWidth": 2.34,
                    "doorHeight": 2.28,
                    "cbmCapacity": 33.2
                },
                "tareWeight": 2300,
                "maxCargoWeight": 28200
            }
        }
    }


class ContainerTypeUpdate(CamelModel):
    name: Optional[RequiredStr] = None
    description: Optional[RequiredStr] = None
    dimensions: Optional[ContainerDimensions] = None
    tare_weight: Optional[float] = Field(None, gt=0)
    max_cargo_weight: Optional[float] = Field(None, gt=0)
    status: Optional[ActiveStatus] = None


# ============================================================================
# Goods types
# ============================================================================


class GoodsTypeCreate(CamelModel):
    """Category of goods offered in the quote form."""
    name: RequiredStr = Field(..., description="Unique goods type name")
    description: RequiredStr = Field(..., description="Description")
    status: ActiveStatus = Field(default=ActiveStatus.ACTIVE)


class GoodsTypeUpdate(CamelModel):
    name: Optional[RequiredStr] = None
    description: Optional[RequiredStr] = None
    status: Optional[ActiveStatus] = None


# ============================================================================
# Services
# ============================================================================


class ServiceCreate(CamelModel):
    """Freight forwarding / logistics service shown on the marketing site."""
    name: RequiredStr = Field(..., description="Unique service name")
    description: RequiredStr = Field(..., description="Service description")
    status: ActiveStatus = Field(default=ActiveStatus.ACTIVE)


class ServiceUpdate(CamelModel):
    """Service update; blank values keep the current value."""
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ActiveStatus] = None

    @field_validator("name", "description", "status", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v
