"""
Shared building blocks for the document models.

Documents are stored and exchanged with camelCase field names (the shape the
existing logistics collections use), while Python code works with snake_case
attributes. ``CamelModel`` bridges the two and knows how to turn itself into a
MongoDB document.
"""

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated


# Fields that must never leave the API
PRIVATE_FIELDS = frozenset({"password"})


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """
    Convert a value to an ObjectId.

    Args:
        value: ObjectId or its 24-character hex representation

    Returns:
        ObjectId, or None when the value is not a valid id
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def _coerce_object_id(value: Any) -> str:
    oid = parse_object_id(value)
    if oid is None:
        raise ValueError(f"'{value}' is not a valid id")
    return str(oid)


# String holding a valid ObjectId; accepts ObjectId instances read from the store
ObjectIdStr = Annotated[str, BeforeValidator(_coerce_object_id)]

# Required text field: present and non-blank after trimming
RequiredStr = Annotated[str, Field(min_length=1)]


class ActiveStatus(str, Enum):
    """Availability flag shared by the catalog collections."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class CamelModel(BaseModel):
    """
    Base class for request models.

    Accepts both camelCase (wire) and snake_case (Python) keys, trims
    strings, and ignores unknown keys.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    # snake_case names of fields holding references to other documents
    REFERENCE_FIELDS: ClassVar[Tuple[str, ...]] = ()

    def to_document(self, partial: bool = False) -> Dict[str, Any]:
        """
        Build the MongoDB document for this model.

        Args:
            partial: Only include fields the client actually sent (updates)

        Returns:
            Document with camelCase keys and ObjectId references
        """
        document = self.model_dump(
            mode="python",
            by_alias=True,
            exclude_unset=partial,
            exclude_none=True,
        )
        for field_name in self.REFERENCE_FIELDS:
            key = to_camel(field_name)
            if key in document:
                document[key] = ObjectId(document[key])
        return _enum_values(document)


def _enum_values(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _enum_values(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_enum_values(v) for v in value]
    return value


def serialize_document(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Make a stored document JSON-safe.

    ObjectIds become strings, datetimes ISO strings, and private fields
    (password hashes) are dropped at every nesting level.
    """
    if document is None:
        return None
    return jsonable_encoder(
        _strip_private(document),
        custom_encoder={ObjectId: str, datetime: lambda dt: dt.isoformat()},
    )


def serialize_documents(documents: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Serialize a sequence of stored documents."""
    return [serialize_document(document) for document in documents]


def _strip_private(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: _strip_private(v)
            for k, v in value.items()
            if k not in PRIVATE_FIELDS
        }
    if isinstance(value, list):
        return [_strip_private(v) for v in value]
    return value


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing endpoint."""
    success: bool = Field(default=False)
    message: str = Field(..., description="Human-readable error message")

    model_config = {
        "json_schema_extra": {
            "example": {"success": False, "message": "Location not found"}
        }
    }
