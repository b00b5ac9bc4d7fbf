"""Shared types for catalog models."""

from typing import Annotated, Any

from bson import ObjectId
from pydantic import BeforeValidator, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


def _validate_object_id(value: Any) -> str:
    """Validate and convert ObjectId or string to string representation."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, str):
        return value
    raise ValueError(f"Invalid ObjectId value: {value}")


# Annotated type for MongoDB ObjectId fields.
# Accepts ObjectId or string on input, always serializes as string.
PyObjectId = Annotated[
    str,
    BeforeValidator(_validate_object_id),
    PlainSerializer(lambda v: str(v), return_type=str),
]


# Config shared by sub-documents and response schemas: camelCase on the wire,
# snake_case attribute names accepted when building from documents.
CAMEL_CONFIG = ConfigDict(
    populate_by_name=True,
    alias_generator=to_camel,
)
