"""Document value boundary: JSON text, BSON values and field exclusion."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any, cast
from uuid import UUID

from bson import Decimal128, ObjectId, json_util
from bson.binary import UUID_SUBTYPE, Binary
from bson.errors import BSONError

from .exceptions import TranslationError

ID_FIELD = "_id"


def to_bson_value(value: Any) -> Any:
    """Convert one document value to the form the backend stores.

    ``Decimal`` becomes ``Decimal128`` and ``UUID`` becomes a subtype-4
    ``Binary``, so both read back as the type that was written. Tuples are
    stored as arrays and read back as lists. Containers are copied.
    """
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, UUID):
        return Binary.from_uuid(value)
    if isinstance(value, Mapping):
        return {k: to_bson_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_bson_value(v) for v in value]
    return value


def from_bson_value(value: Any) -> Any:
    """Inverse of :func:`to_bson_value` for values read from a backend."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, Binary) and value.subtype == UUID_SUBTYPE:
        return value.as_uuid()
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value
    if isinstance(value, Mapping):
        return {k: from_bson_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_bson_value(v) for v in value]
    return value


def to_native(document: Mapping[str, Any]) -> dict[str, Any]:
    """Return a BSON-ready copy of ``document``; the input is left untouched."""
    return cast("dict[str, Any]", to_bson_value(document))


def from_native(document: Mapping[str, Any]) -> dict[str, Any]:
    """Return a plain Python copy of a backend-native document."""
    return cast("dict[str, Any]", from_bson_value(document))


def exclude_field(document: Mapping[str, Any], field: str) -> dict[str, Any]:
    """Return a shallow copy of ``document`` without ``field``, keeping key order."""
    return {k: v for k, v in document.items() if k != field}


def parse_document(text: str) -> dict[str, Any]:
    """Parse (extended) JSON text into a document.

    Raises:
        TranslationError: the text is not valid JSON or is not a JSON object.
    """
    try:
        parsed = json_util.loads(text)
    except (ValueError, TypeError, BSONError) as e:
        raise TranslationError(f"Invalid document text: {e}") from e
    if not isinstance(parsed, dict):
        raise TranslationError(
            f"Document text must be a JSON object, got {type(parsed).__name__}"
        )
    return parsed


def serialize_document(document: Mapping[str, Any]) -> str:
    """Render a document as relaxed extended JSON."""
    return json_util.dumps(
        to_native(document), json_options=json_util.RELAXED_JSON_OPTIONS
    )


def coerce_document(value: Mapping[str, Any] | str) -> Mapping[str, Any]:
    """Accept either a mapping or its JSON text."""
    if isinstance(value, str):
        return parse_document(value)
    if not isinstance(value, Mapping):
        raise TranslationError(
            f"Expected a mapping or JSON text, got {type(value).__name__}"
        )
    return value
