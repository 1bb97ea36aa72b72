"""Equality criteria -> backend filter expression."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .documents import parse_document, to_bson_value
from .exceptions import TranslationError


def _compile_eq(field: Any, value: Any) -> dict[str, Any]:
    if not isinstance(field, str) or not field:
        raise TranslationError(f"Criteria keys must be non-empty strings: {field!r}")
    if field.startswith("$"):
        raise TranslationError(f"Operators are not supported in criteria: {field}")
    # $eq keeps a mapping value a literal instead of an operator document.
    return {field: {"$eq": to_bson_value(value)}}


def translate(criteria: Mapping[str, Any] | str | None) -> dict[str, Any]:
    """Build a filter from equality criteria.

    ``None``, empty text and ``{}`` match every document. A single pair
    becomes one ``$eq`` clause; several pairs become an ``$and`` of clauses
    in the criteria's key order.

    Raises:
        TranslationError: criteria text does not parse to a JSON object, or
            a key is not a plain field name.
    """
    if criteria is None:
        return {}
    if isinstance(criteria, str):
        if not criteria.strip():
            return {}
        criteria = parse_document(criteria)
    elif not isinstance(criteria, Mapping):
        raise TranslationError(
            f"Criteria must be a mapping or JSON text, got {type(criteria).__name__}"
        )

    clauses = [_compile_eq(field, value) for field, value in criteria.items()]
    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}
