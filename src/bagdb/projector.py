"""Backend-native document -> caller document."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .documents import ID_FIELD, exclude_field, from_native

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


def project(native: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Convert a native document and mask the backend identity field.

    The identity field is removed whether the backend assigned it or the
    caller supplied it on insert.
    """
    if native is None:
        return None
    return from_native(exclude_field(native, ID_FIELD))


def project_many(natives: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [from_native(exclude_field(native, ID_FIELD)) for native in natives]
