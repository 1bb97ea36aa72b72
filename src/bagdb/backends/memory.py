"""InMemoryBackend: dict-backed fake for unit tests and single-process use."""

from __future__ import annotations

import copy
import threading
from collections.abc import Mapping
from typing import Any

from bson import ObjectId
from pymongo.errors import DuplicateKeyError, OperationFailure

from ..documents import ID_FIELD

_MATCH_ALL: dict[str, Any] = {}
_MISSING = object()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _bson_equal(left: Any, right: Any) -> bool:
    """Equality the way the server compares BSON values.

    Booleans never equal numbers, numbers compare across int/float, and
    embedded documents are equal only with the same keys in the same order.
    """
    if _is_number(left) and _is_number(right):
        return bool(left == right)
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        return list(left) == list(right) and all(
            _bson_equal(left[k], right[k]) for k in left
        )
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            _bson_equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, (Mapping, list)) or isinstance(right, (Mapping, list)):
        return False
    return bool(left == right)


def _field_matches(actual: Any, expected: Any) -> bool:
    if expected is None:
        # Mongo matches null against missing fields as well.
        if actual is _MISSING or actual is None:
            return True
        return isinstance(actual, list) and any(item is None for item in actual)
    if actual is _MISSING:
        return False
    if _bson_equal(actual, expected):
        return True
    # An array field matches when any element equals the value.
    return isinstance(actual, list) and any(
        _bson_equal(item, expected) for item in actual
    )


def _matches(document: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
    """Evaluate the equality/AND filter subset the translator emits."""
    for key, condition in criteria.items():
        if key == "$and":
            if not all(_matches(document, clause) for clause in condition):
                return False
            continue
        if key.startswith("$"):
            raise OperationFailure(f"unknown top level operator: {key}")
        if isinstance(condition, Mapping) and "$eq" in condition:
            if len(condition) != 1:
                raise OperationFailure(f"unsupported condition on '{key}'")
            expected = condition["$eq"]
        else:
            expected = condition
        if not _field_matches(document.get(key, _MISSING), expected):
            return False
    return True


class InMemoryCollection:
    """List-backed implementation of ``ICollection``.

    Documents keep insertion order, which is the natural iteration order
    reported by ``find``.
    """

    def __init__(
        self,
        database: dict[str, list[dict[str, Any]]],
        name: str,
        lock: threading.RLock,
    ) -> None:
        self._database = database
        self._name = name
        self._lock = lock

    @property
    def _documents(self) -> list[dict[str, Any]]:
        return self._database.setdefault(self._name, [])

    def insert_one(self, document: Mapping[str, Any]) -> Any:
        stored = copy.deepcopy(dict(document))
        stored.setdefault(ID_FIELD, ObjectId())
        with self._lock:
            documents = self._documents
            if any(d[ID_FIELD] == stored[ID_FIELD] for d in documents):
                raise DuplicateKeyError(
                    f"E11000 duplicate key error collection: {self._name} "
                    f"dup key: {{ _id: {stored[ID_FIELD]!r} }}"
                )
            documents.append(stored)
        return stored[ID_FIELD]

    def find(
        self,
        filter: Mapping[str, Any] | None = None,  # noqa: A002
        limit: int = 0,
    ) -> list[Any]:
        with self._lock:
            found = [
                copy.deepcopy(d)
                for d in self._database.get(self._name, [])
                if _matches(d, filter or _MATCH_ALL)
            ]
        return found[:limit] if limit else found

    def delete_one(self, filter: Mapping[str, Any]) -> int:  # noqa: A002
        with self._lock:
            documents = self._database.get(self._name, [])
            for index, document in enumerate(documents):
                if _matches(document, filter):
                    del documents[index]
                    return 1
        return 0

    def delete_many(self, filter: Mapping[str, Any]) -> int:  # noqa: A002
        with self._lock:
            documents = self._database.get(self._name, [])
            kept = [d for d in documents if not _matches(d, filter)]
            removed = len(documents) - len(kept)
            documents[:] = kept
        return removed

    def drop(self) -> None:
        with self._lock:
            self._database.pop(self._name, None)

    def count_documents(self, filter: Mapping[str, Any]) -> int:  # noqa: A002
        with self._lock:
            return sum(
                1 for d in self._database.get(self._name, []) if _matches(d, filter)
            )


class InMemoryClient:
    """A connection to one in-memory server."""

    def __init__(
        self,
        endpoint: str,
        databases: dict[str, dict[str, list[dict[str, Any]]]],
        lock: threading.RLock,
    ) -> None:
        self.endpoint = endpoint
        self._databases = databases
        self._lock = lock
        self.closed = False

    def get_collection(
        self, database_name: str, collection_name: str
    ) -> InMemoryCollection:
        with self._lock:
            database = self._databases.setdefault(database_name, {})
        return InMemoryCollection(database, collection_name, self._lock)


class InMemoryBackend:
    """In-memory implementation of ``IDocumentBackend``.

    Data lives per endpoint for the lifetime of the backend object, so two
    clients for the same endpoint see the same documents.
    """

    def __init__(self) -> None:
        self._servers: dict[str, dict[str, dict[str, list[dict[str, Any]]]]] = {}
        self._lock = threading.RLock()

    def connect(self, endpoint: str) -> InMemoryClient:
        with self._lock:
            databases = self._servers.setdefault(endpoint, {})
        return InMemoryClient(endpoint, databases, self._lock)

    def ping(self, client: InMemoryClient) -> None:
        if client.closed:
            raise OperationFailure("client is closed")

    def get_collection(
        self, client: InMemoryClient, database_name: str, collection_name: str
    ) -> InMemoryCollection:
        return client.get_collection(database_name, collection_name)

    def close(self, client: InMemoryClient) -> None:
        client.closed = True
