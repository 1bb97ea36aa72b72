"""DocumentStore: the collection-scoped CRUD surface."""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Any

from .documents import coerce_document, to_native
from .exceptions import BackendOperationError, BagDbError
from .projector import project, project_many
from .translator import translate

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping
    from types import TracebackType

    from .collection import CollectionHandle

logger = logging.getLogger("bagdb.store")


class DocumentStore:
    """CRUD over one collection without exposing the backend query language.

    Criteria are equality matches: ``{"payload": "medium"}`` selects every
    document whose ``payload`` equals ``"medium"``; several keys are AND-ed;
    ``None`` or ``{}`` selects everything. Criteria may also be given as JSON
    text. Returned documents never contain the backend ``_id`` field.

    Mutating calls return ``self`` so they can be chained::

        store.put({"id": 1}).put({"id": 2}).delete({"id": 1})

    Every call blocks until the backend answers. Backend failures surface as
    :class:`BackendOperationError` chained to the driver exception.
    """

    def __init__(self, handle: CollectionHandle) -> None:
        self._handle = handle
        self._collection = handle.collection
        logger.info("Opened '%s'", self.name)

    @property
    def name(self) -> str:
        """Stable ``"{database}.{collection}"`` identifier."""
        return self._handle.name

    @property
    def handle(self) -> CollectionHandle:
        return self._handle

    @contextlib.contextmanager
    def _backend_call(self, operation: str) -> Iterator[None]:
        try:
            yield
        except BagDbError:
            raise
        except Exception as e:
            raise BackendOperationError(operation, self.name, str(e)) from e

    # ── Writes ───────────────────────────────────────────────────────

    def put(self, document: Mapping[str, Any] | str) -> DocumentStore:
        """Insert one document. The caller's mapping is never modified."""
        native = to_native(coerce_document(document))
        with self._backend_call("put"):
            self._collection.insert_one(native)
        return self

    def put_many(
        self, documents: Iterable[Mapping[str, Any] | str]
    ) -> DocumentStore:
        """Insert documents one at a time, in order.

        The first failure stops the loop; documents already inserted stay.
        """
        for document in documents:
            self.put(document)
        return self

    # ── Reads ────────────────────────────────────────────────────────

    def get(
        self, criteria: Mapping[str, Any] | str | None = None
    ) -> dict[str, Any] | None:
        """Return the first matching document, or ``None``."""
        query = translate(criteria)
        with self._backend_call("get"):
            native = next(iter(self._collection.find(query, limit=1)), None)
        return project(native)

    def get_many(
        self, criteria: Mapping[str, Any] | str | None = None
    ) -> list[dict[str, Any]]:
        """Return every matching document in the backend's natural order."""
        query = translate(criteria)
        with self._backend_call("get_many"):
            return project_many(self._collection.find(query))

    def get_all(self) -> list[dict[str, Any]]:
        with self._backend_call("get_all"):
            return project_many(self._collection.find({}))

    # ── Deletes ──────────────────────────────────────────────────────

    def delete(self, criteria: Mapping[str, Any] | str | None) -> DocumentStore:
        """Remove the first matching document, if any."""
        query = translate(criteria)
        with self._backend_call("delete"):
            self._collection.delete_one(query)
        return self

    def delete_many(
        self, criteria: Mapping[str, Any] | str | None
    ) -> DocumentStore:
        query = translate(criteria)
        with self._backend_call("delete_many"):
            self._collection.delete_many(query)
        return self

    def delete_all(self) -> DocumentStore:
        with self._backend_call("delete_all"):
            self._collection.delete_many({})
        return self

    def drop(self) -> None:
        """Destroy the collection and all of its documents."""
        with self._backend_call("drop"):
            self._collection.drop()
        logger.info("Dropped '%s'", self.name)

    def count(self) -> int:
        with self._backend_call("count"):
            return int(self._collection.count_documents({}))

    # ── Lifecycle ────────────────────────────────────────────────────

    def close(self) -> None:
        """Release the store.

        The underlying client belongs to the endpoint registry and stays
        open; close the registry (or its factory) to tear connections down.
        """
        logger.info("Closed '%s'", self.name)

    def __enter__(self) -> DocumentStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"DocumentStore({self.name!r})"
