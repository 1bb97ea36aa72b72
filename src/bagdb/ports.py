"""Backend capability protocols.

Any driver that can connect, ping and hand out collections can sit behind
the store. ``pymongo`` collections satisfy :class:`ICollection` as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@runtime_checkable
class ICollection(Protocol):
    """The per-collection operations the store issues."""

    def insert_one(self, document: Mapping[str, Any]) -> Any: ...

    def find(
        self,
        filter: Mapping[str, Any],  # noqa: A002
        limit: int = 0,
    ) -> Iterable[Any]: ...

    def delete_one(self, filter: Mapping[str, Any]) -> Any: ...  # noqa: A002

    def delete_many(self, filter: Mapping[str, Any]) -> Any: ...  # noqa: A002

    def drop(self) -> None: ...

    def count_documents(self, filter: Mapping[str, Any]) -> int: ...  # noqa: A002


@runtime_checkable
class IDocumentBackend(Protocol):
    """Driver boundary: client lifecycle and collection lookup."""

    def connect(self, endpoint: str) -> Any:
        """Create a client for ``endpoint``; raise StoreConnectionError if malformed."""
        ...

    def ping(self, client: Any) -> None:
        """Verify reachability; raise on failure."""
        ...

    def get_collection(
        self, client: Any, database_name: str, collection_name: str
    ) -> ICollection: ...

    def close(self, client: Any) -> None: ...
