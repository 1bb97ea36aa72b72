"""CollectionHandle: a (database, collection) pair bound to a backend collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .ports import ICollection
    from .registry import EndpointRegistry


@dataclass(frozen=True)
class CollectionHandle:
    """Immutable binding of a named collection to its backend reference.

    Only the client underneath is pooled; handles themselves are cheap and
    discarded with the store that uses them.
    """

    database_name: str
    collection_name: str
    collection: ICollection

    @property
    def name(self) -> str:
        return f"{self.database_name}.{self.collection_name}"

    @classmethod
    def open(
        cls,
        registry: EndpointRegistry,
        endpoint: str,
        database_name: str,
        collection_name: str,
    ) -> CollectionHandle:
        """Resolve ``endpoint`` through ``registry`` and bind the collection.

        Databases and collections are created lazily by the backend, so the
        only failure is a :class:`StoreConnectionError` from the registry.
        """
        if not database_name:
            raise ConfigurationError("database name must not be empty")
        if not collection_name:
            raise ConfigurationError("collection name must not be empty")
        client = registry.resolve(endpoint)
        collection = registry.backend.get_collection(
            client, database_name, collection_name
        )
        return cls(database_name, collection_name, collection)
