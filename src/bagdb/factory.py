"""DocumentStoreFactory: opens stores from endpoints or a configuration document."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .backends.mongo import MongoBackend
from .collection import CollectionHandle
from .config import LOCALHOST_DEFAULT, StoreConfiguration
from .exceptions import ConfigurationError, StoreConnectionError
from .registry import EndpointRegistry
from .store import DocumentStore

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from .ports import IDocumentBackend

logger = logging.getLogger("bagdb.factory")


class DocumentStoreFactory:
    """Open :class:`DocumentStore` instances that share pooled clients.

    The factory owns one :class:`EndpointRegistry`; every store it opens
    against the same endpoint reuses the same backend client. ``open`` and
    ``from_configuration`` raise on failure. ``connect`` and
    ``connect_configuration`` log the failure and return ``None`` instead,
    for callers that only need to know whether they got a usable store.
    """

    def __init__(
        self,
        backend: IDocumentBackend | None = None,
        *,
        registry: EndpointRegistry | None = None,
    ) -> None:
        if (
            registry is not None
            and backend is not None
            and registry.backend is not backend
        ):
            raise ConfigurationError("registry was built for a different backend")
        if registry is None:
            registry = EndpointRegistry(
                backend if backend is not None else MongoBackend()
            )
        self._registry = registry

    @property
    def registry(self) -> EndpointRegistry:
        return self._registry

    def open(
        self, endpoint: str, database_name: str, *collection_names: str
    ) -> dict[str, DocumentStore]:
        """Open each named collection under ``database_name``.

        Raises:
            ConfigurationError: no collection names, or an empty name.
            StoreConnectionError: the endpoint is malformed or unreachable.
        """
        if not collection_names:
            raise ConfigurationError("at least one collection name is required")
        return {
            name: DocumentStore(
                CollectionHandle.open(self._registry, endpoint, database_name, name)
            )
            for name in collection_names
        }

    def open_local(
        self, database_name: str, *collection_names: str
    ) -> dict[str, DocumentStore]:
        return self.open(LOCALHOST_DEFAULT, database_name, *collection_names)

    def open_local_collection(self, collection_name: str) -> DocumentStore:
        """Open ``collection_name`` in a database of the same name, locally."""
        return self.open_local(collection_name, collection_name)[collection_name]

    def from_configuration(
        self, configuration: StoreConfiguration | Mapping[str, Any] | str
    ) -> dict[str, DocumentStore]:
        config = StoreConfiguration.parse(configuration)
        return self.open(
            config.connection_string,
            config.resolved_database_name,
            *config.resolved_collection_names,
        )

    def connect(
        self, endpoint: str, database_name: str, *collection_names: str
    ) -> dict[str, DocumentStore] | None:
        try:
            return self.open(endpoint, database_name, *collection_names)
        except (ConfigurationError, StoreConnectionError) as e:
            logger.error("Failed to open %s: %s", collection_names, e)
            return None

    def connect_configuration(
        self, configuration: StoreConfiguration | Mapping[str, Any] | str
    ) -> dict[str, DocumentStore] | None:
        try:
            return self.from_configuration(configuration)
        except (ConfigurationError, StoreConnectionError) as e:
            logger.error("Failed to open configured stores: %s", e)
            return None

    def close(self) -> None:
        """Close every pooled client."""
        self._registry.close()

    def __enter__(self) -> DocumentStoreFactory:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
