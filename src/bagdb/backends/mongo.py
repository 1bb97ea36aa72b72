"""MongoBackend: pymongo client creation, ping and collection lookup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pymongo import MongoClient
from pymongo.errors import ConfigurationError as PyMongoConfigurationError
from pymongo.errors import InvalidURI, PyMongoError
from pymongo.uri_parser import parse_uri

from ..exceptions import StoreConnectionError

if TYPE_CHECKING:
    from collections.abc import Callable

    from pymongo.collection import Collection

logger = logging.getLogger("bagdb.backends")


class MongoBackend:
    """Wrap pymongo client creation with URI validation and a ping check.

    ``client_factory`` defaults to :class:`pymongo.MongoClient`; tests pass
    ``mongomock.MongoClient`` instead.
    """

    def __init__(
        self,
        *,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        client_factory: Callable[..., Any] | None = None,
        **kwargs: Any,
    ) -> None:
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._connect_timeout_ms = connect_timeout_ms
        self._client_factory = client_factory or MongoClient
        self._kwargs = kwargs

    def connect(self, endpoint: str) -> Any:
        """Validate the URI and create a client. Does not touch the network."""
        try:
            parse_uri(endpoint)
        except (InvalidURI, PyMongoConfigurationError, ValueError) as e:
            raise StoreConnectionError(endpoint, str(e)) from e
        try:
            return self._client_factory(
                endpoint,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
                connectTimeoutMS=self._connect_timeout_ms,
                **self._kwargs,
            )
        except (PyMongoError, ValueError, TypeError) as e:
            raise StoreConnectionError(endpoint, str(e)) from e

    def ping(self, client: Any) -> None:
        """Ping the server; driver errors propagate to the registry."""
        client.admin.command("ping")

    def get_collection(
        self, client: Any, database_name: str, collection_name: str
    ) -> Collection[Any]:
        # Databases and collections are created lazily on first write.
        return client.get_database(database_name).get_collection(collection_name)

    def close(self, client: Any) -> None:
        try:
            client.close()
        except PyMongoError as e:
            logger.warning("Error while closing Mongo client: %s", e)
