"""EndpointRegistry: one verified client per endpoint, shared by every handle."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from .exceptions import BagDbError, StoreConnectionError

if TYPE_CHECKING:
    from .ports import IDocumentBackend

logger = logging.getLogger("bagdb.registry")


class EndpointRegistry:
    """Cache of backend clients keyed by endpoint identity.

    A client is cached only after the backend has pinged it successfully, so
    a failed attempt leaves nothing behind and the next ``resolve`` starts
    over. At most one connection attempt runs per endpoint; different
    endpoints connect in parallel.

    The registry is owned by the composition root (usually a
    :class:`~bagdb.factory.DocumentStoreFactory`) and passed to every
    collection handle it opens.
    """

    def __init__(self, backend: IDocumentBackend) -> None:
        self._backend = backend
        self._clients: dict[str, Any] = {}
        self._endpoint_locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    @property
    def backend(self) -> IDocumentBackend:
        return self._backend

    def __len__(self) -> int:
        return len(self._clients)

    def _lock_for(self, endpoint: str) -> threading.Lock:
        with self._guard:
            lock = self._endpoint_locks.get(endpoint)
            if lock is None:
                lock = self._endpoint_locks[endpoint] = threading.Lock()
            return lock

    def resolve(self, endpoint: str) -> Any:
        """Return the client for ``endpoint``, connecting on first use.

        Raises:
            StoreConnectionError: the endpoint is malformed or unreachable.
        """
        endpoint = normalise_endpoint(endpoint)
        client = self._clients.get(endpoint)
        if client is not None:
            logger.debug("Reusing client for '%s'", endpoint)
            return client

        with self._lock_for(endpoint):
            # Another thread may have finished connecting while we waited.
            client = self._clients.get(endpoint)
            if client is not None:
                return client

            try:
                client = self._backend.connect(endpoint)
            except BagDbError:
                raise
            except Exception as e:
                raise StoreConnectionError(endpoint, str(e)) from e

            try:
                self._backend.ping(client)
            except BagDbError:
                self._discard(endpoint, client)
                raise
            except Exception as e:
                self._discard(endpoint, client)
                raise StoreConnectionError(endpoint, str(e)) from e

            self._clients[endpoint] = client
            logger.info("Connected to '%s'", endpoint)
            return client

    def _discard(self, endpoint: str, client: Any) -> None:
        try:
            self._backend.close(client)
        except Exception as e:  # noqa: BLE001
            logger.warning("Error closing unverified client for '%s': %s", endpoint, e)

    def is_connected(self, endpoint: str) -> bool:
        """Return True if a verified client is cached for ``endpoint``."""
        return normalise_endpoint(endpoint) in self._clients

    def health_check(self, endpoint: str) -> bool:
        """Ping the cached client for ``endpoint``; return True if reachable."""
        client = self._clients.get(normalise_endpoint(endpoint))
        if client is None:
            return False
        try:
            self._backend.ping(client)
            return True
        except Exception:  # noqa: BLE001
            return False

    def close(self) -> None:
        """Close every cached client and empty the cache. Idempotent.

        Per-endpoint locks are kept, so a ``resolve`` racing with ``close``
        still serialises with later ones on the same endpoint.
        """
        with self._guard:
            clients, self._clients = self._clients, {}
        for endpoint, client in clients.items():
            self._backend.close(client)
            logger.info("Closed client for '%s'", endpoint)


def normalise_endpoint(endpoint: str) -> str:
    """Return the endpoint identity used as the cache key."""
    if not isinstance(endpoint, str) or not endpoint.strip():
        raise StoreConnectionError(str(endpoint), "endpoint must be a non-empty string")
    return endpoint.strip()
