"""Shared fixtures: backends, factories and the four-document sample set."""

from __future__ import annotations

import threading
from typing import Any

import mongomock
import pytest

from bagdb import DocumentStoreFactory, InMemoryBackend, MongoBackend


class CountingBackend:
    """Wraps a real backend and records every call that reaches it."""

    def __init__(self, inner: Any, *, connect_delay: float = 0.0) -> None:
        self.inner = inner
        self.connect_delay = connect_delay
        self.connects: list[str] = []
        self.closed: list[Any] = []
        self._lock = threading.Lock()

    def connect(self, endpoint: str) -> Any:
        with self._lock:
            self.connects.append(endpoint)
        if self.connect_delay:
            threading.Event().wait(self.connect_delay)
        return self.inner.connect(endpoint)

    def ping(self, client: Any) -> None:
        self.inner.ping(client)

    def get_collection(
        self, client: Any, database_name: str, collection_name: str
    ) -> Any:
        return self.inner.get_collection(client, database_name, collection_name)

    def close(self, client: Any) -> None:
        self.closed.append(client)
        self.inner.close(client)


@pytest.fixture(params=["memory", "mongomock"])
def backend(request: pytest.FixtureRequest) -> Any:
    """Every store test runs against both the in-memory and mongomock backends."""
    if request.param == "memory":
        return InMemoryBackend()
    return MongoBackend(client_factory=mongomock.MongoClient)


@pytest.fixture
def factory(backend: Any):
    f = DocumentStoreFactory(backend)
    yield f
    f.close()


@pytest.fixture
def store(factory: DocumentStoreFactory):
    s = factory.open_local_collection("Test")
    yield s
    s.delete_all()
    s.drop()


@pytest.fixture
def counting_backend() -> CountingBackend:
    return CountingBackend(InMemoryBackend())


@pytest.fixture
def sample_documents() -> list[dict[str, Any]]:
    return [
        {"id": 1, "key": "value 1", "payload": "full"},
        {"id": 2, "key": "value 2", "payload": "medium"},
        {"id": 3, "key": "value 3", "payload": "medium"},
        {"id": 4, "key": "value 4", "payload": "empty"},
    ]


@pytest.fixture
def counting_backend_cls() -> type[CountingBackend]:
    return CountingBackend
