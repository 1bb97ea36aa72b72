"""EndpointRegistry pooling, failure caching and thread safety."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from bagdb import (
    CollectionHandle,
    EndpointRegistry,
    InMemoryBackend,
    StoreConnectionError,
)


class FlakyPingBackend(InMemoryBackend):
    """Fails the first ``failures`` pings, then behaves normally."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures

    def ping(self, client) -> None:
        if self.failures:
            self.failures -= 1
            raise ServerSelectionTimeoutError("no servers available")
        super().ping(client)


class TestResolve:
    def test_same_endpoint_reuses_client(self, counting_backend) -> None:
        registry = EndpointRegistry(counting_backend)

        first = registry.resolve("memory://one")
        second = registry.resolve("memory://one")

        assert first is second
        assert counting_backend.connects == ["memory://one"]
        assert len(registry) == 1

    def test_endpoint_identity_ignores_surrounding_whitespace(
        self, counting_backend
    ) -> None:
        registry = EndpointRegistry(counting_backend)

        assert registry.resolve(" memory://one ") is registry.resolve("memory://one")
        assert len(counting_backend.connects) == 1

    def test_different_endpoints_get_different_clients(self, counting_backend) -> None:
        registry = EndpointRegistry(counting_backend)

        assert registry.resolve("memory://one") is not registry.resolve("memory://two")
        assert len(counting_backend.connects) == 2

    def test_handles_on_one_endpoint_share_a_connection(self, counting_backend) -> None:
        registry = EndpointRegistry(counting_backend)

        orders = CollectionHandle.open(registry, "memory://shop", "shop", "orders")
        lines = CollectionHandle.open(registry, "memory://shop", "shop", "lines")

        assert orders.name == "shop.orders"
        assert lines.name == "shop.lines"
        assert counting_backend.connects == ["memory://shop"]

    @pytest.mark.parametrize("endpoint", ["", "   "])
    def test_blank_endpoint_is_a_connection_error(self, endpoint) -> None:
        registry = EndpointRegistry(InMemoryBackend())

        with pytest.raises(StoreConnectionError):
            registry.resolve(endpoint)


class TestFailedAttempts:
    def test_failed_ping_is_not_cached(self, counting_backend_cls) -> None:
        backend = counting_backend_cls(FlakyPingBackend(failures=1))
        registry = EndpointRegistry(backend)

        with pytest.raises(StoreConnectionError, match="no servers available") as e:
            registry.resolve("memory://flaky")
        assert isinstance(e.value.__cause__, ServerSelectionTimeoutError)
        assert not registry.is_connected("memory://flaky")

        client = registry.resolve("memory://flaky")

        assert registry.is_connected("memory://flaky")
        assert len(backend.connects) == 2
        # the half-open client from the failed attempt was closed
        assert len(backend.closed) == 1
        assert backend.closed[0] is not client

    def test_connect_errors_are_wrapped(self) -> None:
        class BrokenBackend(InMemoryBackend):
            def connect(self, endpoint: str):
                raise OSError("refused")

        registry = EndpointRegistry(BrokenBackend())

        with pytest.raises(StoreConnectionError, match="refused"):
            registry.resolve("memory://broken")
        assert len(registry) == 0

    def test_close_failure_does_not_mask_ping_failure(self, caplog) -> None:
        class UnclosableBackend(FlakyPingBackend):
            def close(self, client) -> None:
                raise OSError("socket already gone")

        registry = EndpointRegistry(UnclosableBackend(failures=1))

        with caplog.at_level(logging.WARNING, logger="bagdb.registry"):
            with pytest.raises(StoreConnectionError, match="no servers available"):
                registry.resolve("memory://flaky")

        assert "socket already gone" in caplog.text
        assert not registry.is_connected("memory://flaky")


class TestConcurrency:
    def test_concurrent_resolution_opens_one_connection(
        self, counting_backend_cls
    ) -> None:
        backend = counting_backend_cls(InMemoryBackend(), connect_delay=0.05)
        registry = EndpointRegistry(backend)

        with ThreadPoolExecutor(max_workers=8) as pool:
            clients = list(pool.map(registry.resolve, ["memory://hot"] * 16))

        assert len(backend.connects) == 1
        assert all(client is clients[0] for client in clients)

    def test_different_endpoints_do_not_block_each_other(self) -> None:
        release = threading.Event()
        started = threading.Event()

        class SlowBackend(InMemoryBackend):
            def connect(self, endpoint: str):
                if endpoint == "memory://slow":
                    started.set()
                    release.wait(timeout=5)
                return super().connect(endpoint)

        registry = EndpointRegistry(SlowBackend())
        worker = threading.Thread(target=registry.resolve, args=("memory://slow",))
        worker.start()
        try:
            assert started.wait(timeout=5)
            # resolves while the slow endpoint is still connecting
            registry.resolve("memory://fast")
            assert registry.is_connected("memory://fast")
            assert not registry.is_connected("memory://slow")
        finally:
            release.set()
            worker.join(timeout=5)

        assert registry.is_connected("memory://slow")

    def test_close_during_resolution_does_not_open_a_second_connection(self) -> None:
        release = threading.Event()
        started = threading.Event()
        connects: list[str] = []

        class SlowBackend(InMemoryBackend):
            def connect(self, endpoint: str):
                connects.append(endpoint)
                started.set()
                release.wait(timeout=5)
                return super().connect(endpoint)

        registry = EndpointRegistry(SlowBackend())
        with ThreadPoolExecutor(max_workers=2) as pool:
            first = pool.submit(registry.resolve, "memory://slow")
            assert started.wait(timeout=5)
            registry.close()
            second = pool.submit(registry.resolve, "memory://slow")
            # let the second resolve reach the endpoint lock
            threading.Event().wait(0.05)
            release.set()

            assert first.result(timeout=5) is second.result(timeout=5)
        assert connects == ["memory://slow"]


class TestHealthAndClose:
    def test_health_check(self) -> None:
        registry = EndpointRegistry(InMemoryBackend())

        assert registry.health_check("memory://one") is False
        registry.resolve("memory://one")
        assert registry.health_check("memory://one") is True

    def test_close_releases_every_client(self, counting_backend) -> None:
        registry = EndpointRegistry(counting_backend)
        one = registry.resolve("memory://one")
        two = registry.resolve("memory://two")

        registry.close()

        assert len(registry) == 0
        assert counting_backend.closed == [one, two]
        assert one.closed and two.closed
        registry.close()  # idempotent

    def test_resolve_after_close_reconnects(self, counting_backend) -> None:
        registry = EndpointRegistry(counting_backend)
        first = registry.resolve("memory://one")
        registry.close()

        second = registry.resolve("memory://one")

        assert second is not first
        assert len(counting_backend.connects) == 2
