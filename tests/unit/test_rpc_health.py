"""Unit tests for the RPC health registry."""
from __future__ import annotations

import threading

import pytest

from chainwatch.rpc.health import (
    ERRORED,
    UNKNOWN,
    Latency,
    LatencyState,
    RPCHealthRecord,
    RPCHealthRegistry,
)


@pytest.fixture()
def registry(clock) -> RPCHealthRegistry:
    return RPCHealthRegistry(clock=clock)


class TestLatency:
    def test_healthy(self) -> None:
        latency = Latency.healthy(0.01)
        assert latency.state is LatencyState.HEALTHY
        assert latency.seconds == 0.01
        assert latency.is_healthy

    def test_negative_clamped(self) -> None:
        assert Latency.healthy(-1).seconds == 0.0

    def test_str(self) -> None:
        assert str(Latency.healthy(0.1)) == "100ms"
        assert str(UNKNOWN) == "unknown"
        assert str(ERRORED) == "errored"


class TestRegistry:
    def test_unknown_by_default(self, registry: RPCHealthRegistry) -> None:
        record = registry.get("https://a")
        assert record == RPCHealthRecord()
        assert record.latency is UNKNOWN
        assert registry.snapshot() == {}

    def test_record_success(self, registry: RPCHealthRegistry) -> None:
        registry.record_success("https://a", 0.05)
        assert registry.get("https://a").latency == Latency.healthy(0.05)
        assert not registry.is_in_cooldown("https://a")

    def test_record_failure_sets_cooldown(self, registry: RPCHealthRegistry, clock) -> None:
        registry.record_failure("https://a", 30)
        record = registry.get("https://a")
        assert record.latency == ERRORED
        assert record.cooldown_until == clock.now + 30
        assert registry.is_in_cooldown("https://a")

    def test_cooldown_expires_lazily(self, registry: RPCHealthRegistry, clock) -> None:
        registry.record_failure("https://a", 30)
        clock.advance(30)
        # Boundary: cooldown_until must be strictly after now
        assert not registry.is_in_cooldown("https://a")
        # The record itself is untouched
        assert registry.get("https://a").cooldown_until is not None
        assert registry.get("https://a").latency == ERRORED

    def test_explicit_now(self, registry: RPCHealthRegistry, clock) -> None:
        registry.record_failure("https://a", 30)
        assert registry.is_in_cooldown("https://a", now=clock.now + 29)
        assert not registry.is_in_cooldown("https://a", now=clock.now + 31)

    def test_success_clears_cooldown(self, registry: RPCHealthRegistry) -> None:
        registry.record_failure("https://a", 30)
        registry.record_success("https://a", 0.2)
        record = registry.get("https://a")
        assert record.cooldown_until is None
        assert record.latency.is_healthy

    def test_updates_do_not_leak_across_ids(self, registry: RPCHealthRegistry) -> None:
        registry.record_success("https://a", 0.01)
        registry.record_failure("https://b", 30)
        assert registry.get("https://a").latency.is_healthy
        assert not registry.is_in_cooldown("https://a")
        assert set(registry.snapshot()) == {"https://a", "https://b"}

    def test_concurrent_threads(self, registry: RPCHealthRegistry) -> None:
        def worker(n: int) -> None:
            for i in range(200):
                endpoint = f"https://node{i % 5}"
                if (n + i) % 2:
                    registry.record_success(endpoint, 0.01 * n)
                else:
                    registry.record_failure(endpoint, 10)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        snapshot = registry.snapshot()
        assert set(snapshot) == {f"https://node{i}" for i in range(5)}
        for record in snapshot.values():
            assert record.latency.state in (LatencyState.HEALTHY, LatencyState.ERRORED)
