"""Per-endpoint latency and cooldown tracking.

Records are keyed by endpoint id (usually the RPC URL). Two chains may list
the same endpoint, so every mutation takes that endpoint's own lock rather
than a per-chain one.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable


class LatencyState(Enum):
    HEALTHY = "healthy"
    UNKNOWN = "unknown"
    ERRORED = "errored"


@dataclass(frozen=True)
class Latency:
    """Tagged latency: Healthy(seconds), Unknown or Errored."""

    state: LatencyState
    seconds: float | None = None

    @classmethod
    def healthy(cls, seconds: float) -> Latency:
        return cls(LatencyState.HEALTHY, max(0.0, float(seconds)))

    @property
    def is_healthy(self) -> bool:
        return self.state is LatencyState.HEALTHY

    def __str__(self) -> str:
        if self.state is LatencyState.HEALTHY:
            return f"{self.seconds * 1000:.0f}ms"
        return self.state.value


UNKNOWN = Latency(LatencyState.UNKNOWN)
ERRORED = Latency(LatencyState.ERRORED)


@dataclass(frozen=True)
class RPCHealthRecord:
    latency: Latency = UNKNOWN
    cooldown_until: float | None = None

    def in_cooldown(self, now: float) -> bool:
        return self.cooldown_until is not None and self.cooldown_until > now


class RPCHealthRegistry:
    """Thread-safe store of RPCHealthRecord per endpoint id.

    Cooldowns are never expired actively; ``is_in_cooldown`` compares
    against the clock at read time.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._records: dict[str, RPCHealthRecord] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def _lock_for(self, endpoint: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(endpoint)
            if lock is None:
                lock = self._locks[endpoint] = threading.Lock()
            return lock

    def get(self, endpoint: str) -> RPCHealthRecord:
        """Return the endpoint's record, or a fresh Unknown one if never tried."""
        with self._lock_for(endpoint):
            return self._records.get(endpoint, RPCHealthRecord())

    def record_success(self, endpoint: str, latency: float) -> None:
        with self._lock_for(endpoint):
            self._records[endpoint] = RPCHealthRecord(latency=Latency.healthy(latency))

    def record_failure(self, endpoint: str, cooldown: float) -> None:
        until = self._clock() + cooldown
        with self._lock_for(endpoint):
            current = self._records.get(endpoint, RPCHealthRecord())
            self._records[endpoint] = replace(
                current, latency=ERRORED, cooldown_until=until
            )

    def is_in_cooldown(self, endpoint: str, now: float | None = None) -> bool:
        if now is None:
            now = self._clock()
        return self.get(endpoint).in_cooldown(now)

    def snapshot(self) -> dict[str, RPCHealthRecord]:
        """Copy of every record, for diagnostics."""
        with self._guard:
            endpoints = list(self._locks)
        result: dict[str, RPCHealthRecord] = {}
        for endpoint in endpoints:
            with self._lock_for(endpoint):
                record = self._records.get(endpoint)
            if record is not None:
                result[endpoint] = record
        return result
