"""Endpoint ranking over the health registry."""
from __future__ import annotations

from typing import Iterable

from .health import LatencyState, RPCHealthRecord, RPCHealthRegistry

# Tier numbers: lower is tried first.
_TIER_HEALTHY = 0
_TIER_UNKNOWN = 1
_TIER_ERRORED = 2
_TIER_COOLDOWN = 3


def _sort_key(record: RPCHealthRecord, now: float) -> tuple[int, float]:
    if record.in_cooldown(now):
        return (_TIER_COOLDOWN, 0.0)
    if record.latency.state is LatencyState.HEALTHY:
        return (_TIER_HEALTHY, record.latency.seconds or 0.0)
    if record.latency.state is LatencyState.UNKNOWN:
        return (_TIER_UNKNOWN, 0.0)
    return (_TIER_ERRORED, 0.0)


def prioritize_endpoints(
    candidates: Iterable[str],
    registry: RPCHealthRegistry,
    now: float | None = None,
) -> list[str]:
    """Order candidates for the next attempt.

    Healthy endpoints come first (fastest first), then never-measured ones,
    then errored ones, and endpoints still in cooldown go last. Within a
    tier the input order is kept; ``sorted`` is stable.
    """
    candidates = list(candidates)
    if now is None:
        now = registry.now()
    keys = {endpoint: _sort_key(registry.get(endpoint), now) for endpoint in candidates}
    return sorted(candidates, key=lambda endpoint: keys[endpoint])
