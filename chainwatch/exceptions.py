"""Exception types raised by the RPC failover layer."""
from __future__ import annotations


class ChainwatchError(Exception):
    """Base class for chainwatch errors."""


class EndpointUnavailable(ChainwatchError):
    """A single endpoint timed out, failed at transport level or answered garbage."""

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(f"{endpoint}: {reason}")
        self.endpoint = endpoint
        self.reason = reason


class AllEndpointsExhausted(ChainwatchError):
    """Every candidate endpoint in a pass failed."""

    def __init__(
        self,
        candidates: tuple[str, ...],
        errors: tuple[EndpointUnavailable, ...] = (),
    ) -> None:
        if candidates:
            detail = "; ".join(str(e) for e in errors) or "no attempts made"
            message = f"All RPC endpoints failed ({len(candidates)} tried): {detail}"
        else:
            message = "No RPC endpoints to try"
        super().__init__(message)
        self.candidates = candidates
        self.errors = errors
