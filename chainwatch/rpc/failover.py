"""Sequential failover over a ranked list of endpoints."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Iterable, TypeVar

from ..exceptions import AllEndpointsExhausted, EndpointUnavailable
from .health import RPCHealthRegistry
from .prioritizer import prioritize_endpoints

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_COOLDOWN_SECONDS = 60.0

Request = Callable[[str, float], Awaitable[T]]


class FailoverRunner:
    """Run one query pass: try endpoints one at a time, best first.

    Every attempt outcome is written to the shared registry. The cooldown
    set on failure is the only backoff; no endpoint is retried within a
    pass.
    """

    def __init__(
        self,
        registry: RPCHealthRegistry,
        cooldown: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.registry = registry
        self.cooldown = cooldown
        self._clock = clock

    def prioritize(self, candidates: Iterable[str]) -> list[str]:
        return prioritize_endpoints(candidates, self.registry)

    async def attempt_query(
        self,
        candidates: Iterable[str],
        request: Request[T],
        timeout: float,
    ) -> T:
        """Return the first successful ``request(endpoint, timeout)`` result.

        Raises:
            AllEndpointsExhausted: every candidate failed, or there were none.
        """
        # One attempt per endpoint id, even if a caller lists it twice
        ordered = self.prioritize(dict.fromkeys(candidates))
        errors: list[EndpointUnavailable] = []

        for endpoint in ordered:
            started = self._clock()
            try:
                result = await asyncio.wait_for(request(endpoint, timeout), timeout)
            except asyncio.TimeoutError:
                error = EndpointUnavailable(endpoint, f"timed out after {timeout}s")
            except EndpointUnavailable as e:
                error = e
            except Exception as e:
                error = EndpointUnavailable(endpoint, f"{type(e).__name__}: {e}")
            else:
                latency = self._clock() - started
                self.registry.record_success(endpoint, latency)
                if errors:
                    logger.info(
                        "RPC endpoint %s succeeded after %d fallback(s)",
                        endpoint,
                        len(errors),
                    )
                return result

            self.registry.record_failure(endpoint, self.cooldown)
            errors.append(error)
            logger.warning("RPC endpoint %s failed: %s", endpoint, error.reason)

        raise AllEndpointsExhausted(tuple(ordered), tuple(errors))
