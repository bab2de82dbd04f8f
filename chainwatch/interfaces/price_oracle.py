"""Price oracle protocol — price feed abstraction."""
from typing import Iterable, Protocol


class PriceOracle(Protocol):
    """Abstract interface for fetching USD prices by feed id.

    Feed ids the oracle cannot resolve are left out of the result.
    """

    async def fetch_prices(self, feed_ids: Iterable[str]) -> dict[str, float]: ...
