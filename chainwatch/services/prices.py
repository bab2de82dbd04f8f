"""Price table snapshots, replaced wholesale on every refresh."""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from ..config import ChainConfig
from ..interfaces.price_oracle import PriceOracle

logger = logging.getLogger(__name__)


def collect_feed_ids(chains: Iterable[ChainConfig]) -> list[str]:
    """Every chain and token feed id, first-seen order, no duplicates."""
    seen: dict[str, None] = {}
    for chain in chains:
        if chain.price_feed_id:
            seen.setdefault(chain.price_feed_id)
        for token in chain.tokens:
            if token.price_feed_id:
                seen.setdefault(token.price_feed_id)
    return list(seen)


class PriceBook:
    """Holds the current feed id → USD price table.

    Readers get a read-only mapping; ``refresh`` swaps in a complete new
    one, so a half-updated table is never visible.
    """

    def __init__(self, oracle: PriceOracle, initial: Mapping[str, float] | None = None) -> None:
        self._oracle = oracle
        self._table: Mapping[str, float] = MappingProxyType(dict(initial or {}))

    @property
    def table(self) -> Mapping[str, float]:
        return self._table

    def replace(self, prices: Mapping[str, float]) -> None:
        self._table = MappingProxyType(dict(prices))

    async def refresh(self, feed_ids: Iterable[str]) -> Mapping[str, float]:
        """Fetch prices for ``feed_ids`` and publish them.

        An empty answer for a non-empty request keeps the previous table.
        """
        feed_ids = list(feed_ids)
        if not feed_ids:
            return self._table

        prices = await self._oracle.fetch_prices(feed_ids)
        if not prices:
            logger.warning("Price refresh returned nothing; keeping previous prices")
            return self._table

        self.replace(prices)
        return self._table
