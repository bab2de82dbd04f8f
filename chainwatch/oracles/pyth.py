"""Pyth Network (Hermes) price oracle."""
from __future__ import annotations

import logging
import ssl
from typing import Iterable

import aiohttp
import certifi

from ..config import PythConfig

logger = logging.getLogger(__name__)


def _normalize_feed_id(feed_id: str) -> str:
    """Hermes returns ids lowercase and without the 0x prefix."""
    feed_id = feed_id.strip().lower()
    return feed_id[2:] if feed_id.startswith("0x") else feed_id


class PythOracle:
    """Fetch prices from the Pyth Hermes API, keyed by price feed id."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url

    async def fetch_prices(self, feed_ids: Iterable[str]) -> dict[str, float]:
        """Fetch current prices for the given Pyth feed ids.

        The result is keyed by the ids exactly as requested.
        """
        prices: dict[str, float] = {}

        # Map normalized id back to every spelling the caller used
        requested: dict[str, list[str]] = {}
        for feed_id in feed_ids:
            if feed_id:
                requested.setdefault(_normalize_feed_id(feed_id), []).append(feed_id)
        if not requested:
            return prices

        query_params = "&".join(f"ids[]={fid}" for fid in sorted(requested))
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return prices

                    data = await response.json()
                    for item in data.get("parsed", []):
                        feed_id = _normalize_feed_id(str(item.get("id", "")))
                        if feed_id not in requested:
                            continue
                        price_data = item.get("price", {})
                        price_raw = int(price_data.get("price", 0))
                        expo = int(price_data.get("expo", 0))
                        price = price_raw * (10**expo)
                        for original in requested[feed_id]:
                            prices[original] = price

                    logger.info("Fetched %d prices from Pyth Network", len(prices))
                    for feed_id, price in sorted(prices.items()):
                        logger.debug("  %s: $%.4f", feed_id, price)

        except Exception as e:
            logger.error("Error fetching prices from Pyth: %s", e)

        return prices
