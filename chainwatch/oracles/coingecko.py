"""CoinGecko simple-price oracle."""
from __future__ import annotations

import logging
import ssl
from typing import Iterable

import aiohttp
import certifi

from ..config import CoinGeckoConfig

logger = logging.getLogger(__name__)


class CoinGeckoOracle:
    """Fetch prices from CoinGecko's ``/simple/price`` endpoint by coin id."""

    def __init__(self, config: CoinGeckoConfig, timeout: float = 15.0) -> None:
        self.base_url = config.base_url.rstrip("/")
        self.api_key = config.api_key
        self.vs_currency = config.vs_currency
        self.timeout = timeout

    async def fetch_prices(self, feed_ids: Iterable[str]) -> dict[str, float]:
        prices: dict[str, float] = {}

        ids = sorted({fid for fid in feed_ids if fid})
        if not ids:
            return prices

        url = f"{self.base_url}/simple/price"
        params = {"ids": ",".join(ids), "vs_currencies": self.vs_currency}
        headers = {"accept": "application/json"}
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from CoinGecko: HTTP %s",
                            response.status,
                        )
                        return prices

                    data = await response.json()
                    for coin_id in ids:
                        quote = data.get(coin_id, {}).get(self.vs_currency)
                        if quote is not None:
                            prices[coin_id] = float(quote)

                    missing = [coin_id for coin_id in ids if coin_id not in prices]
                    if missing:
                        logger.warning("No CoinGecko price for: %s", ", ".join(missing))
                    logger.info("Fetched %d prices from CoinGecko", len(prices))

        except Exception as e:
            logger.error("Error fetching prices from CoinGecko: %s", e)

        return prices
