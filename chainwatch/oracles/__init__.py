"""Price oracle clients."""
from __future__ import annotations

from ..config import PriceOracleConfig
from ..interfaces.price_oracle import PriceOracle
from .coingecko import CoinGeckoOracle
from .pyth import PythOracle


def build_oracle(config: PriceOracleConfig) -> PriceOracle:
    if config.provider == "pyth":
        return PythOracle(config.pyth)
    return CoinGeckoOracle(config.coingecko)


__all__ = ["CoinGeckoOracle", "PythOracle", "build_oracle"]
