"""Protocol interfaces for the chain monitor."""
from .chain import ChainClient
from .price_oracle import PriceOracle

__all__ = ["ChainClient", "PriceOracle"]
