"""Chain client protocol — per-chain balance and history queries."""
from decimal import Decimal
from typing import Protocol

from ..config import TokenConfig
from ..models import TxInfo


class ChainClient(Protocol):
    """Abstract interface for reading account data from one chain."""

    @property
    def endpoints(self) -> tuple[str, ...]: ...

    async def get_native_balance(self, address: str) -> Decimal: ...

    async def get_token_balance(self, address: str, token: TokenConfig) -> Decimal: ...

    async def get_transactions(self, address: str, limit: int = 20) -> list[TxInfo]: ...
