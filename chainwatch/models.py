"""Data models for account snapshots and transactions."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


class TxFilter(str, Enum):
    """Transaction direction filter shown in the report."""

    ALL = "all"
    IN = "in"
    OUT = "out"

    def next(self) -> TxFilter:
        """Cycle all → in → out → all."""
        order = list(TxFilter)
        return order[(order.index(self) + 1) % len(order)]


@dataclass(frozen=True)
class TxInfo:
    """Single transaction as reported by a chain explorer."""

    hash: str
    from_address: str
    to_address: str
    chain: str = ""
    value: Decimal = Decimal(0)
    block_number: int = 0
    timestamp: datetime | None = None


@dataclass
class AccountState:
    """Last-known-good view of one account across all chains.

    Only a fully successful per-chain pass writes into ``balances``,
    ``token_balances`` and the chain's slice of ``transactions``.
    """

    address: str
    label: str = ""
    balances: dict[str, Decimal] = field(default_factory=dict)
    token_balances: dict[str, dict[str, Decimal]] = field(default_factory=dict)
    transactions: list[TxInfo] = field(default_factory=list)
    updated_at: dict[str, datetime] = field(default_factory=dict)
