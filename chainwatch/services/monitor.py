"""Monitoring session: polls accounts across chains and renders the report."""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable, Mapping

from ..chains.evm import EvmClient
from ..config import AppConfig, ChainConfig
from ..exceptions import AllEndpointsExhausted
from ..formatting import (
    format_decimal,
    mask_address,
    mask_string,
    short_address,
    truncate_string,
)
from ..interfaces.chain import ChainClient
from ..interfaces.price_oracle import PriceOracle
from ..models import AccountState, TxFilter, TxInfo
from ..oracles import build_oracle
from ..rpc import FailoverRunner, RPCHealthRegistry, prioritize_endpoints
from . import portfolio
from .prices import PriceBook, collect_feed_ids
from .transactions import direction_label, filter_transactions

logger = logging.getLogger(__name__)


def normalize_address(address: str) -> str:
    """EVM addresses compare lowercase; explorers report them that way."""
    address = address.strip()
    if address[:2].lower() == "0x":
        return address.lower()
    return address


class Monitor:
    """Holds the session state: chains, prices, endpoint health and accounts."""

    def __init__(
        self,
        config: AppConfig,
        registry: RPCHealthRegistry | None = None,
        oracle: PriceOracle | None = None,
    ) -> None:
        self._config = config
        self.chains: tuple[ChainConfig, ...] = config.chains
        self.registry = registry or RPCHealthRegistry()
        self._runner = FailoverRunner(
            self.registry, cooldown=config.monitor.rpc_cooldown_seconds
        )

        # Build chain clients
        self._clients: dict[str, ChainClient] = {
            chain.name: EvmClient(chain, self._runner) for chain in self.chains
        }

        self._price_book = PriceBook(oracle or build_oracle(config.price_oracle))
        self._last_price_refresh: float | None = None

        self.tx_filter = TxFilter(config.monitor.tx_filter)
        self.privacy_mode = config.monitor.privacy_mode

        self._accounts: dict[str, AccountState] = {}
        for account_cfg in config.accounts:
            self.add_account(account_cfg.address, account_cfg.label)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    @property
    def accounts(self) -> list[AccountState]:
        return list(self._accounts.values())

    def add_account(self, address: str, label: str = "") -> AccountState:
        address = normalize_address(address)
        if address not in self._accounts:
            self._accounts[address] = AccountState(address=address, label=label)
        return self._accounts[address]

    def remove_account(self, address: str) -> bool:
        return self._accounts.pop(normalize_address(address), None) is not None

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    @property
    def prices(self) -> Mapping[str, float]:
        return self._price_book.table

    async def refresh_prices(self) -> Mapping[str, float]:
        table = await self._price_book.refresh(collect_feed_ids(self.chains))
        self._last_price_refresh = time.monotonic()
        return table

    def _prices_due(self) -> bool:
        if self._last_price_refresh is None:
            return True
        elapsed = time.monotonic() - self._last_price_refresh
        return elapsed >= self._config.monitor.price_refresh_seconds

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def poll_chain(self, account: AccountState, chain: ChainConfig) -> bool:
        """Refresh one account on one chain.

        Nothing is written unless the native balance, every token balance
        and the transaction list were all fetched.
        """
        client = self._clients[chain.name]
        try:
            native = await client.get_native_balance(account.address)
            tokens: dict[str, Decimal] = {}
            for token in chain.tokens:
                tokens[token.symbol] = await client.get_token_balance(
                    account.address, token
                )
            txs = await client.get_transactions(
                account.address, self._config.monitor.tx_limit
            )
        except AllEndpointsExhausted as e:
            logger.warning(
                "%s on %s: keeping last-known data (%s)",
                account.label or account.address,
                chain.name,
                e,
            )
            return False

        account.balances[chain.name] = native
        if chain.tokens:
            account.token_balances[chain.name] = tokens
        self._replace_chain_transactions(account, chain.name, txs)
        account.updated_at[chain.name] = datetime.now(timezone.utc)
        return True

    def _replace_chain_transactions(
        self, account: AccountState, chain_name: str, txs: list[TxInfo]
    ) -> None:
        """Swap one chain's slice of the history, keeping configured chain order."""
        by_chain: dict[str, list[TxInfo]] = {}
        for tx in account.transactions:
            by_chain.setdefault(tx.chain, []).append(tx)
        by_chain[chain_name] = list(txs)

        ordered: list[TxInfo] = []
        for chain in self.chains:
            ordered.extend(by_chain.pop(chain.name, []))
        for rest in by_chain.values():
            ordered.extend(rest)
        account.transactions = ordered

    async def poll_account(self, account: AccountState) -> dict[str, bool]:
        """Run one pass per chain concurrently; returns chain name → success."""
        results = await asyncio.gather(
            *(self.poll_chain(account, chain) for chain in self.chains)
        )
        return {chain.name: ok for chain, ok in zip(self.chains, results)}

    async def poll_all(self) -> None:
        await asyncio.gather(*(self.poll_account(a) for a in self.accounts))

    async def run_cycle(self) -> None:
        if self._prices_due():
            await self.refresh_prices()
        await self.poll_all()

    async def run_continuous(
        self,
        interval_seconds: int | None = None,
        on_report: Callable[[str], None] | None = None,
    ) -> None:
        """Run the polling loop forever."""
        interval = interval_seconds
        if interval is None:
            interval = self._config.monitor.poll_interval_seconds
        logger.info("Starting continuous monitoring (polling every %d seconds)", interval)

        while True:
            try:
                await self.run_cycle()
                if on_report is not None:
                    on_report(self.build_report())
            except Exception as e:
                logger.error("Error in monitoring loop: %s", e)
            await asyncio.sleep(interval)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_prioritized_rpcs(self, candidates: Iterable[str]) -> list[str]:
        return prioritize_endpoints(candidates, self.registry)

    def get_filtered_transactions(self, account: AccountState) -> list[TxInfo]:
        return filter_transactions(account.transactions, account.address, self.tx_filter)

    def calculate_account_total(self, account: AccountState) -> Decimal:
        return portfolio.calculate_account_total(account, self.chains, self.prices)

    def total_value(self) -> Decimal:
        return portfolio.portfolio_total(self.accounts, self.chains, self.prices)

    def cycle_tx_filter(self) -> TxFilter:
        self.tx_filter = self.tx_filter.next()
        return self.tx_filter

    def toggle_privacy(self) -> bool:
        self.privacy_mode = not self.privacy_mode
        return self.privacy_mode

    def mask_string(self, value: str) -> str:
        return mask_string(value, self.privacy_mode)

    def mask_address(self, address: str) -> str:
        return mask_address(address, self.privacy_mode)

    # ------------------------------------------------------------------
    # Text rendering
    # ------------------------------------------------------------------

    def _usd(self, value: Decimal) -> str:
        return self.mask_string("$" + format_decimal(value, 2))

    def _amount(self, value: Decimal, decimals: int = 4) -> str:
        return self.mask_string(format_decimal(value, decimals))

    def _account_lines(self, account: AccountState) -> list[str]:
        title = account.label or "account"
        address = self.mask_address(short_address(account.address))
        lines = [f"━━ {title} ({address}) ━━"]

        for chain in self.chains:
            if chain.name not in account.balances:
                lines.append(f"  {chain.name}: no data yet")
                continue
            native = account.balances[chain.name]
            native_value = portfolio.value_of(native, chain.price_feed_id, self.prices)
            symbol = chain.native_symbol or chain.name
            lines.append(
                f"  {chain.name}: {self._amount(native)} {symbol} ({self._usd(native_value)})"
            )
            for symbol, balance in account.token_balances.get(chain.name, {}).items():
                token = chain.token(symbol)
                feed_id = token.price_feed_id if token else ""
                value = portfolio.value_of(balance, feed_id, self.prices)
                lines.append(
                    f"    {symbol}: {self._amount(balance)} ({self._usd(value)})"
                )

        lines.append(f"  Total: {self._usd(self.calculate_account_total(account))}")

        txs = self.get_filtered_transactions(account)
        lines.append(f"  Transactions ({self.tx_filter.value}): {len(txs)}")
        for tx in txs:
            counterparty = tx.to_address if tx.from_address == account.address else tx.from_address
            lines.append(
                f"    {direction_label(tx, account.address):<4} "
                f"{truncate_string(tx.hash, 14):<14} "
                f"{tx.chain:<10} "
                f"{self._amount(tx.value)} "
                f"{self.mask_address(short_address(counterparty))}"
            )
        return lines

    def build_report(self) -> str:
        sections = ["\n".join(self._account_lines(a)) for a in self.accounts]
        body = "\n\n".join(sections) if sections else "No accounts configured."
        now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        return (
            f"📊 Portfolio: {self._usd(self.total_value())}\n"
            f"\n"
            f"{body}\n"
            f"\n"
            f"RPC health:\n"
            f"{self.build_rpc_status()}\n"
            f"\n"
            f"{now} UTC"
        )

    def build_rpc_status(self) -> str:
        now = self.registry.now()
        lines: list[str] = []
        for chain in self.chains:
            lines.append(f"━━ {chain.name} ━━")
            for rank, endpoint in enumerate(
                self.get_prioritized_rpcs(chain.rpc_endpoints), start=1
            ):
                record = self.registry.get(endpoint)
                status = str(record.latency)
                if record.in_cooldown(now):
                    status += f", cooldown {record.cooldown_until - now:.0f}s"
                lines.append(f"  {rank}. {endpoint} [{status}]")
        return "\n".join(lines)
