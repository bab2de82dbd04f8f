"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from decimal import Decimal
from pathlib import Path

import pytest

from chainwatch.config import (
    AccountConfig,
    AppConfig,
    ChainConfig,
    CoinGeckoConfig,
    MonitorConfig,
    PriceOracleConfig,
    TokenConfig,
)
from chainwatch.models import AccountState, TxInfo


class FakeClock:
    """Manually advanced clock for registry and runner tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def usdc_token() -> TokenConfig:
    return TokenConfig(
        symbol="USDC",
        price_feed_id="usd-coin",
        contract="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        decimals=6,
    )


@pytest.fixture()
def ethereum_chain(usdc_token: TokenConfig) -> ChainConfig:
    return ChainConfig(
        name="Ethereum",
        price_feed_id="ethereum",
        tokens=(usdc_token,),
        native_symbol="ETH",
        decimals=18,
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=5,
        explorer_api_url="https://explorer.example.com/api",
    )


@pytest.fixture()
def polygon_chain() -> ChainConfig:
    return ChainConfig(
        name="Polygon",
        price_feed_id="matic-network",
        native_symbol="POL",
        rpc_endpoints=("https://polygon1.example.com",),
        rpc_timeout=5,
    )


@pytest.fixture()
def sample_app_config(
    ethereum_chain: ChainConfig, polygon_chain: ChainConfig
) -> AppConfig:
    return AppConfig(
        monitor=MonitorConfig(
            poll_interval_seconds=5,
            price_refresh_seconds=60,
            rpc_cooldown_seconds=30.0,
            tx_limit=10,
        ),
        accounts=(AccountConfig(label="main", address="0xMyAddress"),),
        chains=(ethereum_chain, polygon_chain),
        price_oracle=PriceOracleConfig(
            provider="coingecko", coingecko=CoinGeckoConfig(base_url="https://cg.example.com")
        ),
    )


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_transactions() -> list[TxInfo]:
    return [
        TxInfo(hash="0x1", from_address="0xMyAddress", to_address="0xOther"),
        TxInfo(hash="0x2", from_address="0xOther", to_address="0xMyAddress"),
        TxInfo(hash="0x3", from_address="0xOther", to_address="0xOther"),
    ]


@pytest.fixture()
def sample_account(sample_transactions: list[TxInfo]) -> AccountState:
    return AccountState(
        address="0xMyAddress",
        label="main",
        balances={"Ethereum": Decimal("1.5")},
        token_balances={"Ethereum": {"USDC": Decimal("100")}},
        transactions=list(sample_transactions),
    )


@pytest.fixture()
def sample_prices() -> dict[str, float]:
    return {"ethereum": 2000.0, "usd-coin": 1.0}


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    monitor:
      poll_interval_seconds: 15
      price_refresh_seconds: 90
      rpc_cooldown_seconds: 45
      tx_limit: 5
      tx_filter: out
      privacy_mode: true
    accounts:
      - label: main
        address: "0xTEST"
    chains:
      - name: Ethereum
        price_feed_id: ethereum
        native_symbol: ETH
        rpc_endpoints: ["https://rpc.example.com", "https://rpc2.example.com"]
        rpc_timeout: 7
        explorer_api_url: "https://explorer.example.com/api"
        tokens:
          - symbol: USDC
            price_feed_id: usd-coin
            contract: "0xusdc"
            decimals: 6
      - name: Polygon
        price_feed_id: matic-network
        rpc_endpoints: ["https://polygon.example.com"]
    price_oracle:
      provider: pyth
      pyth:
        hermes_url: "https://hermes.example.com"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
