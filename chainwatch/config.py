"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

TX_FILTERS = ("all", "in", "out")
PRICE_PROVIDERS = ("coingecko", "pyth")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonitorConfig:
    poll_interval_seconds: int = 30
    price_refresh_seconds: int = 120
    rpc_cooldown_seconds: float = 60.0
    tx_limit: int = 20
    tx_filter: str = "all"
    privacy_mode: bool = False


@dataclass(frozen=True)
class AccountConfig:
    label: str = ""
    address: str = ""


@dataclass(frozen=True)
class TokenConfig:
    symbol: str = ""
    price_feed_id: str = ""
    contract: str = ""
    decimals: int = 18


@dataclass(frozen=True)
class ChainConfig:
    name: str = ""
    price_feed_id: str = ""
    tokens: tuple[TokenConfig, ...] = ()
    native_symbol: str = ""
    decimals: int = 18
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: float = 10.0
    explorer_api_url: str = ""
    explorer_api_key: str = ""

    def token(self, symbol: str) -> TokenConfig | None:
        for token in self.tokens:
            if token.symbol == symbol:
                return token
        return None


@dataclass(frozen=True)
class CoinGeckoConfig:
    base_url: str = "https://api.coingecko.com/api/v3"
    api_key: str = ""
    vs_currency: str = "usd"


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "coingecko"
    coingecko: CoinGeckoConfig = field(default_factory=CoinGeckoConfig)
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class AppConfig:
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    accounts: tuple[AccountConfig, ...] = ()
    chains: tuple[ChainConfig, ...] = ()
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)

    def chain(self, name: str) -> ChainConfig | None:
        for chain in self.chains:
            if chain.name == name:
                return chain
        return None


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _as_bool(value: Any) -> bool:
    """YAML booleans pass through; interpolated strings like "false" are parsed."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _build_monitor(raw: dict[str, Any]) -> MonitorConfig:
    return MonitorConfig(
        poll_interval_seconds=int(raw.get("poll_interval_seconds", 30)),
        price_refresh_seconds=int(raw.get("price_refresh_seconds", 120)),
        rpc_cooldown_seconds=float(raw.get("rpc_cooldown_seconds", 60.0)),
        tx_limit=int(raw.get("tx_limit", 20)),
        tx_filter=str(raw.get("tx_filter", "all")).lower(),
        privacy_mode=_as_bool(raw.get("privacy_mode", False)),
    )


def _build_accounts(raw: list[dict[str, Any]]) -> tuple[AccountConfig, ...]:
    accounts: list[AccountConfig] = []
    for a in raw:
        accounts.append(
            AccountConfig(
                label=a.get("label", ""),
                address=str(a.get("address", "")).strip(),
            )
        )
    return tuple(accounts)


def _build_tokens(raw: list[dict[str, Any]]) -> tuple[TokenConfig, ...]:
    return tuple(
        TokenConfig(
            symbol=t.get("symbol", ""),
            price_feed_id=t.get("price_feed_id", ""),
            contract=t.get("contract", ""),
            decimals=int(t.get("decimals", 18)),
        )
        for t in raw
    )


def _build_chains(raw: list[dict[str, Any]]) -> tuple[ChainConfig, ...]:
    chains: list[ChainConfig] = []
    for cfg in raw:
        chains.append(
            ChainConfig(
                name=cfg.get("name", ""),
                price_feed_id=cfg.get("price_feed_id", ""),
                tokens=_build_tokens(cfg.get("tokens", []) or []),
                native_symbol=cfg.get("native_symbol", ""),
                decimals=int(cfg.get("decimals", 18)),
                rpc_endpoints=tuple(cfg.get("rpc_endpoints", []) or []),
                rpc_timeout=float(cfg.get("rpc_timeout", 10.0)),
                explorer_api_url=cfg.get("explorer_api_url", "") or "",
                explorer_api_key=cfg.get("explorer_api_key", "") or "",
            )
        )
    return tuple(chains)


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    cg_raw = raw.get("coingecko", {}) or {}
    pyth_raw = raw.get("pyth", {}) or {}
    return PriceOracleConfig(
        provider=raw.get("provider", "coingecko"),
        coingecko=CoinGeckoConfig(
            base_url=cg_raw.get("base_url", CoinGeckoConfig.base_url),
            api_key=cg_raw.get("api_key", ""),
            vs_currency=cg_raw.get("vs_currency", "usd"),
        ),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        monitor=_build_monitor(raw.get("monitor", {}) or {}),
        accounts=_build_accounts(raw.get("accounts", []) or []),
        chains=_build_chains(raw.get("chains", []) or []),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {}) or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.accounts:
        raise ValueError("At least one account must be configured")

    for account in cfg.accounts:
        if not account.address:
            raise ValueError(f"Account '{account.label}' has no address")

    if not cfg.chains:
        raise ValueError("At least one chain must be configured")

    seen: set[str] = set()
    for chain in cfg.chains:
        if not chain.name:
            raise ValueError("Every chain needs a name")
        if chain.name in seen:
            raise ValueError(f"Duplicate chain name '{chain.name}'")
        seen.add(chain.name)
        if not chain.rpc_endpoints:
            raise ValueError(f"Chain '{chain.name}' has no rpc_endpoints")
        urls: set[str] = set()
        for url in chain.rpc_endpoints:
            if url in urls:
                raise ValueError(
                    f"Chain '{chain.name}' lists rpc endpoint '{url}' more than once"
                )
            urls.add(url)

    if cfg.monitor.tx_filter not in TX_FILTERS:
        raise ValueError(
            f"tx_filter must be one of {', '.join(TX_FILTERS)}, "
            f"got '{cfg.monitor.tx_filter}'"
        )

    if cfg.price_oracle.provider not in PRICE_PROVIDERS:
        raise ValueError(
            f"Unknown price oracle provider '{cfg.price_oracle.provider}'"
        )
