"""EVM JSON-RPC client with health-ranked endpoint failover."""
from __future__ import annotations

import logging
import ssl
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable

import aiohttp
import certifi

from ...amounts import from_base_units
from ...config import ChainConfig, TokenConfig
from ...exceptions import EndpointUnavailable
from ...models import TxInfo
from ...rpc import FailoverRunner

logger = logging.getLogger(__name__)

BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)


def _pad_address(address: str) -> str:
    return address.lower().removeprefix("0x").rjust(64, "0")


def _parse_hex_quantity(value: Any) -> int:
    """Decode a hex quantity; an empty ``0x`` (no contract code) reads as zero."""
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ValueError(f"not a hex quantity: {value!r}")
    if value == "0x":
        return 0
    return int(value, 16)


class EvmClient:
    """Reads balances and history for one EVM chain.

    Node calls go through the shared FailoverRunner, so endpoint health
    learned here also steers other chains that list the same URL.
    """

    def __init__(self, config: ChainConfig, runner: FailoverRunner) -> None:
        self.chain = config
        self.timeout = config.rpc_timeout
        self._runner = runner
        self._ssl_context = ssl.create_default_context(cafile=certifi.where())

    @property
    def endpoints(self) -> tuple[str, ...]:
        return self.chain.rpc_endpoints

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _post(self, url: str, payload: dict[str, Any], timeout: float) -> Any:
        connector = aiohttp.TCPConnector(ssl=self._ssl_context)
        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.post(
                url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                if response.status != 200:
                    raise EndpointUnavailable(url, f"HTTP {response.status}")
                result = await response.json(content_type=None)
                if not isinstance(result, dict):
                    raise EndpointUnavailable(url, "malformed JSON-RPC response")
                if "error" in result:
                    raise EndpointUnavailable(url, f"RPC Error: {result['error']}")
                if "result" not in result:
                    raise EndpointUnavailable(url, "JSON-RPC response has no result")
                return result["result"]

    async def rpc_call(
        self,
        method: str,
        params: list[Any],
        parse: Callable[[Any], Any] | None = None,
    ) -> Any:
        """Make a JSON-RPC call, failing over across the chain's endpoints.

        ``parse`` runs inside the attempt, so a result it rejects counts
        against that endpoint like a timeout would.
        """
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        async def request(url: str, timeout: float) -> Any:
            result = await self._post(url, payload, timeout)
            if parse is None:
                return result
            try:
                return parse(result)
            except (ValueError, TypeError) as e:
                raise EndpointUnavailable(url, f"malformed result: {e}") from e

        return await self._runner.attempt_query(self.endpoints, request, self.timeout)

    async def _get_explorer(self, url: str, params: dict[str, Any], timeout: float) -> list[dict[str, Any]]:
        connector = aiohttp.TCPConnector(ssl=self._ssl_context)
        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                if response.status != 200:
                    raise EndpointUnavailable(url, f"HTTP {response.status}")
                data = await response.json(content_type=None)

        if not isinstance(data, dict):
            raise EndpointUnavailable(url, "malformed explorer response")
        result = data.get("result")
        if str(data.get("status")) == "1" and isinstance(result, list):
            return result
        # Etherscan reports an empty history as status 0
        if isinstance(result, list) and "no transactions" in str(data.get("message", "")).lower():
            return []
        raise EndpointUnavailable(url, f"explorer error: {data.get('message')} {result}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_native_balance(self, address: str) -> Decimal:
        """Native coin balance, scaled by the chain's decimals."""
        wei = await self.rpc_call(
            "eth_getBalance", [address, "latest"], parse=_parse_hex_quantity
        )
        return from_base_units(wei, self.chain.decimals)

    async def get_token_balance(self, address: str, token: TokenConfig) -> Decimal:
        """ERC-20 ``balanceOf`` for ``address``, scaled by the token's decimals."""
        data = BALANCE_OF_SELECTOR + _pad_address(address)
        units = await self.rpc_call(
            "eth_call",
            [{"to": token.contract, "data": data}, "latest"],
            parse=_parse_hex_quantity,
        )
        return from_base_units(units, token.decimals)

    async def get_transactions(self, address: str, limit: int = 20) -> list[TxInfo]:
        """Most recent transactions from the chain's explorer API, newest first."""
        if not self.chain.explorer_api_url:
            return []

        params: dict[str, Any] = {
            "module": "account",
            "action": "txlist",
            "address": address,
            "sort": "desc",
            "page": 1,
            "offset": limit,
        }
        if self.chain.explorer_api_key:
            params["apikey"] = self.chain.explorer_api_key

        async def request(url: str, timeout: float) -> list[TxInfo]:
            items = await self._get_explorer(url, params, timeout)
            try:
                return [self._parse_tx(item) for item in items[:limit]]
            except (ValueError, TypeError, AttributeError) as e:
                raise EndpointUnavailable(url, f"malformed transaction: {e}") from e

        return await self._runner.attempt_query(
            (self.chain.explorer_api_url,), request, self.timeout
        )

    def _parse_tx(self, item: dict[str, Any]) -> TxInfo:
        timestamp = None
        if item.get("timeStamp"):
            timestamp = datetime.fromtimestamp(int(item["timeStamp"]), tz=timezone.utc)
        return TxInfo(
            hash=item.get("hash", ""),
            from_address=(item.get("from") or "").lower(),
            to_address=(item.get("to") or "").lower(),
            chain=self.chain.name,
            value=from_base_units(int(item.get("value") or 0), self.chain.decimals),
            block_number=int(item.get("blockNumber") or 0),
            timestamp=timestamp,
        )
