"""Balance × price aggregation in exact decimal arithmetic."""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Mapping

from ..amounts import PRECISION, ZERO, to_decimal_price
from ..config import ChainConfig
from ..models import AccountState


def value_of(
    amount: Decimal, feed_id: str, prices: Mapping[str, float]
) -> Decimal:
    """USD value of one holding; zero when the feed has no price."""
    if not feed_id or feed_id not in prices:
        return ZERO
    return PRECISION.multiply(amount, to_decimal_price(prices[feed_id]))


def calculate_account_total(
    account: AccountState,
    chains: Iterable[ChainConfig],
    prices: Mapping[str, float],
) -> Decimal:
    """Sum native and token holdings of an account in USD.

    A chain or token that is not configured, or whose feed id has no price,
    contributes exactly zero.
    """
    by_name = {chain.name: chain for chain in chains}
    total = ZERO

    for chain_name, balance in account.balances.items():
        chain = by_name.get(chain_name)
        if chain is None:
            continue
        total = PRECISION.add(total, value_of(balance, chain.price_feed_id, prices))

    for chain_name, tokens in account.token_balances.items():
        chain = by_name.get(chain_name)
        if chain is None:
            continue
        for symbol, balance in tokens.items():
            token = chain.token(symbol)
            if token is None:
                continue
            total = PRECISION.add(total, value_of(balance, token.price_feed_id, prices))

    return total


def portfolio_total(
    accounts: Iterable[AccountState],
    chains: Iterable[ChainConfig],
    prices: Mapping[str, float],
) -> Decimal:
    chains = tuple(chains)
    total = ZERO
    for account in accounts:
        total = PRECISION.add(total, calculate_account_total(account, chains, prices))
    return total
