"""Unit tests for portfolio valuation."""
from __future__ import annotations

from decimal import Decimal

from chainwatch.amounts import from_base_units, to_decimal_price
from chainwatch.models import AccountState
from chainwatch.services.portfolio import calculate_account_total, portfolio_total, value_of


class TestValueOf:
    def test_priced(self) -> None:
        assert value_of(Decimal("2"), "ethereum", {"ethereum": 1500.5}) == Decimal("3001")

    def test_missing_price_is_zero(self) -> None:
        assert value_of(Decimal("2"), "ethereum", {}) == 0

    def test_blank_feed_is_zero(self) -> None:
        assert value_of(Decimal("2"), "", {"": 10.0}) == 0


class TestAccountTotal:
    def test_native_plus_tokens(self, sample_account, ethereum_chain, sample_prices) -> None:
        total = calculate_account_total(sample_account, [ethereum_chain], sample_prices)
        assert total == Decimal("3100")

    def test_empty_account(self, ethereum_chain, sample_prices) -> None:
        account = AccountState(address="0xabc")
        assert calculate_account_total(account, [ethereum_chain], sample_prices) == 0

    def test_missing_price_contributes_zero(self, sample_account, ethereum_chain) -> None:
        total = calculate_account_total(sample_account, [ethereum_chain], {"usd-coin": 1.0})
        assert total == Decimal("100")

    def test_unconfigured_chain_ignored(self, ethereum_chain, sample_prices) -> None:
        account = AccountState(
            address="0xabc",
            balances={"Ethereum": Decimal("1"), "Gnosis": Decimal("50")},
            token_balances={"Gnosis": {"USDC": Decimal("10")}},
        )
        assert calculate_account_total(account, [ethereum_chain], sample_prices) == Decimal("2000")

    def test_unconfigured_token_ignored(self, ethereum_chain, sample_prices) -> None:
        account = AccountState(
            address="0xabc",
            token_balances={"Ethereum": {"USDC": Decimal("5"), "DAI": Decimal("7")}},
        )
        assert calculate_account_total(account, [ethereum_chain], sample_prices) == Decimal("5")

    def test_wei_precision_survives(self, ethereum_chain) -> None:
        account = AccountState(
            address="0xabc",
            balances={"Ethereum": from_base_units(1, 18)},
        )
        total = calculate_account_total(account, [ethereum_chain], {"ethereum": 3.0})
        assert total == Decimal("3E-18")


class TestPortfolioTotal:
    def test_sums_accounts(self, sample_account, ethereum_chain, polygon_chain) -> None:
        other = AccountState(address="0xdef", balances={"Polygon": Decimal("10")})
        prices = {"ethereum": 2000.0, "usd-coin": 1.0, "matic-network": 0.5}
        total = portfolio_total([sample_account, other], [ethereum_chain, polygon_chain], prices)
        assert total == Decimal("3105")

    def test_no_accounts(self, ethereum_chain, sample_prices) -> None:
        assert portfolio_total([], [ethereum_chain], sample_prices) == 0


class TestAmounts:
    def test_from_base_units(self) -> None:
        assert from_base_units(1_500_000_000_000_000_000, 18) == Decimal("1.5")
        assert from_base_units(100_000_000, 6) == Decimal("100")
        assert from_base_units(0, 18) == 0

    def test_max_uint256_kept_exact(self) -> None:
        amount = from_base_units(2**256 - 1, 18)
        assert amount == Decimal(
            "115792089237316195423570985008687907853269984665640564039457.584007913129639935"
        )

    def test_max_uint256_valued_exact(self, ethereum_chain) -> None:
        account = AccountState(
            address="0xabc",
            token_balances={"Ethereum": {"USDC": from_base_units(2**256 - 1, 6)}},
        )
        total = calculate_account_total(account, [ethereum_chain], {"usd-coin": 0.5})
        assert total == from_base_units((2**256 - 1) * 5, 7)

    def test_price_promoted_through_repr(self) -> None:
        assert to_decimal_price(0.1) == Decimal("0.1")
        assert to_decimal_price(2000) == Decimal("2000.0")
