"""Decimal helpers for on-chain amounts and USD values."""
from __future__ import annotations

from decimal import Context, Decimal

# All balance and value arithmetic runs in this context; nothing is rounded
# to float before the formatting helpers. A uint256 has up to 78 digits and a
# float price adds at most 17 more.
PRECISION = Context(prec=120)

ZERO = Decimal(0)


def from_base_units(raw: int, decimals: int) -> Decimal:
    """Scale an integer on-chain amount (wei, token units) to whole coins.

    Only the exponent changes, so the result is exact for any ``raw``.
    """
    sign, digits, exponent = Decimal(raw).as_tuple()
    return Decimal((sign, digits, exponent - decimals))


def to_decimal_price(price: float) -> Decimal:
    """Promote a float price through its shortest repr (2000.0 → Decimal('2000.0'))."""
    return Decimal(repr(float(price)))
