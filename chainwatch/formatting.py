"""String formatting and privacy masking for report output."""
from __future__ import annotations

from decimal import Decimal

MASK = "****"


def truncate_string(value: str, length: int) -> str:
    """Cut ``value`` to ``length`` characters, ending in "..." when there is room.

    Examples:
        ("hello world", 5) → "he..."
        ("abc", 2) → "ab"
    """
    if len(value) < length:
        return value
    if length <= 3:
        return value[:length]
    return value[: length - 3] + "..."


def add_commas(value: str) -> str:
    """Insert thousands separators into a plain numeric string ("-1234.5" → "-1,234.5")."""
    if not value:
        return value

    sign = ""
    if value[0] in "+-":
        sign, value = value[0], value[1:]

    integer, dot, fraction = value.partition(".")
    groups: list[str] = []
    while len(integer) > 3:
        groups.append(integer[-3:])
        integer = integer[:-3]
    groups.append(integer)

    return sign + ",".join(reversed(groups)) + dot + fraction


def format_float(value: float, decimals: int) -> str:
    return add_commas(f"{value:.{decimals}f}")


def format_decimal(value: Decimal | None, decimals: int) -> str:
    """Round a Decimal for display; this is the only place values lose precision."""
    if value is None:
        return "0"
    return add_commas(f"{value:.{decimals}f}")


def mask_string(value: str, privacy_mode: bool) -> str:
    return MASK if privacy_mode else value


def mask_address(address: str, privacy_mode: bool) -> str:
    """Keep only the two-character prefix of an address in privacy mode."""
    if not privacy_mode:
        return address
    return address[:2] + "**...**"


def short_address(address: str, head: int = 6, tail: int = 4) -> str:
    if len(address) <= head + tail + 3:
        return address
    return f"{address[:head]}...{address[-tail:]}"
