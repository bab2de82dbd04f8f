"""Transaction direction classification and filtering. No I/O."""
from __future__ import annotations

from typing import Iterable

from ..models import TxFilter, TxInfo


def is_outgoing(tx: TxInfo, address: str) -> bool:
    return tx.from_address == address


def is_incoming(tx: TxInfo, address: str) -> bool:
    return tx.to_address == address


def direction_label(tx: TxInfo, address: str) -> str:
    """Short label for report lines: OUT, IN, SELF or "—" for third-party txs."""
    outgoing = is_outgoing(tx, address)
    incoming = is_incoming(tx, address)
    if outgoing and incoming:
        return "SELF"
    if outgoing:
        return "OUT"
    if incoming:
        return "IN"
    return "—"


def filter_transactions(
    transactions: Iterable[TxInfo],
    address: str,
    tx_filter: TxFilter | str,
) -> list[TxInfo]:
    """Return the matching subsequence in original order.

    ``in`` keeps everything that is not outgoing, so a transaction between
    two other addresses is listed under ``in`` as well.
    """
    tx_filter = TxFilter(tx_filter)
    if tx_filter is TxFilter.OUT:
        return [tx for tx in transactions if is_outgoing(tx, address)]
    if tx_filter is TxFilter.IN:
        return [tx for tx in transactions if not is_outgoing(tx, address)]
    return list(transactions)
