"""Deterministic, totally ordered identifiers (TOIDs) for transactions and operations.

A TOID packs three indices into one signed 64-bit integer so that numeric
ordering equals ledger application order:

    bits 63..32  ledger sequence          (0 <= ledger < 2^31)
    bits 31..12  transaction index        (0 <= tx < 2^20, 1-based in a ledger)
    bits 11..0   operation index          (0 <= op < 2^12)

Operation index 0 is reserved for the transaction itself; operations use
``zero_based_index + 1``. Identical inputs always produce identical ids, so
reprocessing a ledger is idempotent.

Design Invariant:
    The bit layout is a storage contract. Changing it invalidates every id
    already written downstream.
"""
from __future__ import annotations

from typing import Tuple

from ..errors import IdentifierRangeError

__all__ = [
    "LEDGER_SHIFT",
    "TRANSACTION_SHIFT",
    "TRANSACTION_MASK",
    "OPERATION_MASK",
    "toid",
    "transaction_toid",
    "operation_toid",
    "parse_toid",
]

LEDGER_SHIFT = 32
TRANSACTION_SHIFT = 12
LEDGER_MASK = (1 << 31) - 1
TRANSACTION_MASK = (1 << 20) - 1
OPERATION_MASK = (1 << 12) - 1


def toid(ledger_sequence: int, transaction_index: int, operation_index: int) -> int:
    """Pack ledger, transaction and operation indices into a 64-bit id.

    Raises:
        IdentifierRangeError: if any component falls outside its bit field.
    """
    if not 0 <= ledger_sequence <= LEDGER_MASK:
        raise IdentifierRangeError(f"ledger sequence {ledger_sequence} out of range")
    if not 0 <= transaction_index <= TRANSACTION_MASK:
        raise IdentifierRangeError(f"transaction index {transaction_index} out of range")
    if not 0 <= operation_index <= OPERATION_MASK:
        raise IdentifierRangeError(f"operation index {operation_index} out of range")
    return (
        (ledger_sequence << LEDGER_SHIFT)
        | (transaction_index << TRANSACTION_SHIFT)
        | operation_index
    )


def transaction_toid(ledger_sequence: int, transaction_index: int) -> int:
    return toid(ledger_sequence, transaction_index, 0)


def operation_toid(ledger_sequence: int, transaction_index: int, operation_index: int) -> int:
    """Id of the operation at zero-based ``operation_index`` within its transaction."""
    return toid(ledger_sequence, transaction_index, operation_index + 1)


def parse_toid(value: int) -> Tuple[int, int, int]:
    """Split a TOID back into ``(ledger_sequence, transaction_index, operation_index)``."""
    return (
        (value >> LEDGER_SHIFT) & LEDGER_MASK,
        (value >> TRANSACTION_SHIFT) & TRANSACTION_MASK,
        value & OPERATION_MASK,
    )
