"""Bit-flag decomposition into parallel value/name sequences.

Each flag domain is a fixed, ordered table of named bits. Decomposition walks
the table in order, so output order never depends on how the bitmask was
built. Bits outside the table are ignored.
"""
from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

__all__ = [
    "ACCOUNT_FLAGS",
    "TRUSTLINE_FLAGS",
    "TRUSTLINE_AUTHORIZED",
    "decompose_flags",
    "flag_fields",
    "is_authorized",
]

FlagTable = Sequence[Tuple[int, str]]

ACCOUNT_FLAGS: FlagTable = (
    (1, "auth_required"),
    (2, "auth_revocable"),
    (4, "auth_immutable"),
)

TRUSTLINE_AUTHORIZED = 1

TRUSTLINE_FLAGS: FlagTable = (
    (TRUSTLINE_AUTHORIZED, "authorized"),
    (2, "authorized_to_maintain_liabilities"),
    (4, "clawback_enabled"),
)


def decompose_flags(mask: int, table: FlagTable) -> Tuple[List[int], List[str]]:
    values: List[int] = []
    names: List[str] = []
    for bit, name in table:
        if mask & bit:
            values.append(bit)
            names.append(name)
    return values, names


def flag_fields(mask: int, table: FlagTable, prefix: str) -> Dict[str, list]:
    """Return ``{<prefix>_flags, <prefix>_flags_string}`` for prefix set/clear."""
    if prefix not in ("set", "clear"):
        raise ValueError(f"unknown flag prefix {prefix!r}")
    values, names = decompose_flags(mask, table)
    return {f"{prefix}_flags": values, f"{prefix}_flags_string": names}


def is_authorized(mask: int) -> bool:
    return bool(mask & TRUSTLINE_AUTHORIZED)
