"""Sponsorship lookback: pair an end-sponsoring operation with its begin marker.

Only successful transactions are scanned. Operations of a failed
transaction are not guaranteed to respect begin/end nesting (a begin op may
name the wrong sponsored account, or nesting may be invalid), so scanning
them could attribute the wrong sponsor. "No match" is a normal outcome.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..models.ledger import LedgerTransaction, Operation, OperationType
from .context import operation_source_account

logger = logging.getLogger(__name__)

__all__ = ["SponsorshipMatch", "find_initiating_begin_sponsoring_op"]


@dataclass(frozen=True)
class SponsorshipMatch:
    operation: Operation
    operation_index: int


def find_initiating_begin_sponsoring_op(
    operation: Operation,
    operation_index: int,
    transaction: LedgerTransaction,
) -> Optional[SponsorshipMatch]:
    """Scan earlier sibling operations for the begin-sponsoring op naming our source.

    Walks from ``operation_index - 1`` down to 0 and returns the first
    begin-sponsoring operation whose sponsored account equals the resolved
    source address of ``operation``.
    """
    if not transaction.successful:
        return None
    sponsoree = operation_source_account(operation, transaction).address()
    operations = transaction.operations
    for i in range(min(operation_index, len(operations)) - 1, -1, -1):
        candidate = operations[i]
        if candidate.body.type != OperationType.BEGIN_SPONSORING_FUTURE_RESERVES:
            continue
        begin_op = candidate.body.begin_sponsoring_future_reserves_op
        if begin_op is None:
            continue
        if begin_op.sponsored_id.address() == sponsoree:
            return SponsorshipMatch(operation=candidate, operation_index=i)
    logger.debug(
        "No begin-sponsoring op found for operation %d (sponsoree=%s)",
        operation_index,
        sponsoree,
    )
    return None
