"""Public facade for ledger operation to `OperationRecord` transformation.

This module is the "T" (Transform) of the ledger ETL pipeline. It takes one
decoded operation together with its transaction and position and converts it
into a flat, schema-stable record for analytical storage. All dispatch logic
is delegated to `stellar_ops_transform.mapping.orchestrator` and its helpers.

The engine is a pure, synchronous function: no state survives between
calls, nothing is read from disk or network, and identical input always yields
identical output. Calls may run in parallel across operations, transactions
and ledgers.

Public Functions:
    transform_operation: Convert one operation into an OperationRecord
    transform_transaction_operations: Convert every operation of a transaction
        in application order, applying the caller's error policy

Internal Re-exports:
    _resolve_context: Context resolver (test usage)
    _find_initiating_begin_sponsoring_op: Sponsorship lookback (test usage)
"""
from __future__ import annotations

import logging
from typing import List, Literal

from .errors import OperationTransformError
from .mapping.context import resolve_context as _resolve_context
from .mapping.orchestrator import extract_operation_details, operation_type_name
from .mapping.sponsorship import (
    find_initiating_begin_sponsoring_op as _find_initiating_begin_sponsoring_op,
)
from .models.ledger import LedgerTransaction, Operation
from .models.operation import OperationRecord

logger = logging.getLogger(__name__)

ErrorPolicy = Literal["raise", "skip"]

__all__ = [
    "ErrorPolicy",
    "transform_operation",
    "transform_transaction_operations",
    # Helper re-exports (test-only / internal use)
    "_resolve_context",
    "_find_initiating_begin_sponsoring_op",
]


def transform_operation(
    operation: Operation,
    operation_index: int,
    transaction: LedgerTransaction,
    ledger_sequence: int,
) -> OperationRecord:
    """Convert one decoded operation into its flat output record.

    Resolves the context first (source address, transaction id, operation id),
    then dispatches on the operation kind to build the details.

    Args:
        operation: The decoded operation
        operation_index: Zero-based index of the operation within its transaction
        transaction: The enclosing transaction, including its outcome and results
        ledger_sequence: Sequence number of the ledger that applied the transaction

    Returns:
        The complete OperationRecord

    Raises:
        OperationTransformError: any subclass; carries operation index and id.
            No partial record is ever returned.
    """
    ctx = _resolve_context(operation, operation_index, transaction, ledger_sequence)
    details = extract_operation_details(ctx)
    return OperationRecord(
        source_account=ctx.source_address,
        operation_type=ctx.operation_type,
        operation_type_string=operation_type_name(ctx.operation_type),
        application_order=ctx.application_order,
        transaction_id=ctx.transaction_id,
        operation_id=ctx.operation_id,
        details=details,
    )


def transform_transaction_operations(
    transaction: LedgerTransaction,
    ledger_sequence: int,
    *,
    on_error: ErrorPolicy = "raise",
) -> List[OperationRecord]:
    """Transform every operation of a transaction, preserving application order.

    Args:
        transaction: The enclosing transaction
        ledger_sequence: Sequence number of the applying ledger
        on_error: ``"raise"`` propagates the first failure; ``"skip"`` logs it
            at WARNING and omits that operation's record

    Returns:
        Records ordered by application order
    """
    if on_error not in ("raise", "skip"):
        raise ValueError(f"unknown error policy {on_error!r}")
    records: List[OperationRecord] = []
    for index, operation in enumerate(transaction.operations):
        try:
            records.append(transform_operation(operation, index, transaction, ledger_sequence))
        except OperationTransformError as err:
            if on_error == "raise":
                raise
            logger.warning(
                "Skipping operation in ledger %d tx %d (%s): %s",
                ledger_sequence,
                transaction.index,
                type(err).__name__,
                err,
            )
    return records
