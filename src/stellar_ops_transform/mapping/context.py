"""Operation context resolution.

Resolves everything the dispatcher needs before looking at the payload: the
effective source account, the operation's type tag and its position-derived
identifiers. The resulting `OperationContext` is built fresh per call and
holds read-only references to the operation and its transaction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import AddressDecodeError, NegativeTypeError, OperationTransformError
from ..models.ledger import LedgerTransaction, MuxedAccount, Operation
from .id_utils import operation_toid, transaction_toid

logger = logging.getLogger(__name__)

__all__ = ["OperationContext", "operation_source_account", "resolve_context"]


@dataclass(frozen=True)
class OperationContext:
    operation: Operation
    operation_index: int
    transaction: LedgerTransaction
    ledger_sequence: int
    source_account: MuxedAccount
    source_address: str
    operation_type: int
    transaction_id: int
    operation_id: int

    @property
    def application_order(self) -> int:
        return self.operation_index + 1

    @property
    def successful(self) -> bool:
        return self.transaction.successful


def operation_source_account(operation: Operation, transaction: LedgerTransaction) -> MuxedAccount:
    """The operation's explicit source, else the transaction's source."""
    if operation.source_account is not None:
        return operation.source_account
    return transaction.source_account


def resolve_context(
    operation: Operation,
    operation_index: int,
    transaction: LedgerTransaction,
    ledger_sequence: int,
) -> OperationContext:
    """Resolve source account, type tag and TOIDs for one operation.

    Raises:
        IdentifierRangeError: ledger/transaction/operation index out of TOID range
        AddressDecodeError: the resolved source cannot render to an address
        NegativeTypeError: the decoded type tag is negative
    """
    try:
        transaction_id = transaction_toid(ledger_sequence, transaction.index)
        operation_id = operation_toid(ledger_sequence, transaction.index, operation_index)
    except OperationTransformError as err:
        raise err.attach_context(operation_index=operation_index, operation_id=None)

    source_account = operation_source_account(operation, transaction)
    try:
        source_address = source_account.address()
    except AddressDecodeError as err:
        raise err.attach_context(operation_index=operation_index, operation_id=operation_id)

    operation_type = int(operation.body.type)
    if operation_type < 0:
        raise NegativeTypeError(
            f"operation type {operation_type} is negative",
            operation_index=operation_index,
            operation_id=operation_id,
        )

    logger.debug(
        "Resolved operation %d of tx %d in ledger %d: type=%d source=%s id=%d",
        operation_index,
        transaction.index,
        ledger_sequence,
        operation_type,
        source_address,
        operation_id,
    )
    return OperationContext(
        operation=operation,
        operation_index=operation_index,
        transaction=transaction,
        ledger_sequence=ledger_sequence,
        source_account=source_account,
        source_address=source_address,
        operation_type=operation_type,
        transaction_id=transaction_id,
        operation_id=operation_id,
    )
