"""Error hierarchy for operation transformation failures.

Every failure aborts the transformation of a single operation; no partial
record is ever returned. All errors reflect malformed input rather than
transient conditions, so nothing here is retried. The caller decides whether
to skip the operation, fail the ledger, or halt the pipeline.

Errors raised deep inside helpers (asset extraction, ledger key rendering,
amount formatting) do not know which operation they belong to. The engine
attaches the operation index and the computed operation id via
`OperationTransformError.attach_context` before re-raising, so every error
that escapes `transform_operation` can be located.
"""
from __future__ import annotations

from typing import Optional

__all__ = [
    "OperationTransformError",
    "AddressDecodeError",
    "NegativeTypeError",
    "SchemaMismatch",
    "UnsupportedOperationType",
    "MissingExecutionResult",
    "MalformedBalanceId",
    "MalformedLedgerKey",
    "IdentifierRangeError",
]


class OperationTransformError(Exception):
    """Base class for all failures while transforming one operation."""

    def __init__(
        self,
        message: str,
        *,
        operation_index: Optional[int] = None,
        operation_id: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation_index = operation_index
        self.operation_id = operation_id

    def attach_context(
        self, *, operation_index: Optional[int], operation_id: Optional[int]
    ) -> "OperationTransformError":
        # Context set at raise time wins.
        if self.operation_index is None:
            self.operation_index = operation_index
        if self.operation_id is None:
            self.operation_id = operation_id
        return self

    def __str__(self) -> str:
        parts = []
        if self.operation_index is not None:
            parts.append(f"operation index={self.operation_index}")
        if self.operation_id is not None:
            parts.append(f"operation id={self.operation_id}")
        if not parts:
            return self.message
        return f"{self.message} ({', '.join(parts)})"


class AddressDecodeError(OperationTransformError):
    """An account or signer key cannot render to its canonical strkey form."""


class NegativeTypeError(OperationTransformError):
    """The decoded operation type tag is negative (upstream corruption)."""


class SchemaMismatch(OperationTransformError):
    """The operation union does not hold the payload expected for its kind."""


class UnsupportedOperationType(OperationTransformError):
    """The operation type tag is outside the set this engine understands."""


class MissingExecutionResult(OperationTransformError):
    """A successful transaction lacks the execution result an operation needs."""


class MalformedBalanceId(OperationTransformError):
    """A claimable balance id cannot be rendered to its hex form."""


class MalformedLedgerKey(OperationTransformError):
    """A revoke-sponsorship ledger key is of an unsupported or inconsistent kind."""


class IdentifierRangeError(OperationTransformError):
    """Ledger, transaction or operation index does not fit the id bit layout."""
