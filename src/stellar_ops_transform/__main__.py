"""Main CLI entry point for stellar-ops-transform.

This module provides a command-line interface using Typer around the
transformation engine:
1.  Loading configuration (`.env` aware) and setting up logging.
2.  Reading decoded transactions as JSON Lines (one `LedgerTransaction` per line).
3.  Transforming each transaction's operations in application order
    (stellar_ops_transform.mapper).
4.  Writing one `OperationRecord` JSON object per line.

Wire decoding, ledger-range iteration and warehouse loading stay with the
surrounding pipeline; this CLI only bridges files in and out of the engine.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from .config import get_settings
from .errors import OperationTransformError
from .mapper import transform_transaction_operations
from .mapping.id_utils import parse_toid
from .models.ledger import LedgerTransaction

# Load .env file if present (before any config access)
_env_file = find_dotenv(usecwd=True)
if _env_file:
    load_dotenv(_env_file)

logger = logging.getLogger(__name__)

app = typer.Typer(help="Stellar operation detail transformer CLI")


@app.callback()
def main() -> None:  # pragma: no cover - simple callback
    """stellar-ops-transform CLI.

    Use a subcommand like 'transform' to run a conversion.
    """
    pass


@app.command(help="Transform decoded transactions (JSON Lines) into operation records (JSON Lines).")
def transform(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Decoded transactions, one JSON object per line"),
    output_path: Path = typer.Argument(..., dir_okay=False, help="Destination for operation records"),
    ledger_sequence: Optional[int] = typer.Option(
        None,
        help="Ledger sequence for every transaction. If not specified, each line must carry ledger_sequence.",
    ),
    on_error: Optional[str] = typer.Option(
        None,
        help="'raise' or 'skip'. If not specified, uses ON_ERROR from config/env.",
    ),
) -> None:
    """Run one file-to-file transformation.

    - Every operation of every transaction is transformed in application order.
    - Failed transactions are included unless INCLUDE_FAILED_TRANSACTIONS=false.
    - With 'skip', operations that cannot be transformed are logged and omitted.
    """
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    effective_on_error = (on_error or settings.ON_ERROR).strip().lower()
    if effective_on_error not in ("raise", "skip"):
        typer.echo(f"Invalid --on-error value {on_error!r}; expected 'raise' or 'skip'", err=True)
        raise typer.Exit(code=2)

    tx_count = 0
    op_count = 0
    skipped_txs = 0
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with input_path.open("r", encoding="utf-8") as src, output_path.open("w", encoding="utf-8") as dst:
        for line_no, line in enumerate(src, start=1):
            if not line.strip():
                continue
            try:
                transaction = LedgerTransaction.model_validate_json(line)
            except ValidationError as e:
                typer.echo(f"Line {line_no}: not a decoded transaction: {e}", err=True)
                raise typer.Exit(code=1)
            seq = ledger_sequence if ledger_sequence is not None else transaction.ledger_sequence
            if seq is None:
                typer.echo(
                    f"Line {line_no}: no ledger sequence (pass --ledger-sequence or include ledger_sequence)",
                    err=True,
                )
                raise typer.Exit(code=1)
            if not transaction.successful and not settings.INCLUDE_FAILED_TRANSACTIONS:
                skipped_txs += 1
                logger.debug("Skipping failed transaction %s (line %d)", transaction.hash, line_no)
                continue
            try:
                records = transform_transaction_operations(
                    transaction, seq, on_error=effective_on_error  # type: ignore[arg-type]
                )
            except OperationTransformError as e:
                typer.echo(f"Line {line_no}: {type(e).__name__}: {e}", err=True)
                raise typer.Exit(code=1)
            for record in records:
                dst.write(record.model_dump_json(by_alias=settings.OUTPUT_BY_ALIAS))
                dst.write("\n")
            tx_count += 1
            op_count += len(records)
            logger.debug(
                "Transaction %d of ledger %d mapped to %d record(s)", transaction.index, seq, len(records)
            )
    typer.echo(
        f"Processed {tx_count} transaction(s), wrote {op_count} operation record(s). "
        f"skipped_failed={skipped_txs} on_error={effective_on_error}"
    )


@app.command("decode-id", help="Split a transaction/operation id into ledger, transaction and operation indices.")
def decode_id(value: int = typer.Argument(..., help="A transaction_id or operation_id")) -> None:
    ledger, tx_index, op_index = parse_toid(value)
    kind = "transaction" if op_index == 0 else f"operation #{op_index} (application order)"
    typer.echo(f"ledger={ledger} transaction={tx_index} operation={op_index} kind={kind}")


if __name__ == "__main__":  # pragma: no cover
    app()
