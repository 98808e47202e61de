from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from stellar_ops_transform import __main__ as cli
from stellar_ops_transform.mapping.id_utils import operation_toid
from stellar_ops_transform.mapping.strkey import encode_account_id

SOURCE = encode_account_id(bytes([40]) * 32)
DEST = encode_account_id(bytes([41]) * 32)
LEDGER = 123_456

runner = CliRunner()


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    for k in ("LOG_LEVEL", "ON_ERROR", "INCLUDE_FAILED_TRANSACTIONS", "OUTPUT_BY_ALIAS"):
        monkeypatch.delenv(k, raising=False)
    cli.get_settings.cache_clear()
    yield
    cli.get_settings.cache_clear()


def _payment_tx(*, successful: bool = True, index: int = 2, ledger_sequence=LEDGER) -> dict:
    tx = {
        "index": index,
        "source_account": SOURCE,
        "successful": successful,
        "hash": "ab" * 32,
        "operations": [
            {
                "body": {
                    "type": "payment",
                    "payment_op": {"destination": DEST, "asset": "native", "amount": 15_000_000},
                }
            }
        ],
    }
    if ledger_sequence is not None:
        tx["ledger_sequence"] = ledger_sequence
    return tx


def _write_jsonl(path, rows):
    path.write_text("\n".join(json.dumps(r) for r in rows) + "\n", encoding="utf-8")


def test_transform_writes_one_record_per_operation(tmp_path):
    src = tmp_path / "txs.jsonl"
    dst = tmp_path / "out" / "ops.jsonl"
    _write_jsonl(src, [_payment_tx()])
    result = runner.invoke(cli.app, ["transform", str(src), str(dst)])
    assert result.exit_code == 0, result.output
    assert "wrote 1 operation record(s)" in result.output
    lines = dst.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["operation_type"] == 1
    assert record["operation_type_string"] == "payment"
    assert record["operation_id"] == operation_toid(LEDGER, 2, 0)
    details = record["details"]
    assert details["from"] == SOURCE
    assert details["to"] == DEST
    assert details["amount"] == "1.5000000"
    assert details["path"] == []
    assert details["set_flags"] == []


def test_transform_skips_failed_transactions_when_configured(tmp_path, monkeypatch):
    monkeypatch.setenv("INCLUDE_FAILED_TRANSACTIONS", "false")
    src = tmp_path / "txs.jsonl"
    dst = tmp_path / "ops.jsonl"
    _write_jsonl(src, [_payment_tx(successful=False), _payment_tx(index=3)])
    result = runner.invoke(cli.app, ["transform", str(src), str(dst)])
    assert result.exit_code == 0, result.output
    assert "skipped_failed=1" in result.output
    assert len(dst.read_text(encoding="utf-8").splitlines()) == 1


def test_transform_requires_ledger_sequence(tmp_path):
    src = tmp_path / "txs.jsonl"
    _write_jsonl(src, [_payment_tx(ledger_sequence=None)])
    result = runner.invoke(cli.app, ["transform", str(src), str(tmp_path / "ops.jsonl")])
    assert result.exit_code == 1
    ok = runner.invoke(
        cli.app,
        ["transform", str(src), str(tmp_path / "ops.jsonl"), "--ledger-sequence", "77"],
    )
    assert ok.exit_code == 0, ok.output


def test_transform_rejects_unknown_error_policy(tmp_path):
    src = tmp_path / "txs.jsonl"
    _write_jsonl(src, [_payment_tx()])
    result = runner.invoke(
        cli.app, ["transform", str(src), str(tmp_path / "ops.jsonl"), "--on-error", "ignore"]
    )
    assert result.exit_code == 2


def test_transform_reports_operation_failure(tmp_path):
    tx = _payment_tx()
    tx["operations"][0]["body"] = {"type": "payment"}
    src = tmp_path / "txs.jsonl"
    _write_jsonl(src, [tx])
    result = runner.invoke(cli.app, ["transform", str(src), str(tmp_path / "ops.jsonl")])
    assert result.exit_code == 1
    skipped = runner.invoke(
        cli.app, ["transform", str(src), str(tmp_path / "ops.jsonl"), "--on-error", "skip"]
    )
    assert skipped.exit_code == 0, skipped.output
    assert "wrote 0 operation record(s)" in skipped.output


def test_decode_id():
    result = runner.invoke(cli.app, ["decode-id", str(operation_toid(LEDGER, 2, 0))])
    assert result.exit_code == 0
    assert f"ledger={LEDGER} transaction=2 operation=1" in result.output
