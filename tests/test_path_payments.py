"""Path payments: declared amounts, path ordering and result enrichment."""
from __future__ import annotations

from decimal import Decimal

import pytest

from stellar_ops_transform.errors import MissingExecutionResult
from stellar_ops_transform.mapper import transform_operation
from stellar_ops_transform.mapping.strkey import encode_account_id
from stellar_ops_transform.models.ledger import (
    AccountId,
    Asset,
    ClaimAtom,
    LedgerTransaction,
    MuxedAccount,
    Operation,
    OperationBody,
    OperationResult,
    OperationResultTr,
    OperationType,
    PathPaymentResult,
    PathPaymentStrictReceiveOp,
    PathPaymentStrictSendOp,
    SimplePaymentResult,
)

SOURCE_KEY = bytes([20]) * 32
DEST_KEY = bytes([21]) * 32
ISSUER_KEY = bytes([22]) * 32
LEDGER = 51_000_000

USD = Asset(type="credit_alphanum4", code="USD", issuer=AccountId(ed25519=ISSUER_KEY))
EURT = Asset(type="credit_alphanum4", code="EURT", issuer=AccountId(ed25519=ISSUER_KEY))


def _strict_receive(path=None) -> Operation:
    return Operation(
        body=OperationBody(
            type=OperationType.PATH_PAYMENT_STRICT_RECEIVE,
            path_payment_strict_receive_op=PathPaymentStrictReceiveOp(
                send_asset=Asset(type="native"),
                send_max=1_000_000_000,
                destination=MuxedAccount(ed25519=DEST_KEY),
                dest_asset=USD,
                dest_amount=200_000_000,
                path=path or [],
            ),
        )
    )


def _strict_send() -> Operation:
    return Operation(
        body=OperationBody(
            type=OperationType.PATH_PAYMENT_STRICT_SEND,
            path_payment_strict_send_op=PathPaymentStrictSendOp(
                send_asset=USD,
                send_amount=50_000_000,
                destination=MuxedAccount(ed25519=DEST_KEY),
                dest_asset=Asset(type="native"),
                dest_min=12_345_678,
                path=[EURT],
            ),
        )
    )


def _receive_result(last_amount: int, offers=None) -> OperationResult:
    return OperationResult(
        tr=OperationResultTr(
            type=OperationType.PATH_PAYMENT_STRICT_RECEIVE,
            path_payment_strict_receive_result=PathPaymentResult(
                offers=offers or [],
                last=SimplePaymentResult(amount=last_amount),
            ),
        )
    )


def _tx(op: Operation, *, successful=True, results=None) -> LedgerTransaction:
    return LedgerTransaction(
        index=2,
        source_account=MuxedAccount(ed25519=SOURCE_KEY),
        operations=[op],
        successful=successful,
        operation_results=results,
    )


def test_strict_receive_declared_fields():
    op = _strict_receive(path=[EURT, Asset(type="native")])
    record = transform_operation(op, 0, _tx(op, successful=False), LEDGER)
    d = record.details
    assert d.from_ == encode_account_id(SOURCE_KEY)
    assert d.to == encode_account_id(DEST_KEY)
    assert d.amount == Decimal("20")
    assert d.source_max == Decimal("100")
    assert (d.asset_type, d.asset_code) == ("credit_alphanum4", "USD")
    assert (d.source_asset_type, d.source_asset_code, d.source_asset_issuer) == ("native", "", "")
    assert [(p.type, p.code) for p in d.path] == [("credit_alphanum4", "EURT"), ("native", "")]


def test_strict_receive_success_takes_actual_send_amount_from_result():
    op = _strict_receive()
    record = transform_operation(op, 0, _tx(op, results=[_receive_result(425_000_000)]), LEDGER)
    assert record.details.source_amount == Decimal("42.5")
    assert record.details.source_max == Decimal("100")


def test_strict_receive_with_crossed_offers_uses_first_offer():
    op = _strict_receive()
    offers = [ClaimAtom(amount_bought=77_000_000, amount_sold=1), ClaimAtom(amount_bought=5)]
    result = _receive_result(200_000_000, offers=offers)
    record = transform_operation(op, 0, _tx(op, results=[result]), LEDGER)
    assert record.details.source_amount == Decimal("7.7")


def test_strict_receive_failed_transaction_skips_result_lookup():
    op = _strict_receive()
    record = transform_operation(op, 0, _tx(op, successful=False, results=None), LEDGER)
    assert record.details.source_amount == Decimal("0")
    assert record.details.path == []


def test_success_without_results_is_missing_execution_result():
    op = _strict_receive()
    with pytest.raises(MissingExecutionResult) as exc_info:
        transform_operation(op, 0, _tx(op, results=None), LEDGER)
    assert exc_info.value.operation_index == 0


def test_result_of_wrong_kind_is_missing_execution_result():
    op = _strict_receive()
    wrong = OperationResult(tr=OperationResultTr(type=OperationType.PAYMENT))
    with pytest.raises(MissingExecutionResult):
        transform_operation(op, 0, _tx(op, results=[wrong]), LEDGER)
    with pytest.raises(MissingExecutionResult):
        transform_operation(op, 0, _tx(op, results=[OperationResult()]), LEDGER)


def test_strict_send_success_takes_destination_amount_from_result():
    op = _strict_send()
    result = OperationResult(
        tr=OperationResultTr(
            type=OperationType.PATH_PAYMENT_STRICT_SEND,
            path_payment_strict_send_result=PathPaymentResult(
                last=SimplePaymentResult(amount=13_000_000)
            ),
        )
    )
    record = transform_operation(op, 0, _tx(op, results=[result]), LEDGER)
    d = record.details
    assert d.amount == Decimal("1.3")
    assert d.source_amount == Decimal("5")
    assert d.destination_min == "1.2345678"
    assert (d.source_asset_code, d.asset_type) == ("USD", "native")
    assert [p.code for p in d.path] == ["EURT"]


def test_strict_send_failed_transaction_keeps_zero_amount():
    op = _strict_send()
    record = transform_operation(op, 0, _tx(op, successful=False), LEDGER)
    assert record.details.amount == Decimal("0")
    assert record.details.source_amount == Decimal("5")


def _send_result(last=None) -> OperationResult:
    return OperationResult(
        tr=OperationResultTr(
            type=OperationType.PATH_PAYMENT_STRICT_SEND,
            path_payment_strict_send_result=PathPaymentResult(last=last),
        )
    )


def test_strict_send_success_without_results_is_missing_execution_result():
    op = _strict_send()
    with pytest.raises(MissingExecutionResult) as exc_info:
        transform_operation(op, 0, _tx(op, results=None), LEDGER)
    assert exc_info.value.operation_id is not None


def test_strict_send_with_strict_receive_result_is_missing_execution_result():
    op = _strict_send()
    with pytest.raises(MissingExecutionResult):
        transform_operation(op, 0, _tx(op, results=[_receive_result(13_000_000)]), LEDGER)


def test_strict_send_result_without_final_payment_is_missing_execution_result():
    op = _strict_send()
    with pytest.raises(MissingExecutionResult):
        transform_operation(op, 0, _tx(op, results=[_send_result(last=None)]), LEDGER)


def test_strict_receive_without_offers_or_final_payment_is_missing_execution_result():
    op = _strict_receive()
    empty = OperationResult(
        tr=OperationResultTr(
            type=OperationType.PATH_PAYMENT_STRICT_RECEIVE,
            path_payment_strict_receive_result=PathPaymentResult(),
        )
    )
    with pytest.raises(MissingExecutionResult):
        transform_operation(op, 0, _tx(op, results=[empty]), LEDGER)


def test_result_list_shorter_than_operation_index_is_missing_execution_result():
    first, second = _strict_receive(), _strict_receive()
    tx = LedgerTransaction(
        index=2,
        source_account=MuxedAccount(ed25519=SOURCE_KEY),
        operations=[first, second],
        successful=True,
        operation_results=[_receive_result(425_000_000)],
    )
    assert transform_operation(first, 0, tx, LEDGER).details.source_amount == Decimal("42.5")
    with pytest.raises(MissingExecutionResult) as exc_info:
        transform_operation(second, 1, tx, LEDGER)
    assert exc_info.value.operation_index == 1
