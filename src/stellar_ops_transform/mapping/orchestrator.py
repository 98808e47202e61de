"""Detail dispatcher: one pure extractor per operation kind.

Every extractor takes the resolved `OperationContext` and returns a plain dict
of detail fields. The dispatcher merges that dict into a freshly built
`OperationDetails`, whose defaults guarantee the list-valued fields are
present even when an extractor never touches them. Extractors never mutate a
shared record, so skipping a normalizer cannot leave a half-filled result.

The registry `_DETAIL_EXTRACTORS` is checked at import time to cover every
`OperationType` member; a new kind without an extractor fails loudly on
import instead of falling into a default branch at runtime.
"""
from __future__ import annotations

import base64
import logging
from typing import Any, Callable, Dict

from ..errors import (
    AddressDecodeError,
    MissingExecutionResult,
    OperationTransformError,
    SchemaMismatch,
    UnsupportedOperationType,
)
from ..models.ledger import (
    AccountId,
    Asset,
    OperationType,
    PathPaymentResult,
    Price,
)
from ..models.operation import ClaimantRecord, OperationDetails, PricePair
from .amounts import format_amount, price_to_float, stroops_to_decimal
from .assets import asset_fields, canonical_asset_string, transform_path
from .context import OperationContext, operation_source_account
from .flags import ACCOUNT_FLAGS, TRUSTLINE_FLAGS, flag_fields, is_authorized
from .ledger_keys import claimable_balance_hex, ledger_key_fields
from .sponsorship import find_initiating_begin_sponsoring_op

logger = logging.getLogger(__name__)

__all__ = ["extract_operation_details", "operation_type_name"]

Fields = Dict[str, Any]
Extractor = Callable[[OperationContext], Fields]


def operation_type_name(operation_type: int) -> str:
    """Snake-case kind name (``path_payment_strict_send``) for a known tag."""
    return OperationType(operation_type).name.lower()


def _payload(ctx: OperationContext, attr: str) -> Any:
    value = getattr(ctx.operation.body, attr)
    if value is None:
        raise SchemaMismatch(
            f"operation of type {operation_type_name(ctx.operation_type)} does not hold {attr}"
        )
    return value


def _address(account: AccountId, role: str) -> str:
    try:
        return account.address()
    except AddressDecodeError as err:
        err.message = f"{role}: {err.message}"
        raise


def _merge_assets(fields: Fields, asset: Asset, prefix: str = "") -> Fields:
    fields.update(asset_fields(asset, prefix))
    return fields


def _price_fields(price: Price) -> Fields:
    return {
        "price": price_to_float(price.n, price.d),
        "price_r": PricePair(numerator=price.n, denominator=price.d),
    }


def _path_payment_result(ctx: OperationContext, attr: str) -> PathPaymentResult:
    """Fetch the executed path payment result; only valid for successful transactions."""
    results = ctx.transaction.operation_results
    if results is None or ctx.operation_index >= len(results):
        raise MissingExecutionResult("transaction succeeded but has no result for this operation")
    tr = results[ctx.operation_index].tr
    if tr is None:
        raise MissingExecutionResult("operation result holds no result body")
    result = getattr(tr, attr)
    if result is None:
        raise MissingExecutionResult(f"operation result does not hold {attr}")
    return result


def _last_amount(result: PathPaymentResult, attr: str) -> int:
    if result.last is None:
        raise MissingExecutionResult(f"{attr} has no final payment")
    return result.last.amount


# ------------------------------------------------------------------ extractors


def _create_account(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "create_account_op")
    return {
        "funder": ctx.source_address,
        "account": _address(op.destination, "destination"),
        "starting_balance": stroops_to_decimal(op.starting_balance),
    }


def _payment(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "payment_op")
    fields: Fields = {
        "from_": ctx.source_address,
        "to": _address(op.destination, "destination"),
        "amount": stroops_to_decimal(op.amount),
    }
    return _merge_assets(fields, op.asset)


def _path_payment_strict_receive(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "path_payment_strict_receive_op")
    fields: Fields = {
        "from_": ctx.source_address,
        "to": _address(op.destination, "destination"),
        "amount": stroops_to_decimal(op.dest_amount),
        "source_max": stroops_to_decimal(op.send_max),
        "path": transform_path(op.path),
    }
    _merge_assets(fields, op.dest_asset)
    _merge_assets(fields, op.send_asset, "source")
    if ctx.successful:
        result = _path_payment_result(ctx, "path_payment_strict_receive_result")
        # Amount actually sent: what the first crossed offer bought, or the
        # direct payment amount when no offers were crossed.
        if result.offers:
            sent = result.offers[0].amount_bought
        else:
            sent = _last_amount(result, "path_payment_strict_receive_result")
        fields["source_amount"] = stroops_to_decimal(sent)
    return fields


def _path_payment_strict_send(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "path_payment_strict_send_op")
    fields: Fields = {
        "from_": ctx.source_address,
        "to": _address(op.destination, "destination"),
        "source_amount": stroops_to_decimal(op.send_amount),
        "destination_min": format_amount(op.dest_min),
        "path": transform_path(op.path),
    }
    _merge_assets(fields, op.dest_asset)
    _merge_assets(fields, op.send_asset, "source")
    if ctx.successful:
        result = _path_payment_result(ctx, "path_payment_strict_send_result")
        fields["amount"] = stroops_to_decimal(
            _last_amount(result, "path_payment_strict_send_result")
        )
    return fields


def _offer_fields(op: Any, amount: int, offer_id: int) -> Fields:
    fields: Fields = {"offer_id": offer_id, "amount": stroops_to_decimal(amount)}
    fields.update(_price_fields(op.price))
    _merge_assets(fields, op.buying, "buying")
    _merge_assets(fields, op.selling, "selling")
    return fields


def _manage_buy_offer(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "manage_buy_offer_op")
    return _offer_fields(op, op.buy_amount, op.offer_id)


def _manage_sell_offer(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "manage_sell_offer_op")
    return _offer_fields(op, op.amount, op.offer_id)


def _create_passive_sell_offer(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "create_passive_sell_offer_op")
    return _offer_fields(op, op.amount, 0)


def _set_options(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "set_options_op")
    fields: Fields = {}
    if op.inflation_dest is not None:
        fields["inflation_dest"] = _address(op.inflation_dest, "inflation destination")
    if op.set_flags:
        fields.update(flag_fields(op.set_flags, ACCOUNT_FLAGS, "set"))
    if op.clear_flags:
        fields.update(flag_fields(op.clear_flags, ACCOUNT_FLAGS, "clear"))
    if op.master_weight is not None:
        fields["master_key_weight"] = op.master_weight
    if op.low_threshold is not None:
        fields["low_threshold"] = op.low_threshold
    if op.med_threshold is not None:
        fields["med_threshold"] = op.med_threshold
    if op.high_threshold is not None:
        fields["high_threshold"] = op.high_threshold
    if op.home_domain is not None:
        fields["home_domain"] = op.home_domain
    if op.signer is not None:
        fields["signer_key"] = op.signer.key.address()
        fields["signer_weight"] = op.signer.weight
    return fields


def _change_trust(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "change_trust_op")
    fields = _merge_assets({}, op.line)
    fields["trustor"] = ctx.source_address
    fields["trustee"] = fields["asset_issuer"]
    fields["limit"] = stroops_to_decimal(op.limit)
    return fields


def _allow_trust(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "allow_trust_op")
    # Legacy form: the op names only the code; the issuer is the op source.
    asset = Asset(type=op.asset.type, code=op.asset.code, issuer=ctx.source_account)
    fields = _merge_assets({}, asset)
    fields["trustee"] = ctx.source_address
    fields["trustor"] = _address(op.trustor, "trustor")
    fields["authorize"] = is_authorized(op.authorize)
    return fields


def _account_merge(ctx: OperationContext) -> Fields:
    destination = _payload(ctx, "destination")
    return {
        "account": ctx.source_address,
        "into": _address(destination, "merge destination"),
    }


def _inflation(ctx: OperationContext) -> Fields:
    return {}


def _manage_data(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "manage_data_op")
    value = ""
    if op.data_value is not None:
        value = base64.b64encode(op.data_value).decode("ascii")
    return {"name": op.data_name, "value": value}


def _bump_sequence(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "bump_sequence_op")
    return {"bump_to": str(op.bump_to)}


def _create_claimable_balance(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "create_claimable_balance_op")
    # This kind records the canonical asset string in asset_code, not a triplet.
    return {
        "asset_code": canonical_asset_string(op.asset),
        "amount": stroops_to_decimal(op.amount),
        "claimants": [
            ClaimantRecord(
                destination=_address(c.destination, "claimant"),
                predicate=c.predicate,
            )
            for c in op.claimants
        ],
    }


def _claim_claimable_balance(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "claim_claimable_balance_op")
    return {
        "balance_id": claimable_balance_hex(op.balance_id),
        "account": ctx.source_address,
    }


def _begin_sponsoring_future_reserves(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "begin_sponsoring_future_reserves_op")
    return {"sponsored_id": _address(op.sponsored_id, "sponsored account")}


def _end_sponsoring_future_reserves(ctx: OperationContext) -> Fields:
    match = find_initiating_begin_sponsoring_op(
        ctx.operation, ctx.operation_index, ctx.transaction
    )
    if match is None:
        return {}
    sponsor = operation_source_account(match.operation, ctx.transaction)
    return {"begin_sponsor": _address(sponsor, "begin sponsor")}


def _revoke_sponsorship(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "revoke_sponsorship_op")
    if op.type == "ledger_entry":
        if op.ledger_key is None:
            raise SchemaMismatch("ledger entry revocation does not hold a ledger key")
        return ledger_key_fields(op.ledger_key)
    if op.signer is None:
        raise SchemaMismatch("signer revocation does not hold a signer")
    return {
        "signer_account_id": _address(op.signer.account_id, "signer account"),
        "signer_key": op.signer.signer_key.address(),
    }


def _clawback(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "clawback_op")
    fields = _merge_assets({}, op.asset)
    fields["from_"] = _address(op.from_, "clawback from")
    fields["amount"] = stroops_to_decimal(op.amount)
    return fields


def _clawback_claimable_balance(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "clawback_claimable_balance_op")
    return {"balance_id": claimable_balance_hex(op.balance_id)}


def _set_trust_line_flags(ctx: OperationContext) -> Fields:
    op = _payload(ctx, "set_trust_line_flags_op")
    fields: Fields = {"trustor": _address(op.trustor, "trustor")}
    _merge_assets(fields, op.asset)
    if op.set_flags > 0:
        fields.update(flag_fields(op.set_flags, TRUSTLINE_FLAGS, "set"))
    if op.clear_flags > 0:
        fields.update(flag_fields(op.clear_flags, TRUSTLINE_FLAGS, "clear"))
    return fields


_DETAIL_EXTRACTORS: Dict[OperationType, Extractor] = {
    OperationType.CREATE_ACCOUNT: _create_account,
    OperationType.PAYMENT: _payment,
    OperationType.PATH_PAYMENT_STRICT_RECEIVE: _path_payment_strict_receive,
    OperationType.MANAGE_SELL_OFFER: _manage_sell_offer,
    OperationType.CREATE_PASSIVE_SELL_OFFER: _create_passive_sell_offer,
    OperationType.SET_OPTIONS: _set_options,
    OperationType.CHANGE_TRUST: _change_trust,
    OperationType.ALLOW_TRUST: _allow_trust,
    OperationType.ACCOUNT_MERGE: _account_merge,
    OperationType.INFLATION: _inflation,
    OperationType.MANAGE_DATA: _manage_data,
    OperationType.BUMP_SEQUENCE: _bump_sequence,
    OperationType.MANAGE_BUY_OFFER: _manage_buy_offer,
    OperationType.PATH_PAYMENT_STRICT_SEND: _path_payment_strict_send,
    OperationType.CREATE_CLAIMABLE_BALANCE: _create_claimable_balance,
    OperationType.CLAIM_CLAIMABLE_BALANCE: _claim_claimable_balance,
    OperationType.BEGIN_SPONSORING_FUTURE_RESERVES: _begin_sponsoring_future_reserves,
    OperationType.END_SPONSORING_FUTURE_RESERVES: _end_sponsoring_future_reserves,
    OperationType.REVOKE_SPONSORSHIP: _revoke_sponsorship,
    OperationType.CLAWBACK: _clawback,
    OperationType.CLAWBACK_CLAIMABLE_BALANCE: _clawback_claimable_balance,
    OperationType.SET_TRUST_LINE_FLAGS: _set_trust_line_flags,
}

_UNHANDLED = set(OperationType) - set(_DETAIL_EXTRACTORS)
if _UNHANDLED:  # pragma: no cover - guards against incomplete registry edits
    raise RuntimeError(
        "no detail extractor registered for: "
        + ", ".join(sorted(t.name for t in _UNHANDLED))
    )


def extract_operation_details(ctx: OperationContext) -> OperationDetails:
    """Dispatch on the operation kind and build its `OperationDetails`.

    Raises:
        UnsupportedOperationType: the tag is not a known `OperationType`
        SchemaMismatch: the union does not hold the payload for its kind
        MissingExecutionResult: a successful path payment lacks its result
        AddressDecodeError / MalformedBalanceId / MalformedLedgerKey: bad payload values
    """
    try:
        kind = OperationType(ctx.operation_type)
    except ValueError:
        raise UnsupportedOperationType(
            f"unknown operation type {ctx.operation_type}",
            operation_index=ctx.operation_index,
            operation_id=ctx.operation_id,
        ) from None
    try:
        fields = _DETAIL_EXTRACTORS[kind](ctx)
    except OperationTransformError as err:
        raise err.attach_context(
            operation_index=ctx.operation_index, operation_id=ctx.operation_id
        )
    logger.debug(
        "Extracted %d detail field(s) for %s operation id=%d",
        len(fields),
        kind.name.lower(),
        ctx.operation_id,
    )
    return OperationDetails(**fields)
