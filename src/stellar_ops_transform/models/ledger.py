"""Pydantic models for decoded ledger transactions and operations.

These models are the typed hand-off from the external wire decoder: every
structure mirrors its ledger XDR counterpart after decoding, with raw byte
fields kept as bytes and accounts kept as raw ed25519 keys. The engine in
`mapping.orchestrator` reads them; it never mutates them.

The operation body is a tagged union kept in its decoded shape: an integer
`type` tag plus one optional payload attribute per kind. The tag is not
validated against `OperationType` here so that corrupt (negative) and newer
(unknown) tags survive decoding and are rejected by the engine with a
located error.

JSON input (e.g. from the CLI) carries byte fields base64 encoded. Accounts,
assets and balance ids additionally accept their canonical string renderings
(``G...``/``M...`` addresses, ``CODE:ISSUER``, 72-char balance id hex).
"""
from __future__ import annotations

from enum import IntEnum
from typing import Annotated, Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..errors import AddressDecodeError
from ..mapping import strkey


class OperationType(IntEnum):
    """Operation kinds understood by the engine, keyed by their wire tag."""

    CREATE_ACCOUNT = 0
    PAYMENT = 1
    PATH_PAYMENT_STRICT_RECEIVE = 2
    MANAGE_SELL_OFFER = 3
    CREATE_PASSIVE_SELL_OFFER = 4
    SET_OPTIONS = 5
    CHANGE_TRUST = 6
    ALLOW_TRUST = 7
    ACCOUNT_MERGE = 8
    INFLATION = 9
    MANAGE_DATA = 10
    BUMP_SEQUENCE = 11
    MANAGE_BUY_OFFER = 12
    PATH_PAYMENT_STRICT_SEND = 13
    CREATE_CLAIMABLE_BALANCE = 14
    CLAIM_CLAIMABLE_BALANCE = 15
    BEGIN_SPONSORING_FUTURE_RESERVES = 16
    END_SPONSORING_FUTURE_RESERVES = 17
    REVOKE_SPONSORSHIP = 18
    CLAWBACK = 19
    CLAWBACK_CLAIMABLE_BALANCE = 20
    SET_TRUST_LINE_FLAGS = 21


# Signed 64-bit wire integer: stroop amounts, offer ids, sequence numbers.
Int64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]


class LedgerModel(BaseModel):
    """Base for decoded ledger structures: immutable, base64 bytes in JSON."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        val_json_bytes="base64",
        ser_json_bytes="base64",
    )


# ---------------------------------------------------------------- accounts


class AccountId(LedgerModel):
    """An ed25519 account public key."""

    ed25519: bytes

    @model_validator(mode="before")
    @classmethod
    def _from_address(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return {"ed25519": strkey.decode_account_id(value)}
            except AddressDecodeError as exc:
                raise ValueError(str(exc)) from exc
        return value

    def address(self) -> str:
        """Render the canonical ``G...`` address; raises AddressDecodeError."""
        return strkey.encode_account_id(self.ed25519)


class MuxedAccount(AccountId):
    """An account key with an optional multiplexing id.

    The rendered address is always that of the underlying account; the mux id
    does not take part in account identity for this engine.
    """

    id: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _from_address(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                key, mux_id = strkey.decode_muxed_account(value)
            except AddressDecodeError as exc:
                raise ValueError(str(exc)) from exc
            return {"ed25519": key, "id": mux_id}
        return value


# ------------------------------------------------------------------ assets

AssetTypeName = Literal["native", "credit_alphanum4", "credit_alphanum12"]


def _credit_type_for(code: str) -> str:
    return "credit_alphanum4" if len(code) <= 4 else "credit_alphanum12"


class Asset(LedgerModel):
    """A native or issued asset as it appears in operation payloads."""

    type: AssetTypeName = "native"
    code: Optional[str] = None
    issuer: Optional[AccountId] = None

    @model_validator(mode="before")
    @classmethod
    def _from_canonical(cls, value: Any) -> Any:
        if isinstance(value, str):
            if value == "native":
                return {"type": "native"}
            code, sep, issuer = value.partition(":")
            if not sep:
                raise ValueError(f"asset string {value!r} is neither 'native' nor CODE:ISSUER")
            return {"type": _credit_type_for(code), "code": code, "issuer": issuer}
        return value


class AllowTrustAsset(LedgerModel):
    """Legacy asset code used by allow-trust; the issuer is the op source."""

    type: Literal["credit_alphanum4", "credit_alphanum12"]
    code: str

    @model_validator(mode="before")
    @classmethod
    def _from_code(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"type": _credit_type_for(value), "code": value}
        return value


class Price(LedgerModel):
    n: int
    d: int


# ----------------------------------------------------------------- signers


class SignerKey(LedgerModel):
    type: Literal["ed25519", "pre_auth_tx", "hash_x", "ed25519_signed_payload"] = "ed25519"
    key: bytes
    # Only used by ed25519_signed_payload signers.
    payload: bytes = b""

    def address(self) -> str:
        if self.type == "ed25519":
            return strkey.encode_account_id(self.key)
        if len(self.key) != 32:
            raise AddressDecodeError(f"{self.type} signer key must be 32 bytes, got {len(self.key)}")
        if self.type == "pre_auth_tx":
            return strkey.encode(strkey.VERSION_PRE_AUTH_TX, self.key)
        if self.type == "hash_x":
            return strkey.encode(strkey.VERSION_HASH_X, self.key)
        return strkey.encode_signed_payload(self.key, self.payload)


class Signer(LedgerModel):
    key: SignerKey
    weight: int


# ------------------------------------------------------- claimable balances


class ClaimableBalanceId(LedgerModel):
    """Union of balance id versions; only version 0 (a 32-byte hash) exists today."""

    type: int = 0
    v0: bytes = b""

    @model_validator(mode="before")
    @classmethod
    def _from_hex(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                raw = bytes.fromhex(value)
            except ValueError as exc:
                raise ValueError(f"balance id {value!r} is not hex") from exc
            if len(raw) < 4:
                raise ValueError(f"balance id {value!r} is too short")
            return {"type": int.from_bytes(raw[:4], "big", signed=True), "v0": raw[4:]}
        return value


class Claimant(LedgerModel):
    destination: AccountId
    # Opaque recursive condition tree (time bounds, and/or/not); carried through untouched.
    predicate: Any = Field(default_factory=lambda: {"unconditional": True})


# ------------------------------------------------------------- ledger keys

LedgerEntryTypeName = Literal[
    "account",
    "trustline",
    "offer",
    "data",
    "claimable_balance",
    "liquidity_pool",
    "contract_data",
    "contract_code",
    "config_setting",
    "ttl",
]


class LedgerKeyAccount(LedgerModel):
    account_id: AccountId


class LedgerKeyTrustLine(LedgerModel):
    account_id: AccountId
    asset: Asset


class LedgerKeyOffer(LedgerModel):
    seller_id: AccountId
    offer_id: Int64


class LedgerKeyData(LedgerModel):
    account_id: AccountId
    data_name: str


class LedgerKeyClaimableBalance(LedgerModel):
    balance_id: ClaimableBalanceId


class LedgerKey(LedgerModel):
    type: LedgerEntryTypeName
    account: Optional[LedgerKeyAccount] = None
    trust_line: Optional[LedgerKeyTrustLine] = None
    offer: Optional[LedgerKeyOffer] = None
    data: Optional[LedgerKeyData] = None
    claimable_balance: Optional[LedgerKeyClaimableBalance] = None
    # Keys of newer entry kinds are kept raw; the engine does not interpret them.
    raw: Optional[Any] = None


class RevokeSponsorshipSigner(LedgerModel):
    account_id: AccountId
    signer_key: SignerKey


# -------------------------------------------------------- operation payloads


class CreateAccountOp(LedgerModel):
    destination: AccountId
    starting_balance: Int64


class PaymentOp(LedgerModel):
    destination: MuxedAccount
    asset: Asset
    amount: Int64


class PathPaymentStrictReceiveOp(LedgerModel):
    send_asset: Asset
    send_max: Int64
    destination: MuxedAccount
    dest_asset: Asset
    dest_amount: Int64
    path: List[Asset] = Field(default_factory=list)


class PathPaymentStrictSendOp(LedgerModel):
    send_asset: Asset
    send_amount: Int64
    destination: MuxedAccount
    dest_asset: Asset
    dest_min: Int64
    path: List[Asset] = Field(default_factory=list)


class ManageSellOfferOp(LedgerModel):
    selling: Asset
    buying: Asset
    amount: Int64
    price: Price
    offer_id: Int64 = 0


class ManageBuyOfferOp(LedgerModel):
    selling: Asset
    buying: Asset
    buy_amount: Int64
    price: Price
    offer_id: Int64 = 0


class CreatePassiveSellOfferOp(LedgerModel):
    selling: Asset
    buying: Asset
    amount: Int64
    price: Price


class SetOptionsOp(LedgerModel):
    inflation_dest: Optional[AccountId] = None
    clear_flags: Optional[int] = None
    set_flags: Optional[int] = None
    master_weight: Optional[int] = None
    low_threshold: Optional[int] = None
    med_threshold: Optional[int] = None
    high_threshold: Optional[int] = None
    home_domain: Optional[str] = None
    signer: Optional[Signer] = None


class ChangeTrustOp(LedgerModel):
    line: Asset
    limit: Int64


class AllowTrustOp(LedgerModel):
    trustor: AccountId
    asset: AllowTrustAsset
    authorize: int


class ManageDataOp(LedgerModel):
    data_name: str
    data_value: Optional[bytes] = None


class BumpSequenceOp(LedgerModel):
    bump_to: Int64


class CreateClaimableBalanceOp(LedgerModel):
    asset: Asset
    amount: Int64
    claimants: List[Claimant] = Field(default_factory=list)


class ClaimClaimableBalanceOp(LedgerModel):
    balance_id: ClaimableBalanceId


class BeginSponsoringFutureReservesOp(LedgerModel):
    sponsored_id: AccountId


class RevokeSponsorshipOp(LedgerModel):
    type: Literal["ledger_entry", "signer"]
    ledger_key: Optional[LedgerKey] = None
    signer: Optional[RevokeSponsorshipSigner] = None


class ClawbackOp(LedgerModel):
    asset: Asset
    from_: MuxedAccount = Field(alias="from")
    amount: Int64


class ClawbackClaimableBalanceOp(LedgerModel):
    balance_id: ClaimableBalanceId


class SetTrustLineFlagsOp(LedgerModel):
    trustor: AccountId
    asset: Asset
    clear_flags: int = 0
    set_flags: int = 0


class OperationBody(LedgerModel):
    """Decoded operation union: the wire tag plus the arm it selects.

    Exactly one payload attribute is expected to be set, matching `type`.
    Account merge carries its destination directly; inflation and
    end-sponsoring carry no payload at all.
    """

    type: int
    create_account_op: Optional[CreateAccountOp] = None
    payment_op: Optional[PaymentOp] = None
    path_payment_strict_receive_op: Optional[PathPaymentStrictReceiveOp] = None
    manage_sell_offer_op: Optional[ManageSellOfferOp] = None
    create_passive_sell_offer_op: Optional[CreatePassiveSellOfferOp] = None
    set_options_op: Optional[SetOptionsOp] = None
    change_trust_op: Optional[ChangeTrustOp] = None
    allow_trust_op: Optional[AllowTrustOp] = None
    destination: Optional[MuxedAccount] = None
    manage_data_op: Optional[ManageDataOp] = None
    bump_sequence_op: Optional[BumpSequenceOp] = None
    manage_buy_offer_op: Optional[ManageBuyOfferOp] = None
    path_payment_strict_send_op: Optional[PathPaymentStrictSendOp] = None
    create_claimable_balance_op: Optional[CreateClaimableBalanceOp] = None
    claim_claimable_balance_op: Optional[ClaimClaimableBalanceOp] = None
    begin_sponsoring_future_reserves_op: Optional[BeginSponsoringFutureReservesOp] = None
    revoke_sponsorship_op: Optional[RevokeSponsorshipOp] = None
    clawback_op: Optional[ClawbackOp] = None
    clawback_claimable_balance_op: Optional[ClawbackClaimableBalanceOp] = None
    set_trust_line_flags_op: Optional[SetTrustLineFlagsOp] = None

    @model_validator(mode="before")
    @classmethod
    def _type_from_name(cls, value: Any) -> Any:
        # JSON producers may name the kind ("payment") instead of its tag.
        if isinstance(value, dict) and isinstance(value.get("type"), str):
            name = value["type"]
            if not name.lstrip("-").isdigit():
                try:
                    tag = OperationType[name.upper()]
                except KeyError as exc:
                    raise ValueError(f"unknown operation type name {name!r}") from exc
                value = {**value, "type": int(tag)}
        return value


class Operation(LedgerModel):
    source_account: Optional[MuxedAccount] = None
    body: OperationBody


# ------------------------------------------------------------------ results


class ClaimAtom(LedgerModel):
    """One offer crossed while executing a path payment."""

    offer_id: Int64 = 0
    amount_sold: Int64 = 0
    amount_bought: Int64 = 0


class SimplePaymentResult(LedgerModel):
    destination: Optional[AccountId] = None
    asset: Optional[Asset] = None
    amount: Int64


class PathPaymentResult(LedgerModel):
    """Success arm shared by strict-receive and strict-send results."""

    code: str = "success"
    offers: List[ClaimAtom] = Field(default_factory=list)
    last: Optional[SimplePaymentResult] = None


class OperationResultTr(LedgerModel):
    type: int
    path_payment_strict_receive_result: Optional[PathPaymentResult] = None
    path_payment_strict_send_result: Optional[PathPaymentResult] = None


class OperationResult(LedgerModel):
    code: str = "op_inner"
    tr: Optional[OperationResultTr] = None


# ------------------------------------------------------------- transactions


class LedgerTransaction(LedgerModel):
    """A transaction as applied in a ledger, with its execution outcome.

    `index` is the 1-based application position of the transaction within its
    ledger. `operation_results` is resident in memory when the transaction
    was applied; it may be absent for transactions rejected before apply.
    """

    index: int
    source_account: MuxedAccount
    operations: List[Operation] = Field(default_factory=list)
    successful: bool = True
    operation_results: Optional[List[OperationResult]] = None
    hash: str = ""
    # Carried by exporters that emit one transaction per line.
    ledger_sequence: Optional[int] = None
