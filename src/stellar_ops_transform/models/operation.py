"""Pydantic models for transformed operation records.

These models are the engine's output: one `OperationRecord` per ledger
operation, ready for an external serializer to write to analytical storage.
`OperationDetails` is deliberately a single sparse record wide enough for the
union of every operation kind, so the downstream schema stays stable no
matter which kinds a batch contains. Fields irrelevant to an operation's kind
keep their zero values.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, List

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Unset amounts keep the same 7-digit form as real zeros.
_ZERO = Decimal("0E-7")

# Fixed-point amount; JSON output keeps plain notation ("0.0000001", never "1E-7").
Amount = Annotated[Decimal, PlainSerializer(lambda d: format(d, "f"), return_type=str, when_used="json")]


class AssetTriplet(BaseModel):
    """Asset identity; `code` and `issuer` are empty exactly for the native asset."""

    type: str
    code: str = ""
    issuer: str = ""


class PricePair(BaseModel):
    """Exact rational price as carried on the wire."""

    numerator: int = 0
    denominator: int = 0


class ClaimantRecord(BaseModel):
    destination: str
    # Opaque predicate tree, copied verbatim from the operation.
    predicate: Any = None


class OperationDetails(BaseModel):
    """Flattened per-kind operation details.

    The list-valued fields (`path`, `set_flags`, `set_flags_string`,
    `clear_flags`, `clear_flags_string`) are always present; they default to
    empty lists rather than being absent. `from_` serializes as ``from``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    # Accounts
    account: str = ""
    funder: str = ""
    from_: str = Field(default="", alias="from")
    to: str = ""
    into: str = ""
    trustor: str = ""
    trustee: str = ""
    inflation_dest: str = ""
    sponsored_id: str = ""
    begin_sponsor: str = ""

    # Amounts (fixed-point, 7 fractional digits)
    amount: Amount = _ZERO
    starting_balance: Amount = _ZERO
    source_amount: Amount = _ZERO
    source_max: Amount = _ZERO
    limit: Amount = _ZERO
    destination_min: str = ""

    # Asset slots
    asset_type: str = ""
    asset_code: str = ""
    asset_issuer: str = ""
    buying_asset_type: str = ""
    buying_asset_code: str = ""
    buying_asset_issuer: str = ""
    selling_asset_type: str = ""
    selling_asset_code: str = ""
    selling_asset_issuer: str = ""
    source_asset_type: str = ""
    source_asset_code: str = ""
    source_asset_issuer: str = ""
    path: List[AssetTriplet] = Field(default_factory=list)

    # Offers
    offer_id: int = 0
    price: float = 0.0
    price_r: PricePair = Field(default_factory=PricePair)

    # Account options and trust
    set_flags: List[int] = Field(default_factory=list)
    set_flags_string: List[str] = Field(default_factory=list)
    clear_flags: List[int] = Field(default_factory=list)
    clear_flags_string: List[str] = Field(default_factory=list)
    master_key_weight: int = 0
    low_threshold: int = 0
    med_threshold: int = 0
    high_threshold: int = 0
    home_domain: str = ""
    signer_key: str = ""
    signer_weight: int = 0
    authorize: bool = False

    # Data entries and sequence
    name: str = ""
    value: str = ""
    bump_to: str = ""

    # Claimable balances
    balance_id: str = ""
    claimants: List[ClaimantRecord] = Field(default_factory=list)

    # Revoke sponsorship targets
    account_id: str = ""
    claimable_balance_id: str = ""
    data_account_id: str = ""
    data_name: str = ""
    trustline_account_id: str = ""
    trustline_asset: str = ""
    signer_account_id: str = ""


class OperationRecord(BaseModel):
    """One transformed operation.

    `operation_type` is the wire tag (never negative); `application_order`
    is the 1-based position within the transaction; `transaction_id` and
    `operation_id` are TOIDs whose numeric order equals application order.
    """

    source_account: str
    operation_type: int
    operation_type_string: str
    application_order: int
    transaction_id: int
    operation_id: int
    details: OperationDetails
