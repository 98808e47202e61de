"""Ledger key and claimable balance id rendering for sponsorship operations.

Revoke-sponsorship targets a ledger entry by key. Only the entry kinds that
can carry sponsorship in the current wire format are supported; every other
kind is rejected explicitly instead of falling into a silent default, so a
newly introduced kind requires a deliberate inclusion decision here.
"""
from __future__ import annotations

import struct
from typing import Dict, Union

from ..errors import MalformedBalanceId, MalformedLedgerKey
from ..models.ledger import ClaimableBalanceId, LedgerKey
from .assets import canonical_asset_string

__all__ = ["SUPPORTED_LEDGER_KEY_TYPES", "claimable_balance_hex", "ledger_key_fields"]

SUPPORTED_LEDGER_KEY_TYPES = frozenset(
    {"account", "trustline", "offer", "data", "claimable_balance"}
)

_BALANCE_ID_V0 = 0
_HASH_LEN = 32


def claimable_balance_hex(balance_id: ClaimableBalanceId) -> str:
    """Lowercase hex of the balance id's XDR encoding (type discriminant + hash)."""
    if balance_id.type != _BALANCE_ID_V0:
        raise MalformedBalanceId(f"unsupported claimable balance id type {balance_id.type}")
    if len(balance_id.v0) != _HASH_LEN:
        raise MalformedBalanceId(
            f"claimable balance id hash must be {_HASH_LEN} bytes, got {len(balance_id.v0)}"
        )
    return (struct.pack(">i", balance_id.type) + balance_id.v0).hex()


def _require(ledger_key: LedgerKey, attr: str):
    value = getattr(ledger_key, attr)
    if value is None:
        raise MalformedLedgerKey(f"{ledger_key.type} ledger key is missing its {attr} body")
    return value


def ledger_key_fields(ledger_key: LedgerKey) -> Dict[str, Union[str, int]]:
    kind = ledger_key.type
    if kind not in SUPPORTED_LEDGER_KEY_TYPES:
        raise MalformedLedgerKey(f"ledger key type {kind!r} is not supported for sponsorship")
    if kind == "account":
        return {"account_id": _require(ledger_key, "account").account_id.address()}
    if kind == "claimable_balance":
        body = _require(ledger_key, "claimable_balance")
        return {"claimable_balance_id": claimable_balance_hex(body.balance_id)}
    if kind == "data":
        body = _require(ledger_key, "data")
        return {"data_account_id": body.account_id.address(), "data_name": body.data_name}
    if kind == "offer":
        return {"offer_id": _require(ledger_key, "offer").offer_id}
    body = _require(ledger_key, "trust_line")
    return {
        "trustline_account_id": body.account_id.address(),
        "trustline_asset": canonical_asset_string(body.asset),
    }
