"""Asset and path normalization.

Produces asset triplets and the prefixed field groups the dispatcher merges
into `OperationDetails`. Four independent slots exist and may be filled in
the same record:

    ""         -> asset_type / asset_code / asset_issuer
    "buying"   -> buying_asset_*
    "selling"  -> selling_asset_*
    "source"   -> source_asset_*

Native assets leave code and issuer empty; credit assets populate both.
"""
from __future__ import annotations

from typing import Dict, List, Sequence

from ..errors import SchemaMismatch
from ..models.ledger import Asset
from ..models.operation import AssetTriplet

__all__ = [
    "ASSET_SLOTS",
    "extract_asset",
    "asset_fields",
    "canonical_asset_string",
    "transform_path",
]

ASSET_SLOTS = ("", "buying", "selling", "source")


def _credit_code(asset: Asset) -> str:
    # Codes are fixed-width on the wire; NUL padding is not part of the code.
    code = (asset.code or "").rstrip("\x00")
    if not code:
        raise SchemaMismatch(f"{asset.type} asset is missing its code")
    return code


def extract_asset(asset: Asset) -> AssetTriplet:
    if asset.type == "native":
        return AssetTriplet(type="native")
    if asset.issuer is None:
        raise SchemaMismatch(f"{asset.type} asset is missing its issuer")
    return AssetTriplet(
        type=asset.type,
        code=_credit_code(asset),
        issuer=asset.issuer.address(),
    )


def asset_fields(asset: Asset, prefix: str = "") -> Dict[str, str]:
    """Return the `<prefix>_asset_{type,code,issuer}` fields for one slot."""
    if prefix not in ASSET_SLOTS:
        raise ValueError(f"unknown asset slot {prefix!r}")
    triplet = extract_asset(asset)
    key = f"{prefix}_asset" if prefix else "asset"
    return {
        f"{key}_type": triplet.type,
        f"{key}_code": triplet.code,
        f"{key}_issuer": triplet.issuer,
    }


def canonical_asset_string(asset: Asset) -> str:
    """Render ``native`` or ``CODE:ISSUER``."""
    triplet = extract_asset(asset)
    if triplet.type == "native":
        return "native"
    return f"{triplet.code}:{triplet.issuer}"


def transform_path(path: Sequence[Asset]) -> List[AssetTriplet]:
    """Intermediate hop assets in their original order; empty path gives ``[]``."""
    return [extract_asset(hop) for hop in path or ()]
