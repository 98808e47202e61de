"""Internal mapping subpackage for decomposed transformation logic.

This package contains the core implementation of ledger operation to
`OperationRecord` mapping, decomposed into focused, single-responsibility
modules. All functions within this package are pure (no network I/O, no
file access) and deterministic.

The public API lives in the top-level `mapper.py` facade. Callers should not
import directly from this package unless accessing internal helpers for
testing purposes.

Modules:
    orchestrator: Detail dispatcher, one pure extractor per operation kind
    context: Source account resolution and TOID computation
    sponsorship: Begin/end sponsoring lookback across sibling operations
    assets: Asset triplets, prefixed asset slots and path normalization
    flags: Ordered bit-flag decomposition
    ledger_keys: Revoke-sponsorship ledger key and balance id rendering
    amounts: Fixed-point stroop and rational price canonicalization
    strkey: Canonical address rendering
    id_utils: Deterministic TOID generation

Design Invariants:
    - No state retained across calls; every record is built fresh
    - Deterministic output for identical inputs
    - Result enrichment and sponsorship lookback only for successful transactions
    - List-valued detail fields are always present
"""
from __future__ import annotations

from . import amounts as amounts  # noqa: F401
from . import id_utils as id_utils  # noqa: F401
from . import strkey as strkey  # noqa: F401

__all__ = ["amounts", "id_utils", "strkey"]
