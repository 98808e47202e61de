"""Fixed-point and rational numeric canonicalization.

Native amounts travel as signed 64-bit integers scaled by 10^7 (stroops).
Conversions here never pass through binary floating point: decimals are built
from their coefficient with a fixed exponent of -7, and prices are formatted
with exact integer arithmetic.

Price formatting reproduces the ledger SDK's canonical rule: the exact
rational numerator/denominator is rendered with 7 fractional digits, the last
digit rounded to nearest with halves rounded away from zero. The float
approximation is obtained by parsing that string, so it matches the
canonical decimal bit for bit.
"""
from __future__ import annotations

from decimal import Decimal

from ..errors import SchemaMismatch

__all__ = [
    "STROOP_DIGITS",
    "STROOPS_PER_UNIT",
    "stroops_to_decimal",
    "format_amount",
    "price_to_string",
    "price_to_float",
]

STROOP_DIGITS = 7
STROOPS_PER_UNIT = 10**STROOP_DIGITS


def stroops_to_decimal(stroops: int) -> Decimal:
    """Return ``stroops / 10^7`` as an exact Decimal with 7 fractional digits.

    >>> stroops_to_decimal(15000000)
    Decimal('1.5000000')

    Built from its string form so the active decimal context never rounds it.
    """
    return Decimal(f"{int(stroops)}E-{STROOP_DIGITS}")


def format_amount(stroops: int) -> str:
    """Render a stroop amount as its canonical 7-digit decimal string."""
    return format(stroops_to_decimal(stroops), "f")


def price_to_string(numerator: int, denominator: int) -> str:
    if denominator == 0:
        raise SchemaMismatch(f"price {numerator}/{denominator} has a zero denominator")
    negative = numerator != 0 and (numerator < 0) != (denominator < 0)
    num, den = abs(int(numerator)), abs(int(denominator))
    whole, rem = divmod(num, den)
    frac, frac_rem = divmod(rem * STROOPS_PER_UNIT, den)
    if 2 * frac_rem >= den:
        frac += 1
        if frac >= STROOPS_PER_UNIT:
            whole += 1
            frac -= STROOPS_PER_UNIT
    sign = "-" if negative else ""
    return f"{sign}{whole}.{frac:0{STROOP_DIGITS}d}"


def price_to_float(numerator: int, denominator: int) -> float:
    return float(price_to_string(numerator, denominator))
