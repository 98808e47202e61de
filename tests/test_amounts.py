from __future__ import annotations

from decimal import Decimal, localcontext

import pytest

from stellar_ops_transform.errors import SchemaMismatch
from stellar_ops_transform.mapping.amounts import (
    format_amount,
    price_to_float,
    price_to_string,
    stroops_to_decimal,
)


def test_stroops_to_decimal_is_exact_fixed_point():
    assert stroops_to_decimal(15000000) == Decimal("1.5000000")
    assert stroops_to_decimal(1) == Decimal("0.0000001")
    # Always seven fractional digits, never a binary float detour.
    assert stroops_to_decimal(1).as_tuple().exponent == -7
    assert stroops_to_decimal(9223372036854775807) == Decimal("922337203685.4775807")


def test_format_amount_plain_notation():
    assert format_amount(15000000) == "1.5000000"
    assert format_amount(1) == "0.0000001"
    assert format_amount(0) == "0.0000000"
    assert format_amount(-25) == "-0.0000025"


def test_price_string_rounds_last_digit_half_away_from_zero():
    assert price_to_string(1, 2) == "0.5000000"
    assert price_to_string(1, 3) == "0.3333333"
    assert price_to_string(2, 3) == "0.6666667"
    # 1 / 20_000_000 = 0.00000005 exactly: a tie, rounded away from zero.
    assert price_to_string(1, 20_000_000) == "0.0000001"
    assert price_to_string(-1, 20_000_000) == "-0.0000001"
    # Carry from the fractional part into the integer part.
    assert price_to_string(199999999, 100000000) == "2.0000000"
    assert price_to_string(7, 1) == "7.0000000"


def test_price_float_parses_canonical_string():
    assert price_to_float(1, 3) == 0.3333333
    assert price_to_float(2, 3) == float("0.6666667")
    assert price_to_float(5, 4) == 1.25


def test_zero_denominator_is_schema_mismatch():
    with pytest.raises(SchemaMismatch):
        price_to_string(1, 0)


def test_stroops_to_decimal_ignores_active_decimal_context():
    with localcontext() as ctx:
        ctx.prec = 9
        value = stroops_to_decimal(9223372036854775807)
        assert format_amount(-9223372036854775808) == "-922337203685.4775808"
    assert value == Decimal("922337203685.4775807")
    assert format(value, "f") == "922337203685.4775807"
