"""
Unit tests for decimal handling and rounding.

Verifies:
- Float prohibition on monetary inputs
- Cost and amount rounding (ROUND_HALF_EVEN default)
- Currency code validation
- PortableDecimal storage form per dialect
"""

from decimal import ROUND_HALF_UP, Decimal
from types import SimpleNamespace

import pytest

from inventory_kernel.db.base import PortableDecimal
from inventory_kernel.db.types import (
    COST_DECIMAL_PLACES,
    round_amount,
    round_cost,
    to_decimal,
    validate_currency,
)

SQLITE = SimpleNamespace(name="sqlite")
POSTGRES = SimpleNamespace(name="postgresql")


class TestToDecimal:

    def test_string(self):
        assert to_decimal("110.0000") == Decimal("110.0000")

    def test_int(self):
        assert to_decimal(7) == Decimal("7")

    def test_decimal_passthrough(self):
        value = Decimal("1.23")
        assert to_decimal(value) is value

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(0.1)

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(True)

    def test_garbage_string_rejected(self):
        with pytest.raises(ValueError):
            to_decimal("ten dollars")


class TestRoundCost:

    def test_default_places(self):
        assert COST_DECIMAL_PLACES == 4
        assert round_cost(Decimal("110")) == Decimal("110.0000")

    def test_half_even_rounds_to_even_digit(self):
        assert round_cost(Decimal("1.00005")) == Decimal("1.0000")
        assert round_cost(Decimal("1.00015")) == Decimal("1.0002")

    def test_explicit_rounding_mode(self):
        assert round_cost(Decimal("1.00005"), rounding=ROUND_HALF_UP) == Decimal("1.0001")

    def test_repeating_fraction(self):
        # (10*100 + 5*130 + 1*7) / 16
        raw = Decimal(1657) / Decimal(16)
        assert round_cost(raw) == Decimal("103.5625")
        assert round_cost(Decimal(100) / Decimal(3)) == Decimal("33.3333")


class TestRoundAmount:

    def test_two_places(self):
        assert round_amount(Decimal("10.125")) == Decimal("10.12")
        assert round_amount(Decimal("10.135")) == Decimal("10.14")

    def test_custom_places(self):
        assert round_amount(Decimal("10.1"), 0) == Decimal("10")


class TestValidateCurrency:

    def test_upper_cases(self):
        assert validate_currency("usd") == "USD"

    @pytest.mark.parametrize("code", ["", "US", "USDX", "U$D", None])
    def test_invalid(self, code):
        with pytest.raises(ValueError):
            validate_currency(code)


class TestPortableDecimal:

    def test_sqlite_stores_exact_string(self):
        col = PortableDecimal()
        assert col.process_bind_param(Decimal("110.0000"), SQLITE) == "110.0000"

    def test_postgres_binds_decimal(self):
        col = PortableDecimal()
        assert col.process_bind_param(Decimal("110.0000"), POSTGRES) == Decimal("110.0000")

    def test_float_refused(self):
        with pytest.raises(TypeError):
            PortableDecimal().process_bind_param(1.5, SQLITE)

    def test_result_is_decimal(self):
        col = PortableDecimal()
        assert col.process_result_value("33.3333", SQLITE) == Decimal("33.3333")
        assert col.process_result_value(None, SQLITE) is None
