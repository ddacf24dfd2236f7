"""Unit tests for fixed-point conversion."""

import math
from decimal import Decimal

import pytest

from adjustment_allocation.units import DEFAULT_SCALE, from_units, to_units


class TestToUnits:
    def test_integer(self):
        assert to_units(3) == 3 * 10**DEFAULT_SCALE

    def test_float_is_exact(self):
        assert to_units(0.1) == 10_000_000
        assert to_units(0.1) + to_units(0.2) == to_units(0.3)

    def test_numeric_string_with_whitespace(self):
        assert to_units(" 12.5 ") == 1_250_000_000

    def test_decimal(self):
        assert to_units(Decimal("1.23456789")) == 123_456_789

    def test_negative(self):
        assert to_units(-7.25) == -725_000_000

    def test_rounds_half_even_at_last_unit(self):
        assert to_units("0.000000005") == 0
        assert to_units("0.000000015") == 2

    def test_custom_scale(self):
        assert to_units(1.5, scale=2) == 150

    def test_large_in_range_value(self):
        assert to_units("1e17") == 10**25

    @pytest.mark.parametrize(
        "value",
        [None, "", "n/a", "12abc", True, [], math.nan, math.inf, -math.inf, "NaN", "Infinity", "1e18", "1e999999", "-1e999999", Decimal("1e999999")],
    )
    def test_malformed_is_zero(self, value):
        assert to_units(value) == 0


class TestFromUnits:
    def test_back_to_hours(self):
        assert from_units(6_000_000_000) == Decimal("60")

    def test_negative(self):
        assert from_units(-500_000_000) == Decimal("-5")

    def test_custom_scale(self):
        assert from_units(150, scale=2) == Decimal("1.5")
