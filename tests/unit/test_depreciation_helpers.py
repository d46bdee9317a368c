"""
Tests for the depreciation Calculator (asset_modules/depreciation/helpers.py).

Each method is checked against hand-computed figures, including the
edge cases that must return zero instead of raising.
"""

from decimal import Decimal

import pytest

from asset_modules.depreciation.helpers import (
    calculate_depreciation_amount,
    clamp_to_salvage,
    declining_balance,
    depreciation_per_unit,
    straight_line,
    sum_of_years_digits,
    total_years,
    units_of_production,
    validate_depreciation_parameters,
)
from asset_modules.depreciation.models import DepreciationMethod

SL = DepreciationMethod.STRAIGHT_LINE
DB = DepreciationMethod.DECLINING_BALANCE
UOP = DepreciationMethod.UNITS_OF_PRODUCTION
SYD = DepreciationMethod.SUM_OF_YEARS_DIGITS


class TestStraightLine:

    def test_reference_asset(self):
        assert straight_line(Decimal("120000"), Decimal("0"), 60) == Decimal("2000.00")

    def test_salvage_reduces_base(self):
        assert straight_line(Decimal("10000"), Decimal("1000"), 36) == Decimal("250.00")

    def test_rounds_to_cents(self):
        # 900 / 7 = 128.5714...
        assert straight_line(Decimal("1000"), Decimal("100"), 7) == Decimal("128.57")

    @pytest.mark.parametrize("life", [0, -12])
    def test_non_positive_life_is_zero(self, life):
        assert straight_line(Decimal("1000"), Decimal("0"), life) == Decimal("0")


class TestDecliningBalance:

    def test_annual_percent_applied_monthly(self):
        # 10000 * 20% / 12 = 166.666...
        assert declining_balance(Decimal("10000"), Decimal("20")) == Decimal("166.67")

    def test_amount_follows_book_value(self):
        high = declining_balance(Decimal("10000"), Decimal("20"))
        low = declining_balance(Decimal("9833.33"), Decimal("20"))
        assert low < high

    @pytest.mark.parametrize("rate", [None, Decimal("0"), Decimal("-5")])
    def test_missing_or_non_positive_rate_is_zero(self, rate):
        assert declining_balance(Decimal("10000"), rate) == Decimal("0")


class TestUnitsOfProduction:

    def test_per_unit_rate(self):
        assert depreciation_per_unit(Decimal("10000"), Decimal("1000"), 9000) == Decimal("1.000000")

    def test_per_unit_rate_keeps_six_places(self):
        assert depreciation_per_unit(Decimal("1000"), Decimal("0"), 3) == Decimal("333.333333")

    def test_amount_for_period_units(self):
        assert units_of_production(Decimal("10000"), Decimal("1000"), 9000, 500) == Decimal("500.00")

    @pytest.mark.parametrize("units", [None, 0])
    def test_no_units_is_zero(self, units):
        assert units_of_production(Decimal("10000"), Decimal("0"), 1000, units) == Decimal("0")

    @pytest.mark.parametrize("total", [None, 0])
    def test_no_expected_total_is_zero(self, total):
        assert units_of_production(Decimal("10000"), Decimal("0"), total, 10) == Decimal("0")
        assert depreciation_per_unit(Decimal("10000"), Decimal("0"), total) == Decimal("0")


class TestSumOfYearsDigits:

    @pytest.mark.parametrize("months,years", [(0, 0), (1, 1), (12, 1), (13, 2), (60, 5), (61, 6)])
    def test_total_years_rounds_up(self, months, years):
        assert total_years(months) == years

    def test_first_year(self):
        # 5-year life: sum = 15, first year = 15000 * 5/15 = 5000, monthly 416.67
        assert sum_of_years_digits(Decimal("15000"), Decimal("0"), 60, period_number=1) == Decimal("416.67")

    def test_steps_down_each_year(self):
        year_two = sum_of_years_digits(Decimal("15000"), Decimal("0"), 60, period_number=13)
        year_five = sum_of_years_digits(Decimal("15000"), Decimal("0"), 60, period_number=49)
        assert year_two == Decimal("333.33")
        assert year_five == Decimal("83.33")

    def test_same_amount_within_a_year(self):
        first = sum_of_years_digits(Decimal("15000"), Decimal("0"), 60, period_number=13)
        last = sum_of_years_digits(Decimal("15000"), Decimal("0"), 60, period_number=24)
        assert first == last

    def test_legacy_constant_never_steps_down(self):
        amount = sum_of_years_digits(
            Decimal("15000"), Decimal("0"), 60, period_number=49, legacy_constant=True,
        )
        assert amount == Decimal("416.67")

    def test_past_end_of_life_is_zero(self):
        assert sum_of_years_digits(Decimal("15000"), Decimal("0"), 60, period_number=61) == Decimal("0")


class TestCalculateDepreciationAmount:

    def test_dispatches_straight_line(self):
        amount = calculate_depreciation_amount(
            Decimal("120000"), Decimal("0"), SL, 60, Decimal("120000"),
        )
        assert amount == Decimal("2000.00")

    def test_none_method_defaults_to_straight_line(self):
        amount = calculate_depreciation_amount(
            Decimal("120000"), None, None, 60, Decimal("120000"),
        )
        assert amount == Decimal("2000.00")

    def test_accepts_float_inputs(self):
        amount = calculate_depreciation_amount(1200.0, 0.0, SL, 12, 1200.0)
        assert amount == Decimal("100.00")

    @pytest.mark.parametrize("life", [None, 0, -1])
    def test_no_useful_life_is_zero(self, life):
        assert calculate_depreciation_amount(
            Decimal("1000"), Decimal("0"), SL, life, Decimal("1000"),
        ) == Decimal("0")

    def test_declining_balance_uses_book_value(self):
        amount = calculate_depreciation_amount(
            Decimal("10000"), Decimal("0"), DB, 120, Decimal("5000"),
            depreciation_rate=Decimal("24"),
        )
        assert amount == Decimal("100.00")

    def test_units_of_production_without_units_is_zero(self):
        amount = calculate_depreciation_amount(
            Decimal("10000"), Decimal("0"), UOP, 60, Decimal("10000"),
            total_expected_units=1000,
        )
        assert amount == Decimal("0")

    def test_straight_line_final_period_closes_out_balance(self):
        amount = calculate_depreciation_amount(
            Decimal("1000"), Decimal("0"), SL, 7, Decimal("142.84"), period_number=7,
        )
        assert amount == Decimal("142.84")

    def test_sum_of_years_final_period_closes_out_balance(self):
        amount = calculate_depreciation_amount(
            Decimal("15000"), Decimal("0"), SYD, 60, Decimal("83.53"), period_number=60,
        )
        assert amount == Decimal("83.53")

    def test_legacy_sum_of_years_has_no_true_up(self):
        amount = calculate_depreciation_amount(
            Decimal("15000"), Decimal("0"), SYD, 60, Decimal("5000"),
            period_number=60, legacy_sum_of_years=True,
        )
        assert amount == Decimal("416.67")

    def test_never_negative(self):
        # Book already below salvage in the final period
        amount = calculate_depreciation_amount(
            Decimal("1000"), Decimal("200"), SL, 10, Decimal("150"), period_number=10,
        )
        assert amount == Decimal("0")


class TestClampToSalvage:

    def test_limits_to_headroom(self):
        assert clamp_to_salvage(Decimal("500"), Decimal("1200"), Decimal("1000")) == Decimal("200")

    def test_passes_through_when_room(self):
        assert clamp_to_salvage(Decimal("100"), Decimal("1200"), Decimal("1000")) == Decimal("100")

    def test_zero_when_at_or_below_floor(self):
        assert clamp_to_salvage(Decimal("100"), Decimal("900"), Decimal("1000")) == Decimal("0")


class TestValidateDepreciationParameters:

    def test_valid_straight_line(self):
        assert validate_depreciation_parameters(SL, Decimal("1000"), 12) == []

    def test_missing_cost_and_life(self):
        problems = validate_depreciation_parameters(SL, None, None)
        assert "purchase price must be positive" in problems
        assert "useful life months must be positive" in problems

    def test_salvage_above_cost(self):
        problems = validate_depreciation_parameters(SL, Decimal("1000"), 12, Decimal("1500"))
        assert problems == ["salvage value cannot exceed purchase price"]

    def test_declining_balance_needs_rate(self):
        problems = validate_depreciation_parameters(DB, Decimal("1000"), 12)
        assert problems == ["declining balance requires a positive depreciation rate"]

    def test_declining_balance_rate_is_a_percentage(self):
        problems = validate_depreciation_parameters(
            DB, Decimal("1000"), 12, depreciation_rate=Decimal("150"),
        )
        assert len(problems) == 1

    def test_units_of_production_needs_total_units(self):
        problems = validate_depreciation_parameters(UOP, Decimal("1000"), 12)
        assert problems == ["units of production requires total expected units"]
