"""
Depreciation Calculator (``asset_modules.depreciation.helpers``).

Responsibility
--------------
Pure per-period depreciation formulas: straight-line, declining-balance,
units-of-production and sum-of-years'-digits, plus the dispatcher
``calculate_depreciation_amount`` used by both the Applier and the
Schedule Projector.

Architecture position
---------------------
**Modules layer** -- pure helper functions.  No I/O, no session, no clock.

Invariants enforced
-------------------
* All numeric inputs and outputs use ``Decimal`` -- NEVER ``float``.
* Missing optional parameters and division-by-zero cases return
  ``Decimal("0")`` instead of raising.
* Results are rounded to cents through ``round_money`` and are never
  negative.

Failure modes
-------------
* Zero or negative useful life  -> ``Decimal("0")``.
* Declining-balance without a rate  -> ``Decimal("0")``.
* Units-of-production without total or period units  -> ``Decimal("0")``.

Period numbering
----------------
``period_number`` is 1-based.  When it is supplied, straight-line and
sum-of-years'-digits close out the remaining depreciable balance in the
final period of the useful life (``period_number >= useful_life_months``),
so cent rounding and a short final year never leave residue past the end
of the asset's life.
"""

from __future__ import annotations

import math
from decimal import Decimal

from asset_kernel.db.types import round_money, to_decimal
from asset_modules.depreciation.models import DepreciationMethod

ZERO = Decimal("0")
MONTHS_PER_YEAR = 12
PER_UNIT_PLACES = 6


def straight_line(
    cost: Decimal,
    salvage_value: Decimal,
    useful_life_months: int,
) -> Decimal:
    """
    Monthly straight-line depreciation: ``(cost - salvage) / life``.

    Returns ``Decimal("0")`` if ``useful_life_months`` <= 0.
    """
    if useful_life_months <= 0:
        return ZERO
    depreciable_base = cost - salvage_value
    return round_money(depreciable_base / Decimal(useful_life_months))


def declining_balance(
    current_book_value: Decimal,
    annual_rate_percent: Decimal | None,
) -> Decimal:
    """
    Monthly declining-balance depreciation.

    The annual rate is a percentage (20 means 20% a year) applied to the
    current book value, one twelfth per month.  Because the base shrinks
    every period, so does the amount.
    """
    if not annual_rate_percent or annual_rate_percent <= ZERO:
        return ZERO
    monthly_fraction = annual_rate_percent / Decimal(100) / Decimal(MONTHS_PER_YEAR)
    return round_money(current_book_value * monthly_fraction)


def depreciation_per_unit(
    cost: Decimal,
    salvage_value: Decimal,
    total_expected_units: int | None,
) -> Decimal:
    """Depreciable base spread over the expected lifetime output."""
    if not total_expected_units or total_expected_units <= 0:
        return ZERO
    return round_money(
        (cost - salvage_value) / Decimal(total_expected_units),
        decimal_places=PER_UNIT_PLACES,
    )


def units_of_production(
    cost: Decimal,
    salvage_value: Decimal,
    total_expected_units: int | None,
    units_in_period: int | Decimal | None,
) -> Decimal:
    """
    Depreciation for the units consumed in a period.

    Zero when either the expected total or the period units are missing.
    """
    if not total_expected_units or total_expected_units <= 0:
        return ZERO
    if not units_in_period or units_in_period <= 0:
        return ZERO
    rate_per_unit = (cost - salvage_value) / Decimal(total_expected_units)
    return round_money(rate_per_unit * Decimal(units_in_period))


def total_years(useful_life_months: int) -> int:
    """Useful life in whole years, rounding a partial final year up."""
    if useful_life_months <= 0:
        return 0
    return math.ceil(useful_life_months / MONTHS_PER_YEAR)


def sum_of_years_digits(
    cost: Decimal,
    salvage_value: Decimal,
    useful_life_months: int,
    period_number: int | None = None,
    legacy_constant: bool = False,
) -> Decimal:
    """
    Monthly sum-of-years'-digits depreciation.

    Preconditions:
        - ``period_number`` is 1-based; None is treated as period 1.
    Postconditions:
        - ``years_remaining`` drops by one at the start of every year of
          life, so the monthly amount steps down each year.
        - With ``legacy_constant`` the remaining years never decrease and
          the amount is the same every month.
        - Returns ``Decimal("0")`` once the life is exhausted.
    """
    years = total_years(useful_life_months)
    if years <= 0:
        return ZERO
    if legacy_constant:
        years_remaining = years
    else:
        elapsed_years = ((period_number or 1) - 1) // MONTHS_PER_YEAR
        years_remaining = years - elapsed_years
    if years_remaining <= 0:
        return ZERO
    sum_of_years = Decimal(years * (years + 1) // 2)
    yearly = (cost - salvage_value) * Decimal(years_remaining) / sum_of_years
    return round_money(yearly / Decimal(MONTHS_PER_YEAR))


def calculate_depreciation_amount(
    original_cost: Decimal,
    salvage_value: Decimal | None,
    method: DepreciationMethod | None,
    useful_life_months: int,
    current_book_value: Decimal,
    depreciation_rate: Decimal | None = None,
    total_expected_units: int | None = None,
    units_in_period: int | Decimal | None = None,
    period_number: int | None = None,
    legacy_sum_of_years: bool = False,
) -> Decimal:
    """
    Depreciation amount for one monthly period.

    Dispatches on ``method`` (None means straight-line).  The result is not
    clamped to the salvage floor; that is the caller's job, because only the
    caller knows the live book value it is about to write.

    Postconditions:
        - Result is a non-negative ``Decimal`` rounded to cents.
    """
    cost = to_decimal(original_cost)
    salvage = to_decimal(salvage_value) or ZERO
    book = to_decimal(current_book_value)
    method = method or DepreciationMethod.STRAIGHT_LINE

    if useful_life_months is None or useful_life_months <= 0:
        return ZERO

    final_period = (
        period_number is not None and period_number >= useful_life_months
    )

    if method == DepreciationMethod.STRAIGHT_LINE:
        if final_period:
            amount = book - salvage
        else:
            amount = straight_line(cost, salvage, useful_life_months)
    elif method == DepreciationMethod.DECLINING_BALANCE:
        amount = declining_balance(book, to_decimal(depreciation_rate))
    elif method == DepreciationMethod.UNITS_OF_PRODUCTION:
        amount = units_of_production(
            cost, salvage, total_expected_units, units_in_period,
        )
    elif method == DepreciationMethod.SUM_OF_YEARS_DIGITS:
        if final_period and not legacy_sum_of_years:
            amount = book - salvage
        else:
            amount = sum_of_years_digits(
                cost,
                salvage,
                useful_life_months,
                period_number=period_number,
                legacy_constant=legacy_sum_of_years,
            )
    else:
        amount = ZERO

    return max(round_money(amount), ZERO)


def clamp_to_salvage(
    amount: Decimal,
    current_book_value: Decimal,
    salvage_value: Decimal,
) -> Decimal:
    """Never let a period's depreciation push book value below salvage."""
    headroom = max(current_book_value - salvage_value, ZERO)
    return min(amount, headroom)


def validate_depreciation_parameters(
    method: DepreciationMethod | None,
    original_cost: Decimal | None,
    useful_life_months: int | None,
    salvage_value: Decimal | None = None,
    depreciation_rate: Decimal | None = None,
    total_expected_units: int | None = None,
) -> list[str]:
    """
    Check that a method and its parameters agree.

    Returns a list of problems; empty means the combination is usable.
    """
    problems: list[str] = []
    method = method or DepreciationMethod.STRAIGHT_LINE
    if original_cost is None or original_cost <= ZERO:
        problems.append("purchase price must be positive")
    if useful_life_months is None or useful_life_months <= 0:
        problems.append("useful life months must be positive")
    salvage = salvage_value or ZERO
    if salvage < ZERO:
        problems.append("salvage value cannot be negative")
    elif original_cost is not None and salvage > original_cost:
        problems.append("salvage value cannot exceed purchase price")
    if method == DepreciationMethod.DECLINING_BALANCE:
        if depreciation_rate is None or depreciation_rate <= ZERO:
            problems.append("declining balance requires a positive depreciation rate")
        elif depreciation_rate > Decimal(100):
            problems.append("depreciation rate is a percentage and cannot exceed 100")
    if method == DepreciationMethod.UNITS_OF_PRODUCTION:
        if not total_expected_units or total_expected_units <= 0:
            problems.append("units of production requires total expected units")
    return problems
