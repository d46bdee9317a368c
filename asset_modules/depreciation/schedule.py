"""
Schedule Projector.

Builds the full amortization table for an asset from its static parameters
without touching the database.  Each period uses exactly the step the
Applier performs (calculate, round to cents, clamp at salvage), so a
projected schedule matches what a sequence of real monthly runs would
record.
"""

from datetime import datetime
from decimal import Decimal

from asset_kernel.domain.dates import add_months
from asset_kernel.logging_config import get_logger
from asset_modules.depreciation.helpers import (
    calculate_depreciation_amount,
    clamp_to_salvage,
)
from asset_modules.depreciation.models import (
    DepreciationParameters,
    DepreciationScheduleEntry,
)

logger = get_logger("modules.depreciation.schedule")

ZERO = Decimal("0")


def project_schedule(
    params: DepreciationParameters,
    start_date: datetime,
    units_per_period: int | None = None,
    legacy_sum_of_years: bool = False,
) -> tuple[DepreciationScheduleEntry, ...]:
    """
    Project periods 1..useful_life_months, stopping once salvage is reached.

    Args:
        params: Cost, salvage, method and life of the asset.
        start_date: Date of period 1; period N falls N-1 calendar months later.
        units_per_period: Assumed monthly output for units-of-production.
            Without it those periods project a zero amount.
        legacy_sum_of_years: Keep sum-of-years'-digits at a constant amount.

    Returns:
        Tuple of schedule entries.  Empty if the useful life is not positive.
    """
    entries: list[DepreciationScheduleEntry] = []
    if params.useful_life_months <= 0:
        return ()

    book = params.original_cost
    accumulated = ZERO

    for period in range(1, params.useful_life_months + 1):
        calculated = calculate_depreciation_amount(
            original_cost=params.original_cost,
            salvage_value=params.salvage_value,
            method=params.method,
            useful_life_months=params.useful_life_months,
            current_book_value=book,
            depreciation_rate=params.depreciation_rate,
            total_expected_units=params.total_expected_units,
            units_in_period=units_per_period,
            period_number=period,
            legacy_sum_of_years=legacy_sum_of_years,
        )
        amount = clamp_to_salvage(calculated, book, params.salvage_value)
        book_end = book - amount
        accumulated += amount

        entries.append(DepreciationScheduleEntry(
            period=period,
            date=add_months(start_date, period - 1),
            book_value_start=book,
            depreciation_amount=amount,
            book_value_end=book_end,
            accumulated_depreciation=accumulated,
        ))

        book = book_end
        if book <= params.salvage_value:
            break

    logger.debug(
        "depreciation_schedule_projected",
        extra={
            "method": params.method.value,
            "periods": len(entries),
            "useful_life_months": params.useful_life_months,
            "total_depreciation": str(accumulated),
        },
    )
    return tuple(entries)
