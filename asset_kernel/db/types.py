"""
Module: asset_kernel.db.types
Responsibility: Decimal coercion and the single rounding function for money.
    The Calculator, the Applier and the Schedule Projector all round through
    round_money() so that precision never drifts between them.
Architecture position: Kernel > DB.  May be imported by domain/, services/,
    selectors/, and the module layer.

Invariants enforced:
    - No floats for money.  All amounts are Decimal with explicit precision.
    - round_money() is the ONLY sanctioned rounding function.

Failure modes:
    - decimal.InvalidOperation from to_decimal() on non-numeric input.
"""

from decimal import ROUND_HALF_UP, Decimal

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP
ZERO = Decimal("0")


def to_decimal(value: Decimal | int | float | str | None) -> Decimal | None:
    """
    Coerce a numeric value to Decimal.

    Floats go through ``str()`` so that 0.1 becomes Decimal("0.1") rather
    than its binary expansion.  None passes through.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to specified decimal places.

    This is the ONLY sanctioned rounding function for money in the system.

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places to round to.
        rounding: Rounding mode (default: ROUND_HALF_UP).

    Returns:
        Rounded Decimal value.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)
