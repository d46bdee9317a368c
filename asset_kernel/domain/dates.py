"""
Pure calendar helpers.

Every function takes its reference date explicitly; nothing here reads the
clock.
"""

from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def add_months(value: datetime, months: int) -> datetime:
    """
    Calendar-month arithmetic.

    Jan 31 + 1 month is Feb 28 (or 29), not Mar 3.
    """
    return value + relativedelta(months=months)


def start_of_year(value: datetime) -> datetime:
    """Midnight on January 1 of ``value``'s year, same tzinfo."""
    return value.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
