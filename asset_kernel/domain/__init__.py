"""
Pure domain layer.

No ORM, no database, no I/O.  Time enters only through an injected Clock.
"""

from asset_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from asset_kernel.domain.dates import add_months, as_utc, start_of_year

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "add_months",
    "as_utc",
    "start_of_year",
]
