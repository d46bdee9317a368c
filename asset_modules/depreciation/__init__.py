"""
Depreciation Module (``asset_modules.depreciation``).

Responsibility
--------------
Per-period depreciation for assets under four methods (straight-line,
declining-balance, units-of-production, sum-of-years'-digits): the pure
Calculator, the Applier that writes one ledger entry per run, the Schedule
Projector, and the report and alert builders.

Architecture position
---------------------
**Modules layer** -- pure helpers, a state machine, ORM models, a selector
and a flush-only service.  Commit boundaries live in ``asset_services`` and
``asset_batch``.

Invariants enforced
-------------------
* Book value never falls below salvage value.
* Accumulated depreciation equals cost minus book value.
* Fully depreciated is terminal; no entries are written after it.
* Depreciation entries and asset history are append-only.

Failure modes
-------------
* Typed ``AssetError`` subclasses from ``asset_kernel.exceptions``.
* Calculator returns ``Decimal("0")`` for missing optional inputs.
"""

from asset_modules.depreciation.config import DepreciationConfig
from asset_modules.depreciation.helpers import calculate_depreciation_amount
from asset_modules.depreciation.models import (
    AssetDueSummary,
    AssetStatus,
    DepreciationCalculation,
    DepreciationEntry,
    DepreciationMethod,
    DepreciationOutcome,
    DepreciationParameters,
    DepreciationScheduleEntry,
    DepreciationSummary,
)
from asset_modules.depreciation.schedule import project_schedule
from asset_modules.depreciation.service import DepreciationService
from asset_modules.depreciation.workflows import DEPRECIATION_WORKFLOW

__all__ = [
    "AssetDueSummary",
    "AssetStatus",
    "DepreciationCalculation",
    "DepreciationEntry",
    "DepreciationMethod",
    "DepreciationOutcome",
    "DepreciationParameters",
    "DepreciationScheduleEntry",
    "DepreciationSummary",
    "DEPRECIATION_WORKFLOW",
    "DepreciationConfig",
    "DepreciationService",
    "calculate_depreciation_amount",
    "project_schedule",
]
