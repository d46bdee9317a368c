"""
Depreciation Domain Models.

The nouns of depreciation: methods, asset states, entries, schedules,
summaries, and the outcome of a single run.  Everything here is a frozen
dataclass or an Enum; money is always ``Decimal``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from asset_kernel.logging_config import get_logger

logger = get_logger("modules.depreciation.models")

ZERO = Decimal("0")


class DepreciationMethod(Enum):
    """Supported depreciation methods."""
    STRAIGHT_LINE = "straight_line"
    DECLINING_BALANCE = "declining_balance"
    UNITS_OF_PRODUCTION = "units_of_production"
    SUM_OF_YEARS_DIGITS = "sum_of_years_digits"


class AssetStatus(Enum):
    """Operational asset states. Depreciation only ever sets FULLY_DEPRECIATED."""
    AVAILABLE = "available"
    DEPLOYED = "deployed"
    IN_MAINTENANCE = "in_maintenance"
    DAMAGED = "damaged"
    LOST = "lost"
    RETIRED = "retired"
    DISPOSED = "disposed"
    FULLY_DEPRECIATED = "fully_depreciated"


class DepreciationState(Enum):
    """Depreciation lifecycle, independent of operational status."""
    ACTIVE = "active"
    FULLY_DEPRECIATED = "fully_depreciated"


class AssetHistoryAction(Enum):
    """Audit trail actions written by the depreciation engine."""
    DEPRECIATION_INITIALIZED = "depreciation_initialized"
    DEPRECIATION_CALCULATED = "depreciation_calculated"
    UNITS_UPDATED = "units_updated"
    FULLY_DEPRECIATED = "fully_depreciated"


class AlertType(Enum):
    DUE_FOR_CALCULATION = "due_for_calculation"
    FULLY_DEPRECIATED = "fully_depreciated"
    HIGH_DEPRECIATION = "high_depreciation"


class AlertSeverity(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    AlertSeverity.CRITICAL: 4,
    AlertSeverity.HIGH: 3,
    AlertSeverity.MEDIUM: 2,
    AlertSeverity.LOW: 1,
}


@dataclass(frozen=True)
class DepreciationParameters:
    """Static inputs for the Calculator and the Schedule Projector."""
    original_cost: Decimal
    useful_life_months: int
    method: DepreciationMethod = DepreciationMethod.STRAIGHT_LINE
    salvage_value: Decimal = ZERO
    depreciation_rate: Decimal | None = None  # annual percent, e.g. 20 = 20%
    total_expected_units: int | None = None

    @property
    def depreciable_base(self) -> Decimal:
        return self.original_cost - self.salvage_value


@dataclass(frozen=True)
class DepreciationCalculation:
    """What one successful Applier run did to an asset."""
    asset_id: UUID
    entry_id: UUID
    method: DepreciationMethod
    period_number: int
    period_start: datetime
    period_end: datetime
    previous_book_value: Decimal
    calculated_amount: Decimal
    depreciation_amount: Decimal
    new_book_value: Decimal
    accumulated_depreciation: Decimal
    is_fully_depreciated: bool
    next_depreciation_date: datetime | None
    units_in_period: int | None = None


@dataclass(frozen=True)
class DepreciationOutcome:
    """
    Result of an Applier run that did not raise.

    ``success`` is False only for the salvage-floor repair, where the asset
    was flipped to fully depreciated without writing an entry.
    """
    asset_id: UUID
    success: bool
    message: str
    calculation: DepreciationCalculation | None = None
    reason: str | None = None


@dataclass(frozen=True)
class DepreciationScheduleEntry:
    """One projected period in an amortization table."""
    period: int
    date: datetime
    book_value_start: Decimal
    depreciation_amount: Decimal
    book_value_end: Decimal
    accumulated_depreciation: Decimal


@dataclass(frozen=True)
class DepreciationEntry:
    """A persisted depreciation ledger row."""
    id: UUID
    asset_id: UUID
    business_unit_id: UUID
    depreciation_date: datetime
    period_start: datetime
    period_end: datetime
    book_value_start: Decimal
    book_value_end: Decimal
    depreciation_amount: Decimal
    accumulated_depreciation: Decimal
    method: DepreciationMethod
    calculated_by: UUID
    calculation_basis: dict = field(default_factory=dict)
    units_start: int | None = None
    units_end: int | None = None
    units_in_period: int | None = None
    notes: str | None = None


@dataclass(frozen=True)
class AssetHistoryEntry:
    """A persisted audit-trail row."""
    id: UUID
    asset_id: UUID
    action: AssetHistoryAction
    performed_by_id: UUID
    performed_at: datetime
    previous_book_value: Decimal | None = None
    new_book_value: Decimal | None = None
    amount: Decimal | None = None
    notes: str | None = None
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class DepreciationSummary:
    """Business-unit totals for the depreciation dashboard."""
    total_assets: int
    total_original_value: Decimal
    total_current_value: Decimal
    total_depreciation: Decimal
    fully_depreciated_assets: int
    assets_due_for_depreciation: int


@dataclass(frozen=True)
class AssetDueSummary:
    """An asset waiting for its next depreciation run."""
    id: UUID
    item_code: str
    description: str
    current_book_value: Decimal | None
    next_depreciation_date: datetime | None
    monthly_depreciation: Decimal | None


@dataclass(frozen=True)
class DepreciationAlert:
    """Something about an asset's depreciation that needs attention."""
    id: str
    type: AlertType
    severity: AlertSeverity
    title: str
    message: str
    asset_id: UUID
    asset_code: str
    asset_description: str
    due_date: datetime | None
    created_at: datetime


@dataclass(frozen=True)
class ReportSummary:
    """Headline figures for a depreciation report."""
    total_assets: int
    total_original_value: Decimal
    total_current_book_value: Decimal
    total_accumulated_depreciation: Decimal
    total_monthly_depreciation: Decimal
    total_annual_depreciation: Decimal
    fully_depreciated_assets: int
    assets_due_for_depreciation: int
    average_asset_age_months: Decimal
    depreciation_rate_percent: Decimal


@dataclass(frozen=True)
class AssetDepreciationDetail:
    id: UUID
    item_code: str
    description: str
    category: str
    purchase_date: datetime | None
    purchase_price: Decimal
    current_book_value: Decimal
    accumulated_depreciation: Decimal
    monthly_depreciation: Decimal
    salvage_value: Decimal
    depreciation_method: DepreciationMethod
    useful_life_months: int
    remaining_life_months: int
    depreciation_rate_percent: Decimal
    is_fully_depreciated: bool
    next_depreciation_date: datetime | None


@dataclass(frozen=True)
class MethodBreakdown:
    method: DepreciationMethod
    asset_count: int
    total_original_value: Decimal
    total_current_value: Decimal
    total_depreciation: Decimal
    average_depreciation_rate_percent: Decimal


@dataclass(frozen=True)
class CategoryBreakdown:
    category: str
    asset_count: int
    total_original_value: Decimal
    total_current_value: Decimal
    total_depreciation: Decimal
    average_asset_age_months: Decimal


@dataclass(frozen=True)
class DepreciationReport:
    report_id: str
    business_unit_id: UUID
    generated_at: datetime
    generated_by: UUID
    period_start: datetime
    period_end: datetime
    summary: ReportSummary
    asset_details: tuple[AssetDepreciationDetail, ...]
    method_breakdown: tuple[MethodBreakdown, ...]
    category_breakdown: tuple[CategoryBreakdown, ...]


@dataclass(frozen=True)
class RecentDepreciationCalculation:
    """A ledger entry written within the dashboard's look-back window."""
    id: UUID
    asset_id: UUID
    asset_code: str
    asset_description: str
    depreciation_amount: Decimal
    calculation_date: datetime
    method: DepreciationMethod


@dataclass(frozen=True)
class UpcomingDepreciationCalculation:
    """An asset whose next run falls within the dashboard's look-ahead window."""
    id: UUID
    asset_code: str
    asset_description: str
    next_calculation_date: datetime
    estimated_depreciation: Decimal


@dataclass(frozen=True)
class DepreciationDashboard:
    summary: ReportSummary
    alerts: tuple[DepreciationAlert, ...]
    recent_calculations: tuple[RecentDepreciationCalculation, ...]
    upcoming_calculations: tuple[UpcomingDepreciationCalculation, ...]
