"""
Depreciation reports and alerts.

Pure builders over asset rows fetched by ``DepreciationSelector``.  The
reference time is always passed in; nothing here reads the clock.
"""

from collections import defaultdict
from datetime import datetime, timedelta
from decimal import ROUND_CEILING, Decimal
from uuid import UUID

from asset_kernel.db.types import round_money
from asset_kernel.domain.dates import as_utc
from asset_kernel.logging_config import get_logger
from asset_modules.depreciation.config import DepreciationConfig
from asset_modules.depreciation.models import (
    AlertSeverity,
    AlertType,
    AssetDepreciationDetail,
    CategoryBreakdown,
    DepreciationAlert,
    DepreciationMethod,
    DepreciationReport,
    MethodBreakdown,
    ReportSummary,
)
from asset_modules.depreciation.orm import AssetModel

logger = get_logger("modules.depreciation.reports")

ZERO = Decimal("0")
HUNDRED = Decimal("100")
# Mean Gregorian month, for fractional asset ages
DAYS_PER_MONTH = Decimal("30.44")
UNCATEGORIZED = "Unknown"


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= ZERO:
        return ZERO
    return round_money(part / whole * HUNDRED)


def _age_in_months(purchase_date: datetime | None, as_of: datetime) -> Decimal | None:
    if purchase_date is None:
        return None
    seconds = Decimal(str((as_of - as_utc(purchase_date)).total_seconds()))
    return seconds / Decimal(86400) / DAYS_PER_MONTH


def _average(values: list[Decimal]) -> Decimal:
    if not values:
        return ZERO
    return round_money(sum(values, ZERO) / Decimal(len(values)))


def _is_due(asset: AssetModel, as_of: datetime) -> bool:
    return (
        asset.next_depreciation_date is not None
        and asset.next_depreciation_date <= as_of
    )


# -----------------------------------------------------------------------------
# Report sections
# -----------------------------------------------------------------------------


def build_summary(assets: list[AssetModel], as_of: datetime) -> ReportSummary:
    total_original = sum((a.purchase_price for a in assets), ZERO)
    total_current = sum((a.effective_book_value for a in assets), ZERO)
    total_accumulated = sum((a.accumulated_depreciation or ZERO for a in assets), ZERO)
    total_monthly = sum((a.monthly_depreciation or ZERO for a in assets), ZERO)
    ages = [
        age for age in (_age_in_months(a.purchase_date, as_of) for a in assets)
        if age is not None
    ]
    # Average over every asset in scope, as ages are only missing for
    # assets without a purchase date.
    average_age = (
        round_money(sum(ages, ZERO) / Decimal(len(assets))) if assets else ZERO
    )
    return ReportSummary(
        total_assets=len(assets),
        total_original_value=total_original,
        total_current_book_value=total_current,
        total_accumulated_depreciation=total_accumulated,
        total_monthly_depreciation=total_monthly,
        total_annual_depreciation=total_monthly * 12,
        fully_depreciated_assets=sum(1 for a in assets if a.is_fully_depreciated),
        assets_due_for_depreciation=sum(1 for a in assets if _is_due(a, as_of)),
        average_asset_age_months=average_age,
        depreciation_rate_percent=_percent(total_accumulated, total_original),
    )


def build_asset_details(
    assets: list[AssetModel],
    category_names: dict[UUID, str],
) -> tuple[AssetDepreciationDetail, ...]:
    details = []
    for asset in assets:
        purchase_price = asset.purchase_price
        book = asset.effective_book_value
        salvage = asset.effective_salvage_value
        monthly = asset.monthly_depreciation or ZERO
        accumulated = asset.accumulated_depreciation or ZERO
        useful_life = asset.useful_life_months or 0
        if monthly > ZERO:
            remaining = int(
                ((book - salvage) / monthly).to_integral_value(rounding=ROUND_CEILING)
            )
        else:
            remaining = useful_life
        details.append(AssetDepreciationDetail(
            id=asset.id,
            item_code=asset.item_code,
            description=asset.description,
            category=category_names.get(asset.category_id, UNCATEGORIZED),
            purchase_date=asset.purchase_date,
            purchase_price=purchase_price,
            current_book_value=book,
            accumulated_depreciation=accumulated,
            monthly_depreciation=monthly,
            salvage_value=salvage,
            depreciation_method=asset.method,
            useful_life_months=useful_life,
            remaining_life_months=max(0, remaining),
            depreciation_rate_percent=_percent(accumulated, purchase_price),
            is_fully_depreciated=asset.is_fully_depreciated,
            next_depreciation_date=asset.next_depreciation_date,
        ))
    return tuple(details)


def build_method_breakdown(assets: list[AssetModel]) -> tuple[MethodBreakdown, ...]:
    groups: dict[DepreciationMethod, list[AssetModel]] = defaultdict(list)
    for asset in assets:
        groups[asset.method].append(asset)

    rows = []
    for method in DepreciationMethod:
        members = groups.get(method)
        if not members:
            continue
        original = sum((a.purchase_price for a in members), ZERO)
        depreciation = sum((a.accumulated_depreciation or ZERO for a in members), ZERO)
        rows.append(MethodBreakdown(
            method=method,
            asset_count=len(members),
            total_original_value=original,
            total_current_value=sum((a.effective_book_value for a in members), ZERO),
            total_depreciation=depreciation,
            average_depreciation_rate_percent=_percent(depreciation, original),
        ))
    return tuple(rows)


def build_category_breakdown(
    assets: list[AssetModel],
    category_names: dict[UUID, str],
    as_of: datetime,
) -> tuple[CategoryBreakdown, ...]:
    groups: dict[UUID | None, list[AssetModel]] = defaultdict(list)
    for asset in assets:
        groups[asset.category_id].append(asset)

    rows = []
    for category_id, members in groups.items():
        ages = [
            age for age in (_age_in_months(a.purchase_date, as_of) for a in members)
            if age is not None
        ]
        rows.append(CategoryBreakdown(
            category=category_names.get(category_id, UNCATEGORIZED),
            asset_count=len(members),
            total_original_value=sum((a.purchase_price for a in members), ZERO),
            total_current_value=sum((a.effective_book_value for a in members), ZERO),
            total_depreciation=sum(
                (a.accumulated_depreciation or ZERO for a in members), ZERO,
            ),
            average_asset_age_months=_average(ages),
        ))
    rows.sort(key=lambda row: row.category)
    return tuple(rows)


def build_report(
    business_unit_id: UUID,
    assets: list[AssetModel],
    category_names: dict[UUID, str],
    generated_by: UUID,
    period_start: datetime,
    period_end: datetime,
    as_of: datetime,
) -> DepreciationReport:
    """Assemble a full depreciation report for assets already in scope."""
    report = DepreciationReport(
        report_id=f"DEP-{as_of.strftime('%Y%m%d%H%M%S')}",
        business_unit_id=business_unit_id,
        generated_at=as_of,
        generated_by=generated_by,
        period_start=period_start,
        period_end=period_end,
        summary=build_summary(assets, as_of),
        asset_details=build_asset_details(assets, category_names),
        method_breakdown=build_method_breakdown(assets),
        category_breakdown=build_category_breakdown(assets, category_names, as_of),
    )
    logger.info(
        "depreciation_report_built",
        extra={
            "report_id": report.report_id,
            "business_unit_id": str(business_unit_id),
            "asset_count": len(assets),
        },
    )
    return report


# -----------------------------------------------------------------------------
# Alerts
# -----------------------------------------------------------------------------


def build_alerts(
    assets: list[AssetModel],
    as_of: datetime,
    config: DepreciationConfig,
) -> list[DepreciationAlert]:
    """
    Alerts over a business unit's active assets, most severe first.

    - DUE_FOR_CALCULATION (HIGH): due and not fully depreciated.
    - FULLY_DEPRECIATED (MEDIUM): last run within ``alert_recent_days``.
    - HIGH_DEPRECIATION (LOW): accumulated depreciation above the configured
      share of the depreciable base, for configured assets still depreciating.
    """
    alerts: list[DepreciationAlert] = []
    recent_cutoff = as_of - timedelta(days=config.alert_recent_days)
    threshold = config.high_depreciation_threshold_percent

    for asset in assets:
        if not asset.is_fully_depreciated and _is_due(asset, as_of):
            alerts.append(DepreciationAlert(
                id=f"due-{asset.id}",
                type=AlertType.DUE_FOR_CALCULATION,
                severity=AlertSeverity.HIGH,
                title="Depreciation Calculation Due",
                message=f"Asset {asset.item_code} requires depreciation calculation",
                asset_id=asset.id,
                asset_code=asset.item_code,
                asset_description=asset.description,
                due_date=asset.next_depreciation_date,
                created_at=as_of,
            ))

        if (
            asset.is_fully_depreciated
            and asset.last_depreciation_date is not None
            and asset.last_depreciation_date >= recent_cutoff
        ):
            alerts.append(DepreciationAlert(
                id=f"fully-{asset.id}",
                type=AlertType.FULLY_DEPRECIATED,
                severity=AlertSeverity.MEDIUM,
                title="Asset Fully Depreciated",
                message=f"Asset {asset.item_code} has reached its salvage value",
                asset_id=asset.id,
                asset_code=asset.item_code,
                asset_description=asset.description,
                due_date=asset.last_depreciation_date,
                created_at=as_of,
            ))

        if (
            not asset.is_fully_depreciated
            and asset.purchase_price is not None
            and asset.useful_life_months
        ):
            depreciable = asset.purchase_price - asset.effective_salvage_value
            if depreciable > ZERO:
                rate = (asset.accumulated_depreciation or ZERO) / depreciable * HUNDRED
                if rate > threshold:
                    alerts.append(DepreciationAlert(
                        id=f"high-dep-{asset.id}",
                        type=AlertType.HIGH_DEPRECIATION,
                        severity=AlertSeverity.LOW,
                        title="High Depreciation Rate",
                        message=(
                            f"Asset {asset.item_code} is "
                            f"{round_money(rate, 1)}% depreciated"
                        ),
                        asset_id=asset.id,
                        asset_code=asset.item_code,
                        asset_description=asset.description,
                        due_date=None,
                        created_at=as_of,
                    ))

    # Stable sort keeps per-asset order within a severity.
    alerts.sort(key=lambda alert: alert.severity.rank, reverse=True)
    return alerts
