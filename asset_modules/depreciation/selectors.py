"""
DepreciationSelector -- read side of the depreciation module.

Every query the Applier, the Batch Runner, the actions layer and the report
builders need against assets and the depreciation ledger.  No method here
adds, deletes, flushes or commits.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from asset_kernel.logging_config import get_logger
from asset_kernel.selectors.base import BaseSelector
from asset_modules.depreciation.models import (
    AssetDueSummary,
    AssetHistoryEntry,
    DepreciationEntry,
    DepreciationMethod,
    DepreciationSummary,
    RecentDepreciationCalculation,
    UpcomingDepreciationCalculation,
)
from asset_modules.depreciation.orm import (
    AssetCategoryModel,
    AssetHistoryModel,
    AssetModel,
    DepreciationEntryModel,
)

logger = get_logger("modules.depreciation.selectors")

ZERO = Decimal("0")


class DepreciationSelector(BaseSelector[AssetModel]):
    """
    Queries over assets, depreciation entries and asset history.

    Contract:
        The caller owns the session.  Methods that hand back ``AssetModel``
        instances do so only for write-side callers that go on to mutate
        them in the same transaction; everything else returns DTOs.
    """

    # -------------------------------------------------------------------------
    # Single asset
    # -------------------------------------------------------------------------

    def get_active_asset(self, asset_id: UUID, for_update: bool = False) -> AssetModel | None:
        """Load an active asset, optionally taking a row lock.

        ``SELECT ... FOR UPDATE`` serializes concurrent depreciation runs on
        PostgreSQL.  SQLite ignores the clause; its database-level write
        lock gives the same effect.
        """
        stmt = select(AssetModel).where(
            AssetModel.id == asset_id,
            AssetModel.is_active.is_(True),
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.scalars(stmt).one_or_none()

    def count_entries(self, asset_id: UUID) -> int:
        """Number of depreciation entries already recorded for an asset."""
        stmt = select(func.count(DepreciationEntryModel.id)).where(
            DepreciationEntryModel.asset_id == asset_id,
        )
        return self.session.scalar(stmt) or 0

    def entries_for_asset(self, asset_id: UUID) -> list[DepreciationEntry]:
        """Depreciation ledger for an asset, newest first."""
        stmt = (
            select(DepreciationEntryModel)
            .where(DepreciationEntryModel.asset_id == asset_id)
            .order_by(
                DepreciationEntryModel.depreciation_date.desc(),
                DepreciationEntryModel.period_number.desc(),
            )
        )
        return [row.to_dto() for row in self.session.scalars(stmt)]

    def history_for_asset(self, asset_id: UUID) -> list[AssetHistoryEntry]:
        """Audit trail for an asset, oldest first."""
        stmt = (
            select(AssetHistoryModel)
            .where(AssetHistoryModel.asset_id == asset_id)
            .order_by(AssetHistoryModel.performed_at, AssetHistoryModel.created_at)
        )
        return [row.to_dto() for row in self.session.scalars(stmt)]

    # -------------------------------------------------------------------------
    # Asset sets
    # -------------------------------------------------------------------------

    def due_for_depreciation(
        self,
        as_of: datetime,
        business_unit_id: UUID | None = None,
        require_configuration: bool = False,
        asset_ids: list[UUID] | None = None,
    ) -> list[AssetModel]:
        """
        Active, not fully depreciated assets due on or before ``as_of``.

        Args:
            as_of: Cutoff for ``next_depreciation_date``.  Ignored when
                ``asset_ids`` is given.
            business_unit_id: Optional scope.
            require_configuration: Also require purchase price and useful
                life, which is what the batch needs before it can run.
            asset_ids: Explicit asset list instead of the due-date filter.

        Returns:
            Assets ordered by next depreciation date, then item code.
        """
        stmt = select(AssetModel).where(
            AssetModel.is_active.is_(True),
            AssetModel.is_fully_depreciated.is_(False),
        )
        if asset_ids:
            stmt = stmt.where(AssetModel.id.in_(asset_ids))
        else:
            stmt = stmt.where(
                AssetModel.next_depreciation_date.is_not(None),
                AssetModel.next_depreciation_date <= as_of,
            )
        if business_unit_id is not None:
            stmt = stmt.where(AssetModel.business_unit_id == business_unit_id)
        if require_configuration:
            stmt = stmt.where(
                AssetModel.purchase_price.is_not(None),
                AssetModel.useful_life_months.is_not(None),
            )
        stmt = stmt.order_by(AssetModel.next_depreciation_date, AssetModel.item_code)
        return list(self.session.scalars(stmt))

    def due_summaries(
        self,
        as_of: datetime,
        business_unit_id: UUID | None = None,
    ) -> list[AssetDueSummary]:
        return [
            asset.to_due_summary()
            for asset in self.due_for_depreciation(as_of, business_unit_id)
        ]

    def valued_assets(
        self,
        business_unit_id: UUID,
        purchased_from: datetime | None = None,
        purchased_to: datetime | None = None,
    ) -> list[AssetModel]:
        """Active assets with a purchase price, optionally by purchase date range.

        Ordered by purchase price, highest first.
        """
        stmt = select(AssetModel).where(
            AssetModel.business_unit_id == business_unit_id,
            AssetModel.is_active.is_(True),
            AssetModel.purchase_price.is_not(None),
        )
        if purchased_from is not None:
            stmt = stmt.where(AssetModel.purchase_date >= purchased_from)
        if purchased_to is not None:
            stmt = stmt.where(AssetModel.purchase_date <= purchased_to)
        stmt = stmt.order_by(AssetModel.purchase_price.desc(), AssetModel.item_code)
        return list(self.session.scalars(stmt))

    def active_assets(self, business_unit_id: UUID) -> list[AssetModel]:
        stmt = (
            select(AssetModel)
            .where(
                AssetModel.business_unit_id == business_unit_id,
                AssetModel.is_active.is_(True),
            )
            .order_by(AssetModel.item_code)
        )
        return list(self.session.scalars(stmt))

    def schedulable_assets(
        self,
        business_unit_id: UUID,
        asset_ids: list[UUID] | None = None,
    ) -> list[AssetModel]:
        """Active, not fully depreciated assets of a business unit."""
        stmt = select(AssetModel).where(
            AssetModel.business_unit_id == business_unit_id,
            AssetModel.is_active.is_(True),
            AssetModel.is_fully_depreciated.is_(False),
        )
        if asset_ids:
            stmt = stmt.where(AssetModel.id.in_(asset_ids))
        return list(self.session.scalars(stmt.order_by(AssetModel.item_code)))

    def category_names(self, category_ids: set[UUID]) -> dict[UUID, str]:
        if not category_ids:
            return {}
        stmt = select(AssetCategoryModel.id, AssetCategoryModel.name).where(
            AssetCategoryModel.id.in_(category_ids),
        )
        return {row.id: row.name for row in self.session.execute(stmt)}

    # -------------------------------------------------------------------------
    # Dashboard
    # -------------------------------------------------------------------------

    def recent_calculations(
        self,
        business_unit_id: UUID,
        since: datetime,
        limit: int,
    ) -> list[RecentDepreciationCalculation]:
        """Entries dated on or after ``since``, newest first."""
        stmt = (
            select(DepreciationEntryModel, AssetModel)
            .join(AssetModel, DepreciationEntryModel.asset_id == AssetModel.id)
            .where(
                DepreciationEntryModel.business_unit_id == business_unit_id,
                DepreciationEntryModel.depreciation_date >= since,
            )
            .order_by(
                DepreciationEntryModel.depreciation_date.desc(),
                DepreciationEntryModel.period_number.desc(),
            )
            .limit(limit)
        )
        return [
            RecentDepreciationCalculation(
                id=entry.id,
                asset_id=asset.id,
                asset_code=asset.item_code,
                asset_description=asset.description,
                depreciation_amount=entry.depreciation_amount,
                calculation_date=entry.depreciation_date,
                method=DepreciationMethod(entry.method),
            )
            for entry, asset in self.session.execute(stmt)
        ]

    def upcoming_calculations(
        self,
        business_unit_id: UUID,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> list[UpcomingDepreciationCalculation]:
        """Depreciating assets next due between ``start`` and ``end``, soonest first.

        The estimate is the cached monthly amount, zero when none is set.
        """
        stmt = (
            select(AssetModel)
            .where(
                AssetModel.business_unit_id == business_unit_id,
                AssetModel.is_active.is_(True),
                AssetModel.is_fully_depreciated.is_(False),
                AssetModel.next_depreciation_date >= start,
                AssetModel.next_depreciation_date <= end,
            )
            .order_by(AssetModel.next_depreciation_date, AssetModel.item_code)
            .limit(limit)
        )
        return [
            UpcomingDepreciationCalculation(
                id=asset.id,
                asset_code=asset.item_code,
                asset_description=asset.description,
                next_calculation_date=asset.next_depreciation_date,
                estimated_depreciation=asset.monthly_depreciation or ZERO,
            )
            for asset in self.session.scalars(stmt)
        ]

    # -------------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------------

    def summary(self, business_unit_id: UUID, as_of: datetime) -> DepreciationSummary:
        """
        Business-unit totals over active assets that have a purchase price.

        Current value falls back to purchase price for assets that have
        never been depreciated.
        """
        assets = self.valued_assets(business_unit_id)
        total_original = sum((a.purchase_price for a in assets), ZERO)
        total_current = sum((a.effective_book_value for a in assets), ZERO)
        total_depreciation = sum((a.accumulated_depreciation or ZERO for a in assets), ZERO)
        fully = sum(1 for a in assets if a.is_fully_depreciated)
        due = sum(
            1 for a in assets
            if a.next_depreciation_date is not None and a.next_depreciation_date <= as_of
        )

        logger.debug(
            "depreciation_summary_computed",
            extra={
                "business_unit_id": str(business_unit_id),
                "total_assets": len(assets),
            },
        )
        return DepreciationSummary(
            total_assets=len(assets),
            total_original_value=total_original,
            total_current_value=total_current,
            total_depreciation=total_depreciation,
            fully_depreciated_assets=fully,
            assets_due_for_depreciation=due,
        )
