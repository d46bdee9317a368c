"""
Depreciation ORM Models (``asset_modules.depreciation.orm``).

Responsibility
--------------
SQLAlchemy persistence for asset categories, assets (their depreciation
fields), the append-only depreciation ledger, and the append-only asset
history.  Maps the frozen dataclasses in ``models.py`` to tables.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``asset_kernel.db.base``
and sibling ``models.py``.  MUST NOT be imported by ``asset_kernel`` except
through the inline imports in ``asset_kernel.db.immutability``.

Invariants enforced
-------------------
* ``(asset_id, period_number)`` is unique on the ledger, so two concurrent
  runs against one asset cannot both record the same period.
* Ledger and history rows are insert-only (see ``db/immutability.py``).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from asset_kernel.db.base import TrackedBase

ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# AssetCategoryModel
# ---------------------------------------------------------------------------

class AssetCategoryModel(TrackedBase):
    """
    ORM model for an asset category.

    Table: ``assets_categories``
    """

    __tablename__ = "assets_categories"

    code: Mapped[str] = mapped_column(String(50))
    name: Mapped[str] = mapped_column(String(200))
    default_useful_life_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    default_depreciation_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True,
    )

    assets: Mapped[list["AssetModel"]] = relationship(back_populates="category")

    __table_args__ = (
        UniqueConstraint("code", name="uq_assets_categories_code"),
    )

    def __repr__(self) -> str:
        return (
            f"<AssetCategoryModel(id={self.id!r}, code={self.code!r}, "
            f"name={self.name!r})>"
        )


# ---------------------------------------------------------------------------
# AssetModel
# ---------------------------------------------------------------------------

class AssetModel(TrackedBase):
    """
    ORM model for an asset's identity and depreciation state.

    Table: ``assets_assets``

    Nullable depreciation fields mirror how assets are captured: an asset
    can exist before anyone has entered its cost or life, and the batch
    simply skips it until they do.
    """

    __tablename__ = "assets_assets"

    business_unit_id: Mapped[UUID]
    item_code: Mapped[str] = mapped_column(String(100))
    description: Mapped[str] = mapped_column(String(500))
    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("assets_categories.id"), nullable=True,
    )

    purchase_date: Mapped[datetime | None]
    purchase_price: Mapped[Decimal | None]
    salvage_value: Mapped[Decimal | None]

    depreciation_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    useful_life_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    useful_life_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    depreciation_rate: Mapped[Decimal | None] = mapped_column(Numeric(38, 18), nullable=True)
    total_expected_units: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_units: Mapped[int] = mapped_column(Integer, default=0)
    depreciation_per_unit: Mapped[Decimal | None] = mapped_column(Numeric(38, 18), nullable=True)
    monthly_depreciation: Mapped[Decimal | None]

    depreciation_start_date: Mapped[datetime | None]
    last_depreciation_date: Mapped[datetime | None]
    next_depreciation_date: Mapped[datetime | None]

    current_book_value: Mapped[Decimal | None]
    accumulated_depreciation: Mapped[Decimal] = mapped_column(default=ZERO)
    is_fully_depreciated: Mapped[bool] = mapped_column(Boolean, default=False)

    status: Mapped[str] = mapped_column(String(50), default="available")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    category: Mapped["AssetCategoryModel"] = relationship(back_populates="assets")
    depreciation_entries: Mapped[list["DepreciationEntryModel"]] = relationship(
        back_populates="asset",
        order_by="DepreciationEntryModel.period_number",
    )

    __table_args__ = (
        UniqueConstraint("item_code", name="uq_assets_assets_item_code"),
        Index("idx_assets_assets_business_unit_id", "business_unit_id"),
        Index("idx_assets_assets_category_id", "category_id"),
        Index("idx_assets_assets_next_depreciation_date", "next_depreciation_date"),
        Index("idx_assets_assets_status", "status"),
    )

    @property
    def method(self):
        """Depreciation method as an enum; unset means straight-line."""
        from asset_modules.depreciation.models import DepreciationMethod
        if self.depreciation_method is None:
            return DepreciationMethod.STRAIGHT_LINE
        return DepreciationMethod(self.depreciation_method)

    @property
    def effective_salvage_value(self) -> Decimal:
        return self.salvage_value if self.salvage_value is not None else ZERO

    @property
    def effective_book_value(self) -> Decimal:
        """Book value, falling back to cost for assets never depreciated."""
        if self.current_book_value is not None:
            return self.current_book_value
        return self.purchase_price if self.purchase_price is not None else ZERO

    def to_parameters(self):
        from asset_modules.depreciation.models import DepreciationParameters
        return DepreciationParameters(
            original_cost=self.purchase_price,
            useful_life_months=self.useful_life_months or 0,
            method=self.method,
            salvage_value=self.effective_salvage_value,
            depreciation_rate=self.depreciation_rate,
            total_expected_units=self.total_expected_units,
        )

    def to_due_summary(self):
        from asset_modules.depreciation.models import AssetDueSummary
        return AssetDueSummary(
            id=self.id,
            item_code=self.item_code,
            description=self.description,
            current_book_value=self.current_book_value,
            next_depreciation_date=self.next_depreciation_date,
            monthly_depreciation=self.monthly_depreciation,
        )

    def __repr__(self) -> str:
        return (
            f"<AssetModel(id={self.id!r}, item_code={self.item_code!r}, "
            f"book_value={self.current_book_value!r})>"
        )


# ---------------------------------------------------------------------------
# DepreciationEntryModel
# ---------------------------------------------------------------------------

class DepreciationEntryModel(TrackedBase):
    """
    ORM model for one depreciation run against one asset.

    Table: ``assets_depreciation_entries``

    ``created_by_id`` is the acting user.  Amounts in ``calculation_basis``
    are stored as strings so that JSON never sees a float.
    """

    __tablename__ = "assets_depreciation_entries"

    asset_id: Mapped[UUID] = mapped_column(ForeignKey("assets_assets.id"))
    business_unit_id: Mapped[UUID]
    period_number: Mapped[int] = mapped_column(Integer)
    depreciation_date: Mapped[datetime]
    period_start: Mapped[datetime]
    period_end: Mapped[datetime]
    book_value_start: Mapped[Decimal]
    book_value_end: Mapped[Decimal]
    depreciation_amount: Mapped[Decimal]
    accumulated_depreciation: Mapped[Decimal]
    method: Mapped[str] = mapped_column(String(50))
    calculation_basis: Mapped[dict] = mapped_column(JSON, default=dict)
    units_start: Mapped[int | None] = mapped_column(Integer, nullable=True)
    units_end: Mapped[int | None] = mapped_column(Integer, nullable=True)
    units_in_period: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    asset: Mapped["AssetModel"] = relationship(back_populates="depreciation_entries")

    __table_args__ = (
        UniqueConstraint(
            "asset_id", "period_number",
            name="uq_assets_depreciation_entries_asset_period",
        ),
        Index("idx_assets_depreciation_entries_asset_id", "asset_id"),
        Index("idx_assets_depreciation_entries_business_unit_id", "business_unit_id"),
        Index("idx_assets_depreciation_entries_depreciation_date", "depreciation_date"),
    )

    def to_dto(self):
        from asset_modules.depreciation.models import DepreciationEntry, DepreciationMethod
        return DepreciationEntry(
            id=self.id,
            asset_id=self.asset_id,
            business_unit_id=self.business_unit_id,
            depreciation_date=self.depreciation_date,
            period_start=self.period_start,
            period_end=self.period_end,
            book_value_start=self.book_value_start,
            book_value_end=self.book_value_end,
            depreciation_amount=self.depreciation_amount,
            accumulated_depreciation=self.accumulated_depreciation,
            method=DepreciationMethod(self.method),
            calculated_by=self.created_by_id,
            calculation_basis=dict(self.calculation_basis or {}),
            units_start=self.units_start,
            units_end=self.units_end,
            units_in_period=self.units_in_period,
            notes=self.notes,
        )

    def __repr__(self) -> str:
        return (
            f"<DepreciationEntryModel(asset_id={self.asset_id!r}, "
            f"period={self.period_number}, amount={self.depreciation_amount!r})>"
        )


# ---------------------------------------------------------------------------
# AssetHistoryModel
# ---------------------------------------------------------------------------

class AssetHistoryModel(TrackedBase):
    """
    ORM model for the asset audit trail.

    Table: ``assets_history``
    """

    __tablename__ = "assets_history"

    asset_id: Mapped[UUID] = mapped_column(ForeignKey("assets_assets.id"))
    action: Mapped[str] = mapped_column(String(50))
    performed_at: Mapped[datetime]
    previous_book_value: Mapped[Decimal | None]
    new_book_value: Mapped[Decimal | None]
    amount: Mapped[Decimal | None]
    notes: Mapped[str | None] = mapped_column(String(4000), nullable=True)
    details: Mapped[dict] = mapped_column(JSON, default=dict)

    __table_args__ = (
        Index("idx_assets_history_asset_id", "asset_id"),
        Index("idx_assets_history_action", "action"),
    )

    def to_dto(self):
        from asset_modules.depreciation.models import AssetHistoryAction, AssetHistoryEntry
        return AssetHistoryEntry(
            id=self.id,
            asset_id=self.asset_id,
            action=AssetHistoryAction(self.action),
            performed_by_id=self.created_by_id,
            performed_at=self.performed_at,
            previous_book_value=self.previous_book_value,
            new_book_value=self.new_book_value,
            amount=self.amount,
            notes=self.notes,
            details=dict(self.details or {}),
        )

    def __repr__(self) -> str:
        return (
            f"<AssetHistoryModel(asset_id={self.asset_id!r}, action={self.action!r})>"
        )
