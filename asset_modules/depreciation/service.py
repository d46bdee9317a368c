"""
Depreciation Applier (``asset_modules.depreciation.service``).

Responsibility
--------------
Runs one depreciation cycle against one asset: load and lock the asset,
call the Calculator, clamp at salvage, write the ledger entry, update the
asset's running totals and state, and append the audit-trail row.  Also
records production units, initializes an asset's depreciation fields,
and reschedules next runs for a business unit.

Architecture position
---------------------
**Modules layer** -- write-side service.  Flushes inside the caller's
transaction and never commits; ``DepreciationActions`` (single runs) and
``BatchExecutor`` (one SAVEPOINT per asset) own the boundary.

Invariants enforced
-------------------
* ``current_book_value >= salvage_value`` after every run.
* ``accumulated_depreciation == purchase_price - current_book_value``.
* ``next_depreciation_date`` is None once fully depreciated.
* The entry, the asset update and the history row are flushed together
  under a row lock on the asset.

Failure modes
-------------
* ``AssetNotFoundError`` -- missing or inactive asset.
* ``MissingDepreciationConfigError`` -- no purchase price or useful life.
* ``AlreadyFullyDepreciatedError`` -- flag already set; nothing written.
* ``NotUnitsOfProductionError`` -- units recorded on a time-based asset.
* ``InvalidDepreciationParametersError`` -- initialization with a method
  whose parameters are missing.
* ``DepreciationAlreadyStartedError`` -- initialization of an asset that
  already has ledger entries.

Audit relevance
---------------
Every mutation writes an ``assets_history`` row naming the actor, the
previous and new book value, and the amount.  Rescheduling changes no
values and is logged only.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from asset_kernel.db.types import round_money
from asset_kernel.domain.clock import Clock
from asset_kernel.domain.dates import add_months
from asset_kernel.exceptions import (
    AlreadyFullyDepreciatedError,
    AssetNotFoundError,
    DepreciationAlreadyStartedError,
    InvalidDepreciationParametersError,
    MissingDepreciationConfigError,
    NegativeUnitsError,
    NotUnitsOfProductionError,
)
from asset_kernel.logging_config import LogContext, get_logger
from asset_kernel.services.base import BaseService
from asset_modules.depreciation.config import DepreciationConfig
from asset_modules.depreciation.helpers import (
    calculate_depreciation_amount,
    clamp_to_salvage,
    depreciation_per_unit,
    total_years,
    validate_depreciation_parameters,
)
from asset_modules.depreciation.models import (
    AssetHistoryAction,
    AssetStatus,
    DepreciationCalculation,
    DepreciationMethod,
    DepreciationOutcome,
    DepreciationState,
)
from asset_modules.depreciation.orm import (
    AssetHistoryModel,
    AssetModel,
    DepreciationEntryModel,
)
from asset_modules.depreciation.selectors import DepreciationSelector
from asset_modules.depreciation.workflows import next_state

logger = get_logger("modules.depreciation.service")

ZERO = Decimal("0")

SALVAGE_VALUE_REACHED = "salvage_value_reached"


class DepreciationService(BaseService[AssetModel]):
    """
    Depreciation Applier.

    Contract:
        Flush-only.  Raises typed ``AssetError`` subclasses; the caller maps
        them to results and decides whether to commit.

    Guarantees:
        - A successful run writes exactly one entry and one history row.
        - A salvage-floor repair writes one history row and no entry.
        - Amounts are rounded to cents before they touch the asset.

    Non-goals:
        - Does not post to a general ledger.
        - Does not retry.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: DepreciationConfig | None = None,
    ):
        super().__init__(session, clock)
        self.config = config or DepreciationConfig.with_defaults()
        self._selector = DepreciationSelector(session)

    # =========================================================================
    # Apply
    # =========================================================================

    def apply_depreciation(
        self,
        asset_id: UUID,
        actor_id: UUID,
        units_in_period: int | None = None,
    ) -> DepreciationOutcome:
        """
        Run one depreciation cycle for ``asset_id``.

        Args:
            asset_id: Asset to depreciate.
            actor_id: User performing the run; recorded on the entry.
            units_in_period: Units consumed this period (units-of-production).

        Returns:
            ``DepreciationOutcome``; ``success`` is False only for the
            salvage-floor repair.

        Raises:
            AssetNotFoundError, MissingDepreciationConfigError,
            AlreadyFullyDepreciatedError, NegativeUnitsError.
        """
        with LogContext.bind(asset_id=asset_id, actor_id=actor_id):
            asset = self._load_configured_asset(asset_id)

            if asset.is_fully_depreciated:
                logger.info(
                    "asset_depreciation_rejected_fully_depreciated",
                    extra={"asset_id": str(asset_id)},
                )
                raise AlreadyFullyDepreciatedError(str(asset_id))

            if units_in_period is not None and units_in_period < 0:
                raise NegativeUnitsError(str(asset_id), units_in_period)

            now = self.clock.now()
            book = asset.effective_book_value
            salvage = asset.effective_salvage_value

            if book <= salvage:
                self._complete_at_salvage(asset, actor_id, now)
                return DepreciationOutcome(
                    asset_id=asset.id,
                    success=False,
                    message="Asset has reached its salvage value",
                    reason=SALVAGE_VALUE_REACHED,
                )

            period_number = self._selector.count_entries(asset.id) + 1
            method = asset.method
            calculated = calculate_depreciation_amount(
                original_cost=asset.purchase_price,
                salvage_value=salvage,
                method=method,
                useful_life_months=asset.useful_life_months,
                current_book_value=book,
                depreciation_rate=asset.depreciation_rate,
                total_expected_units=asset.total_expected_units,
                units_in_period=units_in_period,
                period_number=period_number,
                legacy_sum_of_years=self.config.legacy_sum_of_years,
            )
            actual = clamp_to_salvage(
                round_money(calculated, self.config.money_decimal_places),
                book,
                salvage,
            )
            new_book = book - actual
            accumulated = (asset.accumulated_depreciation or ZERO) + actual

            state = next_state(DepreciationState.ACTIVE, new_book, salvage)
            is_fully_depreciated = state == DepreciationState.FULLY_DEPRECIATED

            period_start = (
                asset.last_depreciation_date
                or asset.depreciation_start_date
                or asset.purchase_date
                or now
            )
            period_end = now
            next_date = None if is_fully_depreciated else add_months(period_end, 1)

            units_recorded = bool(units_in_period)
            units_start = asset.current_units if units_recorded else None
            units_end = asset.current_units + units_in_period if units_recorded else None

            entry = DepreciationEntryModel(
                id=uuid4(),
                asset_id=asset.id,
                business_unit_id=asset.business_unit_id,
                period_number=period_number,
                depreciation_date=period_end,
                period_start=period_start,
                period_end=period_end,
                book_value_start=book,
                book_value_end=new_book,
                depreciation_amount=actual,
                accumulated_depreciation=accumulated,
                method=method.value,
                calculation_basis={
                    "original_cost": str(asset.purchase_price),
                    "salvage_value": str(salvage),
                    "useful_life_months": asset.useful_life_months,
                    "units_in_period": units_in_period,
                    "period_number": period_number,
                    "calculated_amount": str(calculated),
                },
                units_start=units_start,
                units_end=units_end,
                units_in_period=units_in_period,
                created_by_id=actor_id,
            )
            self.session.add(entry)

            asset.current_book_value = new_book
            asset.accumulated_depreciation = accumulated
            asset.last_depreciation_date = period_end
            asset.next_depreciation_date = next_date
            asset.is_fully_depreciated = is_fully_depreciated
            if units_recorded:
                asset.current_units = units_end
            if is_fully_depreciated:
                asset.status = AssetStatus.FULLY_DEPRECIATED.value
            asset.updated_by_id = actor_id

            self._append_history(
                asset,
                AssetHistoryAction.DEPRECIATION_CALCULATED,
                actor_id,
                now,
                previous_book_value=book,
                new_book_value=new_book,
                amount=actual,
                notes=f"Depreciation calculated: {method.value}",
                details={
                    "method": method.value,
                    "period_start": period_start.isoformat(),
                    "period_end": period_end.isoformat(),
                    "units_in_period": units_in_period,
                },
            )
            self.session.flush()

            logger.info(
                "asset_depreciation_applied",
                extra={
                    "asset_id": str(asset.id),
                    "method": method.value,
                    "period_number": period_number,
                    "previous_book_value": str(book),
                    "depreciation_amount": str(actual),
                    "new_book_value": str(new_book),
                    "is_fully_depreciated": is_fully_depreciated,
                },
            )

            return DepreciationOutcome(
                asset_id=asset.id,
                success=True,
                message="Depreciation calculated successfully",
                calculation=DepreciationCalculation(
                    asset_id=asset.id,
                    entry_id=entry.id,
                    method=method,
                    period_number=period_number,
                    period_start=period_start,
                    period_end=period_end,
                    previous_book_value=book,
                    calculated_amount=calculated,
                    depreciation_amount=actual,
                    new_book_value=new_book,
                    accumulated_depreciation=accumulated,
                    is_fully_depreciated=is_fully_depreciated,
                    next_depreciation_date=next_date,
                    units_in_period=units_in_period,
                ),
            )

    # =========================================================================
    # Units of production
    # =========================================================================

    def record_units(
        self,
        asset_id: UUID,
        actor_id: UUID,
        units_produced: int,
    ) -> DepreciationOutcome | None:
        """
        Record production units and depreciate for them when possible.

        The unit counter moves exactly once: inside ``apply_depreciation``
        when it writes an entry, otherwise here.

        Returns:
            The depreciation outcome if a run was triggered, else None.

        Raises:
            AssetNotFoundError, NotUnitsOfProductionError, NegativeUnitsError,
            and anything ``apply_depreciation`` raises.
        """
        asset = self._selector.get_active_asset(asset_id, for_update=True)
        if asset is None:
            raise AssetNotFoundError(str(asset_id))
        if asset.method != DepreciationMethod.UNITS_OF_PRODUCTION:
            raise NotUnitsOfProductionError(str(asset_id), asset.method.value)
        if units_produced < 0:
            raise NegativeUnitsError(str(asset_id), units_produced)

        previous_units = asset.current_units
        new_units = previous_units + units_produced
        triggers_depreciation = (
            asset.depreciation_per_unit is not None
            and units_produced > 0
            and not asset.is_fully_depreciated
        )

        self._append_history(
            asset,
            AssetHistoryAction.UNITS_UPDATED,
            actor_id,
            self.clock.now(),
            notes=f"Units updated: +{units_produced} (Total: {new_units})",
            details={
                "units_added": units_produced,
                "previous_units": previous_units,
                "new_units": new_units,
            },
        )

        logger.info(
            "asset_units_recorded",
            extra={
                "asset_id": str(asset_id),
                "units_added": units_produced,
                "new_units": new_units,
                "triggers_depreciation": triggers_depreciation,
            },
        )

        if triggers_depreciation:
            outcome = self.apply_depreciation(asset_id, actor_id, units_in_period=units_produced)
            if not outcome.success:
                # Salvage-floor repair writes no entry, so the counter moves here.
                asset.current_units = new_units
                asset.updated_by_id = actor_id
                self.session.flush()
            return outcome

        asset.current_units = new_units
        asset.updated_by_id = actor_id
        self.session.flush()
        return None

    # =========================================================================
    # Initialization
    # =========================================================================

    def initialize_depreciation(
        self,
        asset_id: UUID,
        actor_id: UUID,
        start_date: datetime | None = None,
    ) -> AssetModel:
        """
        Set up an asset's depreciation fields from its purchase data.

        Book value starts at the purchase price, the cached monthly amount
        is the first-period figure, and the first run is due one calendar
        month after ``start_date`` (default: purchase date, else now).

        Only an asset with no ledger entries can be initialized; period
        numbering continues from the existing entries otherwise.

        Raises:
            AssetNotFoundError, DepreciationAlreadyStartedError,
            InvalidDepreciationParametersError.
        """
        asset = self._selector.get_active_asset(asset_id, for_update=True)
        if asset is None:
            raise AssetNotFoundError(str(asset_id))
        entry_count = self._selector.count_entries(asset.id)
        if entry_count:
            raise DepreciationAlreadyStartedError(str(asset_id), entry_count)

        method = self._resolve_method(asset)
        useful_life_months = asset.useful_life_months
        if not useful_life_months and asset.category is not None:
            useful_life_months = asset.category.default_useful_life_months
        problems = validate_depreciation_parameters(
            method=method,
            original_cost=asset.purchase_price,
            useful_life_months=useful_life_months,
            salvage_value=asset.salvage_value,
            depreciation_rate=asset.depreciation_rate,
            total_expected_units=asset.total_expected_units,
        )
        if problems:
            raise InvalidDepreciationParametersError(
                str(asset_id), method.value, "; ".join(problems),
            )

        now = self.clock.now()
        start = start_date or asset.purchase_date or now
        salvage = asset.effective_salvage_value

        asset.depreciation_method = method.value
        asset.useful_life_months = useful_life_months
        asset.current_book_value = asset.purchase_price
        asset.accumulated_depreciation = ZERO
        asset.is_fully_depreciated = False
        asset.depreciation_start_date = start
        asset.last_depreciation_date = None
        asset.next_depreciation_date = add_months(start, 1)
        if asset.useful_life_years is None:
            asset.useful_life_years = total_years(asset.useful_life_months)
        asset.monthly_depreciation = calculate_depreciation_amount(
            original_cost=asset.purchase_price,
            salvage_value=salvage,
            method=method,
            useful_life_months=asset.useful_life_months,
            current_book_value=asset.purchase_price,
            depreciation_rate=asset.depreciation_rate,
            total_expected_units=asset.total_expected_units,
            period_number=1,
            legacy_sum_of_years=self.config.legacy_sum_of_years,
        )
        if method == DepreciationMethod.UNITS_OF_PRODUCTION:
            asset.depreciation_per_unit = depreciation_per_unit(
                asset.purchase_price, salvage, asset.total_expected_units,
            )
        asset.updated_by_id = actor_id

        self._append_history(
            asset,
            AssetHistoryAction.DEPRECIATION_INITIALIZED,
            actor_id,
            now,
            new_book_value=asset.purchase_price,
            notes=f"Depreciation initialized: {method.value}",
            details={
                "method": method.value,
                "start_date": start.isoformat(),
                "monthly_depreciation": str(asset.monthly_depreciation),
            },
        )
        self.session.flush()

        logger.info(
            "asset_depreciation_initialized",
            extra={
                "asset_id": str(asset_id),
                "method": method.value,
                "monthly_depreciation": str(asset.monthly_depreciation),
                "next_depreciation_date": asset.next_depreciation_date.isoformat(),
            },
        )
        return asset

    # =========================================================================
    # Scheduling
    # =========================================================================

    def schedule_depreciation(
        self,
        business_unit_id: UUID,
        actor_id: UUID,
        schedule_date: datetime,
        asset_ids: list[UUID] | None = None,
    ) -> int:
        """
        Move the next run of a business unit's depreciating assets to
        ``schedule_date``.

        Only active, not fully depreciated assets are touched; ``asset_ids``
        narrows the set further.

        Returns:
            Number of assets rescheduled.
        """
        assets = self._selector.schedulable_assets(business_unit_id, asset_ids)
        for asset in assets:
            asset.next_depreciation_date = schedule_date
            asset.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "asset_depreciation_scheduled",
            extra={
                "business_unit_id": str(business_unit_id),
                "schedule_date": schedule_date.isoformat(),
                "asset_count": len(assets),
            },
        )
        return len(assets)

    # =========================================================================
    # Internals
    # =========================================================================

    def _resolve_method(self, asset: AssetModel) -> DepreciationMethod:
        """Asset method, else its category default, else the configured default."""
        if asset.depreciation_method is not None:
            return asset.method
        if asset.category is not None and asset.category.default_depreciation_method:
            return DepreciationMethod(asset.category.default_depreciation_method)
        return DepreciationMethod(self.config.default_depreciation_method)

    def _load_configured_asset(self, asset_id: UUID) -> AssetModel:
        asset = self._selector.get_active_asset(asset_id, for_update=True)
        if asset is None:
            raise AssetNotFoundError(str(asset_id))
        missing = []
        if asset.purchase_price is None:
            missing.append("purchase_price")
        if not asset.useful_life_months:
            missing.append("useful_life_months")
        if missing:
            raise MissingDepreciationConfigError(str(asset_id), missing)
        return asset

    def _complete_at_salvage(self, asset: AssetModel, actor_id: UUID, now: datetime) -> None:
        """Repair an asset whose book value already sits at the floor."""
        book = asset.effective_book_value
        state = next_state(DepreciationState.ACTIVE, book, asset.effective_salvage_value)
        asset.is_fully_depreciated = state == DepreciationState.FULLY_DEPRECIATED
        asset.status = AssetStatus.FULLY_DEPRECIATED.value
        asset.next_depreciation_date = None
        asset.updated_by_id = actor_id
        self._append_history(
            asset,
            AssetHistoryAction.FULLY_DEPRECIATED,
            actor_id,
            now,
            previous_book_value=book,
            new_book_value=book,
            amount=ZERO,
            notes="Asset has reached its salvage value",
            details={"reason": SALVAGE_VALUE_REACHED},
        )
        self.session.flush()
        logger.warning(
            "asset_salvage_floor_repaired",
            extra={
                "asset_id": str(asset.id),
                "book_value": str(book),
                "salvage_value": str(asset.effective_salvage_value),
            },
        )

    def _append_history(
        self,
        asset: AssetModel,
        action: AssetHistoryAction,
        actor_id: UUID,
        performed_at: datetime,
        previous_book_value: Decimal | None = None,
        new_book_value: Decimal | None = None,
        amount: Decimal | None = None,
        notes: str | None = None,
        details: dict | None = None,
    ) -> AssetHistoryModel:
        row = AssetHistoryModel(
            id=uuid4(),
            asset_id=asset.id,
            action=action.value,
            performed_at=performed_at,
            previous_book_value=previous_book_value,
            new_book_value=new_book_value,
            amount=amount,
            notes=notes,
            details=details or {},
            created_by_id=actor_id,
        )
        self.session.add(row)
        return row
