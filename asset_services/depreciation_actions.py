"""
DepreciationActions -- caller-facing depreciation operations.

Responsibility:
    The surface the UI / server-action layer calls.  Each method checks for
    an acting user, runs the module service or selector, owns the
    transaction boundary, and turns every failure into a structured
    ``{"success": False, "message": ...}`` result.

Architecture position:
    Services layer.  Composes ``asset_modules.depreciation`` (service,
    selector, schedule, reports) and ``asset_batch``.  The only layer that
    calls ``session.commit()``.

Invariants enforced:
    - Commit after a successful run or a salvage-floor repair; roll back
      after any error.
    - Money leaves this layer as ``float`` via ``serialize_for_client``.
    - Query operations (ledger and audit history, summary, due list,
      alerts, dashboard) raise ``UnauthorizedError`` without an actor;
      command operations return
      ``{"success": False, "message": "Unauthorized"}``.

Failure modes:
    - Typed ``AssetKernelError``  -> its message, logged at WARNING.
    - Anything else  -> a generic per-operation message, logged with
      ``exc_info``.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from asset_batch.domain.types import BatchRunStatus
from asset_batch.services.executor import BatchExecutor
from asset_batch.tasks.depreciation_tasks import DUE_DEPRECIATION, default_task_registry
from asset_kernel.domain.clock import Clock, SystemClock
from asset_kernel.domain.dates import start_of_year
from asset_kernel.exceptions import (
    AssetKernelError,
    AssetNotFoundError,
    MissingDepreciationConfigError,
    UnauthorizedError,
)
from asset_kernel.logging_config import LogContext, get_logger
from asset_modules.depreciation.config import DepreciationConfig
from asset_modules.depreciation.models import DepreciationDashboard
from asset_modules.depreciation.reports import build_alerts, build_report, build_summary
from asset_modules.depreciation.schedule import project_schedule
from asset_modules.depreciation.selectors import DepreciationSelector
from asset_modules.depreciation.service import DepreciationService
from asset_services.serialization import serialize_for_client

logger = get_logger("services.depreciation_actions")

UNAUTHORIZED = "Unauthorized"
ZERO = Decimal("0")

# Dashboard look-back / look-ahead window and list length
DASHBOARD_WINDOW_DAYS = 30
DASHBOARD_LIST_LIMIT = 10


def _unauthorized(**extra: Any) -> dict[str, Any]:
    return {"success": False, "message": UNAUTHORIZED, **extra}


class DepreciationActions:
    """
    Transaction-owning entry points for depreciation.

    Contract:
        Every method takes ``actor_id``; ``None`` means no authenticated
        user.  Results are plain dicts and lists of client types.

    Non-goals:
        - Does not resolve roles or permissions; any actor may act.
        - Does not retry failed runs.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: DepreciationConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or DepreciationConfig.with_defaults()
        self._service = DepreciationService(session, clock=self._clock, config=self._config)
        self._selector = DepreciationSelector(session)

    # =========================================================================
    # Single-asset commands
    # =========================================================================

    def calculate_asset_depreciation(
        self,
        asset_id: UUID,
        actor_id: UUID | None,
        units_in_period: int | None = None,
    ) -> dict[str, Any]:
        """Run one depreciation cycle for one asset."""
        if actor_id is None:
            return _unauthorized()

        try:
            outcome = self._service.apply_depreciation(asset_id, actor_id, units_in_period)
            self._session.commit()
        except AssetKernelError as exc:
            self._session.rollback()
            return self._failure("calculate_asset_depreciation", asset_id, exc)
        except Exception:
            self._session.rollback()
            logger.error(
                "depreciation_calculation_failed",
                extra={"asset_id": str(asset_id)},
                exc_info=True,
            )
            return {"success": False, "message": "Failed to calculate depreciation"}

        result: dict[str, Any] = {"success": outcome.success, "message": outcome.message}
        if outcome.calculation is not None:
            result["calculation"] = serialize_for_client(outcome.calculation)
        return result

    def update_asset_units(
        self,
        asset_id: UUID,
        actor_id: UUID | None,
        units_produced: int,
    ) -> dict[str, Any]:
        """Record production units for a units-of-production asset."""
        if actor_id is None:
            return _unauthorized()

        try:
            outcome = self._service.record_units(asset_id, actor_id, units_produced)
            self._session.commit()
        except AssetKernelError as exc:
            self._session.rollback()
            return self._failure("update_asset_units", asset_id, exc)
        except Exception:
            self._session.rollback()
            logger.error(
                "asset_units_update_failed",
                extra={"asset_id": str(asset_id)},
                exc_info=True,
            )
            return {"success": False, "message": "Failed to update asset units"}

        result: dict[str, Any] = {
            "success": True,
            "message": "Asset units updated successfully",
        }
        if outcome is not None and outcome.calculation is not None:
            result["calculation"] = serialize_for_client(outcome.calculation)
        elif outcome is not None and outcome.reason is not None:
            result["reason"] = outcome.reason
        return result

    def initialize_asset_depreciation(
        self,
        asset_id: UUID,
        actor_id: UUID | None,
        start_date: datetime | None = None,
    ) -> dict[str, Any]:
        """Set up an asset's depreciation fields from its purchase data."""
        if actor_id is None:
            return _unauthorized()

        try:
            asset = self._service.initialize_depreciation(asset_id, actor_id, start_date)
            next_date = asset.next_depreciation_date
            monthly = asset.monthly_depreciation
            self._session.commit()
        except AssetKernelError as exc:
            self._session.rollback()
            return self._failure("initialize_asset_depreciation", asset_id, exc)
        except Exception:
            self._session.rollback()
            logger.error(
                "depreciation_initialization_failed",
                extra={"asset_id": str(asset_id)},
                exc_info=True,
            )
            return {"success": False, "message": "Failed to initialize depreciation"}

        return {
            "success": True,
            "message": "Depreciation initialized successfully",
            "next_depreciation_date": next_date,
            "monthly_depreciation": serialize_for_client(monthly),
        }

    # =========================================================================
    # Single-asset queries
    # =========================================================================

    def get_asset_depreciation_history(
        self,
        asset_id: UUID,
        actor_id: UUID | None,
    ) -> list[dict[str, Any]]:
        """Depreciation entries for an asset, newest first."""
        if actor_id is None:
            raise UnauthorizedError("get_asset_depreciation_history")
        return serialize_for_client(self._selector.entries_for_asset(asset_id))

    def get_asset_history(
        self,
        asset_id: UUID,
        actor_id: UUID | None,
    ) -> list[dict[str, Any]]:
        """Audit trail for an asset, oldest first."""
        if actor_id is None:
            raise UnauthorizedError("get_asset_history")
        return serialize_for_client(self._selector.history_for_asset(asset_id))

    def get_depreciation_schedule(
        self,
        asset_id: UUID,
        actor_id: UUID | None,
    ) -> dict[str, Any]:
        """Project the full schedule from the asset's static parameters."""
        if actor_id is None:
            return _unauthorized()

        try:
            asset = self._selector.get_active_asset(asset_id)
            if asset is None:
                raise AssetNotFoundError(str(asset_id))
            missing = [
                name for name, value in (
                    ("purchase_price", asset.purchase_price),
                    ("useful_life_months", asset.useful_life_months),
                )
                if not value
            ]
            if missing:
                raise MissingDepreciationConfigError(str(asset_id), missing)

            start = (
                asset.depreciation_start_date
                or asset.purchase_date
                or self._clock.now()
            )
            schedule = project_schedule(
                asset.to_parameters(),
                start,
                legacy_sum_of_years=self._config.legacy_sum_of_years,
            )
        except AssetKernelError as exc:
            return self._failure("get_depreciation_schedule", asset_id, exc)
        except Exception:
            logger.error(
                "depreciation_schedule_failed",
                extra={"asset_id": str(asset_id)},
                exc_info=True,
            )
            return {"success": False, "message": "Failed to calculate depreciation schedule"}

        return {
            "success": True,
            "message": "Depreciation schedule calculated",
            "schedule": serialize_for_client(schedule),
        }

    # =========================================================================
    # Business-unit queries
    # =========================================================================

    def get_depreciation_summary(
        self,
        business_unit_id: UUID,
        actor_id: UUID | None,
    ) -> dict[str, Any]:
        if actor_id is None:
            raise UnauthorizedError("get_depreciation_summary")
        summary = self._selector.summary(business_unit_id, self._clock.now())
        return serialize_for_client(summary)

    def get_assets_due_for_depreciation(
        self,
        actor_id: UUID | None,
        business_unit_id: UUID | None = None,
    ) -> list[dict[str, Any]]:
        """Active, not fully depreciated assets due now, earliest first."""
        if actor_id is None:
            raise UnauthorizedError("get_assets_due_for_depreciation")
        due = self._selector.due_summaries(self._clock.now(), business_unit_id)
        return serialize_for_client(due)

    def get_depreciation_alerts(
        self,
        business_unit_id: UUID,
        actor_id: UUID | None,
    ) -> list[dict[str, Any]]:
        if actor_id is None:
            raise UnauthorizedError("get_depreciation_alerts")
        assets = self._selector.active_assets(business_unit_id)
        alerts = build_alerts(assets, self._clock.now(), self._config)
        return serialize_for_client(alerts)

    def get_depreciation_dashboard(
        self,
        business_unit_id: UUID,
        actor_id: UUID | None,
    ) -> dict[str, Any]:
        """
        Dashboard view of a business unit.

        The summary covers assets purchased since January 1 of the current
        year.  Recent calculations look back and upcoming ones look ahead
        ``DASHBOARD_WINDOW_DAYS``; each list holds at most
        ``DASHBOARD_LIST_LIMIT`` rows.
        """
        if actor_id is None:
            raise UnauthorizedError("get_depreciation_dashboard")

        now = self._clock.now()
        window = timedelta(days=DASHBOARD_WINDOW_DAYS)
        dashboard = DepreciationDashboard(
            summary=build_summary(
                self._selector.valued_assets(business_unit_id, start_of_year(now), now),
                now,
            ),
            alerts=tuple(build_alerts(
                self._selector.active_assets(business_unit_id), now, self._config,
            )),
            recent_calculations=tuple(self._selector.recent_calculations(
                business_unit_id, now - window, DASHBOARD_LIST_LIMIT,
            )),
            upcoming_calculations=tuple(self._selector.upcoming_calculations(
                business_unit_id, now, now + window, DASHBOARD_LIST_LIMIT,
            )),
        )
        return serialize_for_client(dashboard)

    def generate_depreciation_report(
        self,
        business_unit_id: UUID,
        actor_id: UUID | None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> dict[str, Any]:
        """Report over assets purchased between ``start_date`` and ``end_date``.

        The range defaults to January 1 of the current year through now.
        """
        if actor_id is None:
            return _unauthorized()

        now = self._clock.now()
        period_start = start_date or start_of_year(now)
        period_end = end_date or now
        try:
            assets = self._selector.valued_assets(business_unit_id, period_start, period_end)
            names = self._selector.category_names(
                {a.category_id for a in assets if a.category_id is not None}
            )
            report = build_report(
                business_unit_id, assets, names, actor_id, period_start, period_end, now,
            )
        except Exception:
            logger.error(
                "depreciation_report_failed",
                extra={"business_unit_id": str(business_unit_id)},
                exc_info=True,
            )
            return {"success": False, "message": "Failed to generate depreciation report"}

        return {
            "success": True,
            "message": "Depreciation report generated successfully",
            "report": serialize_for_client(report),
        }

    # =========================================================================
    # Scheduling
    # =========================================================================

    def schedule_depreciation_calculation(
        self,
        business_unit_id: UUID,
        actor_id: UUID | None,
        schedule_date: datetime,
        asset_ids: list[UUID] | None = None,
    ) -> dict[str, Any]:
        """Set the next run date of a business unit's depreciating assets."""
        if actor_id is None:
            return _unauthorized()

        try:
            count = self._service.schedule_depreciation(
                business_unit_id, actor_id, schedule_date, asset_ids,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            logger.error(
                "depreciation_scheduling_failed",
                extra={"business_unit_id": str(business_unit_id)},
                exc_info=True,
            )
            return {"success": False, "message": "Failed to schedule depreciation calculation"}

        return {
            "success": True,
            "message": (
                f"Scheduled depreciation calculation for {count} assets "
                f"on {schedule_date.date().isoformat()}"
            ),
            "scheduled_assets": count,
        }

    # =========================================================================
    # Batch
    # =========================================================================

    def batch_calculate_depreciation(
        self,
        actor_id: UUID | None,
        business_unit_id: UUID | None = None,
        asset_ids: list[UUID] | None = None,
    ) -> dict[str, Any]:
        """
        Depreciate every due asset, one SAVEPOINT per asset.

        Args:
            actor_id: Acting user.
            business_unit_id: Optional scope; falls back to the configured
                ``batch_default_business_unit_id``.
            asset_ids: Explicit asset list instead of the due-date filter.

        Returns:
            ``processed_assets`` counts successful runs.  ``errors`` lists
            every asset that failed or was repaired at the salvage floor.
        """
        if actor_id is None:
            return _unauthorized(processed_assets=0, total_depreciation=0.0)

        scope = business_unit_id or self._config.batch_default_business_unit_id
        parameters: dict[str, Any] = {}
        if scope is not None:
            parameters["business_unit_id"] = scope
        if asset_ids:
            parameters["asset_ids"] = list(asset_ids)

        executor = BatchExecutor(
            self._session,
            default_task_registry(clock=self._clock, config=self._config),
            clock=self._clock,
        )
        with LogContext.bind(actor_id=actor_id):
            try:
                run = executor.run(DUE_DEPRECIATION, actor_id, parameters)
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.error("batch_depreciation_failed", exc_info=True)
                return {
                    "success": False,
                    "message": "Failed to process batch depreciation",
                    "processed_assets": 0,
                    "total_depreciation": 0.0,
                }

        if run.status == BatchRunStatus.FAILED and run.total_items == 0:
            return {
                "success": False,
                "message": "Failed to process batch depreciation",
                "processed_assets": 0,
                "total_depreciation": 0.0,
            }

        total_depreciation = ZERO
        fully_depreciated = 0
        errors = []
        for item in run.item_results:
            data = item.result_data or {}
            if item.error_code is None:
                total_depreciation += data.get("depreciation_amount", ZERO)
                if data.get("is_fully_depreciated"):
                    fully_depreciated += 1
            else:
                errors.append({
                    "asset_id": data.get("asset_id"),
                    "item_code": item.item_key,
                    "code": item.error_code,
                    "error": item.error_message or "Unknown error",
                })

        logger.info(
            "batch_depreciation_completed",
            extra={
                "batch_id": str(run.batch_id),
                "status": run.status.value,
                "processed_assets": run.succeeded,
                "failed_assets": run.failed,
                "skipped_assets": run.skipped,
                "total_depreciation": str(total_depreciation),
            },
        )

        return serialize_for_client({
            "success": True,
            "message": f"Processed {run.succeeded} assets for depreciation",
            "processed_assets": run.succeeded,
            "total_depreciation": total_depreciation,
            "errors": errors,
            "summary": {
                "total_assets": run.total_items,
                "successful_calculations": run.succeeded,
                "failed_calculations": run.failed + run.skipped,
                "total_depreciation_amount": total_depreciation,
                "fully_depreciated_count": fully_depreciated,
            },
        })

    # =========================================================================
    # Internals
    # =========================================================================

    def _failure(self, operation: str, asset_id: UUID, exc: AssetKernelError) -> dict[str, Any]:
        logger.warning(
            "depreciation_action_rejected",
            extra={
                "operation": operation,
                "asset_id": str(asset_id),
                "error_code": exc.code,
                "error": str(exc),
            },
        )
        return {"success": False, "message": str(exc), "code": exc.code}
