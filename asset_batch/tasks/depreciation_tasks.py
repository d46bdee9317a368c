"""
Batch task: monthly depreciation sweep over every asset that is due.

Wraps ``DepreciationService.apply_depreciation`` for one asset per item.
Items are prepared from active, not fully depreciated assets whose next
depreciation date has passed and that carry a purchase price and a useful
life.  A run can be narrowed to one business unit or to an explicit list
of asset ids.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from asset_batch.domain.types import BatchItemStatus
from asset_batch.tasks.base import BatchItemInput, BatchTaskResult, TaskRegistry
from asset_kernel.domain.clock import Clock
from asset_kernel.exceptions import AssetKernelError
from asset_kernel.logging_config import get_logger
from asset_modules.depreciation.config import DepreciationConfig
from asset_modules.depreciation.selectors import DepreciationSelector
from asset_modules.depreciation.service import DepreciationService

logger = get_logger("batch.tasks.depreciation")

DUE_DEPRECIATION = "assets.due_depreciation"


def _as_uuid(value: Any) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    return UUID(str(value))


class DueDepreciationTask:
    """Batch task running one depreciation cycle per due asset.

    Parameters understood:
        actor_id: User the entries are recorded against (required).
        business_unit_id: Optional scope.
        asset_ids: Optional explicit asset list; bypasses the due-date filter.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        config: DepreciationConfig | None = None,
    ):
        self._clock = clock
        self._config = config

    @property
    def task_type(self) -> str:
        return DUE_DEPRECIATION

    @property
    def description(self) -> str:
        return "Depreciation calculation for every asset due as of the run date"

    def prepare_items(
        self,
        parameters: dict[str, Any],
        session: Session,
        as_of: datetime,
    ) -> tuple[BatchItemInput, ...]:
        asset_ids = [_as_uuid(a) for a in parameters.get("asset_ids") or ()]
        assets = DepreciationSelector(session).due_for_depreciation(
            as_of,
            business_unit_id=_as_uuid(parameters.get("business_unit_id")),
            require_configuration=True,
            asset_ids=asset_ids or None,
        )
        logger.info(
            "due_depreciation_items_prepared",
            extra={"item_count": len(assets), "as_of": as_of.isoformat()},
        )
        return tuple(
            BatchItemInput(
                item_index=i,
                item_key=asset.item_code,
                payload={"asset_id": asset.id, "item_code": asset.item_code},
            )
            for i, asset in enumerate(assets)
        )

    def execute_item(
        self,
        item: BatchItemInput,
        parameters: dict[str, Any],
        session: Session,
        as_of: datetime,
    ) -> BatchTaskResult:
        asset_id = item.payload["asset_id"]
        identity = {"asset_id": asset_id, "item_code": item.payload["item_code"]}
        service = DepreciationService(session, clock=self._clock, config=self._config)
        try:
            outcome = service.apply_depreciation(
                asset_id, _as_uuid(parameters["actor_id"]),
            )
        except AssetKernelError as exc:
            return BatchTaskResult(
                status=BatchItemStatus.FAILED,
                result_data=identity,
                error_code=exc.code,
                error_message=str(exc),
            )

        if not outcome.success:
            return BatchTaskResult(
                status=BatchItemStatus.SKIPPED,
                result_data={**identity, "reason": outcome.reason},
                error_code=outcome.reason,
                error_message=outcome.message,
            )

        calculation = outcome.calculation
        return BatchTaskResult(
            status=BatchItemStatus.SUCCEEDED,
            result_data={
                **identity,
                "depreciation_amount": calculation.depreciation_amount,
                "new_book_value": calculation.new_book_value,
                "is_fully_depreciated": calculation.is_fully_depreciated,
            },
        )


def default_task_registry(
    clock: Clock | None = None,
    config: DepreciationConfig | None = None,
) -> TaskRegistry:
    """Registry holding the depreciation sweep."""
    registry = TaskRegistry()
    registry.register(DueDepreciationTask(clock=clock, config=config))
    return registry
