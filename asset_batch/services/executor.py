"""
BatchExecutor -- SAVEPOINT-per-item batch execution engine.

Contract:
    ``run()`` resolves a registered task, prepares its items, and executes
    each one inside its own SAVEPOINT.

Architecture: asset_batch/services.  Imports from asset_batch.domain,
    asset_batch.tasks, and the kernel clock and logging.

Invariants enforced:
    - SAVEPOINT isolation per item: one failure never aborts the batch.
    - SUCCEEDED and SKIPPED items keep their writes; FAILED items and
      unhandled exceptions roll theirs back.
    - All timestamps come from the injected Clock.
    - Never commits; the caller owns the outer transaction.
"""

from __future__ import annotations

import time
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from asset_batch.domain.types import (
    BatchItemResult,
    BatchItemStatus,
    BatchRunResult,
    BatchRunStatus,
)
from asset_batch.tasks.base import TaskRegistry
from asset_kernel.domain.clock import Clock, SystemClock
from asset_kernel.logging_config import LogContext, get_logger

logger = get_logger("batch.executor")

UNHANDLED_EXCEPTION = "UNHANDLED_EXCEPTION"


class BatchExecutor:
    """Batch execution engine with SAVEPOINT-per-item isolation.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT persist run records or retry failed items.
    """

    def __init__(
        self,
        session: Session,
        task_registry: TaskRegistry,
        clock: Clock | None = None,
    ):
        self._session = session
        self._task_registry = task_registry
        self._clock = clock or SystemClock()

    def run(
        self,
        task_type: str,
        actor_id: UUID,
        parameters: dict[str, Any] | None = None,
    ) -> BatchRunResult:
        """Execute every prepared item of ``task_type``.

        ``actor_id`` is passed to the task alongside ``parameters``.

        Raises:
            TaskNotRegisteredError: If task_type is not in the registry.
        """
        task = self._task_registry.get(task_type)
        batch_id = uuid4()
        params = {**(parameters or {}), "actor_id": actor_id}
        start_time = time.monotonic()
        started_at = self._clock.now()

        with LogContext.bind(batch_id=batch_id, actor_id=actor_id):
            logger.info(
                "batch_run_started",
                extra={"task_type": task_type, "started_at": started_at.isoformat()},
            )

            try:
                items = task.prepare_items(
                    parameters=params,
                    session=self._session,
                    as_of=started_at,
                )
            except Exception as exc:
                logger.exception(
                    "batch_prepare_failed",
                    extra={"task_type": task_type, "error": str(exc)},
                )
                return BatchRunResult(
                    batch_id=batch_id,
                    task_type=task_type,
                    status=BatchRunStatus.FAILED,
                    total_items=0,
                    succeeded=0,
                    failed=0,
                    skipped=0,
                    started_at=started_at,
                    completed_at=self._clock.now(),
                    duration_ms=int((time.monotonic() - start_time) * 1000),
                    error_summary=f"prepare_items failed: {exc}",
                )

            succeeded = 0
            failed = 0
            skipped = 0
            item_results: list[BatchItemResult] = []

            for batch_item in items:
                item_start = time.monotonic()
                item_started_at = self._clock.now()

                savepoint = self._session.begin_nested()
                try:
                    result = task.execute_item(
                        item=batch_item,
                        parameters=params,
                        session=self._session,
                        as_of=started_at,
                    )
                    if result.status == BatchItemStatus.SUCCEEDED:
                        savepoint.commit()
                        succeeded += 1
                    elif result.status == BatchItemStatus.SKIPPED:
                        # Skipped items may still carry a repair write
                        savepoint.commit()
                        skipped += 1
                    else:
                        savepoint.rollback()
                        failed += 1
                        logger.warning(
                            "batch_item_failed",
                            extra={
                                "item_key": batch_item.item_key,
                                "error_code": result.error_code,
                                "error": result.error_message,
                            },
                        )
                    item_result = BatchItemResult(
                        item_index=batch_item.item_index,
                        item_key=batch_item.item_key,
                        status=result.status,
                        error_code=result.error_code,
                        error_message=result.error_message,
                        result_data=result.result_data,
                        duration_ms=int((time.monotonic() - item_start) * 1000),
                        started_at=item_started_at,
                        completed_at=self._clock.now(),
                    )

                except Exception as exc:
                    savepoint.rollback()
                    failed += 1
                    logger.exception(
                        "batch_item_unhandled_exception",
                        extra={"item_key": batch_item.item_key, "error": str(exc)},
                    )
                    item_result = BatchItemResult(
                        item_index=batch_item.item_index,
                        item_key=batch_item.item_key,
                        status=BatchItemStatus.FAILED,
                        error_code=UNHANDLED_EXCEPTION,
                        error_message=str(exc),
                        result_data=dict(batch_item.payload),
                        duration_ms=int((time.monotonic() - item_start) * 1000),
                        started_at=item_started_at,
                        completed_at=self._clock.now(),
                    )

                item_results.append(item_result)

            if failed == 0:
                status = BatchRunStatus.COMPLETED
            elif succeeded == 0 and skipped == 0:
                status = BatchRunStatus.FAILED
            else:
                status = BatchRunStatus.PARTIALLY_COMPLETED

            total_duration = int((time.monotonic() - start_time) * 1000)
            logger.info(
                "batch_run_completed",
                extra={
                    "task_type": task_type,
                    "status": status.value,
                    "total_items": len(items),
                    "succeeded": succeeded,
                    "failed": failed,
                    "skipped": skipped,
                    "duration_ms": total_duration,
                },
            )

            return BatchRunResult(
                batch_id=batch_id,
                task_type=task_type,
                status=status,
                total_items=len(items),
                succeeded=succeeded,
                failed=failed,
                skipped=skipped,
                item_results=tuple(item_results),
                started_at=started_at,
                completed_at=self._clock.now(),
                duration_ms=total_duration,
                error_summary=f"{failed} item(s) failed" if failed else None,
            )
