"""
asset_batch -- SAVEPOINT-per-item batch execution.

Runs a registered task over a prepared list of items, isolating each item
in its own SAVEPOINT so that one failing asset never aborts the run.  The
only task shipped here is the monthly depreciation sweep
(``assets.due_depreciation``).

Architecture position:
    Batch layer.  Sits above ``asset_modules`` (tasks call the module
    services) and below ``asset_services``, which owns the commit.
"""

from asset_batch.domain.types import (
    BatchItemResult,
    BatchItemStatus,
    BatchRunResult,
    BatchRunStatus,
)
from asset_batch.services.executor import BatchExecutor
from asset_batch.tasks.base import BatchItemInput, BatchTask, BatchTaskResult, TaskRegistry
from asset_batch.tasks.depreciation_tasks import DueDepreciationTask, default_task_registry

__all__ = [
    "BatchExecutor",
    "BatchItemInput",
    "BatchItemResult",
    "BatchItemStatus",
    "BatchRunResult",
    "BatchRunStatus",
    "BatchTask",
    "BatchTaskResult",
    "DueDepreciationTask",
    "TaskRegistry",
    "default_task_registry",
]
