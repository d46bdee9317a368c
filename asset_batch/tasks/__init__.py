"""Batch task implementations and the task registry."""

from asset_batch.tasks.base import BatchItemInput, BatchTask, BatchTaskResult, TaskRegistry
from asset_batch.tasks.depreciation_tasks import (
    DUE_DEPRECIATION,
    DueDepreciationTask,
    default_task_registry,
)

__all__ = [
    "DUE_DEPRECIATION",
    "BatchItemInput",
    "BatchTask",
    "BatchTaskResult",
    "DueDepreciationTask",
    "TaskRegistry",
    "default_task_registry",
]
