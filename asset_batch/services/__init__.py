"""Batch execution services."""

from asset_batch.services.executor import BatchExecutor

__all__ = ["BatchExecutor"]
