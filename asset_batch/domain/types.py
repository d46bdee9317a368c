"""
asset_batch.domain.types -- Pure frozen dataclasses for batch runs.  ZERO I/O.

Invariants enforced:
    - All DTOs are frozen dataclasses; collections are tuples.
    - ``BatchRunResult`` counters add up to ``total_items``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


class BatchRunStatus(str, Enum):
    """Outcome of a whole run."""

    COMPLETED = "completed"  # No item failed
    PARTIALLY_COMPLETED = "partially_completed"  # Some items failed
    FAILED = "failed"  # Every item failed, or items could not be prepared


class BatchItemStatus(str, Enum):
    """Per-item outcome."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"  # Nothing to do for this item (e.g. salvage repair)


@dataclass(frozen=True)
class BatchItemResult:
    """Immutable result of processing a single batch item.

    Each item runs in its own SAVEPOINT; a FAILED item's writes are rolled
    back without touching its neighbours.
    """

    item_index: int  # 0-indexed position in the batch
    item_key: str  # Business identifier (asset item code)
    status: BatchItemStatus
    error_code: str | None = None
    error_message: str | None = None
    result_data: dict[str, Any] | None = None
    duration_ms: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class BatchRunResult:
    """Immutable result of one ``BatchExecutor.run()`` call."""

    batch_id: UUID
    task_type: str
    status: BatchRunStatus
    total_items: int
    succeeded: int
    failed: int
    skipped: int
    item_results: tuple[BatchItemResult, ...] = ()
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
    error_summary: str | None = None

    @property
    def failed_items(self) -> tuple[BatchItemResult, ...]:
        return tuple(r for r in self.item_results if r.status == BatchItemStatus.FAILED)

    @property
    def succeeded_items(self) -> tuple[BatchItemResult, ...]:
        return tuple(r for r in self.item_results if r.status == BatchItemStatus.SUCCEEDED)
