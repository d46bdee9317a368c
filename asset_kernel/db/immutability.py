"""
ORM-Level Append-Only Enforcement.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity                  | When Immutable           | Why
------------------------|--------------------------|---------------------------------
DepreciationEntryModel  | ALWAYS (from creation)   | One ledger row per run; corrections
                        |                          | are new rows, never rewrites
AssetHistoryModel       | ALWAYS (from creation)   | Audit trail

SQLAlchemy fires ``before_update`` / ``before_delete`` during flush, before
any SQL is sent.  The listeners below raise ImmutabilityViolationError and
the flush is aborted.  Bulk ``UPDATE`` statements issued with
``session.execute(update(...))`` bypass mapper events and are not covered.

Model imports are inline: the protected models live in the module layer,
which itself imports from the kernel.

===============================================================================
USAGE
===============================================================================

    from asset_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup

Tests that need to tamper deliberately call
``unregister_immutability_listeners()`` and re-register afterwards.
"""

from sqlalchemy import event

from asset_kernel.exceptions import ImmutabilityViolationError
from asset_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _block(target, operation: str, reason: str) -> None:
    entity_type = type(target).__name__
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _check_depreciation_entry_update(mapper, connection, target):
    """Depreciation entries are never modified after insert."""
    _block(target, "UPDATE", "Depreciation entries are append-only")


def _check_depreciation_entry_delete(mapper, connection, target):
    """Depreciation entries are never deleted."""
    _block(target, "DELETE", "Depreciation entries cannot be deleted")


def _check_asset_history_update(mapper, connection, target):
    """History rows are never modified after insert."""
    _block(target, "UPDATE", "Asset history is append-only")


def _check_asset_history_delete(mapper, connection, target):
    """History rows are never deleted."""
    _block(target, "DELETE", "Asset history cannot be deleted")


def _listeners():
    from asset_modules.depreciation.orm import (
        AssetHistoryModel,
        DepreciationEntryModel,
    )

    return (
        (DepreciationEntryModel, "before_update", _check_depreciation_entry_update),
        (DepreciationEntryModel, "before_delete", _check_depreciation_entry_delete),
        (AssetHistoryModel, "before_update", _check_asset_history_update),
        (AssetHistoryModel, "before_delete", _check_asset_history_delete),
    )


def register_immutability_listeners() -> None:
    """
    Register all append-only enforcement listeners.

    Safe to call more than once; already-registered listeners are skipped.
    """
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring it if not registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners() -> None:
    """
    Remove append-only enforcement listeners.

    WARNING: tests only.
    """
    for target, event_name, listener_fn in _listeners():
        _safe_remove_listener(target, event_name, listener_fn)
