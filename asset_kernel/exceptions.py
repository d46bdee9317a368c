"""
Typed Exception Hierarchy for the Asset Kernel.

Every error the depreciation engine can raise is a typed class carrying a
machine-readable ``code`` and the structured data needed to report it.
Callers catch by type, never by message text.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    AssetKernelError (base)
    |
    +-- AuthorizationError
    |   +-- UnauthorizedError
    |
    +-- AssetError
    |   +-- AssetNotFoundError
    |   +-- MissingDepreciationConfigError
    |   +-- AlreadyFullyDepreciatedError
    |   +-- InvalidDepreciationParametersError
    |   +-- NotUnitsOfProductionError
    |   +-- NegativeUnitsError
    |   +-- DepreciationAlreadyStartedError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- BatchError
        +-- TaskNotRegisteredError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                            | When Raised
----------------|---------------------------------|-------------------------------------
Authorization   | UNAUTHORIZED                    | No acting user supplied
----------------|---------------------------------|-------------------------------------
Asset           | ASSET_NOT_FOUND                 | Asset missing or inactive
                | MISSING_DEPRECIATION_CONFIG     | No purchase price or useful life
                | ALREADY_FULLY_DEPRECIATED       | Flag already set (no-op)
                | INVALID_DEPRECIATION_PARAMETERS | Method and parameters disagree
                | NOT_UNITS_OF_PRODUCTION         | Units recorded on a time-based asset
                | NEGATIVE_UNITS                  | Negative unit count
                | DEPRECIATION_ALREADY_STARTED    | Re-initializing an asset with entries
----------------|---------------------------------|-------------------------------------
Immutability    | IMMUTABILITY_VIOLATION          | UPDATE/DELETE on an append-only row
----------------|---------------------------------|-------------------------------------
Batch           | TASK_NOT_REGISTERED             | Unknown batch task type

The caller-facing actions layer turns every one of these into a
``{"success": False, "message": ...}`` result. Anything that is not an
AssetKernelError is reported there as a system error.
"""

from decimal import Decimal


class AssetKernelError(Exception):
    """Base exception for all asset kernel errors."""

    code: str = "ASSET_KERNEL_ERROR"


# Authorization


class AuthorizationError(AssetKernelError):
    """Base exception for authorization failures."""

    code: str = "AUTHORIZATION_ERROR"


class UnauthorizedError(AuthorizationError):
    """No acting user was supplied for an operation that needs one."""

    code: str = "UNAUTHORIZED"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__("Unauthorized")


# Asset / depreciation


class AssetError(AssetKernelError):
    """Base exception for asset-related errors."""

    code: str = "ASSET_ERROR"


class AssetNotFoundError(AssetError):
    """Asset does not exist, or has been deactivated."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__("Asset not found")


class MissingDepreciationConfigError(AssetError):
    """Asset is missing purchase price or useful life."""

    code: str = "MISSING_DEPRECIATION_CONFIG"

    def __init__(self, asset_id: str, missing_fields: list[str]):
        self.asset_id = asset_id
        self.missing_fields = missing_fields
        super().__init__(
            "Asset is missing required depreciation information "
            f"({', '.join(missing_fields)})"
        )


class AlreadyFullyDepreciatedError(AssetError):
    """Asset has already reached its salvage value."""

    code: str = "ALREADY_FULLY_DEPRECIATED"

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__("Asset is already fully depreciated")


class InvalidDepreciationParametersError(AssetError):
    """Depreciation method and its parameters are inconsistent."""

    code: str = "INVALID_DEPRECIATION_PARAMETERS"

    def __init__(self, asset_id: str | None, method: str, reason: str):
        self.asset_id = asset_id
        self.method = method
        self.reason = reason
        super().__init__(f"Invalid {method} parameters: {reason}")


class NotUnitsOfProductionError(AssetError):
    """Unit counts were recorded on an asset that is not units-based."""

    code: str = "NOT_UNITS_OF_PRODUCTION"

    def __init__(self, asset_id: str, method: str):
        self.asset_id = asset_id
        self.method = method
        super().__init__(
            "Asset does not use units of production depreciation method"
        )


class NegativeUnitsError(AssetError):
    """Unit counts must be zero or positive."""

    code: str = "NEGATIVE_UNITS"

    def __init__(self, asset_id: str, units: int | Decimal):
        self.asset_id = asset_id
        self.units = units
        super().__init__(f"Units produced cannot be negative: {units}")


class DepreciationAlreadyStartedError(AssetError):
    """Asset already has ledger entries; re-initializing would reset its totals."""

    code: str = "DEPRECIATION_ALREADY_STARTED"

    def __init__(self, asset_id: str, entry_count: int):
        self.asset_id = asset_id
        self.entry_count = entry_count
        super().__init__(
            f"Asset already has {entry_count} depreciation entries "
            "and cannot be re-initialized"
        )


# Immutability


class ImmutabilityError(AssetKernelError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an append-only record.

    Depreciation entries and asset history rows are never rewritten.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Batch


class BatchError(AssetKernelError):
    """Base exception for batch-processing errors."""

    code: str = "BATCH_ERROR"


class TaskNotRegisteredError(BatchError):
    """No batch task is registered under the requested type."""

    code: str = "TASK_NOT_REGISTERED"

    def __init__(self, task_type: str, available: list[str]):
        self.task_type = task_type
        self.available = available
        super().__init__(
            f"No task registered for type '{task_type}'. "
            f"Available: {sorted(available)}"
        )
