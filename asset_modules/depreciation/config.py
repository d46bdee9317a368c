"""
Depreciation Configuration Schema.

Defines the structure and defaults for depreciation settings.  Actual
values are loaded from YAML by ``asset_config.get_active_config()``.
"""

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Self

from asset_kernel.logging_config import get_logger

logger = get_logger("modules.depreciation.config")


@dataclass
class DepreciationConfig:
    """
    Configuration schema for the depreciation module.

    Override at instantiation with company-specific values:

        config = DepreciationConfig(
            legacy_sum_of_years=True,
            high_depreciation_threshold_percent=Decimal("90"),
        )
    """

    # Method used when an asset has none recorded
    default_depreciation_method: str = "straight_line"

    # Sum-of-years'-digits: keep the historical constant monthly amount
    # instead of stepping down each year
    legacy_sum_of_years: bool = False

    # Rounding
    money_decimal_places: int = 2

    # Alerts
    alert_recent_days: int = 30
    high_depreciation_threshold_percent: Decimal = Decimal("80")

    # Batch
    batch_default_business_unit_id: str | None = None

    def __post_init__(self):
        if not isinstance(self.high_depreciation_threshold_percent, Decimal):
            self.high_depreciation_threshold_percent = Decimal(
                str(self.high_depreciation_threshold_percent)
            )
        if self.alert_recent_days < 0:
            raise ValueError("alert_recent_days cannot be negative")
        logger.info(
            "depreciation_config_initialized",
            extra={
                "default_depreciation_method": self.default_depreciation_method,
                "legacy_sum_of_years": self.legacy_sum_of_years,
                "money_decimal_places": self.money_decimal_places,
                "alert_recent_days": self.alert_recent_days,
                "high_depreciation_threshold_percent": str(
                    self.high_depreciation_threshold_percent
                ),
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the standard defaults."""
        logger.info("depreciation_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from a dictionary (e.g. a parsed YAML section).

        Unknown keys are rejected so that a typo in a config file fails
        loudly instead of silently falling back to a default.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown depreciation config keys: {unknown}")
        logger.info(
            "depreciation_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
