"""
asset_config -- single public entrypoint for depreciation configuration.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains settings.
    It reads one YAML file (the packaged ``defaults.yaml`` unless a path
    is given) and returns a frozen ``ActiveConfig``.

Architecture position:
    Configuration.  Sits above ``asset_modules`` (it builds the module's
    ``DepreciationConfig``) and below ``asset_services`` and ``scripts``.
    The kernel never imports from here.

Failure modes:
    - ``FileNotFoundError`` -- config path does not exist.
    - ``ValueError`` -- unknown keys, unknown method names, bad shapes.

Audit relevance:
    Every call emits an ``ASSET_CONFIG_TRACE`` log entry with the source
    path and content checksum, tying each run to the settings that
    governed it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from asset_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_database_url,
    parse_depreciation_config,
)
from asset_kernel.logging_config import get_logger
from asset_modules.depreciation.config import DepreciationConfig

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


@dataclass(frozen=True)
class ActiveConfig:
    """Resolved settings for one process."""
    source: Path
    checksum: str
    depreciation: DepreciationConfig
    database_url: str | None = None


def get_active_config(config_path: Path | str | None = None) -> ActiveConfig:
    """Load and parse the active configuration.

    Args:
        config_path: YAML file to read.  Defaults to the packaged
            ``defaults.yaml``.

    Returns:
        ActiveConfig.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    data = load_yaml_file(path)

    unknown = sorted(set(data) - {"database", "depreciation"})
    if unknown:
        raise ValueError(f"Unknown configuration sections in {path}: {unknown}")

    config = ActiveConfig(
        source=path,
        checksum=compute_checksum(data),
        depreciation=parse_depreciation_config(data.get("depreciation")),
        database_url=parse_database_url(data.get("database")),
    )

    _logger.info(
        "ASSET_CONFIG_TRACE",
        extra={
            "trace_type": "ASSET_CONFIG_TRACE",
            "config_source": str(path),
            "checksum": config.checksum,
            "legacy_sum_of_years": config.depreciation.legacy_sum_of_years,
        },
    )
    return config


__all__ = ["ActiveConfig", "DEFAULT_CONFIG_PATH", "get_active_config"]
