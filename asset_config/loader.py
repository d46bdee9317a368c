"""
Configuration Loader (``asset_config.loader``).

Responsibility
--------------
Reads YAML configuration files and parses their sections into typed
dataclasses.  Runtime callers go through ``asset_config.get_active_config()``
rather than calling this module directly.

Invariants enforced
-------------------
* Unknown keys in the ``depreciation`` section raise ``ValueError``.
* ``compute_checksum`` is deterministic for identical content.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Non-mapping top level or section  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from asset_modules.depreciation.config import DepreciationConfig
from asset_modules.depreciation.models import DepreciationMethod

_DECIMAL_KEYS = ("high_depreciation_threshold_percent",)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Postconditions:
        - Returns a ``dict`` (empty if the YAML document is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Top level of {path} must be a mapping, got {type(data).__name__}")
    return data


def parse_depreciation_config(data: dict[str, Any] | None) -> DepreciationConfig:
    """Build a ``DepreciationConfig`` from the ``depreciation`` section."""
    if not data:
        return DepreciationConfig.with_defaults()
    if not isinstance(data, dict):
        raise ValueError("depreciation section must be a mapping")

    values = dict(data)
    method = values.get("default_depreciation_method")
    if method is not None:
        # Raises ValueError for an unknown method name
        values["default_depreciation_method"] = DepreciationMethod(method).value
    for key in _DECIMAL_KEYS:
        if key in values and values[key] is not None:
            values[key] = Decimal(str(values[key]))
    return DepreciationConfig.from_dict(values)


def parse_database_url(data: dict[str, Any] | None) -> str | None:
    if not data:
        return None
    if not isinstance(data, dict):
        raise ValueError("database section must be a mapping")
    return data.get("url")


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
