"""
Client serialization for the actions layer.

Money is ``Decimal`` everywhere inside the engine.  This is the single
place it becomes ``float``, alongside UUIDs becoming ``str`` and enums
becoming their values.  Datetimes pass through unchanged.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


def serialize_for_client(value: Any) -> Any:
    """Recursively convert engine values to plain client types.

    - ``Decimal`` -> ``float``
    - ``UUID`` -> ``str``
    - ``Enum`` -> its value
    - dataclass -> ``dict`` (field order kept)
    - ``dict`` / ``list`` / ``tuple`` -> converted element-wise (tuples become lists)
    """
    if value is None or isinstance(value, (bool, int, str, datetime, date)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return serialize_for_client(value.value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: serialize_for_client(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        return {str(k): serialize_for_client(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_for_client(v) for v in value]
    return value
