"""Database layer - engine, base classes, types, and append-only guards."""

from asset_kernel.db.base import UUID, Base, TrackedBase, UTCDateTime, UUIDString
from asset_kernel.db.engine import (
    build_engine,
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
)
from asset_kernel.db.types import round_money, to_decimal

__all__ = [
    "build_engine",
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "create_tables",
    "Base",
    "TrackedBase",
    "UTCDateTime",
    "UUIDString",
    "UUID",
    "round_money",
    "to_decimal",
]
