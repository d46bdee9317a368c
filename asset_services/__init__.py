"""
asset_services -- caller-facing operations.

``DepreciationActions`` owns the transaction boundary and converts engine
values to client types with ``serialize_for_client``.
"""

from asset_services.depreciation_actions import DepreciationActions
from asset_services.serialization import serialize_for_client

__all__ = ["DepreciationActions", "serialize_for_client"]
