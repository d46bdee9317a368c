"""Read-only selector base classes."""

from asset_kernel.selectors.base import BaseSelector

__all__ = ["BaseSelector"]
