"""Kernel service base classes."""

from asset_kernel.services.base import BaseService

__all__ = ["BaseService"]
