"""
Asset Kernel

Shared foundation for the depreciation engine:
- Decimal money types with explicit rounding
- UTC-aware SQLAlchemy base classes and session management
- Injectable clocks for deterministic runs
- Typed exceptions and structured JSON logging
"""

__version__ = "0.1.0"
