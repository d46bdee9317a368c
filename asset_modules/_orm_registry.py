"""
Module ORM Registry (``asset_modules._orm_registry``).

Responsibility
--------------
Ensure every module-level ORM model is imported so that ``Base.metadata``
holds its table before ``create_all()`` runs, and register the append-only
listeners that protect those tables.

Usage
-----
Scripts and ``tests/conftest.py`` call ``create_all_tables()``.
"""

from sqlalchemy.engine import Engine


def import_all_orm_models() -> None:
    """Import every ``asset_modules.*.orm`` module. Idempotent."""
    # fmt: off
    import asset_modules.depreciation.orm  # noqa: F401
    # fmt: on


def create_all_tables(engine: Engine | None = None) -> None:
    """Create all module tables and register the immutability listeners.

    Preconditions:
        ``engine`` is given, or the module-level engine has been initialized
        via ``init_engine_from_url()``.
    """
    from asset_kernel.db.engine import create_tables
    from asset_kernel.db.immutability import register_immutability_listeners

    import_all_orm_models()
    create_tables(engine)
    register_immutability_listeners()
