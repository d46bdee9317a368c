"""
BaseService -- abstract base for every write-side service.

Responsibility:
    Common constructor and session contract.  Concrete services receive a
    SQLAlchemy ``Session`` and persist through ``session.flush()``, never
    ``session.commit()``.

Architecture position:
    Kernel > Services.  Extended by the depreciation Applier.

Invariants enforced:
    Transaction boundaries belong to the caller.  A service flushes inside
    the caller's transaction (or savepoint, in batch runs) so that an entry,
    the asset update, and the history row land together or not at all.

Failure modes:
    A subclass that commits on its own breaks batch savepoint isolation.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from asset_kernel.db.base import Base
from asset_kernel.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for kernel services.

    Contract:
        Accepts a ``Session`` and an optional ``Clock`` from the caller.

    Guarantees:
        - Never calls ``session.commit()`` or ``session.rollback()``.
        - ``self.clock`` defaults to SystemClock.

    Non-goals:
        - Read-only queries belong in selectors.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
