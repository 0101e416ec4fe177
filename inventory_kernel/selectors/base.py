"""
Module: inventory_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.  Selectors
    form the "Q" side of the CQRS-lite pattern, providing structured read access
    to inventories, sectors, products, counts and the audit trail without
    mutation capability.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    pure domain DTOs.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: Selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: Selectors return frozen dataclasses or computed
      results, NOT raw ORM model instances.
    - Session ownership: Selectors do NOT create or manage their own sessions;
      the caller owns the session and its transaction scope.
"""

from abc import ABC
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base
from inventory_kernel.domain.pagination import Page, PageRequest

ModelType = TypeVar("ModelType", bound=Base)
T = TypeVar("T")


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs or computed results.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        """
        Initialize the selector.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session

    def _paginate(
        self,
        stmt: Select,
        request: PageRequest,
        to_dto: Callable[[Any], T],
    ) -> Page[T]:
        """Run ``stmt`` for one page and count its unpaginated total."""
        total = self.session.scalar(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ) or 0
        if total == 0:
            return Page.empty(request)
        rows = self.session.scalars(
            stmt.offset(request.offset).limit(request.limit)
        ).all()
        return Page(
            items=tuple(to_dto(row) for row in rows),
            total=total,
            page=request.page,
            limit=request.limit,
        )
