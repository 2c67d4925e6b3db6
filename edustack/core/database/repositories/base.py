"""
Base repository interfaces and utilities.

This module provides the foundational repository patterns used across all
repository implementations in the centralized database layer.

Repositories never commit. They add, flush and query within the session
they were given; the caller (a service or a router) decides when the unit
of work is committed so that several repository calls can share one
transaction.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from ..base import utc_now

EntityType = TypeVar("EntityType", bound=SQLModel)
ItemType = TypeVar("ItemType")


@dataclass(frozen=True)
class Page(Generic[ItemType]):
    """One page of results plus the total row count."""

    items: List[ItemType]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


class AsyncBaseRepository(Generic[EntityType]):
    """Async repository with common CRUD operations using SQLModel."""

    def __init__(self, session: AsyncSession, model: Type[EntityType]) -> None:
        """Initialize repository with async database session and SQLModel entity class.

        Args:
            session: Async session for database operations
            model: SQLModel entity class for this repository
        """
        self.session = session
        self.model = model

    async def create(self, entity: EntityType) -> EntityType:
        """Add a new entity and flush so generated fields are populated.

        Args:
            entity: SQLModel instance to persist

        Returns:
            The same instance, now pending in the session
        """
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def get_by_id(self, entity_id: str) -> Optional[EntityType]:
        """Get entity by its primary identifier.

        Args:
            entity_id: Primary key value

        Returns:
            Entity instance or None if not found
        """
        return await self.session.get(self.model, entity_id)

    async def update(self, entity: EntityType, changes: Optional[Dict[str, Any]] = None) -> EntityType:
        """Apply ``changes`` (if any) to ``entity`` and flush.

        Args:
            entity: Loaded entity instance
            changes: Mapping of attribute name to new value

        Returns:
            Updated entity instance
        """
        for key, value in (changes or {}).items():
            setattr(entity, key, value)
        if hasattr(entity, "updated_at"):
            entity.updated_at = utc_now()
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def delete(self, entity: EntityType) -> None:
        """Delete a loaded entity.

        Args:
            entity: Entity instance to remove
        """
        await self.session.delete(entity)
        await self.session.flush()

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[EntityType]:
        """List entities with optional pagination and equality filtering.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
            filters: Dictionary of field filters

        Returns:
            List of entity instances
        """
        stmt = AsyncQueryBuilder.apply_filters(select(self.model), self.model, filters or {})
        stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def paginate(self, stmt, page: int, limit: int, options: Sequence[Any] = ()) -> Page[EntityType]:
        """Run ``stmt`` for one page and count all rows it would return.

        Args:
            stmt: Select statement returning entities
            page: 1-based page number
            limit: Page size
            options: Loader options applied to the page query only

        Returns:
            Page of entities
        """
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()
        page_stmt = AsyncQueryBuilder.apply_pagination(stmt.options(*options), limit, (page - 1) * limit)
        page_stmt = page_stmt.execution_options(populate_existing=True)
        result = await self.session.execute(page_stmt)
        return Page(items=list(result.scalars().unique().all()), total=total, page=page, limit=limit)

    async def increment(self, entity_id: str, **deltas: float) -> None:
        """Atomically add ``deltas`` to numeric columns of one row.

        Args:
            entity_id: Primary key of the row
            **deltas: Column name to signed increment
        """
        if not deltas:
            return
        values = {name: getattr(self.model, name) + delta for name, delta in deltas.items()}
        stmt = update(self.model).where(self.model.id == entity_id).values(**values)
        await self.session.execute(stmt)


class AsyncQueryBuilder:
    """Utility class for building async SQLModel-based database queries."""

    @staticmethod
    def apply_filters(stmt, model: Type[EntityType], filters: Dict[str, Any]):
        """Apply equality filters to a select statement.

        Args:
            stmt: Select statement
            model: SQLModel entity class
            filters: Dictionary of field filters; ``None`` values are skipped

        Returns:
            Modified select statement with filters applied
        """
        for key, value in filters.items():
            if value is not None and hasattr(model, key):
                stmt = stmt.where(getattr(model, key) == value)
        return stmt

    @staticmethod
    def apply_pagination(stmt, limit: Optional[int], offset: Optional[int]):
        """Apply pagination to a select statement.

        Args:
            stmt: Select statement
            limit: Maximum number of records
            offset: Number of records to skip

        Returns:
            Modified select statement with pagination applied
        """
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset is not None:
            stmt = stmt.offset(offset)
        return stmt

    @staticmethod
    def apply_ordering(stmt, columns: Sequence[Any], descending: bool):
        """Order by ``columns`` in the requested direction."""
        return stmt.order_by(*[column.desc() if descending else column.asc() for column in columns])
