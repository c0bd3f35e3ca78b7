"""
Base CRUD operations for consistent data access patterns across modules.

Writes only flush; the calling service owns the transaction and commits once.
"""

from abc import ABC
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

# Generic type variables for type safety
ModelType = TypeVar("ModelType")


class BaseCRUD(Generic[ModelType], ABC):
    """
    Base CRUD class providing common database operations.

    Attributes:
        model: SQLAlchemy model class
        default_order_by: Default ordering field
        default_order_desc: Whether the default ordering is descending
    """

    def __init__(self, model: type[ModelType]):
        """Initialize CRUD operations for a specific model."""
        self.model = model

    default_order_by: str = "created_at"
    default_order_desc: bool = True

    def _apply_filters(
        self, query: Select, filters: dict[str, Any] | None = None
    ) -> Select:
        """Apply equality filters, skipping None values."""
        if not filters:
            return query

        for field_name, value in filters.items():
            if value is not None and hasattr(self.model, field_name):
                field = getattr(self.model, field_name)
                query = query.where(field == value)
        return query

    def _apply_ordering(self, query: Select, order_by: str | None = None) -> Select:
        """Apply ordering to query, with id as a tie-breaker."""
        order_field = order_by or self.default_order_by
        if hasattr(self.model, order_field):
            field = getattr(self.model, order_field)
            if self.default_order_desc:
                query = query.order_by(field.desc(), self.model.id.desc())
            else:
                query = query.order_by(field, self.model.id)
        return query

    async def create(self, db: AsyncSession, **fields) -> ModelType:
        """Create a new record and flush it to obtain its id."""
        db_obj = self.model(**fields)
        db.add(db_obj)
        await db.flush()
        return db_obj

    async def get(self, db: AsyncSession, id: int) -> ModelType | None:
        """Get a single record by primary key."""
        result = await db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_multi(
        self,
        db: AsyncSession,
        skip: int = 0,
        limit: int = 100,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> tuple[list[ModelType], int]:
        """
        Get multiple records with pagination and equality filters.

        Returns:
            Tuple of (records, total_count)
        """
        count_query = self._apply_filters(
            select(func.count(self.model.id)), filters
        )
        total = (await db.execute(count_query)).scalar() or 0

        query = self._apply_filters(select(self.model), filters)
        query = self._apply_ordering(query, order_by).offset(skip).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def update(self, db: AsyncSession, db_obj: ModelType, **fields) -> ModelType:
        """Update attributes present on the model and flush."""
        for field, value in fields.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        await db.flush()
        return db_obj

    async def delete(self, db: AsyncSession, db_obj: ModelType) -> None:
        """Hard delete a record."""
        await db.delete(db_obj)
        await db.flush()

    async def count(self, db: AsyncSession, **filters) -> int:
        """Count records matching equality filters."""
        query = self._apply_filters(select(func.count(self.model.id)), filters)
        result = await db.execute(query)
        return result.scalar() or 0
