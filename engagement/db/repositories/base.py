"""Base repository with generic CRUD operations."""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Base repository with generic CRUD operations."""

    def __init__(self, session: AsyncSession, model: type[ModelT]):
        self.session = session
        self.model = model

    async def get(self, id: UUID) -> ModelT | None:
        """Get a single record by ID."""
        return await self.session.get(self.model, id)

    async def paginate(
        self,
        stmt: Select[Any],
        *,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Any], int]:
        """Run an already filtered and sorted statement one page at a time.

        Args:
            stmt: Select statement with filters and ordering applied.
            page: 1-based page number.
            limit: Page size.

        Returns:
            Tuple of (rows for the page, total matching rows).
        """
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total_result = await self.session.execute(count_stmt)
        total = total_result.scalar() or 0

        offset = (max(page, 1) - 1) * limit
        result = await self.session.execute(stmt.offset(offset).limit(limit))
        return list(result.scalars().all()), total

    async def create(self, **kwargs) -> ModelT:
        """Create a new record."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.commit()
        await self.session.refresh(instance)
        return instance

    async def insert_or_ignore(
        self,
        *,
        conflict_columns: Sequence[str],
        **values,
    ) -> bool:
        """Insert a row unless one already exists for the conflict key.

        The unique index on ``conflict_columns`` decides the winner, so
        concurrent callers never see a duplicate-key error: exactly one of
        them gets ``True``. Does not commit.

        Args:
            conflict_columns: Columns of the unique index guarding the row.
            **values: Column values for the new row.

        Returns:
            True if the row was inserted, False if it already existed.
        """
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            raise NotImplementedError(f"insert_or_ignore is not supported on {dialect}")

        table = self.model.__table__
        stmt = (
            insert(table)
            .values(**values)
            .on_conflict_do_nothing(index_elements=list(conflict_columns))
            .returning(table.c.id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def update(self, instance: ModelT, **kwargs) -> ModelT:
        """Update an existing record."""
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        await self.session.commit()
        await self.session.refresh(instance)
        return instance

    async def delete(self, instance: ModelT) -> None:
        """Delete a record."""
        await self.session.delete(instance)
        await self.session.commit()
