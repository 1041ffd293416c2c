"""
Base repository.

Generic CRUD operations for all repositories.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from referral_core.models.base import Base

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with generic CRUD operations.

    Provides async database operations for any SQLAlchemy model.

    Type Parameters:
        ModelType: SQLAlchemy model class

    Example:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession):
                super().__init__(User, session)
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def get_by_id(self, id: Any) -> ModelType | None:
        """
        Get entity by primary key.

        Args:
            id: Entity ID

        Returns:
            Entity or None if not found
        """
        return await self.session.get(self.model, id)

    async def get_for_update(self, id: Any) -> ModelType | None:
        """
        Get entity by primary key with a row lock (SELECT ... FOR UPDATE).

        The lock is held until the surrounding transaction ends and the
        entity is refreshed from the database.

        Args:
            id: Entity ID

        Returns:
            Locked entity or None if not found
        """
        return await self.session.get(
            self.model, id, with_for_update=True, populate_existing=True
        )

    async def get_by(
        self, **filters: Any
    ) -> ModelType | None:
        """
        Get single entity by filters.

        Args:
            **filters: Column filters

        Returns:
            First matching entity or None
        """
        stmt = select(self.model).filter_by(**filters)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, **data: Any) -> ModelType:
        """
        Create new entity.

        Args:
            **data: Entity data

        Returns:
            Created entity
        """
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def insert_ignore_conflict(
        self, conflict_columns: list[str], **data: Any
    ) -> ModelType | None:
        """
        Insert a row unless it violates the given unique key.

        Runs a single INSERT ... ON CONFLICT DO NOTHING RETURNING, so the
        uniqueness check and the write are one atomic statement.

        Args:
            conflict_columns: Columns of the unique constraint to guard
            **data: Entity data

        Returns:
            Created entity, or None if a row with the same key exists
        """
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            insert = postgresql.insert
        elif dialect == "sqlite":
            insert = sqlite.insert
        else:
            raise NotImplementedError(
                f"ON CONFLICT inserts are not supported for dialect {dialect}"
            )

        pk = self.model.__mapper__.primary_key[0]
        stmt = (
            insert(self.model)
            .values(**data)
            .on_conflict_do_nothing(index_elements=conflict_columns)
            .returning(pk)
        )
        result = await self.session.execute(stmt)
        new_id = result.scalar_one_or_none()

        if new_id is None:
            return None
        return await self.get_by_id(new_id)

    async def count(self, **filters: Any) -> int:
        """
        Count entities matching filters.

        Args:
            **filters: Column filters

        Returns:
            Count of matching entities
        """
        stmt = select(func.count()).select_from(self.model)

        if filters:
            stmt = stmt.filter_by(**filters)

        result = await self.session.execute(stmt)
        return result.scalar() or 0
