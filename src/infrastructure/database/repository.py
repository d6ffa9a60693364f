"""Generic async repository over a single ORM model.

Repositories are the only code that talks to the session. Every store call
goes through ``_store_errors`` so callers see the business exceptions of
``src.core.exceptions`` instead of SQLAlchemy ones: integrity failures
become ``ConstraintViolationError``, anything else ``StoreFailureError``.
"""

from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any

from loguru import logger
from sqlalchemy import ColumnElement, Select, UnaryExpression, func, select
from sqlalchemy import delete as sql_delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import ConstraintViolationError, StoreFailureError
from src.infrastructure.database.base import BaseModel


class BaseRepository[T: BaseModel]:
    """CRUD operations for one model class.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, User)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    @property
    def _name(self) -> str:
        return self.model_class.__name__

    @asynccontextmanager
    async def _store_errors(self, operation: str) -> AsyncGenerator[None]:
        try:
            yield
        except IntegrityError as e:
            logger.warning(
                "{} {} rejected by a constraint",
                self._name,
                operation,
                error=str(e.orig),
            )
            raise ConstraintViolationError(str(e.orig), cause=e) from e
        except SQLAlchemyError as e:
            raise StoreFailureError(
                f"{self._name} {operation} failed: {type(e).__name__}", cause=e
            ) from e

    async def get_by_id(self, entity_id: int) -> T | None:
        """Retrieve a model instance by its ID.

        Args:
            entity_id: The primary key ID of the model to retrieve.

        Returns:
            T | None: The model instance if found, None otherwise.
        """
        async with self._store_errors("lookup"):
            instance = await self.session.get(self.model_class, entity_id)
        logger.debug("Fetched {} {}: {}", self._name, entity_id, instance is not None)
        return instance

    def _filtered(
        self, stmt: Select[Any], filters: Sequence[ColumnElement[bool]]
    ) -> Select[Any]:
        for condition in filters:
            stmt = stmt.where(condition)
        return stmt

    async def list_page(
        self,
        offset: int,
        limit: int,
        order_by: Sequence[UnaryExpression[Any] | ColumnElement[Any]] = (),
        filters: Sequence[ColumnElement[bool]] = (),
    ) -> list[T]:
        """Retrieve one page of instances.

        Args:
            offset: Number of rows to skip.
            limit: Maximum number of rows to return.
            order_by: Ordering clauses; defaults to ascending id.
            filters: Conditions every returned row must satisfy.

        Returns:
            list[T]: The rows of the page, possibly empty.
        """
        stmt = self._filtered(select(self.model_class), filters)
        stmt = stmt.order_by(*(order_by or (self.model_class.id.asc(),)))
        stmt = stmt.offset(offset).limit(limit)

        async with self._store_errors("listing"):
            result = await self.session.execute(stmt)
        instances = list(result.scalars().all())

        logger.debug(
            "Listed {} {} rows (offset {}, limit {})",
            len(instances),
            self._name,
            offset,
            limit,
        )
        return instances

    async def count(self, filters: Sequence[ColumnElement[bool]] = ()) -> int:
        """Count instances, optionally restricted by ``filters``."""
        stmt = select(func.count()).select_from(self.model_class)
        stmt = self._filtered(stmt, filters)
        async with self._store_errors("count"):
            result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def create(self, obj: T) -> T:
        """Insert a new instance.

        Args:
            obj: The model instance to create.

        Returns:
            T: The created instance with its id and defaults populated.
        """
        async with self._store_errors("insert"):
            self.session.add(obj)
            await self.session.flush()
            await self.session.refresh(obj)

        logger.debug("Inserted {} {}", self._name, obj.id)
        return obj

    async def update(self, instance: T, data: Mapping[str, object]) -> T:
        """Apply ``data`` to an already loaded instance and flush it.

        Args:
            instance: The loaded instance to modify.
            data: Attribute name to new value.

        Returns:
            T: The refreshed instance.
        """
        for key, value in data.items():
            if not hasattr(instance, key):
                msg = f"{self._name} has no attribute {key!r}"
                raise AttributeError(msg)
            setattr(instance, key, value)

        async with self._store_errors("update"):
            await self.session.flush()
            await self.session.refresh(instance)

        logger.debug("Updated {} {} fields: {}", self._name, instance.id, list(data))
        return instance

    async def delete(self, entity_id: int) -> bool:
        """Delete an instance by id.

        Args:
            entity_id: The primary key ID of the model to delete.

        Returns:
            bool: True if a row was deleted, False if none matched.
        """
        stmt = sql_delete(self.model_class).where(self.model_class.id == entity_id)
        async with self._store_errors("delete"):
            result = await self.session.execute(stmt)

        deleted: bool = result.rowcount > 0
        logger.debug("Deleted {} {}: {}", self._name, entity_id, deleted)
        return deleted

    async def exists(self, *conditions: ColumnElement[bool]) -> bool:
        """Whether at least one instance satisfies every condition."""
        stmt = select(select(self.model_class.id).where(*conditions).exists())
        async with self._store_errors("existence check"):
            result = await self.session.execute(stmt)
        return bool(result.scalar())
