"""
Repository interface and the SQL implementation of it.

Services and the lead engines only talk to `Repository`; `BaseRepository`
backs it with an async SQLModel session, `MemoryRepository` (memory.py)
with plain dictionaries.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import TypeVar, Generic, Type, Optional, List, Any, Iterable

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from metahire_crm.core.exceptions import ConflictError, StorageError
from metahire_crm.core.timeutils import utcnow

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)


class Repository(ABC, Generic[ModelType]):
    """
    Per-entity storage interface.
    Filters are exact-match; a None filter value means "don't filter".
    """

    model: Type[ModelType]

    @abstractmethod
    async def create(self, obj_in: dict) -> ModelType:
        """Insert one row."""

    @abstractmethod
    async def create_many(self, objs_in: List[dict]) -> List[ModelType]:
        """Insert several rows as one unit."""

    @abstractmethod
    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        """Get a row by id."""

    @abstractmethod
    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """First row whose field equals value."""

    @abstractmethod
    async def list(
        self,
        filters: Optional[dict] = None,
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> List[ModelType]:
        """List rows matching all filters."""

    @abstractmethod
    async def list_in(
        self,
        field: str,
        values: Iterable[Any],
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> List[ModelType]:
        """List rows whose field is one of values."""

    @abstractmethod
    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[ModelType]:
        """Set the given fields; returns None when the row is gone."""

    @abstractmethod
    async def delete(self, id: uuid.UUID) -> bool:
        """Delete one row, applying the declared cascades."""

    @abstractmethod
    async def delete_where(self, filters: dict) -> int:
        """Delete every row matching filters; returns the count."""

    @abstractmethod
    async def delete_in(self, field: str, values: Iterable[Any]) -> int:
        """Delete every row whose field is one of values."""

    @abstractmethod
    async def count(self, filters: Optional[dict] = None) -> int:
        """Count rows matching filters."""

    async def exists(self, id: uuid.UUID) -> bool:
        """Check if a record exists."""
        obj = await self.get(id)
        return obj is not None


class BaseRepository(Repository[ModelType]):
    """
    Generic SQL repository with CRUD operations.
    Inherit and specify the model class.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    @asynccontextmanager
    async def _translate_errors(self):
        name = self.model.__name__
        try:
            yield
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError(name, message=f"{name} violates a uniqueness or reference constraint") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Storage failure on %s", name)
            raise StorageError(f"{name} storage operation failed") from e

    def _select(self, filters: Optional[dict] = None):
        # populate_existing keeps identity-mapped rows in step with DB-side cascades
        query = select(self.model).execution_options(populate_existing=True)
        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field) and value is not None:
                    query = query.where(getattr(self.model, field) == value)
        return query

    def _order(self, query, order_by: str, order_desc: bool):
        if hasattr(self.model, order_by):
            order_column = getattr(self.model, order_by)
            query = query.order_by(order_column.desc() if order_desc else order_column)
        return query

    async def create(self, obj_in: dict) -> ModelType:
        """Create a new record."""
        db_obj = self.model(**obj_in)
        async with self._translate_errors():
            self.session.add(db_obj)
            await self.session.commit()
            await self.session.refresh(db_obj)
        return db_obj

    async def create_many(self, objs_in: List[dict]) -> List[ModelType]:
        """Create several records in one commit."""
        db_objs = [self.model(**obj_in) for obj_in in objs_in]
        async with self._translate_errors():
            self.session.add_all(db_objs)
            await self.session.commit()
            for db_obj in db_objs:
                await self.session.refresh(db_obj)
        return db_objs

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        """Get a record by ID."""
        # session.get would serve cascade-deleted rows from the identity map
        async with self._translate_errors():
            result = await self.session.exec(self._select().where(self.model.id == id))
            return result.first()

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """Get a record by a specific field."""
        query = self._select().where(getattr(self.model, field) == value)
        async with self._translate_errors():
            result = await self.session.exec(query)
            return result.first()

    async def list(
        self,
        filters: Optional[dict] = None,
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> List[ModelType]:
        """List all records with optional filters."""
        query = self._order(self._select(filters), order_by, order_desc)
        async with self._translate_errors():
            result = await self.session.exec(query)
            return list(result.all())

    async def list_in(
        self,
        field: str,
        values: Iterable[Any],
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> List[ModelType]:
        """List records whose field is in values."""
        values = list(values)
        if not values:
            return []
        query = self._select().where(getattr(self.model, field).in_(values))
        query = self._order(query, order_by, order_desc)
        async with self._translate_errors():
            result = await self.session.exec(query)
            return list(result.all())

    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[ModelType]:
        """Update a record."""
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        # Update timestamp if exists
        if hasattr(db_obj, 'updated_at') and 'updated_at' not in obj_in:
            db_obj.updated_at = utcnow()

        async with self._translate_errors():
            self.session.add(db_obj)
            await self.session.commit()
            await self.session.refresh(db_obj)
        return db_obj

    async def delete(self, id: uuid.UUID) -> bool:
        """Delete a record; cascades run in the database."""
        return await self._delete(self.model.id == id) > 0

    async def delete_where(self, filters: dict) -> int:
        """Delete records matching filters."""
        clauses = [
            getattr(self.model, field) == value
            for field, value in filters.items()
            if hasattr(self.model, field) and value is not None
        ]
        if not clauses:
            raise ValueError("delete_where needs at least one filter")
        return await self._delete(*clauses)

    async def delete_in(self, field: str, values: Iterable[Any]) -> int:
        """Delete records whose field is in values."""
        values = list(values)
        if not values:
            return 0
        return await self._delete(getattr(self.model, field).in_(values))

    async def _delete(self, *clauses) -> int:
        async with self._translate_errors():
            result = await self.session.exec(delete(self.model).where(*clauses))
            await self.session.commit()
        return result.rowcount

    async def count(self, filters: Optional[dict] = None) -> int:
        """Count records."""
        query = select(func.count()).select_from(self.model)

        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field) and value is not None:
                    query = query.where(getattr(self.model, field) == value)

        async with self._translate_errors():
            result = await self.session.exec(query)
            return result.one()
