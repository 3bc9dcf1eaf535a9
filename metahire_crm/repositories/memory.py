"""
In-memory store.

Rows live in per-table dictionaries. Unique constraints, foreign-key existence
and ON DELETE rules are read from the same SQLModel table metadata the SQL
backend creates its schema from, so both backends enforce one set of rules.
"""
import uuid
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel

from metahire_crm.core.exceptions import ConflictError
from metahire_crm.core.timeutils import utcnow
from metahire_crm.models import (
    Profile, AuthSession, Campaign, CampaignAssignment,
    Lead, LeadStatusHistory, Customer, Payment
)
from metahire_crm.repositories.base import Repository, ModelType
from metahire_crm.repositories.store import Store


def _matches(row: SQLModel, filters: Optional[dict]) -> bool:
    if not filters:
        return True
    return all(
        getattr(row, field) == value
        for field, value in filters.items()
        if value is not None and hasattr(row, field)
    )


def _sorted(rows: List[SQLModel], order_by: str, order_desc: bool) -> List[SQLModel]:
    if not rows or not hasattr(rows[0], order_by):
        return rows
    if order_desc:
        # ties keep newest-inserted first
        rows = list(reversed(rows))

    def key(row):
        value = getattr(row, order_by)
        return (value is not None, value)

    return sorted(rows, key=key, reverse=order_desc)


class MemoryRepository(Repository[ModelType]):
    """Repository over one table of a MemoryStore."""

    def __init__(self, store: "MemoryStore", model: Type[ModelType]):
        self.store = store
        self.model = model
        self.table = model.__table__.name

    @property
    def _rows(self) -> Dict[uuid.UUID, ModelType]:
        return self.store.tables[self.table]

    async def create(self, obj_in: dict) -> ModelType:
        row = self.model(**obj_in)
        self.store.check_constraints(self.table, row)
        self._rows[row.id] = row
        return row

    async def create_many(self, objs_in: List[dict]) -> List[ModelType]:
        created = []
        try:
            for obj_in in objs_in:
                created.append(await self.create(obj_in))
        except ConflictError:
            for row in created:
                self._rows.pop(row.id, None)
            raise
        return created

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        return self._rows.get(id)

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        for row in self._rows.values():
            if getattr(row, field) == value:
                return row
        return None

    async def list(
        self,
        filters: Optional[dict] = None,
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> List[ModelType]:
        rows = [row for row in self._rows.values() if _matches(row, filters)]
        return _sorted(rows, order_by, order_desc)

    async def list_in(
        self,
        field: str,
        values: Iterable[Any],
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> List[ModelType]:
        wanted = set(values)
        if not wanted:
            return []
        rows = [row for row in self._rows.values() if getattr(row, field) in wanted]
        return _sorted(rows, order_by, order_desc)

    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[ModelType]:
        row = self._rows.get(id)
        if row is None:
            return None

        changes = {field: value for field, value in obj_in.items() if hasattr(row, field)}
        if hasattr(row, "updated_at") and "updated_at" not in changes:
            changes["updated_at"] = utcnow()

        previous = {field: getattr(row, field) for field in changes}
        for field, value in changes.items():
            setattr(row, field, value)
        try:
            self.store.check_constraints(self.table, row)
        except ConflictError:
            for field, value in previous.items():
                setattr(row, field, value)
            raise
        return row

    async def delete(self, id: uuid.UUID) -> bool:
        return self.store.delete_row(self.table, id)

    async def delete_where(self, filters: dict) -> int:
        if not any(value is not None for value in filters.values()):
            raise ValueError("delete_where needs at least one filter")
        ids = [row.id for row in self._rows.values() if _matches(row, filters)]
        return sum(1 for id in ids if self.store.delete_row(self.table, id))

    async def delete_in(self, field: str, values: Iterable[Any]) -> int:
        wanted = set(values)
        ids = [row.id for row in self._rows.values() if getattr(row, field) in wanted]
        return sum(1 for id in ids if self.store.delete_row(self.table, id))

    async def count(self, filters: Optional[dict] = None) -> int:
        return sum(1 for row in self._rows.values() if _matches(row, filters))


class MemoryStore(Store):
    """Store holding every table in process memory."""

    def __init__(self):
        self.tables: Dict[str, Dict[uuid.UUID, SQLModel]] = {}
        # referenced table -> [(child table, child column, ondelete)]
        self._children: Dict[str, List[Tuple[str, str, Optional[str]]]] = {}

        self.profiles = self._register(Profile)
        self.sessions = self._register(AuthSession)
        self.campaigns = self._register(Campaign)
        self.assignments = self._register(CampaignAssignment)
        self.leads = self._register(Lead)
        self.history = self._register(LeadStatusHistory)
        self.customers = self._register(Customer)
        self.payments = self._register(Payment)

    def _register(self, model: Type[ModelType]) -> MemoryRepository[ModelType]:
        table = model.__table__
        self.tables[table.name] = {}
        for fk in table.foreign_keys:
            self._children.setdefault(fk.column.table.name, []).append(
                (table.name, fk.parent.name, fk.ondelete)
            )
        return MemoryRepository(self, model)

    def check_constraints(self, table_name: str, row: SQLModel) -> None:
        """Raise ConflictError on a unique or foreign-key violation."""
        table = row.__table__
        unique_sets = [(column.name,) for column in table.columns if column.unique]
        unique_sets += [
            tuple(column.name for column in constraint.columns)
            for constraint in table.constraints
            if isinstance(constraint, UniqueConstraint)
        ]
        for columns in unique_sets:
            values = tuple(getattr(row, column) for column in columns)
            if any(value is None for value in values):
                continue
            for other in self.tables[table_name].values():
                if other.id != row.id and tuple(getattr(other, column) for column in columns) == values:
                    raise ConflictError(
                        type(row).__name__,
                        message=f"{type(row).__name__} with ({', '.join(columns)}) already exists"
                    )

        for fk in table.foreign_keys:
            value = getattr(row, fk.parent.name)
            if value is not None and value not in self.tables[fk.column.table.name]:
                raise ConflictError(
                    type(row).__name__,
                    message=f"{type(row).__name__}.{fk.parent.name} references a missing {fk.column.table.name}"
                )

    def delete_row(self, table_name: str, id: uuid.UUID) -> bool:
        """Delete a row and apply ON DELETE rules to rows referencing it."""
        if id not in self.tables[table_name]:
            return False

        children = self._children.get(table_name, [])
        for child_table, column, ondelete in children:
            if ondelete is None and any(
                getattr(child, column) == id for child in self.tables[child_table].values()
            ):
                raise ConflictError(
                    table_name,
                    message=f"{table_name} is still referenced by {child_table}"
                )

        del self.tables[table_name][id]
        for child_table, column, ondelete in children:
            for child in list(self.tables[child_table].values()):
                if getattr(child, column) != id:
                    continue
                if ondelete == "CASCADE":
                    self.delete_row(child_table, child.id)
                elif ondelete == "SET NULL":
                    setattr(child, column, None)
        return True


@lru_cache()
def get_memory_store() -> MemoryStore:
    """Process-wide store used when STORAGE_BACKEND=memory."""
    return MemoryStore()
