"""
db/query.py -- Generic create/find/update/delete over one SQLAlchemy Table.

Pattern: Repository + Data Mapper. TableAccessor is the generic repository;
row_factory is the mapper that turns a projected row into a domain object.
Concrete stores (users/store.py) bind it to a Table and a dataclass.

Security:
  All values travel as bound parameters. Column identifiers come from the
  Table definition only; any field name that is not one of the table's columns
  is rejected before a statement is built, so client payloads can never name
  an arbitrary column.

  Hidden columns (e.g. password) may be used as filters but are never part of
  the projection, so no read or write operation returns them.

Concurrency:
  The duplicate check in create() and the existence checks in update_by_id()
  and delete_by_id() are check-then-act: they are NOT atomic with the write
  that follows. Two concurrent creates with the same unique value can both
  pass the lookup. A store that declares a UNIQUE index gets an IntegrityError
  on the second insert, which is mapped to Conflict as well.

Layer rule: imports core/ only. No imports from api/, auth/ or users/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Table, and_, delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.errors import BadRequest, Conflict, InternalError, NotFound
from db.engine import Database

logger = logging.getLogger("userdir.db")

_TIMESTAMP_COLUMNS = ("created_at", "updated_at")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TableAccessor:
    """Repository bound to one table.

    Args:
        database:    Database handle that executes the statements.
        table:       The SQLAlchemy Core Table to operate on. Must have an
                     integer "id" primary key.
        entity:      Human-readable name used in error messages ("User").
        hidden:      Columns never returned by any operation.
        protected:   Columns silently dropped from update payloads.
        unique:      Columns checked for an existing value before insert.
        row_factory: Maps a projected row dict to the returned object.
    """

    def __init__(
        self,
        database: Database,
        table: Table,
        *,
        entity: str,
        hidden: tuple[str, ...] = (),
        protected: tuple[str, ...] = (),
        unique: tuple[str, ...] = (),
        row_factory: Callable[[dict], Any] = dict,
    ) -> None:
        self.db = database
        self.table = table
        self.entity = entity
        self.protected = frozenset(protected)
        self.unique = unique
        self.row_factory = row_factory

        columns = {c.name for c in table.columns}
        self._filterable = frozenset(columns)
        self._writable = frozenset(columns - {"id", *_TIMESTAMP_COLUMNS})
        self._timestamped = all(name in columns for name in _TIMESTAMP_COLUMNS)
        self._projection = [c for c in table.columns if c.name not in hidden]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _bind(self, fields: Mapping[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
        """Return fields as a dict after checking every key against the allowlist."""
        unknown = set(fields) - allowed
        if unknown:
            raise BadRequest(f"Unknown {self.entity.lower()} field(s): {', '.join(sorted(unknown))}")
        return dict(fields)

    @contextmanager
    def _wrap_errors(self, action: str) -> Iterator[None]:
        """Re-raise driver errors as InternalError. ApiErrors pass through untouched."""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.exception("%s %s failed", self.table.name, action)
            raise InternalError("Something went wrong") from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_many(self, filters: Mapping[str, Any] | None = None) -> list[Any]:
        """Return every row matching all filters (exact equality), newest first.

        An empty or missing filter mapping returns all rows. No match returns
        an empty list, never an error.
        """
        criteria = self._bind(filters or {}, self._filterable)
        stmt = select(*self._projection)
        if criteria:
            stmt = stmt.where(and_(*(self.table.c[name] == value for name, value in criteria.items())))
        stmt = stmt.order_by(self.table.c.id.desc())
        with self._wrap_errors("select"):
            rows = await self.db.fetch_all(stmt)
        return [self.row_factory(row) for row in rows]

    async def find_one(self, filters: Mapping[str, Any]) -> Any | None:
        """Return the first find_many() match or None. Absence is not an error here."""
        results = await self.find_many(filters)
        return results[0] if results else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, fields: Mapping[str, Any]) -> Any:
        """Insert a record and return it (projected). Raises Conflict on a duplicate unique value."""
        values = self._bind(fields, self._writable)
        for name in self.unique:
            if name in values and await self.find_one({name: values[name]}) is not None:
                raise Conflict(f"{self.entity} with {name}: {values[name]} already exists")

        if self._timestamped:
            now = _now_iso()
            values["created_at"] = now
            values["updated_at"] = now

        with self._wrap_errors("insert"):
            try:
                new_id = await self.db.insert(self.table.insert().values(**values))
            except IntegrityError as exc:
                raise Conflict(f"{self.entity} already exists") from exc
        logger.debug("%s insert id=%s", self.table.name, new_id)
        return await self._get_or_not_found(new_id)

    async def update_by_id(self, data: Mapping[str, Any], record_id: int) -> Any:
        """Update the given columns of one record and return the updated record.

        Protected columns (password) are dropped silently before validation.
        """
        values = self._bind({k: v for k, v in data.items() if k not in self.protected}, self._writable)
        await self._get_or_not_found(record_id)

        if self._timestamped:
            values["updated_at"] = _now_iso()
        if values:
            with self._wrap_errors("update"):
                await self.db.execute(update(self.table).where(self.table.c.id == record_id).values(**values))
        return await self._get_or_not_found(record_id)

    async def delete_by_id(self, record_id: int) -> Any:
        """Delete one record and return its pre-deletion snapshot."""
        snapshot = await self._get_or_not_found(record_id)
        with self._wrap_errors("delete"):
            await self.db.execute(delete(self.table).where(self.table.c.id == record_id))
        return snapshot

    async def _get_or_not_found(self, record_id: int) -> Any:
        record = await self.find_one({"id": record_id})
        if record is None:
            raise NotFound(f"{self.entity} with ID: {record_id} not found")
        return record
