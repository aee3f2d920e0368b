# sitebuilder/storage/row_store.py
"""
Row-level access to the backing store.

The site core only ever needs these operations:
- read one row by id (or by a unique column)
- read all rows belonging to a website
- update named fields of one row (by id, or the website's single row)
- insert one row
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy import MetaData, select, update
from sqlalchemy.engine import Engine

from sitebuilder.utils.transaction import transactional

Row = Dict[str, Any]

PARENT_KEY = "website_id"


class RowStore(Protocol):
    async def read_one_by_id(self, table: str, record_id: str) -> Optional[Row]: ...

    async def find_one(self, table: str, **criteria: Any) -> Optional[Row]: ...

    async def read_many_by_parent_id(
        self,
        table: str,
        parent_id: str,
        *,
        parent_key: str = PARENT_KEY,
        order_by: Optional[str] = None,
    ) -> List[Row]: ...

    async def update_fields(
        self,
        table: str,
        values: Row,
        *,
        record_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        parent_key: str = PARENT_KEY,
    ) -> int: ...

    async def insert_one(self, table: str, values: Row) -> Row: ...


class SqlAlchemyRowStore:
    """
    RowStore over a SQLAlchemy engine.

    Each operation opens its own transaction and runs in a worker thread so
    the event loop is never blocked on a database round trip.
    """

    def __init__(self, engine: Engine, metadata: MetaData):
        self.engine = engine
        self.metadata = metadata

    def _table(self, name: str):
        try:
            return self.metadata.tables[name]
        except KeyError:
            raise LookupError(f"Unknown table: {name}") from None

    async def _run(self, fn):
        def work():
            with transactional(self.engine) as conn:
                return fn(conn)

        return await asyncio.to_thread(work)

    # ------------------------
    # Reads
    # ------------------------

    async def read_one_by_id(self, table: str, record_id: str) -> Optional[Row]:
        return await self.find_one(table, id=record_id)

    async def find_one(self, table: str, **criteria: Any) -> Optional[Row]:
        t = self._table(table)
        stmt = select(t).where(*(t.c[key] == value for key, value in criteria.items()))

        def fetch(conn):
            row = conn.execute(stmt.limit(1)).mappings().first()
            return dict(row) if row is not None else None

        return await self._run(fetch)

    async def read_many_by_parent_id(
        self,
        table: str,
        parent_id: str,
        *,
        parent_key: str = PARENT_KEY,
        order_by: Optional[str] = None,
    ) -> List[Row]:
        t = self._table(table)
        stmt = select(t).where(t.c[parent_key] == parent_id)
        if order_by is not None:
            stmt = stmt.order_by(t.c[order_by].asc(), t.c.id.asc())

        def fetch(conn):
            return [dict(row) for row in conn.execute(stmt).mappings()]

        return await self._run(fetch)

    # ------------------------
    # Writes
    # ------------------------

    async def update_fields(
        self,
        table: str,
        values: Row,
        *,
        record_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        parent_key: str = PARENT_KEY,
    ) -> int:
        """
        Update `values` on one row and return the number of rows touched.

        With a record_id the row is addressed by id (and additionally scoped to
        parent_id when given); otherwise by parent_id alone.
        """
        if record_id is None and parent_id is None:
            raise ValueError("record_id or parent_id is required")

        t = self._table(table)
        conditions = []
        if record_id is not None:
            conditions.append(t.c.id == record_id)
        if parent_id is not None:
            conditions.append(t.c[parent_key] == parent_id)

        stmt = update(t).where(*conditions).values(**values)

        def write(conn):
            return conn.execute(stmt).rowcount

        return await self._run(write)

    async def insert_one(self, table: str, values: Row) -> Row:
        t = self._table(table)

        def write(conn):
            result = conn.execute(t.insert().values(**values))
            pk = result.inserted_primary_key[0]
            return dict(conn.execute(select(t).where(t.c.id == pk)).mappings().one())

        return await self._run(write)
