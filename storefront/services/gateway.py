"""
Remote data gateway client

Table-level query builder over the hosted Postgres database: select with
equality filters, ordering and ilike search; insert; update; delete; upsert
on a unique constraint; count; and a transaction scope. Rows go in and come
out as plain dicts. Services never touch the session directly.

Every SQLAlchemy failure is re-raised as GatewayError so callers only ever
see one failure type from this layer.
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from fastapi import Depends
from sqlalchemy import Table, delete, func, insert, literal, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import storefront.models  # noqa: F401  registers every table on Base.metadata
from storefront.core.database import Base, get_db
from storefront.core.exceptions import GatewayError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
Filters = Mapping[str, Any]
Search = Tuple[str, Sequence[str]]

_MULTI_VALUE_TYPES = (list, tuple, set, frozenset)


@dataclass(frozen=True)
class Relation:
    """
    Related rows to attach to each selected row.

    `local_key` on the selected row matches `remote_key` on `table`.
    With many=False the attachment is a single row (or None).
    """
    table: str
    local_key: str
    remote_key: str = "id"
    many: bool = False


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so a search term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class DataGateway:
    """Table-level client bound to one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise GatewayError(f"Unknown table: {name}", table=name, operation="lookup")

    def _where(self, table: Table, filters: Optional[Filters]) -> list:
        clauses = []
        for column, value in (filters or {}).items():
            if isinstance(value, _MULTI_VALUE_TYPES):
                clauses.append(table.c[column].in_(list(value)))
            elif value is None:
                clauses.append(table.c[column].is_(None))
            else:
                clauses.append(table.c[column] == value)
        return clauses

    async def _execute(self, stmt, table: str, operation: str):
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Gateway {operation} on {table} failed: {type(e).__name__}", exc_info=True)
            raise GatewayError(f"{operation} on {table} failed", table=table, operation=operation) from e

    async def select(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        filters: Optional[Filters] = None,
        order_by: Union[str, Sequence[str], None] = None,
        descending: bool = False,
        search: Optional[Search] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        embed: Optional[Mapping[str, Relation]] = None,
    ) -> List[Row]:
        t = self._table(table)
        stmt = select(*[t.c[c] for c in columns]) if columns else select(t)

        clauses = self._where(t, filters)
        if search:
            term, search_columns = search
            pattern = f"%{escape_like(term)}%"
            clauses.append(or_(*[t.c[c].ilike(pattern, escape="\\") for c in search_columns]))
        if clauses:
            stmt = stmt.where(*clauses)

        if order_by:
            keys = [order_by] if isinstance(order_by, str) else list(order_by)
            stmt = stmt.order_by(*[t.c[k].desc() if descending else t.c[k].asc() for k in keys])
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._execute(stmt, table, "select")
        rows = [dict(r._mapping) for r in result.all()]

        for name, relation in (embed or {}).items():
            await self._attach(rows, name, relation)
        return rows

    async def select_one(self, table: str, **kwargs) -> Optional[Row]:
        rows = await self.select(table, limit=1, **kwargs)
        return rows[0] if rows else None

    async def _attach(self, rows: List[Row], name: str, relation: Relation) -> None:
        keys = {row[relation.local_key] for row in rows if row.get(relation.local_key) is not None}
        related = []
        if keys:
            related = await self.select(
                relation.table,
                filters={relation.remote_key: keys},
                order_by=relation.remote_key if relation.many else None,
            )

        if relation.many:
            grouped: Dict[Any, List[Row]] = {}
            for item in related:
                grouped.setdefault(item[relation.remote_key], []).append(item)
            for row in rows:
                row[name] = grouped.get(row.get(relation.local_key), [])
        else:
            by_key = {item[relation.remote_key]: item for item in related}
            for row in rows:
                row[name] = by_key.get(row.get(relation.local_key))

    async def insert(self, table: str, rows: Union[Row, Iterable[Row]]) -> Union[Row, List[Row]]:
        """Insert one row (returns the row) or many rows (returns the list)."""
        t = self._table(table)
        single = isinstance(rows, Mapping)
        values = [dict(rows)] if single else [dict(r) for r in rows]
        if not values:
            return []

        stmt = insert(t).values(values).returning(*t.c)
        result = await self._execute(stmt, table, "insert")
        inserted = [dict(r._mapping) for r in result.all()]
        return inserted[0] if single else inserted

    async def update(self, table: str, patch: Row, filters: Filters) -> int:
        if not filters:
            raise GatewayError("Refusing unfiltered update", table=table, operation="update")
        t = self._table(table)
        stmt = update(t).where(*self._where(t, filters)).values(**patch)
        result = await self._execute(stmt, table, "update")
        return result.rowcount

    async def delete(self, table: str, filters: Filters) -> int:
        if not filters:
            raise GatewayError("Refusing unfiltered delete", table=table, operation="delete")
        t = self._table(table)
        stmt = delete(t).where(*self._where(t, filters))
        result = await self._execute(stmt, table, "delete")
        return result.rowcount

    async def upsert(
        self,
        table: str,
        row: Row,
        conflict: Sequence[str],
        increment: Optional[Sequence[str]] = None,
    ) -> Row:
        """
        Insert `row`, or on a `conflict` key collision update the existing row.

        Columns in `increment` are added to the stored value instead of
        replacing it, which makes add-to-quantity a single atomic statement.
        """
        t = self._table(table)
        stmt = pg_insert(t).values(**row)

        increment = list(increment or [])
        set_ = {c: t.c[c] + stmt.excluded[c] for c in increment}
        for column in row:
            if column not in conflict and column not in set_:
                set_[column] = stmt.excluded[column]
        if "updated_at" in t.c and "updated_at" not in set_:
            set_["updated_at"] = func.now()

        stmt = stmt.on_conflict_do_update(
            index_elements=[t.c[c] for c in conflict],
            set_=set_,
        ).returning(*t.c)
        result = await self._execute(stmt, table, "upsert")
        return dict(result.one()._mapping)

    async def count(self, table: str, filters: Optional[Filters] = None) -> int:
        t = self._table(table)
        stmt = select(func.count()).select_from(t)
        clauses = self._where(t, filters)
        if clauses:
            stmt = stmt.where(*clauses)
        result = await self._execute(stmt, table, "count")
        return result.scalar() or 0

    async def ping(self) -> None:
        await self._execute(select(literal(1)), "-", "ping")

    @asynccontextmanager
    async def transaction(self):
        """
        All-or-nothing scope. Runs as a SAVEPOINT inside the request's
        session so a failure rolls back only the work done in the block.
        """
        try:
            async with self.session.begin_nested():
                yield self
        except SQLAlchemyError as e:
            raise GatewayError("Transaction failed", operation="transaction") from e


async def get_gateway(db: AsyncSession = Depends(get_db)) -> DataGateway:
    """Dependency for a gateway bound to the request's session."""
    return DataGateway(db)
