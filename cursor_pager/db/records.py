"""PostgreSQL record store for the cursor paginator."""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

import asyncpg
from asyncpg import Pool
from pydantic import BaseModel

from ..models.records import Record, RECORD_SORT_KEY
from ..pagination.cursor import SortKey
from .connection import get_db_pool


logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote_identifier(name: str) -> str:
    """Double-quote a table or column name after checking it is a plain identifier."""
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return f'"{name}"'


def build_where_clause(
    sort_key: SortKey,
    position: Optional[tuple] = None,
    descending: bool = False,
    filters: Optional[Mapping[str, Any]] = None
) -> tuple[str, List[Any]]:
    """Build WHERE clause for a seek query.

    The cursor condition is a row-value comparison over every sort column and
    the id, e.g. ``("created_at", "id") > ($1, $2)``, which PostgreSQL evaluates
    lexicographically and serves from a matching composite index.

    Args:
        sort_key: Sort definition of the table
        position: Comparison tuple to seek from, None for no bound
        descending: Seek below the position instead of above it
        filters: Equality filters scoping the collection

    Returns:
        Tuple of (where_clause, parameters)
    """
    conditions = []
    params: List[Any] = []

    for column, value in (filters or {}).items():
        params.append(value)
        conditions.append(f"{quote_identifier(column)} = ${len(params)}")

    if position is not None:
        columns = sort_key.column_names
        if len(position) != len(columns):
            raise ValueError(f"Position has {len(position)} values, expected {len(columns)}")

        placeholders = []
        for value in position:
            params.append(value)
            placeholders.append(f"${len(params)}")

        op = "<" if descending else ">"
        lhs = ", ".join(quote_identifier(c) for c in columns)
        conditions.append(f"({lhs}) {op} ({', '.join(placeholders)})")

    where_clause = " AND ".join(conditions) if conditions else "TRUE"
    return where_clause, params


def build_order_clause(sort_key: SortKey, descending: bool = False) -> str:
    """Build ORDER BY clause; the id column always comes last."""
    order = "DESC" if descending else "ASC"
    return "ORDER BY " + ", ".join(f"{quote_identifier(c)} {order}" for c in sort_key.column_names)


class PostgresRecordStore:
    """Serve seek queries from a PostgreSQL table.

    Each page is read by a single statement, which PostgreSQL answers from one
    MVCC snapshot, so concurrent writers never split a page.

    Column values are passed through as asyncpg decodes them. Pools created
    by ``DatabaseManager`` decode json and jsonb columns via ``init_connection``;
    pass that as ``init=`` when building a pool by hand.
    """

    def __init__(
        self,
        sort_key: SortKey = RECORD_SORT_KEY,
        table: str = "records",
        columns: Optional[Sequence[str]] = None,
        filters: Optional[Mapping[str, Any]] = None,
        model: Optional[type[BaseModel]] = Record,
        pool: Optional[Pool] = None
    ):
        self.sort_key = sort_key
        self.table = quote_identifier(table)
        self.columns = list(columns) if columns else None
        self.filters = dict(filters or {})
        self.model = model
        self._pool = pool

        # Fail on bad identifiers now rather than at query time
        for name in list(sort_key.column_names) + list(self.filters) + (self.columns or []):
            quote_identifier(name)

    def _select_list(self) -> str:
        if self.columns is None:
            return "*"
        names = list(self.columns)
        names += [c for c in self.sort_key.column_names if c not in names]
        return ", ".join(quote_identifier(c) for c in names)

    def build_query(self, position: Optional[tuple], limit: int, descending: bool) -> tuple[str, List[Any]]:
        """Build the full seek statement and its parameters."""
        where_clause, params = build_where_clause(self.sort_key, position, descending, self.filters)
        order_clause = build_order_clause(self.sort_key, descending)
        params.append(limit)
        query = (
            f"SELECT {self._select_list()} FROM {self.table} "
            f"WHERE {where_clause} {order_clause} LIMIT ${len(params)}"
        )
        return query, params

    def _convert_row(self, row: Mapping[str, Any]) -> Any:
        row_dict: Dict[str, Any] = dict(row)
        if self.model is None:
            return row_dict
        return self.model.model_validate(row_dict)

    async def seek(self, position: Optional[tuple], limit: int, descending: bool) -> List[Any]:
        """Return up to ``limit`` rows beyond ``position`` in seek order."""
        query, params = self.build_query(position, limit, descending)
        pool = self._pool or await get_db_pool()

        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(query, *params)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error seeking {self.table}: {e}")
            raise

        logger.debug(f"Seek on {self.table} returned {len(rows)} rows")
        return [self._convert_row(row) for row in rows]
