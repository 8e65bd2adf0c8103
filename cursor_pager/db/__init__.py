"""Record stores for the cursor paginator."""

from .connection import DatabaseManager, db_manager, get_db_pool, init_connection
from .memory import InMemoryRecordStore
from .records import PostgresRecordStore, build_where_clause, build_order_clause

__all__ = [
    "DatabaseManager",
    "db_manager",
    "get_db_pool",
    "init_connection",
    "InMemoryRecordStore",
    "PostgresRecordStore",
    "build_where_clause",
    "build_order_clause"
]
