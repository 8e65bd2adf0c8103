"""cursor-pager: stable cursor pagination over concurrently written collections."""

from .errors import InvalidCursorError, InvalidLimitError
from .pagination import (
    CursorData,
    CursorPaginator,
    Direction,
    Page,
    PageRequest,
    RecordStore,
    SortField,
    SortKey,
    decode_cursor,
    encode_cursor
)
from .db import InMemoryRecordStore, PostgresRecordStore

__all__ = [
    "CursorData",
    "CursorPaginator",
    "Direction",
    "InMemoryRecordStore",
    "InvalidCursorError",
    "InvalidLimitError",
    "Page",
    "PageRequest",
    "PostgresRecordStore",
    "RecordStore",
    "SortField",
    "SortKey",
    "decode_cursor",
    "encode_cursor"
]
