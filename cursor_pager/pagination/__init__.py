"""Pagination module for cursor-based pagination."""

from .cursor import (
    CursorData,
    Direction,
    SortField,
    SortKey,
    encode_cursor,
    decode_cursor
)
from .paginator import (
    CursorPaginator,
    Page,
    PageRequest,
    RecordStore
)

__all__ = [
    "CursorData",
    "Direction",
    "SortField",
    "SortKey",
    "encode_cursor",
    "decode_cursor",
    "CursorPaginator",
    "Page",
    "PageRequest",
    "RecordStore"
]
