"""Data models for cursor-pager."""

from .records import Record, RECORD_SORT_KEY

__all__ = [
    "Record",
    "RECORD_SORT_KEY"
]
