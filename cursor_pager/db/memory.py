"""In-process record store, kept sorted by the pagination key."""

import logging
from bisect import bisect_left, bisect_right
from typing import Any, Dict, Iterable, List, Optional

from ..pagination.cursor import SortKey

logger = logging.getLogger(__name__)


class InMemoryRecordStore:
    """A sorted collection that answers seek queries with binary search.

    ``seek`` never awaits, so on a single event loop each call reads one
    consistent snapshot even while other tasks insert and delete.
    """

    def __init__(self, sort_key: SortKey, records: Iterable[Any] = ()):
        self.sort_key = sort_key
        self._keys: List[tuple] = []
        self._records: List[Any] = []
        self._positions: Dict[Any, tuple] = {}

        for record in records:
            self.insert(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records))

    def insert(self, record: Any) -> None:
        """Add a record; an existing record with the same id is replaced."""
        position = self.sort_key.position_of(record)
        if any(value is None for value in position):
            raise ValueError(f"Record has null sort values: {position}")

        item_id = position[-1]
        if item_id in self._positions:
            # A changed sort value is a delete followed by an insert
            self.delete(item_id)

        index = bisect_left(self._keys, position)
        self._keys.insert(index, position)
        self._records.insert(index, record)
        self._positions[item_id] = position

    def delete(self, item_id: Any) -> bool:
        """Remove a record by id; returns False when it is not present."""
        position = self._positions.pop(item_id, None)
        if position is None:
            logger.debug(f"Record {item_id} not found")
            return False

        index = bisect_left(self._keys, position)
        del self._keys[index]
        del self._records[index]
        return True

    async def seek(self, position: Optional[tuple], limit: int, descending: bool) -> List[Any]:
        """Return up to ``limit`` records strictly beyond ``position``."""
        if limit <= 0:
            return []

        if not descending:
            start = 0 if position is None else bisect_right(self._keys, position)
            return self._records[start:start + limit]

        end = len(self._keys) if position is None else bisect_left(self._keys, position)
        return self._records[max(end - limit, 0):end][::-1]
