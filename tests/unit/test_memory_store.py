"""Tests for the in-memory record store."""

import pytest

from cursor_pager.db.memory import InMemoryRecordStore


def ids(rows):
    return [r["id"] for r in rows]


class TestInMemoryRecordStore:
    """Seek semantics and mutation."""

    def test_keeps_sort_order(self, sort_key):
        store = InMemoryRecordStore(sort_key, [{"t": 2, "id": 9}, {"t": 1, "id": 5}, {"t": 2, "id": 1}])

        assert len(store) == 3
        assert ids(store) == [5, 1, 9]

    @pytest.mark.asyncio
    async def test_seek_ascending(self, store):
        assert ids(await store.seek(None, 2, False)) == [1, 2]
        assert ids(await store.seek((1, 2), 10, False)) == [3, 4, 5]
        assert ids(await store.seek((2, 3), 1, False)) == [4]
        assert ids(await store.seek((3, 5), 10, False)) == []

    @pytest.mark.asyncio
    async def test_seek_descending(self, store):
        assert ids(await store.seek(None, 2, True)) == [5, 4]
        assert ids(await store.seek((2, 3), 10, True)) == [2, 1]
        assert ids(await store.seek((1, 1), 10, True)) == []

    @pytest.mark.asyncio
    async def test_seek_between_existing_positions(self, store):
        # A position whose record was never stored still splits the order
        assert ids(await store.seek((1, 99), 10, False)) == [3, 4, 5]
        assert ids(await store.seek((1, 99), 10, True)) == [2, 1]

    @pytest.mark.asyncio
    async def test_seek_zero_limit(self, store):
        assert await store.seek(None, 0, False) == []

    def test_delete(self, store):
        assert store.delete(3) is True
        assert store.delete(3) is False
        assert ids(store) == [1, 2, 4, 5]

    def test_insert_replaces_same_id(self, store):
        # A changed sort value is a delete plus insert
        store.insert({"t": 9, "id": 1})

        assert len(store) == 5
        assert ids(store) == [2, 3, 4, 5, 1]

    def test_null_sort_value_rejected(self, store):
        with pytest.raises(ValueError, match="null"):
            store.insert({"t": None, "id": 6})
