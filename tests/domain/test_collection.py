from __future__ import annotations

import pytest

from domain.collection import CollectionStore
from domain.exceptions import LocationNotFoundError
from domain.location import Location, Method


class TestCollectionStore:
    def test_create_inserts_with_fresh_id(self):
        store = CollectionStore()

        location = store.create("first", "https://example.com", Method.POST)

        assert location.id in store
        assert store.get(location.id) is location
        assert location.method == Method.POST

    def test_insert_is_upsert(self):
        store = CollectionStore()
        store.insert("id-1", Location(id="id-1", name="old"))
        store.insert("id-1", Location(id="id-1", name="new"))

        assert len(store) == 1
        assert store.get("id-1").name == "new"

    def test_remove_returns_location(self):
        store = CollectionStore()
        location = store.create("x", "")

        removed = store.remove(location.id)

        assert removed is location
        assert location.id not in store

    def test_remove_unknown_raises(self):
        with pytest.raises(LocationNotFoundError):
            CollectionStore().remove("missing")

    def test_get_unknown_raises_and_find_returns_none(self):
        store = CollectionStore()
        with pytest.raises(LocationNotFoundError):
            store.get("missing")
        assert store.find("missing") is None

    def test_ids_keep_insertion_order(self):
        store = CollectionStore()
        for i in ("c", "a", "b"):
            store.insert(i, Location(id=i, name=i))
        assert store.ids() == ["c", "a", "b"]
        assert [loc.id for loc in store] == ["c", "a", "b"]
