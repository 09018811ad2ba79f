# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import pytest

from elitekpi.core.primitives import Collection
from elitekpi.store import InMemoryStore, PersistenceError


class TestInMemoryStore:
    def test_unsaved_collection_is_empty(self, store):
        assert store.load(Collection.DEALS) == []
        assert Collection.DEALS not in store

    def test_save_and_load(self, store):
        store.save("deals", [{"id": "d-1"}])
        assert store.load(Collection.DEALS) == [{"id": "d-1"}]
        assert "deals" in store

    def test_loaded_records_are_copies(self, store):
        store.save(Collection.EXPENSES, [{"id": "e-1"}])
        store.load(Collection.EXPENSES)[0]["id"] = "mutated"
        assert store.load(Collection.EXPENSES) == [{"id": "e-1"}]

    def test_save_many_is_all_or_nothing(self, store):
        store.save(Collection.DEALS, [{"id": "d-1"}])
        with pytest.raises(PersistenceError, match="not JSON serialisable"):
            store.save_many(
                {
                    Collection.DEALS: [{"id": "d-2"}],
                    Collection.EXPENSES: [{"id": object()}],
                }
            )
        assert store.load(Collection.DEALS) == [{"id": "d-1"}]
        assert Collection.EXPENSES not in store

    def test_corrupt_payload(self, store):
        store._blobs["activities"] = "{not json"
        with pytest.raises(PersistenceError, match="Corrupt payload"):
            store.load(Collection.ACTIVITIES)

    def test_non_list_payload(self, store):
        store._blobs["activities"] = '{"id": 1}'
        with pytest.raises(PersistenceError, match="does not hold a list"):
            store.load(Collection.ACTIVITIES)

    def test_unknown_collection_rejected(self, store):
        with pytest.raises(ValueError):
            store.load("contacts")

    def test_clear(self, store):
        store.save(Collection.SETTINGS, [{}])
        store.clear()
        assert Collection.SETTINGS not in store
