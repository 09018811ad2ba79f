# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import duckdb
import pytest

from elitekpi.core.primitives import Collection
from elitekpi.store import DuckDBStore, PersistenceError
from elitekpi.store.duckdb_store import DATABASE_ENV_VAR


class _FailingConnection:
    """Delegates to a DuckDB connection but fails the n-th INSERT."""

    def __init__(self, wrapped, fail_on_insert: int) -> None:
        self.wrapped = wrapped
        self.fail_on_insert = fail_on_insert
        self.inserts = 0

    def execute(self, query, *args, **kwargs):
        if query.lstrip().upper().startswith("INSERT"):
            self.inserts += 1
            if self.inserts == self.fail_on_insert:
                raise duckdb.IOException("simulated write failure")
        return self.wrapped.execute(query, *args, **kwargs)

    def __getattr__(self, name):
        return getattr(self.wrapped, name)


@pytest.fixture
def duck():
    with DuckDBStore() as store:
        yield store


class TestDuckDBStore:
    def test_empty_collection(self, duck):
        assert duck.load(Collection.DEALS) == []

    def test_save_and_replace(self, duck):
        duck.save(Collection.DEALS, [{"id": "d-1"}])
        duck.save(Collection.DEALS, [{"id": "d-1"}, {"id": "d-2"}])
        assert duck.load(Collection.DEALS) == [{"id": "d-1"}, {"id": "d-2"}]

    def test_save_many_writes_every_collection(self, duck):
        duck.save_many(
            {
                Collection.DEALS: [],
                Collection.EXPENSES: [{"id": "e-1", "total_cost": 14.0}],
            }
        )
        assert duck.load(Collection.DEALS) == []
        assert duck.load(Collection.EXPENSES) == [{"id": "e-1", "total_cost": 14.0}]

    def test_unserialisable_batch_writes_nothing(self, duck):
        duck.save(Collection.DEALS, [{"id": "d-1"}])
        with pytest.raises(PersistenceError):
            duck.save_many(
                {
                    Collection.DEALS: [],
                    Collection.ACTIVITIES: [{"when": object()}],
                }
            )
        assert duck.load(Collection.DEALS) == [{"id": "d-1"}]
        assert duck.load(Collection.ACTIVITIES) == []

    def test_failed_insert_rolls_back_whole_batch(self, duck):
        duck.save(Collection.DEALS, [{"id": "d-1"}])
        duck.con = _FailingConnection(duck.con, fail_on_insert=2)

        with pytest.raises(PersistenceError, match="Could not save collections"):
            duck.save_many(
                {
                    Collection.DEALS: [],
                    Collection.EXPENSES: [{"id": "e-1"}],
                }
            )

        duck.con = duck.con.wrapped
        assert duck.load(Collection.DEALS) == [{"id": "d-1"}]
        assert duck.load(Collection.EXPENSES) == []

    def test_corrupt_payload(self, duck):
        duck.con.execute(
            "INSERT INTO collections (name, payload) VALUES ('expenses', 'oops')"
        )
        with pytest.raises(PersistenceError, match="Corrupt payload"):
            duck.load(Collection.EXPENSES)

    def test_file_database_persists(self, tmp_path):
        path = str(tmp_path / "elitekpi.duckdb")
        with DuckDBStore(path) as first:
            first.save(Collection.SETTINGS, [{"annual_gci_goal": 150000.0}])
        with DuckDBStore(path) as second:
            assert second.load(Collection.SETTINGS) == [{"annual_gci_goal": 150000.0}]

    def test_from_env(self, tmp_path, monkeypatch):
        path = str(tmp_path / "env.duckdb")
        monkeypatch.setenv(DATABASE_ENV_VAR, path)
        with DuckDBStore.from_env() as store:
            assert store.database == path

    def test_from_env_default(self, monkeypatch):
        monkeypatch.delenv(DATABASE_ENV_VAR, raising=False)
        with DuckDBStore.from_env() as store:
            assert store.database == ":memory:"
