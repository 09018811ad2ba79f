# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
DuckDB-backed persistence provider.

Each collection is one row of a `collections` table holding the JSON payload.
Batches are written inside a single DuckDB transaction, so a multi-collection
write (such as a cascading deal delete) commits completely or not at all.
Use `":memory:"` for a throwaway store or a file path for durable storage.
"""

from __future__ import annotations

import json
import logging
import os
from typing import List, Mapping

import duckdb

from .base import CollectionName, PersistenceError, PersistenceProvider, Record, collection_key

logger = logging.getLogger(__name__)

DATABASE_ENV_VAR = "ELITEKPI_DATABASE"


class DuckDBStore(PersistenceProvider):
    """
    Durable key-value store of record collections on DuckDB.

    Example:
        ```python
        from elitekpi.repository import Repository
        from elitekpi.store import DuckDBStore

        with DuckDBStore("elitekpi.duckdb") as store:
            repo = Repository(store)
            repo.create_deal("Jane Smith", "12 Elm Street")
        ```
    """

    def __init__(self, database: str = ":memory:") -> None:
        """Open (or create) the database and ensure the collections table exists."""
        self.database = database
        self.table_name = "collections"
        try:
            self.con = duckdb.connect(database=database, read_only=False)
            self.con.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.table_name} (
                    name VARCHAR PRIMARY KEY,    -- collection name
                    payload VARCHAR NOT NULL,    -- JSON list of records
                    updated_at TIMESTAMP
                )
                """
            )
        except duckdb.Error as e:
            raise PersistenceError(f"Could not open DuckDB store at {database!r}: {e}") from e
        logger.debug(f"DuckDB store opened at {database!r}")

    @classmethod
    def from_env(cls, default: str = ":memory:") -> "DuckDBStore":
        """Open the database named by ELITEKPI_DATABASE, or `default`."""
        return cls(os.environ.get(DATABASE_ENV_VAR, default))

    def load(self, collection: CollectionName) -> List[Record]:
        key = collection_key(collection)
        try:
            row = self.con.execute(
                f"SELECT payload FROM {self.table_name} WHERE name = ?", [key]
            ).fetchone()
        except duckdb.Error as e:
            raise PersistenceError(f"Could not read collection '{key}': {e}") from e

        if row is None:
            return []
        try:
            records = json.loads(row[0])
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt payload for collection '{key}'") from e
        if not isinstance(records, list):
            raise PersistenceError(f"Collection '{key}' does not hold a list of records")
        return records

    def save_many(self, batch: Mapping[CollectionName, List[Record]]) -> None:
        try:
            payloads = {collection_key(name): json.dumps(records) for name, records in batch.items()}
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Records are not JSON serialisable: {e}") from e

        try:
            self.con.begin()
            for key, payload in payloads.items():
                self.con.execute(
                    f"INSERT OR REPLACE INTO {self.table_name} (name, payload, updated_at) "
                    "VALUES (?, ?, current_timestamp)",
                    [key, payload],
                )
            self.con.commit()
        except duckdb.Error as e:
            logger.error(f"Failed to commit collections {sorted(payloads)}: {e}")
            self._rollback()
            raise PersistenceError(f"Could not save collections {sorted(payloads)}: {e}") from e

        logger.debug(f"Committed collections {sorted(payloads)} to DuckDB")

    def _rollback(self) -> None:
        try:
            self.con.rollback()
        except duckdb.Error as e:
            # No open transaction (e.g. BEGIN itself failed)
            logger.debug(f"Rollback skipped: {e}")

    def close(self) -> None:
        self.con.close()

    def __enter__(self) -> "DuckDBStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
