# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import logging
from typing import Dict, List, Mapping

from .base import CollectionName, PersistenceError, PersistenceProvider, Record, collection_key

logger = logging.getLogger(__name__)


class InMemoryStore(PersistenceProvider):
    """
    Process-local store keeping each collection as a JSON string.

    Serialising on write gives the same isolation as a browser key-value
    store: callers can never mutate stored records through shared references.
    """

    def __init__(self) -> None:
        self._blobs: Dict[str, str] = {}

    def load(self, collection: CollectionName) -> List[Record]:
        key = collection_key(collection)
        blob = self._blobs.get(key)
        if blob is None:
            return []
        try:
            records = json.loads(blob)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt payload for collection '{key}'") from e
        if not isinstance(records, list):
            raise PersistenceError(f"Collection '{key}' does not hold a list of records")
        return records

    def save_many(self, batch: Mapping[CollectionName, List[Record]]) -> None:
        # Serialise everything before touching the store
        try:
            staged = {collection_key(name): json.dumps(records) for name, records in batch.items()}
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Records are not JSON serialisable: {e}") from e
        self._blobs.update(staged)
        logger.debug(f"Saved collections {sorted(staged)} to memory")

    def clear(self) -> None:
        self._blobs.clear()

    def __contains__(self, collection: CollectionName) -> bool:
        return collection_key(collection) in self._blobs
