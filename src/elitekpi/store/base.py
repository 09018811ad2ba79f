# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Persistence provider contract.

Each collection (deals, expenses, activities, settings) is an independent
keyed blob holding a list of JSON-compatible records. Providers never
interpret the records; validation happens in the repository.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Union

from ..core.primitives.enums import Collection

Record = Dict[str, Any]
CollectionName = Union[Collection, str]


class PersistenceError(RuntimeError):
    """The backing store could not be read or written."""


def collection_key(name: CollectionName) -> str:
    return Collection(name).value


class PersistenceProvider(ABC):
    """
    Key-value store of record collections.

    Implementations must make `save_many` all-or-nothing: either every
    collection in the batch is written, or none is and `PersistenceError`
    is raised. A failure writing one collection must never corrupt another.
    """

    @abstractmethod
    def load(self, collection: CollectionName) -> List[Record]:
        """
        Read a collection.

        Returns:
            The stored records, or an empty list if nothing was ever saved

        Raises:
            PersistenceError: If the store is unavailable or the payload is corrupt
        """

    @abstractmethod
    def save_many(self, batch: Mapping[CollectionName, List[Record]]) -> None:
        """
        Replace several collections atomically.

        Raises:
            PersistenceError: If the batch could not be committed
        """

    def save(self, collection: CollectionName, records: List[Record]) -> None:
        """Replace a single collection."""
        self.save_many({collection: records})


__all__ = [
    "CollectionName",
    "PersistenceError",
    "PersistenceProvider",
    "Record",
    "collection_key",
]
