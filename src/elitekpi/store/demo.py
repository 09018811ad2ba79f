# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Demo-mode data substitution.

Demo mode is a capability swap at the persistence boundary: `DemoAwareStore`
wraps the real provider and, while the switch is on, serves the seeded
dataset for deals, expenses and activities and skips writes to them. The
repository and derivations never know which source produced the snapshot.
Settings always pass through to the real provider.
"""

from __future__ import annotations

import copy
import logging
import os
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional

from ..core.primitives.clock import Clock, resolve_clock
from ..core.primitives.enums import Collection
from .base import CollectionName, PersistenceProvider, Record, collection_key
from .seed import demo_dataset

logger = logging.getLogger(__name__)

DEMO_MODE_ENV_VAR = "ELITEKPI_DEMO_MODE"

SEEDED_COLLECTIONS = (
    Collection.DEALS.value,
    Collection.EXPENSES.value,
    Collection.ACTIVITIES.value,
)

SeedFactory = Callable[[datetime], Dict[str, List[Record]]]


class DemoMode:
    """
    On/off switch for demo mode.

    The initial state comes from the ELITEKPI_DEMO_MODE environment variable
    ("true" enables it) unless `active` is given explicitly.
    """

    def __init__(self, active: Optional[bool] = None) -> None:
        if active is None:
            active = os.environ.get(DEMO_MODE_ENV_VAR, "").strip().lower() == "true"
        self._active = active

    @property
    def is_active(self) -> bool:
        return self._active

    def enable(self) -> None:
        self._active = True
        logger.info("Demo mode enabled")

    def disable(self) -> None:
        self._active = False
        logger.info("Demo mode disabled")

    def __bool__(self) -> bool:
        return self._active


class DemoAwareStore(PersistenceProvider):
    """
    Provider that substitutes seeded data while demo mode is active.

    The seed is built once per activation from `seed(now)` and handed out as
    deep copies, so in-session edits never leak into the seed.
    """

    def __init__(
        self,
        backing: PersistenceProvider,
        demo_mode: Optional[DemoMode] = None,
        seed: SeedFactory = demo_dataset,
        clock: Optional[Clock] = None,
    ) -> None:
        self.backing = backing
        self.demo_mode = demo_mode if demo_mode is not None else DemoMode()
        self._seed_factory = seed
        self._clock = resolve_clock(clock)
        self._seed: Optional[Dict[str, List[Record]]] = None

    def _seeded(self) -> Dict[str, List[Record]]:
        if self._seed is None:
            self._seed = self._seed_factory(self._clock.now())
        return self._seed

    def load(self, collection: CollectionName) -> List[Record]:
        key = collection_key(collection)
        if self.demo_mode.is_active and key in SEEDED_COLLECTIONS:
            return copy.deepcopy(self._seeded().get(key, []))
        if not self.demo_mode.is_active:
            self._seed = None
        return self.backing.load(key)

    def save_many(self, batch: Mapping[CollectionName, List[Record]]) -> None:
        if not self.demo_mode.is_active:
            self.backing.save_many(batch)
            return

        passthrough = {}
        skipped = []
        for name, records in batch.items():
            key = collection_key(name)
            if key in SEEDED_COLLECTIONS:
                skipped.append(key)
            else:
                passthrough[key] = records

        if skipped:
            logger.warning(f"Write to {sorted(skipped)} skipped in demo mode")
        if passthrough:
            self.backing.save_many(passthrough)
