# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Persistence providers and the collaborators around them: demo-mode data
substitution, the demo seed and settings load/save.
"""

from .base import PersistenceError, PersistenceProvider, Record
from .demo import DemoAwareStore, DemoMode
from .duckdb_store import DuckDBStore
from .memory import InMemoryStore
from .seed import demo_dataset
from .settings_store import load_settings, save_settings

__all__ = [
    "DemoAwareStore",
    "DemoMode",
    "DuckDBStore",
    "InMemoryStore",
    "PersistenceError",
    "PersistenceProvider",
    "Record",
    "demo_dataset",
    "load_settings",
    "save_settings",
]
