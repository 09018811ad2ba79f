# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging

from pydantic import ValidationError

from ..core.primitives.enums import Collection
from ..core.primitives.settings import KPISettings
from .base import PersistenceError, PersistenceProvider

logger = logging.getLogger(__name__)


def load_settings(provider: PersistenceProvider) -> KPISettings:
    """
    Read the KPI settings, falling back to defaults when none were saved.

    Raises:
        PersistenceError: If the stored settings are unreadable or invalid
    """
    records = provider.load(Collection.SETTINGS)
    if not records:
        logger.debug("No stored settings; using defaults")
        return KPISettings()
    try:
        return KPISettings.model_validate(records[0])
    except ValidationError as e:
        raise PersistenceError(f"Stored settings are invalid: {e}") from e


def save_settings(provider: PersistenceProvider, settings: KPISettings) -> None:
    """Persist `settings` as the single record of the settings collection."""
    provider.save(Collection.SETTINGS, [settings.model_dump(mode="json")])
