# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
EliteKPI Core Primitives

Essential building blocks shared by every record and derivation: the base
model, enumerations, constrained types, settings, injected clock and id
capabilities, and validation helpers.
"""

from .clock import Clock, FixedClock, IdGenerator, SystemClock, generate_id, resolve_clock
from .enums import (
    LEAD_SOURCES,
    PIPELINE_ORDER,
    ActivityCategory,
    Collection,
    DealSide,
    DealStage,
    ExpenseCategory,
    ExpenseKind,
)
from .model import Model
from .settings import KPISettings
from .types import BasisPoints, Percentage, PositiveFloat, PositiveInt
from .validation import (
    RecordValidationError,
    ensure_utc,
    raise_if_errors,
    require_positive,
    require_present,
    require_text,
)

__all__ = [
    # Core models
    "Model",
    "KPISettings",
    # Enums
    "ActivityCategory",
    "Collection",
    "DealSide",
    "DealStage",
    "ExpenseCategory",
    "ExpenseKind",
    "LEAD_SOURCES",
    "PIPELINE_ORDER",
    # Environment
    "Clock",
    "FixedClock",
    "IdGenerator",
    "SystemClock",
    "generate_id",
    "resolve_clock",
    # Types
    "BasisPoints",
    "Percentage",
    "PositiveFloat",
    "PositiveInt",
    # Validation
    "RecordValidationError",
    "ensure_utc",
    "raise_if_errors",
    "require_positive",
    "require_present",
    "require_text",
]
