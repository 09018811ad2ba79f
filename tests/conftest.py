# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for EliteKPI testing.

Every fixture runs against a fixed clock and sequential ids so lifecycle
timestamps and record ids are predictable.
"""

from __future__ import annotations

import itertools
from datetime import date, datetime, timezone
from typing import Any

import pytest

from elitekpi.core.primitives import (
    DealSide,
    DealStage,
    ExpenseCategory,
    FixedClock,
    KPISettings,
)
from elitekpi.deal import Deal
from elitekpi.expense import MileageExpense, StandardExpense
from elitekpi.repository import Repository
from elitekpi.store import InMemoryStore

START = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)


class SequentialIds:
    """Deterministic id generator: prefix-1, prefix-2, ..."""

    def __init__(self, prefix: str = "id") -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"


# Entity Utilities
def make_buyer_deal(clock: FixedClock, ids=None, **fields: Any) -> Deal:
    """Create a buyer deal with sensible defaults for testing."""
    fields.setdefault("expected_commission", 9_000)
    return Deal.create(
        name=fields.pop("name", "Jane Buyer"),
        property_address=fields.pop("property_address", "12 Elm Street"),
        side=DealSide.BUYER,
        stage=fields.pop("stage", DealStage.LEAD),
        clock=clock,
        id_generator=ids,
        **fields,
    )


def make_seller_deal(clock: FixedClock, ids=None, **fields: Any) -> Deal:
    """Create a seller listing at 500000 / 3% unless overridden."""
    fields.setdefault("list_price", 500_000)
    fields.setdefault("commission_rate_pct", 3)
    return Deal.create(
        name=fields.pop("name", "John Seller"),
        property_address=fields.pop("property_address", "101 Pine Street"),
        side=DealSide.SELLER,
        stage=fields.pop("stage", DealStage.LEAD),
        clock=clock,
        id_generator=ids,
        **fields,
    )


def make_expense(
    cost: float, deal_id=None, on: date = date(2025, 1, 15), ids=None, **fields: Any
) -> StandardExpense:
    fields.setdefault("category", ExpenseCategory.PHOTOGRAPHY)
    return StandardExpense.create(
        cost_per_unit=cost, date=on, deal_id=deal_id, id_generator=ids, **fields
    )


def make_mileage(
    miles: float, deal_id=None, on: date = date(2025, 1, 15), ids=None, **fields: Any
) -> MileageExpense:
    return MileageExpense.from_settings(
        KPISettings(), miles, date=on, deal_id=deal_id, id_generator=ids, **fields
    )


# Fixtures
@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START)


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def settings() -> KPISettings:
    return KPISettings()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def repo(store, clock, ids) -> Repository:
    return Repository(store, clock=clock, id_generator=ids).load()
