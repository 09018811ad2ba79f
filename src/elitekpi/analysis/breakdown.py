# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tabular breakdowns for charts and exports.

These return pandas objects built from the current snapshot. Monthly series
use a monthly `PeriodIndex`, so they align with each other and can be
summed or joined without date arithmetic.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

import pandas as pd

from ..core.primitives.enums import PIPELINE_ORDER, DealStage
from ..deal import (
    Deal,
    days_on_market,
    linked_expense_total,
    realized_gci,
    sale_to_list_ratio,
    weighted_commission,
)
from ..expense import ExpenseBase
from .period import ReportingPeriod

logger = logging.getLogger(__name__)

DEAL_TABLE_COLUMNS = [
    "name",
    "property_address",
    "side",
    "stage",
    "lead_source",
    "expected_commission",
    "close_probability",
    "weighted_commission",
    "realized_gci",
    "linked_expenses",
    "net_commission",
    "days_on_market",
    "sale_to_list_ratio",
]


def monthly_gci(deals: Iterable[Deal], year: int) -> pd.Series:
    """
    Realized commission per closing month of `year`.

    Returns:
        Series of 12 floats indexed by a monthly PeriodIndex, zero-filled
        for months without closings
    """
    index = pd.period_range(start=f"{year}-01", periods=12, freq="M")
    series = pd.Series(0.0, index=index, name="gci")
    for deal in deals:
        if deal.stage != DealStage.CLOSED or deal.closed_at is None:
            continue
        closed = deal.closed_at.astimezone(timezone.utc)
        if closed.year != year:
            continue
        series[pd.Period(year=closed.year, month=closed.month, freq="M")] += realized_gci(deal)
    return series


def expenses_by_category(
    expenses: Iterable[ExpenseBase], period: Optional[ReportingPeriod] = None
) -> pd.Series:
    """
    Total expense cost per category, largest first.

    Args:
        expenses: Expense snapshot
        period: Optional window; expenses dated outside it are ignored

    Returns:
        Series indexed by category name
    """
    rows = [
        {"category": e.category.value, "total_cost": e.total_cost}
        for e in expenses
        if period is None or period.contains(e.date)
    ]
    if not rows:
        return pd.Series(dtype=float, name="total_cost")
    totals = pd.DataFrame(rows).groupby("category")["total_cost"].sum()
    return totals.sort_values(ascending=False)


def stage_funnel(deals: Iterable[Deal]) -> pd.Series:
    """Deal counts per stage label, in pipeline order, zero-filled."""
    counts = pd.Series(
        [d.stage.label for d in deals], dtype=object
    ).value_counts()
    labels = [stage.label for stage in PIPELINE_ORDER]
    return counts.reindex(labels, fill_value=0).astype(int).rename("deals")


def deal_table(
    deals: Iterable[Deal], expenses: Iterable[ExpenseBase], now: datetime
) -> pd.DataFrame:
    """
    One row per deal with its derived metrics, indexed by deal id.

    Args:
        deals: Deal snapshot
        expenses: Expense snapshot (for linked-expense totals)
        now: Reference time for days on market of open listings

    Returns:
        DataFrame with `DEAL_TABLE_COLUMNS`
    """
    expenses = list(expenses)
    records = []
    for deal in deals:
        linked = linked_expense_total(deal.id, expenses)
        gci = realized_gci(deal)
        records.append(
            {
                "id": deal.id,
                "name": deal.name,
                "property_address": deal.property_address,
                "side": deal.side.value,
                "stage": deal.stage.label,
                "lead_source": deal.lead_source,
                "expected_commission": deal.expected_commission,
                "close_probability": deal.close_probability,
                "weighted_commission": weighted_commission(deal),
                "realized_gci": gci,
                "linked_expenses": linked,
                "net_commission": gci - linked,
                "days_on_market": days_on_market(deal, now),
                "sale_to_list_ratio": sale_to_list_ratio(deal),
            }
        )

    if not records:
        return pd.DataFrame(columns=DEAL_TABLE_COLUMNS, index=pd.Index([], name="id"))

    table = pd.DataFrame.from_records(records, index="id")
    logger.debug(f"Built deal table with {len(table)} rows")
    return table[DEAL_TABLE_COLUMNS]


__all__ = [
    "DEAL_TABLE_COLUMNS",
    "deal_table",
    "expenses_by_category",
    "monthly_gci",
    "stage_funnel",
]
