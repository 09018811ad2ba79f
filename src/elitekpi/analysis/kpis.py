# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Aggregate KPI derivations.

Every function takes the current snapshot (and settings) and recomputes its
result from scratch. Zero denominators produce 0.0 rather than an error.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

from ..core.primitives.enums import PIPELINE_ORDER, DealStage
from ..core.primitives.settings import KPISettings
from ..deal import Deal, realized_gci, weighted_commission
from ..expense import ExpenseBase
from .period import ReportingPeriod
from .results import KPISummary, PipelineSummary, RequiredActivity

MONTHS_PER_YEAR = 12


def _ceil(value: float) -> int:
    # round first so 14.000000000000002 does not become 15
    return math.ceil(round(value, 9))


def _safe_divide(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def closed_in_period(deals: Iterable[Deal], period: ReportingPeriod) -> List[Deal]:
    """CLOSED deals whose `closed_at` falls inside `period`."""
    return [
        d for d in deals if d.stage == DealStage.CLOSED and period.contains(d.closed_at)
    ]


def calculate_kpis(
    deals: Sequence[Deal],
    expenses: Iterable[ExpenseBase],
    settings: KPISettings,
    period: ReportingPeriod,
) -> KPISummary:
    """
    Compute the period KPIs.

    Args:
        deals: Every deal in the snapshot (the close-rate denominator)
        expenses: Every expense in the snapshot; only those dated inside the
            period are counted
        settings: Goal and tax assumptions
        period: Reporting window

    Returns:
        KPISummary for `period`
    """
    closed = closed_in_period(deals, period)
    gci = math.fsum(realized_gci(d) for d in closed)
    total_expenses = math.fsum(e.total_cost for e in expenses if period.contains(e.date))
    net_income = gci - total_expenses
    estimated_tax = max(net_income, 0.0) * settings.estimated_tax_rate / 100

    return KPISummary(
        period=period,
        gci=gci,
        total_expenses=total_expenses,
        net_income=net_income,
        deals_closed=len(closed),
        average_commission=_safe_divide(gci, len(closed)),
        close_rate=_safe_divide(len(closed), len(deals)) * 100,
        goal_progress=min(_safe_divide(gci, settings.annual_gci_goal) * 100, 100.0),
        estimated_tax=estimated_tax,
        after_tax_income=net_income - estimated_tax,
    )


def required_activity(settings: KPISettings) -> RequiredActivity:
    """
    Project the deals and appointments needed to reach the annual goal.

    Example:
        goal 120000 with average commissions 8000 / 10000 gives
        120000 / 9000 = 13.33 deals per year, so 14 required deals, and
        at a 20% close rate 70 appointments (6 per month).
    """
    deals_per_year = _safe_divide(settings.annual_gci_goal, settings.average_commission)
    required_deals = _ceil(deals_per_year)
    required_appointments = (
        _ceil(required_deals * 100 / settings.target_close_rate)
        if settings.target_close_rate
        else 0
    )
    return RequiredActivity(
        deals_per_year=deals_per_year,
        required_deals=required_deals,
        deals_per_month=deals_per_year / MONTHS_PER_YEAR,
        required_appointments=required_appointments,
        appointments_per_month=_ceil(required_appointments / MONTHS_PER_YEAR),
    )


def pipeline_summary(deals: Iterable[Deal]) -> PipelineSummary:
    """Open-deal count, expected and probability-weighted value, and stage counts."""
    deals = list(deals)
    open_deals = [d for d in deals if d.stage != DealStage.CLOSED]
    stage_counts = {stage: 0 for stage in PIPELINE_ORDER}
    for deal in deals:
        stage_counts[deal.stage] += 1

    return PipelineSummary(
        open_deals=len(open_deals),
        expected_commission=math.fsum(d.expected_commission for d in open_deals),
        weighted_value=math.fsum(weighted_commission(d) for d in open_deals),
        stage_counts=stage_counts,
    )


__all__ = [
    "calculate_kpis",
    "closed_in_period",
    "pipeline_summary",
    "required_activity",
]
