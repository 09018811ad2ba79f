# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Analysis

Aggregate derivations over a repository snapshot:

- period KPIs (GCI, expenses, net income, close rate, goal progress, tax)
- the required-activity projection from the settings
- the open pipeline summary
- pandas breakdowns for charts and exports
"""

from .breakdown import (
    DEAL_TABLE_COLUMNS,
    deal_table,
    expenses_by_category,
    monthly_gci,
    stage_funnel,
)
from .kpis import calculate_kpis, closed_in_period, pipeline_summary, required_activity
from .period import ReportingPeriod
from .results import KPISummary, PipelineSummary, RequiredActivity

__all__ = [
    "DEAL_TABLE_COLUMNS",
    "KPISummary",
    "PipelineSummary",
    "ReportingPeriod",
    "RequiredActivity",
    "calculate_kpis",
    "closed_in_period",
    "deal_table",
    "expenses_by_category",
    "monthly_gci",
    "pipeline_summary",
    "required_activity",
    "stage_funnel",
]
