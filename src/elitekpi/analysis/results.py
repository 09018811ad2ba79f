# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Result records returned by the aggregate derivations."""

from __future__ import annotations

from typing import Dict

from pydantic import Field

from ..core.primitives.enums import DealStage
from ..core.primitives.model import Model
from .period import ReportingPeriod


class KPISummary(Model):
    """Financial KPIs for one reporting period."""

    period: ReportingPeriod
    gci: float = Field(..., description="Realized commission closed within the period")
    total_expenses: float
    net_income: float
    deals_closed: int
    average_commission: float = Field(..., description="0 when nothing closed")
    close_rate: float = Field(..., description="Closed-in-period / all deals, in percent")
    goal_progress: float = Field(..., description="GCI / annual goal, percent, capped at 100")
    estimated_tax: float
    after_tax_income: float


class RequiredActivity(Model):
    """Deals and appointments needed to hit the annual GCI goal."""

    deals_per_year: float
    required_deals: int
    deals_per_month: float
    required_appointments: int
    appointments_per_month: int


class PipelineSummary(Model):
    """Snapshot of open (non-CLOSED) deals."""

    open_deals: int
    expected_commission: float
    weighted_value: float = Field(
        ..., description="Σ expected commission × close probability over open deals"
    )
    stage_counts: Dict[DealStage, int]
