# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

import pandas as pd
from pydantic import model_validator

from ..core.primitives.clock import Clock, resolve_clock
from ..core.primitives.model import Model


class ReportingPeriod(Model):
    """
    Inclusive calendar range that KPIs are reported over.

    Build one with the calendar constructors rather than directly:

    Examples:
        >>> ReportingPeriod.for_month(2025, 3).label
        'March 2025'
        >>> ReportingPeriod.for_quarter(2025, 2).end
        datetime.date(2025, 6, 30)
        >>> ReportingPeriod.for_year(2025).contains(date(2025, 7, 4))
        True
    """

    start: date
    end: date
    label: str

    @model_validator(mode="after")
    def check_bounds(self) -> "ReportingPeriod":
        if self.end < self.start:
            raise ValueError(f"Period end {self.end} is before start {self.start}")
        return self

    @classmethod
    def _from_period(cls, period: pd.Period, label: str) -> "ReportingPeriod":
        return cls(
            start=period.start_time.date(),
            end=period.end_time.date(),
            label=label,
        )

    @classmethod
    def for_month(cls, year: int, month: int) -> "ReportingPeriod":
        period = pd.Period(year=year, month=month, freq="M")
        return cls._from_period(period, period.strftime("%B %Y"))

    @classmethod
    def for_quarter(cls, year: int, quarter: int) -> "ReportingPeriod":
        if quarter not in (1, 2, 3, 4):
            raise ValueError(f"Quarter must be 1-4, got {quarter}")
        period = pd.Period(f"{year}Q{quarter}", freq="Q")
        return cls._from_period(period, f"Q{quarter} {year}")

    @classmethod
    def for_year(cls, year: int) -> "ReportingPeriod":
        return cls(start=date(year, 1, 1), end=date(year, 12, 31), label=str(year))

    @classmethod
    def custom(
        cls, start: date, end: date, label: Optional[str] = None
    ) -> "ReportingPeriod":
        return cls(
            start=start,
            end=end,
            label=label or f"{start.isoformat()} to {end.isoformat()}",
        )

    @classmethod
    def year_to_date(cls, clock: Optional[Clock] = None) -> "ReportingPeriod":
        """January 1st of the current year through today (UTC)."""
        today = resolve_clock(clock).now().astimezone(timezone.utc).date()
        return cls(start=date(today.year, 1, 1), end=today, label=f"{today.year} YTD")

    def contains(self, moment: Union[date, datetime, None]) -> bool:
        """
        Whether `moment` falls inside the period.

        Datetimes are compared by their UTC calendar date; None is never
        contained.
        """
        if moment is None:
            return False
        if isinstance(moment, datetime):
            if moment.tzinfo is not None:
                moment = moment.astimezone(timezone.utc)
            moment = moment.date()
        return self.start <= moment <= self.end

    @property
    def period_index(self) -> pd.PeriodIndex:
        """Monthly PeriodIndex covering the period."""
        return pd.period_range(
            start=pd.Period(self.start, freq="M"),
            end=pd.Period(self.end, freq="M"),
            freq="M",
        )

    def __str__(self) -> str:
        return self.label
