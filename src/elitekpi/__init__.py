# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

import importlib
import logging
import warnings

# Monthly breakdowns use the 'M' PeriodIndex alias throughout.
warnings.filterwarnings(
    "ignore",
    message=".*'M' is deprecated and will be removed in a future version.*",
    category=FutureWarning,
)

"""
EliteKPI - Real Estate Commission and Pipeline Tracker

Records deals, expenses and activities for a single agent and derives the
financial KPIs that matter to them: GCI, net income, close rate, goal
progress and the probability-weighted pipeline.

Key Entry Points:
- elitekpi.repository.Repository - the single writer of all records
- elitekpi.deal.lifecycle - stage transitions and the save gate
- elitekpi.analysis - period KPIs, required activity, pandas breakdowns
- elitekpi.store - persistence providers, demo mode and settings

Example Usage:
    ```python
    from elitekpi.analysis import ReportingPeriod, calculate_kpis
    from elitekpi.core.primitives import DealSide, DealStage
    from elitekpi.repository import Repository
    from elitekpi.store import DuckDBStore, load_settings

    store = DuckDBStore.from_env()
    repo = Repository(store).load()

    deal = repo.create_deal(
        "Jane Smith", "12 Elm Street", side=DealSide.SELLER,
        list_price=500_000, commission_rate_pct=3,
    )
    repo.set_stage(deal.id, DealStage.SHOWING_OR_ACTIVE)

    kpis = calculate_kpis(
        repo.deals, repo.expenses, load_settings(store), ReportingPeriod.for_year(2025)
    )
    print(f"GCI: {kpis.gci:,.0f}  Net: {kpis.net_income:,.0f}")
    ```
"""

# Libraries leave handler configuration to the application.
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "activity",
    "analysis",
    "core",
    "deal",
    "expense",
    "repository",
    "store",
]


_LAZY_MODULES = {name: f"elitekpi.{name}" for name in __all__}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'elitekpi' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
