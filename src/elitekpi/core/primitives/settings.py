# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import Field

from .model import Model
from .types import Percentage, PositiveFloat


class KPISettings(Model):
    """
    Business-planning assumptions consumed by the KPI derivations.

    A flat configuration record owned by the settings store
    (`elitekpi.store.load_settings` / `save_settings`) and passed explicitly
    to the functions that need it. Settings are immutable; an edited copy is
    produced with `model_copy(update=...)` or `revise(...)` and saved.

    Usage Examples:
        # Defaults
        settings = KPISettings()

        # Raise the annual goal
        settings = settings.revise(annual_gci_goal=150_000)
    """

    annual_gci_goal: PositiveFloat = Field(
        default=100_000.0, description="Target gross commission income per year."
    )
    target_close_rate: Percentage = Field(
        default=20.0,
        description="Expected share of appointments that become closed deals, in percent.",
    )
    avg_buyer_commission: PositiveFloat = Field(
        default=8_000.0, description="Average commission earned on a buyer-side deal."
    )
    avg_seller_commission: PositiveFloat = Field(
        default=10_000.0, description="Average commission earned on a seller-side deal."
    )
    estimated_tax_rate: Percentage = Field(
        default=30.0, description="Flat tax rate applied to positive net income, in percent."
    )
    default_mpg: PositiveFloat = Field(
        default=25.0, description="Vehicle fuel economy used to prefill mileage expenses."
    )
    default_gas_price: PositiveFloat = Field(
        default=3.50, description="Gas price per gallon used to prefill mileage expenses."
    )

    @property
    def average_commission(self) -> float:
        """Mean of the buyer and seller average commissions."""
        return (self.avg_buyer_commission + self.avg_seller_commission) / 2
