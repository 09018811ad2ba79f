# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Expense records.

Two variants share a common base and are told apart by `kind`:

- `StandardExpense`: quantity × cost per unit
- `MileageExpense`: fuel cost of miles driven at a given MPG and gas price

`total_cost` (and the mileage intermediates) are computed fields. They are
written out when a record is serialised for storage, dropped again when it
is loaded, and can never be set directly.
"""

from __future__ import annotations

import datetime as dt
from abc import ABC, abstractmethod
from typing import Any, Literal, Optional, Union

from pydantic import Field, computed_field, model_validator
from typing_extensions import Annotated

from ..core.primitives.clock import Clock, IdGenerator, generate_id, resolve_clock
from ..core.primitives.enums import DealSide, ExpenseCategory, ExpenseKind
from ..core.primitives.model import Model
from ..core.primitives.settings import KPISettings
from ..core.primitives.types import PositiveFloat
from ..core.primitives.validation import (
    raise_if_errors,
    require_positive,
)

DERIVED_FIELDS = ("total_cost", "gallons_used", "fuel_cost")

RECORD_TYPE = "Expense"


def compute_gallons_used(miles_driven: float, miles_per_gallon: float) -> float:
    """Fuel burned for a trip; zero when the MPG is zero."""
    if miles_per_gallon <= 0:
        return 0.0
    return miles_driven / miles_per_gallon


class ExpenseBase(Model, ABC):
    """Fields shared by every expense variant."""

    id: str = Field(..., min_length=1)
    kind: ExpenseKind
    deal_id: Optional[str] = Field(
        default=None, description="Weak reference to a Deal; None when unlinked"
    )
    deal_side: Optional[DealSide] = Field(
        default=None, description="Side of the linked deal, stamped on save"
    )
    date: dt.date
    category: ExpenseCategory = ExpenseCategory.OTHER
    notes: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def strip_derived_fields(cls, data: Any) -> Any:
        """Stored records carry their derived totals; recompute instead of trusting them."""
        if isinstance(data, dict) and any(k in data for k in DERIVED_FIELDS):
            data = {k: v for k, v in data.items() if k not in DERIVED_FIELDS}
        return data

    @property
    @abstractmethod
    def total_cost(self) -> float:
        """Derived total for this expense."""

    @property
    def is_linked(self) -> bool:
        return self.deal_id is not None


class StandardExpense(ExpenseBase):
    """A priced purchase: quantity × cost per unit."""

    kind: Literal[ExpenseKind.STANDARD] = ExpenseKind.STANDARD
    category: ExpenseCategory = ExpenseCategory.PHOTOGRAPHY
    quantity: PositiveFloat = 1.0
    cost_per_unit: PositiveFloat = 0.0

    @computed_field
    @property
    def total_cost(self) -> float:
        return self.quantity * self.cost_per_unit

    @classmethod
    def create(
        cls,
        cost_per_unit: float,
        quantity: float = 1.0,
        date: Optional[dt.date] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
        **fields: Any,
    ) -> "StandardExpense":
        """Build a standard expense with a generated id, dated today (UTC) unless given."""
        return cls(
            id=(id_generator or generate_id)(),
            quantity=quantity,
            cost_per_unit=cost_per_unit,
            date=date or resolve_clock(clock).now().date(),
            **fields,
        )


class MileageExpense(ExpenseBase):
    """
    Fuel cost of business driving.

    gallons_used = miles_driven / miles_per_gallon
    fuel_cost = gallons_used × gas_price_per_gallon
    total_cost = fuel_cost

    Example:
        100 miles at 25 MPG and $3.50/gal -> 4 gallons, $14.00
    """

    kind: Literal[ExpenseKind.MILEAGE] = ExpenseKind.MILEAGE
    category: Literal[ExpenseCategory.MILEAGE] = ExpenseCategory.MILEAGE
    miles_driven: PositiveFloat = 0.0
    miles_per_gallon: PositiveFloat = 0.0
    gas_price_per_gallon: PositiveFloat = 0.0

    @model_validator(mode="before")
    @classmethod
    def force_mileage_category(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {**data, "category": ExpenseCategory.MILEAGE}
        return data

    @computed_field
    @property
    def gallons_used(self) -> float:
        return compute_gallons_used(self.miles_driven, self.miles_per_gallon)

    @computed_field
    @property
    def fuel_cost(self) -> float:
        return self.gallons_used * self.gas_price_per_gallon

    @computed_field
    @property
    def total_cost(self) -> float:
        return self.fuel_cost

    @classmethod
    def from_settings(
        cls,
        settings: KPISettings,
        miles_driven: float,
        date: Optional[dt.date] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
        **fields: Any,
    ) -> "MileageExpense":
        """
        Build a mileage expense prefilled with the default MPG and gas price.

        Explicit `miles_per_gallon` / `gas_price_per_gallon` in `fields`
        take precedence over the settings.
        """
        fields.setdefault("miles_per_gallon", settings.default_mpg)
        fields.setdefault("gas_price_per_gallon", settings.default_gas_price)
        return cls(
            id=(id_generator or generate_id)(),
            miles_driven=miles_driven,
            date=date or resolve_clock(clock).now().date(),
            **fields,
        )


# Union type for all expenses, using discriminator for type differentiation
AnyExpense = Annotated[
    Union[StandardExpense, MileageExpense],
    Field(discriminator="kind"),
]


def validate_expense_for_save(expense: ExpenseBase) -> None:
    """
    Gate applied before an expense is created or updated.

    Raises:
        RecordValidationError: If the total is not positive, or a mileage
            expense has no miles or no MPG
    """
    checks = []
    if isinstance(expense, MileageExpense):
        checks.append(require_positive(expense.miles_driven, "Miles driven"))
        checks.append(require_positive(expense.miles_per_gallon, "Miles per gallon"))
    checks.append(require_positive(expense.total_cost, "Total cost"))
    raise_if_errors(RECORD_TYPE, checks)


__all__ = [
    "AnyExpense",
    "ExpenseBase",
    "MileageExpense",
    "StandardExpense",
    "compute_gallons_used",
    "validate_expense_for_save",
]
