# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Expense records and their save gate.
"""

from .expense import (
    AnyExpense,
    ExpenseBase,
    MileageExpense,
    StandardExpense,
    compute_gallons_used,
    validate_expense_for_save,
)

__all__ = [
    "AnyExpense",
    "ExpenseBase",
    "MileageExpense",
    "StandardExpense",
    "compute_gallons_used",
    "validate_expense_for_save",
]
