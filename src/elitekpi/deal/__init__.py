# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Deal records, per-deal derivations and the stage lifecycle.
"""

from . import calculator, lifecycle
from .calculator import (
    STAGE_CLOSE_PROBABILITY_BPS,
    days_between,
    default_close_probability,
    days_on_market,
    linked_expense_total,
    net_commission,
    price_variance,
    realized_gci,
    sale_to_list_ratio,
    seller_expected_commission,
    weighted_commission,
)
from .deal import Deal
from .lifecycle import (
    prepare_for_save,
    record_closing,
    set_stage,
    update_listing_terms,
    validate_for_save,
)

__all__ = [
    "Deal",
    "STAGE_CLOSE_PROBABILITY_BPS",
    "calculator",
    "days_between",
    "days_on_market",
    "default_close_probability",
    "lifecycle",
    "linked_expense_total",
    "net_commission",
    "prepare_for_save",
    "price_variance",
    "realized_gci",
    "record_closing",
    "sale_to_list_ratio",
    "seller_expected_commission",
    "set_stage",
    "update_listing_terms",
    "validate_for_save",
    "weighted_commission",
]
