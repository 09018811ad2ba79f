# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Per-deal derivations.

Pure, stateless functions over a deal and the current expense snapshot.
Nothing here is cached; callers re-derive on every read. Derivations whose
inputs are incomplete return ``None`` ("not applicable") instead of raising.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import TYPE_CHECKING, Dict, Iterable, Optional

from ..core.primitives.enums import DealSide, DealStage

if TYPE_CHECKING:
    from ..expense.expense import ExpenseBase
    from .deal import Deal

BPS_SCALE = 10_000

# Default close probability per stage, in basis points
STAGE_CLOSE_PROBABILITY_BPS: Dict[DealStage, int] = {
    DealStage.LEAD: 1_000,
    DealStage.INITIAL_CONTACT: 2_000,
    DealStage.SHOWING_OR_ACTIVE: 5_000,
    DealStage.UNDER_CONTRACT: 9_000,
    DealStage.PENDING_CLOSE: 9_500,
    DealStage.CLOSED: 10_000,
}

_SECONDS_PER_DAY = 86_400


def default_close_probability(stage: DealStage) -> int:
    """Default close probability for `stage`, in basis points."""
    return STAGE_CLOSE_PROBABILITY_BPS[DealStage(stage)]


def seller_expected_commission(list_price: float, commission_rate_pct: float) -> float:
    """
    Expected listing commission.

    Args:
        list_price: Listing price in dollars
        commission_rate_pct: Commission rate in percent (3 means 3%)

    Returns:
        list_price × commission_rate_pct / 100
    """
    return list_price * commission_rate_pct / 100


def days_between(start: datetime, end: datetime) -> int:
    """Whole days between two instants, rounded up and never negative."""
    elapsed = abs((end - start).total_seconds()) / _SECONDS_PER_DAY
    return max(0, math.ceil(round(elapsed, 6)))


def days_on_market(deal: "Deal", now: datetime) -> Optional[int]:
    """
    Days a seller listing has been (or was) on the market.

    The count runs from `listing_date` to `closed_at` for closed deals and to
    `now` for open listings. Buyer deals and listings without a listing date
    are not applicable.
    """
    if deal.side != DealSide.SELLER or deal.listing_date is None:
        return None
    if deal.stage == DealStage.CLOSED and deal.closed_at is not None:
        end = deal.closed_at
    else:
        end = now
    return days_between(deal.listing_date, end)


def price_variance(closed_price: Optional[float], list_price: Optional[float]) -> Optional[float]:
    """Closed price minus list price; None when either is unknown."""
    if closed_price is None or list_price is None:
        return None
    return closed_price - list_price


def sale_to_list_ratio(deal: "Deal") -> Optional[float]:
    """Closed price as a percentage of list price, for closed seller deals only."""
    if deal.side != DealSide.SELLER or deal.stage != DealStage.CLOSED:
        return None
    if deal.closed_price is None or not deal.list_price:
        return None
    return deal.closed_price / deal.list_price * 100


def linked_expense_total(deal_id: str, expenses: Iterable["ExpenseBase"]) -> float:
    """Sum of `total_cost` over every expense linked to `deal_id`, any kind."""
    return math.fsum(e.total_cost for e in expenses if e.deal_id == deal_id)


def realized_gci(deal: "Deal") -> float:
    """Realized commission for closed deals, zero otherwise."""
    if deal.stage != DealStage.CLOSED:
        return 0.0
    return deal.realized_commission or 0.0


def net_commission(deal: "Deal", expenses: Iterable["ExpenseBase"]) -> float:
    """Realized commission (zero until closed) less all linked expenses."""
    return realized_gci(deal) - linked_expense_total(deal.id, expenses)


def weighted_commission(deal: "Deal") -> float:
    """Expected commission scaled by the close probability."""
    return deal.expected_commission * deal.close_probability_bps / BPS_SCALE
