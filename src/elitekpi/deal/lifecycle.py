# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Deal lifecycle state machine.

Stage transitions and the bookkeeping they trigger:

1. `stage_entered_at` is re-stamped
2. `close_probability_bps` is reset to the stage default (the operator may
   override it again afterwards)
3. the first entry into CLOSED stamps `closed_at`, which never changes again
4. seller listings get a `listing_date` when they go active, and freeze
   `days_on_market` / `price_variance` when they close
5. leaving CLOSED drops the realized commission and the frozen closing metrics

All functions are pure: they return a revised Deal and never touch the
repository. `prepare_for_save` is the gate the repository runs before
persisting a deal.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..core.primitives.clock import Clock, resolve_clock
from ..core.primitives.enums import DealSide, DealStage
from ..core.primitives.validation import (
    RecordValidationError,
    raise_if_errors,
    require_positive,
    require_present,
    require_text,
)
from .calculator import days_between, default_close_probability, price_variance
from .deal import Deal

logger = logging.getLogger(__name__)

RECORD_TYPE = "Deal"


def _entry_effects(deal: Deal, stage: DealStage, now) -> Dict[str, Any]:
    """Field updates caused by entering `stage` at `now`."""
    updates: Dict[str, Any] = {}
    closed_at = deal.closed_at

    if stage == DealStage.CLOSED and closed_at is None:
        closed_at = now
        updates["closed_at"] = now

    if deal.side == DealSide.SELLER:
        if stage == DealStage.SHOWING_OR_ACTIVE and deal.listing_date is None:
            updates["listing_date"] = now
        if stage == DealStage.CLOSED:
            updates.update(_closing_metrics(deal, closed_at))

    return updates


def _closing_metrics(deal: Deal, closed_at) -> Dict[str, Any]:
    """Frozen seller metrics from whatever inputs are currently known."""
    dom = None
    if deal.listing_date is not None and closed_at is not None:
        dom = days_between(deal.listing_date, closed_at)
    return {
        "days_on_market": dom,
        "price_variance": price_variance(deal.closed_price, deal.list_price),
    }


def _revise(deal: Deal, **updates: Any) -> Deal:
    try:
        return deal.revise(**updates)
    except ValidationError as e:
        raise RecordValidationError.from_pydantic(RECORD_TYPE, e) from e


def set_stage(deal: Deal, new_stage: DealStage, clock: Optional[Clock] = None) -> Deal:
    """
    Move `deal` to `new_stage` and apply the transition bookkeeping.

    Setting the current stage again is a no-op: the deal is returned as is
    and no timestamp or probability changes.

    Args:
        deal: Deal to transition
        new_stage: Target stage (any stage; skipping and moving back are allowed)
        clock: Time source for the transition timestamp

    Returns:
        The transitioned deal
    """
    new_stage = DealStage(new_stage)
    if new_stage == deal.stage:
        return deal

    now = resolve_clock(clock).now()
    updates: Dict[str, Any] = {
        "stage": new_stage,
        "stage_entered_at": now,
        "close_probability_bps": default_close_probability(new_stage),
    }

    if deal.stage == DealStage.CLOSED:
        # closed_at stays; closing figures only exist while CLOSED
        updates["realized_commission"] = None
        if deal.side == DealSide.SELLER:
            updates["days_on_market"] = None
            updates["price_variance"] = None

    updates.update(_entry_effects(deal, new_stage, now))

    logger.debug(f"Deal {deal.id}: {deal.stage.value} -> {new_stage.value}")
    return _revise(deal, **updates)


def update_listing_terms(
    deal: Deal,
    list_price: Optional[float] = None,
    commission_rate_pct: Optional[float] = None,
) -> Deal:
    """
    Change a seller's list price and/or commission rate.

    The expected commission is recomputed from the new terms; it cannot be
    edited directly on seller deals.

    Raises:
        RecordValidationError: If the deal is a buyer deal
    """
    if deal.side != DealSide.SELLER:
        raise RecordValidationError(RECORD_TYPE, ["Listing terms only apply to SELLER deals"])

    updates: Dict[str, Any] = {}
    if list_price is not None:
        updates["list_price"] = list_price
    if commission_rate_pct is not None:
        updates["commission_rate_pct"] = commission_rate_pct
    return _revise(deal, **updates)


def record_closing(
    deal: Deal,
    realized_commission: float,
    closed_price: Optional[float] = None,
    clock: Optional[Clock] = None,
) -> Deal:
    """Close the deal (if not already closed) and record the closing figures."""
    updates: Dict[str, Any] = {"realized_commission": realized_commission}
    if closed_price is not None:
        updates["closed_price"] = closed_price

    closed = set_stage(deal, DealStage.CLOSED, clock)
    closed = _revise(closed, **updates)
    if closed.side == DealSide.SELLER:
        closed = _revise(closed, **_closing_metrics(closed, closed.closed_at))
    return closed


def validate_for_save(deal: Deal) -> None:
    """
    Required-field gate applied before any deal is created or updated.

    Raises:
        RecordValidationError: Listing every failed check
    """
    checks = [
        require_text(deal.name, "Client name"),
        require_text(deal.property_address, "Property address"),
    ]
    if deal.stage == DealStage.CLOSED:
        checks.append(require_positive(deal.realized_commission, "Realized commission"))
        if deal.side == DealSide.SELLER:
            checks.append(require_present(deal.closed_price, "Closed price"))
    raise_if_errors(RECORD_TYPE, checks)


def prepare_for_save(
    deal: Deal,
    previous: Optional[Deal] = None,
    clock: Optional[Clock] = None,
    transitioned: bool = False,
) -> Deal:
    """
    Bring a submitted deal into its persistable form, or reject it.

    - New deals (no `previous`) get the entry effects of their initial stage.
    - When the stage differs from `previous` and the submission was not
      already transitioned with `set_stage` (its `stage_entered_at` did not
      move), the transition bookkeeping is applied here, exactly once.
    - Closed seller deals have their closing metrics re-frozen from the
      current listing and price inputs.
    - The model is re-validated and the required-field gate is run.

    Args:
        deal: Submitted deal
        previous: Stored version of the same deal, if any
        clock: Time source for any bookkeeping stamped here
        transitioned: The deal already went through `set_stage`; skip the
            stage-change detection against `previous`

    Returns:
        The deal to persist

    Raises:
        RecordValidationError: If the deal may not be saved
    """
    if previous is not None and previous.side != deal.side:
        raise RecordValidationError(RECORD_TYPE, ["Deal side cannot change after creation"])

    if previous is None:
        now = resolve_clock(clock).now()
        effects = _entry_effects(deal, deal.stage, now)
        if effects:
            deal = _revise(deal, **effects)
    elif (
        not transitioned
        and deal.stage != previous.stage
        and deal.stage_entered_at <= previous.stage_entered_at
    ):
        target = deal.stage
        rewound = deal.model_copy(update={"stage": previous.stage})
        deal = set_stage(rewound, target, clock)
    elif deal.stage == DealStage.CLOSED and deal.closed_at is None:
        # closed_at is never cleared once set
        deal = _revise(deal, closed_at=previous.closed_at or resolve_clock(clock).now())

    if previous is not None and previous.closed_at is not None and deal.closed_at != previous.closed_at:
        deal = _revise(deal, closed_at=previous.closed_at)

    if deal.side == DealSide.SELLER and deal.stage == DealStage.CLOSED:
        deal = _revise(deal, **_closing_metrics(deal, deal.closed_at))
    else:
        deal = _revise(deal)

    validate_for_save(deal)
    return deal


__all__ = [
    "prepare_for_save",
    "record_closing",
    "set_stage",
    "update_listing_terms",
    "validate_for_save",
]
