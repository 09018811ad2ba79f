# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Deal entity.

A deal is a single buyer- or seller-side transaction moving through the
pipeline stages. The `side` field is the variant tag: seller deals carry
listing fields and derive their expected commission from them, buyer deals
set the expected commission directly.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from ..core.primitives.clock import Clock, IdGenerator, generate_id, resolve_clock
from ..core.primitives.enums import DealSide, DealStage
from ..core.primitives.model import Model
from ..core.primitives.types import BasisPoints, Percentage, PositiveFloat, PositiveInt
from ..core.primitives.validation import ensure_utc
from .calculator import (
    BPS_SCALE,
    default_close_probability,
    seller_expected_commission,
)

SELLER_ONLY_FIELDS = (
    "list_price",
    "commission_rate_pct",
    "listing_date",
    "closed_price",
    "days_on_market",
    "price_variance",
)


class Deal(Model):
    """
    A buyer or seller transaction.

    Invariants enforced on every construction:
    - `realized_commission` is only present for CLOSED deals
    - buyer deals carry none of the seller-only listing fields
    - `days_on_market` requires a `listing_date`
    - seller deals with both `list_price` and `commission_rate_pct` have
      `expected_commission == list_price × commission_rate_pct / 100`

    Whether a CLOSED deal has everything it needs to be saved is a separate,
    save-time check (`elitekpi.deal.lifecycle.validate_for_save`), so a draft
    can sit in CLOSED while the operator fills in the closing figures.

    Usage Examples:
        deal = Deal.create(
            name="Jane Smith",
            property_address="12 Elm Street",
            side=DealSide.SELLER,
            list_price=500_000,
            commission_rate_pct=3,
        )
        deal.expected_commission  # 15000.0
    """

    # Core Identity
    id: str = Field(..., min_length=1, description="Opaque unique id, immutable")
    name: str = Field(..., description="Client name or identifier")
    property_address: str = Field(..., description="Property or location identifier")
    side: DealSide = Field(default=DealSide.BUYER)

    # Pipeline
    stage: DealStage = Field(default=DealStage.LEAD)
    stage_entered_at: datetime
    close_probability_bps: BasisPoints = Field(
        ..., description="Close probability in basis points (10000 = 100%)"
    )
    created_at: datetime
    closed_at: Optional[datetime] = Field(
        default=None, description="First time the deal entered CLOSED; never cleared"
    )

    # Commission
    expected_commission: PositiveFloat = Field(
        default=0.0, description="Pre-close commission estimate"
    )
    realized_commission: Optional[PositiveFloat] = Field(
        default=None, description="Actual commission, CLOSED deals only"
    )

    # Context
    lead_source: Optional[str] = None
    other_lead_source: Optional[str] = None
    notes: Optional[str] = None
    property_price: Optional[PositiveFloat] = None

    # Seller-specific
    list_price: Optional[PositiveFloat] = None
    commission_rate_pct: Optional[Percentage] = None
    listing_date: Optional[datetime] = None
    closed_price: Optional[PositiveFloat] = None
    days_on_market: Optional[PositiveInt] = Field(
        default=None, description="Frozen at close from listing_date and closed_at"
    )
    price_variance: Optional[float] = Field(
        default=None, description="Frozen at close: closed_price - list_price"
    )

    @field_validator("stage_entered_at", "created_at", "closed_at", "listing_date")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @model_validator(mode="before")
    @classmethod
    def sync_seller_commission(cls, data: Any) -> Any:
        """Seller expected commission follows list price × rate (one-way)."""
        if not isinstance(data, dict) or data.get("side") != DealSide.SELLER:
            return data
        list_price = data.get("list_price")
        rate = data.get("commission_rate_pct")
        if isinstance(list_price, (int, float)) and isinstance(rate, (int, float)):
            data = dict(data)
            data["expected_commission"] = seller_expected_commission(list_price, rate)
        return data

    @model_validator(mode="after")
    def check_invariants(self) -> "Deal":
        if self.realized_commission is not None and self.stage != DealStage.CLOSED:
            raise ValueError("realized_commission is only allowed when stage is CLOSED")

        if self.side == DealSide.BUYER:
            present = [f for f in SELLER_ONLY_FIELDS if getattr(self, f) is not None]
            if present:
                raise ValueError(
                    f"Seller-only fields set on a BUYER deal: {', '.join(present)}"
                )

        if self.days_on_market is not None and self.listing_date is None:
            raise ValueError("days_on_market requires a listing_date")

        return self

    # Factory Methods
    @classmethod
    def create(
        cls,
        name: str,
        property_address: str,
        side: DealSide = DealSide.BUYER,
        stage: DealStage = DealStage.LEAD,
        clock: Optional[Clock] = None,
        id_generator: Optional[IdGenerator] = None,
        **fields: Any,
    ) -> "Deal":
        """
        Build a new deal with generated identity and creation bookkeeping.

        Args:
            name: Client name
            property_address: Property or location
            side: Buyer or seller
            stage: Initial stage (LEAD by default)
            clock: Time source (system UTC clock by default)
            id_generator: Id source (uuid4 by default)
            **fields: Any other Deal field

        Returns:
            Deal stamped with id, created_at, stage_entered_at, the stage's
            default close probability (unless given) and closed_at when
            created directly in CLOSED
        """
        now = resolve_clock(clock).now()
        stage = DealStage(stage)
        data = dict(fields)
        data.update(
            id=(id_generator or generate_id)(),
            name=name,
            property_address=property_address,
            side=DealSide(side),
            stage=stage,
            created_at=now,
            stage_entered_at=now,
        )
        data.setdefault("close_probability_bps", default_close_probability(stage))
        if stage == DealStage.CLOSED:
            data.setdefault("closed_at", now)
        return cls.model_validate(data)

    @property
    def is_closed(self) -> bool:
        return self.stage == DealStage.CLOSED

    @property
    def is_seller(self) -> bool:
        return self.side == DealSide.SELLER

    @property
    def close_probability(self) -> float:
        """Close probability as a fraction between 0 and 1."""
        return self.close_probability_bps / BPS_SCALE

    def __str__(self) -> str:
        return f"{self.property_address or self.name} ({self.side.value}, {self.stage.label})"


__all__ = ["Deal", "SELLER_ONLY_FIELDS"]
