# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Fixed demo dataset.

Records are built through the entity models so the seed always satisfies
the same invariants as user data, then serialised to storage form.
Timestamps are relative to `now` so the dashboard looks current.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from ..activity import Activity
from ..core.primitives.enums import (
    ActivityCategory,
    Collection,
    DealSide,
    DealStage,
    ExpenseCategory,
)
from ..deal import Deal, default_close_probability
from ..expense import StandardExpense
from .base import Record

DEMO_LEAD_SOURCES = ("Zillow", "Realtor.com", "Referral", "SOI", "Open House", "Ad Calls")
BUYER_LEAD_COUNT = 25


def _days_before(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)


def _deal(
    now: datetime,
    *,
    id: str,
    stage: DealStage,
    created_days_ago: int,
    stage_days_ago: int,
    closed_days_ago: Optional[int] = None,
    **fields,
) -> Deal:
    return Deal(
        id=id,
        stage=stage,
        created_at=_days_before(now, created_days_ago),
        stage_entered_at=_days_before(now, stage_days_ago),
        closed_at=_days_before(now, closed_days_ago) if closed_days_ago is not None else None,
        close_probability_bps=default_close_probability(stage),
        **fields,
    )


def _buyer_leads(now: datetime) -> List[Deal]:
    leads = []
    for i in range(1, BUYER_LEAD_COUNT + 1):
        source = DEMO_LEAD_SOURCES[i % len(DEMO_LEAD_SOURCES)]
        leads.append(
            _deal(
                now,
                id=f"demo-buyer-lead-{i}",
                name=f"Buyer Lead {i} - {source}",
                property_address="Buyer search",
                side=DealSide.BUYER,
                stage=DealStage.LEAD,
                created_days_ago=(i * 7) % 20,
                stage_days_ago=(i * 3) % 10,
                expected_commission=12_000,
                lead_source=source,
                notes="Initial inquiry via web form.",
            )
        )
    return leads


def demo_deals(now: datetime) -> List[Deal]:
    return [
        *_buyer_leads(now),
        _deal(
            now,
            id="demo-seller-1",
            name="Harper Family",
            property_address="1420 Luxury Lane",
            side=DealSide.SELLER,
            stage=DealStage.SHOWING_OR_ACTIVE,
            created_days_ago=60,
            stage_days_ago=10,
            lead_source="SOI",
            notes="High interest, 2 showings scheduled.",
            list_price=950_000,
            commission_rate_pct=3,
            listing_date=_days_before(now, 30),
        ),
        _deal(
            now,
            id="demo-seller-2",
            name="R. Okafor",
            property_address="88 Ridge Road",
            side=DealSide.SELLER,
            stage=DealStage.SHOWING_OR_ACTIVE,
            created_days_ago=15,
            stage_days_ago=5,
            lead_source="Farming",
            list_price=850_000,
            commission_rate_pct=3,
            listing_date=_days_before(now, 15),
        ),
        _deal(
            now,
            id="demo-uc-1",
            name="M. Alvarez",
            property_address="22 Sunset Boulevard",
            side=DealSide.BUYER,
            stage=DealStage.UNDER_CONTRACT,
            created_days_ago=45,
            stage_days_ago=12,
            expected_commission=18_000,
            lead_source="Open House",
        ),
        _deal(
            now,
            id="demo-uc-2",
            name="Chen Trust",
            property_address="900 Ocean View Drive",
            side=DealSide.SELLER,
            stage=DealStage.PENDING_CLOSE,
            created_days_ago=90,
            stage_days_ago=2,
            lead_source="Referral",
            list_price=2_500_000,
            commission_rate_pct=2.5,
            listing_date=_days_before(now, 90),
        ),
        _deal(
            now,
            id="demo-closed-1",
            name="D. Whitfield",
            property_address="550 Park Avenue Penthouse",
            side=DealSide.BUYER,
            stage=DealStage.CLOSED,
            created_days_ago=100,
            stage_days_ago=45,
            closed_days_ago=45,
            expected_commission=42_000,
            realized_commission=42_000,
            lead_source="Zillow Preferred",
        ),
        _deal(
            now,
            id="demo-closed-2",
            name="S. Patel",
            property_address="101 Pine Street",
            side=DealSide.SELLER,
            stage=DealStage.CLOSED,
            created_days_ago=120,
            stage_days_ago=15,
            closed_days_ago=15,
            realized_commission=15_500,
            lead_source="SOI",
            list_price=500_000,
            closed_price=516_000,
            commission_rate_pct=3,
            listing_date=_days_before(now, 120),
            days_on_market=105,
            price_variance=16_000,
        ),
    ]


def demo_dataset(now: datetime) -> Dict[str, List[Record]]:
    """
    Build the demo collections in storage form.

    Args:
        now: Reference instant for all relative dates

    Returns:
        Mapping of collection name to serialised records
    """
    today = now.date()
    expenses = [
        StandardExpense(
            id="demo-exp-1",
            deal_id="demo-seller-1",
            deal_side=DealSide.SELLER,
            category=ExpenseCategory.PHOTOGRAPHY,
            date=today - timedelta(days=55),
            quantity=1,
            cost_per_unit=450,
            notes="Drone + Interior",
        ),
        StandardExpense(
            id="demo-exp-2",
            deal_id="demo-closed-1",
            deal_side=DealSide.BUYER,
            category=ExpenseCategory.CLIENT_MEALS,
            date=today - timedelta(days=46),
            quantity=1,
            cost_per_unit=185.50,
            notes="Closing dinner",
        ),
    ]
    activities = [
        Activity(
            id="demo-act-1",
            deal_id="demo-seller-1",
            deal_side=DealSide.SELLER,
            category=ActivityCategory.OPEN_HOUSE,
            date=today - timedelta(days=2),
            notes="Hosted open house, 5 groups.",
        ),
    ]
    return {
        Collection.DEALS.value: [d.model_dump(mode="json") for d in demo_deals(now)],
        Collection.EXPENSES.value: [e.model_dump(mode="json") for e in expenses],
        Collection.ACTIVITIES.value: [a.model_dump(mode="json") for a in activities],
    }
