# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum
from typing import Tuple


class DealSide(str, Enum):
    """Which party the agent represents in a transaction."""

    BUYER = "BUYER"
    SELLER = "SELLER"


class DealStage(str, Enum):
    """
    Pipeline stages in progression order.

    Order is informational: transitions may skip stages or move backwards.
    Seller deals use SHOWING_OR_ACTIVE as "listing active"; buyer deals use it
    as "showing properties".
    """

    LEAD = "LEAD"
    INITIAL_CONTACT = "INITIAL_CONTACT"
    SHOWING_OR_ACTIVE = "SHOWING_OR_ACTIVE"
    UNDER_CONTRACT = "UNDER_CONTRACT"
    PENDING_CLOSE = "PENDING_CLOSE"
    CLOSED = "CLOSED"

    @property
    def label(self) -> str:
        return _STAGE_LABELS[self]

    @property
    def position(self) -> int:
        """Zero-based position in the pipeline."""
        return PIPELINE_ORDER.index(self)


PIPELINE_ORDER: Tuple[DealStage, ...] = tuple(DealStage)

_STAGE_LABELS = {
    DealStage.LEAD: "Lead",
    DealStage.INITIAL_CONTACT: "Initial Contact",
    DealStage.SHOWING_OR_ACTIVE: "Active / Showing",
    DealStage.UNDER_CONTRACT: "Under Contract",
    DealStage.PENDING_CLOSE: "Pending Close",
    DealStage.CLOSED: "Closed",
}


class ExpenseKind(str, Enum):
    """Discriminator for expense variants."""

    STANDARD = "Standard Expense"
    MILEAGE = "Mileage (Fuel)"


class ExpenseCategory(str, Enum):
    """Expense categories; MILEAGE is reserved for mileage expenses."""

    PHOTOGRAPHY = "Professional Photography"
    PHOTO_VIDEO = "Photography + Video"
    STAGING = "Professional Staging"
    MARKETING = "Marketing & Advertising"
    CLIENT_MEALS = "Client Meals"
    EQUIPMENT = "Equipment Rental"
    CLEAN_OUT = "Clean Out Crew"
    FOOD = "Food"
    MILEAGE = "Mileage (Fuel)"
    OTHER = "Other Expense"


class ActivityCategory(str, Enum):
    """Kinds of logged interactions."""

    SEPTIC_INSPECTION = "Septic Inspection"
    HOME_INSPECTION = "Home Inspection"
    WALKTHROUGH = "Walkthrough"
    CLOSING = "Closing"
    BUYER_MEETING = "Buyer Meeting"
    SELLER_MEETING = "Seller Meeting"
    SHOWING = "Property Showing"
    OPEN_HOUSE = "Open House"
    NEGOTIATION = "Negotiation"
    PAPERWORK = "Paperwork"
    OTHER = "Other Activity"


class Collection(str, Enum):
    """Independently persisted record collections."""

    DEALS = "deals"
    EXPENSES = "expenses"
    ACTIVITIES = "activities"
    SETTINGS = "settings"


# Known lead sources. Deal.lead_source stays a free-form string.
LEAD_SOURCES: Tuple[str, ...] = (
    "Zillow",
    "Zillow Preferred",
    "Realtor.com",
    "Referral",
    "SOI",
    "Open House",
    "Ad Calls",
    "Farming",
    "Other",
)
