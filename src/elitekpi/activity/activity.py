# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import Field

from ..core.primitives.clock import Clock, IdGenerator, generate_id, resolve_clock
from ..core.primitives.enums import ActivityCategory, DealSide
from ..core.primitives.model import Model


class Activity(Model):
    """A logged interaction (meeting, showing, inspection), optionally tied to a deal."""

    id: str = Field(..., min_length=1)
    deal_id: Optional[str] = Field(
        default=None, description="Weak reference to a Deal; None when unlinked"
    )
    deal_side: Optional[DealSide] = Field(
        default=None, description="Side of the linked deal, stamped on save"
    )
    date: dt.date
    category: ActivityCategory = ActivityCategory.OTHER
    notes: Optional[str] = None

    @classmethod
    def create(
        cls,
        category: ActivityCategory,
        date: Optional[dt.date] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
        **fields: Any,
    ) -> "Activity":
        return cls(
            id=(id_generator or generate_id)(),
            category=category,
            date=date or resolve_clock(clock).now().date(),
            **fields,
        )

    def __str__(self) -> str:
        return f"{self.date.isoformat()} {self.category.value}"


__all__ = ["Activity"]
