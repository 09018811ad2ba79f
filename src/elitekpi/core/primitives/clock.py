# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Environment capabilities injected into the lifecycle and repository layers.

Time and identity are the only non-pure inputs of the core. Both are passed
in explicitly so lifecycle transitions can be tested against a fixed clock
and deterministic ids.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol
from uuid import uuid4

IdGenerator = Callable[[], str]


def generate_id() -> str:
    """Return a collision-resistant opaque record id."""
    return str(uuid4())


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Clock frozen at a given instant until explicitly advanced.

    Example:
        >>> clock = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
        >>> clock.advance(days=100)
        >>> clock.now().date()
        datetime.date(2025, 4, 11)
    """

    def __init__(self, at: Optional[datetime] = None) -> None:
        at = at or datetime(2025, 1, 1, tzinfo=timezone.utc)
        if at.tzinfo is None:
            at = at.replace(tzinfo=timezone.utc)
        self._now = at

    def now(self) -> datetime:
        return self._now

    def advance(self, **delta) -> datetime:
        """Move the clock forward by `timedelta(**delta)` and return the new time."""
        self._now = self._now + timedelta(**delta)
        return self._now

    def set(self, at: datetime) -> None:
        if at.tzinfo is None:
            at = at.replace(tzinfo=timezone.utc)
        self._now = at


def resolve_clock(clock: Optional[Clock]) -> Clock:
    return clock if clock is not None else SystemClock()
