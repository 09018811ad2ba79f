# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Validation utilities shared by the record save gates.

This module provides:
- `RecordValidationError`, the single error type raised when a record may
  not be persisted
- required-field helpers that collect messages instead of failing fast, so
  callers can report every problem with a submission at once
- timestamp normalisation for pydantic field validators
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from pydantic import ValidationError


class RecordValidationError(ValueError):
    """
    A record failed its save gate and was not persisted.

    Attributes:
        record_type: Name of the record kind ("Deal", "Expense", ...)
        errors: Every failed check, in evaluation order
    """

    def __init__(self, record_type: str, errors: Iterable[str]) -> None:
        self.record_type = record_type
        self.errors: List[str] = list(errors)
        super().__init__(f"{record_type} rejected: " + "; ".join(self.errors))

    @classmethod
    def from_pydantic(cls, record_type: str, exc: ValidationError) -> "RecordValidationError":
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = error.get("msg", "invalid value")
            messages.append(f"{location}: {message}" if location else message)
        return cls(record_type, messages)


def require_text(value: Optional[str], label: str) -> Optional[str]:
    """Return an error message when `value` is missing or blank."""
    if value is None or not str(value).strip():
        return f"{label} is required"
    return None


def require_positive(value: Optional[float], label: str) -> Optional[str]:
    """Return an error message when `value` is missing or not greater than zero."""
    if value is None:
        return f"{label} is required"
    if value <= 0:
        return f"{label} must be greater than 0"
    return None


def require_present(value: object, label: str) -> Optional[str]:
    if value is None:
        return f"{label} is required"
    return None


def raise_if_errors(record_type: str, checks: Iterable[Optional[str]]) -> None:
    """Raise `RecordValidationError` for every non-empty message in `checks`."""
    errors = [message for message in checks if message]
    if errors:
        raise RecordValidationError(record_type, errors)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Interpret naive datetimes as UTC; convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
