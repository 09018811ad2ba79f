# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Records are immutable: a revised deal, expense or activity is a new
    instance produced with `revise()` and handed to the repository, which
    replaces the stored record by id.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,  # Immutable records; the repository owns the mutable collections
        extra="forbid",  # Catches typos and stale stored fields immediately
        use_enum_values=False,
    )

    def revise(self, **updates: Any):
        """Return a re-validated copy with `updates` applied.

        Unlike `model_copy(update=...)`, this runs every field and model
        validator again, so derived fields and invariants stay consistent.
        """
        data = self.model_dump()
        data.update(updates)
        return type(self).model_validate(data)
