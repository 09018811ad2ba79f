# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .repository import CascadeResult, RecordNotFoundError, Repository, RepositoryTransaction

__all__ = [
    "CascadeResult",
    "RecordNotFoundError",
    "Repository",
    "RepositoryTransaction",
]
