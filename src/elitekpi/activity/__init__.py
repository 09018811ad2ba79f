# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .activity import Activity

__all__ = ["Activity"]
