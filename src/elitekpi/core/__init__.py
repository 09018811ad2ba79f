# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
EliteKPI Core Framework

Foundational building blocks shared by deals, expenses, activities and the
KPI derivations.
"""

from . import primitives
from .primitives import *  # noqa: F401,F403
from .primitives import __all__ as _primitives_all

__all__ = ["primitives", *_primitives_all]
