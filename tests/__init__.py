# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
EliteKPI test suite.

Unit tests per package under `unit/`, cross-package scenarios under
`integration/`.
"""
