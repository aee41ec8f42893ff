"""Muskingum routing data structures.

This module defines the value object produced by the coefficient computation:
- RoutingCoefficients: storage constant, weighting factor and the three
  recurrence multipliers derived jointly from them
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RoutingCoefficients:
    """Muskingum routing coefficients.

    The multipliers satisfy ``c0 + c1 + c2 = 1`` and are always derived together
    from (k, x, dt) by ``compute_coefficients``. They are never set independently.

    Attributes:
        k: Storage constant after the stability correction [s].
        x: Weighting factor, clamped to [0, 0.5] [-].
        c0: Multiplier of the current inflow [-].
        c1: Multiplier of the previous inflow [-].
        c2: Multiplier of the previous outflow [-].
    """

    k: float  # [s]
    x: float  # [-]
    c0: float
    c1: float
    c2: float

    @property
    def k_hours(self) -> float:
        """Storage constant in hours."""
        return self.k / 3600.0
