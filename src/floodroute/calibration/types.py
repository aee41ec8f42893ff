"""Data types for routing-parameter estimation.

Defines the validated grid-search configuration and the estimation result.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, model_validator

from floodroute.muskingum import RoutingCoefficients
from floodroute.muskingum.constants import (
    DEFAULT_BOUNDS,
    DEFAULT_K_GRID,
    DEFAULT_X_GRID,
    FINE_GRID_POINTS,
    FINE_K_SPAN_HOURS,
    FINE_X_SPAN,
    X_MAX,
    X_MIN,
)


class SearchConfig(BaseModel):
    """Validated configuration of the two-stage (K, X) grid search.

    Attributes:
        k_min_hours: Lower bound of the K search range [h].
        k_max_hours: Upper bound of the K search range [h].
        x_min: Lower bound of the X search range [-].
        x_max: Upper bound of the X search range [-].
        k_grid: Number of coarse grid points along K.
        x_grid: Number of coarse grid points along X.
        fine_points: Number of fine grid points along each axis.
        fine_k_span_hours: Half-width of the fine window along K [h].
        fine_x_span: Half-width of the fine window along X [-].
    """

    model_config = ConfigDict(frozen=True)

    k_min_hours: float = Field(default=DEFAULT_BOUNDS["k"][0], gt=0)
    k_max_hours: float = Field(default=DEFAULT_BOUNDS["k"][1], gt=0)
    x_min: float = Field(default=DEFAULT_BOUNDS["x"][0], ge=X_MIN, le=X_MAX)
    x_max: float = Field(default=DEFAULT_BOUNDS["x"][1], ge=X_MIN, le=X_MAX)
    k_grid: int = Field(default=DEFAULT_K_GRID, ge=5)
    x_grid: int = Field(default=DEFAULT_X_GRID, ge=5)
    fine_points: int = Field(default=FINE_GRID_POINTS, ge=2)
    fine_k_span_hours: float = Field(default=FINE_K_SPAN_HOURS, ge=0)
    fine_x_span: float = Field(default=FINE_X_SPAN, ge=0)

    @model_validator(mode="after")
    def validate_ranges(self) -> SearchConfig:
        """Ensure each search range has a lower bound below its upper bound."""
        if self.k_min_hours >= self.k_max_hours:
            msg = f"k_min_hours must be less than k_max_hours: {self.k_min_hours} >= {self.k_max_hours}"
            raise ValueError(msg)
        if self.x_min >= self.x_max:
            msg = f"x_min must be less than x_max: {self.x_min} >= {self.x_max}"
            raise ValueError(msg)
        return self

    @property
    def n_cells(self) -> int:
        """Total number of grid cells evaluated by both stages."""
        return self.k_grid * self.x_grid + self.fine_points * self.fine_points


@dataclass(frozen=True)
class Estimate:
    """Best grid cell found by the parameter search.

    Attributes:
        coefficients: Routing coefficients of the winning cell.
        sse: Sum of squared routing errors at that cell [(m3/s)^2].
        n_observed: Number of observed outflow values the SSE was computed on.
    """

    coefficients: RoutingCoefficients
    sse: float
    n_observed: int
