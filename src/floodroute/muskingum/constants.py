"""Muskingum routing constants.

Search bounds, grid sizes and the numerical guards applied when deriving
routing coefficients.
"""

# Default search bounds (K in hours, X dimensionless)
DEFAULT_BOUNDS: dict[str, tuple[float, float]] = {
    "k": (0.25, 24.0),  # Storage constant [h]
    "x": (0.0, 0.5),  # Weighting factor [-]
}

# Coarse grid resolution
DEFAULT_K_GRID: int = 15
DEFAULT_X_GRID: int = 11

# Fine grid around the coarse optimum
FINE_GRID_POINTS: int = 9
FINE_K_SPAN_HOURS: float = 0.5
FINE_X_SPAN: float = 0.05

# Numerical guards
K_FLOOR: float = 1e-6  # Lower floor on K [s]
STABILITY_MARGIN: float = 1.01  # Factor above the critical K when stability is violated
X_MIN: float = 0.0
X_MAX: float = 0.5
