"""Routing-parameter estimation by two-stage grid search.

Finds the Muskingum (K, X) pair that best reproduces observed downstream
outflow. The loss surface over (K, X) may be non-convex and K spans orders of
magnitude, so a derivative-free global search is used: a coarse rectangular
grid followed by a fine grid centred on the coarse optimum.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike

from floodroute.constants import SECONDS_PER_HOUR
from floodroute.errors import InvalidInputError, OptimizationError
from floodroute.muskingum import RoutingCoefficients, compute_coefficients
from floodroute.muskingum.run import _route_numba, _sse_numba

from .progress import ProgressTracker, progress_context
from .types import Estimate, SearchConfig

logger = logging.getLogger(__name__)


def _validate_series(inflow: ArrayLike, observed_outflow: ArrayLike) -> tuple[np.ndarray, np.ndarray]:
    """Coerce inflow and observations to float64 arrays and check them.

    Missing observations (None or NaN) are kept as NaN.

    Raises:
        InvalidInputError: If the inflow is empty, not 1D, non-finite, or the
            lengths differ.
    """
    inflow_arr = np.ascontiguousarray(inflow, dtype=np.float64)
    observed_arr = np.ascontiguousarray(observed_outflow, dtype=np.float64)

    if inflow_arr.ndim != 1:
        msg = f"inflow array must be 1D, got {inflow_arr.ndim}D"
        raise InvalidInputError(msg)
    if len(inflow_arr) == 0:
        msg = "inflow series is empty"
        raise InvalidInputError(msg)
    if not np.all(np.isfinite(inflow_arr)):
        msg = "inflow series contains missing or non-finite values"
        raise InvalidInputError(msg)
    if observed_arr.ndim != 1 or len(observed_arr) != len(inflow_arr):
        msg = f"observed_outflow length {observed_arr.size} does not match inflow length {len(inflow_arr)}"
        raise InvalidInputError(msg)

    return inflow_arr, observed_arr


def initial_outflow(inflow: np.ndarray, observed_outflow: np.ndarray) -> float:
    """Anchor of the routed series: first observed outflow, else first inflow."""
    present = np.flatnonzero(np.isfinite(observed_outflow))
    if present.size > 0:
        return float(observed_outflow[present[0]])
    return float(inflow[0])


def _search_grid(
    k_hours: np.ndarray,
    x_values: np.ndarray,
    inflow: np.ndarray,
    observed: np.ndarray,
    o_initial: float,
    dt_seconds: float,
    best: tuple[float, RoutingCoefficients] | None,
    tracker: ProgressTracker,
) -> tuple[float, RoutingCoefficients] | None:
    """Evaluate every (K, X) cell, K outer and X inner.

    A cell replaces the incumbent only when its SSE is strictly smaller, so the
    first minimum encountered wins.
    """
    routed = np.zeros(len(inflow), dtype=np.float64)
    for k_h in k_hours:
        for x in x_values:
            coefficients = compute_coefficients(float(k_h) * SECONDS_PER_HOUR, float(x), dt_seconds)
            _route_numba(inflow, o_initial, coefficients.c0, coefficients.c1, coefficients.c2, routed)
            sse = float(_sse_numba(routed, observed))
            if best is None or sse < best[0]:
                best = (sse, coefficients)
            tracker.update(best[0])
    return best


def search_routing_parameters(
    inflow: ArrayLike,
    observed_outflow: ArrayLike,
    dt_seconds: float,
    search: SearchConfig | None = None,
    progress: bool = False,
) -> Estimate:
    """Run the two-stage grid search and return the winning cell with its SSE.

    See ``estimate_routing_parameters`` for the search procedure.

    Raises:
        InvalidInputError: If the input series are unusable.
        ValueError: If dt_seconds is not positive.
        OptimizationError: If no grid cell was evaluated.
    """
    if not dt_seconds > 0:
        msg = f"dt_seconds must be positive, got {dt_seconds}"
        raise ValueError(msg)

    search = SearchConfig() if search is None else search
    inflow_arr, observed_arr = _validate_series(inflow, observed_outflow)
    o_initial = initial_outflow(inflow_arr, observed_arr)
    n_observed = int(np.count_nonzero(np.isfinite(observed_arr)))

    if n_observed == 0:
        logger.debug("No observed outflow in window; grid search falls back to the first cell")

    with progress_context(search.n_cells, disable=not progress) as tracker:
        # Coarse stage
        k_coarse = np.linspace(search.k_min_hours, search.k_max_hours, search.k_grid)
        x_coarse = np.linspace(search.x_min, search.x_max, search.x_grid)
        best = _search_grid(k_coarse, x_coarse, inflow_arr, observed_arr, o_initial, dt_seconds, None, tracker)

        if best is None:
            msg = "grid search evaluated no candidate"
            raise OptimizationError(msg)

        # Fine stage around the coarse optimum, clamped to the configured bounds
        coarse = best[1]
        fine_k_min = max(coarse.k_hours - search.fine_k_span_hours, search.k_min_hours)
        fine_k_max = min(coarse.k_hours + search.fine_k_span_hours, search.k_max_hours)
        fine_x_min = max(coarse.x - search.fine_x_span, search.x_min)
        fine_x_max = min(coarse.x + search.fine_x_span, search.x_max)

        k_fine = np.linspace(fine_k_min, fine_k_max, search.fine_points)
        x_fine = np.linspace(fine_x_min, fine_x_max, search.fine_points)
        best = _search_grid(k_fine, x_fine, inflow_arr, observed_arr, o_initial, dt_seconds, best, tracker)

    sse, coefficients = best
    logger.debug(
        "Estimated K=%.3fh X=%.3f (SSE=%.4g over %d observations)",
        coefficients.k_hours,
        coefficients.x,
        sse,
        n_observed,
    )
    return Estimate(coefficients=coefficients, sse=sse, n_observed=n_observed)


def estimate_routing_parameters(
    inflow: ArrayLike,
    observed_outflow: ArrayLike,
    dt_seconds: float,
    search: SearchConfig | None = None,
    progress: bool = False,
) -> RoutingCoefficients:
    """Estimate Muskingum routing parameters from an observation window.

    Minimizes the sum of squared errors between the routed inflow and the
    observed outflow, over the timesteps where an observation exists. Missing
    observations are skipped, never imputed.

    The search runs in two stages:
    1. Coarse grid of ``k_grid x x_grid`` points over the configured K and X
       ranges (default 0.25-24 h x 0-0.5, 15 x 11 points).
    2. Fine grid of ``fine_points x fine_points`` points spanning +-0.5 h in K
       and +-0.05 in X around the coarse optimum, clamped to the configured bounds.

    The routed series is anchored on the first observed outflow, or on the first
    inflow if nothing was observed. When all cells tie (e.g. no observations),
    the first coarse cell is returned.

    Args:
        inflow: Upstream inflow series [m3/s]. Must be finite and non-empty.
        observed_outflow: Observed downstream outflow, same length as inflow.
            Missing values may be given as None or NaN [m3/s].
        dt_seconds: Time step [s].
        search: Grid-search configuration. Defaults to SearchConfig().
        progress: Whether to display a progress bar. Default False.

    Returns:
        RoutingCoefficients of the best cell, with the stability-corrected K.

    Raises:
        InvalidInputError: If the input series are unusable.
        ValueError: If dt_seconds is not positive.
        OptimizationError: If no grid cell was evaluated.

    Example:
        >>> coefficients = estimate_routing_parameters(inflow, observed, dt_seconds=3600)
        >>> print(coefficients.k_hours, coefficients.x)
    """
    return search_routing_parameters(inflow, observed_outflow, dt_seconds, search, progress).coefficients
