"""Muskingum routing orchestration functions.

This module provides the entry points for applying the routing recurrence:
- step(): Route a single timestep
- route_series(): Route a whole inflow series
- routing_sse(): Squared routing error against a partially observed series
"""

# ruff: noqa: SIM108
# SIM108: Ternary operators disabled in Numba functions for clarity
import numpy as np
from numba import njit
from numpy.typing import ArrayLike

from .types import RoutingCoefficients


@njit(cache=True)
def _step_numba(i_t: float, i_prev: float, o_prev: float, c0: float, c1: float, c2: float) -> float:
    """Route one timestep, flooring small negative artifacts at zero."""
    o_t = c0 * i_t + c1 * i_prev + c2 * o_prev
    if o_t < 0.0:
        o_t = 0.0
    return o_t


@njit(cache=True)
def _route_numba(
    inflow: np.ndarray,
    o_initial: float,
    c0: float,
    c1: float,
    c2: float,
    outflow: np.ndarray,  # Output written here
) -> None:
    """Route an inflow series. The first step uses inflow[0] as the previous inflow."""
    n_timesteps = len(inflow)
    if n_timesteps == 0:
        return

    i_prev = inflow[0]
    o_prev = o_initial
    for t in range(n_timesteps):
        o_t = _step_numba(inflow[t], i_prev, o_prev, c0, c1, c2)
        outflow[t] = o_t
        i_prev = inflow[t]
        o_prev = o_t


@njit(cache=True)
def _sse_numba(simulated: np.ndarray, observed: np.ndarray) -> float:
    """Sum of squared errors over timesteps where the observation is finite."""
    sse = 0.0
    for t in range(len(simulated)):
        o = observed[t]
        if np.isfinite(o):
            e = simulated[t] - o
            sse += e * e
    return sse


def step(i_t: float, i_prev: float, o_prev: float, coefficients: RoutingCoefficients) -> float:
    """Execute one Muskingum routing step.

    O_t = C0 * I_t + C1 * I_{t-1} + C2 * O_{t-1}, floored at 0.

    Args:
        i_t: Current inflow [m3/s].
        i_prev: Previous inflow [m3/s].
        o_prev: Previous outflow [m3/s].
        coefficients: Routing coefficients.

    Returns:
        Current outflow [m3/s].
    """
    return float(
        _step_numba(
            float(i_t),
            float(i_prev),
            float(o_prev),
            coefficients.c0,
            coefficients.c1,
            coefficients.c2,
        )
    )


def route_series(inflow: ArrayLike, o_initial: float, coefficients: RoutingCoefficients) -> np.ndarray:
    """Route an inflow series through the Muskingum recurrence.

    The first output uses inflow[0] as both the current and the previous inflow,
    so ``route_series(I, O0, c)[0] == step(I[0], I[0], O0, c)``.

    Args:
        inflow: Inflow series I_0..I_{n-1} [m3/s].
        o_initial: Outflow preceding the first timestep [m3/s].
        coefficients: Routing coefficients.

    Returns:
        Outflow array with the same length as the inflow [m3/s].
    """
    inflow_arr = np.ascontiguousarray(inflow, dtype=np.float64)
    if inflow_arr.ndim != 1:
        msg = f"inflow array must be 1D, got {inflow_arr.ndim}D"
        raise ValueError(msg)

    outflow = np.zeros(len(inflow_arr), dtype=np.float64)
    _route_numba(
        inflow_arr,
        float(o_initial),
        coefficients.c0,
        coefficients.c1,
        coefficients.c2,
        outflow,
    )
    return outflow


def routing_sse(
    inflow: ArrayLike,
    observed_outflow: ArrayLike,
    o_initial: float,
    coefficients: RoutingCoefficients,
) -> float:
    """Sum of squared errors between routed and observed outflow.

    Timesteps with a missing observation (NaN) contribute nothing.

    Args:
        inflow: Inflow series [m3/s].
        observed_outflow: Observed outflow with NaN for missing values [m3/s].
        o_initial: Outflow preceding the first timestep [m3/s].
        coefficients: Routing coefficients.

    Returns:
        SSE [(m3/s)^2].
    """
    simulated = route_series(inflow, o_initial, coefficients)
    observed = np.ascontiguousarray(observed_outflow, dtype=np.float64)
    if len(observed) != len(simulated):
        msg = f"observed_outflow length {len(observed)} does not match inflow length {len(simulated)}"
        raise ValueError(msg)
    return float(_sse_numba(simulated, observed))
