"""Muskingum routing subpackage.

Coefficient computation and the routing recurrence.
"""

from .coefficients import compute_coefficients, critical_k
from .constants import DEFAULT_BOUNDS
from .run import _route_numba, _sse_numba, _step_numba, route_series, routing_sse, step
from .types import RoutingCoefficients

__all__ = [
    "DEFAULT_BOUNDS",
    "RoutingCoefficients",
    "_route_numba",
    "_sse_numba",
    "_step_numba",
    "compute_coefficients",
    "critical_k",
    "route_series",
    "routing_sse",
    "step",
]
