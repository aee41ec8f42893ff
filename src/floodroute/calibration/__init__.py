"""Calibration subpackage for Muskingum routing parameters.

Provides the two-stage grid search over (K, X) and skill metrics.
"""

from .estimate import estimate_routing_parameters, initial_outflow, search_routing_parameters
from .metrics import get_metric, list_metrics
from .types import Estimate, SearchConfig

__all__ = [
    "Estimate",
    "SearchConfig",
    "estimate_routing_parameters",
    "get_metric",
    "initial_outflow",
    "list_metrics",
    "search_routing_parameters",
]
