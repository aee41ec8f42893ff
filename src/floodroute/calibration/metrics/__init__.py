"""Metrics subpackage for routing skill scores.

Provides hydrological metrics (SSE, NSE, KGE, etc.) and a registry system
for managing metric functions and their optimization directions.
"""

# Import functions first to trigger @register decorators
from .functions import kge, mae, nse, pbias, rmse, sse
from .registry import (
    METRICS,
    MetricFunction,
    get_metric,
    list_metrics,
    register,
    validate_metrics,
)

__all__ = [
    "METRICS",
    "MetricFunction",
    "get_metric",
    "kge",
    "list_metrics",
    "mae",
    "nse",
    "pbias",
    "register",
    "rmse",
    "sse",
    "validate_metrics",
]
