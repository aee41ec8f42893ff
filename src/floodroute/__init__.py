"""floodroute: downstream discharge and stage forecasting.

Routes upstream discharge to a downstream gauge with the Muskingum method,
estimating (K, X) from a recent observation window, and converts routed
discharge to stage with a rating curve fitted from the same window.
"""

from floodroute.calibration import SearchConfig, estimate_routing_parameters, list_metrics
from floodroute.errors import InvalidInputError, OptimizationError
from floodroute.forecast import (
    ForecastOptions,
    ForecastResult,
    ForecastStep,
    InflowMethod,
    KScale,
    NextStepForecast,
    cap_inflow_change,
    forecast_inflow_next,
    forecast_n,
    forecast_next,
    scale_k_by_flow,
)
from floodroute.muskingum import RoutingCoefficients, compute_coefficients, route_series, step
from floodroute.rating import RatingCurve, fit_rating_curve, h_from_q, q_from_h, rising_limb_filter
from floodroute.types import ObservationWindow, Sample

__all__ = [
    "ForecastOptions",
    "ForecastResult",
    "ForecastStep",
    "InflowMethod",
    "InvalidInputError",
    "KScale",
    "NextStepForecast",
    "ObservationWindow",
    "OptimizationError",
    "RatingCurve",
    "RoutingCoefficients",
    "Sample",
    "SearchConfig",
    "cap_inflow_change",
    "compute_coefficients",
    "estimate_routing_parameters",
    "fit_rating_curve",
    "forecast_inflow_next",
    "forecast_n",
    "forecast_next",
    "h_from_q",
    "list_metrics",
    "q_from_h",
    "rising_limb_filter",
    "route_series",
    "scale_k_by_flow",
    "step",
]
