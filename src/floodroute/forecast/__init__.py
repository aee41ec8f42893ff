"""Forecast subpackage.

Inflow extrapolation, flow-scaled routing and the multi-step forecast loop.
"""

from .inflow import FORECASTERS, InflowMethod, cap_inflow_change, forecast_inflow_next
from .options import ForecastOptions, KScale
from .outputs import ForecastResult, ForecastStep, NextStepForecast
from .run import forecast_n, forecast_next
from .scaling import scale_k_by_flow

__all__ = [
    "FORECASTERS",
    "ForecastOptions",
    "ForecastResult",
    "ForecastStep",
    "InflowMethod",
    "KScale",
    "NextStepForecast",
    "cap_inflow_change",
    "forecast_inflow_next",
    "forecast_n",
    "forecast_next",
    "scale_k_by_flow",
]
