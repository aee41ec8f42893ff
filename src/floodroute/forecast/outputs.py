"""Structured output dataclasses for forecast results.

This module provides dataclasses for organizing and accessing forecasts:
- ForecastStep: One forecast timestep
- ForecastResult: Multi-step forecast with the fitted routing and rating
- NextStepForecast: One-step-ahead prediction from the observed inflow
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime

import numpy as np
import pandas as pd

from floodroute.muskingum import RoutingCoefficients
from floodroute.rating import RatingCurve


@dataclass(frozen=True)
class ForecastStep:
    """One forecast timestep.

    Attributes:
        step: Steps ahead of the forecast origin (1..N).
        discharge: Forecast downstream discharge [m3/s].
        stage: Forecast downstream stage after relaxation [m].
        time: Forecast timestamp (origin + step * dt).
        inflow: Forecast upstream inflow after the change cap [m3/s].
    """

    step: int
    discharge: float  # [m3/s]
    stage: float  # [m]
    time: datetime
    inflow: float  # [m3/s]

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary of field values."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ForecastResult:
    """Multi-step forecast combining the fitted models and forecast steps.

    Attributes:
        coefficients: Estimated routing coefficients.
        rating_curve: Fitted (or fallback) rating curve.
        historical_routed: Routed outflow over the observation window [m3/s].
        forecasts: Forecast steps in ascending order.
        scores: Skill of historical_routed against observed outflow, by metric name.
    """

    coefficients: RoutingCoefficients
    rating_curve: RatingCurve
    historical_routed: np.ndarray
    forecasts: tuple[ForecastStep, ...]
    scores: dict[str, float] = field(default_factory=dict)

    @property
    def discharge(self) -> np.ndarray:
        """Forecast discharge array [m3/s]."""
        return np.array([f.discharge for f in self.forecasts], dtype=np.float64)

    @property
    def stage(self) -> np.ndarray:
        """Forecast stage array [m]."""
        return np.array([f.stage for f in self.forecasts], dtype=np.float64)

    def __len__(self) -> int:
        """Return the number of forecast steps."""
        return len(self.forecasts)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert forecasts to a DataFrame with time index.

        Returns:
            DataFrame with step, inflow, discharge and stage columns.
        """
        df = pd.DataFrame(
            {
                "step": [f.step for f in self.forecasts],
                "inflow": [f.inflow for f in self.forecasts],
                "discharge": self.discharge,
                "stage": self.stage,
            },
            index=pd.DatetimeIndex([f.time for f in self.forecasts]),
        )
        df.index.name = "time"
        return df


@dataclass(frozen=True)
class NextStepForecast:
    """One-step-ahead prediction driven by the last observed inflows.

    Attributes:
        coefficients: Estimated routing coefficients.
        rating_curve: Fitted (or fallback) rating curve.
        historical_routed: Routed outflow over the observation window [m3/s].
        discharge: Predicted discharge for the next timestep [m3/s].
        stage: Stage of the predicted discharge on the rating curve [m].
    """

    coefficients: RoutingCoefficients
    rating_curve: RatingCurve
    historical_routed: np.ndarray
    discharge: float
    stage: float
