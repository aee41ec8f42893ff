"""Validated configuration of a multi-step forecast."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from floodroute.calibration import SearchConfig
from floodroute.calibration.metrics import validate_metrics
from floodroute.constants import (
    DEFAULT_EXP_ALPHA,
    DEFAULT_GAMMA,
    DEFAULT_MAX_INFLOW_CHANGE_PCT,
    DEFAULT_REF_Q,
    DEFAULT_STAGE_RELAXATION,
)

from .inflow import InflowMethod


class KScale(BaseModel):
    """Flow-scaled storage constant settings.

    Attributes:
        ref_q: Reference discharge at which K is left unchanged [m3/s].
        gamma: Power-law exponent of the rescaling [-].
    """

    model_config = ConfigDict(frozen=True)

    ref_q: float = Field(default=DEFAULT_REF_Q, gt=0)  # [m3/s]
    gamma: float = DEFAULT_GAMMA


class ForecastOptions(BaseModel):
    """Options for ``forecast_n``.

    Attributes:
        n_steps: Number of future timesteps to forecast.
        inflow_method: Upstream inflow extrapolation method. Default "exp".
        exp_alpha: Smoothing factor of the "exp" method, in (0, 1].
        max_inflow_change_pct: Maximum relative inflow change per step.
        k_scale: Flow-scaled K settings.
        stage_relaxation: Relaxation factor lambda of the stage update, in (0, 1].
            1 disables relaxation.
        rising_only_rc: Fit the rating curve on the rising limb only.
        search: Grid-search configuration for (K, X).
        metrics: Skill metrics computed for the historical routed series.
        progress: Whether to display a progress bar during estimation.
    """

    model_config = ConfigDict(frozen=True)

    n_steps: int = Field(gt=0)
    inflow_method: InflowMethod = InflowMethod.exp
    exp_alpha: float = Field(default=DEFAULT_EXP_ALPHA, gt=0, le=1)
    max_inflow_change_pct: float = Field(default=DEFAULT_MAX_INFLOW_CHANGE_PCT, ge=0)
    k_scale: KScale = KScale()
    stage_relaxation: float = Field(default=DEFAULT_STAGE_RELAXATION, gt=0, le=1)
    rising_only_rc: bool = True
    search: SearchConfig = SearchConfig()
    metrics: tuple[str, ...] = ("rmse", "nse", "kge")
    progress: bool = False

    @field_validator("metrics", mode="after")
    @classmethod
    def validate_metric_names(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Ensure every metric name is registered."""
        return validate_metrics(v)
