"""Forecast orchestration functions.

This module provides the main entry points for forecasting downstream flow:
- forecast_n(): Estimate routing and rating, then forecast N steps ahead
- forecast_next(): One-step-ahead prediction from the observed inflows
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import numpy as np
import pandas as pd

from floodroute.calibration import SearchConfig, estimate_routing_parameters, initial_outflow
from floodroute.calibration.metrics import get_metric
from floodroute.constants import MIN_RATING_PAIRS, MIN_RISING_LIMB_PAIRS
from floodroute.errors import InvalidInputError
from floodroute.muskingum import compute_coefficients, route_series, step
from floodroute.rating import RatingCurve, fit_rating_curve, h_from_q, rising_limb_filter
from floodroute.types import ObservationWindow

from .inflow import cap_inflow_change, forecast_inflow_next
from .options import ForecastOptions
from .outputs import ForecastResult, ForecastStep, NextStepForecast
from .scaling import scale_k_by_flow

logger = logging.getLogger(__name__)

# Rating curve used when the window holds too few (stage, discharge) pairs
FALLBACK_RATING_EXPONENT: float = 1.2


def _prepare_inflow(window: ObservationWindow) -> np.ndarray:
    """Upstream discharge of the trimmed window with gaps interpolated.

    Raises:
        InvalidInputError: If the window is empty or holds no upstream discharge.
    """
    inflow = window.inflow
    if len(inflow) == 0:
        msg = "observation window is empty"
        raise InvalidInputError(msg)

    missing = ~np.isfinite(inflow)
    if missing.all():
        msg = "observation window contains no upstream discharge"
        raise InvalidInputError(msg)
    if missing.any():
        logger.warning("Interpolating %d missing upstream discharge values out of %d", missing.sum(), len(inflow))
        inflow = pd.Series(inflow).interpolate(method="linear", limit_direction="both").to_numpy(dtype=np.float64)

    return inflow


def _last_stage(window: ObservationWindow) -> float | None:
    """Stage of the last downstream sample, or None if it was not observed."""
    stage = window.stage
    if len(stage) == 0 or not np.isfinite(stage[-1]):
        return None
    return float(stage[-1])


def _fit_window_rating(window: ObservationWindow, rising_only: bool) -> RatingCurve:
    """Fit the rating curve on the downstream (stage, discharge) pairs.

    With rising_only, the rising-limb filter is applied when at least 5 pairs
    exist and kept only if it leaves at least 3. With fewer than 3 pairs, the
    fallback curve {a: 1, b: 1.2, h0: last stage or 0} is returned.
    """
    stage = window.stage
    discharge = window.outflow
    paired = np.isfinite(stage) & np.isfinite(discharge)
    h = stage[paired]
    q = discharge[paired]

    if rising_only and len(q) >= MIN_RISING_LIMB_PAIRS:
        h_rising, q_rising = rising_limb_filter(h, q)
        if len(q_rising) >= MIN_RATING_PAIRS:
            h, q = h_rising, q_rising
        else:
            logger.debug("Rising-limb filter left %d pairs; fitting on all %d", len(q_rising), len(q))

    if len(q) < MIN_RATING_PAIRS:
        last_stage = _last_stage(window)
        h0 = 0.0 if last_stage is None else last_stage
        logger.debug("Only %d (stage, discharge) pairs in window; using fallback rating curve", len(q))
        return RatingCurve(a=1.0, b=FALLBACK_RATING_EXPONENT, h0=h0)

    return fit_rating_curve(h, q)


def _forecast_origin(window: ObservationWindow) -> datetime:
    """Time of the last downstream sample, or the current UTC time."""
    times = window.time
    if times and times[-1] is not None:
        return times[-1]
    return datetime.now(UTC)


def _score(routed: np.ndarray, observed: np.ndarray, metrics: tuple[str, ...]) -> dict[str, float]:
    """Skill of the routed series over the observed timesteps."""
    mask = np.isfinite(observed)
    if not mask.any():
        return {}
    return {name: get_metric(name)[0](observed[mask], routed[mask]) for name in metrics}


def forecast_n(window: ObservationWindow, options: ForecastOptions) -> ForecastResult:
    """Forecast downstream discharge and stage for N future timesteps.

    Implements the dynamic estimation-and-forecast sequence:
    1. Trim the window to its most recent aligned samples
    2. Estimate Muskingum (K, X) by grid search against observed outflow
    3. Route the observed inflow to obtain the historical routed series
    4. Fit the rating curve (optionally on the rising limb only)
    5. For each step: forecast and cap the inflow, rescale K with the inflow,
       route one step, map discharge to stage, and relax the stage

    Args:
        window: Upstream/downstream observations and the time step.
        options: Forecast options. n_steps is required.

    Returns:
        ForecastResult with the coefficients, rating curve, historical routed
        series, forecast steps and hindcast skill scores.
        Convert the forecast steps to a DataFrame via result.to_dataframe().

    Raises:
        InvalidInputError: If the window is empty, holds no upstream discharge,
            or is shorter than the inflow method requires.

    Example:
        >>> options = ForecastOptions(n_steps=6, inflow_method="persistence")
        >>> result = forecast_n(window, options)
        >>> result.to_dataframe()
    """
    inflow = _prepare_inflow(window)
    method = options.inflow_method
    if len(inflow) < method.min_history:
        msg = f"inflow method '{method.value}' needs at least {method.min_history} samples, got {len(inflow)}"
        raise InvalidInputError(msg)

    dt_seconds = window.dt_seconds
    observed = window.outflow

    # 1. Routing parameters and historical routed series
    coefficients = estimate_routing_parameters(inflow, observed, dt_seconds, options.search, options.progress)
    routed = route_series(inflow, initial_outflow(inflow, observed), coefficients)

    # 2. Rating curve
    curve = _fit_window_rating(window, options.rising_only_rc)

    # 3. Forecast state
    history: list[float] = [float(v) for v in inflow]
    prev_outflow = float(routed[-1])
    last_stage = _last_stage(window)
    prev_stage = h_from_q(prev_outflow, curve) if last_stage is None else last_stage
    origin = _forecast_origin(window)

    # 4. Forecast loop
    steps: list[ForecastStep] = []
    for k in range(1, options.n_steps + 1):
        candidate = forecast_inflow_next(history, method, options.exp_alpha)
        i_t = cap_inflow_change(history[-1], candidate, options.max_inflow_change_pct)
        history.append(i_t)

        k_eff = scale_k_by_flow(coefficients.k, i_t, options.k_scale.ref_q, options.k_scale.gamma)
        step_coefficients = compute_coefficients(k_eff, coefficients.x, dt_seconds)
        o_t = step(i_t, history[-2], prev_outflow, step_coefficients)

        h_raw = h_from_q(o_t, curve)
        h_t = prev_stage + options.stage_relaxation * (h_raw - prev_stage)

        steps.append(
            ForecastStep(
                step=k,
                discharge=o_t,
                stage=h_t,
                time=origin + timedelta(seconds=k * dt_seconds),
                inflow=i_t,
            )
        )
        prev_outflow = o_t
        prev_stage = h_t

    logger.debug(
        "Forecast %d steps: K=%.3fh X=%.3f, final discharge %.3f, final stage %.3f",
        options.n_steps,
        coefficients.k_hours,
        coefficients.x,
        prev_outflow,
        prev_stage,
    )

    return ForecastResult(
        coefficients=coefficients,
        rating_curve=curve,
        historical_routed=routed,
        forecasts=tuple(steps),
        scores=_score(routed, observed, options.metrics),
    )


def forecast_next(window: ObservationWindow, search: SearchConfig | None = None) -> NextStepForecast:
    """Predict the next timestep from the most recent observed inflows.

    Estimates (K, X), routes the window and fits the rating curve on all
    downstream pairs, then applies one routing step with the last two observed
    inflows and the last routed outflow. No inflow extrapolation is involved.

    Args:
        window: Upstream/downstream observations and the time step.
        search: Grid-search configuration. Defaults to SearchConfig().

    Returns:
        NextStepForecast with the predicted discharge and stage.

    Raises:
        InvalidInputError: If the window is empty or holds no upstream discharge.
    """
    inflow = _prepare_inflow(window)
    observed = window.outflow

    coefficients = estimate_routing_parameters(inflow, observed, window.dt_seconds, search)
    routed = route_series(inflow, initial_outflow(inflow, observed), coefficients)
    curve = _fit_window_rating(window, rising_only=False)

    i_t = float(inflow[-1])
    i_prev = float(inflow[-2]) if len(inflow) >= 2 else i_t
    discharge = step(i_t, i_prev, float(routed[-1]), coefficients)

    return NextStepForecast(
        coefficients=coefficients,
        rating_curve=curve,
        historical_routed=routed,
        discharge=discharge,
        stage=h_from_q(discharge, curve),
    )
