"""One-step-ahead inflow forecasting and the change-rate guard.

Each forecasting method is a plain function registered under an InflowMethod
value. The method table is closed: every InflowMethod member has exactly one
function.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import TypeAlias

from floodroute.constants import DEFAULT_EXP_ALPHA, DEFAULT_MAX_INFLOW_CHANGE_PCT
from floodroute.errors import InvalidInputError

logger = logging.getLogger(__name__)


class InflowMethod(str, Enum):
    """Method used to extrapolate upstream inflow one step ahead."""

    persistence = "persistence"
    linear = "linear"
    ar1 = "ar1"
    exp = "exp"

    @property
    def min_history(self) -> int:
        """Minimum number of past inflow values the method needs."""
        return {
            InflowMethod.persistence: 1,
            InflowMethod.linear: 2,
            InflowMethod.ar1: 2,
            InflowMethod.exp: 1,
        }[self]


# Type alias for forecasters: (history, exp_alpha) -> next inflow
InflowForecaster: TypeAlias = Callable[[Sequence[float], float], float]

# Global table: {method: function}
FORECASTERS: dict[InflowMethod, InflowForecaster] = {}


def register(method: InflowMethod) -> Callable[[InflowForecaster], InflowForecaster]:
    """Decorator to register the forecaster of an inflow method.

    Args:
        method: The InflowMethod the function implements.

    Returns:
        Decorator that registers the function and returns it unchanged.
    """

    def decorator(func: InflowForecaster) -> InflowForecaster:
        FORECASTERS[method] = func
        return func

    return decorator


@register(InflowMethod.persistence)
def persistence(history: Sequence[float], exp_alpha: float = DEFAULT_EXP_ALPHA) -> float:
    """Last value, floored at 0."""
    return max(0.0, history[-1])


@register(InflowMethod.linear)
def linear(history: Sequence[float], exp_alpha: float = DEFAULT_EXP_ALPHA) -> float:
    """Two-point extrapolation ``last + (last - second_last)``, floored at 0."""
    last = history[-1]
    second_last = history[-2] if len(history) >= 2 else last
    return max(0.0, last + (last - second_last))


@register(InflowMethod.ar1)
def ar1(history: Sequence[float], exp_alpha: float = DEFAULT_EXP_ALPHA) -> float:
    """Lag-1 autoregression fitted by least squares over the whole history.

    phi = sum(I_i * I_{i-1}) / sum(I_{i-1}^2), 0 if the denominator is 0.
    Returns ``phi * last``, floored at 0. A single-value history is persisted.
    """
    m = len(history)
    last = history[-1]
    if m < 2:
        return last

    num = 0.0
    den = 0.0
    for i in range(1, m):
        num += history[i] * history[i - 1]
        den += history[i - 1] * history[i - 1]
    phi = 0.0 if den == 0 else num / den
    return max(0.0, phi * last)


@register(InflowMethod.exp)
def exponential_smoothing(history: Sequence[float], exp_alpha: float = DEFAULT_EXP_ALPHA) -> float:
    """Simple exponential smoothing of the level, then persistence.

    s_0 = I_0, s_i = alpha * I_i + (1 - alpha) * s_{i-1}. Returns the final
    level, floored at 0.
    """
    level = history[0]
    for value in history[1:]:
        level = exp_alpha * value + (1.0 - exp_alpha) * level
    return max(0.0, level)


def forecast_inflow_next(
    history: Sequence[float],
    method: InflowMethod | str = InflowMethod.exp,
    exp_alpha: float = DEFAULT_EXP_ALPHA,
) -> float:
    """Forecast the next inflow value from its history.

    Args:
        history: Past inflow values, most recent last [m3/s].
        method: Forecasting method name or InflowMethod. Default "exp".
        exp_alpha: Smoothing factor for the "exp" method, in (0, 1].

    Returns:
        Forecast inflow for the next timestep [m3/s], non-negative.

    Raises:
        InvalidInputError: If the history is shorter than the method requires.
        ValueError: If the method is unknown or exp_alpha is outside (0, 1].
    """
    try:
        method = InflowMethod(method)
    except ValueError as e:
        available = ", ".join(m.value for m in InflowMethod)
        msg = f"Unknown inflow method '{method}'. Available: {available}"
        raise ValueError(msg) from e

    if not 0 < exp_alpha <= 1:
        msg = f"exp_alpha must be in (0, 1], got {exp_alpha}"
        raise ValueError(msg)

    if len(history) < method.min_history:
        msg = f"inflow method '{method.value}' needs at least {method.min_history} values, got {len(history)}"
        raise InvalidInputError(msg)

    return float(FORECASTERS[method](history, exp_alpha))


def cap_inflow_change(
    previous: float,
    candidate: float,
    max_pct: float = DEFAULT_MAX_INFLOW_CHANGE_PCT,
) -> float:
    """Clamp a candidate inflow to within +-max_pct of the previous inflow.

    No bound is applied when the previous inflow is not positive.

    Args:
        previous: Previous inflow [m3/s].
        candidate: Candidate next inflow [m3/s].
        max_pct: Maximum relative change per step. Default 0.12.

    Returns:
        Capped inflow [m3/s].
    """
    if previous <= 0:
        return candidate
    upper = previous * (1.0 + max_pct)
    lower = previous * (1.0 - max_pct)
    capped = min(upper, max(lower, candidate))
    if capped != candidate:
        logger.debug("Inflow %.3f capped to %.3f (previous %.3f)", candidate, capped, previous)
    return capped
