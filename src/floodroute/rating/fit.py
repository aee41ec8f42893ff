"""Rating-curve fitting by datum search and log-linear regression.

For each candidate datum h0 the power law ``Q = a * (H - h0)^b`` is fitted by
ordinary least squares on ``ln Q = ln a + b * ln(H - h0)``. Candidates are
scored by the squared error in discharge units, since forecasts are judged on
discharge and stage directly rather than on their logarithms.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from numpy.typing import ArrayLike

from floodroute.constants import MIN_RATING_PAIRS

from .types import RatingCurve

logger = logging.getLogger(__name__)

# Datum search
H0_CANDIDATES: int = 41
H0_LOWER_PERCENTILE: float = 0.1
H0_UPPER_PERCENTILE: float = 0.4
H0_MARGIN: float = 0.05  # [m]

# Regression guards
MIN_HEAD: float = 1e-9  # [m]
MIN_DENOMINATOR: float = 1e-12


def _valid_pairs(stage: ArrayLike, discharge: ArrayLike) -> tuple[np.ndarray, np.ndarray]:
    """Return the pairs where both stage and discharge are finite."""
    h = np.asarray(stage, dtype=np.float64).ravel()
    q = np.asarray(discharge, dtype=np.float64).ravel()
    if len(h) != len(q):
        msg = f"discharge length {len(q)} does not match stage length {len(h)}"
        raise ValueError(msg)
    mask = np.isfinite(h) & np.isfinite(q)
    return h[mask], q[mask]


def fallback_curve(stage: ArrayLike) -> RatingCurve:
    """Default curve ``{a: 1, b: 1, h0: min(stage)}`` used when a fit is degenerate."""
    h = np.asarray(stage, dtype=np.float64).ravel()
    finite = h[np.isfinite(h)]
    h0 = float(finite.min()) if finite.size > 0 else 0.0
    return RatingCurve(a=1.0, b=1.0, h0=h0)


def datum_search_range(sorted_stage: np.ndarray) -> tuple[float, float]:
    """Range of candidate datums from the 10th and 40th stage percentiles.

    Args:
        sorted_stage: Stages in ascending order [m].

    Returns:
        Tuple of (h0_min, h0_max) [m].
    """
    n = len(sorted_stage)
    p10 = float(sorted_stage[math.floor(H0_LOWER_PERCENTILE * (n - 1))])
    p40 = float(sorted_stage[math.floor(H0_UPPER_PERCENTILE * (n - 1))])
    return min(p10, p40 - H0_MARGIN), max(p40, p10 + H0_MARGIN)


def _fit_log_linear(head: np.ndarray, discharge: np.ndarray) -> tuple[float, float] | None:
    """OLS fit of ln(q) = ln(a) + b * ln(head).

    Returns:
        Tuple of (a, b), or None when the regression is degenerate.
    """
    x = np.log(np.maximum(head, MIN_HEAD))
    y = np.log(discharge)
    n = len(x)

    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xx = float(np.sum(x * x))
    sum_xy = float(np.sum(x * y))

    denominator = n * sum_xx - sum_x * sum_x
    if abs(denominator) < MIN_DENOMINATOR:
        return None

    b = (n * sum_xy - sum_x * sum_y) / denominator
    if b == 0:
        return None
    intercept = (sum_y - b * sum_x) / n
    return math.exp(intercept), b


def fit_rating_curve(stage: ArrayLike, discharge: ArrayLike) -> RatingCurve:
    """Fit a power-law rating curve ``Q = a * (H - h0)^b`` to paired samples.

    Pairs with a missing or non-finite stage or discharge are rejected. The
    datum h0 is searched over 41 evenly spaced candidates between the 10th and
    40th percentile of the stages (widened by 0.05 m). For each candidate the
    pairs with ``stage > h0`` and ``discharge > 0`` are fitted by log-space
    OLS, and the candidate is scored by the SSE of
    ``discharge - a * max(stage - h0, 0)^b`` over all valid pairs.

    Falls back to ``{a: 1, b: 1, h0: min(stage)}`` when fewer than 3 valid
    pairs exist or no candidate is admissible.

    Args:
        stage: Stage observations [m].
        discharge: Discharge observations paired with the stages [m3/s].

    Returns:
        The fitted RatingCurve.

    Raises:
        ValueError: If stage and discharge lengths differ.
    """
    h, q = _valid_pairs(stage, discharge)
    if len(h) < MIN_RATING_PAIRS:
        logger.debug("Only %d valid (stage, discharge) pairs; using fallback rating curve", len(h))
        return fallback_curve(stage)

    h0_min, h0_max = datum_search_range(np.sort(h))

    best: tuple[float, RatingCurve] | None = None
    for h0 in np.linspace(h0_min, h0_max, H0_CANDIDATES):
        usable = (h > h0) & (q > 0)
        if np.count_nonzero(usable) < MIN_RATING_PAIRS:
            continue

        fit = _fit_log_linear(h[usable] - h0, q[usable])
        if fit is None:
            continue
        a, b = fit
        if not (np.isfinite(a) and a > 0 and np.isfinite(b)):
            continue

        predicted = a * np.power(np.maximum(h - h0, 0.0), b)
        sse = float(np.sum((q - predicted) ** 2))
        if not np.isfinite(sse):
            continue
        if best is None or sse < best[0]:
            best = (sse, RatingCurve(a=a, b=b, h0=float(h0)))

    if best is None:
        logger.debug("No admissible datum candidate; using fallback rating curve")
        return fallback_curve(stage)

    sse, curve = best
    logger.debug("Fitted rating curve a=%.4g b=%.4g h0=%.3f (SSE=%.4g)", curve.a, curve.b, curve.h0, sse)
    return curve


def rising_limb_filter(stage: ArrayLike, discharge: ArrayLike) -> tuple[np.ndarray, np.ndarray]:
    """Keep the first pair and every pair whose discharge did not decrease.

    Restricting the fit to the rising limb reduces loop-rating (hysteresis)
    bias. Each pair is compared with its predecessor in the unfiltered sequence.

    Args:
        stage: Stage observations in time order [m].
        discharge: Discharge observations paired with the stages [m3/s].

    Returns:
        Tuple of (stage, discharge) arrays for the retained pairs.
    """
    h = np.asarray(stage, dtype=np.float64).ravel()
    q = np.asarray(discharge, dtype=np.float64).ravel()
    if len(h) != len(q):
        msg = f"discharge length {len(q)} does not match stage length {len(h)}"
        raise ValueError(msg)
    if len(q) == 0:
        return h, q

    keep = np.ones(len(q), dtype=bool)
    keep[1:] = np.diff(q) >= 0
    return h[keep], q[keep]
