"""Muskingum coefficient computation with a numerical-stability guard."""

import logging

from .constants import K_FLOOR, STABILITY_MARGIN, X_MAX, X_MIN
from .types import RoutingCoefficients

logger = logging.getLogger(__name__)


def critical_k(x: float, dt_seconds: float) -> float:
    """Smallest storage constant satisfying ``dt <= 2K(1 - X)`` [s]."""
    return dt_seconds / (2.0 * (1.0 - x) + 1e-12)


def compute_coefficients(k_seconds: float, x: float, dt_seconds: float) -> RoutingCoefficients:
    """Derive Muskingum routing coefficients from K, X and the time step.

    X is clamped to [0, 0.5] and K is floored at 1e-6 s. When the supplied K
    violates the stability bound ``dt <= 2K(1 - X)``, K is raised to 1.01 times
    the critical value before the coefficients are derived.

    Args:
        k_seconds: Storage constant [s].
        x: Weighting factor [-], unclamped.
        dt_seconds: Time step [s].

    Returns:
        RoutingCoefficients with the corrected K, clamped X and C0, C1, C2.

    Raises:
        ValueError: If dt_seconds is not positive.
    """
    if not dt_seconds > 0:
        msg = f"dt_seconds must be positive, got {dt_seconds}"
        raise ValueError(msg)

    k = max(k_seconds, K_FLOOR)
    x = min(max(x, X_MIN), X_MAX)

    k_crit = critical_k(x, dt_seconds)
    if k < k_crit:
        k_stable = STABILITY_MARGIN * k_crit
        logger.debug("K=%.1fs unstable for dt=%.1fs and X=%.3f, raised to %.1fs", k, dt_seconds, x, k_stable)
        k = k_stable

    denom = 2.0 * k * (1.0 - x) + dt_seconds
    c0 = (dt_seconds - 2.0 * k * x) / denom
    c1 = (dt_seconds + 2.0 * k * x) / denom
    c2 = (2.0 * k * (1.0 - x) - dt_seconds) / denom

    return RoutingCoefficients(k=k, x=x, c0=c0, c1=c1, c2=c2)
