"""Rating curve data structure and its stage/discharge mappings.

A rating curve is the power law ``Q = a * max(H - h0, 0)^b``. Below the datum
h0 the discharge is zero.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike


def _validate_curve(curve: RatingCurve) -> None:
    """Raise ValueError if the curve cannot be evaluated in both directions."""
    if not np.isfinite([curve.a, curve.b, curve.h0]).all():
        msg = f"rating curve parameters must be finite, got a={curve.a}, b={curve.b}, h0={curve.h0}"
        raise ValueError(msg)
    if curve.a <= 0:
        msg = f"rating curve scale a must be positive, got {curve.a}"
        raise ValueError(msg)
    if curve.b == 0:
        msg = "rating curve exponent b must be non-zero"
        raise ValueError(msg)


@dataclass(frozen=True)
class RatingCurve:
    """Power-law stage-discharge relation.

    Attributes:
        a: Scale [m3/s per m^b], positive.
        b: Exponent [-], non-zero.
        h0: Datum offset, the stage of zero flow [m].
    """

    a: float
    b: float
    h0: float  # [m]

    def __post_init__(self) -> None:
        """Validate curve parameters."""
        _validate_curve(self)

    def discharge(self, stage: ArrayLike) -> float | np.ndarray:
        """Discharge for a stage [m3/s]. See ``q_from_h``."""
        return q_from_h(stage, self)

    def stage(self, discharge: ArrayLike) -> float | np.ndarray:
        """Stage for a discharge [m]. See ``h_from_q``."""
        return h_from_q(discharge, self)


def q_from_h(stage: ArrayLike, curve: RatingCurve) -> float | np.ndarray:
    """Discharge from stage: ``a * max(h - h0, 0)^b``.

    Args:
        stage: Stage value or array [m].
        curve: Rating curve.

    Returns:
        Discharge [m3/s], a float for scalar input.
    """
    head = np.maximum(np.asarray(stage, dtype=np.float64) - curve.h0, 0.0)
    q = curve.a * np.power(head, curve.b)
    return float(q) if q.ndim == 0 else q


def h_from_q(discharge: ArrayLike, curve: RatingCurve) -> float | np.ndarray:
    """Stage from discharge: ``h0 + (q / a)^(1 / b)`` for q > 0, else h0.

    Args:
        discharge: Discharge value or array [m3/s].
        curve: Rating curve.

    Returns:
        Stage [m], a float for scalar input.
    """
    q = np.asarray(discharge, dtype=np.float64)
    positive = q > 0
    ratio = np.where(positive, q, curve.a) / curve.a
    h = np.where(positive, curve.h0 + np.power(ratio, 1.0 / curve.b), curve.h0)
    return float(h) if h.ndim == 0 else h
