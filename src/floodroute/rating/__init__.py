"""Rating curve subpackage.

Power-law stage-discharge relation, its fitting and inverse mappings.
"""

from .fit import datum_search_range, fallback_curve, fit_rating_curve, rising_limb_filter
from .types import RatingCurve, h_from_q, q_from_h

__all__ = [
    "RatingCurve",
    "datum_search_range",
    "fallback_curve",
    "fit_rating_curve",
    "h_from_q",
    "q_from_h",
    "rising_limb_filter",
]
