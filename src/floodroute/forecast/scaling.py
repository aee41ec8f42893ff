"""Flow-dependent rescaling of the Muskingum storage constant."""

from floodroute.constants import (
    DEFAULT_GAMMA,
    DEFAULT_REF_Q,
    K_EFFECTIVE_MAX,
    K_EFFECTIVE_MIN,
    RATIO_FLOOR,
)


def scale_k_by_flow(
    k_base: float,
    inflow: float,
    ref_q: float = DEFAULT_REF_Q,
    gamma: float = DEFAULT_GAMMA,
) -> float:
    """Rescale K with the inflow magnitude.

    K_eff = k_base * (inflow / ref_q)^gamma, clamped to [60 s, 7 days]. This is
    a power-law proxy for the change of travel time with flow, not a physically
    calibrated relation.

    Args:
        k_base: Estimated storage constant [s].
        inflow: Forecast inflow [m3/s].
        ref_q: Reference discharge at which K_eff equals k_base [m3/s].
        gamma: Power-law exponent [-].

    Returns:
        Effective storage constant [s].
    """
    ratio = max(RATIO_FLOOR, inflow / max(RATIO_FLOOR, ref_q))
    k_eff = k_base * ratio**gamma
    return max(K_EFFECTIVE_MIN, min(K_EFFECTIVE_MAX, k_eff))
