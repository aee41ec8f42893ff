"""Numerical constants shared across floodroute.

Fixed values used by the routing, rating and forecast computations.
"""

SECONDS_PER_HOUR: float = 3600.0

# Operational band for the flow-scaled storage constant [s]
K_EFFECTIVE_MIN: float = 60.0  # 1 minute
K_EFFECTIVE_MAX: float = 7 * 24 * 3600.0  # 7 days

# Flow-scaled K defaults
DEFAULT_REF_Q: float = 300.0  # Reference discharge [m3/s]
DEFAULT_GAMMA: float = 0.3  # Power-law exponent [-]

# Inflow forecast defaults
DEFAULT_EXP_ALPHA: float = 0.35
DEFAULT_MAX_INFLOW_CHANGE_PCT: float = 0.12
DEFAULT_STAGE_RELAXATION: float = 0.35

# Floor applied to ratios to avoid division by zero
RATIO_FLOOR: float = 1e-6

# Minimum number of (stage, discharge) pairs for a rating-curve fit
MIN_RATING_PAIRS: int = 3

# Minimum number of pairs before the rising-limb filter is attempted
MIN_RISING_LIMB_PAIRS: int = 5
