"""Exception types raised by floodroute."""


class InvalidInputError(ValueError):
    """Observation or inflow data unusable for estimation or forecasting."""


class OptimizationError(RuntimeError):
    """Parameter search finished without evaluating any candidate."""
