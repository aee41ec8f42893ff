"""Metrics registry for routing skill scores.

Provides a global registry mapping metric names to their implementations
and optimization directions.
"""

import logging
from collections.abc import Callable, Iterable
from typing import TypeAlias

from numpy.typing import ArrayLike

logger = logging.getLogger(__name__)

# Type alias for metric functions: (observed, simulated) -> score
MetricFunction: TypeAlias = Callable[[ArrayLike, ArrayLike], float]

# Global registry: {name: (function, direction)}
METRICS: dict[str, tuple[MetricFunction, str]] = {}


def register(direction: str) -> Callable[[MetricFunction], MetricFunction]:
    """Decorator to register a metric function.

    Args:
        direction: Either "maximize" or "minimize".

    Returns:
        Decorator that registers the function and returns it unchanged.

    Example:
        @register("minimize")
        def sse(observed, simulated):
            ...
    """
    if direction not in ("maximize", "minimize"):
        msg = f"direction must be 'maximize' or 'minimize', got '{direction}'"
        raise ValueError(msg)

    def decorator(func: MetricFunction) -> MetricFunction:
        METRICS[func.__name__] = (func, direction)
        return func

    return decorator


def get_metric(name: str) -> tuple[MetricFunction, str]:
    """Get a metric function and its direction by name.

    Args:
        name: The metric name (e.g., "nse", "rmse").

    Returns:
        Tuple of (function, direction).

    Raises:
        KeyError: If metric name is not registered.
    """
    if name not in METRICS:
        available = ", ".join(sorted(METRICS.keys()))
        msg = f"Unknown metric '{name}'. Available: {available}"
        raise KeyError(msg)
    return METRICS[name]


def list_metrics() -> list[str]:
    """Return sorted list of registered metric names."""
    return sorted(METRICS.keys())


def validate_metrics(names: Iterable[str]) -> tuple[str, ...]:
    """Check that every name is a registered metric.

    Args:
        names: Metric names.

    Returns:
        The names as a tuple, in the given order, without duplicates.

    Raises:
        ValueError: If a name is not registered.
    """
    result: list[str] = []
    for name in names:
        if name not in METRICS:
            available = ", ".join(sorted(METRICS.keys()))
            msg = f"Unknown metric '{name}'. Available: {available}"
            raise ValueError(msg)
        if name in result:
            logger.warning("Metric '%s' listed more than once; duplicate ignored", name)
            continue
        result.append(name)
    return tuple(result)
