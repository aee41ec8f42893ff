"""Progress bar tracking for the routing-parameter grid search using tqdm."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from tqdm.auto import tqdm


class ProgressTracker:
    """Track grid-search progress with a tqdm progress bar.

    Shows the number of evaluated cells and the best SSE found so far.

    Parameters
    ----------
    total
        Total number of grid cells to evaluate.
    disable
        Whether to hide the bar entirely.

    """

    def __init__(self, total: int, disable: bool = False) -> None:
        self._total = total
        self._bar = tqdm(total=total, desc="Estimating", unit="cell", disable=disable)

    def update(self, best_sse: float) -> None:
        """Advance the bar by one cell.

        Parameters
        ----------
        best_sse
            Best SSE found so far.

        """
        self._bar.set_postfix(best=f"{best_sse:.4g}", refresh=False)
        self._bar.update(1)

    def close(self) -> None:
        """Close the progress bar if not already closed."""
        if not self._bar.disable:
            self._bar.close()


@contextmanager
def progress_context(total: int, disable: bool = False) -> Generator[ProgressTracker, None, None]:
    """Context manager for progress tracking during estimation.

    Ensures the progress bar is properly closed even if an exception occurs.

    Parameters
    ----------
    total
        Total number of grid cells to evaluate.
    disable
        Whether to hide the bar entirely.

    Yields
    ------
    ProgressTracker
        The progress tracker instance.

    Examples
    --------
    >>> with progress_context(246) as tracker:
    ...     tracker.update(12.5)

    """
    tracker = ProgressTracker(total, disable=disable)
    try:
        yield tracker
    finally:
        tracker.close()
