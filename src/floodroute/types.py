"""Input data structures for discharge and stage forecasting.

This module defines validated input containers:
- Sample: One timestamped observation with optional stage and discharge
- ObservationWindow: Aligned upstream/downstream samples and the time step
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _finite_or_none(value: float | None) -> float | None:
    """Map non-finite values to None so they are treated as missing."""
    if value is None:
        return None
    value = float(value)
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class Sample:
    """A single gauge observation.

    Either field may be absent. Non-finite values count as missing.

    Attributes:
        time: Observation timestamp, or None if unknown.
        h: Stage [m].
        q: Discharge [m3/s].
    """

    time: datetime | None = None
    h: float | None = None  # [m]
    q: float | None = None  # [m3/s]

    @property
    def has_stage(self) -> bool:
        """Whether a finite stage was observed."""
        return _finite_or_none(self.h) is not None

    @property
    def has_discharge(self) -> bool:
        """Whether a finite discharge was observed."""
        return _finite_or_none(self.q) is not None


def _to_array(values: list[float | None]) -> np.ndarray:
    """Float64 array with NaN for missing values."""
    return np.array([np.nan if v is None else float(v) for v in values], dtype=np.float64)


class ObservationWindow(BaseModel):
    """Validated observation window for one routing reach.

    Samples must be in ascending time order at a fixed step. Before any
    computation both sequences are trimmed to the most recent
    ``min(len(upstream), len(downstream))`` samples.

    Attributes:
        upstream: Upstream station samples; discharge is the inflow.
        downstream: Downstream station samples; discharge is the observed
            outflow and stage/discharge pairs feed the rating curve.
        dt_seconds: Time step between consecutive samples [s].
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    upstream: tuple[Sample, ...]
    downstream: tuple[Sample, ...]
    dt_seconds: float = Field(gt=0, allow_inf_nan=False)  # [s]

    @field_validator("upstream", "downstream", mode="before")
    @classmethod
    def validate_samples(cls, v: object) -> tuple[Sample, ...]:
        """Coerce sample sequences to a tuple of Sample."""
        if isinstance(v, (str, bytes)) or not hasattr(v, "__iter__"):
            msg = f"samples must be a sequence, got {type(v).__name__}"
            raise ValueError(msg)
        samples = []
        for item in v:
            if isinstance(item, Sample):
                samples.append(item)
            elif isinstance(item, dict):
                samples.append(Sample(**item))
            else:
                msg = f"samples must be Sample or dict, got {type(item).__name__}"
                raise ValueError(msg)
        return tuple(samples)

    def __len__(self) -> int:
        """Return the number of samples used after trimming."""
        return min(len(self.upstream), len(self.downstream))

    def trimmed(self) -> ObservationWindow:
        """Return a window holding only the most recent aligned samples."""
        n = len(self)
        if len(self.upstream) == n and len(self.downstream) == n:
            return self
        return ObservationWindow(
            upstream=self.upstream[len(self.upstream) - n :],
            downstream=self.downstream[len(self.downstream) - n :],
            dt_seconds=self.dt_seconds,
        )

    @property
    def inflow(self) -> np.ndarray:
        """Upstream discharge of the trimmed window, NaN where missing [m3/s]."""
        return _to_array([s.q if s.has_discharge else None for s in self.trimmed().upstream])

    @property
    def outflow(self) -> np.ndarray:
        """Downstream discharge of the trimmed window, NaN where missing [m3/s]."""
        return _to_array([s.q if s.has_discharge else None for s in self.trimmed().downstream])

    @property
    def stage(self) -> np.ndarray:
        """Downstream stage of the trimmed window, NaN where missing [m]."""
        return _to_array([s.h if s.has_stage else None for s in self.trimmed().downstream])

    @property
    def time(self) -> list[datetime | None]:
        """Downstream timestamps of the trimmed window."""
        return [s.time for s in self.trimmed().downstream]

    @classmethod
    def from_dataframes(
        cls,
        upstream: pd.DataFrame,
        downstream: pd.DataFrame,
        dt_seconds: float | None = None,
    ) -> ObservationWindow:
        """Build a window from two DataFrames.

        Each frame is indexed by time (DatetimeIndex) or has a ``time`` column,
        and may hold ``h`` (stage) and ``q`` (discharge) columns. Missing
        columns and NaN values become missing fields.

        Args:
            upstream: Upstream station observations.
            downstream: Downstream station observations.
            dt_seconds: Time step [s]. If None, inferred from the median spacing
                of the downstream timestamps.

        Returns:
            New ObservationWindow.

        Raises:
            ValueError: If dt_seconds is None and cannot be inferred.
        """
        up_samples = _samples_from_frame(upstream)
        down_samples = _samples_from_frame(downstream)

        if dt_seconds is None:
            times = pd.DatetimeIndex([s.time for s in down_samples if s.time is not None])
            if len(times) < 2:
                msg = "dt_seconds cannot be inferred from fewer than 2 downstream timestamps"
                raise ValueError(msg)
            dt_seconds = float(np.median((times[1:] - times[:-1]).total_seconds()))

        return cls(upstream=up_samples, downstream=down_samples, dt_seconds=dt_seconds)


def _samples_from_frame(df: pd.DataFrame) -> list[Sample]:
    """Convert a DataFrame with optional h/q columns to samples."""
    if "time" in df.columns:
        times = pd.to_datetime(df["time"])
    elif isinstance(df.index, pd.DatetimeIndex):
        times = df.index.to_series()
    else:
        msg = "DataFrame must have a DatetimeIndex or a 'time' column"
        raise ValueError(msg)

    n = len(df)
    h = df["h"].to_numpy(dtype=np.float64) if "h" in df.columns else np.full(n, np.nan)
    q = df["q"].to_numpy(dtype=np.float64) if "q" in df.columns else np.full(n, np.nan)

    return [
        Sample(
            time=None if pd.isna(t) else pd.Timestamp(t).to_pydatetime(),
            h=_finite_or_none(hi),
            q=_finite_or_none(qi),
        )
        for t, hi, qi in zip(times, h, q, strict=True)
    ]
