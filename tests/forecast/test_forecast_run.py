"""Tests for forecast_n and forecast_next."""

import logging
from datetime import UTC, datetime, timedelta

import numpy as np
import pytest

from floodroute import InvalidInputError, ObservationWindow, Sample
from floodroute.calibration import SearchConfig
from floodroute.forecast import ForecastOptions, forecast_n, forecast_next
from floodroute.muskingum import compute_coefficients, route_series, step
from floodroute.rating import RatingCurve, h_from_q

START = datetime(2024, 3, 1, tzinfo=UTC)
DT = 3600.0

# Small grid to keep the end-to-end tests quick
FAST_SEARCH = SearchConfig(k_grid=5, x_grid=5, fine_points=3)


def _window(
    inflow,
    outflow,
    stage=None,
    dt: float = DT,
    start: datetime | None = START,
) -> ObservationWindow:
    """Window with aligned upstream/downstream samples at a fixed step."""
    n = max(len(inflow), len(outflow))
    stage = [None] * len(outflow) if stage is None else stage
    times = [None if start is None else start + timedelta(seconds=i * dt) for i in range(n)]
    upstream = [Sample(time=t, q=q) for t, q in zip(times[n - len(inflow) :], inflow, strict=True)]
    downstream = [Sample(time=t, h=h, q=q) for t, h, q in zip(times[n - len(outflow) :], stage, outflow, strict=True)]
    return ObservationWindow(upstream=upstream, downstream=downstream, dt_seconds=dt)


@pytest.fixture
def rising_window() -> ObservationWindow:
    """Ramp inflow routed with K=4h, X=0.2, and stages on a power-law rating."""
    inflow = 100.0 + 5.0 * np.arange(48)
    outflow = route_series(inflow, 100.0, compute_coefficients(4 * 3600.0, 0.2, DT))
    stage = (outflow / 70.0) ** (1 / 1.3)
    return _window(list(inflow), list(outflow), list(stage))


class TestForecastN:
    """Tests for forecast_n."""

    def test_steady_state(self) -> None:
        """Constant flow stays constant in discharge and stage."""
        window = _window([100.0] * 24, [100.0] * 24)
        result = forecast_n(window, ForecastOptions(n_steps=5, search=FAST_SEARCH))

        assert len(result) == 5
        np.testing.assert_allclose(result.discharge, 100.0, rtol=1e-9)
        # No stage observed: fallback curve {a: 1, b: 1.2, h0: 0}
        assert result.rating_curve == RatingCurve(a=1.0, b=1.2, h0=0.0)
        np.testing.assert_allclose(result.stage, 100.0 ** (1 / 1.2), rtol=1e-9)

    @pytest.mark.parametrize("relaxation", [0.1, 0.35, 0.7, 1.0])
    def test_three_sample_steady_state_fixed_point(self, relaxation: float) -> None:
        """A constant 3-sample window stays at 100 under persistence for any lambda."""
        window = _window([100.0, 100.0, 100.0], [100.0, 100.0, 100.0])
        options = ForecastOptions(n_steps=3, inflow_method="persistence", stage_relaxation=relaxation)
        result = forecast_n(window, options)

        np.testing.assert_allclose(result.historical_routed, 100.0, rtol=1e-9)
        np.testing.assert_allclose(result.discharge, 100.0, rtol=1e-9)
        np.testing.assert_allclose([f.inflow for f in result.forecasts], 100.0)
        np.testing.assert_allclose(result.stage, result.stage[0], rtol=1e-9)

    def test_rising_limb_monotone(self, rising_window: ObservationWindow) -> None:
        """A steadily rising hydrograph forecasts non-decreasing discharge and stage."""
        options = ForecastOptions(n_steps=6, inflow_method="linear", stage_relaxation=1.0)
        result = forecast_n(rising_window, options)

        assert np.all(np.diff(result.discharge) >= 0)
        assert np.all(np.diff(result.stage) >= 0)
        assert result.rating_curve.b > 0

    def test_forecast_timestamps(self, rising_window: ObservationWindow) -> None:
        """Step k is stamped origin + k * dt, origin being the last downstream time."""
        result = forecast_n(rising_window, ForecastOptions(n_steps=4, search=FAST_SEARCH))
        origin = START + timedelta(hours=47)
        assert [f.time for f in result.forecasts] == [origin + timedelta(hours=k) for k in range(1, 5)]
        assert [f.step for f in result.forecasts] == [1, 2, 3, 4]

    def test_origin_defaults_to_now(self) -> None:
        """Without timestamps the forecast starts at the current UTC time."""
        window = _window([100.0] * 6, [100.0] * 6, start=None)
        before = datetime.now(UTC)
        result = forecast_n(window, ForecastOptions(n_steps=1, search=FAST_SEARCH))
        after = datetime.now(UTC)
        assert before + timedelta(seconds=DT) <= result.forecasts[0].time <= after + timedelta(seconds=DT)

    def test_inflow_capped(self) -> None:
        """A sharp jump is extrapolated no further than +12% per step."""
        inflow = [100.0] * 10 + [200.0]
        window = _window(inflow, [100.0] * 11)
        result = forecast_n(window, ForecastOptions(n_steps=2, inflow_method="linear", search=FAST_SEARCH))
        assert result.forecasts[0].inflow == pytest.approx(224.0)
        # 224 + 24 = 248 lies inside the band around 224
        assert result.forecasts[1].inflow == pytest.approx(248.0)

    def test_stage_relaxation(self, rising_window: ObservationWindow) -> None:
        """The first stage moves a fraction lambda toward the rating-curve stage."""
        result = forecast_n(rising_window, ForecastOptions(n_steps=1, stage_relaxation=0.35, search=FAST_SEARCH))
        first = result.forecasts[0]
        last_observed = rising_window.stage[-1]
        h_raw = h_from_q(first.discharge, result.rating_curve)
        assert first.stage == pytest.approx(last_observed + 0.35 * (h_raw - last_observed))

    def test_fallback_rating_with_few_pairs(self) -> None:
        """Fewer than 3 (stage, discharge) pairs gives {a: 1, b: 1.2, h0: last stage}."""
        stage = [None] * 8 + [1.5, 1.8]
        window = _window([100.0] * 10, [100.0] * 10, stage)
        result = forecast_n(window, ForecastOptions(n_steps=1, search=FAST_SEARCH))
        assert result.rating_curve == RatingCurve(a=1.0, b=1.2, h0=1.8)

    def test_rising_filter_ignored_when_too_few_survive(self) -> None:
        """On a falling record the filter leaves one pair, so all pairs are fitted."""
        outflow = list(np.linspace(300.0, 120.0, 12))
        stage = list((np.array(outflow) / 50.0) ** 0.6)
        window = _window(outflow, outflow, stage)
        rising = forecast_n(window, ForecastOptions(n_steps=1, rising_only_rc=True, search=FAST_SEARCH))
        all_pairs = forecast_n(window, ForecastOptions(n_steps=1, rising_only_rc=False, search=FAST_SEARCH))
        assert rising.rating_curve == all_pairs.rating_curve

    def test_scores(self, rising_window: ObservationWindow) -> None:
        """Hindcast skill is reported for the requested metrics."""
        options = ForecastOptions(n_steps=1, metrics=("nse", "rmse"))
        result = forecast_n(rising_window, options)
        assert list(result.scores) == ["nse", "rmse"]
        assert result.scores["nse"] > 0.99

    def test_scores_empty_without_observations(self) -> None:
        """No observed outflow means no scores."""
        window = _window([100.0] * 6, [None] * 6)
        result = forecast_n(window, ForecastOptions(n_steps=1, search=FAST_SEARCH))
        assert result.scores == {}

    def test_window_trimmed(self) -> None:
        """Longer upstream records are trimmed to the most recent samples."""
        window = _window([999.0] * 4 + [100.0] * 6, [100.0] * 6)
        result = forecast_n(window, ForecastOptions(n_steps=1, inflow_method="persistence", search=FAST_SEARCH))
        assert len(result.historical_routed) == 6
        assert result.forecasts[0].inflow == pytest.approx(100.0)

    def test_upstream_gap_interpolated(self, caplog: pytest.LogCaptureFixture) -> None:
        """Missing upstream discharge is interpolated with a warning."""
        window = _window([100.0, 110.0, None, 130.0, 140.0], [100.0] * 5)
        with caplog.at_level(logging.WARNING, logger="floodroute.forecast.run"):
            result = forecast_n(window, ForecastOptions(n_steps=1, search=FAST_SEARCH))
        assert "Interpolating 1 missing upstream discharge" in caplog.text
        assert len(result.historical_routed) == 5

    def test_empty_window_raises(self) -> None:
        """An empty window is rejected."""
        window = ObservationWindow(upstream=[], downstream=[], dt_seconds=DT)
        with pytest.raises(InvalidInputError, match="empty"):
            forecast_n(window, ForecastOptions(n_steps=1))

    def test_no_upstream_discharge_raises(self) -> None:
        """A window without upstream discharge is rejected."""
        window = _window([None] * 4, [100.0] * 4)
        with pytest.raises(InvalidInputError, match="no upstream discharge"):
            forecast_n(window, ForecastOptions(n_steps=1))

    def test_short_history_raises(self) -> None:
        """The linear method needs two inflow samples."""
        window = _window([100.0], [100.0])
        with pytest.raises(InvalidInputError, match="needs at least 2"):
            forecast_n(window, ForecastOptions(n_steps=1, inflow_method="linear"))


class TestForecastNext:
    """Tests for forecast_next."""

    def test_one_routing_step(self, rising_window: ObservationWindow) -> None:
        """Prediction is one routing step from the last two inflows."""
        result = forecast_next(rising_window, FAST_SEARCH)
        inflow = rising_window.inflow
        expected = step(inflow[-1], inflow[-2], result.historical_routed[-1], result.coefficients)
        assert result.discharge == pytest.approx(expected)
        assert result.stage == pytest.approx(h_from_q(result.discharge, result.rating_curve))

    def test_single_sample(self) -> None:
        """With one sample the previous inflow is the last inflow."""
        result = forecast_next(_window([100.0], [100.0]), FAST_SEARCH)
        assert result.discharge == pytest.approx(100.0)

    def test_empty_window_raises(self) -> None:
        """An empty window is rejected."""
        window = ObservationWindow(upstream=[], downstream=[], dt_seconds=DT)
        with pytest.raises(InvalidInputError):
            forecast_next(window)
