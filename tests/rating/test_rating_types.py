"""Tests for the RatingCurve type and its mappings."""

import dataclasses

import numpy as np
import pytest

from floodroute.rating import RatingCurve, h_from_q, q_from_h


@pytest.fixture
def curve() -> RatingCurve:
    """Typical rating curve."""
    return RatingCurve(a=25.0, b=1.7, h0=0.6)


class TestRatingCurve:
    """Tests for RatingCurve construction."""

    def test_is_frozen(self, curve: RatingCurve) -> None:
        """RatingCurve is immutable."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            curve.a = 3.0  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("a", "b", "h0", "match"),
        [
            (0.0, 1.5, 0.0, "must be positive"),
            (-2.0, 1.5, 0.0, "must be positive"),
            (2.0, 0.0, 0.0, "must be non-zero"),
            (np.nan, 1.5, 0.0, "must be finite"),
            (2.0, 1.5, np.inf, "must be finite"),
        ],
    )
    def test_invalid_parameters(self, a: float, b: float, h0: float, match: str) -> None:
        """Unusable parameters are rejected."""
        with pytest.raises(ValueError, match=match):
            RatingCurve(a=a, b=b, h0=h0)

    def test_built_only_through_validation(self) -> None:
        """Curves are created through the validating constructor only."""
        assert not hasattr(RatingCurve, "from_array")


class TestMappings:
    """Tests for q_from_h and h_from_q."""

    def test_known_discharge(self, curve: RatingCurve) -> None:
        """One metre above datum gives Q = a."""
        assert q_from_h(1.6, curve) == pytest.approx(25.0)

    def test_scalar_returns_float(self, curve: RatingCurve) -> None:
        """Scalar input gives a plain float."""
        assert isinstance(q_from_h(2.0, curve), float)
        assert isinstance(h_from_q(50.0, curve), float)

    def test_below_datum_zero_flow(self, curve: RatingCurve) -> None:
        """Stages at or below the datum carry no flow."""
        np.testing.assert_array_equal(q_from_h([0.0, 0.3, 0.6], curve), [0.0, 0.0, 0.0])

    def test_non_positive_discharge_at_datum(self, curve: RatingCurve) -> None:
        """Zero or negative discharge maps to the datum."""
        np.testing.assert_array_equal(h_from_q([0.0, -5.0], curve), [0.6, 0.6])

    def test_inverse_consistency(self, curve: RatingCurve) -> None:
        """h_from_q inverts q_from_h above the datum."""
        stage = np.linspace(0.7, 6.0, 50)
        np.testing.assert_allclose(h_from_q(q_from_h(stage, curve), curve), stage, rtol=1e-9)

    def test_inverse_random_curves(self) -> None:
        """q_from_h inverts h_from_q for positive discharge on random curves."""
        rng = np.random.default_rng(7)
        for _ in range(20):
            curve = RatingCurve(a=rng.uniform(1.0, 100.0), b=rng.uniform(0.5, 3.0), h0=rng.uniform(-1.0, 3.0))
            q = rng.uniform(0.1, 2000.0, size=10)
            np.testing.assert_allclose(q_from_h(h_from_q(q, curve), curve), q, rtol=1e-9)

    def test_methods_delegate(self, curve: RatingCurve) -> None:
        """discharge() and stage() match the module functions."""
        assert curve.discharge(2.0) == q_from_h(2.0, curve)
        assert curve.stage(80.0) == h_from_q(80.0, curve)

    def test_monotone(self, curve: RatingCurve) -> None:
        """Discharge never decreases with stage for b > 0."""
        q = q_from_h(np.linspace(0.0, 8.0, 100), curve)
        assert np.all(np.diff(q) >= 0)
