"""Tests for the RoutingCoefficients value object."""

import dataclasses

import pytest

from floodroute.muskingum import RoutingCoefficients, compute_coefficients


class TestRoutingCoefficients:
    """Tests for RoutingCoefficients."""

    def test_is_frozen(self) -> None:
        """Coefficients cannot be modified."""
        c = compute_coefficients(7200.0, 0.2, 3600.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            c.k = 1.0  # type: ignore[misc]

    def test_k_hours(self) -> None:
        """k_hours converts seconds to hours."""
        c = compute_coefficients(7200.0, 0.2, 3600.0)
        assert c.k_hours == pytest.approx(2.0)

    def test_multipliers_sum_to_one(self) -> None:
        """Every derived coefficient set conserves mass."""
        for k_hours in (0.25, 1.0, 6.0, 24.0):
            for x in (0.0, 0.2, 0.5):
                c = compute_coefficients(k_hours * 3600.0, x, 3600.0)
                assert c.c0 + c.c1 + c.c2 == pytest.approx(1.0, abs=1e-12)

    def test_no_array_constructor(self) -> None:
        """Multipliers cannot be loaded independently of (k, x, dt)."""
        assert not hasattr(RoutingCoefficients, "from_array")
        assert not hasattr(RoutingCoefficients, "__array__")
