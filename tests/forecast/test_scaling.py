"""Tests for flow-scaled storage constant."""

import pytest

from floodroute.constants import K_EFFECTIVE_MAX, K_EFFECTIVE_MIN
from floodroute.forecast import scale_k_by_flow

K_BASE = 4 * 3600.0


class TestScaleKByFlow:
    """Tests for scale_k_by_flow."""

    def test_reference_flow_unchanged(self) -> None:
        """At the reference discharge K is unchanged."""
        assert scale_k_by_flow(K_BASE, 300.0) == pytest.approx(K_BASE)

    def test_power_law(self) -> None:
        """K scales with (q / ref_q)^gamma."""
        assert scale_k_by_flow(K_BASE, 600.0, ref_q=300.0, gamma=0.5) == pytest.approx(K_BASE * 2**0.5)

    def test_gamma_zero_disables(self) -> None:
        """gamma = 0 leaves K unchanged at any flow."""
        assert scale_k_by_flow(K_BASE, 5.0, gamma=0.0) == pytest.approx(K_BASE)

    def test_increases_with_flow(self) -> None:
        """For positive gamma K grows with inflow."""
        values = [scale_k_by_flow(K_BASE, q) for q in (50.0, 150.0, 300.0, 900.0)]
        assert values == sorted(values)

    def test_lower_clamp(self) -> None:
        """K_eff never drops below one minute."""
        assert scale_k_by_flow(600.0, 0.0) == K_EFFECTIVE_MIN

    def test_upper_clamp(self) -> None:
        """K_eff never exceeds seven days."""
        assert scale_k_by_flow(6 * 86400.0, 1e6, gamma=1.0) == K_EFFECTIVE_MAX

    def test_zero_reference_floored(self) -> None:
        """A zero reference discharge does not divide by zero."""
        assert scale_k_by_flow(K_BASE, 100.0, ref_q=0.0) == K_EFFECTIVE_MAX
