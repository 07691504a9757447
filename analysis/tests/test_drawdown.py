"""
Tests for drawdown calculation utilities.
Uses crafted series with known drawdown patterns for verification.
"""

import math
import pytest

from analysis.calculations.drawdown import max_drawdown, calmar_ratio


class TestMaxDrawdown:
    """Tests for max_drawdown function."""

    def test_two_point_decline(self):
        """3.0 -> 2.0 is a one-third decline."""
        assert max_drawdown([3.0, 2.0]) == 33.33

    def test_peak_trough_recovery(self):
        """Worst decline is measured from the running peak, not the start."""
        # 100 -> 120 (peak) -> 90 (trough) -> 125
        prices = [100.0, 110.0, 120.0, 110.0, 90.0, 100.0, 125.0]
        assert max_drawdown(prices) == 25.0

    def test_fewer_than_two_points(self):
        """Less than 2 points has no drawdown."""
        assert max_drawdown([]) == 0.0
        assert max_drawdown([1.5]) == 0.0

    def test_non_decreasing_series(self):
        """A series that never falls has zero drawdown."""
        assert max_drawdown([1.0, 1.0, 1.1, 1.2, 1.2, 1.5]) == 0.0

    def test_non_finite_values_are_skipped(self):
        """A corrupt point is dropped, not read as a zero price."""
        assert max_drawdown([1.0, float('nan'), 1.2, 0.9]) == 25.0

        rising = [1.0 + 0.01 * i for i in range(40)]
        rising[20] = float('nan')
        assert max_drawdown(rising) == 0.0
        assert max_drawdown(rising[:20] + [float('inf')] + rising[21:]) == 0.0


class TestCalmarRatio:
    """Tests for calmar_ratio function."""

    def test_basic_ratio(self):
        assert calmar_ratio(10.0, 20.0) == 0.5

    def test_uses_absolute_drawdown(self):
        assert calmar_ratio(10.0, -20.0) == 0.5

    def test_zero_drawdown(self):
        assert calmar_ratio(15.0, 0.0) == 0.0

    @pytest.mark.parametrize("annual, drawdown", [
        (float('nan'), 5.0),
        (float('inf'), 5.0),
        (5.0, float('-inf')),
        (None, 5.0),
    ])
    def test_non_finite_inputs(self, annual, drawdown):
        assert calmar_ratio(annual, drawdown) == 0.0
