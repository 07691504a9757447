"""
Tests for benchmark-relative analytics.
Fund series are built from benchmark returns so alpha/beta are known in closed form.
"""

import math
import numpy as np
import pandas as pd
import pytest
from datetime import date, timedelta

from analysis.calculations.benchmark import (
    align_returns,
    linear_regression,
    alpha_beta,
    information_ratio,
    treynor_ratio,
    historical_var,
    historical_cvar,
    downside_capture_ratio,
    BENCHMARK_RISK_FREE_RATE,
)


def price_series(returns, start=date(2022, 1, 3)):
    prices = np.cumprod(np.concatenate([[1.0], 1 + np.asarray(returns)]))
    dates = [start + timedelta(days=i) for i in range(len(prices))]
    return pd.Series(prices, index=dates)


@pytest.fixture
def bench_returns():
    return 0.01 * np.sin(np.arange(80) * 0.7)


class TestAlignReturns:
    """Tests for align_returns function."""

    def test_inner_join_drops_unshared_dates(self):
        d = [date(2024, 1, 1) + timedelta(days=i) for i in range(6)]
        fund = pd.Series([1.0, 1.1, 1.2, 1.3, 1.4], index=d[:5])
        bench = pd.Series([10.0, 11.0, 12.0, 13.0, 14.0], index=[d[0], d[1], d[2], d[4], d[5]])

        aligned = align_returns(fund, bench)

        assert list(aligned.columns) == ['fund', 'benchmark']
        assert len(aligned) == 3
        # Benchmark return on d4 is computed from its own previous point (d2)
        assert aligned['benchmark'].iloc[-1] == pytest.approx(13.0 / 12.0 - 1)


class TestLinearRegression:

    def test_exact_fit(self):
        result = linear_regression([1.0, 2.0, 3.0], [3.0, 5.0, 7.0])
        assert result['beta'] == pytest.approx(2.0)
        assert result['alpha'] == pytest.approx(1.0)

    def test_zero_variance_x(self):
        result = linear_regression([1.0, 1.0, 1.0], [1.0, 2.0, 3.0])
        assert result == {'alpha': 2.0, 'beta': 0.0}


class TestAlphaBeta:
    """Tests for alpha_beta function."""

    def test_fewer_than_thirty_aligned_points(self, bench_returns):
        bench = price_series(bench_returns[:20])
        assert alpha_beta(bench, bench) == {'alpha': 0.0, 'beta': 0.0}

    def test_identical_series(self, bench_returns):
        bench = price_series(bench_returns)
        result = alpha_beta(bench, bench)

        assert result['beta'] == pytest.approx(1.0)
        assert result['alpha'] == pytest.approx(0.0, abs=1e-9)

    def test_double_leverage(self, bench_returns):
        """f = 2b implies excess f = 2 × excess b + rf, so alpha is rf annualized."""
        bench = price_series(bench_returns)
        fund = price_series(2 * bench_returns)
        result = alpha_beta(fund, bench)

        assert result['beta'] == pytest.approx(2.0)
        assert result['alpha'] == pytest.approx(BENCHMARK_RISK_FREE_RATE, abs=1e-6)


class TestInformationAndTreynor:

    def test_information_ratio_zero_tracking_error(self, bench_returns):
        bench = price_series(bench_returns)
        assert information_ratio(bench, bench) == 0.0

    def test_information_ratio_sign(self, bench_returns):
        bench = price_series(bench_returns)
        fund = price_series(bench_returns + 0.001 + 0.0005 * np.cos(np.arange(80)))
        assert information_ratio(fund, bench) > 0

    def test_treynor_zero_beta(self, bench_returns):
        fund = price_series(bench_returns)
        flat = price_series(np.zeros(80))
        assert treynor_ratio(fund, flat) == 0.0

    def test_treynor_formula(self, bench_returns):
        bench = price_series(bench_returns)
        fund = price_series(2 * bench_returns)
        annual = float(np.mean(2 * bench_returns)) * 252

        assert treynor_ratio(fund, bench) == pytest.approx((annual - 0.025) / 2.0, abs=1e-6)


class TestHistoricalVaR:
    """Tests for historical_var and historical_cvar."""

    @pytest.fixture
    def returns(self):
        # -0.050, -0.049, ..., 0.049 shuffled
        values = list(np.linspace(-0.05, 0.049, 100))
        return values[50:] + values[:50]

    def test_var(self, returns):
        assert historical_var(returns, 0.95) == pytest.approx(0.045)

    def test_cvar(self, returns):
        assert historical_cvar(returns, 0.95) == pytest.approx(0.048)

    def test_fewer_than_thirty(self):
        assert historical_var([-0.01] * 29) == 0.0
        assert historical_cvar([-0.01] * 29) == 0.0

    def test_non_finite_dropped(self):
        values = list(np.linspace(-0.05, 0.049, 100)) + [math.nan, math.inf]
        assert historical_var(values) == pytest.approx(0.045)


class TestDownsideCapture:

    def test_double_leverage_captures_twice(self, bench_returns):
        bench = price_series(bench_returns)
        fund = price_series(2 * bench_returns)
        assert downside_capture_ratio(fund, bench) == pytest.approx(2.0)

    def test_no_down_days(self):
        up = price_series(np.full(60, 0.001))
        assert downside_capture_ratio(up, up) == 0.0
