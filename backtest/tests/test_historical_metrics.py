"""
Tests for point-in-time metrics and forward returns.
"""

import math
import pytest
from datetime import date, timedelta

from backtest.historical_metrics import (
    truncate_history,
    metrics_at_date,
    build_record_at_date,
    forward_returns,
)
from backtest.records import FundHistory


FIRST = date(2018, 1, 1)


def linear_history(days=5 * 365 + 1):
    """Daily NAV rising linearly from 1.0 to 2.0."""
    dates = [FIRST + timedelta(days=i) for i in range(days)]
    prices = [1.0 + i / (days - 1) for i in range(days)]
    return prices, dates


class TestTruncateHistory:

    def test_keeps_points_on_or_before(self):
        prices, dates = linear_history(10)
        cut_prices, cut_dates = truncate_history(prices, dates, dates[4])

        assert cut_dates == dates[:5]
        assert cut_prices == prices[:5]

    def test_before_first_point(self):
        prices, dates = linear_history(10)
        assert truncate_history(prices, dates, FIRST - timedelta(days=1)) == ([], [])


class TestMetricsAtDate:
    """Tests for metrics_at_date function."""

    def test_no_lookahead(self):
        """Rewriting everything after T must not change metrics at T."""
        prices, dates = linear_history()
        eval_date = dates[800]
        tampered = prices[:801] + [p * 10 for p in prices[801:]]

        assert metrics_at_date(prices, dates, eval_date) == metrics_at_date(tampered, dates, eval_date)

    def test_windows_follow_available_history(self):
        prices, dates = linear_history()
        ret1, ret3, breakdown = metrics_at_date(prices, dates, dates[500])

        assert ret1 > 0
        assert ret3 == 0.0
        assert breakdown.year1 is not None
        assert breakdown.year3 is None


class TestBuildRecordAtDate:

    def test_synthesized_meta(self):
        _, _, breakdown = metrics_at_date(*linear_history(), FIRST + timedelta(days=730))
        history = FundHistory(
            code='000003',
            name='Linear Fund',
            fund_type='混合型',
            navs=(),
            establish_date=FIRST,
            fund_size=20.0,
            manager_years=9.0,
            fee_rate=1.5,
        )
        record = build_record_at_date(history, FIRST + timedelta(days=730), 10.0, 0.0, breakdown)

        assert record.meta.star_rating == 0.0
        assert record.meta.manager_years == 2.0
        assert record.meta.fund_size == 20.0
        assert record.meta.fee_rate == 1.5
        assert record.performance.return_year1 == 10.0

    def test_without_establish_date_uses_current_tenure(self):
        _, _, breakdown = metrics_at_date(*linear_history(), FIRST + timedelta(days=730))
        history = FundHistory(code='x', name='x', fund_type='x', navs=(), manager_years=4.2)
        record = build_record_at_date(history, FIRST + timedelta(days=730), 0.0, 0.0, breakdown)

        assert record.meta.manager_years == 4.2


class TestForwardReturns:
    """Tests for forward_returns function."""

    def test_linear_nav_one_year(self):
        prices, dates = linear_history()
        eval_date = FIRST + timedelta(days=730)
        (fwd,) = forward_returns(prices, dates, eval_date, [1])

        # Anchor at day 730, target is day 1096, the first day at least 365.25 days later.
        # NAV(i) = 1 + i / 1825, so the return is (366 / 1825) / (1 + 730 / 1825).
        expected = (1096 - 730) / 1825 / (1 + 730 / 1825) * 100
        assert fwd.period == '1y'
        assert fwd.is_valid
        assert fwd.total_return == 14.32
        assert fwd.total_return == pytest.approx(expected, abs=0.005)
        assert fwd.annualized == pytest.approx(expected * 365.25 / 366, abs=0.05)

    def test_last_point_stands_in_when_mostly_covered(self):
        prices, dates = linear_history()
        eval_date = dates[-300]
        (fwd,) = forward_returns(prices, dates, eval_date, [1])

        expected = round((prices[-1] - prices[-300]) / prices[-300] * 100, 2)
        assert fwd.total_return == expected

    def test_under_covered_horizon_is_nan(self):
        prices, dates = linear_history()
        (fwd,) = forward_returns(prices, dates, dates[-200], [1])

        assert not fwd.is_valid
        assert math.isnan(fwd.annualized)
        assert fwd.to_dict() == {'period': '1y', 'total_return': None, 'annualized': None}

    def test_no_anchor(self):
        prices, dates = linear_history(100)
        results = forward_returns(prices, dates, dates[-1] + timedelta(days=1), [1, 0.5])

        assert [r.period for r in results] == ['1y', '0.5y']
        assert not any(r.is_valid for r in results)

    def test_multiple_horizons(self):
        prices, dates = linear_history()
        results = forward_returns(prices, dates, dates[100], [0.5, 1, 3])

        assert [r.period for r in results] == ['0.5y', '1y', '3y']
        assert results[0].total_return < results[1].total_return < results[2].total_return
