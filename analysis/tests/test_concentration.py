"""
Tests for holdings concentration utilities.
"""

import pytest

from analysis.contracts import FundHoldings, Holding, IndustryWeight
from analysis.calculations.concentration import (
    top_n_concentration,
    industry_hhi,
    concentration_level,
    analyze_holdings,
    HHI_UNAVAILABLE,
)


def holdings(stocks=(), industries=()):
    return FundHoldings(
        top_stocks=tuple(Holding(name, pct) for name, pct in stocks),
        industries=tuple(IndustryWeight(name, pct) for name, pct in industries),
    )


class TestTopNConcentration:

    def test_sums_largest_weights(self):
        h = holdings(stocks=[('A', 5.0), ('B', 10.0), ('C', 8.0)])
        assert top_n_concentration(h, n=2) == 18.0
        assert top_n_concentration(h) == 23.0

    def test_empty(self):
        assert top_n_concentration(holdings()) == 0.0


class TestIndustryHHI:
    """Tests for industry_hhi function."""

    def test_no_breakdown_returns_sentinel(self):
        assert industry_hhi(holdings()) == HHI_UNAVAILABLE == -1.0

    def test_single_industry_is_one(self):
        assert industry_hhi(holdings(industries=[('Banks', 40.0)])) == 1.0

    def test_sum_of_squared_fractions(self):
        h = holdings(industries=[('A', 30.0), ('B', 20.0), ('C', 10.0)])
        assert industry_hhi(h) == pytest.approx(0.14)


class TestHoldingsSummary:

    @pytest.mark.parametrize("ratio, level", [
        (55.0, 'High concentration'),
        (35.0, 'Moderate concentration'),
        (30.0, 'Diversified'),
    ])
    def test_concentration_level(self, ratio, level):
        assert concentration_level(ratio) == level

    def test_analyze_holdings(self):
        h = holdings(
            stocks=[('Small', 3.0), ('Big', 9.5), ('Mid', 6.0)],
            industries=[('A', 50.0), ('B', 50.0)],
        )
        summary = analyze_holdings(h)

        assert summary['top_holdings_ratio'] == 18.5
        assert summary['hhi'] == pytest.approx(0.5)
        assert summary['stock_count'] == 3
        assert summary['top_stock'] == 'Big'
        assert summary['concentration_level'] == 'Diversified'

    def test_analyze_empty_holdings(self):
        summary = analyze_holdings(holdings())
        assert summary['top_stock'] == '-'
        assert summary['hhi'] == -1.0
