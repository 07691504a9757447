"""
Tests for the deep scorer.
"""

import pytest

from analysis.contracts import (
    FundRecord,
    FundPerformance,
    FundMeta,
    PeriodRiskBreakdown,
    PeriodRiskMetrics,
    QuantMetrics,
)
from scoring.benchmarks import DEEP_WEIGHTS
from scoring.deep_scorer import score_fund_deep


def make_record(star_rating=0, fund_type='股票型'):
    period = PeriodRiskMetrics(
        sharpe_ratio=2.5, sortino_ratio=3.0, calmar_ratio=3.5, max_drawdown=10.0, volatility=12.0
    )
    return FundRecord(
        code='000002',
        name='Deep Sample',
        fund_type=fund_type,
        performance=FundPerformance(
            return_year1=30.0,
            return_year3=90.0,
            risk_by_period=PeriodRiskBreakdown(year1=period, year3=period, all=period),
        ),
        meta=FundMeta(star_rating=star_rating, fund_size=50.0, manager_years=8.0, fee_rate=0.5),
    )


def scores(result):
    return {item.name: item.score for item in result.items}


class TestDeepWeights:

    def test_weights_sum_to_100(self):
        total = sum(getattr(DEEP_WEIGHTS, name) for name in DEEP_WEIGHTS.__dataclass_fields__)
        assert total == 100


class TestScoreFundDeep:
    """Tests for score_fund_deep function."""

    def test_missing_analytics_earn_exactly_half(self):
        result = score_fund_deep(make_record())
        s = scores(result)

        assert s['alpha'] == 5.0
        assert s['monthly_win_rate'] == 2.5
        assert s['beta'] == 2.5
        assert s['var95'] == 2.0
        assert s['industry_hhi'] == 4.0
        assert s['top_holdings_ratio'] == 3.5
        assert s['information_ratio'] == 2.5
        assert s['consistency'] == 2.5
        assert s['rating'] == 2.5
        assert result.holding_score == 7.5

    def test_quant_none_equals_empty_quant(self):
        record = make_record()
        assert score_fund_deep(record) == score_fund_deep(record, QuantMetrics())

    def test_full_marks(self):
        quant = QuantMetrics(
            alpha=0.20,
            beta=0.8,
            information_ratio=1.2,
            var95=0.01,
            monthly_win_rate=0.65,
            cagr=0.12,
            hhi=0.10,
            top_holdings_ratio=35.0,
        )
        result = score_fund_deep(make_record(star_rating=5), quant)
        s = scores(result)

        assert result.return_score == 30.0
        assert result.risk_score == 30.0
        assert result.holding_score == 15.0
        assert result.overall_score == 15.0
        # Positive CAGR maps to the 0.7 consistency band
        assert s['consistency'] == 3.0
        assert result.stability_score == 8.0
        assert result.total_score == 98.0

    def test_dimension_budget(self):
        result = score_fund_deep(make_record())
        maxima = {}
        for item in result.items:
            maxima[item.name] = item.max_score

        assert sum(maxima.values()) == 100
        assert len(result.items) == 16

    def test_serializes_category(self):
        data = score_fund_deep(make_record(fund_type='债券型')).to_dict()
        assert data['category'] == 'bond'
        assert len(data['items']) == 16
