"""
Tests for fund data contracts.
"""

import math
from datetime import date

import pytest

from analysis.contracts import (
    NavPoint,
    BenchmarkPoint,
    PeriodRiskMetrics,
    PeriodRiskBreakdown,
    FundPerformance,
    FundMeta,
    FundRecord,
    QuantMetrics,
    nav_lists,
    nav_series,
    benchmark_series,
    finite_or_none,
)


@pytest.fixture
def navs():
    return [
        NavPoint(date(2024, 1, 2), unit_nav=1.00, acc_nav=1.50),
        NavPoint(date(2024, 1, 3), unit_nav=1.02, acc_nav=1.52),
    ]


class TestNavHelpers:

    def test_nav_lists_uses_accumulated_nav(self, navs):
        prices, dates = nav_lists(navs)
        assert prices == [1.50, 1.52]
        assert dates == [date(2024, 1, 2), date(2024, 1, 3)]

    def test_nav_series(self, navs):
        series = nav_series(navs)
        assert series.name == 'acc_nav'
        assert series.loc[date(2024, 1, 3)] == 1.52

    def test_benchmark_series(self):
        series = benchmark_series([BenchmarkPoint(date(2024, 1, 2), 3500.0)])
        assert series.iloc[0] == 3500.0


class TestRecords:
    """Tests for record immutability and serialization."""

    def test_fund_record_to_dict(self):
        record = FundRecord(
            code='000001',
            name='Sample Fund',
            fund_type='混合型',
            performance=FundPerformance(
                return_year1=12.5,
                return_year3=30.0,
                risk_by_period=PeriodRiskBreakdown(
                    year1=PeriodRiskMetrics(sharpe_ratio=1.2),
                    year3=None,
                    all=PeriodRiskMetrics(),
                ),
            ),
            meta=FundMeta(star_rating=4, fund_size=20.0),
        )
        data = record.to_dict()

        assert data['performance']['risk_by_period']['year3'] is None
        assert data['performance']['risk_by_period']['year1']['sharpe_ratio'] == 1.2
        assert data['meta']['manager_years'] == 0.0

    def test_records_are_frozen(self):
        with pytest.raises(AttributeError):
            FundMeta().fund_size = 10.0

    def test_quant_metrics_default_to_none(self):
        assert all(v is None for v in QuantMetrics().to_dict().values())


class TestFiniteOrNone:

    @pytest.mark.parametrize("value", [None, math.nan, math.inf])
    def test_non_finite(self, value):
        assert finite_or_none(value) is None

    def test_finite(self):
        assert finite_or_none(-3.5) == -3.5
