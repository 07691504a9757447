"""
Tests for the metrics aggregator.
"""

import numpy as np
import pandas as pd
import pytest

from analysis.contracts import FundMeta, FundHoldings, Holding, IndustryWeight
from analysis.guardrails import DataQualityError
from analysis.metrics_aggregator import (
    compose_fund_record,
    compose_quant_metrics,
    compose_configured_quant_metrics,
    benchmark_code_for,
    MetricsAggregatorError,
    BOND_BENCHMARK_CODE,
    EQUITY_BENCHMARK_CODE,
)
from utils.config import Settings


def make_nav_df(n=500, start='2022-01-03'):
    dates = pd.date_range(start, periods=n, freq='D')
    wiggle = 0.01 * np.sin(np.arange(n) * 0.3)
    acc = 1.0 + 0.0008 * np.arange(n) + wiggle
    return pd.DataFrame({
        'date': dates.date,
        'unit_nav': acc - 0.2,
        'acc_nav': acc,
    })


def make_benchmark_df(n=500, start='2022-01-03'):
    dates = pd.date_range(start, periods=n, freq='D')
    return pd.DataFrame({
        'date': dates.date,
        'close': 3000 + 50 * np.sin(np.arange(n) * 0.25) + np.arange(n),
    })


class TestComposeFundRecord:
    """Tests for compose_fund_record function."""

    def test_record_fields(self):
        meta = FundMeta(star_rating=4, fund_size=12.0, manager_years=5.0, fee_rate=1.2)
        record = compose_fund_record('000001', 'Sample Fund', '混合型', make_nav_df(), meta)

        assert record.code == '000001'
        assert record.meta == meta
        assert record.performance.return_year1 > 0
        assert record.performance.return_year3 == 0.0
        assert record.performance.risk_by_period.year1 is not None
        assert record.performance.risk_by_period.year3 is None

    def test_empty_frame(self):
        empty = pd.DataFrame(columns=['date', 'unit_nav', 'acc_nav'])
        with pytest.raises(MetricsAggregatorError, match="Empty NAV data"):
            compose_fund_record('000001', 'x', '股票型', empty, FundMeta())

    def test_contract_violation(self):
        df = make_nav_df().drop(columns=['unit_nav'])
        with pytest.raises(DataQualityError):
            compose_fund_record('000001', 'x', '股票型', df, FundMeta())


class TestComposeQuantMetrics:
    """Tests for compose_quant_metrics function."""

    def test_nav_only(self):
        quant = compose_quant_metrics(make_nav_df())

        assert quant.var95 is not None and quant.var95 >= 0
        assert quant.cvar95 >= quant.var95
        assert 0 <= quant.monthly_win_rate <= 1
        assert quant.cagr > 0
        assert quant.alpha is None
        assert quant.beta is None
        assert quant.hhi is None
        assert quant.top_holdings_ratio is None

    def test_with_benchmark(self):
        quant = compose_quant_metrics(make_nav_df(), benchmark_df=make_benchmark_df())

        for name in ('alpha', 'beta', 'information_ratio', 'treynor_ratio', 'downside_capture_ratio'):
            assert getattr(quant, name) is not None

    def test_with_holdings(self):
        holdings = FundHoldings(
            top_stocks=(Holding('A', 8.0), Holding('B', 6.0)),
            industries=(IndustryWeight('Banks', 60.0), IndustryWeight('Energy', 40.0)),
        )
        quant = compose_quant_metrics(make_nav_df(), holdings=holdings, top_n=1)

        assert quant.top_holdings_ratio == 8.0
        assert quant.hhi == pytest.approx(0.52)

    def test_holdings_without_industries(self):
        quant = compose_quant_metrics(make_nav_df(), holdings=FundHoldings())
        assert quant.hhi == -1.0
        assert quant.top_holdings_ratio == 0.0

    def test_settings_drive_top_n_and_confidence(self):
        holdings = FundHoldings(
            top_stocks=(Holding('A', 8.0), Holding('B', 6.0), Holding('C', 4.0)),
            industries=(IndustryWeight('Banks', 100.0),),
        )
        settings = Settings(holdings_top_n=2, var_confidence=0.9)
        quant = compose_configured_quant_metrics(make_nav_df(), settings, holdings=holdings)

        assert quant.top_holdings_ratio == 14.0
        assert quant == compose_quant_metrics(make_nav_df(), holdings=holdings, top_n=2, confidence=0.9)
        assert quant.var95 <= compose_quant_metrics(make_nav_df()).var95


class TestBenchmarkCode:

    @pytest.mark.parametrize("fund_type, code", [
        ('债券型', BOND_BENCHMARK_CODE),
        ('Bond Fund', BOND_BENCHMARK_CODE),
        ('股票型', EQUITY_BENCHMARK_CODE),
        ('混合型-偏股', EQUITY_BENCHMARK_CODE),
    ])
    def test_benchmark_code_for(self, fund_type, code):
        assert benchmark_code_for(fund_type) == code

    def test_codes(self):
        assert BOND_BENCHMARK_CODE == '000012'
        assert EQUITY_BENCHMARK_CODE == '000300'
