"""
Metrics aggregator - composes fund calculations into scoring records.
Builds FundRecord (time-series metrics) and QuantMetrics (benchmark-relative and holdings analytics).
"""

import logging
import pandas as pd
from typing import Optional

from analysis.calculations.benchmark import (
    alpha_beta,
    information_ratio,
    treynor_ratio,
    historical_var,
    historical_cvar,
    downside_capture_ratio,
)
from analysis.calculations.concentration import top_n_concentration, industry_hhi, DEFAULT_TOP_N
from analysis.calculations.returns import daily_returns, cagr, monthly_win_rate
from analysis.contracts import FundRecord, FundPerformance, FundMeta, FundHoldings, QuantMetrics
from analysis.guardrails import validate_nav_frame, validate_benchmark_frame, find_non_finite
from analysis.period_metrics import multi_period_metrics, trailing_returns
from scoring.classification import classify_fund, FundCategory
from utils.config import Settings


logger = logging.getLogger(__name__)

BOND_BENCHMARK_CODE = '000012'    # treasury bond index
EQUITY_BENCHMARK_CODE = '000300'  # CSI 300


class MetricsAggregatorError(Exception):
    """Raised when metrics aggregation fails."""
    pass


def benchmark_code_for(fund_type: str) -> str:
    """Bond funds are measured against a bond index, everything else against CSI 300."""
    if classify_fund(fund_type) == FundCategory.BOND:
        return BOND_BENCHMARK_CODE
    return EQUITY_BENCHMARK_CODE


def compose_fund_record(
    code: str,
    name: str,
    fund_type: str,
    nav_df: pd.DataFrame,
    meta: FundMeta
) -> FundRecord:
    """
    Compose time-series metrics and static meta into a FundRecord.

    Args:
        code: Fund code
        name: Fund name
        fund_type: Free-text fund type used for classification
        nav_df: DataFrame with columns date, unit_nav, acc_nav
        meta: Static fund attributes

    Returns:
        FundRecord with trailing returns and the 1y/3y/all risk breakdown

    Raises:
        MetricsAggregatorError: If the NAV frame is empty
        DataQualityError: If the NAV frame violates the data contract
    """
    frame = _nav_frame(nav_df, code)
    prices = frame['acc_nav'].astype(float).tolist()
    dates = frame['date'].tolist()

    return_year1, return_year3 = trailing_returns(prices, dates)
    breakdown = multi_period_metrics(prices, dates, return_year1)

    record = FundRecord(
        code=code,
        name=name,
        fund_type=fund_type,
        performance=FundPerformance(
            return_year1=return_year1,
            return_year3=return_year3,
            risk_by_period=breakdown,
        ),
        meta=meta,
    )
    _audit(record, code)
    return record


def compose_quant_metrics(
    nav_df: pd.DataFrame,
    benchmark_df: Optional[pd.DataFrame] = None,
    holdings: Optional[FundHoldings] = None,
    top_n: int = DEFAULT_TOP_N,
    confidence: float = 0.95,
    code: str = ''
) -> QuantMetrics:
    """
    Compose benchmark-relative and holdings analytics.

    Benchmark-relative fields stay None without a benchmark frame, holdings
    fields stay None without holdings. VaR/CVaR, win rate and CAGR need only NAV.

    Args:
        nav_df: DataFrame with columns date, unit_nav, acc_nav
        benchmark_df: DataFrame with columns date, close (optional)
        holdings: Disclosed holdings (optional)
        top_n: Positions counted in the top-holdings ratio
        confidence: VaR/CVaR confidence level
        code: Fund code, used for log messages only

    Returns:
        QuantMetrics record

    Raises:
        MetricsAggregatorError: If the NAV frame is empty
        DataQualityError: If an input frame violates the data contract
    """
    frame = _nav_frame(nav_df, code)
    prices = frame['acc_nav'].astype(float).tolist()
    dates = frame['date'].tolist()
    returns = daily_returns(prices)

    fields = {
        'var95': historical_var(returns, confidence),
        'cvar95': historical_cvar(returns, confidence),
        'monthly_win_rate': monthly_win_rate(prices, dates),
        'cagr': cagr(prices, dates),
    }

    if benchmark_df is not None:
        bench = validate_benchmark_frame(benchmark_df)
        fund_nav = pd.Series(prices, index=dates, dtype=float)
        bench_close = pd.Series(bench['close'].astype(float).tolist(), index=bench['date'].tolist(), dtype=float)
        logger.info(f"Aligning {len(fund_nav)} NAV points with {len(bench_close)} benchmark points for {code or 'fund'}")

        ab = alpha_beta(fund_nav, bench_close)
        fields.update({
            'alpha': ab['alpha'],
            'beta': ab['beta'],
            'information_ratio': information_ratio(fund_nav, bench_close),
            'treynor_ratio': treynor_ratio(fund_nav, bench_close),
            'downside_capture_ratio': downside_capture_ratio(fund_nav, bench_close),
        })

    if holdings is not None:
        fields['hhi'] = industry_hhi(holdings)
        fields['top_holdings_ratio'] = top_n_concentration(holdings, top_n)

    quant = QuantMetrics(**fields)
    _audit(quant, code)
    return quant


def _nav_frame(nav_df: pd.DataFrame, code: str) -> pd.DataFrame:
    if nav_df is None or nav_df.empty:
        raise MetricsAggregatorError(f"Empty NAV data provided for {code or 'fund'}")
    frame = validate_nav_frame(nav_df)
    logger.debug(f"{code or 'fund'}: {len(frame)} NAV points {frame['date'].iloc[0]} ~ {frame['date'].iloc[-1]}")
    return frame


def _audit(record, code: str) -> None:
    problems = find_non_finite(record)
    if problems:
        logger.warning(f"Non-finite values in {type(record).__name__} for {code or 'fund'}: {problems}")


def compose_configured_quant_metrics(
    nav_df: pd.DataFrame,
    settings: Settings,
    benchmark_df: Optional[pd.DataFrame] = None,
    holdings: Optional[FundHoldings] = None,
    code: str = ''
) -> QuantMetrics:
    """compose_quant_metrics with top-N and VaR confidence taken from settings."""
    return compose_quant_metrics(
        nav_df,
        benchmark_df=benchmark_df,
        holdings=holdings,
        top_n=settings.holdings_top_n,
        confidence=settings.var_confidence,
        code=code,
    )
