"""
Benchmark-relative analytics.
Alpha/beta regression, information and Treynor ratios, historical VaR/CVaR
and downside capture over fund and benchmark price series.
"""

import math
import numpy as np
import pandas as pd
from typing import Dict, Sequence

from analysis.calculations.returns import TRADING_DAYS_PER_YEAR
from analysis.guardrails import safe_num


BENCHMARK_RISK_FREE_RATE = 0.025
DAILY_BENCHMARK_RISK_FREE_RATE = BENCHMARK_RISK_FREE_RATE / TRADING_DAYS_PER_YEAR

MIN_ALIGNED_POINTS = 30
MIN_TAIL_POINTS = 30


def align_returns(fund_nav: pd.Series, benchmark_close: pd.Series) -> pd.DataFrame:
    """
    Inner-join daily returns of fund and benchmark by date.

    Each series' returns are computed on its own calendar first. Dates present
    in only one series are dropped without interpolation, so mismatched
    trading calendars silently shrink the sample.

    Args:
        fund_nav: Accumulated NAV indexed by date
        benchmark_close: Benchmark close indexed by date

    Returns:
        DataFrame with columns `fund` and `benchmark` (decimal returns),
        one row per shared date, non-finite rows removed
    """
    fund_ret = _date_indexed(fund_nav).pct_change(fill_method=None)
    bench_ret = _date_indexed(benchmark_close).pct_change(fill_method=None)

    aligned = pd.concat({'fund': fund_ret, 'benchmark': bench_ret}, axis=1, join='inner')
    return aligned.replace([np.inf, -np.inf], np.nan).dropna()


def _date_indexed(series: pd.Series) -> pd.Series:
    out = series.astype(float).copy()
    out.index = pd.to_datetime(out.index)
    return out.sort_index()


def linear_regression(x: Sequence[float], y: Sequence[float]) -> Dict[str, float]:
    """
    Closed-form OLS fit y = alpha + beta * x.

    Returns:
        {'alpha', 'beta'}; beta 0 and alpha mean(y) when x has no variance,
        both 0 with fewer than 2 points
    """
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    if x_arr.size < 2:
        return {'alpha': 0.0, 'beta': 0.0}

    # Center both sides
    dx = x_arr - x_arr.mean()
    dy = y_arr - y_arr.mean()
    var_x = float((dx * dx).sum())
    if var_x == 0:
        return {'alpha': float(y_arr.mean()), 'beta': 0.0}

    beta = float((dx * dy).sum()) / var_x
    alpha = float(y_arr.mean()) - beta * float(x_arr.mean())
    return {'alpha': alpha, 'beta': beta}


def alpha_beta(fund_nav: pd.Series, benchmark_close: pd.Series) -> Dict[str, float]:
    """
    Regress fund excess daily return on benchmark excess daily return.

    Alpha is annualized by ×252. Fewer than 30 aligned points gives
    {'alpha': 0, 'beta': 0}.
    """
    aligned = align_returns(fund_nav, benchmark_close)
    if len(aligned) < MIN_ALIGNED_POINTS:
        return {'alpha': 0.0, 'beta': 0.0}

    # Excess returns over the daily risk-free rate
    excess_fund = aligned['fund'] - DAILY_BENCHMARK_RISK_FREE_RATE
    excess_bench = aligned['benchmark'] - DAILY_BENCHMARK_RISK_FREE_RATE
    reg = linear_regression(excess_bench, excess_fund)

    # Daily alpha to annual
    return {
        'alpha': safe_num(reg['alpha'] * TRADING_DAYS_PER_YEAR),
        'beta': safe_num(reg['beta']),
    }


def information_ratio(fund_nav: pd.Series, benchmark_close: pd.Series) -> float:
    """
    Annualized information ratio: mean(active) / std(active, ddof=1) × √252.

    0 with fewer than 30 aligned points or zero tracking error.
    """
    aligned = align_returns(fund_nav, benchmark_close)
    if len(aligned) < MIN_ALIGNED_POINTS:
        return 0.0

    # Active return per shared date
    active = (aligned['fund'] - aligned['benchmark']).to_numpy()
    tracking_error = float(np.std(active, ddof=1))
    if tracking_error == 0:
        return 0.0

    return safe_num(active.mean() / tracking_error * math.sqrt(TRADING_DAYS_PER_YEAR))


def treynor_ratio(
    fund_nav: pd.Series,
    benchmark_close: pd.Series,
    risk_free_rate: float = BENCHMARK_RISK_FREE_RATE
) -> float:
    """
    Treynor ratio: (annualized fund return - risk-free rate) / beta.

    The annualized return is the mean aligned daily return × 252. 0 when beta is 0.
    """
    beta = alpha_beta(fund_nav, benchmark_close)['beta']
    if beta == 0:
        return 0.0

    aligned = align_returns(fund_nav, benchmark_close)
    annual_return = float(aligned['fund'].mean()) * TRADING_DAYS_PER_YEAR
    return safe_num((annual_return - risk_free_rate) / beta)


def historical_var(returns: Sequence[float], confidence: float = 0.95) -> float:
    """
    Historical-simulation Value at Risk.

    VaR = -sorted(returns)[floor((1 - confidence) * n)], a positive number
    for a loss. 0 with fewer than 30 returns.
    """
    ordered = _sorted_finite(returns)
    if ordered.size < MIN_TAIL_POINTS:
        return 0.0

    # Loss at the (1 - confidence) quantile
    index = int(math.floor((1 - confidence) * ordered.size))
    return safe_num(-ordered[index])


def historical_cvar(returns: Sequence[float], confidence: float = 0.95) -> float:
    """
    Conditional VaR: negated mean of the returns below the VaR cutoff index.

    Falls back to the single worst return when the cutoff index is 0.
    0 with fewer than 30 returns.
    """
    ordered = _sorted_finite(returns)
    if ordered.size < MIN_TAIL_POINTS:
        return 0.0

    cutoff = int(math.floor((1 - confidence) * ordered.size))
    if cutoff == 0:
        return safe_num(-ordered[0])
    return safe_num(-ordered[:cutoff].mean())


def _sorted_finite(returns: Sequence[float]) -> np.ndarray:
    arr = np.asarray(returns, dtype=float)
    return np.sort(arr[np.isfinite(arr)])


def downside_capture_ratio(fund_nav: pd.Series, benchmark_close: pd.Series) -> float:
    """
    Downside capture: mean fund return / mean benchmark return over
    the dates where the benchmark fell.

    0 with fewer than 30 aligned points, no down days, or a zero benchmark average.
    """
    aligned = align_returns(fund_nav, benchmark_close)
    if len(aligned) < MIN_ALIGNED_POINTS:
        return 0.0

    down = aligned[aligned['benchmark'] < 0]
    if down.empty:
        return 0.0

    bench_avg = float(down['benchmark'].mean())
    if bench_avg == 0:
        return 0.0
    return safe_num(float(down['fund'].mean()) / bench_avg)
