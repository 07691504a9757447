"""
Multi-window risk metrics.

Single place where NAV series are cut into trailing windows and turned into
PeriodRiskMetrics. Live scoring and the point-in-time backtest both go through
multi_period_metrics so the statistics are never derived twice.
"""

from datetime import date
from typing import List, Optional, Tuple

from analysis.calculations.drawdown import max_drawdown, calmar_ratio
from analysis.calculations.returns import (
    annualized_return,
    period_return,
    DAYS_PER_YEAR,
    ReturnsError,
)
from analysis.calculations.volatility import volatility, sharpe_ratio, sortino_ratio
from analysis.contracts import PeriodRiskMetrics, PeriodRiskBreakdown
from analysis.guardrails import MIN_POINTS_FOR_STATISTICS


# A window counts as covered when its actual span reaches this share of the nominal span
MIN_WINDOW_COVERAGE = 0.8


def slice_window(
    prices: List[float],
    dates: List[date],
    years: float,
    end_date: Optional[date] = None
) -> Optional[Tuple[List[float], List[date]]]:
    """
    Cut the trailing `years` window ending at end_date.

    Args:
        prices: Accumulated NAV values in chronological order
        dates: Corresponding dates
        years: Nominal window length in years
        end_date: Window end (defaults to the last date)

    Returns:
        (prices, dates) for the window, or None unless the window holds at least
        10 points and its actual span covers 80% of years × 365.25 days
    """
    if len(prices) != len(dates):
        raise ReturnsError("Prices and dates must have same length")
    if not dates:
        return None

    end = end_date if end_date is not None else dates[-1]
    window_days = years * DAYS_PER_YEAR

    selected = [
        i for i, d in enumerate(dates)
        if d <= end and (end - d).days <= window_days
    ]
    if len(selected) < MIN_POINTS_FOR_STATISTICS:
        return None

    first, last = selected[0], selected[-1]
    actual_days = (dates[last] - dates[first]).days
    if actual_days < window_days * MIN_WINDOW_COVERAGE:
        return None

    return prices[first:last + 1], dates[first:last + 1]


def period_risk_metrics(
    prices: List[float],
    dates: List[date],
    trailing_return: float
) -> Optional[PeriodRiskMetrics]:
    """
    Risk metrics for one window, or None with fewer than 10 points.

    Sharpe additionally needs 30 points and is 0 below that.
    """
    if len(prices) < MIN_POINTS_FOR_STATISTICS:
        return None

    drawdown = max_drawdown(prices)
    return PeriodRiskMetrics(
        sharpe_ratio=sharpe_ratio(prices),
        sortino_ratio=sortino_ratio(prices, trailing_return),
        calmar_ratio=calmar_ratio(annualized_return(prices, dates), drawdown),
        max_drawdown=drawdown,
        volatility=volatility(prices),
    )


def multi_period_metrics(
    prices: List[float],
    dates: List[date],
    trailing_return: float,
    end_date: Optional[date] = None
) -> PeriodRiskBreakdown:
    """
    Risk metrics for the trailing 1 year, 3 years and full history.

    Args:
        prices: Accumulated NAV values in chronological order
        dates: Corresponding dates
        trailing_return: Trailing 1-year return in percent (Sortino numerator)
        end_date: Anchor for the trailing windows (defaults to the last date)

    Returns:
        PeriodRiskBreakdown; year1/year3 None when not covered,
        all zeroed when fewer than 10 points exist
    """
    year1 = slice_window(prices, dates, 1, end_date)
    year3 = slice_window(prices, dates, 3, end_date)

    return PeriodRiskBreakdown(
        year1=period_risk_metrics(*year1, trailing_return) if year1 else None,
        year3=period_risk_metrics(*year3, trailing_return) if year3 else None,
        all=period_risk_metrics(prices, dates, trailing_return) or PeriodRiskMetrics(),
    )


def trailing_returns(
    prices: List[float],
    dates: List[date],
    end_date: Optional[date] = None
) -> Tuple[float, float]:
    """
    Trailing 1-year and 3-year total returns in percent.

    A return is 0 when its window is not covered by the data.
    """
    year1 = slice_window(prices, dates, 1, end_date)
    year3 = slice_window(prices, dates, 3, end_date)
    return (
        period_return(year1[0]) if year1 else 0.0,
        period_return(year3[0]) if year3 else 0.0,
    )
