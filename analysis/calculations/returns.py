"""
Returns calculation utilities.
Pure functions for simple, period, annualized and calendar-month returns over NAV series.
"""

import bisect
import numpy as np
import pandas as pd
from datetime import date
from typing import List, Dict, Any, Optional, Sequence

from analysis.guardrails import clean_prices, clean_dated_prices, safe_num


TRADING_DAYS_PER_YEAR = 252
DAYS_PER_YEAR = 365.25

ROLLING_WINDOW_LABELS = {
    21: '1M',
    63: '3M',
    126: '6M',
    252: '1Y',
}


class ReturnsError(Exception):
    """Raised when returns calculation inputs are inconsistent."""
    pass


def daily_returns(prices: List[float]) -> np.ndarray:
    """
    Calculate daily simple returns.

    Formula: r_t = (P_t - P_{t-1}) / P_{t-1}

    Steps whose previous price is not positive are skipped rather than
    producing an infinite return.

    Args:
        prices: Accumulated NAV values in chronological order

    Returns:
        Numpy array of returns as decimals (length <= len(prices) - 1)
    """
    arr = clean_prices(prices)
    if arr.size < 2:
        return np.array([])

    # Pair each price with the one before it
    prev = arr[:-1]
    curr = arr[1:]
    valid = prev > 0
    return (curr[valid] - prev[valid]) / prev[valid]


def elapsed_years(start: date, end: date) -> float:
    """Calendar span between two dates in nominal years."""
    return (end - start).days / DAYS_PER_YEAR


def first_index_at_or_after(dates: List[date], target: date) -> Optional[int]:
    """Index of the first date >= target in an ascending list, or None."""
    idx = bisect.bisect_left(dates, target)
    return idx if idx < len(dates) else None


def period_return(prices: List[float]) -> float:
    """
    Total return from first to last price, as a percentage rounded to 2 decimals.

    Returns 0 with fewer than 2 prices or a non-positive starting price.
    """
    arr = clean_prices(prices)
    if arr.size < 2 or arr[0] <= 0:
        return 0.0
    return round(float((arr[-1] - arr[0]) / arr[0] * 100), 2)


def annualized_return(prices: List[float], dates: List[date]) -> float:
    """
    Compound annualized return as a percentage (unrounded).

    Formula: ((P_end / P_start) ^ (1 / years) - 1) * 100

    Raises:
        ReturnsError: If prices and dates differ in length
    """
    if len(prices) != len(dates):
        raise ReturnsError("Prices and dates must have same length")

    # Skip corrupt points with their dates so the span matches the prices
    arr, kept_dates = clean_dated_prices(prices, dates)
    if arr.size < 2 or arr[0] <= 0:
        return 0.0

    # Calendar span in nominal years
    years = elapsed_years(kept_dates[0], kept_dates[-1])
    if years <= 0:
        return 0.0

    ratio = arr[-1] / arr[0]
    if ratio < 0:
        return 0.0
    return safe_num((ratio ** (1 / years) - 1) * 100)


def cagr(prices: List[float], dates: List[date]) -> float:
    """Compound annual growth rate as a decimal (0.08 = 8%)."""
    return annualized_return(prices, dates) / 100


def rolling_return_stats(
    prices: List[float],
    windows: Sequence[int] = (21, 63, 126, 252)
) -> List[Dict[str, Any]]:
    """
    Distribution of rolling k-point returns for each window.

    Args:
        prices: Accumulated NAV values in chronological order
        windows: Window sizes in trading days

    Returns:
        One dict per window with label, mean, median, min, max,
        positive_ratio and count (all zeros when no window fits)
    """
    arr = clean_prices(prices)
    results = []

    for window in windows:
        label = ROLLING_WINDOW_LABELS.get(window, f"{window}D")

        if arr.size > window:
            start = arr[:-window]
            end = arr[window:]
            valid = start > 0
            returns = (end[valid] - start[valid]) / start[valid]
        else:
            returns = np.array([])

        if returns.size == 0:
            results.append({
                'window': window, 'label': label,
                'mean': 0.0, 'median': 0.0, 'min': 0.0, 'max': 0.0,
                'positive_ratio': 0.0, 'count': 0
            })
            continue

        ordered = np.sort(returns)
        results.append({
            'window': window,
            'label': label,
            'mean': float(returns.mean()),
            'median': float(ordered[ordered.size // 2]),
            'min': float(ordered[0]),
            'max': float(ordered[-1]),
            'positive_ratio': float((returns > 0).sum() / returns.size),
            'count': int(returns.size)
        })

    return results


def monthly_returns(prices: List[float], dates: List[date]) -> List[float]:
    """
    Calendar-month returns from the first to the last point of each month.

    Months with a single observation or a non-positive opening price are skipped.

    Raises:
        ReturnsError: If prices and dates differ in length
    """
    if len(prices) != len(dates):
        raise ReturnsError("Prices and dates must have same length")
    if not prices:
        return []

    arr, kept_dates = clean_dated_prices(prices, dates)
    if arr.size == 0:
        return []

    series = pd.Series(arr, index=pd.DatetimeIndex(kept_dates))
    # Group by calendar month
    grouped = series.groupby(series.index.to_period('M'))
    summary = grouped.agg(['first', 'last', 'count'])

    usable = summary[(summary['count'] > 1) & (summary['first'] > 0)]
    returns = (usable['last'] - usable['first']) / usable['first']
    return [float(r) for r in returns]


def monthly_return_stats(prices: List[float], dates: List[date]) -> Dict[str, Any]:
    """
    Summary statistics of calendar-month returns.

    Returns:
        Dictionary with returns, mean, median, best, worst, std_dev
        (sample standard deviation)
    """
    returns = monthly_returns(prices, dates)
    if not returns:
        return {'returns': [], 'mean': 0.0, 'median': 0.0, 'best': 0.0, 'worst': 0.0, 'std_dev': 0.0}

    arr = np.array(returns)
    ordered = np.sort(arr)
    ddof = 1 if arr.size > 1 else 0

    return {
        'returns': returns,
        'mean': float(arr.mean()),
        'median': float(ordered[ordered.size // 2]),
        'best': float(ordered[-1]),
        'worst': float(ordered[0]),
        'std_dev': float(np.std(arr, ddof=ddof))
    }


def monthly_win_rate(prices: List[float], dates: List[date]) -> float:
    """Share of calendar months with a positive return (0..1)."""
    returns = monthly_returns(prices, dates)
    if not returns:
        return 0.0
    return sum(1 for r in returns if r > 0) / len(returns)
