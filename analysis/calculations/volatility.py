"""
Volatility calculation utilities.
Pure functions for annualized volatility and the Sharpe and Sortino ratios.
"""

import math
import numpy as np
from typing import List

from analysis.calculations.returns import daily_returns, TRADING_DAYS_PER_YEAR
from analysis.guardrails import safe_num


RISK_FREE_RATE = 0.02
DAILY_RISK_FREE_RATE = RISK_FREE_RATE / TRADING_DAYS_PER_YEAR

MIN_POINTS_VOLATILITY = 10
MIN_POINTS_SHARPE = 30

# Returned when no daily return falls below the risk-free rate
SORTINO_CEILING = 3.0


def volatility(prices: List[float]) -> float:
    """
    Annualized volatility of daily simple returns.

    Formula: σ = std(returns, ddof=0) × √252, as a percentage

    Args:
        prices: Accumulated NAV values in chronological order

    Returns:
        Volatility percentage rounded to 2 decimals (15.2 = 15.2%),
        0 with fewer than 10 prices
    """
    if len(prices) < MIN_POINTS_VOLATILITY:
        return 0.0

    # Simple daily returns, corrupt points already dropped
    returns = daily_returns(prices)
    if returns.size < 2:
        return 0.0

    # Population std, annualized
    std_dev = np.std(returns)
    return round(safe_num(std_dev * math.sqrt(TRADING_DAYS_PER_YEAR) * 100), 2)


def sharpe_ratio(prices: List[float]) -> float:
    """
    Annualized Sharpe ratio against a fixed 2% risk-free rate.

    Formula: (mean(r) - rf_daily) / std(r) × √252

    Returns:
        Ratio rounded to 2 decimals, 0 with fewer than 30 prices or zero deviation
    """
    if len(prices) < MIN_POINTS_SHARPE:
        return 0.0

    returns = daily_returns(prices)
    if returns.size < 2:
        return 0.0

    std_dev = np.std(returns)
    if std_dev == 0:
        return 0.0

    # Mean daily excess return over daily deviation, annualized
    ratio = (returns.mean() - DAILY_RISK_FREE_RATE) / std_dev * math.sqrt(TRADING_DAYS_PER_YEAR)
    return round(safe_num(ratio), 2)


def sortino_ratio(prices: List[float], trailing_return: float) -> float:
    """
    Sortino ratio using downside deviation below the daily risk-free rate.

    Formula: (trailing_return/100 - rf) / (√mean((r_d - rf_daily)²) × √252)
    where r_d are only the returns below rf_daily.

    Args:
        prices: Accumulated NAV values in chronological order
        trailing_return: Trailing return in percent used as the numerator

    Returns:
        Ratio rounded to 2 decimals; SORTINO_CEILING when there is no downside,
        0 with fewer than 10 prices
    """
    if len(prices) < MIN_POINTS_VOLATILITY:
        return 0.0

    # Only returns below the daily risk-free rate count as downside
    returns = daily_returns(prices)
    downside = returns[returns < DAILY_RISK_FREE_RATE]
    if downside.size == 0:
        return SORTINO_CEILING

    downside_dev = math.sqrt(np.mean((downside - DAILY_RISK_FREE_RATE) ** 2))
    annualized_downside = downside_dev * math.sqrt(TRADING_DAYS_PER_YEAR)
    if annualized_downside == 0:
        return SORTINO_CEILING

    ratio = (safe_num(trailing_return) / 100 - RISK_FREE_RATE) / annualized_downside
    return round(safe_num(ratio), 2)
