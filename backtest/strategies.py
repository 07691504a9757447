"""
Investment strategy backtests.
Monthly systematic investment, holding-period return distribution and drawdown-triggered buying.

All strategies trade at accumulated NAV, so distributions count as reinvested.
"""

from dataclasses import dataclass, asdict
from datetime import date
from typing import Dict, Any, List, Sequence

import numpy as np

from analysis.calculations.returns import elapsed_years, ReturnsError
from analysis.guardrails import clean_prices, clean_dated_prices


DEFAULT_MONTHLY_AMOUNT = 1000.0
DEFAULT_HOLDING_PERIODS = (30, 90, 180, 365)
DEFAULT_DRAWDOWN_THRESHOLD = 20.0

HOLDING_PERIOD_LABELS = {
    30: '30D',
    90: '90D',
    180: '6M',
    365: '1Y',
    730: '2Y',
    1095: '3Y',
}


@dataclass(frozen=True)
class SIPResult:
    total_invested: float
    final_value: float
    total_return: float       # percent
    annualized_return: float  # percent
    avg_cost: float
    periods: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HoldingPeriodStats:
    period: int
    label: str
    positive_ratio: float
    avg_return: float
    median_return: float
    min_return: float
    max_return: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DrawdownBuyResult:
    buy_count: int
    avg_buy_drawdown: float   # percent
    total_return: float       # percent
    annualized_return: float  # percent

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _check_lengths(prices: List[float], dates: List[date]) -> None:
    if len(prices) != len(dates):
        raise ReturnsError("Prices and dates must have same length")


def _month_key(d: date) -> tuple:
    return (d.year, d.month)


def _annualize(final_value: float, invested: float, start: date, end: date) -> float:
    years = elapsed_years(start, end)
    if years <= 0 or invested <= 0 or final_value <= 0:
        return 0.0
    return ((final_value / invested) ** (1 / years) - 1) * 100


def sip_backtest(
    prices: List[float],
    dates: List[date],
    monthly_amount: float = DEFAULT_MONTHLY_AMOUNT
) -> SIPResult:
    """
    Buy a fixed amount on the first point of every calendar month, hold to the end.

    Args:
        prices: Accumulated NAV values in chronological order
        dates: Corresponding dates
        monthly_amount: Amount invested per month

    Returns:
        SIPResult (all zeros with fewer than 2 points)

    Raises:
        ReturnsError: If prices and dates differ in length
    """
    _check_lengths(prices, dates)
    navs, dates = clean_dated_prices(prices, dates)
    if navs.size < 2:
        return SIPResult(0.0, 0.0, 0.0, 0.0, 0.0, 0)

    shares = 0.0
    invested = 0.0
    periods = 0
    last_month = None

    for nav, d in zip(navs, dates):
        month = _month_key(d)
        if month != last_month and nav > 0:
            shares += monthly_amount / nav
            invested += monthly_amount
            periods += 1
            last_month = month

    final_value = shares * float(navs[-1])
    total_return = (final_value - invested) / invested * 100 if invested > 0 else 0.0

    return SIPResult(
        total_invested=invested,
        final_value=final_value,
        total_return=total_return,
        annualized_return=_annualize(final_value, invested, dates[0], dates[-1]),
        avg_cost=invested / shares if shares > 0 else 0.0,
        periods=periods,
    )


def holding_period_distribution(
    prices: List[float],
    periods: Sequence[int] = DEFAULT_HOLDING_PERIODS
) -> List[HoldingPeriodStats]:
    """
    Returns of holding for k points from every possible start.

    Args:
        prices: Accumulated NAV values in chronological order
        periods: Holding lengths in data points

    Returns:
        One HoldingPeriodStats per period, returns in percent
    """
    navs = clean_prices(prices)
    results = []

    for period in periods:
        label = HOLDING_PERIOD_LABELS.get(period, f"{period}D")
        if navs.size > period:
            start = navs[:-period]
            end = navs[period:]
            valid = start > 0
            returns = (end[valid] - start[valid]) / start[valid] * 100
        else:
            returns = np.array([])

        if returns.size == 0:
            results.append(HoldingPeriodStats(period, label, 0.0, 0.0, 0.0, 0.0, 0.0, 0))
            continue

        ordered = np.sort(returns)
        results.append(HoldingPeriodStats(
            period=period,
            label=label,
            positive_ratio=float((returns > 0).sum() / returns.size),
            avg_return=float(returns.mean()),
            median_return=float(ordered[ordered.size // 2]),
            min_return=float(ordered[0]),
            max_return=float(ordered[-1]),
            count=int(returns.size),
        ))

    return results


def drawdown_buy_backtest(
    prices: List[float],
    dates: List[date],
    threshold: float = DEFAULT_DRAWDOWN_THRESHOLD,
    amount: float = DEFAULT_MONTHLY_AMOUNT
) -> DrawdownBuyResult:
    """
    Buy a fixed amount whenever drawdown from the running peak reaches threshold.

    At most one buy per calendar month; every position is held to the end.

    Args:
        prices: Accumulated NAV values in chronological order
        dates: Corresponding dates
        threshold: Drawdown in percent that triggers a buy
        amount: Amount per buy

    Raises:
        ReturnsError: If prices and dates differ in length
    """
    _check_lengths(prices, dates)
    navs, dates = clean_dated_prices(prices, dates)
    if navs.size < 2:
        return DrawdownBuyResult(0, 0.0, 0.0, 0.0)

    shares = 0.0
    buys = 0
    drawdown_sum = 0.0
    peak = float(navs[0])
    last_buy_month = None

    for nav, d in zip(navs, dates):
        nav = float(nav)
        peak = max(peak, nav)
        if peak <= 0 or nav <= 0:
            continue

        drawdown = (peak - nav) / peak * 100
        month = _month_key(d)
        if drawdown >= threshold and month != last_buy_month:
            shares += amount / nav
            buys += 1
            drawdown_sum += drawdown
            last_buy_month = month

    if buys == 0:
        return DrawdownBuyResult(0, 0.0, 0.0, 0.0)

    invested = buys * amount
    final_value = shares * float(navs[-1])

    return DrawdownBuyResult(
        buy_count=buys,
        avg_buy_drawdown=drawdown_sum / buys,
        total_return=(final_value - invested) / invested * 100,
        annualized_return=_annualize(final_value, invested, dates[0], dates[-1]),
    )
