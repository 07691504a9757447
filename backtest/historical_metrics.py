"""
Point-in-time metrics.

Everything computed for an evaluation date T sees only NAV points dated
on or before T. Forward returns are the one place that reads past T, and
they never feed back into the score.
"""

import bisect
import math
from datetime import date
from typing import List, Optional, Tuple

from analysis.contracts import FundRecord, FundPerformance, FundMeta, PeriodRiskBreakdown
from analysis.calculations.returns import elapsed_years, first_index_at_or_after, DAYS_PER_YEAR
from analysis.guardrails import round_or_zero
from analysis.period_metrics import multi_period_metrics, trailing_returns, MIN_WINDOW_COVERAGE
from backtest.records import FundHistory, ForwardReturn, horizon_label


def truncate_history(
    prices: List[float],
    dates: List[date],
    eval_date: date
) -> Tuple[List[float], List[date]]:
    """Keep only points dated on or before eval_date."""
    cut = bisect.bisect_right(dates, eval_date)
    return prices[:cut], dates[:cut]


def metrics_at_date(
    prices: List[float],
    dates: List[date],
    eval_date: date
) -> Tuple[float, float, PeriodRiskBreakdown]:
    """
    Recompute trailing returns and the risk breakdown as they stood at eval_date.

    Returns:
        (return_year1, return_year3, breakdown) from the truncated series only
    """
    hist_prices, hist_dates = truncate_history(prices, dates, eval_date)
    return_year1, return_year3 = trailing_returns(hist_prices, hist_dates, end_date=eval_date)
    breakdown = multi_period_metrics(hist_prices, hist_dates, return_year1, end_date=eval_date)
    return return_year1, return_year3, breakdown


def build_record_at_date(
    history: FundHistory,
    eval_date: date,
    return_year1: float,
    return_year3: float,
    breakdown: PeriodRiskBreakdown
) -> FundRecord:
    """
    Synthesize the FundRecord the scorer would have seen at eval_date.

    Star rating has no history and is left unknown (0), which triggers the
    scorer's rescaling. Manager tenure is approximated by the fund's age at
    eval_date; size and fee use current values.
    """
    if history.establish_date is not None:
        manager_years = max(0.0, elapsed_years(history.establish_date, eval_date))
    else:
        manager_years = history.manager_years

    return FundRecord(
        code=history.code,
        name=history.name,
        fund_type=history.fund_type,
        performance=FundPerformance(
            return_year1=return_year1,
            return_year3=return_year3,
            risk_by_period=breakdown,
        ),
        meta=FundMeta(
            star_rating=0.0,
            fund_size=history.fund_size,
            manager_years=round(manager_years, 1),
            fee_rate=history.fee_rate,
        ),
    )


def _unavailable(years: float) -> ForwardReturn:
    return ForwardReturn(period=horizon_label(years), total_return=math.nan, annualized=math.nan)


def forward_returns(
    prices: List[float],
    dates: List[date],
    eval_date: date,
    forward_years: List[float]
) -> List[ForwardReturn]:
    """
    Realized returns over each horizon after eval_date.

    The anchor is the first point on or after eval_date; the target is the
    first point at least years × 365.25 days after eval_date. When no such
    point exists the last point stands in, provided it lies at least 80% of
    the horizon after eval_date; otherwise that horizon is NaN.

    Returns:
        One ForwardReturn per horizon, percentages rounded to 2 decimals
    """
    anchor = first_index_at_or_after(dates, eval_date)
    if anchor is None or prices[anchor] <= 0:
        return [_unavailable(years) for years in forward_years]

    anchor_nav = prices[anchor]
    results = []

    for years in forward_years:
        horizon_days = years * DAYS_PER_YEAR
        target: Optional[int] = None
        for i in range(anchor, len(dates)):
            if (dates[i] - eval_date).days >= horizon_days:
                target = i
                break

        if target is None:
            last = len(dates) - 1
            if (dates[last] - eval_date).days < horizon_days * MIN_WINDOW_COVERAGE:
                results.append(_unavailable(years))
                continue
            target = last

        target_nav = prices[target]
        total = (target_nav - anchor_nav) / anchor_nav * 100
        actual_years = elapsed_years(eval_date, dates[target])
        ratio = target_nav / anchor_nav
        if actual_years > 0 and ratio > 0:
            annualized = (ratio ** (1 / actual_years) - 1) * 100
        else:
            annualized = 0.0

        results.append(ForwardReturn(
            period=horizon_label(years),
            total_return=round_or_zero(total, 2),
            annualized=round_or_zero(annualized, 2),
        ))

    return results
