"""
Scoring rules.
Pure functions mapping one metric value to points out of a maximum.

Every rule coerces its input with safe_num first, so a NaN or infinite
metric earns its fallback score instead of poisoning the total.
"""

from typing import Callable, Iterable, Optional, Tuple

from analysis.contracts import PeriodRiskMetrics, PeriodRiskBreakdown
from analysis.guardrails import safe_num
from scoring.benchmarks import Breakpoints, PERIOD_WEIGHTS


# Share of max awarded per band
FULL = 1.0
HIGH = 0.8
MID_HIGHER = 0.6
MID_LOWER = 0.53
LOW = 0.33
TAPER = 0.2
FLOOR = 0.13


def round1(value: float) -> float:
    return round(safe_num(value), 1)


def score_higher_better(value: float, b: Breakpoints, max_score: float) -> float:
    """
    Grade a metric where larger is better (returns, Sharpe, Sortino, Calmar, alpha).

    Below the low breakpoint the score tapers linearly toward 0.
    """
    v = safe_num(value)
    if v >= b.full:
        return max_score
    if v >= b.high:
        return max_score * HIGH
    if v >= b.mid:
        return max_score * MID_HIGHER
    if v >= b.low:
        return max_score * LOW

    if b.low > 0:
        ratio = v / b.low
    elif b.low < 0:
        ratio = b.low / v if v != 0 else 0.0
    else:
        ratio = v
    return max_score * TAPER * min(1.0, max(0.0, ratio))


def score_lower_better(value: float, b: Breakpoints, max_score: float) -> float:
    """
    Grade a metric where smaller is better (drawdown, volatility, VaR).

    Beyond the low breakpoint the score tapers as low/value but never
    drops under 13% of max.
    """
    v = safe_num(value)
    if v <= b.full:
        return max_score
    if v <= b.high:
        return max_score * HIGH
    if v <= b.mid:
        return max_score * MID_LOWER
    if v <= b.low:
        return max_score * LOW
    return max(max_score * FLOOR, max_score * LOW * (b.low / v))


def period_entries(breakdown: PeriodRiskBreakdown) -> Tuple[Tuple[Optional[PeriodRiskMetrics], float], ...]:
    """(metrics, nominal weight) for the 1y, 3y and full-history windows."""
    return (
        (breakdown.year1, PERIOD_WEIGHTS['year1']),
        (breakdown.year3, PERIOD_WEIGHTS['year3']),
        (breakdown.all, PERIOD_WEIGHTS['all']),
    )


def weighted_period_score(
    periods: Iterable[Tuple[Optional[PeriodRiskMetrics], float]],
    score_fn: Callable[[PeriodRiskMetrics], float]
) -> float:
    """
    Weighted average of one metric's score across windows.

    Missing windows are dropped and the remaining weights renormalized,
    so a fund scoring max in every present window scores max overall.
    """
    total_weight = 0.0
    total_score = 0.0
    for metrics, weight in periods:
        if metrics is None:
            continue
        total_weight += weight
        total_score += score_fn(metrics) * weight
    return total_score / total_weight if total_weight > 0 else 0.0


# Non-metric factors: fixed lookup tables

def score_rating(rating: float, max_score: float) -> float:
    """Star rating 0-5 scaled linearly to max."""
    return min(max_score, max(0.0, safe_num(rating) * (max_score / 5)))


def score_fund_size(size: float, max_score: float) -> float:
    """Fund size in 100M units; 2-100 is ideal."""
    s = safe_num(size)
    if 2 <= s <= 100:
        return max_score
    if 100 < s <= 300:
        return max_score * 0.8
    if 1 <= s < 2:
        return max_score * 0.6
    if s > 300:
        return max_score * 0.4
    return max_score * 0.2


def score_manager_years(years: float, max_score: float) -> float:
    y = safe_num(years)
    if y >= 7:
        return max_score
    if y >= 5:
        return max_score * 0.8
    if y >= 3:
        return max_score * 0.6
    if y >= 1:
        return max_score * 0.4
    return max_score * 0.2


def score_fee_rate(rate: float, max_score: float) -> float:
    """Total fee rate in percent; cheaper is better."""
    r = safe_num(rate)
    if r <= 0.8:
        return max_score
    if r <= 1.2:
        return max_score * 0.83
    if r <= 1.5:
        return max_score * 0.67
    if r <= 2.0:
        return max_score * 0.33
    return max_score * 0.17


# Deep-model shape rules

def score_beta(beta: float, max_score: float) -> float:
    """
    Beta graded against an ideal band of 0.6-0.9, not monotonically.

    A non-finite beta is treated as 1 (market-like).
    """
    b = safe_num(beta, 1.0)
    if 0.6 <= b <= 0.9:
        return max_score
    if 0.4 <= b < 0.6:
        return max_score * 0.8
    if 0.9 < b <= 1.0:
        return max_score * 0.8
    if 1.0 < b <= 1.2:
        return max_score * 0.5
    if b > 1.2:
        return max_score * 0.3
    return max_score * 0.6


def score_top_holdings(ratio: float, max_score: float) -> float:
    """Top-N weight in percent; 20-50 is ideal."""
    r = safe_num(ratio)
    if 20 <= r <= 50:
        return max_score
    if 50 < r <= 65:
        return max_score * 0.7
    if r > 65:
        return max_score * 0.4
    if 10 <= r < 20:
        return max_score * 0.8
    return max_score * 0.5


def score_hhi(hhi: float, max_score: float) -> float:
    """Industry HHI; the -1 sentinel (no breakdown) earns half."""
    h = safe_num(hhi, -1.0)
    if h < 0:
        return max_score * 0.5
    if 0.05 <= h <= 0.15:
        return max_score
    if 0.15 < h <= 0.25:
        return max_score * 0.7
    if h > 0.25:
        return max_score * 0.4
    return max_score * 0.8


def score_rolling_consistency(positive_ratio: float, max_score: float) -> float:
    p = safe_num(positive_ratio)
    if p >= 0.85:
        return max_score
    if p >= 0.75:
        return max_score * 0.8
    if p >= 0.60:
        return max_score * 0.6
    if p >= 0.45:
        return max_score * 0.4
    return max_score * 0.2
