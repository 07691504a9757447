"""
Backtest statistics.
Score-vs-return correlation and quintile bucketing over backtest samples.
"""

import math
from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy import stats

from analysis.guardrails import safe_num
from backtest.records import BacktestSample, CorrelationResult, QuintileBucket


MIN_CORRELATION_PAIRS = 3
MIN_QUINTILE_SAMPLES = 5
QUINTILE_LABELS = ('Q1 (highest)', 'Q2', 'Q3', 'Q4', 'Q5 (lowest)')


def _has_variance(values: np.ndarray) -> bool:
    return values.size > 0 and float(values.max()) != float(values.min())


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation rounded to 4 decimals.

    0 with fewer than 3 pairs or when either side is constant.
    """
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.size < MIN_CORRELATION_PAIRS or not _has_variance(xs) or not _has_variance(ys):
        return 0.0
    r, _ = stats.pearsonr(xs, ys)
    return round(safe_num(r), 4)


def spearman(x: Sequence[float], y: Sequence[float]) -> float:
    """Spearman rank correlation (average ranks for ties), same guards as pearson."""
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.size < MIN_CORRELATION_PAIRS or not _has_variance(xs) or not _has_variance(ys):
        return 0.0
    rho, _ = stats.spearmanr(xs, ys)
    return round(safe_num(rho), 4)


def score_return_pairs(samples: Sequence[BacktestSample], period: str) -> List[Tuple[float, float]]:
    """(score, forward return) for every sample whose `period` return is known."""
    pairs = []
    for sample in samples:
        ret = sample.forward_return(period)
        if math.isfinite(ret):
            pairs.append((sample.score, ret))
    return pairs


def correlation(samples: Sequence[BacktestSample], period: str) -> CorrelationResult:
    pairs = score_return_pairs(samples, period)
    scores = [p[0] for p in pairs]
    returns = [p[1] for p in pairs]
    return CorrelationResult(
        pearson=pearson(scores, returns),
        spearman=spearman(scores, returns),
        sample_size=len(pairs),
    )


def quintile_buckets(samples: Sequence[BacktestSample], period: str) -> List[QuintileBucket]:
    """
    Split samples into five groups by score, highest first.

    Groups differ in size by at most one, the larger groups first,
    so every group is filled once there are 5 samples.
    Fewer than 5 usable samples gives an empty list.
    """
    pairs = score_return_pairs(samples, period)
    if len(pairs) < MIN_QUINTILE_SAMPLES:
        return []

    ranked = sorted(pairs, key=lambda p: p[0], reverse=True)
    base, extra = divmod(len(ranked), len(QUINTILE_LABELS))

    buckets = []
    start = 0
    for i, label in enumerate(QUINTILE_LABELS):
        size = base + (1 if i < extra else 0)
        group = ranked[start:start + size]
        start += size
        buckets.append(QuintileBucket(
            label=label,
            avg_score=round(sum(g[0] for g in group) / len(group), 1),
            avg_return=round(sum(g[1] for g in group) / len(group), 2),
            count=len(group),
        ))
    return buckets


def aggregate(
    samples: Sequence[BacktestSample],
    periods: Sequence[str]
) -> Tuple[Dict[str, CorrelationResult], Dict[str, List[QuintileBucket]]]:
    """Correlation and quintiles for every horizon label."""
    return (
        {p: correlation(samples, p) for p in periods},
        {p: quintile_buckets(samples, p) for p in periods},
    )
