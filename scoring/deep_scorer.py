"""
Deep scorer - score with benchmark-relative and holdings analytics.

Weight budget: return 30 + risk 30 + holdings 15 + stability 10 + overall 15.
Any optional analytic that was not run (None in QuantMetrics) earns exactly
half of its item's max rather than being dropped.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Callable, List, Optional, Tuple

from analysis.contracts import FundRecord, QuantMetrics
from analysis.guardrails import safe_num
from scoring.benchmarks import (
    CATEGORY_BENCHMARKS,
    ALPHA_BENCHMARKS,
    VAR_BENCHMARKS,
    WIN_RATE_BENCHMARKS,
    IR_BENCHMARKS,
    DEEP_WEIGHTS,
)
from scoring.classification import FundCategory, classify_fund
from scoring.fund_scorer import ScoreItem
from scoring.rules import (
    round1,
    period_entries,
    weighted_period_score,
    score_higher_better,
    score_lower_better,
    score_beta,
    score_hhi,
    score_top_holdings,
    score_rolling_consistency,
    score_rating,
    score_fund_size,
    score_manager_years,
)


NEUTRAL_SHARE = 0.5

# Consistency proxy fed to the rolling-consistency rule from the sign of CAGR
POSITIVE_CAGR_CONSISTENCY = 0.7
NON_POSITIVE_CAGR_CONSISTENCY = 0.4


@dataclass(frozen=True)
class DeepScoreResult:
    code: str
    category: FundCategory
    return_score: float
    risk_score: float
    holding_score: float
    stability_score: float
    overall_score: float
    total_score: float
    items: Tuple[ScoreItem, ...]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['category'] = self.category.value
        data['items'] = [item.to_dict() for item in self.items]
        return data


def _optional(value: Optional[float], rule: Callable[[float, float], float], max_score: float) -> float:
    """Apply rule, or award the neutral half when the analytic is absent."""
    if value is None:
        return max_score * NEUTRAL_SHARE
    return rule(value, max_score)


def _consistency(cagr: float, max_score: float) -> float:
    proxy = POSITIVE_CAGR_CONSISTENCY if safe_num(cagr) > 0 else NON_POSITIVE_CAGR_CONSISTENCY
    return score_rolling_consistency(proxy, max_score)


def score_fund_deep(record: FundRecord, quant: Optional[QuantMetrics] = None) -> DeepScoreResult:
    """
    Score a fund with the deep weight budget.

    Args:
        record: Fund metrics and meta
        quant: Benchmark-relative and holdings analytics; None or any
            None field means that analytic was not run

    Returns:
        DeepScoreResult with five dimension subtotals and per-item detail
    """
    q = quant if quant is not None else QuantMetrics()
    category = classify_fund(record.fund_type)
    table = CATEGORY_BENCHMARKS[category]
    perf = record.performance
    meta = record.meta
    periods = period_entries(perf.risk_by_period)
    w = DEEP_WEIGHTS

    def higher(bp):
        return lambda v, m: score_higher_better(v, bp, m)

    def lower(bp):
        return lambda v, m: score_lower_better(v, bp, m)

    returns = [
        ('return_year1', score_higher_better(perf.return_year1, table.return_year1, w.return_year1), w.return_year1),
        ('return_year3', score_higher_better(perf.return_year3, table.return_year3, w.return_year3), w.return_year3),
        ('alpha', _optional(q.alpha, higher(ALPHA_BENCHMARKS[category]), w.alpha), w.alpha),
        ('monthly_win_rate', _optional(q.monthly_win_rate, higher(WIN_RATE_BENCHMARKS[category]), w.win_rate),
         w.win_rate),
    ]
    risk = [
        ('sharpe_ratio', weighted_period_score(
            periods, lambda m: score_higher_better(m.sharpe_ratio, table.sharpe, w.sharpe)), w.sharpe),
        ('max_drawdown', weighted_period_score(
            periods, lambda m: score_lower_better(m.max_drawdown, table.drawdown, w.drawdown)), w.drawdown),
        ('beta', _optional(q.beta, score_beta, w.beta), w.beta),
        ('var95', _optional(q.var95, lower(VAR_BENCHMARKS[category]), w.var95), w.var95),
        ('volatility', weighted_period_score(
            periods, lambda m: score_lower_better(m.volatility, table.volatility, w.volatility)), w.volatility),
    ]
    holdings = [
        ('industry_hhi', _optional(q.hhi, score_hhi, w.hhi), w.hhi),
        ('top_holdings_ratio', _optional(q.top_holdings_ratio, score_top_holdings, w.top_holdings), w.top_holdings),
    ]
    stability = [
        ('information_ratio', _optional(q.information_ratio, higher(IR_BENCHMARKS[category]), w.information_ratio),
         w.information_ratio),
        ('consistency', _optional(q.cagr, _consistency, w.consistency), w.consistency),
    ]

    rating_score = (
        score_rating(meta.star_rating, w.rating)
        if safe_num(meta.star_rating) > 0 else w.rating * NEUTRAL_SHARE
    )
    overall = [
        ('fund_size', score_fund_size(meta.fund_size, w.fund_size), w.fund_size),
        ('manager_years', score_manager_years(meta.manager_years, w.manager_years), w.manager_years),
        ('rating', rating_score, w.rating),
    ]

    dimensions = [returns, risk, holdings, stability, overall]
    subtotals = [round1(sum(raw for _, raw, _ in dim)) for dim in dimensions]

    items: List[ScoreItem] = [
        ScoreItem(name=name, score=round1(raw), max_score=max_score)
        for dim in dimensions
        for name, raw, max_score in dim
    ]

    return DeepScoreResult(
        code=record.code,
        category=category,
        return_score=subtotals[0],
        risk_score=subtotals[1],
        holding_score=subtotals[2],
        stability_score=subtotals[3],
        overall_score=subtotals[4],
        total_score=round1(sum(subtotals)),
        items=tuple(items),
    )
