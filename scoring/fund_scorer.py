"""
Fund scorer - dual market-wide and risk-tier-relative scores.

One scoring pass, parameterized by a BenchmarkTable, runs twice per fund:
once against the fund's category table (market view) and once against its
risk tier's table (tier view). Only the market view carries the
momentum-reversal penalty; tier scores measure peer-relative quality and
are left untouched by absolute momentum.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Tuple

from analysis.contracts import FundRecord
from analysis.guardrails import safe_num
from scoring.benchmarks import (
    BenchmarkTable,
    MarketWeights,
    CATEGORY_BENCHMARKS,
    TIER_BENCHMARKS,
    MARKET_WEIGHTS,
    MOMENTUM_RULES,
    SCORE_LEVELS,
)
from scoring.classification import FundCategory, RiskTier, classify_fund, classify_risk_tier
from scoring.rules import (
    round1,
    period_entries,
    weighted_period_score,
    score_higher_better,
    score_lower_better,
    score_rating,
    score_fund_size,
    score_manager_years,
    score_fee_rate,
)


MAX_SCORE = 100.0

RETURN_ITEMS = ('sharpe_ratio', 'sortino_ratio', 'return_year1', 'return_year3')
RISK_ITEMS = ('calmar_ratio', 'max_drawdown', 'volatility')
OVERALL_ITEMS = ('rating', 'fund_size', 'manager_years', 'fee_rate')


@dataclass(frozen=True)
class ScoreItem:
    """One scored item: points earned out of its (possibly rescaled) maximum."""
    name: str
    score: float
    max_score: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreResult:
    """Both views of a fund's score plus how they were reached."""
    code: str
    category: FundCategory
    risk_tier: RiskTier
    market_score: float
    tier_score: float
    momentum_penalty: float
    return_score: float
    risk_score: float
    overall_score: float
    market_items: Tuple[ScoreItem, ...]
    tier_items: Tuple[ScoreItem, ...]

    @property
    def total_score(self) -> float:
        return self.market_score

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['category'] = self.category.value
        data['risk_tier'] = self.risk_tier.value
        data['market_items'] = [item.to_dict() for item in self.market_items]
        data['tier_items'] = [item.to_dict() for item in self.tier_items]
        return data


@dataclass(frozen=True)
class _TableScore:
    items: Tuple[ScoreItem, ...]
    dimensions: Dict[str, float]
    total: float


def rating_scale(rating: float, weights: MarketWeights = MARKET_WEIGHTS) -> float:
    """
    Factor applied to every non-rating item's max.

    1 when a star rating exists; otherwise 100 / (100 - rating weight) so
    the remaining items still add up to 100.
    """
    if safe_num(rating) > 0:
        return 1.0
    return MAX_SCORE / (MAX_SCORE - weights.rating)


def _score_with_table(
    record: FundRecord,
    table: BenchmarkTable,
    weights: MarketWeights = MARKET_WEIGHTS
) -> _TableScore:
    perf = record.performance
    meta = record.meta
    periods = period_entries(perf.risk_by_period)

    has_rating = safe_num(meta.star_rating) > 0
    scale = rating_scale(meta.star_rating, weights)

    def item(name: str, raw: float, base_max: float) -> ScoreItem:
        return ScoreItem(name=name, score=round1(raw), max_score=round1(base_max * scale))

    w = weights
    items: List[ScoreItem] = [
        item('sharpe_ratio', weighted_period_score(
            periods, lambda m: score_higher_better(m.sharpe_ratio, table.sharpe, w.sharpe * scale)), w.sharpe),
        item('sortino_ratio', weighted_period_score(
            periods, lambda m: score_higher_better(m.sortino_ratio, table.sortino, w.sortino * scale)), w.sortino),
        item('return_year1', score_higher_better(
            perf.return_year1, table.return_year1, w.return_year1 * scale), w.return_year1),
        item('return_year3', score_higher_better(
            perf.return_year3, table.return_year3, w.return_year3 * scale), w.return_year3),
        item('calmar_ratio', weighted_period_score(
            periods, lambda m: score_higher_better(m.calmar_ratio, table.calmar, w.calmar * scale)), w.calmar),
        item('max_drawdown', weighted_period_score(
            periods, lambda m: score_lower_better(m.max_drawdown, table.drawdown, w.drawdown * scale)), w.drawdown),
        item('volatility', weighted_period_score(
            periods, lambda m: score_lower_better(m.volatility, table.volatility, w.volatility * scale)), w.volatility),
    ]

    # Without a rating the item is omitted and its weight spread over the rest
    if has_rating:
        items.append(item('rating', score_rating(meta.star_rating, w.rating), w.rating))

    items.extend([
        item('fund_size', score_fund_size(meta.fund_size, w.fund_size * scale), w.fund_size),
        item('manager_years', score_manager_years(meta.manager_years, w.manager_years * scale), w.manager_years),
        item('fee_rate', score_fee_rate(meta.fee_rate, w.fee_rate * scale), w.fee_rate),
    ])

    by_name = {i.name: i.score for i in items}
    dimensions = {
        'return': round1(sum(by_name.get(n, 0.0) for n in RETURN_ITEMS)),
        'risk': round1(sum(by_name.get(n, 0.0) for n in RISK_ITEMS)),
        'overall': round1(sum(by_name.get(n, 0.0) for n in OVERALL_ITEMS)),
    }
    total = round1(sum(dimensions.values()))

    return _TableScore(items=tuple(items), dimensions=dimensions, total=total)


def momentum_penalty(return_year1: float) -> float:
    """
    Points deducted for an overheated trailing year.

    > 50% loses 5 points, > 30% loses 3, otherwise 0.
    """
    r = safe_num(return_year1)
    for rule in MOMENTUM_RULES:
        if r > rule.threshold:
            return rule.penalty
    return 0.0


def score_fund(record: FundRecord) -> ScoreResult:
    """
    Score a fund against its category (market view) and its risk tier (tier view).

    Args:
        record: Fund metrics and meta

    Returns:
        ScoreResult; market score floored at 0 after the momentum penalty,
        tier score capped at 100 and never penalized
    """
    category = classify_fund(record.fund_type)
    tier = classify_risk_tier(record.fund_type, record.performance.risk_by_period.all.volatility)

    market = _score_with_table(record, CATEGORY_BENCHMARKS[category])
    tier_view = _score_with_table(record, TIER_BENCHMARKS[tier].to_table())

    penalty = momentum_penalty(record.performance.return_year1)
    market_score = round1(max(0.0, market.total - penalty))

    return ScoreResult(
        code=record.code,
        category=category,
        risk_tier=tier,
        market_score=market_score,
        tier_score=min(MAX_SCORE, tier_view.total),
        momentum_penalty=penalty,
        return_score=market.dimensions['return'],
        risk_score=market.dimensions['risk'],
        overall_score=market.dimensions['overall'],
        market_items=market.items,
        tier_items=tier_view.items,
    )


def score_level(total_score: float) -> str:
    """Textual band for a total score."""
    for lower_bound, label in SCORE_LEVELS:
        if total_score >= lower_bound:
            return label
    return 'poor'
