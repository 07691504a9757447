"""
Index-fund timing score.
Valuation 50 (PE/PB percentiles) + technical 50 (trend direction, RSI) = 100.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Tuple

from analysis.calculations.technical import TechnicalSignal
from analysis.guardrails import safe_num
from scoring.fund_scorer import ScoreItem
from scoring.rules import round1


PE_MAX = 30
PB_MAX = 20
TREND_MAX = 30
RSI_MAX = 20
DIMENSION_MAX = 50

# (exclusive upper percentile bound, share of max); >= 90 earns 0
PERCENTILE_STEPS = (
    (10, 1.0),
    (20, 0.9),
    (30, 0.75),
    (40, 0.6),
    (50, 0.5),
    (60, 0.4),
    (70, 0.3),
    (80, 0.2),
    (90, 0.1),
)

TREND_POINTS = {
    'bullish': 30,
    'neutral': 15,
    'bearish': 5,
}

BUY_THRESHOLD = 70
HOLD_THRESHOLD = 40


@dataclass(frozen=True)
class IndexValuation:
    """Current PE/PB and their historical percentiles (0-100)."""
    pe: float
    pb: float
    pe_percentile: float
    pb_percentile: float


@dataclass(frozen=True)
class IndexTimingResult:
    index_code: str
    index_name: str
    valuation_score: float
    technical_score: float
    total_score: float
    rating: str  # 'buy' | 'hold' | 'sell'
    valuation: IndexValuation
    technical: TechnicalSignal
    items: Tuple[ScoreItem, ...]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def score_percentile(percentile: float, max_score: float) -> float:
    """Lower valuation percentile (cheaper) scores higher."""
    p = _clamp(safe_num(percentile), 0, 100)
    for bound, share in PERCENTILE_STEPS:
        if p < bound:
            return max_score * share
    return 0.0


def score_rsi(rsi: float) -> float:
    """Oversold earns points, overbought loses them."""
    r = _clamp(safe_num(rsi, 50.0), 0, 100)
    if r < 20:
        return 20
    if r < 30:
        return 17
    if r < 45:
        return 13
    if r <= 55:
        return 10
    if r <= 70:
        return 7
    if r <= 80:
        return 3
    return 0


def score_valuation(valuation: IndexValuation) -> Tuple[float, Tuple[ScoreItem, ...]]:
    pe_score = score_percentile(valuation.pe_percentile, PE_MAX)
    pb_score = score_percentile(valuation.pb_percentile, PB_MAX)
    items = (
        ScoreItem(name='pe_percentile', score=round1(pe_score), max_score=PE_MAX),
        ScoreItem(name='pb_percentile', score=round1(pb_score), max_score=PB_MAX),
    )
    return min(DIMENSION_MAX, round1(pe_score + pb_score)), items


def score_technical(signal: TechnicalSignal) -> Tuple[float, Tuple[ScoreItem, ...]]:
    trend_score = TREND_POINTS.get(signal.direction, TREND_POINTS['bearish'])
    rsi_score = score_rsi(signal.rsi)
    items = (
        ScoreItem(name='trend_direction', score=trend_score, max_score=TREND_MAX),
        ScoreItem(name='rsi', score=rsi_score, max_score=RSI_MAX),
    )
    return min(DIMENSION_MAX, round1(trend_score + rsi_score)), items


def timing_rating(total_score: float) -> str:
    if total_score >= BUY_THRESHOLD:
        return 'buy'
    if total_score >= HOLD_THRESHOLD:
        return 'hold'
    return 'sell'


def score_index_timing(
    index_code: str,
    index_name: str,
    valuation: IndexValuation,
    technical: TechnicalSignal
) -> IndexTimingResult:
    """
    Combine valuation and technical scores into a buy/hold/sell rating.

    Args:
        index_code: Index code
        index_name: Index display name
        valuation: PE/PB percentiles
        technical: Signals computed from the tracking fund's accumulated NAV

    Returns:
        IndexTimingResult; buy at 70+, hold at 40+, otherwise sell
    """
    valuation_score, valuation_items = score_valuation(valuation)
    technical_score, technical_items = score_technical(technical)
    total = round1(valuation_score + technical_score)

    return IndexTimingResult(
        index_code=index_code,
        index_name=index_name,
        valuation_score=valuation_score,
        technical_score=technical_score,
        total_score=total,
        rating=timing_rating(total),
        valuation=valuation,
        technical=technical,
        items=valuation_items + technical_items,
    )
