"""
Scoring benchmark tables and weights.

All tables are immutable: frozen dataclasses wrapped in read-only mappings.
A benchmark table is the only thing that differs between the market-wide
and the tier-relative scoring passes.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from scoring.classification import FundCategory, RiskTier


@dataclass(frozen=True)
class Breakpoints:
    """Four thresholds for one metric, ordered from best (full) to worst (low)."""
    full: float
    high: float
    mid: float
    low: float

    def scaled(self, factor: float) -> 'Breakpoints':
        return Breakpoints(self.full * factor, self.high * factor, self.mid * factor, self.low * factor)


@dataclass(frozen=True)
class BenchmarkTable:
    """Breakpoints for every metric the scorer grades against a benchmark."""
    return_year1: Breakpoints
    return_year3: Breakpoints
    sharpe: Breakpoints
    sortino: Breakpoints
    calmar: Breakpoints
    drawdown: Breakpoints
    volatility: Breakpoints


@dataclass(frozen=True)
class TierBenchmark:
    """Simplified three-value benchmark for one risk tier."""
    sharpe: float
    annual_return: float
    drawdown: float

    def to_table(self) -> BenchmarkTable:
        """
        Expand into a full BenchmarkTable.

        Sharpe breakpoints are reused for Sortino and Calmar, drawdown
        breakpoints for volatility; the 3-year return table is the 1-year one ×3.
        """
        s, r, d = self.sharpe, self.annual_return, self.drawdown
        sharpe = Breakpoints(s, s * 0.7, s * 0.4, s * 0.15)
        year1 = Breakpoints(r, r * 0.7, r * 0.4, 0.0)
        drawdown = Breakpoints(d, d * 2, d * 4, d * 6)
        return BenchmarkTable(
            return_year1=year1,
            return_year3=year1.scaled(3),
            sharpe=sharpe,
            sortino=sharpe,
            calmar=sharpe,
            drawdown=drawdown,
            volatility=drawdown,
        )


CATEGORY_BENCHMARKS: Mapping[FundCategory, BenchmarkTable] = MappingProxyType({
    FundCategory.BOND: BenchmarkTable(
        return_year1=Breakpoints(8, 5, 3, 0),
        return_year3=Breakpoints(20, 12, 6, 0),
        sharpe=Breakpoints(1.5, 1.0, 0.7, 0.3),
        sortino=Breakpoints(2.0, 1.5, 1.0, 0.5),
        calmar=Breakpoints(2.0, 1.5, 1.0, 0.5),
        drawdown=Breakpoints(3, 5, 10, 15),
        volatility=Breakpoints(3, 5, 8, 12),
    ),
    FundCategory.BALANCED: BenchmarkTable(
        return_year1=Breakpoints(20, 12, 6, 0),
        return_year3=Breakpoints(50, 30, 15, 0),
        sharpe=Breakpoints(2.0, 1.5, 1.0, 0.5),
        sortino=Breakpoints(2.5, 2.0, 1.5, 1.0),
        calmar=Breakpoints(3.0, 2.0, 1.0, 0.5),
        drawdown=Breakpoints(10, 20, 30, 40),
        volatility=Breakpoints(10, 15, 20, 25),
    ),
    FundCategory.EQUITY: BenchmarkTable(
        return_year1=Breakpoints(30, 20, 10, 0),
        return_year3=Breakpoints(80, 50, 30, 0),
        sharpe=Breakpoints(2.0, 1.5, 1.0, 0.5),
        sortino=Breakpoints(2.5, 2.0, 1.5, 1.0),
        calmar=Breakpoints(3.0, 2.0, 1.0, 0.5),
        drawdown=Breakpoints(15, 25, 35, 45),
        volatility=Breakpoints(15, 20, 25, 30),
    ),
})

TIER_BENCHMARKS: Mapping[RiskTier, TierBenchmark] = MappingProxyType({
    RiskTier.VERY_LOW: TierBenchmark(sharpe=1.0, annual_return=2.5, drawdown=0.1),
    RiskTier.LOW: TierBenchmark(sharpe=2.0, annual_return=6, drawdown=1),
    RiskTier.MEDIUM: TierBenchmark(sharpe=1.5, annual_return=15, drawdown=5),
    RiskTier.MEDIUM_HIGH: TierBenchmark(sharpe=1.2, annual_return=25, drawdown=15),
    RiskTier.HIGH: TierBenchmark(sharpe=1.0, annual_return=35, drawdown=20),
})


# Deep-model breakpoints for benchmark-relative analytics (fractions)
ALPHA_BENCHMARKS: Mapping[FundCategory, Breakpoints] = MappingProxyType({
    FundCategory.BOND: Breakpoints(0.05, 0.03, 0.01, -0.02),
    FundCategory.BALANCED: Breakpoints(0.10, 0.05, 0.02, -0.03),
    FundCategory.EQUITY: Breakpoints(0.15, 0.08, 0.03, -0.05),
})

VAR_BENCHMARKS: Mapping[FundCategory, Breakpoints] = MappingProxyType({
    FundCategory.BOND: Breakpoints(0.003, 0.005, 0.008, 0.012),
    FundCategory.BALANCED: Breakpoints(0.010, 0.015, 0.020, 0.030),
    FundCategory.EQUITY: Breakpoints(0.015, 0.020, 0.030, 0.040),
})

WIN_RATE_BENCHMARKS: Mapping[FundCategory, Breakpoints] = MappingProxyType({
    FundCategory.BOND: Breakpoints(0.75, 0.65, 0.55, 0.45),
    FundCategory.BALANCED: Breakpoints(0.65, 0.58, 0.50, 0.42),
    FundCategory.EQUITY: Breakpoints(0.60, 0.55, 0.48, 0.40),
})

IR_BENCHMARKS: Mapping[FundCategory, Breakpoints] = MappingProxyType({
    FundCategory.BOND: Breakpoints(1.5, 1.0, 0.5, 0.0),
    FundCategory.BALANCED: Breakpoints(1.0, 0.7, 0.3, 0.0),
    FundCategory.EQUITY: Breakpoints(1.0, 0.7, 0.3, 0.0),
})


@dataclass(frozen=True)
class MarketWeights:
    """Market model: return 35 + risk 35 + overall 30 = 100."""
    sharpe: float = 12
    sortino: float = 5
    return_year1: float = 8
    return_year3: float = 10
    calmar: float = 10
    drawdown: float = 18
    volatility: float = 7
    rating: float = 8
    fund_size: float = 8
    manager_years: float = 8
    fee_rate: float = 6


@dataclass(frozen=True)
class DeepWeights:
    """Deep model: return 30 + risk 30 + holdings 15 + stability 10 + overall 15 = 100."""
    return_year1: float = 8
    return_year3: float = 7
    alpha: float = 10
    win_rate: float = 5
    sharpe: float = 10
    drawdown: float = 8
    beta: float = 5
    var95: float = 4
    volatility: float = 3
    hhi: float = 8
    top_holdings: float = 7
    information_ratio: float = 5
    consistency: float = 5
    fund_size: float = 5
    manager_years: float = 5
    rating: float = 5


MARKET_WEIGHTS = MarketWeights()
DEEP_WEIGHTS = DeepWeights()

# Nominal weights of the 1y / 3y / full-history windows
PERIOD_WEIGHTS: Mapping[str, float] = MappingProxyType({
    'year1': 0.4,
    'year3': 0.3,
    'all': 0.3,
})


@dataclass(frozen=True)
class MomentumRule:
    threshold: float
    penalty: float


# Checked in order; trailing 1y return strictly above threshold triggers the penalty
MOMENTUM_RULES = (
    MomentumRule(threshold=50, penalty=5),
    MomentumRule(threshold=30, penalty=3),
)

# Lower bounds of each score level band
SCORE_LEVELS = (
    (85, 'excellent'),
    (70, 'good'),
    (55, 'average'),
    (40, 'below average'),
)
