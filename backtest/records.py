"""
Backtest data contracts.
Records produced by the scoring backtest, all serializable through to_dict().
"""

import math
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Dict, Any, List, Optional, Tuple

from analysis.contracts import NavPoint, PeriodRiskBreakdown, finite_or_none
from scoring.fund_scorer import ScoreItem


def horizon_label(years: float) -> str:
    """1 -> '1y', 0.5 -> '0.5y'."""
    return f"{years:g}y"


@dataclass(frozen=True)
class FundHistory:
    """Full NAV history plus the current static meta of one fund."""
    code: str
    name: str
    fund_type: str
    navs: Tuple[NavPoint, ...]
    establish_date: Optional[date] = None
    fund_size: float = 0.0
    manager_years: float = 0.0
    fee_rate: float = 0.0


@dataclass(frozen=True)
class ForwardReturn:
    """Realized return after an evaluation date; NaN when the horizon is not covered."""
    period: str
    total_return: float
    annualized: float

    @property
    def is_valid(self) -> bool:
        return math.isfinite(self.total_return)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'period': self.period,
            'total_return': finite_or_none(self.total_return),
            'annualized': finite_or_none(self.annualized),
        }


@dataclass(frozen=True)
class BacktestSample:
    """One fund scored at one simulated date, with what happened next."""
    code: str
    name: str
    fund_type: str
    eval_date: date
    score: float
    return_year1: float
    return_year3: float
    risk_by_period: PeriodRiskBreakdown
    items: Tuple[ScoreItem, ...]
    forward_returns: Tuple[ForwardReturn, ...]

    def forward_return(self, period: str) -> float:
        for fwd in self.forward_returns:
            if fwd.period == period:
                return fwd.total_return
        return math.nan

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'name': self.name,
            'fund_type': self.fund_type,
            'eval_date': self.eval_date.isoformat(),
            'score': self.score,
            'return_year1': self.return_year1,
            'return_year3': self.return_year3,
            'risk_by_period': self.risk_by_period.to_dict(),
            'items': [item.to_dict() for item in self.items],
            'forward_returns': [fwd.to_dict() for fwd in self.forward_returns],
        }


@dataclass(frozen=True)
class CorrelationResult:
    pearson: float
    spearman: float
    sample_size: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class QuintileBucket:
    label: str
    avg_score: float
    avg_return: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BacktestSummary:
    total_samples: int
    date_range: str
    fund_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BacktestReport:
    samples: Tuple[BacktestSample, ...]
    correlation: Dict[str, CorrelationResult]
    quintiles: Dict[str, List[QuintileBucket]]
    summary: BacktestSummary = field(default_factory=lambda: BacktestSummary(0, '', 0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'samples': [s.to_dict() for s in self.samples],
            'correlation': {k: v.to_dict() for k, v in self.correlation.items()},
            'quintiles': {k: [b.to_dict() for b in v] for k, v in self.quintiles.items()},
            'summary': self.summary.to_dict(),
        }
