"""
Data contracts for fund analysis.
Plain, serializable records exchanged between calculators, scorers and the backtest.
"""

import math
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Dict, Any, List, Optional, Tuple

import pandas as pd


@dataclass(frozen=True)
class NavPoint:
    """One NAV observation. Only acc_nav is a valid basis for risk statistics."""
    date: date
    unit_nav: float
    acc_nav: float


@dataclass(frozen=True)
class BenchmarkPoint:
    """One benchmark close."""
    date: date
    close: float


@dataclass(frozen=True)
class PeriodRiskMetrics:
    """Risk/return statistics for one time window."""
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    calmar_ratio: float = 0.0
    max_drawdown: float = 0.0
    volatility: float = 0.0


@dataclass(frozen=True)
class PeriodRiskBreakdown:
    """
    Risk metrics per window.

    year1/year3 are None when the window is not covered by the data;
    all is always present (zeros when fewer than 10 points exist).
    """
    year1: Optional[PeriodRiskMetrics]
    year3: Optional[PeriodRiskMetrics]
    all: PeriodRiskMetrics

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FundPerformance:
    return_year1: float
    return_year3: float
    risk_by_period: PeriodRiskBreakdown


@dataclass(frozen=True)
class FundMeta:
    """Static fund attributes. star_rating 0 means unknown."""
    star_rating: float = 0.0
    fund_size: float = 0.0
    manager_years: float = 0.0
    fee_rate: float = 0.0


@dataclass(frozen=True)
class FundRecord:
    """Everything the scoring model needs to know about one fund."""
    code: str
    name: str
    fund_type: str
    performance: FundPerformance
    meta: FundMeta

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class QuantMetrics:
    """
    Benchmark-relative and holdings analytics.

    Every field is optional: None means the analytic was not run.
    Values are fractions (alpha 0.05 = 5%/yr) except top_holdings_ratio (percent).
    """
    alpha: Optional[float] = None
    beta: Optional[float] = None
    information_ratio: Optional[float] = None
    treynor_ratio: Optional[float] = None
    var95: Optional[float] = None
    cvar95: Optional[float] = None
    monthly_win_rate: Optional[float] = None
    downside_capture_ratio: Optional[float] = None
    cagr: Optional[float] = None
    hhi: Optional[float] = None
    top_holdings_ratio: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Holding:
    name: str
    percent: float


@dataclass(frozen=True)
class IndustryWeight:
    name: str
    percent: float


@dataclass(frozen=True)
class FundHoldings:
    """Disclosed holdings: top stocks and industry breakdown, weights in percent."""
    top_stocks: Tuple[Holding, ...] = field(default_factory=tuple)
    industries: Tuple[IndustryWeight, ...] = field(default_factory=tuple)


def nav_lists(navs: List[NavPoint]) -> Tuple[List[float], List[date]]:
    """Split NAV points into (acc_nav prices, dates) parallel lists."""
    return [p.acc_nav for p in navs], [p.date for p in navs]


def nav_series(navs: List[NavPoint]) -> pd.Series:
    """Accumulated NAV as a date-indexed Series."""
    prices, dates = nav_lists(navs)
    return pd.Series(prices, index=pd.Index(dates, name='date'), name='acc_nav', dtype=float)


def benchmark_series(points: List[BenchmarkPoint]) -> pd.Series:
    """Benchmark close as a date-indexed Series."""
    return pd.Series(
        [p.close for p in points],
        index=pd.Index([p.date for p in points], name='date'),
        name='close',
        dtype=float,
    )


def finite_or_none(value: float) -> Optional[float]:
    """Serialize NaN/Infinity as None."""
    if value is None or not math.isfinite(value):
        return None
    return value
