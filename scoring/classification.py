"""
Fund classification.
Resolves a fund's category and risk tier from its free-text type and realized volatility.
"""

import re
from enum import Enum
from typing import List, Pattern, Tuple

from analysis.guardrails import safe_num


class FundCategory(str, Enum):
    """Peer group used to pick benchmark tables."""
    BOND = 'bond'
    BALANCED = 'balanced'
    EQUITY = 'equity'


class RiskTier(str, Enum):
    """Ordered risk severity, VERY_LOW first."""
    VERY_LOW = 'very_low'
    LOW = 'low'
    MEDIUM = 'medium'
    MEDIUM_HIGH = 'medium_high'
    HIGH = 'high'

    @property
    def severity(self) -> int:
        return RISK_TIER_ORDER.index(self)


RISK_TIER_ORDER = (
    RiskTier.VERY_LOW,
    RiskTier.LOW,
    RiskTier.MEDIUM,
    RiskTier.MEDIUM_HIGH,
    RiskTier.HIGH,
)


def _pattern(expr: str) -> Pattern:
    return re.compile(expr, re.IGNORECASE)


# Ordered, first match wins
CATEGORY_PATTERNS: Tuple[Tuple[Pattern, FundCategory], ...] = (
    (_pattern(r'债券|纯债|短债|中短债|长债|偏债|bond|fixed income'), FundCategory.BOND),
    (_pattern(r'股票|偏股|指数|equity|stock|index'), FundCategory.EQUITY),
)

TYPE_TIER_PATTERNS: Tuple[Tuple[List[Pattern], RiskTier], ...] = (
    ([_pattern(r'货币|超短债|money market|ultra[- ]short')], RiskTier.VERY_LOW),
    ([_pattern(r'纯债|短债|中短债|长债|pure bond|short[- ]term bond'), _pattern(r'债券.*一级')], RiskTier.LOW),
    ([_pattern(r'偏债|债券|FOF|bond')], RiskTier.MEDIUM),
    ([_pattern(r'偏股混合|平衡|灵活配置|balanced|flexible')], RiskTier.MEDIUM_HIGH),
    ([_pattern(r'股票|指数|偏股|equity|stock|index')], RiskTier.HIGH),
)

# Upper bounds (exclusive) of annualized volatility percent per tier
VOLATILITY_TIER_BOUNDS: Tuple[Tuple[float, RiskTier], ...] = (
    (0.5, RiskTier.VERY_LOW),
    (3.0, RiskTier.LOW),
    (10.0, RiskTier.MEDIUM),
    (20.0, RiskTier.MEDIUM_HIGH),
)


def classify_fund(fund_type: str) -> FundCategory:
    """Category from the free-text type; anything unmatched is balanced."""
    text = fund_type or ''
    for pattern, category in CATEGORY_PATTERNS:
        if pattern.search(text):
            return category
    return FundCategory.BALANCED


def tier_from_type(fund_type: str) -> RiskTier:
    """Risk tier implied by the type text alone; MEDIUM when nothing matches."""
    text = fund_type or ''
    for patterns, tier in TYPE_TIER_PATTERNS:
        if any(p.search(text) for p in patterns):
            return tier
    return RiskTier.MEDIUM


def tier_from_volatility(volatility: float) -> RiskTier:
    """Risk tier implied by annualized volatility (percent); non-finite counts as 0."""
    vol = safe_num(volatility)
    for bound, tier in VOLATILITY_TIER_BOUNDS:
        if vol < bound:
            return tier
    return RiskTier.HIGH


def classify_risk_tier(fund_type: str, volatility: float) -> RiskTier:
    """
    Resolve the risk tier from type text and realized volatility.

    When the two disagree, the more severe tier is kept.
    """
    by_type = tier_from_type(fund_type)
    by_vol = tier_from_volatility(volatility)
    return max(by_type, by_vol, key=lambda t: t.severity)
