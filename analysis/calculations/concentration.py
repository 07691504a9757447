"""
Holdings concentration utilities.
Pure functions for top-N stock concentration and industry Herfindahl-Hirschman index.
"""

from typing import Dict, Union

from analysis.contracts import FundHoldings
from analysis.guardrails import safe_num


# Returned by industry_hhi when no industry breakdown is disclosed
HHI_UNAVAILABLE = -1.0

DEFAULT_TOP_N = 10


def top_n_concentration(holdings: FundHoldings, n: int = DEFAULT_TOP_N) -> float:
    """
    Sum of the n largest stock weights.

    Args:
        holdings: Fund holdings with stock weights in percent
        n: Number of top positions to include

    Returns:
        Combined weight in percent (45.0 = 45% of net assets)
    """
    weights = sorted((safe_num(s.percent) for s in holdings.top_stocks), reverse=True)
    return sum(weights[:n])


def industry_hhi(holdings: FundHoldings) -> float:
    """
    Herfindahl-Hirschman index over industry weights.

    HHI = Σ(weight_i / 100)²

    Returns:
        HHI in 0..1; exactly 1.0 for a single-industry fund;
        HHI_UNAVAILABLE (-1) when no industry breakdown exists.
        Callers must branch on the sentinel rather than clamp it.
    """
    weights = [safe_num(i.percent) for i in holdings.industries]
    if not weights:
        return HHI_UNAVAILABLE
    if len(weights) == 1:
        return 1.0

    return sum((w / 100) ** 2 for w in weights)


def concentration_level(top_holdings_ratio: float) -> str:
    """
    Describe how concentrated the top positions are.

    Args:
        top_holdings_ratio: Top-N weight in percent

    Returns:
        String label
    """
    if top_holdings_ratio > 50:
        return "High concentration"
    elif top_holdings_ratio > 30:
        return "Moderate concentration"
    else:
        return "Diversified"


def analyze_holdings(
    holdings: FundHoldings,
    n: int = DEFAULT_TOP_N
) -> Dict[str, Union[float, int, str]]:
    """
    Summarize a fund's disclosed holdings.

    Returns:
        Dictionary with top_holdings_ratio, hhi, stock_count, top_stock
        and concentration_level
    """
    top_ratio = top_n_concentration(holdings, n)
    ranked = sorted(holdings.top_stocks, key=lambda s: safe_num(s.percent), reverse=True)

    return {
        'top_holdings_ratio': top_ratio,
        'hhi': industry_hhi(holdings),
        'stock_count': len(holdings.top_stocks),
        'top_stock': ranked[0].name if ranked else '-',
        'concentration_level': concentration_level(top_ratio)
    }
