"""
Drawdown calculation utilities.
Pure functions for maximum drawdown and the Calmar ratio.
"""

import math
import numpy as np
from typing import List

from analysis.guardrails import clean_prices


def max_drawdown(prices: List[float]) -> float:
    """
    Largest peak-to-trough decline as a percentage.

    Single forward pass over the running peak:
    drawdown_t = (peak_t - P_t) / peak_t

    Args:
        prices: Accumulated NAV values in chronological order

    Returns:
        Maximum drawdown percentage rounded to 2 decimals (33.33 = 33.33%),
        0 with fewer than 2 prices or a non-decreasing series
    """
    arr = clean_prices(prices)
    if arr.size < 2:
        return 0.0

    # Running peak up to each point
    running_max = np.maximum.accumulate(arr)
    with np.errstate(divide='ignore', invalid='ignore'):
        drawdowns = np.where(running_max > 0, (running_max - arr) / running_max, 0.0)

    # Deepest decline from any peak
    worst = float(drawdowns.max())
    if not math.isfinite(worst) or worst <= 0:
        return 0.0
    return round(worst * 100, 2)


def calmar_ratio(annualized_return: float, max_drawdown_pct: float) -> float:
    """
    Calmar ratio = annualized return / |max drawdown|.

    Both inputs are percentages. Returns 0 when the drawdown is 0
    or either input is not finite.
    """
    if annualized_return is None or max_drawdown_pct is None:
        return 0.0
    if not math.isfinite(annualized_return) or not math.isfinite(max_drawdown_pct):
        return 0.0
    if max_drawdown_pct == 0:
        return 0.0
    return round(annualized_return / abs(max_drawdown_pct), 2)
