"""
Technical signal utilities.
Moving averages, RSI and trend direction over accumulated NAV.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, List

import numpy as np

from analysis.guardrails import clean_prices


RSI_PERIOD = 14
RSI_NEUTRAL = 50.0


@dataclass(frozen=True)
class TechnicalSignal:
    ma5: float
    ma20: float
    ma60: float
    rsi: float
    direction: str  # 'bullish' | 'bearish' | 'neutral'

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def moving_average(prices: List[float], n: int) -> float:
    """Simple average of the last n prices, 0 when fewer than n exist."""
    arr = clean_prices(prices)
    if arr.size < n or n <= 0:
        return 0.0
    return float(arr[-n:].mean())


def rsi(prices: List[float], period: int = RSI_PERIOD) -> float:
    """
    Relative strength index over the last `period` price changes.

    Returns:
        RSI rounded to 2 decimals; 50 when there are not enough prices,
        100 when the window has no losses
    """
    arr = clean_prices(prices)
    if arr.size < period + 1:
        return RSI_NEUTRAL

    changes = np.diff(arr[-(period + 1):])
    avg_gain = changes[changes > 0].sum() / period
    avg_loss = -changes[changes < 0].sum() / period
    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return round(float(100 - 100 / (1 + rs)), 2)


def trend_direction(price: float, ma5: float, ma20: float, ma60: float, rsi_value: float) -> str:
    """
    Count bullish vs bearish conditions; 4 or more on one side decides.

    Conditions: price vs each MA, MA5 vs MA20, MA20 vs MA60, RSI above 60 / below 40.
    A moving average of 0 (not enough data) is ignored.
    """
    bull = 0
    bear = 0

    for ma in (ma5, ma20, ma60):
        if ma > 0:
            if price > ma:
                bull += 1
            else:
                bear += 1

    for short, long in ((ma5, ma20), (ma20, ma60)):
        if short > 0 and long > 0:
            if short > long:
                bull += 1
            else:
                bear += 1

    if rsi_value > 60:
        bull += 1
    elif rsi_value < 40:
        bear += 1

    if bull >= 4:
        return 'bullish'
    if bear >= 4:
        return 'bearish'
    return 'neutral'


def technical_signals(prices: List[float]) -> TechnicalSignal:
    """Compute MA5/MA20/MA60, RSI(14) and trend direction from accumulated NAV."""
    arr = clean_prices(prices)
    price = float(arr[-1]) if arr.size else 0.0

    ma5 = round(moving_average(prices, 5), 4)
    ma20 = round(moving_average(prices, 20), 4)
    ma60 = round(moving_average(prices, 60), 4)
    rsi_value = rsi(prices)

    return TechnicalSignal(
        ma5=ma5,
        ma20=ma20,
        ma60=ma60,
        rsi=rsi_value,
        direction=trend_direction(price, ma5, ma20, ma60, rsi_value),
    )
