"""
Guardrails for the analysis engine - numeric coercion and input validation.

Degenerate numbers (NaN, Infinity) are coerced, never raised on.
Structurally broken inputs (missing columns, unordered dates) are raised on,
since no statistic computed from them can be trusted.
"""

import math
import warnings
from dataclasses import fields, is_dataclass
from typing import Any, List, Tuple

import numpy as np
import pandas as pd


MIN_POINTS_FOR_STATISTICS = 10

NAV_COLUMNS = ('date', 'unit_nav', 'acc_nav')
BENCHMARK_COLUMNS = ('date', 'close')


class DataQualityError(Exception):
    """Raised when an input frame violates the data contract."""
    pass


class DataQualityWarning(UserWarning):
    """Data is usable but too short for most statistics."""
    pass


def safe_num(value: Any, fallback: float = 0.0) -> float:
    """
    Coerce a value to a finite float.

    None, NaN, +/-Infinity and non-numeric values all map to fallback.
    """
    if value is None or isinstance(value, bool):
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    return number if math.isfinite(number) else fallback


def clean_prices(prices: List[float]) -> np.ndarray:
    """
    Prices as a float array with non-finite entries dropped.

    A corrupt point is skipped, never replaced, so it cannot act as a real price.
    """
    arr = np.asarray(prices, dtype=float)
    if arr.size == 0:
        return arr
    return arr[np.isfinite(arr)]


def clean_dated_prices(prices: List[float], dates: List[Any]) -> Tuple[np.ndarray, List[Any]]:
    """Drop non-finite prices together with their dates so the pairs stay aligned."""
    arr = np.asarray(prices, dtype=float)
    if arr.size == 0:
        return arr, []
    keep = np.isfinite(arr)
    return arr[keep], [d for d, ok in zip(dates, keep) if ok]


def validate_nav_frame(nav_df: pd.DataFrame) -> pd.DataFrame:
    """
    Validate and normalize a NAV DataFrame.

    Args:
        nav_df: DataFrame with columns date, unit_nav, acc_nav

    Returns:
        Copy with `date` as datetime.date, sorted ascending

    Raises:
        DataQualityError: If columns are missing, dates unparsable or duplicated
    """
    return _validate_frame(nav_df, NAV_COLUMNS, 'NAV')


def validate_benchmark_frame(benchmark_df: pd.DataFrame) -> pd.DataFrame:
    """Validate and normalize a benchmark DataFrame (columns date, close)."""
    return _validate_frame(benchmark_df, BENCHMARK_COLUMNS, 'benchmark')


def _validate_frame(df: pd.DataFrame, required: tuple, label: str) -> pd.DataFrame:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise DataQualityError(f"{label} data missing columns: {missing}")

    frame = df.loc[:, list(required)].copy()
    if frame.empty:
        return frame

    try:
        frame['date'] = pd.to_datetime(frame['date']).dt.date
    except (ValueError, TypeError) as e:
        raise DataQualityError(f"{label} data has unparsable dates: {e}")

    frame = frame.sort_values('date').reset_index(drop=True)
    if frame['date'].duplicated().any():
        dupes = frame.loc[frame['date'].duplicated(), 'date'].tolist()
        raise DataQualityError(f"{label} data has duplicate dates: {dupes[:5]}")

    if len(frame) < MIN_POINTS_FOR_STATISTICS:
        warnings.warn(
            f"{label} data has only {len(frame)} points, "
            f"statistics need at least {MIN_POINTS_FOR_STATISTICS}.",
            DataQualityWarning
        )

    return frame


def find_non_finite(record: Any, path: str = '') -> List[str]:
    """
    Walk a dataclass record and list paths holding NaN/Infinity.

    None is acceptable (unavailable metric) and is not reported.
    """
    problems: List[str] = []

    if is_dataclass(record):
        for f in fields(record):
            child = getattr(record, f.name)
            problems.extend(find_non_finite(child, f"{path}.{f.name}" if path else f.name))
    elif isinstance(record, (list, tuple)):
        for i, child in enumerate(record):
            problems.extend(find_non_finite(child, f"{path}[{i}]"))
    elif isinstance(record, float) and not math.isfinite(record):
        problems.append(path)

    return problems


def round_or_zero(value: float, digits: int) -> float:
    """Round a value, mapping non-finite results to 0."""
    return round(safe_num(value), digits)
