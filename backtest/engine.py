"""
Scoring backtest engine.

Scores each fund at a series of simulated dates using only the history
available on that date, pairs the score with what the fund returned
afterwards, and aggregates the pairs into correlation and quintile statistics.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from typing import List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from analysis.calculations.returns import DAYS_PER_YEAR
from analysis.contracts import nav_lists
from analysis.guardrails import DataQualityError
from backtest.historical_metrics import metrics_at_date, build_record_at_date, forward_returns
from backtest.records import (
    FundHistory,
    BacktestSample,
    BacktestReport,
    BacktestSummary,
    horizon_label,
)
from backtest.statistics import aggregate
from scoring.fund_scorer import score_fund
from utils.config import Settings


logger = logging.getLogger(__name__)

DEFAULT_STEP_MONTHS = 3
DEFAULT_FORWARD_YEARS = (1,)
DEFAULT_MIN_HISTORY_YEARS = 1.0


class BacktestError(Exception):
    """Raised when backtest inputs are structurally invalid."""
    pass


def evaluation_dates(
    first_data_date: date,
    start: date,
    end: date,
    step_months: int = DEFAULT_STEP_MONTHS,
    min_history_years: float = DEFAULT_MIN_HISTORY_YEARS
) -> List[date]:
    """
    Simulated evaluation dates from max(first data date + history, start) to end.

    Dates are stepped by whole calendar months from the effective start.

    Raises:
        BacktestError: If start is after end or step_months is not positive
    """
    if start > end:
        raise BacktestError(f"Backtest start {start} is after end {end}")
    if step_months <= 0:
        raise BacktestError(f"step_months must be positive, got {step_months}")

    earliest = first_data_date + timedelta(days=math.ceil(min_history_years * DAYS_PER_YEAR))
    effective_start = max(start, earliest)

    dates = []
    k = 0
    current = effective_start
    while current <= end:
        dates.append(current)
        k += 1
        current = effective_start + relativedelta(months=step_months * k)
    return dates


def backtest_at_date(
    history: FundHistory,
    prices: List[float],
    dates: List[date],
    eval_date: date,
    forward_years: Sequence[float]
) -> Optional[BacktestSample]:
    """
    Score one fund at one simulated date.

    Returns:
        BacktestSample, or None when no requested horizon has a realized return
    """
    return_year1, return_year3, breakdown = metrics_at_date(prices, dates, eval_date)
    record = build_record_at_date(history, eval_date, return_year1, return_year3, breakdown)
    result = score_fund(record)

    forwards = forward_returns(prices, dates, eval_date, list(forward_years))
    if not any(f.is_valid for f in forwards):
        return None

    return BacktestSample(
        code=history.code,
        name=history.name,
        fund_type=history.fund_type,
        eval_date=eval_date,
        score=result.market_score,
        return_year1=return_year1,
        return_year3=return_year3,
        risk_by_period=breakdown,
        items=result.market_items,
        forward_returns=tuple(forwards),
    )


def backtest_fund(
    history: FundHistory,
    start: date,
    end: date,
    step_months: int = DEFAULT_STEP_MONTHS,
    forward_years: Sequence[float] = DEFAULT_FORWARD_YEARS,
    min_history_years: float = DEFAULT_MIN_HISTORY_YEARS
) -> List[BacktestSample]:
    """
    Backtest one fund across simulated dates.

    Args:
        history: NAV history and current meta
        start: Requested first evaluation date
        end: Last evaluation date
        step_months: Months between evaluation dates
        forward_years: Horizons (years) of realized returns to compare against
        min_history_years: History required before the first evaluation

    Returns:
        Samples in date order; dates without any realized horizon are dropped

    Raises:
        BacktestError: On empty history, empty horizons, inverted dates or bad step
        DataQualityError: If NAV dates are not strictly increasing
    """
    if not history.navs:
        raise BacktestError(f"No NAV history for fund {history.code}")
    if not forward_years:
        raise BacktestError("forward_years must not be empty")

    prices, dates = nav_lists(list(history.navs))
    if any(b <= a for a, b in zip(dates, dates[1:])):
        raise DataQualityError(f"NAV dates for fund {history.code} are not strictly increasing")

    eval_dates = evaluation_dates(dates[0], start, end, step_months, min_history_years)
    logger.info(f"Backtesting {history.code}: {len(dates)} NAV points, {len(eval_dates)} evaluation dates")

    samples = []
    for eval_date in eval_dates:
        sample = backtest_at_date(history, prices, dates, eval_date, forward_years)
        if sample is not None:
            samples.append(sample)

    dropped = len(eval_dates) - len(samples)
    if dropped:
        logger.info(f"{history.code}: dropped {dropped} dates without forward data")
    logger.info(f"{history.code}: kept {len(samples)} samples")
    return samples


def build_report(samples: Sequence[BacktestSample], forward_years: Sequence[float]) -> BacktestReport:
    """Aggregate samples from any number of funds into a report."""
    periods = [horizon_label(y) for y in forward_years]
    correlation, quintiles = aggregate(samples, periods)

    eval_dates = sorted(s.eval_date for s in samples)
    date_range = f"{eval_dates[0].isoformat()} ~ {eval_dates[-1].isoformat()}" if eval_dates else ''

    return BacktestReport(
        samples=tuple(samples),
        correlation=correlation,
        quintiles=quintiles,
        summary=BacktestSummary(
            total_samples=len(samples),
            date_range=date_range,
            fund_count=len({s.code for s in samples}),
        ),
    )


def backtest_batch(
    histories: Sequence[FundHistory],
    start: date,
    end: date,
    step_months: int = DEFAULT_STEP_MONTHS,
    forward_years: Sequence[float] = DEFAULT_FORWARD_YEARS,
    min_history_years: float = DEFAULT_MIN_HISTORY_YEARS,
    max_workers: int = 1
) -> BacktestReport:
    """
    Backtest many funds and aggregate all samples.

    A fund whose input is structurally invalid is logged and skipped.
    With max_workers > 1 the per-fund loops run in a thread pool; samples
    keep input fund order either way, and aggregation runs after all funds finish.

    Raises:
        BacktestError: If start is after end, step_months is not positive
            or forward_years is empty
    """
    if start > end:
        raise BacktestError(f"Backtest start {start} is after end {end}")
    if step_months <= 0:
        raise BacktestError(f"step_months must be positive, got {step_months}")
    if not forward_years:
        raise BacktestError("forward_years must not be empty")

    def run_one(history: FundHistory) -> List[BacktestSample]:
        try:
            return backtest_fund(history, start, end, step_months, forward_years, min_history_years)
        except (BacktestError, DataQualityError) as e:
            logger.warning(f"Skipping fund {history.code}: {e}")
            return []

    if max_workers > 1 and len(histories) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(run_one, h) for h in histories]
            per_fund = [future.result() for future in futures]
    else:
        per_fund = [run_one(h) for h in histories]

    samples = [s for fund_samples in per_fund for s in fund_samples]
    report = build_report(samples, forward_years)

    logger.info(
        f"Backtest complete: {report.summary.total_samples} samples from "
        f"{report.summary.fund_count}/{len(histories)} funds"
    )
    return report


def run_configured_backtest(
    histories: Sequence[FundHistory],
    start: date,
    end: date,
    settings: Settings
) -> BacktestReport:
    """backtest_batch with step, horizons, history and workers taken from settings."""
    return backtest_batch(
        histories,
        start,
        end,
        step_months=settings.backtest_step_months,
        forward_years=settings.backtest_forward_years,
        min_history_years=settings.backtest_min_history_years,
        max_workers=settings.backtest_max_workers,
    )
