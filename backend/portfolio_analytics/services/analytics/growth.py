# backend/portfolio_analytics/services/analytics/growth.py
"""
Growth curve and drawdown calculations.

- Growth Curve: Portfolio value at every resampling boundary between two
  dates, plus exactly the start and end dates
- Drawdown Series: Percent decline from the running peak at every point
- Max Drawdown / Drawdown Periods: Worst decline and peak-trough-recovery
  episodes over the curve

Formulas:
    Drawdown_i = (V_i - max(V_0..V_i)) / max(V_0..V_i) × 100
        (0 while the running peak is 0)

All functions are stateless and operate on immutable inputs.
"""

import logging
from collections.abc import Sequence
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from portfolio_analytics.services.analytics.types import (
    DrawdownPeriod,
    DrawdownPoint,
    GrowthPoint,
)
from portfolio_analytics.services.constants import HUNDRED, PERCENTAGE_PRECISION, ZERO
from portfolio_analytics.services.valuation.engine import ValuationEngine
from portfolio_analytics.utils.date_utils import generate_dates

logger = logging.getLogger(__name__)


# =============================================================================
# GROWTH CURVE
# =============================================================================

def build_growth_curve(
        engine: ValuationEngine,
        start_date: date,
        end_date: date,
        resolution: str = "monthly",
) -> list[GrowthPoint]:
    """
    Portfolio value over time.

    One point per resolution boundary (month ends, Fridays or days)
    strictly between start_date and end_date, plus one point exactly at
    each end. Every period gets a point, including ones with no price
    change.

    Args:
        engine: ValuationEngine over the portfolio
        start_date: First point (usually the first transaction date)
        end_date: Last point (usually today)
        resolution: "daily", "weekly" or "monthly"

    Returns:
        List of GrowthPoint sorted by date (empty if end_date < start_date)

    Raises:
        InvalidIntervalError: If resolution is not recognised
    """
    dates = generate_dates(start_date, end_date, resolution)

    curve: list[GrowthPoint] = []
    unpriced_points = 0
    for d in dates:
        valuation = engine.portfolio_value_at(d)
        if valuation.unpriced_holdings:
            unpriced_points += 1
        curve.append(GrowthPoint(date=d, value=valuation.total_value))

    if unpriced_points:
        logger.debug(f"{unpriced_points} of {len(dates)} growth points had unpriced holdings")

    return curve


# =============================================================================
# DRAWDOWN
# =============================================================================

def calculate_drawdown_series(curve: Sequence[GrowthPoint]) -> list[DrawdownPoint]:
    """
    Percent decline from the running peak at every curve point.

    Values are <= 0 and exactly 0 at each new peak. Points whose running
    peak is still zero (nothing invested yet) get 0.

    Args:
        curve: Growth curve (any order)

    Returns:
        List of DrawdownPoint, one per curve point, sorted by date
    """
    series: list[DrawdownPoint] = []
    running_max = ZERO

    for point in sorted(curve, key=lambda p: p.date):
        if point.value > running_max:
            running_max = point.value

        if running_max <= ZERO:
            drawdown = ZERO
        else:
            drawdown = ((point.value - running_max) / running_max * HUNDRED).quantize(
                PERCENTAGE_PRECISION, rounding=ROUND_HALF_UP
            )

        series.append(DrawdownPoint(date=point.date, drawdown_pct=drawdown))

    return series


def calculate_max_drawdown(series: Sequence[DrawdownPoint]) -> Decimal:
    """
    Worst point of a drawdown series.

    Returns:
        Most negative drawdown_pct, or 0 for an empty / never-declining series
    """
    return min((p.drawdown_pct for p in series), default=ZERO)


def calculate_drawdown_periods(
        curve: Sequence[GrowthPoint],
        top_n: int | None = None,
) -> list[DrawdownPeriod]:
    """
    Peak-to-trough-to-recovery episodes over a growth curve.

    An episode starts at the last peak before the value drops below it and
    ends on the first point that gets back to (or above) that peak. An
    episode still below its peak at the end of the curve is ongoing
    (end_date None).

    Points before the portfolio has any value are ignored.

    Args:
        curve: Growth curve (any order)
        top_n: Keep only the N deepest episodes (all if None)

    Returns:
        Episodes sorted by depth, worst first
    """
    valued = [p for p in sorted(curve, key=lambda p: p.date) if p.value > ZERO]
    if len(valued) < 2:
        return []

    peak_value = valued[0].value
    peak_date = valued[0].date

    drawdown_start: date | None = None
    trough_date: date | None = None
    trough_value: Decimal | None = None

    periods: list[DrawdownPeriod] = []

    for point in valued:
        if point.value >= peak_value:
            # New peak - close any open episode
            if drawdown_start is not None and trough_value is not None:
                periods.append(DrawdownPeriod(
                    start_date=drawdown_start,
                    trough_date=trough_date,
                    end_date=point.date,
                    depth_pct=_depth_pct(trough_value, peak_value),
                    duration_days=(point.date - drawdown_start).days,
                    recovery_days=(point.date - trough_date).days,
                ))

            peak_value = point.value
            peak_date = point.date
            drawdown_start = None
            trough_date = None
            trough_value = None
        elif drawdown_start is None:
            drawdown_start = peak_date
            trough_date = point.date
            trough_value = point.value
        elif point.value < trough_value:
            trough_date = point.date
            trough_value = point.value

    # Ongoing episode (not yet recovered)
    if drawdown_start is not None and trough_value is not None:
        periods.append(DrawdownPeriod(
            start_date=drawdown_start,
            trough_date=trough_date,
            end_date=None,
            depth_pct=_depth_pct(trough_value, peak_value),
            duration_days=(valued[-1].date - drawdown_start).days,
            recovery_days=None,
        ))

    periods.sort(key=lambda p: p.depth_pct)
    return periods[:top_n] if top_n is not None else periods


def _depth_pct(trough_value: Decimal, peak_value: Decimal) -> Decimal:
    return ((trough_value - peak_value) / peak_value * HUNDRED).quantize(
        PERCENTAGE_PRECISION, rounding=ROUND_HALF_UP
    )
