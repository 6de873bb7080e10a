# backend/portfolio_analytics/services/analytics/returns.py
"""
Return calculation functions for the Analytics Service.

This module contains pure functions for calculating return metrics:
- Simple Return: Basic (End - Start) / Start
- Extended IRR (XIRR): Money-weighted return with exact dates
  (Newton-Raphson with bisection fallback)
- Rolling Returns: Trailing N-month return at every growth curve point

All functions are stateless. No external dependencies (scipy, numpy) - pure Python only.

Formulas:
    Simple Return = (End - Start) / Start

    XIRR solves: Σ CF_i × (1 + r)^(-t_i) = 0
        t_i = years from the earliest flow (whole anniversary years
              plus remaining days / 365.25)

    Rolling Return_i = (V_i / V_anchor - 1) × 100
        anchor = latest point on or before date_i - N months

Precision Note (Decimal vs Float):
    The XIRR solver operates entirely in float (fractional exponents in
    every iteration). The final rate is converted back to Decimal with
    8 decimal places, which is far below any meaningful difference in an
    annual return. Everything else stays in Decimal.
"""

import logging
import math
from bisect import bisect_right
from collections.abc import Sequence
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from portfolio_analytics.services.analytics.types import (
    CashFlow,
    GrowthPoint,
    RollingReturnPoint,
    XIRRResult,
)
from portfolio_analytics.services.constants import (
    HUNDRED,
    PERCENTAGE_PRECISION,
    XIRR_BISECTION_MAX_ITERATIONS,
    XIRR_INITIAL_GUESS,
    XIRR_LOWER_BOUND,
    XIRR_MAX_ITERATIONS,
    XIRR_MIN_DERIVATIVE,
    XIRR_NPV_TOLERANCE,
    XIRR_PRECISION,
    XIRR_RATE_TOLERANCE,
    XIRR_UPPER_BOUND,
    ZERO,
)
from portfolio_analytics.services.exceptions import (
    InsufficientCashFlowError,
    ValidationError,
    XIRRNonConvergenceError,
)
from portfolio_analytics.utils.date_utils import add_months, month_end, year_fraction

logger = logging.getLogger(__name__)


# =============================================================================
# SIMPLE RETURN
# =============================================================================

def calculate_simple_return(
        start_value: Decimal,
        end_value: Decimal,
) -> Decimal | None:
    """
    Calculate simple return (holding period return) - NO cash flow adjustment.

    Formula: (End - Start) / Start

    Args:
        start_value: Value (or amount invested) at start of period
        end_value: Value at end of period

    Returns:
        Return as decimal (e.g., 0.15 = 15%), or None if start_value is 0
    """
    if start_value == ZERO:
        return None

    return (end_value - start_value) / start_value


# =============================================================================
# EXTENDED INTERNAL RATE OF RETURN (XIRR)
# =============================================================================

def _npv_and_derivative(rate: float, flows: list[tuple[float, float]]) -> tuple[float, float]:
    """
    NPV and dNPV/dr at rate.

    d/dr [CF × (1+r)^(-t)] = -t × CF × (1+r)^(-t-1)
    """
    base = 1.0 + rate
    npv = 0.0
    derivative = 0.0
    for years, amount in flows:
        discount = base ** years
        npv += amount / discount
        derivative -= years * amount / (discount * base)
    return npv, derivative


def _npv(rate: float, flows: list[tuple[float, float]]) -> float:
    return _npv_and_derivative(rate, flows)[0]


def _newton(
        flows: list[tuple[float, float]],
        initial_guess: float,
        max_iterations: int,
) -> tuple[float, int] | None:
    """
    Newton-Raphson from initial_guess.

    Returns:
        (rate, iterations) on convergence, None if the iteration diverged
        (derivative near zero, rate outside the search bounds, overflow)
        or ran out of iterations
    """
    rate = initial_guess

    for iteration in range(1, max_iterations + 1):
        try:
            npv, derivative = _npv_and_derivative(rate, flows)
        except (OverflowError, ZeroDivisionError):
            logger.debug(f"XIRR Newton overflow at rate={rate}")
            return None

        if abs(npv) < XIRR_NPV_TOLERANCE:
            return rate, iteration

        if abs(derivative) < XIRR_MIN_DERIVATIVE:
            logger.debug(f"XIRR Newton derivative vanished at rate={rate}")
            return None

        next_rate = rate - npv / derivative

        if not math.isfinite(next_rate) or not XIRR_LOWER_BOUND < next_rate < XIRR_UPPER_BOUND:
            logger.debug(f"XIRR Newton left the search range at iteration {iteration} (rate={next_rate})")
            return None

        if abs(next_rate - rate) < XIRR_RATE_TOLERANCE:
            return next_rate, iteration

        rate = next_rate

    logger.debug(f"XIRR Newton did not converge after {max_iterations} iterations")
    return None


def _bisect(flows: list[tuple[float, float]]) -> tuple[float, int]:
    """
    Bisection over [XIRR_LOWER_BOUND, XIRR_UPPER_BOUND].

    Raises:
        XIRRNonConvergenceError: If NPV has the same sign at both bounds
    """
    low, high = XIRR_LOWER_BOUND, XIRR_UPPER_BOUND
    try:
        npv_low = _npv(low, flows)
        npv_high = _npv(high, flows)
    except (OverflowError, ZeroDivisionError):
        raise XIRRNonConvergenceError(message="XIRR NPV overflowed at the search bounds")

    if npv_low == 0:
        return low, 0
    if npv_high == 0:
        return high, 0
    if (npv_low > 0) == (npv_high > 0):
        raise XIRRNonConvergenceError(
            message=(
                f"XIRR has no root between {XIRR_LOWER_BOUND:.0%} and "
                f"{XIRR_UPPER_BOUND:.0%} (NPV does not change sign)"
            )
        )

    mid = (low + high) / 2
    for iteration in range(1, XIRR_BISECTION_MAX_ITERATIONS + 1):
        mid = (low + high) / 2
        npv_mid = _npv(mid, flows)

        if abs(npv_mid) < XIRR_NPV_TOLERANCE or (high - low) / 2 < XIRR_RATE_TOLERANCE:
            return mid, iteration

        if (npv_mid > 0) == (npv_low > 0):
            low, npv_low = mid, npv_mid
        else:
            high = mid

    return mid, XIRR_BISECTION_MAX_ITERATIONS


def solve_xirr(
        cash_flows: Sequence[CashFlow],
        initial_guess: float = XIRR_INITIAL_GUESS,
        max_iterations: int = XIRR_MAX_ITERATIONS,
) -> XIRRResult:
    """
    Calculate Extended Internal Rate of Return (XIRR) with solver details.

    XIRR is the money-weighted return that accounts for the timing
    and size of cash flows. It's the discount rate that makes the
    NPV of all cash flows equal to zero.

    Newton-Raphson runs first; if it diverges, bisection over the
    supported range [-99%, +1000%] takes over.

    Args:
        cash_flows: List of CashFlow (date, amount)
                   - Negative = money put into the investment
                   - Positive = money taken out (sale proceeds, terminal value)
        initial_guess: Newton seed rate
        max_iterations: Newton iteration budget

    Returns:
        XIRRResult with the rate as decimal (e.g., 0.15 = 15%)

    Raises:
        InsufficientCashFlowError: Fewer than 2 flows, or no sign change
        XIRRNonConvergenceError: No root inside the supported range

    Example:
        cash_flows = [
            CashFlow(date(2023, 1, 1), Decimal("-10000")),  # Investment
            CashFlow(date(2024, 1, 1), Decimal("15000")),   # Terminal value
        ]
        solve_xirr(cash_flows).rate  # Decimal("0.50000000")
    """
    if len(cash_flows) < 2:
        raise InsufficientCashFlowError(len(cash_flows))

    sorted_flows = sorted(cash_flows, key=lambda cf: cf.date)
    base_date = sorted_flows[0].date

    flows = [
        (year_fraction(base_date, cf.date), float(cf.amount))
        for cf in sorted_flows
    ]

    has_positive = any(amount > 0 for _, amount in flows)
    has_negative = any(amount < 0 for _, amount in flows)
    if not (has_positive and has_negative):
        raise InsufficientCashFlowError(
            len(cash_flows),
            message="XIRR requires both negative (invested) and positive (returned) cash flows",
        )

    method = "newton"
    solved = _newton(flows, initial_guess, max_iterations)
    if solved is None:
        logger.debug("XIRR falling back to bisection")
        method = "bisection"
        solved = _bisect(flows)

    rate, iterations = solved
    return XIRRResult(
        rate=Decimal(str(rate)).quantize(XIRR_PRECISION, rounding=ROUND_HALF_UP),
        method=method,
        iterations=iterations,
        cash_flow_count=len(sorted_flows),
        start_date=base_date,
        end_date=sorted_flows[-1].date,
    )


def calculate_xirr(cash_flows: Sequence[CashFlow]) -> Decimal:
    """
    XIRR rate only; see solve_xirr().

    Returns:
        Annualized rate as decimal, quantized to 8 places
    """
    return solve_xirr(cash_flows).rate


# =============================================================================
# ROLLING RETURNS
# =============================================================================

def _anchor_target(d: date, window_months: int) -> date:
    """d shifted back window_months; month ends map to month ends."""
    target = add_months(d, -window_months)
    if d == month_end(d):
        target = month_end(target)
    return target


def calculate_rolling_returns(
        curve: Sequence[GrowthPoint],
        window_months: int,
) -> list[RollingReturnPoint]:
    """
    Trailing window return at every growth curve point.

    For each point, the anchor is the latest point dated on or before
    date - window_months. Points without an anchor, or whose anchor
    value is zero, are omitted.

    Args:
        curve: Growth curve (any order)
        window_months: Look-back window in months (>= 1)

    Returns:
        List of RollingReturnPoint (percent, 4 decimal places)

    Raises:
        ValidationError: If window_months < 1
    """
    if window_months < 1:
        raise ValidationError(
            f"window_months must be at least 1 (got {window_months})",
            field="window_months",
        )

    points = sorted(curve, key=lambda p: p.date)
    dates = [p.date for p in points]
    results: list[RollingReturnPoint] = []

    for point in points:
        idx = bisect_right(dates, _anchor_target(point.date, window_months)) - 1
        if idx < 0:
            continue

        anchor = points[idx]
        if anchor.value == ZERO:
            continue

        return_pct = ((point.value / anchor.value) - 1) * HUNDRED
        results.append(RollingReturnPoint(
            date=point.date,
            return_pct=return_pct.quantize(PERCENTAGE_PRECISION, rounding=ROUND_HALF_UP),
        ))

    return results
