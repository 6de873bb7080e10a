# backend/portfolio_analytics/services/analytics/benchmark.py
"""
Benchmark comparison.

Answers "what if every rupee had gone into the index instead?":
1. Each purchase (outflow) buys index units at that day's index level,
   each sale (inflow) redeems units at that day's level
2. The accumulated units are valued at end_date
3. XIRR is solved for the real flows + terminal portfolio value and for
   the same flows + terminal benchmark value
4. outperformance = portfolio XIRR - benchmark XIRR

Benchmark selection:
    An explicit index id wins; otherwise the portfolio's dominant category
    (by current value) is mapped through the category → index table.

Formulas:
    units_benchmark = Σ (-CF_i / P_index(d_i))
    V_benchmark     = units_benchmark × P_index(end_date)
    outperformance  = XIRR_portfolio - XIRR_benchmark
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from decimal import Decimal

from portfolio_analytics.models import PricePoint
from portfolio_analytics.services.analytics.returns import calculate_xirr
from portfolio_analytics.services.analytics.types import (
    BenchmarkComparison,
    BenchmarkVerdict,
    CashFlow,
)
from portfolio_analytics.services.constants import (
    DEFAULT_BENCHMARK_IN_LINE_TOLERANCE_PCT,
    DEFAULT_CATEGORY_BENCHMARKS,
    HUNDRED,
    ZERO,
)
from portfolio_analytics.services.exceptions import BenchmarkUnavailableError
from portfolio_analytics.services.valuation.price_history import PriceSeries
from portfolio_analytics.services.valuation.types import HoldingSnapshot

logger = logging.getLogger(__name__)


# =============================================================================
# BENCHMARK SELECTION
# =============================================================================

def dominant_category(snapshots: Sequence[HoldingSnapshot]) -> str | None:
    """
    Category holding the largest share of current value.

    Holdings without a category are ignored. Ties resolve alphabetically.
    """
    totals: dict[str, Decimal] = {}
    for snap in snapshots:
        if snap.category:
            totals[snap.category] = totals.get(snap.category, ZERO) + snap.current_value

    if not totals:
        return None

    return min(totals, key=lambda category: (-totals[category], category))


def select_benchmark(
        snapshots: Sequence[HoldingSnapshot],
        index_id: str | None = None,
        category_benchmarks: Mapping[str, str] | None = None,
) -> str:
    """
    Choose the benchmark index for a portfolio.

    Args:
        snapshots: Current holdings (used for the dominant category)
        index_id: Explicit index; returned unchanged if given
        category_benchmarks: Category → index table
                             (defaults to DEFAULT_CATEGORY_BENCHMARKS)

    Raises:
        BenchmarkUnavailableError: If no category can be mapped to an index
    """
    if index_id:
        return index_id

    mapping = DEFAULT_CATEGORY_BENCHMARKS if category_benchmarks is None else category_benchmarks
    category = dominant_category(snapshots)
    if category is None:
        raise BenchmarkUnavailableError(None, "portfolio has no categorised holdings")

    mapped = mapping.get(category)
    if mapped is None:
        raise BenchmarkUnavailableError(None, f"no benchmark mapped for category '{category}'")

    return mapped


# =============================================================================
# COMPARISON
# =============================================================================

def compare_to_benchmark(
        cash_flows: Sequence[CashFlow],
        portfolio_end_value: Decimal,
        benchmark_series: PriceSeries | Sequence[PricePoint],
        end_date: date,
        index_id: str,
        in_line_tolerance_pct: Decimal = DEFAULT_BENCHMARK_IN_LINE_TOLERANCE_PCT,
) -> BenchmarkComparison:
    """
    Compare the portfolio's XIRR with the same flows invested in an index.

    Args:
        cash_flows: Portfolio transaction flows (purchases negative,
                    sales positive), all dated on or before end_date
        portfolio_end_value: Portfolio value on end_date
        benchmark_series: Index levels
        end_date: Date both terminal values are taken on
        index_id: Index identifier (for messages)
        in_line_tolerance_pct: |outperformance| in percentage points
                               reported as IN_LINE

    Returns:
        BenchmarkComparison with available=True

    Raises:
        BenchmarkUnavailableError: Empty series, or no index level on or
                                   before a flow date or end_date
        InsufficientCashFlowError / XIRRNonConvergenceError: From the solver
    """
    series = benchmark_series if isinstance(benchmark_series, PriceSeries) else PriceSeries(benchmark_series)
    if not series:
        raise BenchmarkUnavailableError(index_id, "no price history")

    flows = sorted(cash_flows, key=lambda cf: cf.date)
    if not flows:
        raise BenchmarkUnavailableError(index_id, "portfolio has no cash flows")

    units = ZERO
    for cf in flows:
        level = series.as_of(cf.date)
        if level is None:
            raise BenchmarkUnavailableError(index_id, f"no index level on or before {cf.date}")
        # Outflows (negative) buy units, inflows (positive) redeem them
        units += -cf.amount / level.price

    end_level = series.as_of(end_date)
    if end_level is None:
        raise BenchmarkUnavailableError(index_id, f"no index level on or before {end_date}")

    benchmark_end_value = units * end_level.price

    portfolio_xirr = calculate_xirr([*flows, CashFlow(date=end_date, amount=portfolio_end_value)])
    benchmark_xirr = calculate_xirr([*flows, CashFlow(date=end_date, amount=benchmark_end_value)])
    outperformance = portfolio_xirr - benchmark_xirr

    verdict = _verdict(outperformance, in_line_tolerance_pct)
    explanation = _explain(index_id, portfolio_xirr, benchmark_xirr, outperformance, verdict)

    logger.debug(
        f"Benchmark {index_id}: portfolio={portfolio_xirr} benchmark={benchmark_xirr} "
        f"verdict={verdict.value}"
    )

    return BenchmarkComparison(
        available=True,
        index_id=index_id,
        portfolio_xirr=portfolio_xirr,
        benchmark_xirr=benchmark_xirr,
        outperformance=outperformance,
        verdict=verdict,
        explanation=explanation,
        portfolio_end_value=portfolio_end_value,
        benchmark_end_value=benchmark_end_value,
        benchmark_units=units,
        end_date=end_date,
    )


def _verdict(outperformance: Decimal, tolerance_pct: Decimal) -> BenchmarkVerdict:
    difference_pct = outperformance * HUNDRED
    if difference_pct > tolerance_pct:
        return BenchmarkVerdict.OUTPERFORMING
    if difference_pct < -tolerance_pct:
        return BenchmarkVerdict.UNDERPERFORMING
    return BenchmarkVerdict.IN_LINE


def _explain(
        index_id: str,
        portfolio_xirr: Decimal,
        benchmark_xirr: Decimal,
        outperformance: Decimal,
        verdict: BenchmarkVerdict,
) -> str:
    portfolio_pct = portfolio_xirr * HUNDRED
    benchmark_pct = benchmark_xirr * HUNDRED
    gap = abs(outperformance * HUNDRED)
    head = f"Portfolio XIRR {portfolio_pct:.2f}% vs {index_id} {benchmark_pct:.2f}%"

    if verdict == BenchmarkVerdict.OUTPERFORMING:
        return f"{head}: outperforming by {gap:.2f} percentage points"
    if verdict == BenchmarkVerdict.UNDERPERFORMING:
        return f"{head}: underperforming by {gap:.2f} percentage points"
    return f"{head}: in line with the benchmark"
