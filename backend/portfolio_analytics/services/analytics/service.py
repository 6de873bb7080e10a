# backend/portfolio_analytics/services/analytics/service.py
"""
Analytics Service orchestrator.

This is the main entry point for the analytics engine. For each request it:
1. Fetches the portfolio's transactions, metadata and prices from the
   PortfolioDataSource
2. Reads them into an immutable Ledger and ValuationEngine
3. Delegates to the specialized calculators
4. Converts non-fatal calculator failures into warnings / unavailable
   sections

Nothing is cached: every call reads fresh data from the data source.

Architecture:
    AnalyticsService
        ├── uses → PortfolioDataSource (transactions, metadata, prices)
        ├── uses → LedgerReader → Ledger
        ├── uses → ValuationEngine (as-of valuation)
        ├── uses → returns.py (XIRR, rolling returns)
        ├── uses → growth.py (growth curve, drawdowns)
        ├── uses → benchmark.py (benchmark selection and comparison)
        ├── uses → risk.py (RiskClassifier)
        └── uses → allocation.py (snapshot breakdowns)

Error Policy:
    Hard errors (raised): unknown portfolio, portfolio without transactions,
    invalid arguments, and XIRR errors from compute_xirr().
    Soft errors (reported): missing prices, unavailable benchmark, failed
    portfolio XIRR inside the snapshot.

Usage:
    from portfolio_analytics.services.analytics import AnalyticsService

    service = AnalyticsService(store)

    curve = service.compute_growth_curve(1, resolution="monthly")
    rolling = service.compute_rolling_returns(1, window_months=12)
    bench = service.compare_to_benchmark(1)
    snapshot = service.get_portfolio_snapshot(1)
"""

import contextvars
import logging
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from portfolio_analytics.config import settings
from portfolio_analytics.services.analytics.allocation import calculate_allocation
from portfolio_analytics.services.analytics.benchmark import compare_to_benchmark, select_benchmark
from portfolio_analytics.services.analytics.growth import (
    build_growth_curve,
    calculate_drawdown_periods,
    calculate_drawdown_series,
    calculate_max_drawdown,
)
from portfolio_analytics.services.analytics.returns import calculate_rolling_returns, solve_xirr
from portfolio_analytics.services.analytics.risk import RiskClassifier
from portfolio_analytics.services.analytics.types import (
    BenchmarkComparison,
    CashFlow,
    DrawdownPoint,
    GrowthPoint,
    PerformanceSummary,
    PortfolioSnapshot,
    PortfolioSummary,
    RiskMetrics,
    RollingReturnPoint,
    XIRRResult,
)
from portfolio_analytics.services.constants import (
    DEFAULT_CATEGORY_BENCHMARKS,
    HUNDRED,
    PERCENTAGE_PRECISION,
    SNAPSHOT_ROLLING_WINDOW_MONTHS,
    SNAPSHOT_TOP_DRAWDOWNS,
    ZERO,
)
from portfolio_analytics.services.exceptions import (
    AnalyticsError,
    BenchmarkUnavailableError,
    EmptyLedgerError,
    ValidationError,
)
from portfolio_analytics.services.ledger.reader import LedgerReader
from portfolio_analytics.services.ledger.types import Ledger
from portfolio_analytics.services.protocols import PortfolioDataSource
from portfolio_analytics.services.valuation.engine import ValuationEngine
from portfolio_analytics.services.valuation.types import HoldingSnapshot
from portfolio_analytics.utils.context import request_scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PortfolioContext:
    """Everything read for one request; immutable and shared by worker threads."""
    portfolio_id: int | str
    ledger: Ledger
    engine: ValuationEngine


class AnalyticsService:
    """
    Main orchestrator for portfolio analytics.

    Attributes:
        _data_source: Where portfolio data comes from
        _reader: LedgerReader used for every request
        _risk_classifier: RiskClassifier configured from settings
        _category_benchmarks: Category → benchmark index table
        _max_workers: Snapshot fan-out threads (1 = sequential)
    """

    def __init__(
            self,
            data_source: PortfolioDataSource,
            ledger_reader: LedgerReader | None = None,
            risk_classifier: RiskClassifier | None = None,
            category_benchmarks: Mapping[str, str] | None = None,
            max_workers: int | None = None,
    ):
        """
        Initialize the Analytics Service.

        Args:
            data_source: PortfolioDataSource implementation
            ledger_reader: If None, creates a default LedgerReader
            risk_classifier: If None, creates one from settings thresholds
            category_benchmarks: If None, uses DEFAULT_CATEGORY_BENCHMARKS
            max_workers: If None, uses settings.analytics_max_workers
        """
        self._data_source = data_source
        self._reader = ledger_reader or LedgerReader()
        self._risk_classifier = risk_classifier or RiskClassifier(
            concentration_threshold_pct=settings.concentration_threshold_pct,
            over_diversification_holdings=settings.over_diversification_holdings,
            small_holding_weight_pct=settings.small_holding_weight_pct,
        )
        self._category_benchmarks = dict(
            DEFAULT_CATEGORY_BENCHMARKS if category_benchmarks is None else category_benchmarks
        )
        self._max_workers = max_workers or settings.analytics_max_workers

        logger.info("AnalyticsService initialized")

    # =========================================================================
    # PUBLIC API - TIME SERIES
    # =========================================================================

    def compute_growth_curve(
            self,
            portfolio_id: int | str,
            start_date: date | None = None,
            end_date: date | None = None,
            resolution: str | None = None,
    ) -> list[GrowthPoint]:
        """
        Portfolio value over time.

        Args:
            portfolio_id: Portfolio to analyze
            start_date: First point (default: first transaction date)
            end_date: Last point (default: today)
            resolution: "daily", "weekly" or "monthly"
                        (default: settings.default_resolution)

        Returns:
            List of GrowthPoint, first at start_date and last at end_date

        Raises:
            PortfolioNotFoundError: Unknown portfolio
            EmptyLedgerError: Portfolio has no transactions
            ValidationError: end_date before start_date, bad resolution
        """
        with request_scope(portfolio_id=portfolio_id):
            logger.info(f"Computing growth curve for portfolio {portfolio_id}")
            ctx = self._load(portfolio_id)
            return self._growth_curve(ctx, start_date, end_date, resolution)

    def compute_drawdown_series(
            self,
            portfolio_id: int | str,
            start_date: date | None = None,
            end_date: date | None = None,
            resolution: str | None = None,
    ) -> list[DrawdownPoint]:
        """Drawdown from the running peak at every growth curve point."""
        with request_scope(portfolio_id=portfolio_id):
            logger.info(f"Computing drawdown series for portfolio {portfolio_id}")
            ctx = self._load(portfolio_id)
            return calculate_drawdown_series(self._growth_curve(ctx, start_date, end_date, resolution))

    def compute_rolling_returns(
            self,
            portfolio_id: int | str,
            window_months: int,
            start_date: date | None = None,
            end_date: date | None = None,
            resolution: str | None = None,
    ) -> list[RollingReturnPoint]:
        """
        Trailing window_months return at every growth curve point.

        Raises:
            ValidationError: If window_months < 1
        """
        if window_months < 1:
            raise ValidationError(
                f"window_months must be at least 1 (got {window_months})",
                field="window_months",
            )

        with request_scope(portfolio_id=portfolio_id):
            logger.info(f"Computing {window_months}-month rolling returns for portfolio {portfolio_id}")
            ctx = self._load(portfolio_id)
            curve = self._growth_curve(ctx, start_date, end_date, resolution)
            return calculate_rolling_returns(curve, window_months)

    # =========================================================================
    # PUBLIC API - RETURNS
    # =========================================================================

    def compute_xirr(self, cash_flows: Sequence[CashFlow]) -> XIRRResult:
        """
        XIRR of arbitrary cash flows.

        Raises:
            InsufficientCashFlowError: Fewer than 2 flows, or no sign change
            XIRRNonConvergenceError: No root in the supported range
        """
        with request_scope():
            return solve_xirr(cash_flows)

    def compute_portfolio_xirr(
            self,
            portfolio_id: int | str,
            end_date: date | None = None,
    ) -> XIRRResult:
        """
        XIRR of the portfolio's transactions plus its value on end_date.

        Raises:
            InsufficientCashFlowError / XIRRNonConvergenceError: From the solver
        """
        with request_scope(portfolio_id=portfolio_id):
            logger.info(f"Computing XIRR for portfolio {portfolio_id}")
            ctx = self._load(portfolio_id)
            return self._portfolio_xirr(ctx, end_date or date.today())

    def compare_to_benchmark(
            self,
            portfolio_id: int | str,
            index_id: str | None = None,
            end_date: date | None = None,
    ) -> BenchmarkComparison:
        """
        Portfolio XIRR vs the same cash flows invested in a benchmark index.

        Args:
            portfolio_id: Portfolio to analyze
            index_id: Benchmark index (default: mapped from the dominant category)
            end_date: Comparison date (default: today)

        Returns:
            BenchmarkComparison; available=False with a reason when the
            comparison cannot be performed
        """
        with request_scope(portfolio_id=portfolio_id):
            logger.info(f"Comparing portfolio {portfolio_id} to benchmark {index_id or '(auto)'}")
            ctx = self._load(portfolio_id)
            as_of = end_date or date.today()
            return self._benchmark(ctx, as_of, index_id, ctx.engine.holding_snapshots(as_of))

    # =========================================================================
    # PUBLIC API - RISK & SNAPSHOT
    # =========================================================================

    def compute_risk_metrics(
            self,
            portfolio_id: int | str,
            as_of: date | None = None,
    ) -> RiskMetrics:
        """Risk-return quadrants, concentration and diversification."""
        with request_scope(portfolio_id=portfolio_id):
            logger.info(f"Computing risk metrics for portfolio {portfolio_id}")
            ctx = self._load(portfolio_id)
            as_of = as_of or date.today()
            return self._risk_classifier.classify(ctx.engine.holding_snapshots(as_of), as_of)

    def get_portfolio_snapshot(
            self,
            portfolio_id: int | str,
            as_of: date | None = None,
    ) -> PortfolioSnapshot:
        """
        Summary, allocation, performance and risk in one call.

        XIRR, benchmark comparison, the growth curve (with its rolling
        returns and drawdowns) and risk metrics run concurrently over the
        same immutable ledger snapshot. A failure in one of them only
        blanks that section and adds a warning.
        """
        with request_scope(portfolio_id=portfolio_id):
            logger.info(f"Building snapshot for portfolio {portfolio_id}")
            ctx = self._load(portfolio_id)
            return self._snapshot(ctx, as_of or date.today())

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    def _load(self, portfolio_id: int | str) -> _PortfolioContext:
        """
        Read a portfolio into an immutable context.

        Raises:
            PortfolioNotFoundError: From the data source
            EmptyLedgerError: If the portfolio has no transactions
        """
        transactions = self._data_source.get_transactions(portfolio_id)
        ledger = self._reader.read(transactions)
        if ledger.is_empty:
            raise EmptyLedgerError(portfolio_id=portfolio_id)

        engine = ValuationEngine(
            ledger=ledger,
            metadata=self._data_source.get_holding_metadata(portfolio_id),
            price_history=self._data_source.get_price_history(portfolio_id),
        )
        return _PortfolioContext(portfolio_id=portfolio_id, ledger=ledger, engine=engine)

    def _snapshot(self, ctx: _PortfolioContext, as_of: date) -> PortfolioSnapshot:
        warnings: list[str] = list(ctx.ledger.warnings)

        snapshots = ctx.engine.holding_snapshots(as_of)
        for snap in snapshots:
            if not snap.is_priced:
                warnings.append(f"No price available for {snap.name} on or before {as_of}")

        tasks: dict[str, Callable[[], Any]] = {
            "xirr": lambda: self._portfolio_xirr(ctx, as_of),
            "benchmark": lambda: self._benchmark(ctx, as_of, None, snapshots),
            "growth": lambda: self._performance_series(ctx, as_of),
            "risk": lambda: self._risk_classifier.classify(snapshots, as_of),
        }
        results, errors = self._run_tasks(tasks)

        xirr_result: XIRRResult | None = results.get("xirr")
        if xirr_result is None:
            warnings.append(f"XIRR not available: {errors.get('xirr')}")

        benchmark: BenchmarkComparison | None = results.get("benchmark")
        if benchmark is None:
            warnings.append(f"Benchmark comparison failed: {errors.get('benchmark')}")
        elif not benchmark.available:
            warnings.append(f"Benchmark comparison not available: {benchmark.reason}")

        series: dict[str, Any] = results.get("growth") or {}
        if "growth" in errors:
            warnings.append(f"Growth curve not available: {errors['growth']}")

        risk: RiskMetrics | None = results.get("risk")
        if risk is None:
            warnings.append(f"Risk metrics failed: {errors.get('risk')}")
        else:
            warnings.extend(w for w in risk.warnings if w not in warnings)

        xirr = xirr_result.rate if xirr_result else None
        return PortfolioSnapshot(
            portfolio_id=ctx.portfolio_id,
            as_of=as_of,
            summary=self._summary(snapshots, xirr),
            allocation=calculate_allocation(snapshots, settings.top_holdings_count),
            performance=PerformanceSummary(portfolio_xirr=xirr, benchmark=benchmark, **series),
            risk=risk,
            warnings=warnings,
        )

    def _performance_series(self, ctx: _PortfolioContext, as_of: date) -> dict[str, Any]:
        """Growth curve from the first transaction to as_of and the series derived from it."""
        # Empty when as_of precedes the first transaction
        curve = build_growth_curve(ctx.engine, ctx.ledger.first_date, as_of, settings.default_resolution)
        drawdowns = calculate_drawdown_series(curve)
        return {
            "growth_curve": curve,
            "rolling_returns": calculate_rolling_returns(curve, SNAPSHOT_ROLLING_WINDOW_MONTHS),
            "drawdown_series": drawdowns,
            "max_drawdown_pct": calculate_max_drawdown(drawdowns) if drawdowns else None,
            "drawdown_periods": calculate_drawdown_periods(curve, top_n=SNAPSHOT_TOP_DRAWDOWNS),
        }

    def _growth_curve(
            self,
            ctx: _PortfolioContext,
            start_date: date | None,
            end_date: date | None,
            resolution: str | None,
    ) -> list[GrowthPoint]:
        start = start_date or ctx.ledger.first_date
        end = end_date or date.today()
        if end < start:
            raise ValidationError(
                f"end_date {end} is before start_date {start}",
                field="end_date",
            )
        return build_growth_curve(ctx.engine, start, end, resolution or settings.default_resolution)

    def _portfolio_xirr(self, ctx: _PortfolioContext, end_date: date) -> XIRRResult:
        flows = ctx.ledger.cash_flows(end_date)
        end_value = ctx.engine.portfolio_value_at(end_date).total_value
        return solve_xirr([*flows, CashFlow(date=end_date, amount=end_value)])

    def _benchmark(
            self,
            ctx: _PortfolioContext,
            end_date: date,
            index_id: str | None,
            snapshots: Sequence[HoldingSnapshot],
    ) -> BenchmarkComparison:
        chosen: str | None = index_id
        try:
            chosen = select_benchmark(snapshots, index_id, self._category_benchmarks)
            return compare_to_benchmark(
                cash_flows=ctx.ledger.cash_flows(end_date),
                portfolio_end_value=ctx.engine.portfolio_value_at(end_date).total_value,
                benchmark_series=self._data_source.get_benchmark_history(chosen),
                end_date=end_date,
                index_id=chosen,
                in_line_tolerance_pct=settings.benchmark_in_line_tolerance_pct,
            )
        except BenchmarkUnavailableError as e:
            logger.warning(f"Benchmark unavailable for portfolio {ctx.portfolio_id}: {e}")
            return BenchmarkComparison.unavailable(e.reason, index_id=e.index_id or chosen)
        except AnalyticsError as e:
            logger.warning(f"Benchmark XIRR failed for portfolio {ctx.portfolio_id}: {e}")
            return BenchmarkComparison.unavailable(str(e), index_id=chosen)

    def _run_tasks(
            self,
            tasks: dict[str, Callable[[], Any]],
    ) -> tuple[dict[str, Any], dict[str, str]]:
        """
        Run independent tasks, sequentially or on a thread pool.

        Each task runs in a copy of the caller's context so log records keep
        the request's correlation ID. AnalyticsError failures are collected
        per task; anything else propagates.
        """
        results: dict[str, Any] = {}
        errors: dict[str, str] = {}

        def collect(name: str, call: Callable[[], Any]) -> None:
            try:
                results[name] = call()
            except AnalyticsError as e:
                logger.warning(f"Snapshot section '{name}' failed: {e}")
                errors[name] = str(e)

        if self._max_workers <= 1:
            for name, task in tasks.items():
                collect(name, task)
            return results, errors

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(tasks))) as executor:
            futures = {
                name: executor.submit(contextvars.copy_context().run, task)
                for name, task in tasks.items()
            }
            for name, future in futures.items():
                collect(name, future.result)

        return results, errors

    @staticmethod
    def _summary(snapshots: Sequence[HoldingSnapshot], xirr: Decimal | None) -> PortfolioSummary:
        total_value = sum((s.current_value for s in snapshots), ZERO)
        invested = sum((s.total_invested for s in snapshots), ZERO)
        returns = total_value - invested
        returns_pct = None
        if invested > ZERO:
            returns_pct = (returns / invested * HUNDRED).quantize(PERCENTAGE_PRECISION, rounding=ROUND_HALF_UP)

        return PortfolioSummary(
            total_value=total_value,
            invested=invested,
            returns=returns,
            returns_pct=returns_pct,
            xirr=xirr,
            holdings_count=len(snapshots),
        )
