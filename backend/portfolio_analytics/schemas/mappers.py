# backend/portfolio_analytics/schemas/mappers.py
"""
Mapper functions (internal dataclasses -> Pydantic response schemas).

Usage:
    snapshot = service.get_portfolio_snapshot(1)
    payload = map_snapshot(snapshot).model_dump(mode="json")
"""

from collections.abc import Sequence
from decimal import Decimal

from portfolio_analytics.schemas.analytics import (
    AllocationResponse,
    AllocationSliceResponse,
    BenchmarkComparisonResponse,
    ConcentrationRiskResponse,
    DiversificationCheckResponse,
    DrawdownPeriodResponse,
    DrawdownPointResponse,
    GrowthPointResponse,
    PerformanceSummaryResponse,
    PortfolioSnapshotResponse,
    PortfolioSummaryResponse,
    RiskMetricsResponse,
    RiskReturnEntryResponse,
    RollingReturnPointResponse,
    TopHoldingResponse,
    XIRRResponse,
)
from portfolio_analytics.services.analytics.types import (
    Allocation,
    BenchmarkComparison,
    DrawdownPeriod,
    DrawdownPoint,
    GrowthPoint,
    PortfolioSnapshot,
    RiskMetrics,
    RollingReturnPoint,
    XIRRResult,
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def decimal_to_str(value: Decimal | None) -> str | None:
    """Convert Decimal to string for JSON response, preserving precision."""
    if value is None:
        return None
    if isinstance(value, int):
        value = Decimal(str(value))
    # normalize() drops trailing zeros; format "f" avoids exponent notation
    return format(value.normalize(), "f")


# =============================================================================
# TIME SERIES
# =============================================================================

def map_growth_curve(points: Sequence[GrowthPoint]) -> list[GrowthPointResponse]:
    return [GrowthPointResponse(date=p.date, value=decimal_to_str(p.value)) for p in points]


def map_drawdown_series(points: Sequence[DrawdownPoint]) -> list[DrawdownPointResponse]:
    return [
        DrawdownPointResponse(date=p.date, drawdown_pct=decimal_to_str(p.drawdown_pct))
        for p in points
    ]


def map_rolling_returns(points: Sequence[RollingReturnPoint]) -> list[RollingReturnPointResponse]:
    return [
        RollingReturnPointResponse(date=p.date, return_pct=decimal_to_str(p.return_pct))
        for p in points
    ]


def map_drawdown_period(dd: DrawdownPeriod) -> DrawdownPeriodResponse:
    return DrawdownPeriodResponse(
        start_date=dd.start_date,
        trough_date=dd.trough_date,
        end_date=dd.end_date,
        depth_pct=decimal_to_str(dd.depth_pct),
        duration_days=dd.duration_days,
        recovery_days=dd.recovery_days,
    )


# =============================================================================
# RETURNS & BENCHMARK
# =============================================================================

def map_xirr(result: XIRRResult) -> XIRRResponse:
    return XIRRResponse(
        rate=decimal_to_str(result.rate),
        method=result.method,
        iterations=result.iterations,
        cash_flow_count=result.cash_flow_count,
        start_date=result.start_date,
        end_date=result.end_date,
    )


def map_benchmark(comparison: BenchmarkComparison) -> BenchmarkComparisonResponse:
    return BenchmarkComparisonResponse(
        available=comparison.available,
        index_id=comparison.index_id,
        portfolio_xirr=decimal_to_str(comparison.portfolio_xirr),
        benchmark_xirr=decimal_to_str(comparison.benchmark_xirr),
        outperformance=decimal_to_str(comparison.outperformance),
        verdict=comparison.verdict.value if comparison.verdict else None,
        explanation=comparison.explanation,
        portfolio_end_value=decimal_to_str(comparison.portfolio_end_value),
        benchmark_end_value=decimal_to_str(comparison.benchmark_end_value),
        end_date=comparison.end_date,
        reason=comparison.reason,
    )


# =============================================================================
# RISK
# =============================================================================

def map_risk(risk: RiskMetrics) -> RiskMetricsResponse:
    concentration = risk.concentration
    diversification = risk.diversification
    return RiskMetricsResponse(
        as_of=risk.as_of,
        entries=[
            RiskReturnEntryResponse(
                holding_id=e.holding_id,
                name=e.name,
                return_pct=decimal_to_str(e.return_pct),
                risk_score=decimal_to_str(e.risk_score),
                weight_pct=decimal_to_str(e.weight_pct),
                quadrant=e.quadrant.value if e.quadrant else None,
            )
            for e in risk.entries
        ],
        median_return_pct=decimal_to_str(risk.median_return_pct),
        median_risk_score=decimal_to_str(risk.median_risk_score),
        concentration=ConcentrationRiskResponse(
            has_risk=concentration.has_risk,
            severity=concentration.severity.value,
            max_weight_pct=decimal_to_str(concentration.max_weight_pct),
            threshold_pct=decimal_to_str(concentration.threshold_pct),
            holding_id=concentration.holding_id,
            holding_name=concentration.holding_name,
            explanation=concentration.explanation,
        ),
        diversification=DiversificationCheckResponse(
            is_over_diversified=diversification.is_over_diversified,
            total_holdings=diversification.total_holdings,
            max_weight_pct=decimal_to_str(diversification.max_weight_pct),
            explanation=diversification.explanation,
        ),
        warnings=list(risk.warnings),
    )


# =============================================================================
# SNAPSHOT
# =============================================================================

def _map_allocation(allocation: Allocation) -> AllocationResponse:
    def slices(items):
        return [
            AllocationSliceResponse(
                label=s.label,
                value=decimal_to_str(s.value),
                weight_pct=decimal_to_str(s.weight_pct),
            )
            for s in items
        ]

    return AllocationResponse(
        by_asset_type=slices(allocation.by_asset_type),
        by_category=slices(allocation.by_category),
        top_holdings=[
            TopHoldingResponse(
                holding_id=h.holding_id,
                name=h.name,
                value=decimal_to_str(h.value),
                weight_pct=decimal_to_str(h.weight_pct),
            )
            for h in allocation.top_holdings
        ],
    )


def map_snapshot(snapshot: PortfolioSnapshot) -> PortfolioSnapshotResponse:
    summary = snapshot.summary
    performance = snapshot.performance
    return PortfolioSnapshotResponse(
        portfolio_id=snapshot.portfolio_id,
        as_of=snapshot.as_of,
        summary=PortfolioSummaryResponse(
            total_value=decimal_to_str(summary.total_value),
            invested=decimal_to_str(summary.invested),
            returns=decimal_to_str(summary.returns),
            returns_pct=decimal_to_str(summary.returns_pct),
            xirr=decimal_to_str(summary.xirr),
            holdings_count=summary.holdings_count,
        ),
        allocation=_map_allocation(snapshot.allocation),
        performance=PerformanceSummaryResponse(
            portfolio_xirr=decimal_to_str(performance.portfolio_xirr),
            benchmark=map_benchmark(performance.benchmark) if performance.benchmark else None,
            growth_curve=map_growth_curve(performance.growth_curve),
            rolling_returns=map_rolling_returns(performance.rolling_returns),
            drawdown_series=map_drawdown_series(performance.drawdown_series),
            max_drawdown_pct=decimal_to_str(performance.max_drawdown_pct),
            drawdown_periods=[map_drawdown_period(dd) for dd in performance.drawdown_periods],
        ),
        risk=map_risk(snapshot.risk) if snapshot.risk else None,
        warnings=list(snapshot.warnings),
    )
