# backend/portfolio_analytics/schemas/analytics.py
"""
Pydantic schemas for analytics responses.

These schemas define the JSON shape of every analytics result:
- Time series (growth curve, drawdowns, rolling returns)
- XIRR and benchmark comparison
- Risk metrics (quadrants, concentration, diversification)
- Portfolio snapshot

Design decisions:
- All numeric values are serialized as STRINGS to preserve Decimal precision
- *_pct fields are percentages ("12.5" = 12.5%); XIRR rates are decimals
  ("0.125" = 12.5% per year)
- Null is returned when a metric cannot be calculated
- Mapping from internal dataclasses lives in schemas/mappers.py
"""

import datetime

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# TIME SERIES
# =============================================================================

class GrowthPointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime.date
    value: str = Field(..., description="Portfolio value on the date")


class DrawdownPointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime.date
    drawdown_pct: str = Field(..., description="Decline from running peak (e.g., '-12.5' = -12.5%)")


class RollingReturnPointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime.date
    return_pct: str = Field(..., description="Trailing window return in percent")


class DrawdownPeriodResponse(BaseModel):
    """Details of a single drawdown event."""

    model_config = ConfigDict(from_attributes=True)

    start_date: datetime.date = Field(..., description="When the drawdown began (peak date)")
    trough_date: datetime.date = Field(..., description="When the lowest point was reached")
    end_date: datetime.date | None = Field(
        None,
        description="When the drawdown ended (recovery date), null if ongoing"
    )
    depth_pct: str = Field(
        ...,
        description="Maximum decline in percent (e.g., '-15' = -15%)"
    )
    duration_days: int = Field(..., description="Days from start to end (or current)")
    recovery_days: int | None = Field(
        None,
        description="Days from trough to recovery (null if ongoing)"
    )


# =============================================================================
# RETURNS & BENCHMARK
# =============================================================================

class XIRRResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rate: str = Field(..., description="Annualized money-weighted return as decimal ('0.15' = 15%)")
    method: str = Field(..., description="Solver that converged: 'newton' or 'bisection'")
    iterations: int
    cash_flow_count: int
    start_date: datetime.date
    end_date: datetime.date


class BenchmarkComparisonResponse(BaseModel):
    """
    Benchmark comparison.

    When available is false only index_id (if chosen) and reason are set.
    """

    model_config = ConfigDict(from_attributes=True)

    available: bool
    index_id: str | None = None
    portfolio_xirr: str | None = Field(None, description="Portfolio XIRR as decimal")
    benchmark_xirr: str | None = Field(None, description="Benchmark XIRR as decimal")
    outperformance: str | None = Field(None, description="portfolio_xirr - benchmark_xirr")
    verdict: str | None = Field(None, description="OUTPERFORMING, UNDERPERFORMING or IN_LINE")
    explanation: str | None = None
    portfolio_end_value: str | None = None
    benchmark_end_value: str | None = None
    end_date: datetime.date | None = None
    reason: str | None = Field(None, description="Why the comparison is unavailable")


# =============================================================================
# RISK
# =============================================================================

class RiskReturnEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    holding_id: str
    name: str
    return_pct: str | None
    risk_score: str
    weight_pct: str
    quadrant: str | None = Field(
        None,
        description="HighReturn-LowRisk, HighReturn-HighRisk, LowReturn-LowRisk or LowReturn-HighRisk"
    )


class ConcentrationRiskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    has_risk: bool
    severity: str = Field(..., description="NONE, LOW, MEDIUM or HIGH")
    max_weight_pct: str
    threshold_pct: str
    holding_id: str | None
    holding_name: str | None
    explanation: str


class DiversificationCheckResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_over_diversified: bool
    total_holdings: int
    max_weight_pct: str
    explanation: str


class RiskMetricsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    as_of: datetime.date
    entries: list[RiskReturnEntryResponse]
    median_return_pct: str | None
    median_risk_score: str | None
    concentration: ConcentrationRiskResponse
    diversification: DiversificationCheckResponse
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# SNAPSHOT
# =============================================================================

class AllocationSliceResponse(BaseModel):
    label: str
    value: str
    weight_pct: str


class TopHoldingResponse(BaseModel):
    holding_id: str
    name: str
    value: str
    weight_pct: str


class AllocationResponse(BaseModel):
    by_asset_type: list[AllocationSliceResponse]
    by_category: list[AllocationSliceResponse]
    top_holdings: list[TopHoldingResponse]


class PortfolioSummaryResponse(BaseModel):
    total_value: str
    invested: str
    returns: str
    returns_pct: str | None
    xirr: str | None = Field(None, description="Portfolio XIRR as decimal")
    holdings_count: int


class PerformanceSummaryResponse(BaseModel):
    portfolio_xirr: str | None
    benchmark: BenchmarkComparisonResponse | None
    growth_curve: list[GrowthPointResponse] = Field(default_factory=list)
    rolling_returns: list[RollingReturnPointResponse] = Field(
        default_factory=list,
        description="Trailing 12-month returns along the growth curve",
    )
    drawdown_series: list[DrawdownPointResponse] = Field(default_factory=list)
    max_drawdown_pct: str | None = Field(None, description="Worst decline from a peak (e.g., '-12.5')")
    drawdown_periods: list[DrawdownPeriodResponse] = Field(
        default_factory=list,
        description="Deepest drawdown episodes, worst first",
    )


class PortfolioSnapshotResponse(BaseModel):
    """Complete dashboard payload."""

    portfolio_id: int | str
    as_of: datetime.date
    summary: PortfolioSummaryResponse
    allocation: AllocationResponse
    performance: PerformanceSummaryResponse
    risk: RiskMetricsResponse | None
    warnings: list[str] = Field(default_factory=list)
