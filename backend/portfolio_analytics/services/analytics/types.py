# backend/portfolio_analytics/services/analytics/types.py
"""
Data types for the Analytics Service.

This module defines the data structures used throughout the analytics
calculations. All types use Decimal for financial precision.

Percent convention: values named *_pct are percentages (12.5 = 12.5%).
XIRR rates are decimals (0.125 = 12.5% per year), as the solver returns them.

Architecture:
    - CashFlow: Money in/out of the portfolio (from the ledger package)
    - XIRRResult: Solver output
    - GrowthPoint / DrawdownPoint / RollingReturnPoint: Time series points
    - DrawdownPeriod: Details of a single drawdown episode
    - BenchmarkComparison: Portfolio vs index money-weighted return
    - RiskReturnEntry / ConcentrationRisk / DiversificationCheck / RiskMetrics
    - PortfolioSnapshot: Combined dashboard result
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from portfolio_analytics.services.ledger.types import CashFlow

__all__ = [
    "CashFlow",
    "XIRRResult",
    "GrowthPoint",
    "DrawdownPoint",
    "RollingReturnPoint",
    "DrawdownPeriod",
    "BenchmarkVerdict",
    "BenchmarkComparison",
    "Quadrant",
    "RiskReturnEntry",
    "ConcentrationSeverity",
    "ConcentrationRisk",
    "DiversificationCheck",
    "RiskMetrics",
    "AllocationSlice",
    "TopHolding",
    "Allocation",
    "PortfolioSummary",
    "PerformanceSummary",
    "PortfolioSnapshot",
]


# =============================================================================
# RETURNS
# =============================================================================

@dataclass(frozen=True)
class XIRRResult:
    """
    Output of the XIRR solver.

    Attributes:
        rate: Annualized money-weighted return as decimal (0.15 = 15%),
              quantized to 8 places
        method: "newton" or "bisection"
        iterations: Solver iterations used by the method that converged
        cash_flow_count: Number of flows solved over
        start_date: Earliest flow date
        end_date: Latest flow date
    """
    rate: Decimal
    method: str
    iterations: int
    cash_flow_count: int
    start_date: date
    end_date: date

    @property
    def rate_pct(self) -> Decimal:
        return self.rate * Decimal("100")


# =============================================================================
# TIME SERIES
# =============================================================================

@dataclass(frozen=True)
class GrowthPoint:
    """Portfolio value on a resampling date."""
    date: date
    value: Decimal


@dataclass(frozen=True)
class DrawdownPoint:
    """Decline from the running peak (percent, always <= 0)."""
    date: date
    drawdown_pct: Decimal


@dataclass(frozen=True)
class RollingReturnPoint:
    """Trailing-window return ending at date (percent)."""
    date: date
    return_pct: Decimal


@dataclass(frozen=True)
class DrawdownPeriod:
    """
    Details of a single drawdown episode.

    A drawdown is the decline from a peak to a trough before a new peak is reached.

    Attributes:
        start_date: When the drawdown began (peak date)
        trough_date: When the lowest point was reached
        end_date: When the drawdown ended (recovery date), None if ongoing
        depth_pct: Maximum percentage decline (negative, e.g. -15 = -15%)
        duration_days: Days from start to end (or to the last point if ongoing)
        recovery_days: Days from trough to recovery (None if ongoing)
    """
    start_date: date
    trough_date: date
    end_date: date | None
    depth_pct: Decimal
    duration_days: int
    recovery_days: int | None = None

    @property
    def is_recovered(self) -> bool:
        return self.end_date is not None


# =============================================================================
# BENCHMARK
# =============================================================================

class BenchmarkVerdict(str, Enum):
    OUTPERFORMING = "OUTPERFORMING"
    UNDERPERFORMING = "UNDERPERFORMING"
    IN_LINE = "IN_LINE"


@dataclass(frozen=True)
class BenchmarkComparison:
    """
    Portfolio XIRR against the XIRR of the same cash flows invested in an index.

    When available is False only index_id (if one was chosen) and reason
    are set.

    Attributes:
        available: False if the comparison could not be performed
        index_id: Benchmark index used
        portfolio_xirr: Portfolio money-weighted return (decimal)
        benchmark_xirr: Benchmark money-weighted return (decimal)
        outperformance: portfolio_xirr - benchmark_xirr (decimal)
        verdict: OUTPERFORMING / UNDERPERFORMING / IN_LINE
        explanation: Human readable summary
        portfolio_end_value: Terminal portfolio value used
        benchmark_end_value: Terminal value of the accumulated index units
        benchmark_units: Index units held at end_date
        end_date: Valuation date of both terminal values
        reason: Why the comparison is unavailable
    """
    available: bool
    index_id: str | None = None
    portfolio_xirr: Decimal | None = None
    benchmark_xirr: Decimal | None = None
    outperformance: Decimal | None = None
    verdict: BenchmarkVerdict | None = None
    explanation: str | None = None
    portfolio_end_value: Decimal | None = None
    benchmark_end_value: Decimal | None = None
    benchmark_units: Decimal | None = None
    end_date: date | None = None
    reason: str | None = None

    @classmethod
    def unavailable(cls, reason: str, index_id: str | None = None) -> "BenchmarkComparison":
        return cls(available=False, index_id=index_id, reason=reason)


# =============================================================================
# RISK
# =============================================================================

class Quadrant(str, Enum):
    HIGH_RETURN_LOW_RISK = "HighReturn-LowRisk"
    HIGH_RETURN_HIGH_RISK = "HighReturn-HighRisk"
    LOW_RETURN_LOW_RISK = "LowReturn-LowRisk"
    LOW_RETURN_HIGH_RISK = "LowReturn-HighRisk"


@dataclass(frozen=True)
class RiskReturnEntry:
    """One holding's position on the risk-return chart."""
    holding_id: str
    name: str
    return_pct: Decimal | None
    risk_score: Decimal
    weight_pct: Decimal
    quadrant: Quadrant | None


class ConcentrationSeverity(str, Enum):
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class ConcentrationRisk:
    """
    Single-holding concentration check.

    Attributes:
        has_risk: True if the largest weight exceeds threshold_pct
        severity: Based on the excess over the threshold
        max_weight_pct: Largest holding weight
        threshold_pct: Threshold used
        holding_id: Largest holding (None for an empty portfolio)
        holding_name: Display name of the largest holding
        explanation: Human readable summary
    """
    has_risk: bool
    severity: ConcentrationSeverity
    max_weight_pct: Decimal
    threshold_pct: Decimal
    holding_id: str | None
    holding_name: str | None
    explanation: str


@dataclass(frozen=True)
class DiversificationCheck:
    """Over-diversification check (many holdings, all of them small)."""
    is_over_diversified: bool
    total_holdings: int
    max_weight_pct: Decimal
    explanation: str


@dataclass
class RiskMetrics:
    """
    Combined risk output for a portfolio.

    Attributes:
        as_of: Valuation date
        entries: One RiskReturnEntry per held holding, largest weight first
        median_return_pct: Median return used for the quadrant split
        median_risk_score: Median risk score used for the quadrant split
        concentration: Concentration check
        diversification: Over-diversification check
        warnings: Data quality warnings (unpriced holdings, default risk scores)
    """
    as_of: date
    entries: list[RiskReturnEntry]
    median_return_pct: Decimal | None
    median_risk_score: Decimal | None
    concentration: ConcentrationRisk
    diversification: DiversificationCheck
    warnings: list[str] = field(default_factory=list)


# =============================================================================
# SNAPSHOT
# =============================================================================

@dataclass(frozen=True)
class AllocationSlice:
    """Value and weight of one asset type or category."""
    label: str
    value: Decimal
    weight_pct: Decimal


@dataclass(frozen=True)
class TopHolding:
    holding_id: str
    name: str
    value: Decimal
    weight_pct: Decimal


@dataclass
class Allocation:
    by_asset_type: list[AllocationSlice] = field(default_factory=list)
    by_category: list[AllocationSlice] = field(default_factory=list)
    top_holdings: list[TopHolding] = field(default_factory=list)


@dataclass
class PortfolioSummary:
    """
    Headline numbers.

    Attributes:
        total_value: Current value of held units
        invested: Cost basis of held units (average cost)
        returns: total_value - invested
        returns_pct: returns / invested × 100 (None if nothing invested)
        xirr: Portfolio XIRR as decimal (None if it could not be computed)
        holdings_count: Number of held holdings
    """
    total_value: Decimal
    invested: Decimal
    returns: Decimal
    returns_pct: Decimal | None
    xirr: Decimal | None
    holdings_count: int


@dataclass
class PerformanceSummary:
    """
    Returns and time series over the life of the portfolio.

    Attributes:
        portfolio_xirr: Portfolio XIRR as decimal (None if not computed)
        benchmark: Comparison with the selected index
        growth_curve: Value from the first transaction to as_of
        rolling_returns: Trailing 12-month returns along the growth curve
        drawdown_series: Decline from the running peak at every curve point
        max_drawdown_pct: Worst point of drawdown_series (None without a curve)
        drawdown_periods: Deepest peak-trough-recovery episodes, worst first
    """
    portfolio_xirr: Decimal | None
    benchmark: BenchmarkComparison | None
    growth_curve: list[GrowthPoint] = field(default_factory=list)
    rolling_returns: list[RollingReturnPoint] = field(default_factory=list)
    drawdown_series: list[DrawdownPoint] = field(default_factory=list)
    max_drawdown_pct: Decimal | None = None
    drawdown_periods: list[DrawdownPeriod] = field(default_factory=list)


@dataclass
class PortfolioSnapshot:
    """
    Everything a dashboard needs in one call.

    Any section that failed for a non-fatal reason is None (or unavailable)
    and the reason is listed in warnings.
    """
    portfolio_id: int | str
    as_of: date
    summary: PortfolioSummary
    allocation: Allocation
    performance: PerformanceSummary
    risk: RiskMetrics | None
    warnings: list[str] = field(default_factory=list)
