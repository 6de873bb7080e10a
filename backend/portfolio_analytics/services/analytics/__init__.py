# backend/portfolio_analytics/services/analytics/__init__.py
"""
Analytics Service Package.

This package provides portfolio analytics capabilities:
- Growth curve, drawdown series and drawdown episodes
- Money-weighted return (XIRR) and rolling returns
- Benchmark comparison (XIRR vs the same flows invested in an index)
- Risk-return quadrants, concentration and diversification checks
- Portfolio snapshot (summary, allocation, performance, risk)

Architecture:
    analytics/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Data classes for results
    ├── returns.py               # XIRR solver, rolling returns
    ├── growth.py                # Growth curve, drawdowns
    ├── benchmark.py             # Benchmark selection and comparison
    ├── risk.py                  # Risk & concentration classifier
    ├── allocation.py            # Snapshot allocation breakdowns
    └── service.py               # AnalyticsService (orchestrator)

Usage:
    from portfolio_analytics.services.analytics import AnalyticsService

    service = AnalyticsService(store)
    snapshot = service.get_portfolio_snapshot(portfolio_id=1)

    print(f"XIRR: {snapshot.summary.xirr}")
    print(f"Verdict: {snapshot.performance.benchmark.verdict}")

Data Flow:
    PortfolioDataSource
        ↓
    LedgerReader → Ledger → ValuationEngine
        ↓
    ┌─────────────────────────────────────────┐
    │           AnalyticsService              │
    │  ┌─────────────┐  ┌─────────────────┐   │
    │  │ returns     │  │ growth          │   │
    │  │ • XIRR      │  │ • Growth curve  │   │
    │  │ • Rolling   │  │ • Drawdown      │   │
    │  └─────────────┘  └─────────────────┘   │
    │  ┌─────────────┐  ┌─────────────────┐   │
    │  │ benchmark   │  │ risk            │   │
    │  │ • XIRR gap  │  │ • Quadrants     │   │
    │  │ • Verdict   │  │ • Concentration │   │
    │  └─────────────┘  └─────────────────┘   │
    └─────────────────────────────────────────┘
        ↓
    PortfolioSnapshot
"""

from portfolio_analytics.services.analytics.allocation import calculate_allocation
from portfolio_analytics.services.analytics.benchmark import (
    compare_to_benchmark,
    dominant_category,
    select_benchmark,
)
from portfolio_analytics.services.analytics.growth import (
    build_growth_curve,
    calculate_drawdown_periods,
    calculate_drawdown_series,
    calculate_max_drawdown,
)
# Calculators (for testing / direct usage)
from portfolio_analytics.services.analytics.returns import (
    calculate_rolling_returns,
    calculate_simple_return,
    calculate_xirr,
    solve_xirr,
)
from portfolio_analytics.services.analytics.risk import (
    RiskClassifier,
    assess_concentration,
    assess_diversification,
    calculate_holding_return,
    calculate_weights,
    classify_quadrant,
    resolve_risk_score,
)
# Main service
from portfolio_analytics.services.analytics.service import AnalyticsService
# Types
from portfolio_analytics.services.analytics.types import (
    Allocation,
    AllocationSlice,
    BenchmarkComparison,
    BenchmarkVerdict,
    CashFlow,
    ConcentrationRisk,
    ConcentrationSeverity,
    DiversificationCheck,
    DrawdownPeriod,
    DrawdownPoint,
    GrowthPoint,
    PerformanceSummary,
    PortfolioSnapshot,
    PortfolioSummary,
    Quadrant,
    RiskMetrics,
    RiskReturnEntry,
    RollingReturnPoint,
    TopHolding,
    XIRRResult,
)

__all__ = [
    # Main service
    "AnalyticsService",

    # Types
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

    # Calculators
    "RiskClassifier",

    # Individual functions (for testing)
    "calculate_simple_return",
    "calculate_xirr",
    "solve_xirr",
    "calculate_rolling_returns",
    "build_growth_curve",
    "calculate_drawdown_series",
    "calculate_max_drawdown",
    "calculate_drawdown_periods",
    "compare_to_benchmark",
    "dominant_category",
    "select_benchmark",
    "calculate_weights",
    "calculate_holding_return",
    "resolve_risk_score",
    "classify_quadrant",
    "assess_concentration",
    "assess_diversification",
    "calculate_allocation",
]
