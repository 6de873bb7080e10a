# backend/portfolio_analytics/schemas/__init__.py
"""
Pydantic schemas for input validation and JSON responses.

This package contains all Pydantic schemas organized by domain:
- ledger: Raw transaction, holding metadata and price rows
- analytics: Analytics responses (time series, XIRR, benchmark, risk, snapshot)
- mappers: Internal dataclass -> response schema conversion
  (import directly: portfolio_analytics.schemas.mappers)

Usage:
    from portfolio_analytics.schemas import TransactionRow, PortfolioSnapshotResponse
    from portfolio_analytics.schemas.mappers import map_snapshot
"""

from portfolio_analytics.schemas.analytics import (
    # Time series
    GrowthPointResponse,
    DrawdownPointResponse,
    RollingReturnPointResponse,
    DrawdownPeriodResponse,
    # Returns & benchmark
    XIRRResponse,
    BenchmarkComparisonResponse,
    # Risk
    RiskReturnEntryResponse,
    ConcentrationRiskResponse,
    DiversificationCheckResponse,
    RiskMetricsResponse,
    # Snapshot
    AllocationSliceResponse,
    TopHoldingResponse,
    AllocationResponse,
    PortfolioSummaryResponse,
    PerformanceSummaryResponse,
    PortfolioSnapshotResponse,
)
from portfolio_analytics.schemas.ledger import (
    TransactionRow,
    HoldingMetadataRow,
    PricePointRow,
)

__all__ = [
    # Ledger input
    "TransactionRow",
    "HoldingMetadataRow",
    "PricePointRow",
    # Time series
    "GrowthPointResponse",
    "DrawdownPointResponse",
    "RollingReturnPointResponse",
    "DrawdownPeriodResponse",
    # Returns & benchmark
    "XIRRResponse",
    "BenchmarkComparisonResponse",
    # Risk
    "RiskReturnEntryResponse",
    "ConcentrationRiskResponse",
    "DiversificationCheckResponse",
    "RiskMetricsResponse",
    # Snapshot
    "AllocationSliceResponse",
    "TopHoldingResponse",
    "AllocationResponse",
    "PortfolioSummaryResponse",
    "PerformanceSummaryResponse",
    "PortfolioSnapshotResponse",
]
