# backend/portfolio_analytics/services/valuation/__init__.py
"""
Valuation Engine Package.

This package values holdings and portfolios on arbitrary dates:
- As-of price lookups (value_at)
- Units held on a date (units_held_as_of)
- Portfolio totals (portfolio_value_at)
- Position snapshots (holding_snapshots)

Architecture:
    valuation/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Internal data classes
    ├── price_history.py         # Sparse as-of price series
    └── engine.py                # ValuationEngine

Data Flow:
    Ledger + NAV history + metadata → PriceSeries per holding
    Ledger + PriceSeries → PortfolioValuation / HoldingSnapshot
"""

from portfolio_analytics.services.valuation.engine import ValuationEngine
from portfolio_analytics.services.valuation.price_history import PriceSeries
from portfolio_analytics.services.valuation.types import (
    HoldingSnapshot,
    HoldingValue,
    PortfolioValuation,
    PriceLookup,
)

__all__ = [
    "ValuationEngine",
    "PriceSeries",
    "HoldingSnapshot",
    "HoldingValue",
    "PortfolioValuation",
    "PriceLookup",
]
