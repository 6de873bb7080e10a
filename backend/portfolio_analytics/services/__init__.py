# backend/portfolio_analytics/services/__init__.py
"""
Service layer for portfolio analytics.

This package contains the analytics engine. Services:
- Have NO knowledge of transport (no HTTP status codes, no request objects)
- Raise domain-specific exceptions
- Receive their data source as a constructor argument
- Never perform I/O themselves

Subpackages are imported directly; this module exports nothing so that
low-level helpers (utils.date_utils) can import constants and exceptions
without loading the whole engine.

Usage:
    from portfolio_analytics.services.analytics import AnalyticsService
    from portfolio_analytics.services.portfolio_store import InMemoryPortfolioStore
    from portfolio_analytics.services.exceptions import (
        PortfolioNotFoundError,
        XIRRNonConvergenceError,
    )

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Business constants and default tables
    ├── protocols.py                 # PortfolioDataSource interface
    ├── portfolio_store.py           # In-memory PortfolioDataSource
    ├── ledger/                      # Transaction ledger
    │   ├── types.py                 # Ledger, HoldingTimeline, CashFlow
    │   └── reader.py                # LedgerReader
    ├── valuation/                   # Valuation engine
    │   ├── types.py                 # Valuation data types
    │   ├── price_history.py         # Sparse as-of price series
    │   └── engine.py                # ValuationEngine
    └── analytics/                   # Analytics engine
        ├── service.py               # Main analytics orchestrator
        ├── types.py                 # Analytics data types
        ├── returns.py               # XIRR, rolling returns
        ├── growth.py                # Growth curve, drawdowns
        ├── benchmark.py             # Benchmark comparison
        ├── risk.py                  # Risk & concentration
        └── allocation.py            # Allocation breakdowns
"""
