# backend/portfolio_analytics/__init__.py
"""
Portfolio performance and risk analytics engine.

Computes growth curves, drawdowns, rolling returns, XIRR, benchmark
comparisons and concentration / risk-return classification for
portfolios of equities and mutual funds.

Packages:
- services: Ledger reader, valuation engine, analytics calculators
- schemas: Pydantic models for raw input rows and JSON responses
- utils: Logging, request context, calendar arithmetic
"""

__version__ = "0.1.0"
