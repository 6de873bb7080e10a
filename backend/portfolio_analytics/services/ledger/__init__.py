# backend/portfolio_analytics/services/ledger/__init__.py
"""
Transaction Ledger Package.

Reads a portfolio's BUY / SIP / SELL transactions into an immutable,
deduplicated, date-sorted Ledger with the investor's sign convention.

Architecture:
    ledger/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Ledger, HoldingTimeline, CashFlow
    └── reader.py                # LedgerReader

Usage:
    from portfolio_analytics.services.ledger import LedgerReader

    ledger = LedgerReader().read(transactions)
    units = ledger.timeline("119551").units_as_of(date(2024, 1, 1))
"""

from portfolio_analytics.services.ledger.reader import LedgerReader
from portfolio_analytics.services.ledger.types import (
    CashFlow,
    HoldingTimeline,
    Ledger,
    LedgerEntry,
    PositionSummary,
)

__all__ = [
    "LedgerReader",
    "CashFlow",
    "HoldingTimeline",
    "Ledger",
    "LedgerEntry",
    "PositionSummary",
]
