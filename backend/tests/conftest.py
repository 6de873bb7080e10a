# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Transaction / metadata / price factories
- In-memory portfolio store fixtures
- Analytics service fixtures (sequential and threaded)
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date
from decimal import Decimal

import pytest

from portfolio_analytics.models import (
    AssetType,
    HoldingMetadata,
    PricePoint,
    Transaction,
    TransactionKind,
)
from portfolio_analytics.services.analytics.service import AnalyticsService
from portfolio_analytics.services.portfolio_store import InMemoryPortfolioStore
from portfolio_analytics.services.valuation.types import HoldingSnapshot
from portfolio_analytics.utils.context import clear_correlation_id, clear_request_context


# =============================================================================
# FACTORIES
# =============================================================================

def _make_txn(
        holding_id: str,
        day: date,
        units,
        price,
        kind: TransactionKind = TransactionKind.BUY,
        amount=None,
) -> Transaction:
    """Build a Transaction; amount defaults to units × price."""
    units = Decimal(str(units))
    price = Decimal(str(price))
    return Transaction(
        holding_id=holding_id,
        date=day,
        kind=kind,
        units=units,
        amount=Decimal(str(amount)) if amount is not None else units * price,
        price_per_unit=price,
    )


def _make_meta(
        holding_id: str,
        name: str | None = None,
        asset_type: AssetType = AssetType.MUTUAL_FUND,
        category: str | None = None,
        current_price=None,
        price_date: date | None = None,
        risk_score=None,
) -> HoldingMetadata:
    return HoldingMetadata(
        holding_id=holding_id,
        name=name or holding_id,
        asset_type=asset_type,
        category=category,
        current_price=Decimal(str(current_price)) if current_price is not None else None,
        price_date=price_date,
        risk_score=Decimal(str(risk_score)) if risk_score is not None else None,
    )


def _make_prices(*pairs) -> list[PricePoint]:
    """_make_prices((date(2024, 1, 1), "100"), ...)"""
    return [PricePoint(date=d, price=Decimal(str(p))) for d, p in pairs]


def _make_snapshot(
        holding_id: str,
        current_value,
        total_invested=None,
        category: str | None = None,
        asset_type: AssetType | None = AssetType.MUTUAL_FUND,
        risk_score=None,
        priced: bool = True,
) -> HoldingSnapshot:
    """HoldingSnapshot with 1 unit priced at current_value."""
    value = Decimal(str(current_value))
    invested = Decimal(str(total_invested)) if total_invested is not None else value
    return HoldingSnapshot(
        holding_id=holding_id,
        name=f"{holding_id} Fund",
        asset_type=asset_type,
        category=category,
        total_units=Decimal("1"),
        average_cost=invested,
        total_invested=invested,
        current_price=value if priced else None,
        price_date=date(2024, 1, 1) if priced else None,
        current_value=value if priced else Decimal("0"),
        risk_score=Decimal(str(risk_score)) if risk_score is not None else None,
    )


# =============================================================================
# CONTEXT
# =============================================================================

@pytest.fixture(autouse=True)
def clean_context():
    """Each test starts without a correlation ID or request context."""
    clear_correlation_id()
    clear_request_context()
    yield
    clear_correlation_id()
    clear_request_context()


# =============================================================================
# STORE & SERVICE FIXTURES
# =============================================================================

@pytest.fixture
def store() -> InMemoryPortfolioStore:
    """
    Store with two portfolios.

    "simple": 100 units of FUND_A bought at 100 on 2023-01-01, priced at
              150 on 2024-01-01 (Large Cap). Benchmark NIFTY50 mirrors the
              fund's NAV.
    "empty":  No transactions.
    """
    store = InMemoryPortfolioStore()
    store.add_portfolio(
        "simple",
        [_make_txn("FUND_A", date(2023, 1, 1), 100, 100)],
        [_make_meta(
            "FUND_A",
            name="Large Cap Fund",
            category="Large Cap",
            current_price=150,
            price_date=date(2024, 1, 1),
        )],
    )
    store.add_portfolio("empty", [])
    store.add_benchmark("NIFTY50", _make_prices(
        (date(2023, 1, 1), "100"),
        (date(2024, 1, 1), "150"),
    ))
    return store


@pytest.fixture
def service(store) -> AnalyticsService:
    """AnalyticsService running snapshot sections sequentially."""
    return AnalyticsService(store, max_workers=1)


@pytest.fixture
def threaded_service(store) -> AnalyticsService:
    """AnalyticsService running snapshot sections on a thread pool."""
    return AnalyticsService(store, max_workers=3)


# =============================================================================
# FACTORY FIXTURES
# =============================================================================

@pytest.fixture
def make_txn():
    return _make_txn


@pytest.fixture
def make_meta():
    return _make_meta


@pytest.fixture
def make_prices():
    return _make_prices


@pytest.fixture
def make_snapshot():
    return _make_snapshot
