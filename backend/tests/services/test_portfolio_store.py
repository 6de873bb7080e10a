# backend/tests/services/test_portfolio_store.py
"""
Tests for the in-memory PortfolioDataSource.
"""

from datetime import date

import pytest

from portfolio_analytics.services.exceptions import NotFoundError, PortfolioNotFoundError, ValidationError
from portfolio_analytics.services.portfolio_store import InMemoryPortfolioStore


class TestInMemoryPortfolioStore:
    """Registration and lookups."""

    def test_round_trip(self, make_txn, make_meta, make_prices):
        store = InMemoryPortfolioStore()
        txn = make_txn("FUND_A", date(2024, 1, 1), 10, 100)
        meta = make_meta("FUND_A", name="Fund A")
        prices = make_prices((date(2024, 1, 31), "105"))

        store.add_portfolio(7, [txn], [meta], {"FUND_A": prices})

        assert store.get_transactions(7) == (txn,)
        assert store.get_holding_metadata(7) == {"FUND_A": meta}
        assert store.get_price_history(7) == {"FUND_A": tuple(prices)}

    def test_returned_collections_are_copies(self, make_meta):
        store = InMemoryPortfolioStore()
        store.add_portfolio(1, [], [make_meta("FUND_A")])

        store.get_holding_metadata(1).clear()
        assert "FUND_A" in store.get_holding_metadata(1)

    def test_unknown_portfolio(self):
        store = InMemoryPortfolioStore()
        with pytest.raises(PortfolioNotFoundError) as exc_info:
            store.get_transactions(99)

        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.resource_id == 99

    def test_duplicate_metadata_rejected(self, make_meta):
        store = InMemoryPortfolioStore()
        with pytest.raises(ValidationError) as exc_info:
            store.add_portfolio(1, [], [make_meta("FUND_A"), make_meta("FUND_A")])
        assert exc_info.value.field == "metadata"

    def test_benchmarks(self, make_prices):
        store = InMemoryPortfolioStore()
        points = make_prices((date(2024, 1, 1), "22000"))
        store.add_benchmark("NIFTY50", points)

        assert store.get_benchmark_history("NIFTY50") == tuple(points)
        assert store.get_benchmark_history("UNKNOWN") == ()

    def test_re_registering_replaces(self, make_txn):
        store = InMemoryPortfolioStore()
        store.add_portfolio(1, [make_txn("FUND_A", date(2024, 1, 1), 1, 100)])
        store.add_portfolio(1, [])
        assert store.get_transactions(1) == ()
