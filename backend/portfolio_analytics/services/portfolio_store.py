# backend/portfolio_analytics/services/portfolio_store.py
"""
In-memory PortfolioDataSource.

For callers that already hold the data (tests, batch jobs, the demo seed
script). Data is registered once per portfolio and handed out as
immutable tuples / copies, so analytics can never mutate the store.

Usage:
    store = InMemoryPortfolioStore()
    store.add_portfolio(1, transactions, metadata, price_history)
    store.add_benchmark("NIFTY50", points)

    service = AnalyticsService(store)
"""

import logging
from collections.abc import Iterable, Mapping, Sequence

from portfolio_analytics.models import HoldingMetadata, PricePoint, Transaction
from portfolio_analytics.services.exceptions import PortfolioNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class InMemoryPortfolioStore:
    """Dictionary-backed implementation of PortfolioDataSource."""

    def __init__(self) -> None:
        self._transactions: dict[int | str, tuple[Transaction, ...]] = {}
        self._metadata: dict[int | str, dict[str, HoldingMetadata]] = {}
        self._prices: dict[int | str, dict[str, tuple[PricePoint, ...]]] = {}
        self._benchmarks: dict[str, tuple[PricePoint, ...]] = {}

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def add_portfolio(
            self,
            portfolio_id: int | str,
            transactions: Iterable[Transaction],
            metadata: Iterable[HoldingMetadata] = (),
            price_history: Mapping[str, Iterable[PricePoint]] | None = None,
    ) -> None:
        """
        Register (or replace) a portfolio's data.

        Raises:
            ValidationError: If metadata lists the same holding twice
        """
        meta_by_id: dict[str, HoldingMetadata] = {}
        for meta in metadata:
            if meta.holding_id in meta_by_id:
                raise ValidationError(
                    f"Duplicate metadata for holding '{meta.holding_id}'",
                    field="metadata",
                )
            meta_by_id[meta.holding_id] = meta

        self._transactions[portfolio_id] = tuple(transactions)
        self._metadata[portfolio_id] = meta_by_id
        self._prices[portfolio_id] = {
            holding_id: tuple(points)
            for holding_id, points in (price_history or {}).items()
        }
        logger.debug(
            f"Registered portfolio {portfolio_id}: "
            f"{len(self._transactions[portfolio_id])} transactions, "
            f"{len(meta_by_id)} holdings"
        )

    def add_benchmark(self, index_id: str, points: Iterable[PricePoint]) -> None:
        """Register (or replace) a benchmark index's price history."""
        self._benchmarks[index_id] = tuple(points)

    # =========================================================================
    # PortfolioDataSource
    # =========================================================================

    def get_transactions(self, portfolio_id: int | str) -> Sequence[Transaction]:
        self._require(portfolio_id)
        return self._transactions[portfolio_id]

    def get_holding_metadata(self, portfolio_id: int | str) -> Mapping[str, HoldingMetadata]:
        self._require(portfolio_id)
        return dict(self._metadata[portfolio_id])

    def get_price_history(self, portfolio_id: int | str) -> Mapping[str, Sequence[PricePoint]]:
        self._require(portfolio_id)
        return dict(self._prices[portfolio_id])

    def get_benchmark_history(self, index_id: str) -> Sequence[PricePoint]:
        return self._benchmarks.get(index_id, ())

    def _require(self, portfolio_id: int | str) -> None:
        if portfolio_id not in self._transactions:
            raise PortfolioNotFoundError(portfolio_id)
