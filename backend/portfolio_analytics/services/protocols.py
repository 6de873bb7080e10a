# backend/portfolio_analytics/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- Existing repositories satisfy protocols without modification
- Test fakes work without explicit inheritance
- Clear documentation of required interfaces
"""

from __future__ import annotations

from typing import Protocol, Sequence, Mapping, TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio_analytics.models import HoldingMetadata, PricePoint, Transaction


class PortfolioDataSource(Protocol):
    """
    Interface required by AnalyticsService.

    Implementations return already-fetched, in-memory data. Unknown
    portfolios must raise PortfolioNotFoundError; an unknown benchmark
    index returns an empty sequence.
    """

    def get_transactions(self, portfolio_id: int | str) -> Sequence[Transaction]:
        ...

    def get_holding_metadata(self, portfolio_id: int | str) -> Mapping[str, HoldingMetadata]:
        ...

    def get_price_history(self, portfolio_id: int | str) -> Mapping[str, Sequence[PricePoint]]:
        ...

    def get_benchmark_history(self, index_id: str) -> Sequence[PricePoint]:
        ...
