# backend/portfolio_analytics/services/valuation/price_history.py
"""
Sparse price series with as-of lookups.

A PriceSeries holds observed prices only (NAV feed, latest quote, executed
trade prices). Nothing is interpolated: a lookup returns the most recent
observation on or before the requested date.

When several sources observe the same day, the first source given to
PriceSeries.merge() wins, so callers pass them in priority order.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from portfolio_analytics.models import PricePoint


class PriceSeries:
    """Immutable, date-sorted price observations for one holding or index."""

    __slots__ = ("_dates", "_prices")

    def __init__(self, points: Iterable[PricePoint] = ()) -> None:
        by_date: dict[date, Decimal] = {}
        for point in points:
            # First observation of a day wins
            by_date.setdefault(point.date, point.price)

        ordered = sorted(by_date.items())
        self._dates: tuple[date, ...] = tuple(d for d, _ in ordered)
        self._prices: tuple[Decimal, ...] = tuple(p for _, p in ordered)

    @classmethod
    def merge(cls, *sources: Iterable[PricePoint]) -> PriceSeries:
        """
        Combine sources, highest priority first.

        Example:
            PriceSeries.merge(nav_feed, [latest_quote], trade_prices)
        """
        return cls(point for source in sources for point in source)

    def __len__(self) -> int:
        return len(self._dates)

    def __bool__(self) -> bool:
        return bool(self._dates)

    @property
    def first_date(self) -> date | None:
        return self._dates[0] if self._dates else None

    @property
    def last_date(self) -> date | None:
        return self._dates[-1] if self._dates else None

    def as_of(self, target: date) -> PricePoint | None:
        """Most recent observation on or before target, or None."""
        idx = bisect_right(self._dates, target)
        if idx == 0:
            return None
        return PricePoint(date=self._dates[idx - 1], price=self._prices[idx - 1])

    def points(self) -> list[PricePoint]:
        return [PricePoint(date=d, price=p) for d, p in zip(self._dates, self._prices)]
