# backend/portfolio_analytics/services/valuation/engine.py
"""
Valuation Engine.

Values holdings and the whole portfolio on arbitrary dates from a Ledger
and observed prices.

Price series per holding (highest priority first):
1. External NAV / price history from the data source
2. The metadata's current price, observed on its price_date
3. Executed trade prices from the ledger

Design Principles:
- Immutable after construction; safe to share across threads
- As-of lookups only, nothing is interpolated
- Missing prices never raise at the portfolio level: the holding
  contributes zero and is reported in unpriced_holdings

Usage:
    engine = ValuationEngine(ledger, metadata, price_history)

    engine.value_at("119551", date(2024, 1, 31))   # PriceLookup
    engine.portfolio_value_at(date(2024, 1, 31))   # PortfolioValuation
    engine.holding_snapshots(date.today())          # list[HoldingSnapshot]
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from decimal import Decimal

from portfolio_analytics.models import HoldingMetadata, PricePoint
from portfolio_analytics.services.constants import ZERO
from portfolio_analytics.services.exceptions import EmptyLedgerError, NoPriceAvailableError
from portfolio_analytics.services.ledger.types import Ledger
from portfolio_analytics.services.valuation.price_history import PriceSeries
from portfolio_analytics.services.valuation.types import (
    HoldingSnapshot,
    HoldingValue,
    PortfolioValuation,
    PriceLookup,
)

logger = logging.getLogger(__name__)


class ValuationEngine:
    """
    Point-in-time valuation over an immutable ledger snapshot.

    Attributes:
        ledger: The portfolio's Ledger
        metadata: HoldingMetadata keyed by holding_id
    """

    def __init__(
            self,
            ledger: Ledger,
            metadata: Mapping[str, HoldingMetadata] | None = None,
            price_history: Mapping[str, Sequence[PricePoint]] | None = None,
    ) -> None:
        self.ledger = ledger
        self.metadata: dict[str, HoldingMetadata] = dict(metadata or {})
        self._series: dict[str, PriceSeries] = self._build_series(price_history or {})

    def _build_series(
            self,
            price_history: Mapping[str, Sequence[PricePoint]],
    ) -> dict[str, PriceSeries]:
        holding_ids = set(self.ledger.timelines) | set(price_history) | set(self.metadata)
        series: dict[str, PriceSeries] = {}

        for holding_id in holding_ids:
            feed = price_history.get(holding_id, ())

            meta = self.metadata.get(holding_id)
            latest: list[PricePoint] = []
            if meta is not None and meta.current_price is not None and meta.price_date is not None:
                latest.append(PricePoint(date=meta.price_date, price=meta.current_price))

            timeline = self.ledger.timelines.get(holding_id)
            trades = [
                PricePoint(date=e.date, price=e.price_per_unit)
                for e in (timeline.entries if timeline else ())
                if e.price_per_unit > ZERO
            ]

            series[holding_id] = PriceSeries.merge(feed, latest, trades)

        return series

    # =========================================================================
    # PRICES & UNITS
    # =========================================================================

    @property
    def holding_ids(self) -> list[str]:
        """Holdings with at least one transaction."""
        return self.ledger.holding_ids

    def price_series(self, holding_id: str) -> PriceSeries:
        return self._series.get(holding_id, PriceSeries())

    def value_at(self, holding_id: str, target: date) -> PriceLookup:
        """
        Most recent observed price on or before target.

        Raises:
            NoPriceAvailableError: If no observation exists on or before target
        """
        point = self.price_series(holding_id).as_of(target)
        if point is None:
            raise NoPriceAvailableError(holding_id, target)
        return PriceLookup(
            holding_id=holding_id,
            requested_date=target,
            price_date=point.date,
            price=point.price,
        )

    def units_held_as_of(self, holding_id: str, target: date) -> Decimal:
        """Cumulative signed units of transactions dated on or before target."""
        try:
            timeline = self.ledger.timeline(holding_id)
        except EmptyLedgerError:
            return ZERO
        return timeline.units_as_of(target)

    # =========================================================================
    # PORTFOLIO
    # =========================================================================

    def portfolio_value_at(self, target: date) -> PortfolioValuation:
        """
        Sum of units × price over holdings traded on or before target.

        Holdings without a price contribute zero and are listed in
        unpriced_holdings.
        """
        holdings: list[HoldingValue] = []
        unpriced: list[str] = []
        total = ZERO

        for holding_id in self.holding_ids:
            timeline = self.ledger.timelines[holding_id]
            if timeline.first_date > target:
                continue

            units = timeline.units_as_of(target)
            if units <= ZERO:
                holdings.append(HoldingValue(holding_id=holding_id, units=units, price=None, value=ZERO))
                continue

            try:
                lookup = self.value_at(holding_id, target)
            except NoPriceAvailableError:
                logger.debug(f"No price for '{holding_id}' on or before {target}, valuing at zero")
                unpriced.append(holding_id)
                holdings.append(HoldingValue(holding_id=holding_id, units=units, price=None, value=ZERO))
                continue

            value = units * lookup.price
            total += value
            holdings.append(HoldingValue(holding_id=holding_id, units=units, price=lookup.price, value=value))

        return PortfolioValuation(
            valuation_date=target,
            total_value=total,
            holdings=tuple(holdings),
            unpriced_holdings=tuple(unpriced),
        )

    def holding_snapshots(self, as_of: date) -> list[HoldingSnapshot]:
        """
        HoldingSnapshot for every holding with units > 0 on as_of.

        Cost basis uses the weighted average cost of all purchases.
        """
        snapshots: list[HoldingSnapshot] = []

        for holding_id in self.holding_ids:
            position = self.ledger.timelines[holding_id].position_as_of(as_of)
            if not position.has_position:
                continue

            meta = self.metadata.get(holding_id)
            try:
                lookup = self.value_at(holding_id, as_of)
                price, price_date = lookup.price, lookup.price_date
                current_value = position.units * lookup.price
            except NoPriceAvailableError:
                price, price_date, current_value = None, None, ZERO

            snapshots.append(HoldingSnapshot(
                holding_id=holding_id,
                name=meta.name if meta else holding_id,
                asset_type=meta.asset_type if meta else None,
                category=meta.category if meta else None,
                total_units=position.units,
                average_cost=position.average_cost,
                total_invested=position.total_invested,
                current_price=price,
                price_date=price_date,
                current_value=current_value,
                risk_score=meta.risk_score if meta else None,
            ))

        return snapshots
