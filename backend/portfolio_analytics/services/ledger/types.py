# backend/portfolio_analytics/services/ledger/types.py
"""
Internal data types for the Transaction Ledger.

These dataclasses are used internally by the ledger reader and everything
downstream of it. They are NOT Pydantic schemas - raw input rows are
validated by portfolio_analytics/schemas/ledger.py.

Design Principles:
- Immutable (frozen=True); a Ledger never changes after read()
- Use Decimal for ALL financial values (never float)
- Signs are normalised once, here: units are signed (SELL negative) and
  amounts follow the investor's perspective (purchases negative)

Type Hierarchy:
    CashFlow         - Dated signed amount (XIRR input)
    LedgerEntry      - One normalised transaction
    PositionSummary  - Units + average-cost basis at a date
    HoldingTimeline  - Ordered entries for one holding
    Ledger           - All timelines + data quality warnings
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from types import MappingProxyType

from portfolio_analytics.models import TransactionKind
from portfolio_analytics.services.constants import SHARE_PRECISION, ZERO
from portfolio_analytics.services.exceptions import EmptyLedgerError


@dataclass(frozen=True)
class CashFlow:
    """
    Represents a cash flow event for XIRR calculations.

    Attributes:
        date: When the cash flow occurred
        amount: Negative = investor outflow (purchase),
                positive = inflow (sale proceeds, terminal value)
    """
    date: date
    amount: Decimal


@dataclass(frozen=True)
class LedgerEntry:
    """
    A normalised transaction.

    Attributes:
        holding_id: Holding the trade belongs to
        date: Trade date
        kind: BUY, SIP or SELL
        units: Signed units (SELL negative)
        amount: Signed cash amount (purchases negative, sells positive)
        price_per_unit: Executed price
    """
    holding_id: str
    date: date
    kind: TransactionKind
    units: Decimal
    amount: Decimal
    price_per_unit: Decimal


@dataclass(frozen=True)
class PositionSummary:
    """
    Position in one holding as of a date, using weighted average cost.

    Attributes:
        units: Units held (bought - sold)
        average_cost: Weighted average cost per unit of all purchases,
                      None if nothing was ever bought
        total_invested: Cost basis of the units still held
                        (units × average_cost)
    """
    units: Decimal
    average_cost: Decimal | None
    total_invested: Decimal

    @property
    def has_position(self) -> bool:
        """True if there are units currently held."""
        return self.units > ZERO


@dataclass(frozen=True)
class HoldingTimeline:
    """
    Chronological transactions for one holding.

    Entries are sorted ascending by date; same-day entries keep their
    input order.
    """
    holding_id: str
    entries: tuple[LedgerEntry, ...]
    _dates: tuple[date, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_dates", tuple(e.date for e in self.entries))

    @property
    def first_date(self) -> date:
        return self.entries[0].date

    @property
    def last_date(self) -> date:
        return self.entries[-1].date

    def entries_as_of(self, as_of: date) -> tuple[LedgerEntry, ...]:
        """Entries dated on or before as_of (inclusive)."""
        return self.entries[:bisect_right(self._dates, as_of)]

    def units_as_of(self, as_of: date) -> Decimal:
        """Cumulative signed units of entries dated on or before as_of."""
        return sum((e.units for e in self.entries_as_of(as_of)), ZERO)

    def position_as_of(self, as_of: date) -> PositionSummary:
        """
        Units held and average-cost basis as of a date.

        Cost (purchases):  cost = |amount|
        Average cost:      total purchase cost / total units purchased
        Invested:          units held × average cost
        """
        bought_units = ZERO
        bought_cost = ZERO
        units = ZERO

        for entry in self.entries_as_of(as_of):
            units += entry.units
            if entry.kind.is_purchase:
                bought_units += entry.units
                bought_cost += -entry.amount

        if bought_units == ZERO:
            return PositionSummary(units=units, average_cost=None, total_invested=ZERO)

        average_cost = (bought_cost / bought_units).quantize(SHARE_PRECISION)
        held = max(units, ZERO)
        return PositionSummary(
            units=units,
            average_cost=average_cost,
            total_invested=held * bought_cost / bought_units,
        )


@dataclass(frozen=True)
class Ledger:
    """
    Result of reading a portfolio's transactions.

    Attributes:
        timelines: HoldingTimeline per holding_id (only holdings that
                   have at least one transaction)
        warnings: Data integrity warnings (amount mismatches, duplicates,
                  sells without prior purchases)
    """
    timelines: Mapping[str, HoldingTimeline]
    warnings: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Read-only view over a private copy
        object.__setattr__(self, "timelines", MappingProxyType(dict(self.timelines)))

    @property
    def holding_ids(self) -> list[str]:
        return sorted(self.timelines)

    @property
    def is_empty(self) -> bool:
        return not self.timelines

    @property
    def first_date(self) -> date | None:
        """Earliest transaction date across all holdings."""
        if self.is_empty:
            return None
        return min(t.first_date for t in self.timelines.values())

    def timeline(self, holding_id: str) -> HoldingTimeline:
        """
        Transactions for one holding.

        Raises:
            EmptyLedgerError: If the holding has no transactions
        """
        timeline = self.timelines.get(holding_id)
        if timeline is None:
            raise EmptyLedgerError(holding_id=holding_id)
        return timeline

    def cash_flows(self, end_date: date | None = None) -> list[CashFlow]:
        """
        Combined signed cash flows of all holdings, sorted by date.

        Args:
            end_date: Only include transactions on or before this date

        Returns:
            List of CashFlow (purchases negative, sells positive)
        """
        flows = [
            CashFlow(date=entry.date, amount=entry.amount)
            for timeline in self.timelines.values()
            for entry in timeline.entries
            if end_date is None or entry.date <= end_date
        ]
        flows.sort(key=lambda cf: cf.date)
        return flows
