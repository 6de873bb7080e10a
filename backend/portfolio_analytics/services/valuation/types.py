# backend/portfolio_analytics/services/valuation/types.py
"""
Internal data types for the Valuation Engine.

These dataclasses are used internally by the valuation engine and the
analytics calculators. They are NOT Pydantic schemas - those are defined
in portfolio_analytics/schemas/analytics.py for JSON serialization.

Design Principles:
- Immutable (frozen=True for value objects)
- Use Decimal for ALL financial values (never float)
- Use date (not datetime) for valuation dates
- Optional fields use None, not sentinel values

Type Hierarchy:
    PriceLookup         - Result of an as-of price lookup
    HoldingValue        - One holding's contribution on a date
    PortfolioValuation  - Portfolio total on a date (+ unpriced holdings)
    HoldingSnapshot     - Position, cost basis and value of one holding
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from portfolio_analytics.models import AssetType


# =============================================================================
# PRICES
# =============================================================================

@dataclass(frozen=True)
class PriceLookup:
    """
    Result of a most-recent-at-or-before price lookup.

    Attributes:
        holding_id: Holding (or benchmark index) the price belongs to
        requested_date: Date the price was requested for
        price_date: Date of the observation actually used (<= requested_date)
        price: Observed price
    """
    holding_id: str
    requested_date: date
    price_date: date
    price: Decimal

    @property
    def is_stale(self) -> bool:
        """True if the price was carried forward from an earlier date."""
        return self.price_date < self.requested_date


# =============================================================================
# POINT-IN-TIME VALUATION
# =============================================================================

@dataclass(frozen=True)
class HoldingValue:
    """
    One holding's contribution to the portfolio value on a date.

    Attributes:
        holding_id: Holding identifier
        units: Units held on the date (inclusive of that day's trades)
        price: Price used, None if no price was available
        value: units × price, zero when unpriced
    """
    holding_id: str
    units: Decimal
    price: Decimal | None
    value: Decimal

    @property
    def is_priced(self) -> bool:
        return self.price is not None


@dataclass(frozen=True)
class PortfolioValuation:
    """
    Total portfolio value on a date.

    Attributes:
        valuation_date: Date of this valuation
        total_value: Sum of holding values (unpriced holdings count as zero)
        holdings: Per-holding contributions, sorted by holding_id
        unpriced_holdings: Holdings with units but no price on or before the date
    """
    valuation_date: date
    total_value: Decimal
    holdings: tuple[HoldingValue, ...] = ()
    unpriced_holdings: tuple[str, ...] = ()

    @property
    def has_complete_data(self) -> bool:
        """True if every held position had a price."""
        return not self.unpriced_holdings


# =============================================================================
# HOLDING SNAPSHOT
# =============================================================================

@dataclass(frozen=True)
class HoldingSnapshot:
    """
    Position, cost basis and value for one holding as of a date.

    Attributes:
        holding_id: Holding identifier
        name: Display name (falls back to holding_id without metadata)
        asset_type: EQUITY / MUTUAL_FUND (None without metadata)
        category: Fund category, if known
        total_units: Units held
        average_cost: Weighted average cost per unit
        total_invested: Cost basis of the units held (average cost method)
        current_price: Price as of the snapshot date, None if unavailable
        price_date: Date of current_price
        current_value: total_units × current_price (zero when unpriced)
        risk_score: Per-holding risk score override from metadata
    """
    holding_id: str
    name: str
    asset_type: AssetType | None
    category: str | None
    total_units: Decimal
    average_cost: Decimal | None
    total_invested: Decimal
    current_price: Decimal | None
    price_date: date | None
    current_value: Decimal
    risk_score: Decimal | None = None

    @property
    def is_priced(self) -> bool:
        return self.current_price is not None
