# backend/portfolio_analytics/models.py
"""
Core domain records consumed by the analytics engine.

These are the already-fetched inputs a PortfolioDataSource hands over:
transactions, holding metadata and price points. They are immutable value
objects; the ledger reader and valuation engine never mutate them.
"""
import enum
from dataclasses import dataclass
from datetime import date
from decimal import Decimal


# Enums keep kinds consistent between the ledger and the JSON boundary
class TransactionKind(str, enum.Enum):
    BUY = "BUY"
    SIP = "SIP"  # Systematic investment plan instalment, treated like BUY
    SELL = "SELL"

    @property
    def is_purchase(self) -> bool:
        return self in (TransactionKind.BUY, TransactionKind.SIP)


class AssetType(str, enum.Enum):
    EQUITY = "EQUITY"
    MUTUAL_FUND = "MUTUAL_FUND"


@dataclass(frozen=True)
class Transaction:
    """
    A single executed trade as recorded by the investor.

    Attributes:
        holding_id: Holding the trade belongs to (fund scheme code or ticker)
        date: Trade date
        kind: BUY, SIP or SELL
        units: Units traded as recorded (always positive)
        amount: Cash amount of the trade; the ledger reader normalises its
                sign (purchases negative, sells positive)
        price_per_unit: Executed NAV / price
    """
    holding_id: str
    date: date
    kind: TransactionKind
    units: Decimal
    amount: Decimal
    price_per_unit: Decimal


@dataclass(frozen=True)
class HoldingMetadata:
    """
    Descriptive data for a holding, plus its latest known price.

    risk_score overrides the category / asset-type default volatility
    proxy when set.
    """
    holding_id: str
    name: str
    asset_type: AssetType
    category: str | None = None
    current_price: Decimal | None = None
    price_date: date | None = None
    risk_score: Decimal | None = None


@dataclass(frozen=True)
class PricePoint:
    """An observed price (holding NAV or benchmark index level) on a date."""
    date: date
    price: Decimal
