# backend/portfolio_analytics/schemas/ledger.py
"""
Pydantic schemas for raw ledger input.

Callers that receive portfolio data as loosely-typed rows (JSON payloads,
CSV exports already parsed into dicts) validate them here before handing
them to the engine.

Validation layers:
- Field constraints: type, numeric limits
- Field validators: normalization (trim, uppercase kinds)
- Ledger reader: duplicates, amount/price consistency

IMPORTANT: All financial values use Decimal for precision.
Never use float for money!
"""

import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portfolio_analytics.models import (
    AssetType,
    HoldingMetadata,
    PricePoint,
    Transaction,
    TransactionKind,
)


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionRow(BaseModel):
    """A raw transaction row."""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    holding_id: str = Field(
        ...,
        min_length=1,
        description="Fund scheme code or ticker",
        examples=["119551", "RELIANCE"]
    )
    date: datetime.date = Field(..., description="Trade date")
    kind: TransactionKind = Field(
        ...,
        description="BUY, SIP or SELL",
        examples=["BUY", "SIP", "SELL"]
    )
    units: Decimal = Field(
        ...,
        gt=0,
        description="Units traded (must be positive; SELL direction comes from kind)",
        examples=["100", "12.345"]
    )
    amount: Decimal = Field(
        ...,
        description="Cash amount of the trade (sign is normalised by the ledger reader)",
        examples=["10000", "-5000.50"]
    )
    price_per_unit: Decimal = Field(
        ...,
        gt=0,
        description="Executed NAV / price per unit",
        examples=["100", "45.6789"]
    )

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v):
        """Accept 'buy', ' Sip ', etc."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def to_domain(self) -> Transaction:
        return Transaction(
            holding_id=self.holding_id,
            date=self.date,
            kind=self.kind,
            units=self.units,
            amount=self.amount,
            price_per_unit=self.price_per_unit,
        )


# =============================================================================
# HOLDING METADATA
# =============================================================================

class HoldingMetadataRow(BaseModel):
    """A raw holding metadata row."""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    holding_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, description="Display name")
    asset_type: AssetType = Field(..., description="EQUITY or MUTUAL_FUND")
    category: str | None = Field(
        None,
        description="Fund category (e.g. 'Large Cap', 'Debt')",
        examples=["Large Cap", "Mid Cap", "Debt"]
    )
    current_price: Decimal | None = Field(None, gt=0, description="Latest known price")
    price_date: datetime.date | None = Field(None, description="Date of current_price")
    risk_score: Decimal | None = Field(
        None,
        ge=0,
        description="Volatility proxy override (annualized percent)"
    )

    @field_validator("asset_type", mode="before")
    @classmethod
    def normalize_asset_type(cls, v):
        if isinstance(v, str):
            return v.strip().upper().replace(" ", "_")
        return v

    def to_domain(self) -> HoldingMetadata:
        return HoldingMetadata(
            holding_id=self.holding_id,
            name=self.name,
            asset_type=self.asset_type,
            category=self.category,
            current_price=self.current_price,
            price_date=self.price_date,
            risk_score=self.risk_score,
        )


# =============================================================================
# PRICES
# =============================================================================

class PricePointRow(BaseModel):
    """A raw NAV / index level observation."""

    model_config = ConfigDict(from_attributes=True)

    date: datetime.date
    price: Decimal = Field(..., gt=0)

    def to_domain(self) -> PricePoint:
        return PricePoint(date=self.date, price=self.price)
