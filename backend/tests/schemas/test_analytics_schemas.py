# backend/tests/schemas/test_analytics_schemas.py
"""
Tests for response mappers and raw input schemas.

Verifies the JSON shape of analytics results: Decimals become strings,
enums become their values, unavailable metrics become null.
"""

from datetime import date
from decimal import Decimal

import pydantic
import pytest

from portfolio_analytics.models import AssetType
from portfolio_analytics.schemas import HoldingMetadataRow, PricePointRow
from portfolio_analytics.schemas.mappers import (
    decimal_to_str,
    map_benchmark,
    map_drawdown_period,
    map_growth_curve,
    map_snapshot,
    map_xirr,
)
from portfolio_analytics.services.analytics.types import (
    BenchmarkComparison,
    DrawdownPeriod,
    GrowthPoint,
    XIRRResult,
)

END = date(2024, 1, 1)


class TestDecimalToStr:
    """Tests for decimal_to_str."""

    @pytest.mark.parametrize("value, expected", [
        (Decimal("10.5000"), "10.5"),
        (Decimal("0.50000000"), "0.5"),
        (Decimal("1E+3"), "1000"),
        (Decimal("0E-8"), "0"),
        (Decimal("-18.1818"), "-18.1818"),
        (7, "7"),
        (None, None),
    ])
    def test_conversion(self, value, expected):
        assert decimal_to_str(value) == expected


class TestMappers:
    """Tests for individual mappers."""

    def test_growth_curve(self):
        [point] = map_growth_curve([GrowthPoint(END, Decimal("15000.00"))])
        assert point.model_dump(mode="json") == {"date": "2024-01-01", "value": "15000"}

    def test_xirr(self):
        response = map_xirr(XIRRResult(
            rate=Decimal("0.12345678"),
            method="newton",
            iterations=4,
            cash_flow_count=3,
            start_date=date(2023, 1, 1),
            end_date=END,
        ))
        assert response.rate == "0.12345678"
        assert response.method == "newton"

    def test_ongoing_drawdown_period(self):
        response = map_drawdown_period(DrawdownPeriod(
            start_date=date(2023, 1, 1),
            trough_date=date(2023, 2, 1),
            end_date=None,
            depth_pct=Decimal("-20.0000"),
            duration_days=59,
        ))
        data = response.model_dump(mode="json")
        assert data["end_date"] is None
        assert data["recovery_days"] is None
        assert data["depth_pct"] == "-20"

    def test_unavailable_benchmark(self):
        response = map_benchmark(BenchmarkComparison.unavailable("no price history", index_id="NIFTYIT"))
        data = response.model_dump(mode="json")

        assert data["available"] is False
        assert data["index_id"] == "NIFTYIT"
        assert data["reason"] == "no price history"
        assert data["verdict"] is None
        assert data["portfolio_xirr"] is None


class TestSnapshotResponse:
    """map_snapshot over a real snapshot."""

    def test_snapshot_json(self, service):
        snapshot = service.get_portfolio_snapshot("simple", as_of=END)
        data = map_snapshot(snapshot).model_dump(mode="json")

        assert data["portfolio_id"] == "simple"
        assert data["as_of"] == "2024-01-01"
        assert data["summary"] == {
            "total_value": "15000",
            "invested": "10000",
            "returns": "5000",
            "returns_pct": "50",
            "xirr": "0.5",
            "holdings_count": 1,
        }
        assert data["allocation"]["by_asset_type"] == [
            {"label": "MUTUAL_FUND", "value": "15000", "weight_pct": "100"},
        ]
        assert data["performance"]["benchmark"]["verdict"] == "IN_LINE"
        assert data["performance"]["growth_curve"][-1] == {"date": "2024-01-01", "value": "15000"}
        assert data["performance"]["rolling_returns"] == [{"date": "2024-01-01", "return_pct": "50"}]
        assert data["performance"]["max_drawdown_pct"] == "0"
        assert data["performance"]["drawdown_periods"] == []
        assert data["risk"]["entries"][0]["quadrant"] == "HighReturn-HighRisk"
        assert data["risk"]["concentration"]["severity"] == "HIGH"
        assert data["warnings"] == []


class TestInputRows:
    """Raw metadata and price rows."""

    def test_metadata_row_normalises_asset_type(self):
        row = HoldingMetadataRow(
            holding_id="119551",
            name="HDFC Top 100",
            asset_type="mutual fund",
            category="Large Cap",
            current_price="58.42",
            price_date="2026-01-21",
        )
        meta = row.to_domain()

        assert meta.asset_type == AssetType.MUTUAL_FUND
        assert meta.current_price == Decimal("58.42")
        assert meta.price_date == date(2026, 1, 21)

    def test_price_row_rejects_non_positive(self):
        with pytest.raises(pydantic.ValidationError):
            PricePointRow(date=END, price="0")

    def test_price_row_to_domain(self):
        point = PricePointRow(date="2024-01-01", price="101.5").to_domain()
        assert point.date == END
        assert point.price == Decimal("101.5")
