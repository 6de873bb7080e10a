# backend/tests/services/analytics/test_growth.py
"""
Unit tests for growth curve and drawdown calculations.

Test Coverage:
- build_growth_curve: resampling, endpoints, values from the valuation engine
- calculate_drawdown_series: percent below running peak
- calculate_max_drawdown
- calculate_drawdown_periods: peak / trough / recovery episodes
"""

from datetime import date
from decimal import Decimal

import pytest

from portfolio_analytics.services.analytics.growth import (
    build_growth_curve,
    calculate_drawdown_periods,
    calculate_drawdown_series,
    calculate_max_drawdown,
)
from portfolio_analytics.services.analytics.types import GrowthPoint
from portfolio_analytics.services.exceptions import InvalidIntervalError
from portfolio_analytics.services.ledger.reader import LedgerReader
from portfolio_analytics.services.valuation.engine import ValuationEngine


def curve_of(*pairs) -> list[GrowthPoint]:
    return [GrowthPoint(date=d, value=Decimal(str(v))) for d, v in pairs]


@pytest.fixture
def engine(make_txn, make_prices) -> ValuationEngine:
    """10 units bought at 100 on 2024-01-10, NAV 110 / 90 / 120 at month ends."""
    ledger = LedgerReader().read([make_txn("FUND_A", date(2024, 1, 10), 10, 100)])
    return ValuationEngine(
        ledger,
        price_history={"FUND_A": make_prices(
            (date(2024, 1, 31), "110"),
            (date(2024, 2, 29), "90"),
            (date(2024, 3, 31), "120"),
        )},
    )


# =============================================================================
# GROWTH CURVE
# =============================================================================

class TestGrowthCurve:
    """Tests for build_growth_curve."""

    def test_monthly_curve(self, engine):
        curve = build_growth_curve(engine, date(2024, 1, 10), date(2024, 3, 31), "monthly")

        assert [(p.date, p.value) for p in curve] == [
            (date(2024, 1, 10), Decimal("1000")),
            (date(2024, 1, 31), Decimal("1100")),
            (date(2024, 2, 29), Decimal("900")),
            (date(2024, 3, 31), Decimal("1200")),
        ]

    def test_endpoints_always_included(self, engine):
        curve = build_growth_curve(engine, date(2024, 1, 15), date(2024, 3, 15), "monthly")

        assert curve[0].date == date(2024, 1, 15)
        assert curve[-1].date == date(2024, 3, 15)
        # Mid-March still uses the February NAV
        assert curve[-1].value == Decimal("900")

    def test_before_first_trade_is_zero(self, engine):
        curve = build_growth_curve(engine, date(2024, 1, 1), date(2024, 1, 10), "daily")

        assert len(curve) == 10
        assert curve[0].value == Decimal("0")
        assert curve[-1].value == Decimal("1000")

    def test_weekly_uses_fridays(self, engine):
        curve = build_growth_curve(engine, date(2024, 1, 10), date(2024, 1, 31), "weekly")
        assert [p.date for p in curve] == [
            date(2024, 1, 10),
            date(2024, 1, 12),
            date(2024, 1, 19),
            date(2024, 1, 26),
            date(2024, 1, 31),
        ]

    def test_unknown_resolution_raises(self, engine):
        with pytest.raises(InvalidIntervalError):
            build_growth_curve(engine, date(2024, 1, 10), date(2024, 3, 31), "quarterly")

    def test_end_before_start_is_empty(self, engine):
        assert build_growth_curve(engine, date(2024, 3, 1), date(2024, 2, 1), "monthly") == []


# =============================================================================
# DRAWDOWN SERIES
# =============================================================================

class TestDrawdownSeries:
    """Tests for calculate_drawdown_series and calculate_max_drawdown."""

    def test_decline_and_recovery(self):
        curve = curve_of(
            (date(2024, 1, 10), 1000),
            (date(2024, 1, 31), 1100),
            (date(2024, 2, 29), 900),
            (date(2024, 3, 31), 1200),
        )
        series = calculate_drawdown_series(curve)

        assert [p.drawdown_pct for p in series] == [
            Decimal("0"),
            Decimal("0"),
            Decimal("-18.1818"),  # (900 - 1100) / 1100
            Decimal("0"),
        ]
        assert calculate_max_drawdown(series) == Decimal("-18.1818")

    def test_never_positive(self):
        curve = curve_of(
            (date(2024, 1, 1), 100),
            (date(2024, 2, 1), 120),
            (date(2024, 3, 1), 110),
            (date(2024, 4, 1), 130),
        )
        assert all(p.drawdown_pct <= 0 for p in calculate_drawdown_series(curve))

    def test_zero_value_before_investing(self):
        curve = curve_of(
            (date(2024, 1, 1), 0),
            (date(2024, 2, 1), 100),
            (date(2024, 3, 1), 50),
        )
        series = calculate_drawdown_series(curve)
        assert [p.drawdown_pct for p in series] == [Decimal("0"), Decimal("0"), Decimal("-50.0000")]

    def test_unsorted_input_sorted_by_date(self):
        curve = curve_of(
            (date(2024, 2, 1), 50),
            (date(2024, 1, 1), 100),
        )
        series = calculate_drawdown_series(curve)
        assert [p.date for p in series] == [date(2024, 1, 1), date(2024, 2, 1)]
        assert series[1].drawdown_pct == Decimal("-50.0000")

    def test_max_drawdown_of_empty_series(self):
        assert calculate_max_drawdown([]) == Decimal("0")


# =============================================================================
# DRAWDOWN PERIODS
# =============================================================================

class TestDrawdownPeriods:
    """Tests for calculate_drawdown_periods."""

    def test_recovered_episode(self):
        curve = curve_of(
            (date(2024, 1, 10), 1000),
            (date(2024, 1, 31), 1100),
            (date(2024, 2, 29), 900),
            (date(2024, 3, 31), 1200),
        )
        [period] = calculate_drawdown_periods(curve)

        assert period.start_date == date(2024, 1, 31)
        assert period.trough_date == date(2024, 2, 29)
        assert period.end_date == date(2024, 3, 31)
        assert period.depth_pct == Decimal("-18.1818")
        assert period.duration_days == 60
        assert period.recovery_days == 31
        assert period.is_recovered

    def test_ongoing_episode(self):
        curve = curve_of(
            (date(2024, 1, 1), 100),
            (date(2024, 2, 1), 80),
            (date(2024, 3, 1), 90),
        )
        [period] = calculate_drawdown_periods(curve)

        assert period.end_date is None
        assert period.recovery_days is None
        assert period.depth_pct == Decimal("-20.0000")
        assert period.duration_days == 60

    def test_sorted_worst_first_and_top_n(self):
        curve = curve_of(
            (date(2024, 1, 1), 100),
            (date(2024, 2, 1), 95),   # -5%
            (date(2024, 3, 1), 100),
            (date(2024, 4, 1), 70),   # -30%
            (date(2024, 5, 1), 101),
        )
        periods = calculate_drawdown_periods(curve)
        assert [p.depth_pct for p in periods] == [Decimal("-30.0000"), Decimal("-5.0000")]

        [worst] = calculate_drawdown_periods(curve, top_n=1)
        assert worst.trough_date == date(2024, 4, 1)

    def test_zero_values_ignored(self):
        curve = curve_of(
            (date(2024, 1, 1), 0),
            (date(2024, 2, 1), 100),
            (date(2024, 3, 1), 110),
        )
        assert calculate_drawdown_periods(curve) == []
