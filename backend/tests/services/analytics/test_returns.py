# backend/tests/services/analytics/test_returns.py
"""
Unit tests for return calculations.

These tests verify the pure calculation logic without any data source.
All tests use known values that can be verified by hand.

Test Coverage:
- calculate_simple_return: Basic return calculation
- solve_xirr / calculate_xirr: Extended Internal Rate of Return
- calculate_rolling_returns: Trailing window returns over a growth curve
"""

from datetime import date
from decimal import Decimal

import pytest

from portfolio_analytics.services.analytics.returns import (
    calculate_rolling_returns,
    calculate_simple_return,
    calculate_xirr,
    solve_xirr,
)
from portfolio_analytics.services.analytics.types import CashFlow, GrowthPoint
from portfolio_analytics.services.exceptions import (
    InsufficientCashFlowError,
    ValidationError,
    XIRRNonConvergenceError,
)
from portfolio_analytics.utils.date_utils import add_months, month_end


# =============================================================================
# SIMPLE RETURN TESTS
# =============================================================================

class TestSimpleReturn:
    """Tests for calculate_simple_return function."""

    def test_positive_return(self):
        result = calculate_simple_return(
            start_value=Decimal("1000"),
            end_value=Decimal("1200"),
        )
        assert result == Decimal("0.2")  # 20%

    def test_negative_return(self):
        result = calculate_simple_return(
            start_value=Decimal("1000"),
            end_value=Decimal("800"),
        )
        assert result == Decimal("-0.2")  # -20%

    def test_zero_start_value_returns_none(self):
        """Test that zero start value returns None."""
        result = calculate_simple_return(
            start_value=Decimal("0"),
            end_value=Decimal("1000"),
        )
        assert result is None


# =============================================================================
# XIRR TESTS
# =============================================================================

class TestXIRR:
    """Tests for XIRR calculation."""

    def test_one_year_fifty_percent(self):
        """Invest 10000, get 15000 back exactly one year later -> 50%."""
        cash_flows = [
            CashFlow(date(2023, 1, 1), Decimal("-10000")),
            CashFlow(date(2024, 1, 1), Decimal("15000")),
        ]
        result = solve_xirr(cash_flows)

        assert result.rate == Decimal("0.50000000")
        assert result.method == "newton"
        assert result.cash_flow_count == 2
        assert result.start_date == date(2023, 1, 1)
        assert result.end_date == date(2024, 1, 1)
        assert result.rate_pct == Decimal("50.00000000")

    def test_zero_return(self):
        cash_flows = [
            CashFlow(date(2023, 1, 1), Decimal("-1000")),
            CashFlow(date(2024, 1, 1), Decimal("1000")),
        ]
        assert calculate_xirr(cash_flows) == Decimal("0")

    def test_negative_return(self):
        """Lose half in one year -> -50%."""
        cash_flows = [
            CashFlow(date(2023, 6, 1), Decimal("-1000")),
            CashFlow(date(2024, 6, 1), Decimal("500")),
        ]
        assert float(calculate_xirr(cash_flows)) == pytest.approx(-0.5, abs=1e-6)

    def test_two_contributions(self):
        """
        1000 invested on each of two anniversaries at 10%:
        1000 × 1.21 + 1000 × 1.1 = 2310.
        """
        cash_flows = [
            CashFlow(date(2023, 1, 1), Decimal("-1000")),
            CashFlow(date(2024, 1, 1), Decimal("-1000")),
            CashFlow(date(2025, 1, 1), Decimal("2310")),
        ]
        assert float(calculate_xirr(cash_flows)) == pytest.approx(0.1, abs=1e-6)

    def test_order_of_flows_does_not_matter(self):
        flows = [
            CashFlow(date(2023, 1, 1), Decimal("-1000")),
            CashFlow(date(2024, 1, 1), Decimal("-1000")),
            CashFlow(date(2025, 1, 1), Decimal("2310")),
        ]
        assert calculate_xirr(list(reversed(flows))) == calculate_xirr(flows)

    def test_bisection_fallback(self):
        """A far-off initial guess sends Newton out of range."""
        cash_flows = [
            CashFlow(date(2023, 1, 1), Decimal("-10000")),
            CashFlow(date(2024, 1, 1), Decimal("15000")),
        ]
        result = solve_xirr(cash_flows, initial_guess=9.9)

        assert result.method == "bisection"
        assert float(result.rate) == pytest.approx(0.5, abs=1e-6)

    def test_no_root_in_range(self):
        """Losing 99.9% in a year needs a rate below -99%."""
        cash_flows = [
            CashFlow(date(2023, 1, 1), Decimal("-1000")),
            CashFlow(date(2024, 1, 1), Decimal("1")),
        ]
        with pytest.raises(XIRRNonConvergenceError):
            solve_xirr(cash_flows)

    def test_single_flow_raises(self):
        with pytest.raises(InsufficientCashFlowError) as exc_info:
            solve_xirr([CashFlow(date(2023, 1, 1), Decimal("-1000"))])
        assert exc_info.value.flow_count == 1

    def test_empty_flows_raises(self):
        with pytest.raises(InsufficientCashFlowError):
            solve_xirr([])

    def test_same_sign_raises(self):
        cash_flows = [
            CashFlow(date(2023, 1, 1), Decimal("-1000")),
            CashFlow(date(2024, 1, 1), Decimal("-1000")),
        ]
        with pytest.raises(InsufficientCashFlowError):
            solve_xirr(cash_flows)


# =============================================================================
# ROLLING RETURN TESTS
# =============================================================================

def monthly_curve(start: date, months: int, growth: Decimal, base: Decimal = Decimal("1000")) -> list[GrowthPoint]:
    """Month-end curve growing by a constant factor each month."""
    return [
        GrowthPoint(date=month_end(add_months(start, k)), value=base * growth ** k)
        for k in range(months)
    ]


class TestRollingReturns:
    """Tests for calculate_rolling_returns."""

    def test_constant_geometric_growth(self):
        """1% per month compounds to 12.6825% over any 12 months."""
        curve = monthly_curve(date(2023, 1, 1), 24, Decimal("1.01"))
        result = calculate_rolling_returns(curve, window_months=12)

        assert len(result) == 12
        assert result[0].date == date(2024, 1, 31)
        assert result[-1].date == date(2024, 12, 31)
        assert {p.return_pct for p in result} == {Decimal("12.6825")}

    def test_points_without_anchor_omitted(self):
        curve = monthly_curve(date(2023, 1, 1), 6, Decimal("1.01"))
        assert calculate_rolling_returns(curve, window_months=12) == []

    def test_month_end_anchors_on_month_end(self):
        """2024-02-29 looks back to 2024-01-31, not 2024-01-29."""
        curve = [
            GrowthPoint(date(2024, 1, 29), Decimal("50")),
            GrowthPoint(date(2024, 1, 31), Decimal("100")),
            GrowthPoint(date(2024, 2, 29), Decimal("110")),
        ]
        result = calculate_rolling_returns(curve, window_months=1)
        assert [(p.date, p.return_pct) for p in result] == [(date(2024, 2, 29), Decimal("10.0000"))]

    def test_anchor_is_latest_point_on_or_before_target(self):
        curve = [
            GrowthPoint(date(2024, 2, 10), Decimal("100")),
            GrowthPoint(date(2024, 2, 20), Decimal("200")),
            GrowthPoint(date(2024, 3, 15), Decimal("110")),
        ]
        result = calculate_rolling_returns(curve, window_months=1)
        assert [(p.date, p.return_pct) for p in result] == [(date(2024, 3, 15), Decimal("10.0000"))]

    def test_zero_anchor_skipped(self):
        curve = [
            GrowthPoint(date(2023, 1, 31), Decimal("0")),
            GrowthPoint(date(2023, 2, 28), Decimal("100")),
            GrowthPoint(date(2023, 3, 31), Decimal("110")),
        ]
        result = calculate_rolling_returns(curve, window_months=1)
        assert [p.date for p in result] == [date(2023, 3, 31)]
        assert result[0].return_pct == Decimal("10.0000")

    def test_negative_window_return(self):
        curve = [
            GrowthPoint(date(2023, 1, 31), Decimal("200")),
            GrowthPoint(date(2023, 2, 28), Decimal("150")),
        ]
        [point] = calculate_rolling_returns(curve, window_months=1)
        assert point.return_pct == Decimal("-25.0000")

    @pytest.mark.parametrize("window", [0, -3])
    def test_invalid_window_raises(self, window):
        with pytest.raises(ValidationError) as exc_info:
            calculate_rolling_returns([], window_months=window)
        assert exc_info.value.field == "window_months"
