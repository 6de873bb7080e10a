# backend/portfolio_analytics/services/constants.py
"""
Centralized constants for the analytics engine.

This module provides a single source of truth for all business constants
used across the ledger, valuation and analytics packages. Values that are
expected to be tuned per deployment (thresholds shown to users) are
exposed through portfolio_analytics.config.Settings instead, with the
defaults below.

Usage:
    from portfolio_analytics.services.constants import (
        XIRR_MAX_ITERATIONS,
        DEFAULT_CATEGORY_BENCHMARKS,
    )
"""

from decimal import Decimal


# =============================================================================
# FINANCIAL CALENDAR CONSTANTS
# =============================================================================

# Length of a year for XIRR discounting (averages in the leap day)
DAYS_PER_YEAR: float = 365.25


# =============================================================================
# XIRR SOLVER SETTINGS
# =============================================================================

# Newton-Raphson iteration budget before falling back to bisection
XIRR_MAX_ITERATIONS: int = 100

# Bisection halves [-0.99, 10] well below the rate tolerance in ~30 steps;
# the cap only guards against pathological NPV functions
XIRR_BISECTION_MAX_ITERATIONS: int = 200

# Converged when |NPV| falls below this (currency units)
XIRR_NPV_TOLERANCE: float = 1e-6

# ...or when the rate moves less than this between iterations
XIRR_RATE_TOLERANCE: float = 1e-7

# Newton seed (10% annual return)
XIRR_INITIAL_GUESS: float = 0.1

# Rate search bounds: -99% (near total loss) to +1000%
XIRR_LOWER_BOUND: float = -0.99
XIRR_UPPER_BOUND: float = 10.0

# Derivatives smaller than this make the Newton step meaningless
XIRR_MIN_DERIVATIVE: float = 1e-12

# Precision of the XIRR result (8 decimal places)
XIRR_PRECISION: Decimal = Decimal("0.00000001")


# =============================================================================
# LEDGER SETTINGS
# =============================================================================

# Relative tolerance for the |amount| ≈ units × price invariant
AMOUNT_TOLERANCE_RATIO: Decimal = Decimal("0.01")


# =============================================================================
# RESAMPLING
# =============================================================================

DEFAULT_RESOLUTION: str = "monthly"

# Snapshot performance section
SNAPSHOT_ROLLING_WINDOW_MONTHS: int = 12
SNAPSHOT_TOP_DRAWDOWNS: int = 3


# =============================================================================
# RISK & CONCENTRATION DEFAULTS
# =============================================================================

# Single holding weight (percent) above which concentration risk is flagged
DEFAULT_CONCENTRATION_THRESHOLD_PCT: Decimal = Decimal("30")

# Excess over the threshold (percentage points) for each severity step
CONCENTRATION_MEDIUM_EXCESS_PCT: Decimal = Decimal("10")
CONCENTRATION_HIGH_EXCESS_PCT: Decimal = Decimal("20")

# Over-diversification: more than N holdings and none above the small weight
DEFAULT_OVER_DIVERSIFICATION_HOLDINGS: int = 15
DEFAULT_SMALL_HOLDING_WEIGHT_PCT: Decimal = Decimal("5")

# Volatility proxy (annualized percent) per fund category.
# Mirrors the volatility assumptions of each category's benchmark index.
DEFAULT_CATEGORY_RISK_SCORES: dict[str, Decimal] = {
    "Large Cap": Decimal("15"),
    "Mid Cap": Decimal("20"),
    "Small Cap": Decimal("25"),
    "Debt": Decimal("3"),
    "Hybrid": Decimal("8"),
    "ELSS": Decimal("16"),
    "Multi Cap": Decimal("16"),
    "Flexi Cap": Decimal("16"),
}

# Fallback volatility proxy per asset type when the category is unknown
DEFAULT_ASSET_TYPE_RISK_SCORES: dict[str, Decimal] = {
    "EQUITY": Decimal("20"),
    "MUTUAL_FUND": Decimal("15"),
}

# Last resort when neither category nor asset type is known
FALLBACK_RISK_SCORE: Decimal = Decimal("15")


# =============================================================================
# BENCHMARKS
# =============================================================================

# Fund category -> benchmark index id
DEFAULT_CATEGORY_BENCHMARKS: dict[str, str] = {
    "Large Cap": "NIFTY50",
    "Mid Cap": "NIFTYMID150",
    "Small Cap": "NIFTYSML250",
    "Debt": "CRISILBOND",
    "ELSS": "NIFTY500",
    "Hybrid": "NIFTYHYBRID",
    "Multi Cap": "NIFTY500",
    "Flexi Cap": "NIFTY500",
}

# Outperformance band (percentage points) reported as "in line"
DEFAULT_BENCHMARK_IN_LINE_TOLERANCE_PCT: Decimal = Decimal("0.5")


# =============================================================================
# DECIMAL PRECISION CONSTANTS
# =============================================================================

# Currency amounts: 2 decimal places
CURRENCY_PRECISION: Decimal = Decimal("0.01")

# Units and per-unit prices: 8 decimal places
SHARE_PRECISION: Decimal = Decimal("0.00000001")

# Percentage values: 4 decimal places (e.g., 12.3456%)
PERCENTAGE_PRECISION: Decimal = Decimal("0.0001")


# =============================================================================
# UTILITY CONSTANTS
# =============================================================================

ZERO: Decimal = Decimal("0")
HUNDRED: Decimal = Decimal("100")
