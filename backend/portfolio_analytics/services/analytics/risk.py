# backend/portfolio_analytics/services/analytics/risk.py
"""
Risk and concentration classification.

This module contains pure functions for holding-level risk analysis:
- Weights: Share of portfolio value per holding
- Holding Return: Gain on the average-cost basis of the units held
- Risk Score: Volatility proxy from configuration tables
  (holding override > category table > asset-type default)
- Quadrants: Risk-return classification split on the medians
- Concentration: Largest single-holding weight vs a threshold
- Diversification: Too many holdings, all of them small

All functions are stateless and operate on Decimal values for precision.
No external dependencies (scipy, numpy) - uses only `statistics` stdlib.

Formulas:
    weight_pct = current_value / Σ current_value × 100
    return_pct = (current_value - total_invested) / total_invested × 100
    quadrant   = (return >= median_return ? High : Low) Return
                 (risk   >= median_risk   ? High : Low) Risk
"""

import logging
import statistics
from collections.abc import Mapping, Sequence
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from portfolio_analytics.services.analytics.types import (
    ConcentrationRisk,
    ConcentrationSeverity,
    DiversificationCheck,
    Quadrant,
    RiskMetrics,
    RiskReturnEntry,
)
from portfolio_analytics.services.constants import (
    CONCENTRATION_HIGH_EXCESS_PCT,
    CONCENTRATION_MEDIUM_EXCESS_PCT,
    DEFAULT_ASSET_TYPE_RISK_SCORES,
    DEFAULT_CATEGORY_RISK_SCORES,
    DEFAULT_CONCENTRATION_THRESHOLD_PCT,
    DEFAULT_OVER_DIVERSIFICATION_HOLDINGS,
    DEFAULT_SMALL_HOLDING_WEIGHT_PCT,
    FALLBACK_RISK_SCORE,
    HUNDRED,
    PERCENTAGE_PRECISION,
    ZERO,
)
from portfolio_analytics.services.valuation.types import HoldingSnapshot

logger = logging.getLogger(__name__)


# =============================================================================
# WEIGHTS, RETURNS & RISK SCORES
# =============================================================================

def _pct(value: Decimal) -> Decimal:
    return value.quantize(PERCENTAGE_PRECISION, rounding=ROUND_HALF_UP)


def calculate_weights(
        snapshots: Sequence[HoldingSnapshot],
        rounded: bool = True,
) -> dict[str, Decimal]:
    """
    Weight of each holding in percent of total current value.

    All weights are 0 when the portfolio has no value. With rounded=False
    the weights keep full Decimal precision, for threshold checks.
    """
    total = sum((s.current_value for s in snapshots), ZERO)
    if total <= ZERO:
        return {s.holding_id: ZERO for s in snapshots}
    weights = {s.holding_id: s.current_value / total * HUNDRED for s in snapshots}
    if rounded:
        return {holding_id: _pct(w) for holding_id, w in weights.items()}
    return weights


def calculate_holding_return(snapshot: HoldingSnapshot) -> Decimal | None:
    """
    Unrealized return of the units held, in percent.

    Returns:
        Percent return, or None if nothing is invested or the holding is unpriced
    """
    if snapshot.total_invested == ZERO or not snapshot.is_priced:
        return None
    return _pct((snapshot.current_value - snapshot.total_invested) / snapshot.total_invested * HUNDRED)


def resolve_risk_score(
        snapshot: HoldingSnapshot,
        category_scores: Mapping[str, Decimal] | None = None,
        asset_type_scores: Mapping[str, Decimal] | None = None,
) -> tuple[Decimal, bool]:
    """
    Risk score for a holding.

    Lookup order: the holding's own override, the category table, the
    asset-type table, then FALLBACK_RISK_SCORE.

    Returns:
        (risk_score, is_configured) - is_configured is False when the
        fallback was used
    """
    if snapshot.risk_score is not None:
        return snapshot.risk_score, True

    categories = DEFAULT_CATEGORY_RISK_SCORES if category_scores is None else category_scores
    if snapshot.category and snapshot.category in categories:
        return categories[snapshot.category], True

    asset_types = DEFAULT_ASSET_TYPE_RISK_SCORES if asset_type_scores is None else asset_type_scores
    if snapshot.asset_type is not None and snapshot.asset_type.value in asset_types:
        return asset_types[snapshot.asset_type.value], True

    return FALLBACK_RISK_SCORE, False


# =============================================================================
# QUADRANTS
# =============================================================================

def classify_quadrant(
        return_pct: Decimal,
        risk_score: Decimal,
        median_return: Decimal,
        median_risk: Decimal,
) -> Quadrant:
    """Values equal to the median count as High."""
    high_return = return_pct >= median_return
    high_risk = risk_score >= median_risk

    if high_return and not high_risk:
        return Quadrant.HIGH_RETURN_LOW_RISK
    if high_return:
        return Quadrant.HIGH_RETURN_HIGH_RISK
    if not high_risk:
        return Quadrant.LOW_RETURN_LOW_RISK
    return Quadrant.LOW_RETURN_HIGH_RISK


# =============================================================================
# CONCENTRATION & DIVERSIFICATION
# =============================================================================

def assess_concentration(
        weights: Mapping[str, Decimal],
        names: Mapping[str, str] | None = None,
        threshold_pct: Decimal = DEFAULT_CONCENTRATION_THRESHOLD_PCT,
) -> ConcentrationRisk:
    """
    Flag a single holding that dominates the portfolio.

    Severity by excess over the threshold:
        NONE    - max weight <= threshold
        LOW     - excess < 10 points
        MEDIUM  - excess < 20 points
        HIGH    - excess >= 20 points

    Pass unrounded weights; max_weight_pct is rounded to 4 places.
    """
    names = names or {}

    if not weights:
        return ConcentrationRisk(
            has_risk=False,
            severity=ConcentrationSeverity.NONE,
            max_weight_pct=ZERO,
            threshold_pct=threshold_pct,
            holding_id=None,
            holding_name=None,
            explanation="Portfolio has no holdings",
        )

    # Largest weight; ties resolve to the smallest holding_id
    holding_id = min(weights, key=lambda h: (-weights[h], h))
    exact_weight = weights[holding_id]
    max_weight = _pct(exact_weight)
    name = names.get(holding_id, holding_id)

    if exact_weight <= threshold_pct:
        return ConcentrationRisk(
            has_risk=False,
            severity=ConcentrationSeverity.NONE,
            max_weight_pct=max_weight,
            threshold_pct=threshold_pct,
            holding_id=holding_id,
            holding_name=name,
            explanation=(
                f"Largest holding {name} is {max_weight:.2f}% of the portfolio, "
                f"within the {threshold_pct:.0f}% limit"
            ),
        )

    excess = exact_weight - threshold_pct
    if excess < CONCENTRATION_MEDIUM_EXCESS_PCT:
        severity = ConcentrationSeverity.LOW
    elif excess < CONCENTRATION_HIGH_EXCESS_PCT:
        severity = ConcentrationSeverity.MEDIUM
    else:
        severity = ConcentrationSeverity.HIGH

    return ConcentrationRisk(
        has_risk=True,
        severity=severity,
        max_weight_pct=max_weight,
        threshold_pct=threshold_pct,
        holding_id=holding_id,
        holding_name=name,
        explanation=(
            f"{name} is {max_weight:.2f}% of the portfolio, "
            f"{excess:.2f} points above the {threshold_pct:.0f}% limit"
        ),
    )


def assess_diversification(
        weights: Mapping[str, Decimal],
        max_holdings: int = DEFAULT_OVER_DIVERSIFICATION_HOLDINGS,
        small_weight_pct: Decimal = DEFAULT_SMALL_HOLDING_WEIGHT_PCT,
) -> DiversificationCheck:
    """
    Flag portfolios spread over too many small holdings.

    Over-diversified when holdings > max_holdings AND every weight is
    below small_weight_pct.
    """
    total_holdings = len(weights)
    exact_max = max(weights.values(), default=ZERO)
    max_weight = _pct(exact_max)
    is_over = total_holdings > max_holdings and exact_max < small_weight_pct

    if is_over:
        explanation = (
            f"{total_holdings} holdings, none above {small_weight_pct:.0f}% "
            f"(largest {max_weight:.2f}%): consider consolidating overlapping funds"
        )
    elif total_holdings > max_holdings:
        explanation = (
            f"{total_holdings} holdings, but the largest is {max_weight:.2f}% "
            f"so the portfolio still has meaningful positions"
        )
    else:
        explanation = f"{total_holdings} holdings, within the {max_holdings}-holding guideline"

    return DiversificationCheck(
        is_over_diversified=is_over,
        total_holdings=total_holdings,
        max_weight_pct=max_weight,
        explanation=explanation,
    )


# =============================================================================
# COMBINED CLASSIFIER
# =============================================================================

class RiskClassifier:
    """
    Calculator for all holding-level risk metrics.

    Thresholds and risk score tables are injected so callers can apply
    deployment settings; defaults come from services/constants.py.
    """

    def __init__(
            self,
            concentration_threshold_pct: Decimal = DEFAULT_CONCENTRATION_THRESHOLD_PCT,
            over_diversification_holdings: int = DEFAULT_OVER_DIVERSIFICATION_HOLDINGS,
            small_holding_weight_pct: Decimal = DEFAULT_SMALL_HOLDING_WEIGHT_PCT,
            category_scores: Mapping[str, Decimal] | None = None,
            asset_type_scores: Mapping[str, Decimal] | None = None,
    ) -> None:
        self.concentration_threshold_pct = concentration_threshold_pct
        self.over_diversification_holdings = over_diversification_holdings
        self.small_holding_weight_pct = small_holding_weight_pct
        self.category_scores = category_scores
        self.asset_type_scores = asset_type_scores

    def classify(self, snapshots: Sequence[HoldingSnapshot], as_of: date) -> RiskMetrics:
        """
        Risk-return entries, concentration and diversification for held holdings.

        Args:
            snapshots: HoldingSnapshot per held holding
            as_of: Valuation date of the snapshots

        Returns:
            RiskMetrics (entries sorted by weight, largest first)
        """
        warnings: list[str] = []
        exact_weights = calculate_weights(snapshots, rounded=False)
        weights = {holding_id: _pct(w) for holding_id, w in exact_weights.items()}
        names = {s.holding_id: s.name for s in snapshots}

        rows: list[tuple[HoldingSnapshot, Decimal | None, Decimal]] = []
        for snap in snapshots:
            if not snap.is_priced:
                warnings.append(f"No price for {snap.name}; return not available")
            risk_score, configured = resolve_risk_score(snap, self.category_scores, self.asset_type_scores)
            if not configured:
                warnings.append(f"No risk score configured for {snap.name}; using default {risk_score}")
            rows.append((snap, calculate_holding_return(snap), risk_score))

        known_returns = [r for _, r, _ in rows if r is not None]
        median_return = statistics.median(known_returns) if known_returns else None
        median_risk = statistics.median([risk for _, _, risk in rows]) if rows else None

        entries = []
        for snap, return_pct, risk_score in rows:
            quadrant = None
            if return_pct is not None and median_return is not None:
                quadrant = classify_quadrant(return_pct, risk_score, median_return, median_risk)
            entries.append(RiskReturnEntry(
                holding_id=snap.holding_id,
                name=snap.name,
                return_pct=return_pct,
                risk_score=risk_score,
                weight_pct=weights[snap.holding_id],
                quadrant=quadrant,
            ))

        entries.sort(key=lambda e: (-e.weight_pct, e.holding_id))

        return RiskMetrics(
            as_of=as_of,
            entries=entries,
            median_return_pct=median_return,
            median_risk_score=median_risk,
            concentration=assess_concentration(exact_weights, names, self.concentration_threshold_pct),
            diversification=assess_diversification(
                exact_weights,
                self.over_diversification_holdings,
                self.small_holding_weight_pct,
            ),
            warnings=warnings,
        )
