# backend/portfolio_analytics/services/analytics/allocation.py
"""
Allocation breakdowns for the portfolio snapshot.

Groups current value by asset type and by category, and lists the
largest holdings. Slices are sorted by value, largest first.
"""

from collections.abc import Callable, Sequence
from decimal import Decimal, ROUND_HALF_UP

from portfolio_analytics.services.analytics.types import Allocation, AllocationSlice, TopHolding
from portfolio_analytics.services.constants import HUNDRED, PERCENTAGE_PRECISION, ZERO
from portfolio_analytics.services.valuation.types import HoldingSnapshot

UNKNOWN_ASSET_TYPE = "UNKNOWN"
UNCATEGORIZED = "Uncategorized"


def _weight(value: Decimal, total: Decimal) -> Decimal:
    if total <= ZERO:
        return ZERO
    return (value / total * HUNDRED).quantize(PERCENTAGE_PRECISION, rounding=ROUND_HALF_UP)


def _group(
        snapshots: Sequence[HoldingSnapshot],
        label_of: Callable[[HoldingSnapshot], str],
        total: Decimal,
) -> list[AllocationSlice]:
    totals: dict[str, Decimal] = {}
    for snap in snapshots:
        label = label_of(snap)
        totals[label] = totals.get(label, ZERO) + snap.current_value

    slices = [
        AllocationSlice(label=label, value=value, weight_pct=_weight(value, total))
        for label, value in totals.items()
    ]
    slices.sort(key=lambda s: (-s.value, s.label))
    return slices


def calculate_allocation(snapshots: Sequence[HoldingSnapshot], top_n: int = 5) -> Allocation:
    """
    Allocation by asset type, by category, and the top_n largest holdings.

    Args:
        snapshots: HoldingSnapshot per held holding
        top_n: Number of holdings to list

    Returns:
        Allocation (empty lists for an empty portfolio)
    """
    total = sum((s.current_value for s in snapshots), ZERO)

    by_asset_type = _group(
        snapshots,
        lambda s: s.asset_type.value if s.asset_type is not None else UNKNOWN_ASSET_TYPE,
        total,
    )
    by_category = _group(snapshots, lambda s: s.category or UNCATEGORIZED, total)

    largest = sorted(snapshots, key=lambda s: (-s.current_value, s.holding_id))[:top_n]
    top_holdings = [
        TopHolding(
            holding_id=s.holding_id,
            name=s.name,
            value=s.current_value,
            weight_pct=_weight(s.current_value, total),
        )
        for s in largest
    ]

    return Allocation(by_asset_type=by_asset_type, by_category=by_category, top_holdings=top_holdings)
