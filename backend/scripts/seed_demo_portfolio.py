#!/usr/bin/env python3
# backend/scripts/seed_demo_portfolio.py
"""
Seed an in-memory demo portfolio and print its analytics snapshot as JSON.

The demo holds five mutual funds bought through monthly SIPs plus lump
sums, and four equities bought in a few tranches. Prices move linearly
from a starting NAV to the current NAV so each holding ends near its
target return. Benchmark indices grow at a fixed annual rate.

Usage:
    cd backend
    python -m scripts.seed_demo_portfolio
"""
import logging
import sys
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path

# Setup path to import portfolio_analytics when run as a plain script
backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from portfolio_analytics.models import (
    AssetType,
    HoldingMetadata,
    PricePoint,
    Transaction,
    TransactionKind,
)
from portfolio_analytics.schemas.mappers import map_snapshot
from portfolio_analytics.services.analytics.service import AnalyticsService
from portfolio_analytics.services.portfolio_store import InMemoryPortfolioStore
from portfolio_analytics.utils.context import set_correlation_id
from portfolio_analytics.utils.date_utils import add_months
from portfolio_analytics.utils.logging import setup_logging

logger = logging.getLogger(__name__)

DEMO_PORTFOLIO_ID = "demo"
DEMO_AS_OF = date(2026, 1, 21)

NAV_PRECISION = Decimal("0.0001")
UNIT_PRECISION = Decimal("0.00000001")

# (holding_id, name, asset_type, category, current_nav, target returns %)
HOLDINGS = [
    ("INF123456789", "HDFC Top 100 Fund Direct Growth", AssetType.MUTUAL_FUND, "Large Cap", "58.42", 12),
    ("INF234567890", "SBI Midcap Fund Direct Growth", AssetType.MUTUAL_FUND, "Mid Cap", "45.87", 18),
    ("INF345678901", "Axis Long Term Equity Fund Direct Growth", AssetType.MUTUAL_FUND, "ELSS", "32.15", 10),
    ("INF456789012", "ICICI Prudential Balanced Advantage Fund Direct Growth",
     AssetType.MUTUAL_FUND, "Hybrid", "28.93", 6),
    ("INF567890123", "HDFC Corporate Bond Fund Direct Growth", AssetType.MUTUAL_FUND, "Debt", "22.78", -2),
    ("RELIANCE", "Reliance Industries Ltd", AssetType.EQUITY, None, "2845.50", 15),
    ("HDFCBANK", "HDFC Bank Ltd", AssetType.EQUITY, None, "1687.20", 8),
    ("INFY", "Infosys Ltd", AssetType.EQUITY, None, "1456.75", 12),
    ("TATASTEEL", "Tata Steel Ltd", AssetType.EQUITY, None, "142.30", -5),
]

# holding_id -> (first SIP date, SIP amount, SIP months, lump sums)
SIP_PLANS = {
    "INF123456789": (date(2023, 1, 5), 5000, 36, [50000, 30000]),
    "INF234567890": (date(2024, 1, 5), 3000, 24, [40000]),
    "INF345678901": (date(2022, 1, 5), 10000, 48, [150000]),
    "INF456789012": (date(2023, 1, 5), 4000, 36, [25000]),
    "INF567890123": (date(2023, 7, 5), 7000, 30, [60000, 40000]),
}

EQUITY_PURCHASES = {
    "RELIANCE": [(date(2024, 3, 15), 50000), (date(2024, 9, 20), 40000), (date(2025, 6, 10), 45000)],
    "HDFCBANK": [
        (date(2023, 8, 12), 35000), (date(2024, 2, 18), 30000),
        (date(2024, 10, 5), 25000), (date(2025, 7, 22), 40000),
    ],
    "INFY": [(date(2024, 4, 8), 30000), (date(2024, 11, 15), 35000), (date(2025, 8, 25), 28000)],
    "TATASTEEL": [(date(2024, 6, 20), 20000), (date(2025, 3, 10), 22000)],
}

# index_id -> (level on BENCHMARK_START, annual growth)
BENCHMARKS = {
    "NIFTY50": (17000, 0.11),
    "NIFTYMID150": (11000, 0.16),
    "NIFTYSML250": (9000, 0.14),
    "NIFTY500": (15000, 0.12),
    "NIFTYHYBRID": (12000, 0.09),
    "CRISILBOND": (4000, 0.07),
}
BENCHMARK_START = date(2021, 12, 1)


class LinearPricePath:
    """NAV moving in a straight line from a start level to the current NAV."""

    def __init__(self, start: date, current_nav: Decimal, returns_pct: int):
        self.start = start
        self.current_nav = current_nav
        self.start_nav = current_nav / (1 + Decimal(2 * returns_pct) / 100)

    def price_on(self, day: date) -> Decimal:
        total_days = (DEMO_AS_OF - self.start).days
        elapsed = (day - self.start).days
        price = self.start_nav + (self.current_nav - self.start_nav) * Decimal(elapsed) / Decimal(total_days)
        return price.quantize(NAV_PRECISION, rounding=ROUND_HALF_UP)

    def monthly_points(self) -> list[PricePoint]:
        points = []
        day = self.start
        while day < DEMO_AS_OF:
            points.append(PricePoint(date=day, price=self.price_on(day)))
            day = add_months(day, 1)
        return points


def _purchase(holding_id: str, day: date, amount: int, path: LinearPricePath, kind: TransactionKind) -> Transaction:
    price = path.price_on(day)
    units = (Decimal(amount) / price).quantize(UNIT_PRECISION, rounding=ROUND_HALF_UP)
    return Transaction(
        holding_id=holding_id,
        date=day,
        kind=kind,
        units=units,
        amount=Decimal(amount),
        price_per_unit=price,
    )


def _sip_transactions(holding_id: str, path: LinearPricePath) -> list[Transaction]:
    first, sip_amount, months, lump_sums = SIP_PLANS[holding_id]
    transactions = [
        _purchase(holding_id, add_months(first, i), sip_amount, path, TransactionKind.SIP)
        for i in range(months)
    ]
    # Lump sums are spread evenly across the SIP period
    for i, amount in enumerate(lump_sums):
        day = add_months(first, months * i // len(lump_sums))
        transactions.append(_purchase(holding_id, day, amount, path, TransactionKind.BUY))
    return transactions


def _benchmark_points(base: int, annual_growth: float) -> list[PricePoint]:
    points = []
    month = 0
    day = BENCHMARK_START
    while day <= DEMO_AS_OF:
        level = base * (1 + annual_growth) ** (month / 12)
        points.append(PricePoint(date=day, price=Decimal(str(round(level, 2)))))
        month += 1
        day = add_months(BENCHMARK_START, month)
    return points


def build_demo_store() -> InMemoryPortfolioStore:
    """Build the in-memory store holding the demo portfolio and benchmarks."""
    transactions: list[Transaction] = []
    metadata: list[HoldingMetadata] = []
    price_history: dict[str, list[PricePoint]] = {}

    for holding_id, name, asset_type, category, nav, returns_pct in HOLDINGS:
        current_nav = Decimal(nav)
        if holding_id in SIP_PLANS:
            start = SIP_PLANS[holding_id][0]
            path = LinearPricePath(start, current_nav, returns_pct)
            transactions.extend(_sip_transactions(holding_id, path))
        else:
            purchases = EQUITY_PURCHASES[holding_id]
            path = LinearPricePath(purchases[0][0], current_nav, returns_pct)
            transactions.extend(
                _purchase(holding_id, day, amount, path, TransactionKind.BUY)
                for day, amount in purchases
            )

        price_history[holding_id] = path.monthly_points()
        metadata.append(HoldingMetadata(
            holding_id=holding_id,
            name=name,
            asset_type=asset_type,
            category=category,
            current_price=current_nav,
            price_date=DEMO_AS_OF,
        ))

    store = InMemoryPortfolioStore()
    store.add_portfolio(DEMO_PORTFOLIO_ID, transactions, metadata, price_history)
    for index_id, (base, growth) in BENCHMARKS.items():
        store.add_benchmark(index_id, _benchmark_points(base, growth))

    logger.info(f"Seeded demo portfolio: {len(transactions)} transactions, {len(metadata)} holdings")
    return store


def main() -> None:
    setup_logging()
    set_correlation_id("seed-demo")

    service = AnalyticsService(build_demo_store())
    snapshot = service.get_portfolio_snapshot(DEMO_PORTFOLIO_ID, as_of=DEMO_AS_OF)
    print(map_snapshot(snapshot).model_dump_json(indent=2))


if __name__ == "__main__":
    main()
