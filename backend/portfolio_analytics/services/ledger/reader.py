# backend/portfolio_analytics/services/ledger/reader.py
"""
Transaction Ledger Reader.

Turns a portfolio's raw transactions into an immutable Ledger:
1. Converts validated input rows (TransactionRow) into Transactions
2. Drops duplicates: same holding, date and signed amount
3. Normalises signs (SELL units negative, purchase amounts negative)
4. Groups by holding and sorts each holding ascending by date
5. Collects data integrity warnings

Data issues are reported, not rejected: an amount that disagrees with
units × price, or a sell that exceeds the units held, becomes a warning
the caller can surface to the user.

Usage:
    reader = LedgerReader()
    ledger = reader.read(transactions)

    timeline = ledger.timeline("119551")
    flows = ledger.cash_flows()
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from portfolio_analytics.models import Transaction, TransactionKind
from portfolio_analytics.schemas.ledger import TransactionRow
from portfolio_analytics.services.constants import AMOUNT_TOLERANCE_RATIO, ZERO
from portfolio_analytics.services.exceptions import ValidationError
from portfolio_analytics.services.ledger.types import HoldingTimeline, Ledger, LedgerEntry

logger = logging.getLogger(__name__)


class LedgerReader:
    """
    Reads transactions into a Ledger.

    Stateless; one instance can be shared across threads.
    """

    def __init__(self, amount_tolerance: Decimal = AMOUNT_TOLERANCE_RATIO) -> None:
        self._amount_tolerance = amount_tolerance

    def read(self, transactions: Iterable[Transaction | TransactionRow]) -> Ledger:
        """
        Build a Ledger from transactions.

        Args:
            transactions: Transactions or validated TransactionRow models,
                          in any order

        Returns:
            Ledger with one HoldingTimeline per holding that has
            at least one transaction

        Raises:
            ValidationError: If a transaction has non-positive units or a
                             negative price
        """
        warnings: list[str] = []
        seen: set[tuple] = set()
        by_holding: dict[str, list[LedgerEntry]] = {}
        duplicates = 0

        for raw in transactions:
            txn = raw.to_domain() if isinstance(raw, TransactionRow) else raw
            self._validate(txn)

            entry = self._normalise(txn)
            # Signed amount separates purchases from sells, so BUY and SIP on the
            # same day for the same amount are duplicates
            key = (entry.holding_id, entry.date, entry.amount)
            if key in seen:
                duplicates += 1
                continue
            seen.add(key)

            mismatch = self._check_amount(entry)
            if mismatch:
                warnings.append(mismatch)

            by_holding.setdefault(entry.holding_id, []).append(entry)

        if duplicates:
            logger.debug(f"Dropped {duplicates} duplicate transaction(s)")
            warnings.append(f"Ignored {duplicates} duplicate transaction(s)")

        timelines: dict[str, HoldingTimeline] = {}
        for holding_id, entries in by_holding.items():
            # sort() is stable, so same-day entries keep their input order
            entries.sort(key=lambda e: e.date)
            warnings.extend(self._check_oversells(holding_id, entries))
            timelines[holding_id] = HoldingTimeline(holding_id=holding_id, entries=tuple(entries))

        for message in warnings:
            logger.warning(message)

        return Ledger(timelines=timelines, warnings=tuple(warnings))

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _validate(txn: Transaction) -> None:
        if txn.units <= ZERO:
            raise ValidationError(
                f"Transaction for '{txn.holding_id}' on {txn.date} has non-positive units ({txn.units})",
                field="units",
            )
        if txn.price_per_unit < ZERO:
            raise ValidationError(
                f"Transaction for '{txn.holding_id}' on {txn.date} has a negative price ({txn.price_per_unit})",
                field="price_per_unit",
            )

    @staticmethod
    def _normalise(txn: Transaction) -> LedgerEntry:
        """
        Apply the investor's sign convention.

        BUY / SIP:  units +, amount -
        SELL:       units -, amount +
        """
        if txn.kind == TransactionKind.SELL:
            units = -txn.units
            amount = abs(txn.amount)
        else:
            units = txn.units
            amount = -abs(txn.amount)

        return LedgerEntry(
            holding_id=txn.holding_id,
            date=txn.date,
            kind=txn.kind,
            units=units,
            amount=amount,
            price_per_unit=txn.price_per_unit,
        )

    def _check_amount(self, entry: LedgerEntry) -> str | None:
        """Warn when |amount| differs from units × price by more than the tolerance."""
        expected = abs(entry.units) * entry.price_per_unit
        actual = abs(entry.amount)

        if expected == ZERO:
            if actual == ZERO:
                return None
        elif abs(actual - expected) / expected <= self._amount_tolerance:
            return None

        return (
            f"{entry.kind.value} of '{entry.holding_id}' on {entry.date}: amount {actual} "
            f"does not match units × price ({expected})"
        )

    @staticmethod
    def _check_oversells(holding_id: str, entries: list[LedgerEntry]) -> list[str]:
        """Warn about sells that take the running unit balance below zero."""
        warnings = []
        running = ZERO
        for entry in entries:
            running += entry.units
            if running < ZERO:
                warnings.append(
                    f"SELL of '{holding_id}' on {entry.date} exceeds units held "
                    f"(balance {running})"
                )
        return warnings
