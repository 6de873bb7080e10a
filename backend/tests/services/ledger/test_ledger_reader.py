# backend/tests/services/ledger/test_ledger_reader.py
"""
Unit tests for the ledger reader and ledger types.

Test Coverage:
- LedgerReader.read: validation, sign normalisation, duplicates, warnings
- HoldingTimeline: as-of units (inclusive), average cost position
- Ledger: cash flows, timeline lookup
- TransactionRow: raw row validation and conversion
"""

from datetime import date
from decimal import Decimal

import pydantic
import pytest

from portfolio_analytics.models import TransactionKind
from portfolio_analytics.schemas.ledger import TransactionRow
from portfolio_analytics.services.exceptions import EmptyLedgerError, ValidationError
from portfolio_analytics.services.ledger.reader import LedgerReader
from portfolio_analytics.services.ledger.types import CashFlow, Ledger


@pytest.fixture
def reader() -> LedgerReader:
    return LedgerReader()


# =============================================================================
# VALIDATION
# =============================================================================

class TestValidation:
    """Transactions the reader refuses outright."""

    def test_zero_units_rejected(self, reader, make_txn):
        txn = make_txn("FUND_A", date(2024, 1, 1), 0, 100, amount=100)
        with pytest.raises(ValidationError) as exc_info:
            reader.read([txn])
        assert exc_info.value.field == "units"

    def test_negative_price_rejected(self, reader, make_txn):
        txn = make_txn("FUND_A", date(2024, 1, 1), 10, -1, amount=10)
        with pytest.raises(ValidationError) as exc_info:
            reader.read([txn])
        assert exc_info.value.field == "price_per_unit"

    def test_empty_input_gives_empty_ledger(self, reader):
        ledger = reader.read([])
        assert ledger.is_empty
        assert ledger.first_date is None
        assert ledger.cash_flows() == []


# =============================================================================
# NORMALISATION
# =============================================================================

class TestSignNormalisation:
    """Purchases are outflows, sells are inflows, whatever the input sign."""

    def test_buy_amount_becomes_negative(self, reader, make_txn):
        ledger = reader.read([make_txn("FUND_A", date(2024, 1, 1), 10, 100)])
        entry = ledger.timeline("FUND_A").entries[0]
        assert entry.units == Decimal("10")
        assert entry.amount == Decimal("-1000")

    def test_sip_treated_like_buy(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_A", date(2024, 1, 5), 50, 100, kind=TransactionKind.SIP, amount=-5000),
        ])
        entry = ledger.timeline("FUND_A").entries[0]
        assert entry.units == Decimal("50")
        assert entry.amount == Decimal("-5000")

    def test_sell_units_negative_amount_positive(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_A", date(2024, 1, 1), 10, 100),
            make_txn("FUND_A", date(2024, 2, 1), 5, 100, kind=TransactionKind.SELL, amount=-500),
        ])
        sell = ledger.timeline("FUND_A").entries[1]
        assert sell.units == Decimal("-5")
        assert sell.amount == Decimal("500")

    def test_entries_sorted_by_date(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_A", date(2024, 3, 1), 1, 100),
            make_txn("FUND_A", date(2024, 1, 1), 2, 100),
            make_txn("FUND_A", date(2024, 2, 1), 3, 100),
        ])
        dates = [e.date for e in ledger.timeline("FUND_A").entries]
        assert dates == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]

    def test_same_day_entries_keep_input_order(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_A", date(2024, 1, 1), 10, 100),
            make_txn("FUND_A", date(2024, 1, 1), 4, 100, kind=TransactionKind.SELL),
        ])
        kinds = [e.kind for e in ledger.timeline("FUND_A").entries]
        assert kinds == [TransactionKind.BUY, TransactionKind.SELL]


# =============================================================================
# DUPLICATES & WARNINGS
# =============================================================================

class TestWarnings:
    """Data issues are reported, not rejected."""

    def test_exact_duplicate_dropped(self, reader, make_txn):
        txn = make_txn("FUND_A", date(2024, 1, 1), 10, 100)
        ledger = reader.read([txn, txn])

        assert len(ledger.timeline("FUND_A").entries) == 1
        assert "Ignored 1 duplicate transaction(s)" in ledger.warnings

    def test_buy_and_sip_same_day_same_amount_is_duplicate(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_A", date(2024, 1, 5), 50, 100),
            make_txn("FUND_A", date(2024, 1, 5), 50, 100, kind=TransactionKind.SIP),
        ])

        [entry] = ledger.timeline("FUND_A").entries
        assert entry.kind == TransactionKind.BUY
        assert "Ignored 1 duplicate transaction(s)" in ledger.warnings

    def test_buy_and_sell_same_amount_are_kept(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_A", date(2024, 1, 5), 10, 100),
            make_txn("FUND_A", date(2024, 1, 5), 10, 100, kind=TransactionKind.SELL),
        ])
        assert len(ledger.timeline("FUND_A").entries) == 2

    def test_same_day_different_amount_is_not_duplicate(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_A", date(2024, 1, 1), 10, 100),
            make_txn("FUND_A", date(2024, 1, 1), 20, 100),
        ])
        assert len(ledger.timeline("FUND_A").entries) == 2
        assert ledger.warnings == ()

    def test_amount_mismatch_warns(self, reader, make_txn):
        # 10 × 100 = 1000, recorded 1100 (10% off)
        ledger = reader.read([make_txn("FUND_A", date(2024, 1, 1), 10, 100, amount=1100)])
        assert len(ledger.warnings) == 1
        assert "does not match units × price" in ledger.warnings[0]

    def test_amount_within_tolerance_is_silent(self, reader, make_txn):
        # 0.5% off, under the 1% tolerance
        ledger = reader.read([make_txn("FUND_A", date(2024, 1, 1), 10, 100, amount=1005)])
        assert ledger.warnings == ()

    def test_oversell_warns(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_A", date(2024, 1, 1), 5, 100),
            make_txn("FUND_A", date(2024, 2, 1), 10, 100, kind=TransactionKind.SELL),
        ])
        assert any("exceeds units held" in w for w in ledger.warnings)

    def test_warnings_are_logged(self, reader, make_txn, caplog):
        txn = make_txn("FUND_A", date(2024, 1, 1), 10, 100)
        with caplog.at_level("WARNING"):
            reader.read([txn, txn])
        assert "Ignored 1 duplicate transaction(s)" in caplog.text


# =============================================================================
# TIMELINE & LEDGER
# =============================================================================

class TestHoldingTimeline:
    """As-of queries over one holding."""

    def test_units_as_of_is_inclusive(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_A", date(2024, 1, 10), 10, 100),
            make_txn("FUND_A", date(2024, 2, 10), 5, 100),
        ])
        timeline = ledger.timeline("FUND_A")

        assert timeline.units_as_of(date(2024, 1, 9)) == Decimal("0")
        assert timeline.units_as_of(date(2024, 1, 10)) == Decimal("10")
        assert timeline.units_as_of(date(2024, 2, 10)) == Decimal("15")

    def test_average_cost_position(self, reader, make_txn):
        # Bought 10 @ 100 and 10 @ 200 -> average 150; sold 5
        ledger = reader.read([
            make_txn("FUND_A", date(2024, 1, 1), 10, 100),
            make_txn("FUND_A", date(2024, 2, 1), 10, 200),
            make_txn("FUND_A", date(2024, 3, 1), 5, 250, kind=TransactionKind.SELL),
        ])
        position = ledger.timeline("FUND_A").position_as_of(date(2024, 3, 1))

        assert position.units == Decimal("15")
        assert position.average_cost == Decimal("150")
        assert position.total_invested == Decimal("2250")
        assert position.has_position

    def test_position_before_first_trade(self, reader, make_txn):
        ledger = reader.read([make_txn("FUND_A", date(2024, 1, 1), 10, 100)])
        position = ledger.timeline("FUND_A").position_as_of(date(2023, 12, 31))

        assert position.units == Decimal("0")
        assert position.average_cost is None
        assert not position.has_position


class TestLedger:
    """Portfolio-level ledger queries."""

    def test_unknown_holding_raises(self, reader, make_txn):
        ledger = reader.read([make_txn("FUND_A", date(2024, 1, 1), 10, 100)])
        with pytest.raises(EmptyLedgerError):
            ledger.timeline("MISSING")

    def test_cash_flows_merged_and_sorted(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_B", date(2024, 2, 1), 1, 300),
            make_txn("FUND_A", date(2024, 1, 1), 2, 100),
            make_txn("FUND_A", date(2024, 3, 1), 1, 150, kind=TransactionKind.SELL),
        ])
        assert ledger.cash_flows() == [
            CashFlow(date(2024, 1, 1), Decimal("-200")),
            CashFlow(date(2024, 2, 1), Decimal("-300")),
            CashFlow(date(2024, 3, 1), Decimal("150")),
        ]

    def test_cash_flows_up_to_end_date(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_A", date(2024, 1, 1), 2, 100),
            make_txn("FUND_A", date(2024, 3, 1), 1, 100),
        ])
        flows = ledger.cash_flows(end_date=date(2024, 1, 1))
        assert [cf.date for cf in flows] == [date(2024, 1, 1)]

    def test_holding_ids_and_first_date(self, reader, make_txn):
        ledger = reader.read([
            make_txn("FUND_B", date(2024, 2, 1), 1, 300),
            make_txn("FUND_A", date(2024, 3, 1), 2, 100),
        ])
        assert ledger.holding_ids == ["FUND_A", "FUND_B"]
        assert ledger.first_date == date(2024, 2, 1)

    def test_timelines_are_read_only(self, reader, make_txn):
        ledger = reader.read([make_txn("FUND_A", date(2024, 1, 1), 10, 100)])

        with pytest.raises(TypeError):
            ledger.timelines["FUND_B"] = ledger.timeline("FUND_A")
        assert ledger.holding_ids == ["FUND_A"]

    def test_ledger_copies_input_mapping(self, reader, make_txn):
        timeline = reader.read([make_txn("FUND_A", date(2024, 1, 1), 10, 100)]).timeline("FUND_A")
        source = {"FUND_A": timeline}
        ledger = Ledger(timelines=source)

        source.clear()
        assert ledger.timeline("FUND_A") is timeline


# =============================================================================
# RAW ROWS
# =============================================================================

class TestTransactionRow:
    """Validated input rows feed the reader directly."""

    def test_kind_is_normalised(self):
        row = TransactionRow(
            holding_id="FUND_A",
            date=date(2024, 1, 1),
            kind=" sip ",
            units="10",
            amount="1000",
            price_per_unit="100",
        )
        assert row.kind == TransactionKind.SIP

    def test_non_positive_units_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            TransactionRow(
                holding_id="FUND_A",
                date=date(2024, 1, 1),
                kind="BUY",
                units="0",
                amount="1000",
                price_per_unit="100",
            )

    def test_reader_accepts_rows(self, reader):
        row = TransactionRow(
            holding_id="FUND_A",
            date="2024-01-01",
            kind="buy",
            units="10",
            amount="1000",
            price_per_unit="100",
        )
        ledger = reader.read([row])
        entry = ledger.timeline("FUND_A").entries[0]
        assert entry.kind == TransactionKind.BUY
        assert entry.amount == Decimal("-1000")
