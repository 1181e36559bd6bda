"""Tests for credit / debit note totals."""

from decimal import Decimal

from invoicing_engines.adjustment_note import (
    AdjustmentLineInput,
    AdjustmentType,
    compute_adjustment_note_totals,
)
from invoicing_engines.gst import InvoiceTaxMode


class TestCreditNote:

    def test_credit_reduces_outstanding(self):
        totals = compute_adjustment_note_totals(
            [AdjustmentLineInput("P1", 2, 100, gst_rate="18")],
            InvoiceTaxMode.GST,
            AdjustmentType.CREDIT,
            outstanding_amount="1180",
        )

        assert totals.subtotal == Decimal("200.00")
        assert totals.total_cgst == Decimal("18.00")
        assert totals.total_sgst == Decimal("18.00")
        assert totals.total_tax == Decimal("36.00")
        assert totals.grand_total == Decimal("236")
        assert totals.new_outstanding == Decimal("944.00")

    def test_igst_uses_snapshotted_rate(self):
        totals = compute_adjustment_note_totals(
            [{"product_id": "P1", "quantity": "1", "rate": "99.99", "gst_rate": "12"}],
            "igst",
            "credit",
            outstanding_amount="500",
        )

        line = totals.lines[0]
        assert line.igst_amount == Decimal("12.00")
        assert totals.grand_total == Decimal("112")
        assert totals.round_off == Decimal("0.01")

    def test_zero_rate_line_untaxed(self):
        totals = compute_adjustment_note_totals(
            [AdjustmentLineInput("P1", 1, 100)],
            "gst",
            "credit",
        )
        assert totals.total_tax == Decimal("0")
        assert totals.grand_total == Decimal("100")
        assert totals.new_outstanding == Decimal("-100.00")


class TestDebitNote:

    def test_debit_increases_outstanding(self):
        totals = compute_adjustment_note_totals(
            [AdjustmentLineInput("P1", "1.5", "10.10", gst_rate="5")],
            "gst",
            "debit",
            outstanding_amount="100.25",
        )

        # 1.50 * 10.10 = 15.15; 15.15 * 2.5% = 0.37875 -> 0.38 each
        assert totals.subtotal == Decimal("15.15")
        assert totals.total_tax == Decimal("0.76")
        assert totals.grand_total == Decimal("16")
        assert totals.round_off == Decimal("0.09")
        assert totals.new_outstanding == Decimal("116.25")


class TestAdjustmentEdgeCases:

    def test_zero_quantity_dropped(self):
        totals = compute_adjustment_note_totals(
            [AdjustmentLineInput("P1", 0, 100, gst_rate="18")],
            "gst",
            "credit",
            outstanding_amount="50",
        )
        assert totals.lines == ()
        assert totals.grand_total == Decimal("0")
        assert totals.new_outstanding == Decimal("50.00")

    def test_no_tax_mode(self):
        totals = compute_adjustment_note_totals(
            [AdjustmentLineInput("P1", 1, 100, gst_rate="18")],
            InvoiceTaxMode.NO_TAX,
            "debit",
        )
        assert totals.total_tax == Decimal("0")

    def test_unknown_type_treated_as_credit(self):
        totals = compute_adjustment_note_totals(
            [AdjustmentLineInput("P1", 1, 10)], "no_tax", "refund", outstanding_amount="10"
        )
        assert totals.adjustment_type is AdjustmentType.CREDIT
        assert totals.new_outstanding == Decimal("0.00")

    def test_header_row(self):
        totals = compute_adjustment_note_totals(
            [AdjustmentLineInput("P1", 1, 10)], "no_tax", "debit"
        )
        row = totals.as_row()
        assert row["adjustment_type"] == "debit"
        assert row["total_amount"] == Decimal("10")


class TestLargeValues:

    def test_amounts_beyond_default_precision(self):
        totals = compute_adjustment_note_totals(
            [AdjustmentLineInput("P1", 10**15, 10**15, gst_rate="18")],
            "igst",
            "debit",
            outstanding_amount="1e30",
        )

        assert totals.subtotal == Decimal("1e30")
        assert totals.total_igst == Decimal("1.8e29")
        assert totals.grand_total == Decimal("1.18e30")
        assert totals.new_outstanding == Decimal("2.18e30")
