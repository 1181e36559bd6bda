"""
Module: invoicing_engines.adjustment_note
Responsibility:
    Totals for credit and debit notes raised against an existing invoice,
    and the invoice's outstanding amount after the note is applied.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Each line is taxed at the GST rate snapshotted from the original
      invoice line, through the same split_gst formula the invoice used.
    - No discount and no charges: taxable amount == subtotal.
    - Grand total and round-off follow the invoice rules exactly.
    - Credit notes reduce the outstanding amount, debit notes increase it.
      Whether a credit note may exceed the outstanding amount is decided by
      invoicing_services.invoice_validation.AdjustmentNoteValidator.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from invoicing_kernel.domain.values import (
    ZERO,
    money_context,
    round_money,
    round_whole_units,
    to_decimal,
)
from invoicing_kernel.logging_config import get_logger
from invoicing_engines.gst import InvoiceTaxMode, split_gst
from invoicing_engines.tracer import traced_engine

logger = get_logger("engines.adjustment_note")


class AdjustmentType(str, Enum):
    """Direction of the adjustment against the invoice outstanding."""

    CREDIT = "credit"
    DEBIT = "debit"

    @classmethod
    def coerce(cls, value: Any) -> AdjustmentType:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(getattr(value, "value", value)).strip().lower())
        except ValueError:
            logger.warning("unknown_adjustment_type", extra={"adjustment_type": str(value)})
            return cls.CREDIT


@dataclass(frozen=True)
class AdjustmentLineInput:
    """An invoice line selected for adjustment."""

    product_ref: str
    quantity: Any
    rate: Any
    gst_rate: Any = ZERO

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AdjustmentLineInput:
        ref = data.get("product_ref", data.get("product_id", ""))
        return cls(
            product_ref="" if ref is None else str(ref),
            quantity=data.get("quantity"),
            rate=data.get("rate"),
            gst_rate=data.get("gst_rate"),
        )


@dataclass(frozen=True)
class AdjustmentLineResult:
    product_ref: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal
    gst_rate: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    total_tax: Decimal

    def as_row(self) -> dict[str, Any]:
        return {
            "product_id": self.product_ref,
            "quantity": self.quantity,
            "rate": self.rate,
            "amount": self.amount,
            "gst_rate": self.gst_rate,
            "cgst_amount": self.cgst_amount,
            "sgst_amount": self.sgst_amount,
            "igst_amount": self.igst_amount,
            "total_tax_amount": self.total_tax,
        }


@dataclass(frozen=True)
class AdjustmentNoteTotals:
    """Note totals plus the invoice outstanding after applying the note."""

    adjustment_type: AdjustmentType = AdjustmentType.CREDIT
    tax_mode: InvoiceTaxMode = InvoiceTaxMode.NO_TAX
    subtotal: Decimal = ZERO
    total_cgst: Decimal = ZERO
    total_sgst: Decimal = ZERO
    total_igst: Decimal = ZERO
    total_tax: Decimal = ZERO
    round_off: Decimal = ZERO
    grand_total: Decimal = ZERO
    outstanding_before: Decimal = ZERO
    new_outstanding: Decimal = ZERO
    lines: tuple[AdjustmentLineResult, ...] = field(default=())

    def as_row(self) -> dict[str, Any]:
        return {
            "adjustment_type": self.adjustment_type.value,
            "tax_type": self.tax_mode.value,
            "subtotal_amount": self.subtotal,
            "total_cgst_amount": self.total_cgst,
            "total_sgst_amount": self.total_sgst,
            "total_igst_amount": self.total_igst,
            "total_tax_amount": self.total_tax,
            "round_off_amount": self.round_off,
            "total_amount": self.grand_total,
        }


def _as_adjustment_line(item: AdjustmentLineInput | Mapping[str, Any]) -> AdjustmentLineInput | None:
    if isinstance(item, AdjustmentLineInput):
        return item
    if isinstance(item, Mapping):
        return AdjustmentLineInput.from_mapping(item)
    return None


@traced_engine(
    "adjustment_note",
    "1.0",
    fingerprint_fields=("line_items", "tax_mode", "adjustment_type", "outstanding_amount"),
)
def compute_adjustment_note_totals(
    line_items: Iterable[AdjustmentLineInput | Mapping[str, Any]] | None,
    tax_mode: InvoiceTaxMode | str,
    adjustment_type: AdjustmentType | str,
    outstanding_amount: Any = ZERO,
) -> AdjustmentNoteTotals:
    """
    Calculate a credit or debit note.

    Args:
        line_items: Lines being adjusted, each with its snapshotted GST rate.
        tax_mode: Tax mode of the original invoice.
        adjustment_type: "credit" or "debit".
        outstanding_amount: The invoice's outstanding amount before the note.

    Returns:
        AdjustmentNoteTotals.
    """
    with money_context():
        mode = InvoiceTaxMode.coerce(tax_mode)
        kind = AdjustmentType.coerce(adjustment_type)
        outstanding = round_money(to_decimal(outstanding_amount))

        results: list[AdjustmentLineResult] = []
        subtotal = ZERO
        total_cgst = ZERO
        total_sgst = ZERO
        total_igst = ZERO

        for item in line_items or ():
            line = _as_adjustment_line(item)
            if line is None:
                continue
            raw_quantity = to_decimal(line.quantity)
            if raw_quantity <= ZERO:
                continue

            quantity = round_money(raw_quantity)
            rate = round_money(to_decimal(line.rate))
            amount = round_money(quantity * rate)
            gst_rate = to_decimal(line.gst_rate)
            split = split_gst(amount, gst_rate, mode)

            results.append(
                AdjustmentLineResult(
                    product_ref=line.product_ref,
                    quantity=quantity,
                    rate=rate,
                    amount=amount,
                    gst_rate=gst_rate,
                    cgst_amount=split.cgst,
                    sgst_amount=split.sgst,
                    igst_amount=split.igst,
                    total_tax=split.total,
                )
            )
            subtotal = round_money(subtotal + amount)
            total_cgst = round_money(total_cgst + split.cgst)
            total_sgst = round_money(total_sgst + split.sgst)
            total_igst = round_money(total_igst + split.igst)

        total_tax = round_money(total_cgst + total_sgst + total_igst)
        grand_total_exact = subtotal + total_tax
        grand_total = round_whole_units(grand_total_exact)
        round_off = round_money(grand_total - grand_total_exact)

        if kind is AdjustmentType.CREDIT:
            new_outstanding = round_money(outstanding - grand_total)
        else:
            new_outstanding = round_money(outstanding + grand_total)

        logger.info(
            "adjustment_note_computed",
            extra={
                "adjustment_type": kind.value,
                "line_count": len(results),
                "grand_total": str(grand_total),
                "new_outstanding": str(new_outstanding),
            },
        )

        return AdjustmentNoteTotals(
            adjustment_type=kind,
            tax_mode=mode,
            subtotal=subtotal,
            total_cgst=total_cgst,
            total_sgst=total_sgst,
            total_igst=total_igst,
            total_tax=total_tax,
            round_off=round_off,
            grand_total=grand_total,
            outstanding_before=outstanding,
            new_outstanding=new_outstanding,
            lines=tuple(results),
        )
