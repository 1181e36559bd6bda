"""
Module: invoicing_engines.invoice_totals
Responsibility:
    Turn selected line items, an optional invoice-wide discount and a set of
    additional charges into a fully itemized, tax-correct invoice total.
    The result is both the binding preview shown to the user and the values
    written when the invoice is committed, so it must match the commit-time
    calculation to the paisa.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Product and ledger tax info are injected as plain mappings.

Pipeline (data flows strictly downward, nothing is mutated):
    1. lines.normalize_lines       -> rounded qty/rate, gross, subtotal
    2. discount.compute_discount_amount
    3. discount.allocate_discount  -> per-line discount and taxable value
    4. charges.compute_charges     -> charge amounts and their own GST
    5. gst.split_gst per line      -> CGST/SGST or IGST on taxable value
    6. aggregate                   -> invoice subtotals
    7. grand total                 -> whole-unit total plus round-off

Invariants enforced:
    - Every monetary intermediate is rounded to 2 dp the moment it is
      computed.  Rounding lazily gives different totals.
    - The pipeline runs inside ``money_context()``; no input in range for
      ``to_decimal`` can exhaust its precision.
    - Line tax is computed on the line's own taxable value only; charges are
      taxed separately and join the taxable amount at invoice level.
    - grand_total is a whole number and round_off = grand_total - (taxable
      amount + total tax), within (-0.5, 0.5].
    - Pure function: identical inputs give identical outputs.

Failure modes:
    - None.  This runs on every keystroke of the invoice form.  Unknown
      products are untaxed, unknown ledgers drop their charge, empty input
      gives an all-zero result.  Out-of-range discounts are surfaced as-is
      for the validation layer.

Usage:
    from invoicing_engines.invoice_totals import compute_invoice_totals

    totals = compute_invoice_totals(
        line_items=[LineItemInput("p-1", quantity="10", rate="100")],
        charge_items=[],
        tax_mode=InvoiceTaxMode.GST,
        discount=NO_DISCOUNT,
        product_lookup={"p-1": ProductTaxInfo("gst", Decimal("18"))},
        ledger_lookup={},
    )
    totals.grand_total  # Decimal("1180")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from invoicing_kernel.domain.reference import ProductTaxInfo, as_product_tax_info
from invoicing_kernel.domain.values import ZERO, money_context, round_money, round_whole_units
from invoicing_kernel.logging_config import get_logger
from invoicing_engines.charges import ChargeInput, ChargeResult, compute_charges
from invoicing_engines.discount import (
    DiscountSpec,
    DiscountType,
    NO_DISCOUNT,
    allocate_discount,
    compute_discount_amount,
)
from invoicing_engines.gst import InvoiceTaxMode, ProductTaxType, ZERO_SPLIT, split_gst
from invoicing_engines.lines import LineItemInput, normalize_lines
from invoicing_engines.tracer import traced_engine

logger = get_logger("engines.invoice_totals")


@dataclass(frozen=True)
class LineItemResult:
    """Per-line breakdown; the same shape as an invoice item row."""

    product_ref: str
    quantity: Decimal
    rate: Decimal
    gross_amount: Decimal
    discount: Decimal
    taxable_value: Decimal
    tax_type: str
    gst_rate: Decimal
    cgst_rate: Decimal
    sgst_rate: Decimal
    igst_rate: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    total_tax: Decimal

    def as_row(self) -> dict[str, Any]:
        """Column values for an invoice item row."""
        return {
            "product_id": self.product_ref,
            "quantity": self.quantity,
            "rate": self.rate,
            "amount": self.gross_amount,
            "discount_amount": self.discount,
            "taxable_amount": self.taxable_value,
            "tax_type": self.tax_type,
            "gst_rate": self.gst_rate,
            "cgst_rate": self.cgst_rate,
            "cgst_amount": self.cgst_amount,
            "sgst_rate": self.sgst_rate,
            "sgst_amount": self.sgst_amount,
            "igst_rate": self.igst_rate,
            "igst_amount": self.igst_amount,
            "total_tax_amount": self.total_tax,
        }


@dataclass(frozen=True)
class InvoiceTotals:
    """
    Invoice-level totals with their per-line and per-charge breakdowns.

    ``amount_after_discount`` may be negative when the caller passed an
    over-large flat discount; the validation layer reports that case.
    """

    tax_mode: InvoiceTaxMode = InvoiceTaxMode.NO_TAX
    discount_type: DiscountType = DiscountType.NONE
    discount_value: Decimal = ZERO
    subtotal: Decimal = ZERO
    discount_amount: Decimal = ZERO
    amount_after_discount: Decimal = ZERO
    charges_amount: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    items_cgst: Decimal = ZERO
    items_sgst: Decimal = ZERO
    items_igst: Decimal = ZERO
    charges_cgst: Decimal = ZERO
    charges_sgst: Decimal = ZERO
    charges_igst: Decimal = ZERO
    total_cgst: Decimal = ZERO
    total_sgst: Decimal = ZERO
    total_igst: Decimal = ZERO
    total_tax: Decimal = ZERO
    round_off: Decimal = ZERO
    grand_total: Decimal = ZERO
    lines: tuple[LineItemResult, ...] = field(default=())
    charges: tuple[ChargeResult, ...] = field(default=())

    @property
    def grand_total_exact(self) -> Decimal:
        """Taxable amount plus tax before whole-unit rounding."""
        with money_context():
            return self.taxable_amount + self.total_tax

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def as_row(self) -> dict[str, Any]:
        """Column values for the invoice header row."""
        return {
            "tax_type": self.tax_mode.value,
            "discount_type": self.discount_type.value,
            "discount_value": self.discount_value,
            "subtotal_amount": self.subtotal,
            "discount_amount": self.discount_amount,
            "additional_charges_amount": self.charges_amount,
            "taxable_amount": self.taxable_amount,
            "total_cgst_amount": self.total_cgst,
            "total_sgst_amount": self.total_sgst,
            "total_igst_amount": self.total_igst,
            "total_tax_amount": self.total_tax,
            "round_off_amount": self.round_off,
            "total_amount": self.grand_total,
        }


def _product_tax_type(info: ProductTaxInfo | None) -> str:
    if info is None or not info.tax_type:
        return ProductTaxType.NO_TAX.value
    return info.tax_type


class InvoiceTotalsCalculator:
    """
    Compute invoice totals.

    Pure functions - no I/O, no database access, no clock.
    Product and ledger tax info provided as parameters.
    """

    def calculate(
        self,
        line_items: Iterable[LineItemInput | Mapping[str, Any]] | None,
        charge_items: Iterable[ChargeInput | Mapping[str, Any]] | None,
        tax_mode: InvoiceTaxMode | str,
        discount: DiscountSpec | None,
        product_lookup: Mapping[str, Any] | None,
        ledger_lookup: Mapping[str, Any] | None,
    ) -> InvoiceTotals:
        """
        Calculate the totals for one invoice.

        Args:
            line_items: Selected products with quantity and rate.
            charge_items: Additional charges.
            tax_mode: "no_tax", "gst" or "igst".
            discount: Invoice-wide discount, None for no discount.
            product_lookup: product id -> ProductTaxInfo.
            ledger_lookup: ledger id -> LedgerTaxInfo.

        Returns:
            InvoiceTotals (all-zero when nothing is selected).
        """
        with money_context():
            return self._calculate(
                line_items, charge_items, tax_mode, discount, product_lookup, ledger_lookup
            )

    def _calculate(
        self,
        line_items: Iterable[LineItemInput | Mapping[str, Any]] | None,
        charge_items: Iterable[ChargeInput | Mapping[str, Any]] | None,
        tax_mode: InvoiceTaxMode | str,
        discount: DiscountSpec | None,
        product_lookup: Mapping[str, Any] | None,
        ledger_lookup: Mapping[str, Any] | None,
    ) -> InvoiceTotals:
        mode = InvoiceTaxMode.coerce(tax_mode)
        if discount is None:
            discount = NO_DISCOUNT
        elif not isinstance(discount, DiscountSpec):
            discount = DiscountSpec(
                getattr(discount, "type", DiscountType.NONE),
                getattr(discount, "value", ZERO),
            )
        products = product_lookup or {}

        # Step 1 -- normalize lines
        lines, subtotal = normalize_lines(line_items)

        # Step 2 -- invoice-wide discount (never clamped here)
        discount_amount = compute_discount_amount(subtotal, discount)
        amount_after_discount = round_money(subtotal - discount_amount)

        # Step 3 -- proportional discount distribution
        allocations = allocate_discount(lines, subtotal, discount_amount)

        # Step 4 -- additional charges, taxed on their own
        charge_totals = compute_charges(
            charge_items, amount_after_discount, mode, ledger_lookup
        )

        # Step 5 -- line tax on each line's taxable value
        line_results: list[LineItemResult] = []
        items_cgst = ZERO
        items_sgst = ZERO
        items_igst = ZERO

        for line, allocation in zip(lines, allocations):
            info = as_product_tax_info(products.get(line.product_ref))
            if info is None:
                logger.debug("line_product_unresolved", extra={"product_ref": line.product_ref})

            if info is not None and info.is_gst:
                split = split_gst(allocation.taxable_value, info.gst_rate_percent, mode)
            else:
                split = ZERO_SPLIT

            line_results.append(
                LineItemResult(
                    product_ref=line.product_ref,
                    quantity=line.quantity,
                    rate=line.rate,
                    gross_amount=line.gross_amount,
                    discount=allocation.line_discount,
                    taxable_value=allocation.taxable_value,
                    tax_type=_product_tax_type(info),
                    gst_rate=info.gst_rate_percent if info is not None else ZERO,
                    cgst_rate=split.cgst_rate,
                    sgst_rate=split.sgst_rate,
                    igst_rate=split.igst_rate,
                    cgst_amount=split.cgst,
                    sgst_amount=split.sgst,
                    igst_amount=split.igst,
                    total_tax=split.total,
                )
            )
            items_cgst = round_money(items_cgst + split.cgst)
            items_sgst = round_money(items_sgst + split.sgst)
            items_igst = round_money(items_igst + split.igst)

        # Step 6 -- aggregate
        total_cgst = round_money(items_cgst + charge_totals.cgst)
        total_sgst = round_money(items_sgst + charge_totals.sgst)
        total_igst = round_money(items_igst + charge_totals.igst)
        total_tax = round_money(total_cgst + total_sgst + total_igst)
        taxable_amount = round_money(amount_after_discount + charge_totals.amount)

        # Step 7 -- whole-unit grand total; the exact sum is not pre-rounded
        grand_total_exact = taxable_amount + total_tax
        grand_total = round_whole_units(grand_total_exact)
        round_off = round_money(grand_total - grand_total_exact)

        return InvoiceTotals(
            tax_mode=mode,
            discount_type=discount.type,
            discount_value=discount.value,
            subtotal=round_money(subtotal),
            discount_amount=round_money(discount_amount),
            amount_after_discount=amount_after_discount,
            charges_amount=charge_totals.amount,
            taxable_amount=taxable_amount,
            items_cgst=items_cgst,
            items_sgst=items_sgst,
            items_igst=items_igst,
            charges_cgst=charge_totals.cgst,
            charges_sgst=charge_totals.sgst,
            charges_igst=charge_totals.igst,
            total_cgst=total_cgst,
            total_sgst=total_sgst,
            total_igst=total_igst,
            total_tax=total_tax,
            round_off=round_off,
            grand_total=grand_total,
            lines=tuple(line_results),
            charges=charge_totals.charges,
        )


@traced_engine(
    "invoice_totals",
    "1.0",
    fingerprint_fields=("line_items", "charge_items", "tax_mode", "discount"),
)
def compute_invoice_totals(
    line_items: Iterable[LineItemInput | Mapping[str, Any]] | None,
    charge_items: Iterable[ChargeInput | Mapping[str, Any]] | None,
    tax_mode: InvoiceTaxMode | str,
    discount: DiscountSpec | None,
    product_lookup: Mapping[str, Any] | None,
    ledger_lookup: Mapping[str, Any] | None,
) -> InvoiceTotals:
    """Calculate invoice totals.  See InvoiceTotalsCalculator.calculate."""
    return InvoiceTotalsCalculator().calculate(
        line_items=line_items,
        charge_items=charge_items,
        tax_mode=tax_mode,
        discount=discount,
        product_lookup=product_lookup,
        ledger_lookup=ledger_lookup,
    )
