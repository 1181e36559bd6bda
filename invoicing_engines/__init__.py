"""
Module: invoicing_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation modules.  This is the canonical import surface for
    invoicing_services and for callers that only need the arithmetic.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import invoicing_kernel (domain values/reference DTOs, logging)
    and sibling engine modules.
    MUST NOT import invoicing_services, invoicing_config or any ORM code.

Invariants enforced:
    - Decimal-only arithmetic with a 2-dp rounding after every step.
    - Determinism: identical inputs always produce identical outputs.
    - Calculators never raise on bad input; they degrade and log.

Usage:
    from invoicing_engines import compute_invoice_totals, DiscountSpec
    from invoicing_engines.adjustment_note import compute_adjustment_note_totals
    from invoicing_engines.order_financials import calculate_order_financials
"""

from invoicing_kernel.domain.reference import LedgerTaxInfo, ProductTaxInfo
from invoicing_kernel.logging_config import get_logger

logger = get_logger("engines")

from invoicing_engines.adjustment_note import (
    AdjustmentLineInput,
    AdjustmentLineResult,
    AdjustmentNoteTotals,
    AdjustmentType,
    compute_adjustment_note_totals,
)
from invoicing_engines.charges import (
    ChargeInput,
    ChargeResult,
    ChargeTotals,
    ChargeType,
    compute_charges,
)
from invoicing_engines.discount import (
    NO_DISCOUNT,
    DiscountAllocation,
    DiscountSpec,
    DiscountType,
    allocate_discount,
    compute_discount_amount,
)
from invoicing_engines.gst import (
    ZERO_SPLIT,
    GSTSplit,
    InvoiceTaxMode,
    ProductTaxType,
    split_gst,
)
from invoicing_engines.invoice_totals import (
    InvoiceTotals,
    InvoiceTotalsCalculator,
    LineItemResult,
    compute_invoice_totals,
)
from invoicing_engines.lines import LineItemInput, NormalizedLine, normalize_lines
from invoicing_engines.order_financials import (
    DEFAULT_ORDER_GST_RATE,
    OrderFinancials,
    calculate_order_financials,
)
from invoicing_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Reference DTOs
    "LedgerTaxInfo",
    "ProductTaxInfo",
    # Lines
    "LineItemInput",
    "NormalizedLine",
    "normalize_lines",
    # Discount
    "NO_DISCOUNT",
    "DiscountAllocation",
    "DiscountSpec",
    "DiscountType",
    "allocate_discount",
    "compute_discount_amount",
    # GST
    "ZERO_SPLIT",
    "GSTSplit",
    "InvoiceTaxMode",
    "ProductTaxType",
    "split_gst",
    # Charges
    "ChargeInput",
    "ChargeResult",
    "ChargeTotals",
    "ChargeType",
    "compute_charges",
    # Invoice totals
    "InvoiceTotals",
    "InvoiceTotalsCalculator",
    "LineItemResult",
    "compute_invoice_totals",
    # Adjustment notes
    "AdjustmentLineInput",
    "AdjustmentLineResult",
    "AdjustmentNoteTotals",
    "AdjustmentType",
    "compute_adjustment_note_totals",
    # Order financials
    "DEFAULT_ORDER_GST_RATE",
    "OrderFinancials",
    "calculate_order_financials",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
]
