"""
Module: invoicing_engines.gst
Responsibility:
    The one GST formula shared by invoice lines, additional charges and
    adjustment notes: split a rate into CGST + SGST (intra-state) or charge
    it whole as IGST (inter-state), rounding each component to 2 dp.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``no_tax`` mode or a non-positive rate yields an all-zero split.
    - ``gst`` mode: CGST == SGST == round(amount * (rate / 2) / 100, 2).
    - ``igst`` mode: IGST == round(amount * rate / 100, 2).
    - The split total is round(CGST + SGST + IGST, 2).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from invoicing_kernel.domain.values import ZERO, percent_of, round_money, to_decimal
from invoicing_kernel.logging_config import get_logger

logger = get_logger("engines.gst")

_TWO = Decimal("2")


class InvoiceTaxMode(str, Enum):
    """Invoice-wide tax switch."""

    NO_TAX = "no_tax"  # Zero every tax
    GST = "gst"  # Intra-state: CGST + SGST, half the rate each
    IGST = "igst"  # Inter-state: full rate as IGST

    @classmethod
    def coerce(cls, value: Any) -> InvoiceTaxMode:
        """Accept an enum member or its string value; unknown values mean no tax."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(getattr(value, "value", value)).strip().lower())
        except ValueError:
            logger.warning("unknown_tax_mode", extra={"tax_mode": str(value)})
            return cls.NO_TAX


class ProductTaxType(str, Enum):
    """Product-level GST applicability."""

    NO_TAX = "no_tax"
    GST = "gst"


@dataclass(frozen=True)
class GSTSplit:
    """
    Tax on one amount, split by component.

    Rates are percentages as applied (half rate each for CGST/SGST), the
    amounts are already rounded to 2 dp.
    """

    cgst_rate: Decimal = ZERO
    sgst_rate: Decimal = ZERO
    igst_rate: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return round_money(self.cgst + self.sgst + self.igst)

    @property
    def is_zero(self) -> bool:
        return self.cgst == ZERO and self.sgst == ZERO and self.igst == ZERO


ZERO_SPLIT = GSTSplit()


def split_gst(amount: Decimal, rate_percent: Any, tax_mode: InvoiceTaxMode) -> GSTSplit:
    """
    Compute CGST/SGST or IGST on ``amount`` at ``rate_percent``.

    Args:
        amount: Taxable base, already rounded to 2 dp.
        rate_percent: Full GST rate as a percentage (18 for 18%).
        tax_mode: Invoice tax mode.

    Returns:
        GSTSplit with rounded component amounts.
    """
    rate = to_decimal(rate_percent)
    if tax_mode is InvoiceTaxMode.NO_TAX or rate <= ZERO:
        return ZERO_SPLIT

    if tax_mode is InvoiceTaxMode.GST:
        half_rate = rate / _TWO
        component = percent_of(amount, half_rate)
        return GSTSplit(
            cgst_rate=half_rate,
            sgst_rate=half_rate,
            cgst=component,
            sgst=component,
        )

    return GSTSplit(
        igst_rate=rate,
        igst=percent_of(amount, rate),
    )
