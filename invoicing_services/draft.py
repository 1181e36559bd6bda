"""
InvoiceDraft -- the unsaved invoice as the form holds it.

A draft bundles what the user selected; the service turns it into lookups,
totals and a validation report.  Plain dicts are accepted for lines and
charges so a request payload can be passed through unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from invoicing_engines.charges import ChargeInput
from invoicing_engines.discount import NO_DISCOUNT, DiscountSpec
from invoicing_engines.gst import InvoiceTaxMode
from invoicing_engines.lines import LineItemInput


def _line_inputs(items: Iterable[Any] | None) -> tuple[LineItemInput, ...]:
    return tuple(
        LineItemInput.from_mapping(item) if isinstance(item, Mapping) else item
        for item in items or ()
    )


def _charge_inputs(items: Iterable[Any] | None) -> tuple[ChargeInput, ...]:
    return tuple(
        ChargeInput.from_mapping(item) if isinstance(item, Mapping) else item
        for item in items or ()
    )


@dataclass(frozen=True)
class InvoiceDraft:
    """Line items, charges, tax mode and discount of an invoice being edited."""

    line_items: tuple[LineItemInput, ...] = ()
    charge_items: tuple[ChargeInput, ...] = ()
    tax_mode: InvoiceTaxMode = InvoiceTaxMode.NO_TAX
    discount: DiscountSpec = field(default=NO_DISCOUNT)
    invoice_id: str | None = None
    warehouse_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "line_items", _line_inputs(self.line_items))
        object.__setattr__(self, "charge_items", _charge_inputs(self.charge_items))
        object.__setattr__(self, "tax_mode", InvoiceTaxMode.coerce(self.tax_mode))
        if self.discount is None:
            object.__setattr__(self, "discount", NO_DISCOUNT)

    @property
    def product_refs(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(line.product_ref for line in self.line_items))

    @property
    def ledger_refs(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(charge.ledger_ref for charge in self.charge_items))
