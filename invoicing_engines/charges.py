"""
Module: invoicing_engines.charges
Responsibility:
    Resolve each additional charge (freight, packing, commission) to a money
    amount and compute the GST on it, independently of any line item.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Ledger tax info arrives through a caller-supplied mapping.

Invariants enforced:
    - A charge is skipped entirely (contributes nothing) when its ledger
      does not resolve, when its value is not positive, or when its charge
      type is unknown.  Skips are logged, never raised.
    - A percentage charge is a percentage of the post-discount, pre-charge
      amount, not of the raw subtotal.
    - Charge tax uses the ledger's own GST rate through split_gst.
    - Running totals are rounded after every addition.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from invoicing_kernel.domain.reference import LedgerTaxInfo, as_ledger_tax_info
from invoicing_kernel.domain.values import ZERO, percent_of, round_money, to_decimal
from invoicing_kernel.logging_config import get_logger
from invoicing_engines.gst import InvoiceTaxMode, split_gst

logger = get_logger("engines.charges")


class ChargeType(str, Enum):
    """How a charge value is turned into money."""

    PERCENTAGE = "percentage"  # Percent of the post-discount amount
    FLAT_AMOUNT = "flat_amount"  # Absolute amount

    @classmethod
    def parse(cls, value: Any) -> ChargeType | None:
        """Enum member for ``value``, or None when it is not a known type."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(getattr(value, "value", value)).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class ChargeInput:
    """A named additional cost posted to a ledger."""

    ledger_ref: str
    charge_type: Any
    charge_value: Any

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ChargeInput:
        """Build from a plain dict using either ``ledger_ref`` or ``ledger_id``."""
        ref = data.get("ledger_ref", data.get("ledger_id", ""))
        return cls(
            ledger_ref="" if ref is None else str(ref),
            charge_type=data.get("charge_type"),
            charge_value=data.get("charge_value"),
        )


@dataclass(frozen=True)
class ChargeResult:
    """A resolved charge with its tax breakdown."""

    ledger_ref: str
    charge_type: ChargeType
    charge_value: Decimal
    charge_amount: Decimal
    gst_rate: Decimal
    cgst_rate: Decimal
    sgst_rate: Decimal
    igst_rate: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    total_tax: Decimal

    def as_row(self) -> dict[str, Any]:
        """Column values for an invoice additional-charge row."""
        return {
            "ledger_id": self.ledger_ref,
            "charge_type": self.charge_type.value,
            "charge_value": self.charge_value,
            "charge_amount": self.charge_amount,
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
class ChargeTotals:
    """All resolved charges and their running totals."""

    charges: tuple[ChargeResult, ...] = ()
    amount: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO

    @property
    def total_tax(self) -> Decimal:
        return round_money(self.cgst + self.sgst + self.igst)


def _as_charge_input(item: ChargeInput | Mapping[str, Any]) -> ChargeInput | None:
    if isinstance(item, ChargeInput):
        return item
    if isinstance(item, Mapping):
        return ChargeInput.from_mapping(item)
    return None


def compute_charges(
    charge_items: Iterable[ChargeInput | Mapping[str, Any]] | None,
    amount_after_discount: Decimal,
    tax_mode: InvoiceTaxMode,
    ledger_lookup: Mapping[str, LedgerTaxInfo] | None,
) -> ChargeTotals:
    """
    Resolve every charge against ``ledger_lookup`` and accumulate totals.

    Args:
        charge_items: Charges as entered on the invoice.
        amount_after_discount: Base for percentage charges.
        tax_mode: Invoice tax mode.
        ledger_lookup: ledger id -> LedgerTaxInfo.

    Returns:
        ChargeTotals with the resolved charges in input order.
    """
    lookup = ledger_lookup or {}
    results: list[ChargeResult] = []
    total_amount = ZERO
    total_cgst = ZERO
    total_sgst = ZERO
    total_igst = ZERO

    for item in charge_items or ():
        charge = _as_charge_input(item)
        if charge is None:
            logger.warning("charge_unrecognized", extra={"item_type": type(item).__name__})
            continue

        ledger = as_ledger_tax_info(lookup.get(charge.ledger_ref))
        if ledger is None:
            logger.warning("charge_skipped_unknown_ledger", extra={"ledger_ref": charge.ledger_ref})
            continue

        value = to_decimal(charge.charge_value)
        if value <= ZERO:
            logger.debug("charge_skipped_zero_value", extra={"ledger_ref": charge.ledger_ref})
            continue

        charge_type = ChargeType.parse(charge.charge_type)
        if charge_type is None:
            logger.warning(
                "charge_skipped_unknown_type",
                extra={"ledger_ref": charge.ledger_ref, "charge_type": str(charge.charge_type)},
            )
            continue

        if charge_type is ChargeType.PERCENTAGE:
            amount = percent_of(amount_after_discount, value)
        else:
            amount = round_money(value)

        split = split_gst(amount, ledger.gst_rate_percent, tax_mode)

        results.append(
            ChargeResult(
                ledger_ref=charge.ledger_ref,
                charge_type=charge_type,
                charge_value=value,
                charge_amount=amount,
                gst_rate=ledger.gst_rate_percent,
                cgst_rate=split.cgst_rate,
                sgst_rate=split.sgst_rate,
                igst_rate=split.igst_rate,
                cgst_amount=split.cgst,
                sgst_amount=split.sgst,
                igst_amount=split.igst,
                total_tax=split.total,
            )
        )

        total_amount = round_money(total_amount + amount)
        total_cgst = round_money(total_cgst + split.cgst)
        total_sgst = round_money(total_sgst + split.sgst)
        total_igst = round_money(total_igst + split.igst)

    return ChargeTotals(
        charges=tuple(results),
        amount=total_amount,
        cgst=total_cgst,
        sgst=total_sgst,
        igst=total_igst,
    )
