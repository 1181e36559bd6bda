"""
Module: invoicing_engines.lines
Responsibility:
    First stage of the invoice totals pipeline: turn the caller's selected
    line items into normalized lines with a rounded gross amount, and sum
    the invoice subtotal.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Lines with quantity <= 0 are dropped before any rounding.
    - quantity and rate are rounded to 2 dp; gross = round(qty * rate, 2).
    - subtotal is the rounded sum of the rounded gross amounts.
    - Input order is preserved.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from invoicing_kernel.domain.values import ZERO, round_money, to_decimal
from invoicing_kernel.logging_config import get_logger

logger = get_logger("engines.lines")


@dataclass(frozen=True)
class LineItemInput:
    """One selected product with its user-edited quantity and rate."""

    product_ref: str
    quantity: Any
    rate: Any

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LineItemInput:
        """Build from a plain dict using either ``product_ref`` or ``product_id``."""
        ref = data.get("product_ref", data.get("product_id", ""))
        return cls(
            product_ref="" if ref is None else str(ref),
            quantity=data.get("quantity"),
            rate=data.get("rate"),
        )


@dataclass(frozen=True)
class NormalizedLine:
    """A line that survived normalization, with 2-dp values."""

    product_ref: str
    quantity: Decimal
    rate: Decimal
    gross_amount: Decimal


def _as_line_input(item: LineItemInput | Mapping[str, Any]) -> LineItemInput | None:
    if isinstance(item, LineItemInput):
        return item
    if isinstance(item, Mapping):
        return LineItemInput.from_mapping(item)
    logger.warning("line_item_unrecognized", extra={"item_type": type(item).__name__})
    return None


def normalize_lines(
    line_items: Iterable[LineItemInput | Mapping[str, Any]] | None,
) -> tuple[tuple[NormalizedLine, ...], Decimal]:
    """
    Normalize selected line items and compute the subtotal.

    Returns:
        (normalized lines in input order, subtotal)
    """
    lines: list[NormalizedLine] = []
    subtotal = ZERO
    dropped = 0

    for item in line_items or ():
        line_input = _as_line_input(item)
        if line_input is None:
            dropped += 1
            continue

        raw_quantity = to_decimal(line_input.quantity)
        if raw_quantity <= ZERO:
            dropped += 1
            continue

        quantity = round_money(raw_quantity)
        rate = round_money(to_decimal(line_input.rate))
        gross = round_money(quantity * rate)

        lines.append(
            NormalizedLine(
                product_ref=str(line_input.product_ref),
                quantity=quantity,
                rate=rate,
                gross_amount=gross,
            )
        )
        subtotal = round_money(subtotal + gross)

    if dropped:
        logger.debug("line_items_dropped", extra={"dropped": dropped, "kept": len(lines)})

    return tuple(lines), subtotal
