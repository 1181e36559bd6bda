"""
Module: invoicing_engines.discount
Responsibility:
    Compute the single invoice-wide discount and distribute it across the
    normalized lines in proportion to their gross amount.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - percentage: round(subtotal * value / 100, 2); flat: round(value, 2).
    - The discount is NOT clamped here.  An over-large flat discount or an
      out-of-range percentage propagates so the validation layer can reject
      it (see invoicing_services.invoice_validation).
    - Each line's share is round(gross / subtotal * discount, 2); the sum
      of shares may drift from the discount by at most 0.01 per line.
    - A zero subtotal allocates nothing.

Usage:
    amount = compute_discount_amount(subtotal, DiscountSpec("percentage", 10))
    allocations = allocate_discount(lines, subtotal, amount)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from invoicing_kernel.domain.values import ZERO, percent_of, round_money, to_decimal
from invoicing_kernel.logging_config import get_logger
from invoicing_engines.lines import NormalizedLine

logger = get_logger("engines.discount")


class DiscountType(str, Enum):
    """How the invoice-wide discount value is interpreted."""

    NONE = "none"
    PERCENTAGE = "percentage"  # Percent of the pre-discount subtotal
    FLAT_AMOUNT = "flat_amount"  # Absolute amount

    @classmethod
    def coerce(cls, value: Any) -> DiscountType:
        """Accept an enum member, its string value, or None; unknown means no discount."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        try:
            return cls(str(getattr(value, "value", value)).strip().lower())
        except ValueError:
            logger.warning("unknown_discount_type", extra={"discount_type": str(value)})
            return cls.NONE


@dataclass(frozen=True)
class DiscountSpec:
    """A single invoice-wide discount."""

    type: DiscountType = DiscountType.NONE
    value: Decimal = field(default=ZERO)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", DiscountType.coerce(self.type))
        object.__setattr__(self, "value", to_decimal(self.value))


NO_DISCOUNT = DiscountSpec()


@dataclass(frozen=True)
class DiscountAllocation:
    """One line's share of the invoice discount."""

    product_ref: str
    line_discount: Decimal
    taxable_value: Decimal


def compute_discount_amount(subtotal: Decimal, discount: DiscountSpec | None) -> Decimal:
    """Invoice-level discount amount, rounded to 2 dp and never clamped."""
    if discount is None or discount.type is DiscountType.NONE:
        return ZERO
    if discount.type is DiscountType.PERCENTAGE:
        return percent_of(subtotal, discount.value)
    return round_money(discount.value)


def allocate_discount(
    lines: Sequence[NormalizedLine],
    subtotal: Decimal,
    discount_amount: Decimal,
) -> tuple[DiscountAllocation, ...]:
    """
    Distribute ``discount_amount`` across ``lines`` by gross-amount share.

    Returns one allocation per line, in line order.
    """
    allocations: list[DiscountAllocation] = []
    for line in lines:
        if subtotal > ZERO:
            line_discount = round_money(line.gross_amount / subtotal * discount_amount)
        else:
            line_discount = ZERO
        allocations.append(
            DiscountAllocation(
                product_ref=line.product_ref,
                line_discount=line_discount,
                taxable_value=round_money(line.gross_amount - line_discount),
            )
        )
    return tuple(allocations)
