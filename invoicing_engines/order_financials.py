"""
Sales order financials -- discount and a single flat GST rate on an order total.

Orders are quoted before products are invoiced, so there is no per-line
tax and no whole-unit round-off; the invoice recalculates everything.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from invoicing_kernel.domain.values import (
    ZERO,
    money_context,
    percent_of,
    round_money,
    to_decimal,
)
from invoicing_engines.discount import DiscountSpec, compute_discount_amount

DEFAULT_ORDER_GST_RATE = Decimal("10.00")


@dataclass(frozen=True)
class OrderFinancials:
    item_total: Decimal
    discount_amount: Decimal
    discounted_total: Decimal
    gst_amount: Decimal
    total_amount: Decimal

    def as_row(self) -> dict[str, Any]:
        return {
            "item_total": self.item_total,
            "discount_amount": self.discount_amount,
            "discounted_total": self.discounted_total,
            "gst_amount": self.gst_amount,
            "total_amount": self.total_amount,
        }


def calculate_order_financials(
    item_total: Any,
    discount_type: Any = None,
    discount_value: Any = ZERO,
    gst_rate: Any = DEFAULT_ORDER_GST_RATE,
) -> OrderFinancials:
    """Order totals; ``gst_rate`` is a percentage (10 for 10%)."""
    with money_context():
        total = round_money(to_decimal(item_total))
        discount_amount = compute_discount_amount(total, DiscountSpec(discount_type, discount_value))
        discounted_total = round_money(total - discount_amount)
        gst_amount = percent_of(discounted_total, to_decimal(gst_rate))
        return OrderFinancials(
            item_total=total,
            discount_amount=discount_amount,
            discounted_total=discounted_total,
            gst_amount=gst_amount,
            total_amount=round_money(discounted_total + gst_amount),
        )
