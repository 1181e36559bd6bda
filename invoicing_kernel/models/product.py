"""
Module: invoicing_kernel.models.product
Responsibility: ORM persistence for the product tax attributes the invoice
    calculator reads: whether GST applies at all and at what rate.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - tax_type is one of ProductTaxApplicability; anything other than "gst"
      is treated as not taxable by the calculator.
    - gst_rate is a percentage (18 means 18%), never a fraction.
"""

from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from invoicing_kernel.db.base import TrackedBase


class ProductTaxApplicability(str, Enum):
    """Whether a product is subject to GST."""

    NO_TAX = "no_tax"
    GST = "gst"


class Product(TrackedBase):
    """
    A stock item that can appear on an invoice line.

    Non-goals:
        - Inventory levels, pricing and catalog fields live elsewhere; only
          the attributes the totals calculation depends on are modelled.
    """

    __tablename__ = "products"

    __table_args__ = (
        Index("idx_product_tax_type", "tax_type"),
        Index("idx_product_active", "is_active"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    hsn_code: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    tax_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ProductTaxApplicability.NO_TAX.value,
    )

    gst_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        default=Decimal("0"),
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        return f"<Product {self.name} {self.tax_type} {self.gst_rate}%>"
