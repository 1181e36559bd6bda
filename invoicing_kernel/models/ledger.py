"""
Module: invoicing_kernel.models.ledger
Responsibility: ORM persistence for accounting ledgers.  Additional invoice
    charges (freight, packing, commission) post to a ledger, and the ledger
    carries the GST rate applied to that charge.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from decimal import Decimal

from sqlalchemy import Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from invoicing_kernel.db.base import TrackedBase


class Ledger(TrackedBase):
    """
    An accounting category to which invoice charges are posted.

    gst_rate is a percentage; NULL in the database reads as zero.
    """

    __tablename__ = "ledgers"

    __table_args__ = (
        Index("idx_ledger_type", "ledger_type"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    ledger_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="expense",
    )

    gst_rate: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Ledger {self.name} ({self.ledger_type})>"
