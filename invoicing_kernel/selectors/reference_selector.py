"""
Module: invoicing_kernel.selectors.reference_selector
Responsibility: Build the product and ledger tax lookups the invoice
    calculator consumes, from the reference-data tables.
Architecture position: Kernel > Selectors.

Contract:
    Lookups are keyed by the id exactly as the caller passed it, and contain
    only ids that exist.  A missing product means "not taxable"; a missing
    ledger means "skip that charge".  Both decisions belong to the
    calculator, so absence is never an error here.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select

from invoicing_kernel.domain.reference import LedgerTaxInfo, ProductTaxInfo
from invoicing_kernel.exceptions import LedgerNotFoundError, ProductNotFoundError
from invoicing_kernel.logging_config import get_logger
from invoicing_kernel.models.ledger import Ledger
from invoicing_kernel.models.product import Product
from invoicing_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.reference")


def _parse_ids(ids: Iterable[str | UUID]) -> dict[UUID, list[str]]:
    """Map each parseable UUID to the caller's spellings of it."""
    parsed: dict[UUID, list[str]] = {}
    for raw in ids:
        if isinstance(raw, UUID):
            parsed.setdefault(raw, []).append(str(raw))
            continue
        try:
            parsed.setdefault(UUID(str(raw)), []).append(str(raw))
        except ValueError:
            # Not a UUID, so it cannot exist in the tables.
            logger.debug("reference_id_not_uuid", extra={"reference_id": str(raw)})
    return parsed


class ReferenceDataSelector(BaseSelector):
    """Read-only access to product and ledger tax attributes."""

    def product_tax_lookup(
        self, product_ids: Iterable[str | UUID]
    ) -> dict[str, ProductTaxInfo]:
        """Map product id to its ProductTaxInfo."""
        ids = _parse_ids(product_ids)
        if not ids:
            return {}

        rows = self.session.execute(
            select(Product.id, Product.tax_type, Product.gst_rate).where(
                Product.id.in_(list(ids))
            )
        ).all()

        lookup: dict[str, ProductTaxInfo] = {}
        for row in rows:
            info = ProductTaxInfo(
                tax_type=row.tax_type,
                gst_rate_percent=row.gst_rate,
            )
            for key in ids.get(row.id, ()):
                lookup[key] = info

        logger.debug(
            "product_tax_lookup_built",
            extra={"requested": len(ids), "resolved": len(rows)},
        )
        return lookup

    def ledger_tax_lookup(
        self, ledger_ids: Iterable[str | UUID]
    ) -> dict[str, LedgerTaxInfo]:
        """Map ledger id to its LedgerTaxInfo."""
        ids = _parse_ids(ledger_ids)
        if not ids:
            return {}

        rows = self.session.execute(
            select(Ledger.id, Ledger.gst_rate).where(Ledger.id.in_(list(ids)))
        ).all()

        lookup: dict[str, LedgerTaxInfo] = {}
        for row in rows:
            info = LedgerTaxInfo(gst_rate_percent=row.gst_rate)
            for key in ids.get(row.id, ()):
                lookup[key] = info

        logger.debug(
            "ledger_tax_lookup_built",
            extra={"requested": len(ids), "resolved": len(rows)},
        )
        return lookup

    def get_product_tax_info(self, product_id: str | UUID) -> ProductTaxInfo:
        """
        Tax attributes of a single product.

        Raises:
            ProductNotFoundError: If the product does not exist.
        """
        info = self.product_tax_lookup([product_id]).get(str(product_id))
        if info is None:
            raise ProductNotFoundError(str(product_id))
        return info

    def get_ledger_tax_info(self, ledger_id: str | UUID) -> LedgerTaxInfo:
        """
        Tax attributes of a single ledger.

        Raises:
            LedgerNotFoundError: If the ledger does not exist.
        """
        info = self.ledger_tax_lookup([ledger_id]).get(str(ledger_id))
        if info is None:
            raise LedgerNotFoundError(str(ledger_id))
        return info
