"""
InvoicePreviewService -- live totals preview and commit preparation.

Architecture: invoicing_services -- imperative shell.
    Resolves product and ledger tax info through ReferenceDataSelector,
    hands plain lookups to the pure calculator, then runs the draft
    validator over the result.

Invariants enforced:
    - The rows returned by ``prepare_commit()`` are built from the very
      totals object the preview computed; nothing is recalculated.
    - The service never commits or flushes; the caller owns the session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from invoicing_config.schema import InvoicingConfig
from invoicing_engines.adjustment_note import (
    AdjustmentNoteTotals,
    AdjustmentType,
    compute_adjustment_note_totals,
)
from invoicing_engines.discount import DiscountSpec
from invoicing_engines.invoice_totals import InvoiceTotals, compute_invoice_totals
from invoicing_engines.order_financials import OrderFinancials, calculate_order_financials
from invoicing_kernel.domain.reference import LedgerTaxInfo, ProductTaxInfo
from invoicing_kernel.domain.values import round_money, to_decimal
from invoicing_kernel.logging_config import LogContext, get_logger
from invoicing_kernel.selectors.reference_selector import ReferenceDataSelector
from invoicing_services.draft import InvoiceDraft
from invoicing_services.invoice_validation import (
    AdjustmentNoteValidator,
    InvoiceDraftValidator,
    ValidationReport,
)

logger = get_logger("services.invoice_preview")


@dataclass(frozen=True)
class InvoicePreview:
    """Totals shown to the user together with any rule violations."""

    totals: InvoiceTotals
    report: ValidationReport

    @property
    def is_valid(self) -> bool:
        return self.report.is_valid


@dataclass(frozen=True)
class CommitPayload:
    """Rows to insert for a validated invoice."""

    header: dict[str, Any]
    items: tuple[dict[str, Any], ...] = field(default=())
    charges: tuple[dict[str, Any], ...] = field(default=())
    totals: InvoiceTotals | None = None


@dataclass(frozen=True)
class AdjustmentNotePreview:
    """Credit or debit note totals with any rule violations."""

    totals: AdjustmentNoteTotals
    report: ValidationReport

    @property
    def is_valid(self) -> bool:
        return self.report.is_valid


class InvoicePreviewService:
    """Preview and prepare invoices from drafts.

    Contract:
        - ``preview()`` never raises for business-rule violations.
        - ``prepare_commit()`` raises InvoiceValidationError when the draft
          is invalid.

    Non-goals:
        - Does NOT persist the invoice (caller inserts the payload rows).
        - Does NOT manage stock or persist outstanding balances.
    """

    def __init__(
        self,
        session: Session,
        config: InvoicingConfig | None = None,
        selector: ReferenceDataSelector | None = None,
        validator: InvoiceDraftValidator | None = None,
    ) -> None:
        self._config = config or InvoicingConfig()
        self._selector = selector or ReferenceDataSelector(session)
        self._validator = validator or InvoiceDraftValidator(self._config)
        self._adjustment_validator = AdjustmentNoteValidator()

    def resolve_lookups(
        self, draft: InvoiceDraft
    ) -> tuple[dict[str, ProductTaxInfo], dict[str, LedgerTaxInfo]]:
        """Product and ledger tax lookups for everything the draft references."""
        return (
            self._selector.product_tax_lookup(draft.product_refs),
            self._selector.ledger_tax_lookup(draft.ledger_refs),
        )

    def preview(self, draft: InvoiceDraft) -> InvoicePreview:
        """Compute totals and validate the draft.

        Args:
            draft: The invoice as currently entered.

        Returns:
            InvoicePreview with totals and the validation report.
        """
        with LogContext.bind(invoice_id=draft.invoice_id, warehouse_id=draft.warehouse_id):
            product_lookup, ledger_lookup = self.resolve_lookups(draft)
            totals = compute_invoice_totals(
                line_items=draft.line_items,
                charge_items=draft.charge_items,
                tax_mode=draft.tax_mode,
                discount=draft.discount,
                product_lookup=product_lookup,
                ledger_lookup=ledger_lookup,
            )
            report = self._validator.validate(draft, totals, product_lookup, ledger_lookup)

            logger.info(
                "invoice_preview_computed",
                extra={
                    "line_count": totals.line_count,
                    "charge_count": len(totals.charges),
                    "grand_total": str(totals.grand_total),
                    "valid": report.is_valid,
                },
            )
            return InvoicePreview(totals=totals, report=report)

    def prepare_commit(self, draft: InvoiceDraft) -> CommitPayload:
        """Build the rows to insert for ``draft``.

        Raises:
            InvoiceValidationError: If the draft breaks any rule.
        """
        preview = self.preview(draft)
        preview.report.raise_if_invalid()

        totals = preview.totals
        with LogContext.bind(invoice_id=draft.invoice_id, warehouse_id=draft.warehouse_id):
            logger.info(
                "invoice_commit_prepared",
                extra={
                    "total_amount": str(totals.grand_total),
                    "round_off_amount": str(totals.round_off),
                },
            )
        return CommitPayload(
            header=totals.as_row(),
            items=tuple(line.as_row() for line in totals.lines),
            charges=tuple(charge.as_row() for charge in totals.charges),
            totals=totals,
        )

    def preview_adjustment_note(
        self,
        line_items: Any,
        tax_mode: Any,
        adjustment_type: AdjustmentType | str,
        outstanding_amount: Any,
        invoice_id: str | None = None,
    ) -> AdjustmentNotePreview:
        """Totals for a credit or debit note against an invoice, validated.

        Lines carry the GST rate snapshotted from the invoice, so no
        reference data is read.  A credit note above ``outstanding_amount``
        is reported as CREDIT_EXCEEDS_OUTSTANDING.
        """
        with LogContext.bind(invoice_id=invoice_id):
            totals = compute_adjustment_note_totals(
                line_items=line_items,
                tax_mode=tax_mode,
                adjustment_type=adjustment_type,
                outstanding_amount=outstanding_amount,
            )
            report = self._adjustment_validator.validate(totals)
            return AdjustmentNotePreview(totals=totals, report=report)

    def order_financials(
        self,
        item_total: Any,
        discount: DiscountSpec | None = None,
        gst_rate: Any = None,
    ) -> OrderFinancials:
        """Sales order totals using the configured default GST rate."""
        rate = self._config.order_defaults.gst_rate if gst_rate is None else gst_rate
        discount = discount or DiscountSpec()
        return calculate_order_financials(item_total, discount.type, discount.value, rate)

    def format_amount(self, amount: Any) -> str:
        """Amount formatted for display, e.g. ``INR 1,180.00``."""
        places = self._config.money_decimal_places
        value: Decimal = round_money(to_decimal(amount), places)
        return f"{self._config.currency} {value:,.{places}f}"
