"""
invoicing_services -- Package init and public API.

Responsibility:
    Orchestration over the pure calculators: resolving reference data
    through selectors, validating drafts and preparing commit payloads.
    This is the only layer that holds database sessions.

Architecture position:
    Services -- stateful orchestration over engines + kernel.

    Dependency direction (enforced by tests/architecture/test_layer_boundaries.py):
        invoicing_services/ -> invoicing_engines/  (allowed)
        invoicing_services/ -> invoicing_config/   (allowed)
        invoicing_services/ -> invoicing_kernel/   (allowed)
        invoicing_engines/  -> invoicing_services/ (FORBIDDEN)
        invoicing_kernel/   -> invoicing_services/ (FORBIDDEN)
"""

from invoicing_kernel.logging_config import get_logger

logger = get_logger("services")

from invoicing_services.draft import InvoiceDraft
from invoicing_services.invoice_preview_service import (
    AdjustmentNotePreview,
    CommitPayload,
    InvoicePreview,
    InvoicePreviewService,
)
from invoicing_services.invoice_validation import (
    AdjustmentNoteValidator,
    InvoiceDraftValidator,
    ValidationReport,
    Violation,
    clamp_discount,
)

__all__ = [
    "AdjustmentNotePreview",
    "AdjustmentNoteValidator",
    "CommitPayload",
    "InvoiceDraft",
    "InvoiceDraftValidator",
    "InvoicePreview",
    "InvoicePreviewService",
    "ValidationReport",
    "Violation",
    "clamp_discount",
]
