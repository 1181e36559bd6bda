"""
Typed Exception Hierarchy for the Invoicing Kernel.

===============================================================================
WHERE EXCEPTIONS ARE RAISED
===============================================================================

The totals calculators in ``invoicing_engines`` NEVER raise: they run on
every keystroke of a live invoice form and degrade unresolvable or
malformed input to zero contributions instead.  Exceptions belong to the
layers around them:

  - invoicing_config     -> ConfigurationError
  - invoicing_services   -> InvoiceValidationError, ReferenceDataError

Every exception carries a class-level ``code`` (machine-readable, API-safe)
and its context as attributes, so callers catch by type and read fields
instead of parsing messages:

    try:
        payload = service.prepare_commit(draft)
    except InvoiceValidationError as e:
        return {"error": e.code, "violations": [v.as_dict() for v in e.violations]}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InvoicingError (base)
    |
    +-- ConfigurationError
    |
    +-- ReferenceDataError
    |   +-- ProductNotFoundError
    |   +-- LedgerNotFoundError
    |
    +-- InvoiceValidationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Config          | CONFIGURATION_ERROR         | YAML content fails validation
----------------|-----------------------------|-----------------------------------------
Reference data  | PRODUCT_NOT_FOUND           | Product id absent from reference data
                | LEDGER_NOT_FOUND            | Ledger id absent from reference data
----------------|-----------------------------|-----------------------------------------
Validation      | INVOICE_VALIDATION_FAILED   | Draft breaks one or more business rules
"""

from __future__ import annotations

from typing import Any


class InvoicingError(Exception):
    """
    Base exception for all invoicing errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVOICING_ERROR"


# Configuration


class ConfigurationError(InvoicingError):
    """Configuration content is structurally valid YAML but semantically wrong."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, source: str, errors: list[str]):
        self.source = source
        self.errors = errors
        super().__init__(
            f"Invalid invoicing configuration in {source}:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


# Reference data


class ReferenceDataError(InvoicingError):
    """Base exception for product / ledger reference data errors."""

    code: str = "REFERENCE_DATA_ERROR"


class ProductNotFoundError(ReferenceDataError):
    """Product with given ID was not found."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class LedgerNotFoundError(ReferenceDataError):
    """Ledger with given ID was not found."""

    code: str = "LEDGER_NOT_FOUND"

    def __init__(self, ledger_id: str):
        self.ledger_id = ledger_id
        super().__init__(f"Ledger not found: {ledger_id}")


# Validation


class InvoiceValidationError(InvoicingError):
    """
    Invoice draft violates one or more business rules.

    Raised by the validation layer before an invoice is committed; the
    calculator itself surfaces out-of-range values as-is.
    """

    code: str = "INVOICE_VALIDATION_FAILED"

    def __init__(self, violations: list[Any]):
        self.violations = list(violations)
        codes = ", ".join(sorted({getattr(v, "code", str(v)) for v in self.violations}))
        super().__init__(
            f"Invoice validation failed: {len(self.violations)} violation(s) [{codes}]"
        )
