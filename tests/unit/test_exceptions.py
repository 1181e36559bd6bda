"""Tests for the typed exception hierarchy."""

import pytest

from invoicing_kernel.exceptions import (
    ConfigurationError,
    InvoiceValidationError,
    InvoicingError,
    LedgerNotFoundError,
    ProductNotFoundError,
    ReferenceDataError,
)


class TestHierarchy:

    @pytest.mark.parametrize(
        "exc",
        [
            ConfigurationError("x.yaml", ["bad"]),
            ProductNotFoundError("P1"),
            LedgerNotFoundError("L1"),
            InvoiceValidationError([]),
        ],
    )
    def test_all_are_invoicing_errors(self, exc):
        assert isinstance(exc, InvoicingError)
        assert exc.code != InvoicingError.code

    def test_reference_errors_share_base(self):
        assert issubclass(ProductNotFoundError, ReferenceDataError)
        assert issubclass(LedgerNotFoundError, ReferenceDataError)

    def test_configuration_error_lists_errors(self):
        error = ConfigurationError("x.yaml", ["currency: empty", "gst_rate: negative"])
        assert "x.yaml" in str(error)
        assert "gst_rate: negative" in str(error)

    def test_validation_error_message_lists_codes(self):
        class _V:
            def __init__(self, code):
                self.code = code

        error = InvoiceValidationError([_V("INVALID_RATE"), _V("NO_LINE_ITEMS"), _V("INVALID_RATE")])
        assert "3 violation(s)" in str(error)
        assert "[INVALID_RATE, NO_LINE_ITEMS]" in str(error)
