"""Tests for ReferenceDataSelector lookups."""

from decimal import Decimal
from uuid import uuid4

import pytest

from invoicing_kernel.domain.reference import LedgerTaxInfo, ProductTaxInfo
from invoicing_kernel.exceptions import LedgerNotFoundError, ProductNotFoundError
from invoicing_kernel.selectors import ReferenceDataSelector


class TestProductTaxLookup:

    def test_returns_dtos_keyed_by_caller_id(self, session, create_product):
        product = create_product(tax_type="gst", gst_rate="12")
        key = str(product.id)

        lookup = ReferenceDataSelector(session).product_tax_lookup([key])

        assert list(lookup) == [key]
        assert isinstance(lookup[key], ProductTaxInfo)
        assert lookup[key].tax_type == "gst"
        assert lookup[key].gst_rate_percent == Decimal("12")

    def test_uppercase_id_kept_as_given(self, session, create_product):
        product = create_product()
        key = str(product.id).upper()

        lookup = ReferenceDataSelector(session).product_tax_lookup([key])

        assert key in lookup

    def test_missing_and_malformed_ids_omitted(self, session, create_product):
        product = create_product()

        lookup = ReferenceDataSelector(session).product_tax_lookup(
            [str(product.id), str(uuid4()), "P-001", ""]
        )

        assert list(lookup) == [str(product.id)]

    def test_empty_request(self, session):
        assert ReferenceDataSelector(session).product_tax_lookup([]) == {}

    def test_get_single_product(self, session, create_product):
        product = create_product(tax_type="no_tax", gst_rate="0")
        info = ReferenceDataSelector(session).get_product_tax_info(product.id)
        assert not info.is_gst

    def test_get_missing_product_raises(self, session):
        missing = str(uuid4())
        with pytest.raises(ProductNotFoundError) as exc_info:
            ReferenceDataSelector(session).get_product_tax_info(missing)
        assert exc_info.value.product_id == missing
        assert exc_info.value.code == "PRODUCT_NOT_FOUND"


class TestLedgerTaxLookup:

    def test_returns_ledger_rates(self, session, create_ledger):
        freight = create_ledger(name="Freight", gst_rate="18")
        commission = create_ledger(name="Commission", gst_rate=None)

        lookup = ReferenceDataSelector(session).ledger_tax_lookup(
            [str(freight.id), str(commission.id)]
        )

        assert lookup[str(freight.id)] == LedgerTaxInfo(Decimal("18"))
        # NULL rate reads as zero
        assert lookup[str(commission.id)].gst_rate_percent == Decimal("0")

    def test_get_missing_ledger_raises(self, session):
        with pytest.raises(LedgerNotFoundError):
            ReferenceDataSelector(session).get_ledger_tax_info("not-a-uuid")

    def test_selector_does_not_write(self, session, create_ledger):
        ledger = create_ledger()
        ReferenceDataSelector(session).ledger_tax_lookup([str(ledger.id)])
        assert not session.new
        assert not session.dirty
