"""
Pytest fixtures for the invoicing test suite.

Provides:
- An in-memory SQLite database with the reference-data tables
- Per-test sessions rolled back at teardown
- Product / ledger factories and the lookups the calculator consumes
- Structured log capture
"""

import json
import logging
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from invoicing_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    reset_engine,
)
from invoicing_kernel.domain.reference import LedgerTaxInfo, ProductTaxInfo
from invoicing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from invoicing_kernel.models import Ledger, Product


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "service: mark test as exercising a service over the database"
    )


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture invoicing logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            compute_invoice_totals(...)
            logs = captured_logs()
            assert any(r["message"] == "INVOICING_ENGINE_TRACE" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("invoicing")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """In-memory SQLite engine shared by the whole session."""
    engine = init_engine_from_url("sqlite://", pool_pre_ping=False)
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session whose changes are rolled back at teardown."""
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


@pytest.fixture
def create_product(session):
    """Factory inserting a Product row."""

    def _create(
        name: str = "Widget",
        tax_type: str = "gst",
        gst_rate: Decimal | str = Decimal("18"),
        hsn_code: str | None = None,
    ) -> Product:
        product = Product(
            name=name,
            tax_type=tax_type,
            gst_rate=Decimal(str(gst_rate)),
            hsn_code=hsn_code,
        )
        session.add(product)
        session.flush()
        return product

    return _create


@pytest.fixture
def create_ledger(session):
    """Factory inserting a Ledger row."""

    def _create(
        name: str = "Freight",
        gst_rate: Decimal | str | None = Decimal("18"),
        ledger_type: str = "expense",
    ) -> Ledger:
        ledger = Ledger(
            name=name,
            ledger_type=ledger_type,
            gst_rate=None if gst_rate is None else Decimal(str(gst_rate)),
        )
        session.add(ledger)
        session.flush()
        return ledger

    return _create


# =============================================================================
# Calculator lookups
# =============================================================================


@pytest.fixture
def product_lookup() -> dict[str, ProductTaxInfo]:
    """Products used by the worked invoice examples."""
    return {
        "P1": ProductTaxInfo(tax_type="gst", gst_rate_percent=Decimal("18")),
        "P2": ProductTaxInfo(tax_type="gst", gst_rate_percent=Decimal("5")),
        "P3": ProductTaxInfo(tax_type="no_tax", gst_rate_percent=Decimal("0")),
    }


@pytest.fixture
def ledger_lookup() -> dict[str, LedgerTaxInfo]:
    """Ledgers used by the worked invoice examples."""
    return {
        "L1": LedgerTaxInfo(gst_rate_percent=Decimal("18")),
        "L2": LedgerTaxInfo(gst_rate_percent=Decimal("0")),
    }
