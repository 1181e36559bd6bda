"""ORM models for invoicing reference data."""

from invoicing_kernel.models.ledger import Ledger
from invoicing_kernel.models.product import Product, ProductTaxApplicability

__all__ = [
    "Ledger",
    "Product",
    "ProductTaxApplicability",
]
