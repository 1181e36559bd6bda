"""
Reference DTOs -- the tax attributes the calculators read from collaborators.

Selectors produce these from the database; tests and callers may also build
them directly.  Calculators receive them through plain ``Mapping`` lookups
keyed by product / ledger id, never through ambient state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from invoicing_kernel.domain.values import ZERO, to_decimal

GST_TAX_TYPE = "gst"


@dataclass(frozen=True, slots=True)
class ProductTaxInfo:
    """Per-product tax attributes: applicability and GST rate percentage."""

    tax_type: str
    gst_rate_percent: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "gst_rate_percent", to_decimal(self.gst_rate_percent))
        tax_type = self.tax_type.value if isinstance(self.tax_type, Enum) else self.tax_type
        object.__setattr__(self, "tax_type", str(tax_type).strip().lower())

    @property
    def is_gst(self) -> bool:
        return self.tax_type == GST_TAX_TYPE


@dataclass(frozen=True, slots=True)
class LedgerTaxInfo:
    """Per-ledger GST rate percentage applied to charges posted to it."""

    gst_rate_percent: Decimal = field(default=ZERO)

    def __post_init__(self) -> None:
        object.__setattr__(self, "gst_rate_percent", to_decimal(self.gst_rate_percent))


def _field(source: Any, *names: str) -> Any:
    for name in names:
        if isinstance(source, Mapping):
            if name in source:
                return source[name]
        elif hasattr(source, name):
            return getattr(source, name)
    return None


def as_product_tax_info(source: Any) -> ProductTaxInfo | None:
    """
    Read a ProductTaxInfo from a DTO, a mapping, or any object with
    ``tax_type`` / ``gst_rate`` attributes.  None stays None.
    """
    if source is None or isinstance(source, ProductTaxInfo):
        return source
    tax_type = _field(source, "tax_type", "taxType")
    return ProductTaxInfo(
        tax_type="" if tax_type is None else tax_type,
        gst_rate_percent=_field(source, "gst_rate_percent", "gst_rate", "gstRatePercent"),
    )


def as_ledger_tax_info(source: Any) -> LedgerTaxInfo | None:
    """
    Read a LedgerTaxInfo from a DTO, a mapping, or any object with a
    ``gst_rate`` attribute.  None stays None.
    """
    if source is None or isinstance(source, LedgerTaxInfo):
        return source
    return LedgerTaxInfo(
        gst_rate_percent=_field(source, "gst_rate_percent", "gst_rate", "gstRatePercent"),
    )
