"""
InvoicingConfig schema.

Frozen dataclasses the YAML configuration set is parsed into.  The
calculators themselves take no configuration; these values drive the
validation layer and the order financials default.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

# ---------------------------------------------------------------------------
# Validation limits
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationLimits:
    """Business-rule limits applied before an invoice is committed."""

    max_discount_percent: Decimal = Decimal("100")
    allow_zero_rate: bool = False


# ---------------------------------------------------------------------------
# Sales order defaults
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderDefaults:
    """Defaults for sales order financials."""

    gst_rate: Decimal = Decimal("10.00")


# ---------------------------------------------------------------------------
# Root configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InvoicingConfig:
    """The complete runtime configuration."""

    config_id: str = "default"
    version: int = 1
    currency: str = "INR"  # Display only; amounts carry no currency
    money_decimal_places: int = 2
    validation: ValidationLimits = field(default_factory=ValidationLimits)
    order_defaults: OrderDefaults = field(default_factory=OrderDefaults)
    checksum: str = ""
