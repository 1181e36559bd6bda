"""
Module: invoicing_services.invoice_validation
Responsibility:
    Business rules an invoice draft must satisfy before it is committed.
    The calculator degrades bad input to zero contributions; this layer is
    where such input is reported and rejected.

Architecture position:
    Services -- may import engines, config and kernel.

Invariants enforced:
    - Every violation is collected; validation never stops at the first.
    - Violations are structured (code, field, message), never free text only.
    - Validation reads the same totals object the preview showed, so the
      discount and taxable checks agree with what the user saw.

Failure modes:
    - ``validate()`` never raises, for drafts and adjustment notes alike; ``ValidationReport.raise_if_invalid()``
      raises ``InvoiceValidationError`` carrying the violations.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from invoicing_config.schema import InvoicingConfig
from invoicing_engines.adjustment_note import AdjustmentNoteTotals, AdjustmentType
from invoicing_engines.charges import ChargeType
from invoicing_engines.discount import DiscountSpec, DiscountType
from invoicing_engines.invoice_totals import InvoiceTotals
from invoicing_kernel.domain.values import HUNDRED, ZERO, round_money, to_decimal
from invoicing_kernel.exceptions import InvoiceValidationError
from invoicing_kernel.logging_config import get_logger
from invoicing_services.draft import InvoiceDraft

logger = get_logger("services.invoice_validation")

# Violation codes
NO_LINE_ITEMS = "NO_LINE_ITEMS"
INVALID_QUANTITY = "INVALID_QUANTITY"
INVALID_RATE = "INVALID_RATE"
INVALID_CHARGE_VALUE = "INVALID_CHARGE_VALUE"
INVALID_CHARGE_TYPE = "INVALID_CHARGE_TYPE"
UNKNOWN_PRODUCT = "UNKNOWN_PRODUCT"
UNKNOWN_LEDGER = "UNKNOWN_LEDGER"
DISCOUNT_OUT_OF_RANGE = "DISCOUNT_OUT_OF_RANGE"
DISCOUNT_EXCEEDS_SUBTOTAL = "DISCOUNT_EXCEEDS_SUBTOTAL"
NEGATIVE_TAXABLE_AMOUNT = "NEGATIVE_TAXABLE_AMOUNT"
CREDIT_EXCEEDS_OUTSTANDING = "CREDIT_EXCEEDS_OUTSTANDING"


@dataclass(frozen=True)
class Violation:
    """One broken rule, pointing at the offending field."""

    code: str
    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"code": self.code, "field": self.field, "message": self.message}


@dataclass(frozen=True)
class ValidationReport:
    violations: tuple[Violation, ...] = field(default=())

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def codes(self) -> frozenset[str]:
        return frozenset(v.code for v in self.violations)

    def for_field(self, prefix: str) -> tuple[Violation, ...]:
        return tuple(v for v in self.violations if v.field.startswith(prefix))

    def raise_if_invalid(self) -> None:
        """
        Raises:
            InvoiceValidationError: If any violation was recorded.
        """
        if self.violations:
            raise InvoiceValidationError(list(self.violations))


def clamp_discount(
    discount: DiscountSpec,
    subtotal: Decimal,
    max_percent: Decimal = HUNDRED,
) -> DiscountSpec:
    """
    Clamp a discount into its allowed range.

    Percentages are held to [0, max_percent]; flat amounts to [0, subtotal].
    The calculator never clamps; callers that want the form's clamping
    behaviour apply this before calculating.
    """
    if discount.type is DiscountType.NONE:
        return discount
    value = max(discount.value, ZERO)
    if discount.type is DiscountType.PERCENTAGE:
        value = min(value, max_percent)
    else:
        value = min(value, max(round_money(to_decimal(subtotal)), ZERO))
    if value == discount.value:
        return discount
    return DiscountSpec(discount.type, value)


class InvoiceDraftValidator:
    """Check a draft and its computed totals against the invoice rules.

    Contract:
        - ``validate()`` returns a ValidationReport listing every violation.
        - Product and ledger existence is only checked when the caller
          supplies the lookups the totals were computed with.

    Non-goals:
        - Does NOT recompute totals; the caller passes the totals it shows.
    """

    def __init__(self, config: InvoicingConfig | None = None) -> None:
        self._config = config or InvoicingConfig()

    def validate(
        self,
        draft: InvoiceDraft,
        totals: InvoiceTotals,
        product_lookup: Mapping[str, Any] | None = None,
        ledger_lookup: Mapping[str, Any] | None = None,
    ) -> ValidationReport:
        violations: list[Violation] = []
        violations.extend(self._check_lines(draft, product_lookup))
        violations.extend(self._check_charges(draft, ledger_lookup))
        violations.extend(self._check_discount(draft.discount, totals))

        if totals.amount_after_discount < ZERO:
            violations.append(
                Violation(
                    NEGATIVE_TAXABLE_AMOUNT,
                    "discount",
                    f"Amount after discount is negative ({totals.amount_after_discount})",
                )
            )

        report = ValidationReport(tuple(violations))
        if report.is_valid:
            logger.debug("invoice_draft_valid")
        else:
            logger.info(
                "invoice_draft_invalid",
                extra={
                    "violation_count": len(report.violations),
                    "codes": sorted(report.codes),
                },
            )
        return report

    def _check_lines(
        self,
        draft: InvoiceDraft,
        product_lookup: Mapping[str, Any] | None,
    ) -> list[Violation]:
        violations: list[Violation] = []
        allow_zero_rate = self._config.validation.allow_zero_rate

        if not any(to_decimal(line.quantity) > ZERO for line in draft.line_items):
            violations.append(
                Violation(NO_LINE_ITEMS, "line_items", "At least one item is required")
            )

        for index, line in enumerate(draft.line_items):
            prefix = f"line_items[{index}]"
            if to_decimal(line.quantity) <= ZERO:
                violations.append(
                    Violation(INVALID_QUANTITY, f"{prefix}.quantity", "Quantity must be positive")
                )
            rate = to_decimal(line.rate)
            if rate < ZERO or (rate == ZERO and not allow_zero_rate):
                violations.append(
                    Violation(INVALID_RATE, f"{prefix}.rate", "Rate must be positive")
                )
            if product_lookup is not None and line.product_ref not in product_lookup:
                violations.append(
                    Violation(
                        UNKNOWN_PRODUCT,
                        f"{prefix}.product_id",
                        f"Product not found: {line.product_ref}",
                    )
                )
        return violations

    def _check_charges(
        self,
        draft: InvoiceDraft,
        ledger_lookup: Mapping[str, Any] | None,
    ) -> list[Violation]:
        violations: list[Violation] = []
        for index, charge in enumerate(draft.charge_items):
            prefix = f"charge_items[{index}]"
            if to_decimal(charge.charge_value) <= ZERO:
                violations.append(
                    Violation(
                        INVALID_CHARGE_VALUE,
                        f"{prefix}.charge_value",
                        "Charge value must be positive",
                    )
                )
            if ChargeType.parse(charge.charge_type) is None:
                violations.append(
                    Violation(
                        INVALID_CHARGE_TYPE,
                        f"{prefix}.charge_type",
                        f"Unknown charge type: {charge.charge_type}",
                    )
                )
            if ledger_lookup is not None and charge.ledger_ref not in ledger_lookup:
                violations.append(
                    Violation(
                        UNKNOWN_LEDGER,
                        f"{prefix}.ledger_id",
                        f"Ledger not found: {charge.ledger_ref}",
                    )
                )
        return violations

    def _check_discount(self, discount: DiscountSpec, totals: InvoiceTotals) -> list[Violation]:
        if discount.type is DiscountType.NONE:
            return []

        if discount.value < ZERO:
            return [
                Violation(DISCOUNT_OUT_OF_RANGE, "discount.value", "Discount cannot be negative")
            ]

        max_percent = self._config.validation.max_discount_percent
        if discount.type is DiscountType.PERCENTAGE and discount.value > max_percent:
            return [
                Violation(
                    DISCOUNT_OUT_OF_RANGE,
                    "discount.value",
                    f"Percentage discount cannot exceed {max_percent}",
                )
            ]

        if discount.type is DiscountType.FLAT_AMOUNT and totals.discount_amount > totals.subtotal:
            return [
                Violation(
                    DISCOUNT_EXCEEDS_SUBTOTAL,
                    "discount.value",
                    f"Flat discount {totals.discount_amount} exceeds subtotal {totals.subtotal}",
                )
            ]
        return []


class AdjustmentNoteValidator:
    """Check computed credit/debit note totals before the note is raised.

    A credit note may not take the invoice's outstanding amount below zero;
    a note exactly equal to the outstanding amount settles it.
    """

    def validate(self, totals: AdjustmentNoteTotals) -> ValidationReport:
        violations: list[Violation] = []

        if not totals.lines:
            violations.append(
                Violation(NO_LINE_ITEMS, "line_items", "At least one item is required")
            )

        if (
            totals.adjustment_type is AdjustmentType.CREDIT
            and totals.grand_total > totals.outstanding_before
        ):
            violations.append(
                Violation(
                    CREDIT_EXCEEDS_OUTSTANDING,
                    "total_amount",
                    f"Credit note total {totals.grand_total} exceeds invoice "
                    f"outstanding amount {totals.outstanding_before}",
                )
            )

        report = ValidationReport(tuple(violations))
        if not report.is_valid:
            logger.info(
                "adjustment_note_invalid",
                extra={
                    "adjustment_type": totals.adjustment_type.value,
                    "codes": sorted(report.codes),
                },
            )
        return report
