"""
Values -- Decimal money helpers with explicit rounding points.

Responsibility:
    Provides the numeric primitives every invoicing calculator uses:
    coercion of caller-supplied numbers into ``Decimal`` and the two
    sanctioned rounding routines (2-dp money, whole-unit grand total).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine module. No outward dependencies.

Invariants enforced:
    - Decimal-only arithmetic: floats are converted through ``str()`` so the
      shortest repr is used, never the binary expansion.
    - Every monetary intermediate is rounded with ``round_money`` the moment
      it is computed; the rounding mode is ROUND_HALF_UP (half away from
      zero) to match the commit-time calculation.
    - Calculators run inside ``money_context()``.  Its precision is wide
      enough that every product and quotient of in-range inputs is exact
      before rounding, so quantizing never runs out of digits.

Failure modes:
    - None. ``to_decimal`` degrades unparsable input to zero, and so are
      magnitudes of 10**36 and above (with a WARNING); the rounding helpers
      accept any Decimal built from in-range inputs.
"""

from __future__ import annotations

from decimal import (
    ROUND_FLOOR,
    ROUND_HALF_UP,
    Context,
    Decimal,
    InvalidOperation,
    localcontext,
)
from typing import Any

from invoicing_kernel.logging_config import get_logger

logger = get_logger("kernel.values")

ZERO = Decimal("0")
HUNDRED = Decimal("100")
HALF = Decimal("0.5")

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

# Largest accepted adjusted exponent: inputs stay below 10**36.
MAX_INPUT_EXPONENT = 35
MONEY_PRECISION = 300
MONEY_CONTEXT = Context(prec=MONEY_PRECISION, rounding=ROUND_HALF_UP)

_WHOLE_UNIT = Decimal("1")


def money_context():
    """Context manager running the enclosed arithmetic in MONEY_CONTEXT."""
    return localcontext(MONEY_CONTEXT)


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a caller-supplied number into a finite Decimal.

    Accepts Decimal, int, str and float (floats go through ``str()``).
    ``None``, booleans, blank or unparsable strings, NaN, infinities and
    out-of-range magnitudes all become ``Decimal("0")``.
    """
    if isinstance(value, Decimal):
        result = value
    elif value is None or isinstance(value, bool):
        return ZERO
    elif isinstance(value, (int, float, str)):
        text = str(value).strip()
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except (InvalidOperation, ValueError):
            return ZERO
    else:
        return ZERO

    if not result.is_finite():
        return ZERO
    if result and result.adjusted() > MAX_INPUT_EXPONENT:
        logger.warning("decimal_out_of_range", extra={"exponent": result.adjusted()})
        return ZERO
    return result


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to ``decimal_places`` (default 2).

    This is the ONLY sanctioned 2-dp rounding routine; every calculator step
    calls it immediately after its arithmetic.

    Preconditions: value is a finite Decimal.
    Postconditions: Returns value quantized with the given rounding mode.
    """
    quantum = Decimal(1).scaleb(-decimal_places)
    return value.quantize(quantum, rounding=rounding, context=MONEY_CONTEXT)


def round_whole_units(value: Decimal) -> Decimal:
    """
    Round to a whole currency unit for the invoice grand total.

    Halves go toward positive infinity (``floor(value + 0.5)``).  For every
    non-negative amount this is exactly half-away-from-zero; for negative
    previews it keeps the round-off inside (-0.5, 0.5].
    """
    shifted = MONEY_CONTEXT.add(value, HALF)
    return shifted.quantize(_WHOLE_UNIT, rounding=ROUND_FLOOR, context=MONEY_CONTEXT)


def percent_of(base: Decimal, percent: Decimal) -> Decimal:
    """``round_money(base * percent / 100)``."""
    return round_money(MONEY_CONTEXT.divide(MONEY_CONTEXT.multiply(base, percent), HUNDRED))
