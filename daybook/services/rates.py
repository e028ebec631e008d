"""Daily rate model: gross to net conversion and rate input parsing."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

DEDUCTION_RATE = Decimal("0.35")
NET_RATE_FACTOR = Decimal("1") - DEDUCTION_RATE

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")
# Largest value a Numeric(12, 2) column holds.
MAX_GROSS_RATE = Decimal("9999999999.99")


class RateValidationError(ValueError):
    """Raised when a gross rate cannot be used as a billing rate."""


def q2(value: Decimal) -> Decimal:
    return value.quantize(Q2)


def net_daily_rate(gross: Decimal) -> Decimal:
    """Estimated take-home amount for one day billed at ``gross``."""

    return gross * NET_RATE_FACTOR


def parse_gross_rate(raw: object) -> Decimal:
    """Parse user input into a gross daily rate.

    Empty, non-numeric, non-finite and negative values are rejected, as are
    fractions of a cent; nothing is ever coerced to zero or rounded.
    """

    if raw is None or isinstance(raw, bool):
        raise RateValidationError("gross_daily_rate is required.")

    if isinstance(raw, Decimal):
        value = raw
    else:
        text = str(raw).strip()
        if not text:
            raise RateValidationError("gross_daily_rate is required.")
        try:
            value = Decimal(text)
        except InvalidOperation as exc:
            raise RateValidationError("gross_daily_rate must be a valid number.") from exc

    if not value.is_finite():
        raise RateValidationError("gross_daily_rate must be a valid number.")
    if value < ZERO:
        raise RateValidationError("gross_daily_rate must be greater or equal zero.")
    if value > MAX_GROSS_RATE:
        raise RateValidationError(f"gross_daily_rate must not exceed {MAX_GROSS_RATE}.")
    # Trailing zeros are fine; anything the Numeric(12, 2) column would round is not.
    if value != value.quantize(Q2):
        raise RateValidationError("gross_daily_rate must have at most two decimal places.")
    return value
