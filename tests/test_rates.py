from __future__ import annotations

from decimal import Decimal

import pytest

from daybook.services.rates import (
    DEDUCTION_RATE,
    MAX_GROSS_RATE,
    NET_RATE_FACTOR,
    RateValidationError,
    net_daily_rate,
    parse_gross_rate,
)


def test_net_factor_is_gross_minus_fixed_deduction() -> None:
    assert DEDUCTION_RATE == Decimal("0.35")
    assert NET_RATE_FACTOR == Decimal("0.65")


@pytest.mark.parametrize(
    "gross",
    [
        Decimal("0"),
        Decimal("0.01"),
        Decimal("1"),
        Decimal("199.99"),
        Decimal("300"),
        Decimal("450.50"),
        Decimal("1234.56"),
        Decimal("99999.99"),
        Decimal("9999999999.99"),
    ],
)
def test_net_daily_rate_is_exactly_gross_times_factor(gross: Decimal) -> None:
    assert net_daily_rate(gross) == gross * Decimal("0.65")


def test_net_daily_rate_over_range_of_cents() -> None:
    for cents in range(0, 200_001, 137):
        gross = Decimal(cents) / Decimal(100)
        assert net_daily_rate(gross) == gross * Decimal("0.65")


def test_known_net_values() -> None:
    assert net_daily_rate(Decimal("300")) == Decimal("195")
    assert net_daily_rate(Decimal("200")) == Decimal("130")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("300", Decimal("300")),
        (" 250.50 ", Decimal("250.50")),
        (300, Decimal("300")),
        (0, Decimal("0")),
        (Decimal("12.34"), Decimal("12.34")),
        (0.1, Decimal("0.1")),
    ],
)
def test_parse_gross_rate_accepts_numbers(raw: object, expected: Decimal) -> None:
    assert parse_gross_rate(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", True])
def test_parse_gross_rate_rejects_missing_values(raw: object) -> None:
    with pytest.raises(RateValidationError, match="required"):
        parse_gross_rate(raw)


@pytest.mark.parametrize("raw", ["abc", "12,5", "1e", "NaN", "Infinity", Decimal("NaN")])
def test_parse_gross_rate_rejects_non_numeric_values(raw: object) -> None:
    with pytest.raises(RateValidationError, match="valid number"):
        parse_gross_rate(raw)


def test_parse_gross_rate_rejects_negative_and_oversized_values() -> None:
    with pytest.raises(RateValidationError, match="greater or equal zero"):
        parse_gross_rate("-1")
    with pytest.raises(RateValidationError, match="must not exceed"):
        parse_gross_rate(MAX_GROSS_RATE + Decimal("0.01"))


@pytest.mark.parametrize("raw", ["100.555", "0.001", Decimal("12.345"), 0.125])
def test_parse_gross_rate_rejects_fractions_of_a_cent(raw: object) -> None:
    with pytest.raises(RateValidationError, match="at most two decimal places"):
        parse_gross_rate(raw)


def test_parse_gross_rate_keeps_trailing_zero_decimals() -> None:
    assert parse_gross_rate("100.500") == Decimal("100.5")
    assert parse_gross_rate("1E+2") == Decimal("100")
