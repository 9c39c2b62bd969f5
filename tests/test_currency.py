"""Tests for the Currency Formatter."""

import pytest
from decimal import Decimal

from mfinance.errors import FormatError
from mfinance.formatting import format_amount, round_amount, validate_config
from mfinance.models import CurrencyPosition, FormattingConfig


NBSP = "\u00a0"

EURO = FormattingConfig(
    currency_symbol="€",
    thousands_separator=NBSP,
    decimal_separator=",",
)


class TestFormatAmount:
    """Tests for display formatting."""

    def test_defaults(self):
        assert format_amount(Decimal("1000.00")) == f"1{NBSP}000.00"

    def test_prefix_symbol_after_sign(self):
        assert format_amount(Decimal("-1234567.5"), EURO) == f"-€1{NBSP}234{NBSP}567,5"

    def test_prefix_symbol_positive(self):
        assert format_amount(Decimal("12.5"), EURO) == "€12,5"

    def test_suffix_symbol(self):
        config = FormattingConfig(
            currency_symbol=" EUR",
            currency_position=CurrencyPosition.SUFFIX,
            thousands_separator=".",
            decimal_separator=",",
        )
        assert format_amount(Decimal("-1234.56"), config) == "-1.234,56 EUR"

    def test_comma_thousands(self):
        config = FormattingConfig(currency_symbol="$", thousands_separator=",")
        assert format_amount(Decimal("1234567.89"), config) == "$1,234,567.89"

    def test_keeps_digits_without_places(self):
        assert format_amount(Decimal("42.420")) == "42.420"

    def test_integer_amount(self):
        assert format_amount(Decimal("123456")) == f"123{NBSP}456"

    def test_exponent_amount(self):
        assert format_amount(Decimal("1E+3")) == f"1{NBSP}000"

    @pytest.mark.parametrize("amount,expected", [
        ("0", "0.00"),
        ("1", "1.00"),
        ("12", "12.00"),
        ("123", "123.00"),
        ("1234", f"1{NBSP}234.00"),
        ("12345.6", f"12{NBSP}345.60"),
        ("123456.78", f"123{NBSP}456.78"),
        ("1999999.99", f"1{NBSP}999{NBSP}999.99"),
        ("-1", "-1.00"),
        ("-999.5", "-999.50"),
        ("-1000", f"-1{NBSP}000.00"),
    ])
    def test_grouping(self, amount, expected):
        assert format_amount(Decimal(amount), places=2) == expected

    @pytest.mark.parametrize("amount,expected", [
        ("0.006", "0.01"),
        ("-0.006", "-0.01"),
        ("0.005", "0.00"),
        ("0.015", "0.02"),
        ("0.025", "0.02"),
        ("-0.001", "0.00"),
        ("42.42", "42.42"),
    ])
    def test_rounding_to_two_places(self, amount, expected):
        """Test half-to-even rounding and that zero never shows a sign."""
        assert format_amount(Decimal(amount), places=2) == expected

    def test_large_amount_is_not_truncated(self):
        amount = Decimal("123456789012345678901234567890.129")
        assert format_amount(amount, FormattingConfig(thousands_separator=","), places=2) == (
            "123,456,789,012,345,678,901,234,567,890.13"
        )


class TestRoundAmount:
    """Tests for rounding helper."""

    def test_round(self):
        assert str(round_amount(Decimal("1.005"), 2)) == "1.00"
        assert str(round_amount(Decimal("7"), 2)) == "7.00"


class TestValidateConfig:
    """Tests for separator consistency checks."""

    def test_default_is_valid(self):
        validate_config(FormattingConfig())

    def test_equal_separators(self):
        config = FormattingConfig(thousands_separator=".", decimal_separator=".")
        with pytest.raises(FormatError):
            validate_config(config)
        with pytest.raises(FormatError):
            format_amount(Decimal("1"), config)

    @pytest.mark.parametrize("field", ["thousands_separator", "decimal_separator"])
    @pytest.mark.parametrize("value", ["5", "-", "+"])
    def test_separator_must_not_look_like_a_number(self, field, value):
        with pytest.raises(FormatError):
            format_amount(Decimal("1234.5"), FormattingConfig(**{field: value}))
