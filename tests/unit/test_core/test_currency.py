"""
Unit tests for currency field parsing.
"""

import pytest

from achfile.core.currency import parse_currency
from achfile.core.exceptions import FieldParseError


class TestParseCurrency:
    """Tests for parse_currency function."""

    def test_zero_padded_digits(self):
        """Test a plain zero-padded amount field."""
        assert parse_currency(b"0000012345") == 12345.0

    def test_commas_are_dropped(self):
        """Test thousands separators are removed before parsing."""
        assert parse_currency(b"1,234,567") == 1234567.0

    def test_surrounding_spaces_trimmed(self):
        """Test leading and trailing spaces are ignored."""
        assert parse_currency(b"   1,234.50 ") == 1234.5

    def test_accepts_text(self):
        """Test str input is accepted as well as bytes."""
        assert parse_currency("0000000100") == 100.0

    def test_signed_value(self):
        """Test an explicit sign is honoured."""
        assert parse_currency(b"-0000000100") == -100.0

    def test_all_zeros(self):
        """Test a zero amount."""
        assert parse_currency(b"0000000000") == 0.0

    @pytest.mark.parametrize("value", [b"", b"          ", b"12A45", b"1.2.3", b"inf", b"nan", b"1e5", b"1_000"])
    def test_invalid_values(self, value):
        """Test non-numeral fields raise FieldParseError."""
        with pytest.raises(FieldParseError) as exc_info:
            parse_currency(value)

        assert exc_info.value.field == "amount"
        assert exc_info.value.code == "FIELD_PARSE"

    def test_field_name_in_error(self):
        """Test the caller's field name is carried on the error."""
        with pytest.raises(FieldParseError) as exc_info:
            parse_currency(b"ABC", field="debit total")

        assert exc_info.value.field == "debit total"
        assert "debit total" in str(exc_info.value)
