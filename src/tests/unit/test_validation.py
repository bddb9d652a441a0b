"""Tests for edit validation rules."""

import pytest

from bookxpert.domain.validation import ValidationResult, validate, validate_field


class TestNameRules:
    def test_empty_name(self):
        result = validate("", {})
        assert result.errors == ("Name cannot be empty",)

    def test_whitespace_name(self):
        assert validate("   ", {}).errors == ("Name cannot be empty",)

    def test_name_length_limit(self):
        assert validate("x" * 50, {}).is_valid
        assert validate("x" * 51, {}).errors == ("Name cannot exceed 50 characters",)

    def test_name_length_ignores_surrounding_whitespace(self):
        assert validate("  " + "a" * 50 + " ", {}).is_valid
        assert not validate("  " + "a" * 51, {}).is_valid


class TestFieldRules:
    """Rules are chosen by case-insensitive key."""

    def test_negative_price(self):
        result = validate("iPhone", {"price": "-5"})
        assert list(result.errors) == ["Price cannot be negative"]

    def test_price_not_a_number(self):
        assert validate_field("Price", "cheap") == ["Price must be a valid number"]

    def test_price_accepts_decimals_and_whitespace(self):
        assert validate_field("price", " 1099.00 ") == []

    @pytest.mark.parametrize("value", ["64 GB", "128GB", "1TB", "512 mb"])
    def test_valid_capacity(self, value):
        assert validate_field("capacity", value) == []
        assert validate_field("Storage", value) == []

    @pytest.mark.parametrize("value", ["lots", "64", "GB 64", "1.5 TB"])
    def test_invalid_capacity(self, value):
        assert validate_field("Capacity", value) == [
            "Capacity must be a valid format (e.g., '64 GB', '128GB', '1TB')"
        ]

    def test_year_range(self):
        assert validate_field("year", "1900") == []
        assert validate_field("year", "2030") == []
        assert validate_field("year", "1899") == ["Year must be between 1900 and 2030"]
        assert validate_field("YEAR", "2031") == ["Year must be between 1900 and 2030"]

    def test_year_not_a_number(self):
        assert validate_field("year", "2019.5") == ["Year must be a valid number"]

    def test_screen_size(self):
        assert validate_field("Screen size", "7.9") == []
        assert validate_field("screensize", "6") == []
        assert validate_field("Screen Size", "big") == ["Screen size must be a valid number"]

    def test_generic_length_limit(self):
        assert validate_field("color", "x" * 100) == []
        assert validate_field("cpu model", "x" * 101) == [
            "Cpu Model cannot exceed 100 characters"
        ]

    def test_blank_values_pass(self):
        """Blank values are dropped on save, so they are not rejected."""
        assert validate_field("price", "  ") == []
        assert validate_field("year", "") == []


class TestValidate:
    def test_duplicate_keys_differ_only_in_case(self):
        result = validate("iPhone", {"Color": "Blue", "color": "Red"})
        assert "Duplicate field names are not allowed" in result.errors

    def test_collects_every_message(self):
        result = validate("", {"price": "-1", "year": "1800"})
        assert list(result.errors) == [
            "Name cannot be empty",
            "Price cannot be negative",
            "Year must be between 1900 and 2030",
        ]
        assert result.summary == (
            "Name cannot be empty\n"
            "Price cannot be negative\n"
            "Year must be between 1900 and 2030"
        )

    def test_valid_edit(self):
        result = validate("iPhone 15", {"price": "999.99", "color": "Blue"})
        assert result == ValidationResult.valid()
        assert result.is_valid
        assert result.summary == ""

    def test_case_duplicate_prices(self):
        result = validate("iPhone", {"Price": "10", "price": "20"})

        assert not result.is_valid
        assert "Duplicate field names are not allowed" in result.errors

    @pytest.mark.parametrize("fields", [{}, {"color": "Blue"}, {"price": "10", "year": "2020"}])
    def test_empty_name_always_fails(self, fields):
        assert not validate("", fields).is_valid
