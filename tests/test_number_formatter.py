"""Tests for number formatting helpers."""
import math

import pytest

from number_formatter import ERROR_MARKER, format_number, parse_number, stringify_number


def test_large_value_uses_exponential():
    assert format_number("1e20") == "1.000000e+20"
    assert format_number(1e20) == "1.000000e+20"


def test_tiny_value_uses_exponential():
    assert format_number("0.0000001") == "1.000000e-7"


def test_exponential_boundaries():
    assert format_number("999999999999999") == "999999999999999"
    assert format_number("1000000000000000") == "1.000000e+15"
    assert format_number("0.000001") == "0.000001"
    assert format_number("-123456789012345678") == "-1.234568e+17"


def test_decimal_string_preserved_without_grouping():
    assert format_number("3.14159") == "3.14159"
    assert format_number("1234567.5") == "1234567.5"


def test_decimal_capped_at_ten_fraction_digits():
    assert format_number("0.123456789012345") == "0.123456789"
    assert format_number("2.00000000004") == "2"


def test_integer_without_grouping():
    assert format_number("1234567") == "1234567"
    assert format_number("0") == "0"
    assert format_number(42.0) == "42"


@pytest.mark.parametrize("value", [ERROR_MARKER, "Infinity", "-Infinity", "NaN", "sin(3", "2+3"])
def test_markers_and_expressions_pass_through(value):
    assert format_number(value) == value


def test_stringify_number():
    assert stringify_number(5.0) == "5"
    assert stringify_number(0.1 + 0.2) == "0.30000000000000004"
    assert stringify_number(-2.5) == "-2.5"
    assert stringify_number(1e21) == "1e+21"
    assert stringify_number(math.inf) == "Infinity"
    assert stringify_number(-math.inf) == "-Infinity"
    assert stringify_number(math.nan) == "NaN"


def test_parse_number_reads_leading_prefix():
    assert parse_number("12.5") == 12.5
    assert parse_number("3+4") == 3.0
    assert parse_number("1e+21") == 1e21
    assert parse_number("-Infinity") == -math.inf
    assert parse_number(".5") == 0.5
    assert math.isnan(parse_number("sin(30)"))
    assert math.isnan(parse_number(""))


def test_small_results_stringify_positionally():
    assert stringify_number(0.00001) == "0.00001"
    assert stringify_number(0.00005) == "0.00005"
    assert stringify_number(-0.0001234) == "-0.0001234"
    assert stringify_number(1e-7) == "1e-07"


def test_small_values_are_not_rounded_to_zero():
    assert format_number(0.00005) == "0.00005"
    assert format_number("5e-05") == "0.00005"
    assert format_number("0.000001") == "0.000001"
