"""
Tests for reading and account validation.
"""

import pytest

from vibrate_monitor.handlers.validation import (
    decimal_places,
    is_valid_email,
    name_errors,
    password_errors,
    sanitize_string,
    validate_parameters,
)


@pytest.mark.parametrize("value", [20, 20.0, 0, "12.5", 19.99])
def test_accepts_values_in_range(value):
    assert validate_parameters({"V1": value}) == []


def test_rejects_more_than_two_decimals():
    errors = validate_parameters({"V1": 20.001})

    assert len(errors) == 1
    assert "decimal places" in errors[0]


def test_decimal_places():
    assert decimal_places(20.0) == 0
    assert decimal_places(1.25) == 2
    assert decimal_places(0.001) == 3


def test_reports_every_problem():
    errors = validate_parameters({
        "V1": 25,
        "GV1": -1,
        "H1": "fast",
        "ZZ": 1,
    })

    assert "Vertical Velocity (coupled) cannot exceed 20" in errors
    assert "Vertical Acceleration (coupled) cannot be negative" in errors
    assert "Horizontal Velocity (coupled) must be a number" in errors
    assert "Unknown parameter: ZZ" in errors
    assert len(errors) == 4


def test_acceleration_channels_have_lower_limit():
    assert validate_parameters({"GV1": 2}) == []
    assert validate_parameters({"GV1": 2.01}) == ["Vertical Acceleration (coupled) cannot exceed 2"]


@pytest.mark.parametrize("value", [True, None, float("nan"), [1]])
def test_rejects_non_numbers(value):
    assert validate_parameters({"V1": value}) == ["Vertical Velocity (coupled) must be a number"]


def test_email_and_password_rules():
    assert is_valid_email("a.b@plant.com")
    assert not is_valid_email("no-at-sign")
    assert password_errors("Abc123") == []
    assert password_errors("abc") == ["Password must be at least 6 characters"]
    assert password_errors("abcdef1")


def test_name_and_free_text():
    assert name_errors("Al") == []
    assert name_errors("A")
    assert name_errors("x" * 51)
    assert sanitize_string("  <b>hi</b> ") == "bhi/b"
    assert sanitize_string(None) == ""
