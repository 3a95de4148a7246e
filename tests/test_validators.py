"""Unit tests for form validators."""

import re

import pytest

from user_directory.core.exceptions import ValidationError
from user_directory.core.validators import (
    PHONE_PATTERNS,
    USER_FORM_RULES,
    ZIPCODE_PATTERNS,
    string_validator,
    validate_form,
    validate_user_form,
)
from user_directory.models.user import UserForm


def run(validator, value):
    """Call a validator and return the error message, or None."""
    outcome = []
    validator(value, outcome.append)
    assert len(outcome) == 1
    return str(outcome[0]) if outcome[0] is not None else None


def test_required_min_length():
    """Test trimmed length is what counts."""
    validator = string_validator("Name", min_length=3, required=True)

    assert run(validator, "  ab  ") == "Name must be at least 3 characters (excluding spaces)."
    assert run(validator, "abcd") is None


def test_required_rejects_blank():
    validator = string_validator("Name")
    assert run(validator, "   ") == "Name cannot be empty or contain only spaces."
    assert run(validator, None) == "Name cannot be empty or contain only spaces."


def test_optional_accepts_blank():
    validator = string_validator("Suite", min_length=3, required=False)
    assert run(validator, "  ") is None
    assert run(validator, "ab") == "Suite must be at least 3 characters (excluding spaces)."


def test_max_length():
    validator = string_validator("City", max_length=5)
    assert run(validator, "Gwenborough") == "City cannot exceed 5 characters."


def test_any_pattern_is_sufficient():
    validator = string_validator("Code", pattern=[re.compile(r"^\d+$"), re.compile(r"^[a-z]+$")])
    assert run(validator, "123") is None
    assert run(validator, "abc") is None
    assert run(validator, "a1") == "Code contains invalid characters"


def test_custom_pattern_message():
    validator = string_validator("Email", pattern=re.compile(r"@"), pattern_message="Bad email")
    assert run(validator, "nope") == "Bad email"


def test_errors_are_validation_errors():
    outcome = []
    string_validator("Name")("", outcome.append)
    assert isinstance(outcome[0], ValidationError)


@pytest.mark.parametrize("zipcode", ["92998-3874", "12345", "K1A 0B1", "SW1A 1AA", "1234 AB", "7500"])
def test_zipcode_patterns_accept(zipcode):
    assert any(pattern.search(zipcode) for pattern in ZIPCODE_PATTERNS)


@pytest.mark.parametrize("phone", ["555-123-4567", "+14155552671", "(555) 123-4567", "5551234567"])
def test_phone_patterns_accept(phone):
    assert any(pattern.search(phone) for pattern in PHONE_PATTERNS)


def test_validate_form_collects_every_error():
    errors = validate_form({"name": "", "city": "L"}, {
        "name": USER_FORM_RULES["name"],
        "city": USER_FORM_RULES["city"],
    })
    assert set(errors) == {"name", "city"}


def test_validate_user_form():
    form = UserForm(name="Ada Lovelace", username="ada", email="not-an-email", street="Main Street",
                    city="London", zipcode="12345", phone="555-123-4567", company_name="Engines")

    with pytest.raises(ValidationError) as excinfo:
        validate_user_form(form)

    assert excinfo.value.errors == {"email": "Please enter a valid email address"}

    form.email = "ada@example.com"
    validate_user_form(form)
