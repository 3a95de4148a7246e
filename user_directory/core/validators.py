"""Form validators."""

import re
from typing import Any, Callable, Dict, List, Optional, Pattern, Union

from user_directory.core.exceptions import ValidationError
from user_directory.models.user import UserForm

Callback = Callable[[Optional[ValidationError]], None]
Validator = Callable[[Any, Callback], None]

ZIPCODE_PATTERNS: List[Pattern] = [
    re.compile(r'^[0-9]{5}(-[0-9]{4})?$'),
    re.compile(r'^[A-Za-z]\d[A-Za-z][\s-]?\d[A-Za-z]\d$'),
    re.compile(r'^[A-Z]{1,2}\d[A-Z\d]?\s?\d[A-Z]{2}$', re.IGNORECASE),
    re.compile(r'^\d{4}\s?[A-Z]{2}$', re.IGNORECASE),
    re.compile(r'^[0-9]{4,5}$'),
    re.compile(r'^[A-Z0-9]{3,10}(\s?[A-Z0-9]{2,4})?$', re.IGNORECASE),
]

PHONE_PATTERNS: List[Pattern] = [
    re.compile(r'^\+?1?[-.\s]?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}$'),
    re.compile(r'^\+[1-9]\d{1,14}$'),
    re.compile(r'^[\+]?[(]?[\+]?\d{1,4}[)]?[\s\-]?[(]?\d{1,6}[)]?[\s\-]?\d{1,6}[\s\-]?\d{1,6}[\s\-]?\d{0,6}$'),
    re.compile(r'^\d{7,15}$'),
]

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
USERNAME_PATTERN = re.compile(r'^[A-Za-z0-9._-]+$')
WEBSITE_PATTERN = re.compile(r'^(https?://)?[\w-]+(\.[\w-]+)+(/\S*)?$', re.IGNORECASE)


def string_validator(field_name: str, min_length: int = 0, max_length: Optional[int] = None,
                     pattern: Union[Pattern, List[Pattern], None] = None,
                     pattern_message: Optional[str] = None, required: bool = True) -> Validator:
    """
    Build a validator for a single string field.

    The returned function is called with the raw value and a callback; the
    callback receives None when the value is valid and a ValidationError
    otherwise. Values are trimmed before every check.

    Args:
        field_name: Label used in error messages
        min_length: Minimum trimmed length, 0 disables the check
        max_length: Maximum trimmed length, None disables the check
        pattern: Regex or list of regexes; any match is sufficient
        pattern_message: Message used when no pattern matches
        required: Whether empty input is rejected

    Returns:
        The validation function
    """
    if pattern_message is None:
        pattern_message = f"{field_name} contains invalid characters"
    patterns = pattern if isinstance(pattern, list) else ([pattern] if pattern is not None else [])

    def validate(value: Any, callback: Callback) -> None:
        trimmed = value.strip() if isinstance(value, str) else ''

        if not trimmed:
            if required:
                callback(ValidationError(f"{field_name} cannot be empty or contain only spaces."))
            else:
                callback(None)
        elif min_length and len(trimmed) < min_length:
            callback(ValidationError(f"{field_name} must be at least {min_length} characters (excluding spaces)."))
        elif max_length and len(trimmed) > max_length:
            callback(ValidationError(f"{field_name} cannot exceed {max_length} characters."))
        elif patterns and not any(p.search(trimmed) for p in patterns):
            callback(ValidationError(pattern_message))
        else:
            callback(None)

    return validate


USER_FORM_RULES: Dict[str, Validator] = {
    'name': string_validator('Name', min_length=2, max_length=50),
    'username': string_validator('Username', min_length=3, max_length=30, pattern=USERNAME_PATTERN,
                                 pattern_message='Username may only contain letters, numbers, dots, dashes and underscores'),
    'email': string_validator('Email', max_length=100, pattern=EMAIL_PATTERN,
                              pattern_message='Please enter a valid email address'),
    'street': string_validator('Street', min_length=2, max_length=100),
    'suite': string_validator('Suite', max_length=50, required=False),
    'city': string_validator('City', min_length=2, max_length=50),
    'zipcode': string_validator('Zipcode', pattern=ZIPCODE_PATTERNS,
                                pattern_message='Please enter a valid postal code'),
    'phone': string_validator('Phone', pattern=PHONE_PATTERNS,
                              pattern_message='Please enter a valid phone number'),
    'website': string_validator('Website', max_length=100, pattern=WEBSITE_PATTERN,
                                pattern_message='Please enter a valid website', required=False),
    'company_name': string_validator('Company name', min_length=2, max_length=100),
    'catch_phrase': string_validator('Catch phrase', max_length=200, required=False),
    'bs': string_validator('Business strategy', max_length=200, required=False),
}


def validate_form(data: Dict[str, Any], rules: Dict[str, Validator]) -> Dict[str, str]:
    """
    Run every rule against its field.

    Returns:
        Mapping of field name to error message for each failing field
    """
    errors: Dict[str, str] = {}
    for field_name, validator in rules.items():
        def callback(error: Optional[ValidationError], field_name: str = field_name) -> None:
            if error is not None:
                errors[field_name] = str(error)
        validator(data.get(field_name), callback)
    return errors


def validate_user_form(form: UserForm) -> None:
    """
    Validate a user form.

    Raises:
        ValidationError: Carrying every field error
    """
    errors = validate_form(form.to_dict(), USER_FORM_RULES)
    if errors:
        raise ValidationError(f"Invalid user form: {', '.join(sorted(errors))}", errors)
