"""
Field validators for HomeServices entities.

Pure, stateless checks applied when entities are built from raw input:
- Phone numbers: ASCII digits only, 8 to 15 characters
- Email addresses: standard address grammar (email-validator)
"""

from email_validator import EmailNotValidError, validate_email as _check_email


PHONE_MIN_LENGTH = 7  # exclusive
PHONE_MAX_LENGTH = 15  # inclusive
PHONE_DIGITS = frozenset("0123456789")


class ValidationFailure(ValueError):
    """A raw field value failed validation."""

    def __init__(self, field: str, value: str, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} '{value}': {reason}")


def validate_phone_number(value: str) -> str:
    """
    Validate a phone number string.

    The number must:
    - contain only the characters 0-9
    - be longer than 7 characters
    - be no longer than 15 characters

    Args:
        value: Raw phone number.

    Returns:
        The unchanged value.

    Raises:
        ValidationFailure: If any rule is broken.
    """
    if not isinstance(value, str):
        raise ValidationFailure("phone_number", str(value), "must be a string")

    if not (PHONE_MIN_LENGTH < len(value) <= PHONE_MAX_LENGTH):
        raise ValidationFailure(
            "phone_number",
            value,
            f"length must be between {PHONE_MIN_LENGTH + 1} and {PHONE_MAX_LENGTH}",
        )

    if any(char not in PHONE_DIGITS for char in value):
        raise ValidationFailure("phone_number", value, "must contain only digits")

    return value


def validate_email(value: str) -> str:
    """Validate an email address and return it unchanged."""
    if not isinstance(value, str):
        raise ValidationFailure("email", str(value), "must be a string")

    try:
        _check_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationFailure("email", value, str(e)) from e

    return value
