"""Field validation for user input.

Validation is independent of the transport layer: callers pass raw values
and get back a field-error map (field name -> list of messages). An empty
map means the input is valid. Rules that need the store (email uniqueness)
live in the service; everything here is pure.
"""

from __future__ import annotations

from typing import Any

from email_validator import EmailNotValidError, validate_email

from users.application.security import BCRYPT_MAX_PASSWORD_BYTES

FieldErrors = dict[str, list[str]]

MAX_NAME_LENGTH = 255
MAX_EMAIL_LENGTH = 255
MIN_PASSWORD_LENGTH = 8

EMAIL_TAKEN_MESSAGE = "The email has already been taken."


def normalize_text(value: Any) -> Any:
    """Trim surrounding whitespace; blank strings count as missing."""
    if not isinstance(value, str):
        return value
    value = value.strip()
    return value or None


def _required_string(field: str, value: Any, errors: FieldErrors) -> bool:
    """Apply the required and string rules. Returns True if value is usable."""
    if value is None or value == "":
        errors.setdefault(field, []).append(f"The {field} field is required.")
        return False
    if not isinstance(value, str):
        errors.setdefault(field, []).append(f"The {field} field must be a string.")
        return False
    return True


def _validate_name(name: Any, errors: FieldErrors) -> None:
    if not _required_string("name", name, errors):
        return
    if len(name) > MAX_NAME_LENGTH:
        errors.setdefault("name", []).append(
            f"The name field must not be greater than {MAX_NAME_LENGTH} characters."
        )


def _validate_email(email: Any, errors: FieldErrors) -> None:
    if not _required_string("email", email, errors):
        return
    try:
        validate_email(email, check_deliverability=False, test_environment=True)
    except EmailNotValidError:
        errors.setdefault("email", []).append(
            "The email field must be a valid email address."
        )
    if len(email) > MAX_EMAIL_LENGTH:
        errors.setdefault("email", []).append(
            f"The email field must not be greater than {MAX_EMAIL_LENGTH} characters."
        )


def _validate_password(password: Any, errors: FieldErrors) -> None:
    if not _required_string("password", password, errors):
        return

    messages: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        messages.append(
            f"The password field must be at least {MIN_PASSWORD_LENGTH} characters."
        )
    if len(password.encode()) > BCRYPT_MAX_PASSWORD_BYTES:
        messages.append(
            f"The password field must not be greater than "
            f"{BCRYPT_MAX_PASSWORD_BYTES} bytes."
        )
    if not any(c.isalpha() for c in password):
        messages.append("The password field must contain at least one letter.")
    if not (any(c.isupper() for c in password) and any(c.islower() for c in password)):
        messages.append(
            "The password field must contain at least one uppercase "
            "and one lowercase letter."
        )
    if not any(c.isnumeric() for c in password):
        messages.append("The password field must contain at least one number.")

    if messages:
        errors.setdefault("password", []).extend(messages)


def validate_user_fields(
    name: Any,
    email: Any,
    password: Any = None,
    *,
    require_password: bool,
) -> FieldErrors:
    """Validate user fields and collect every violation.

    Args:
        name: Display name (required string, at most 255 characters)
        email: Email address (required string, valid syntax, at most 255 characters)
        password: Plaintext password, only checked when require_password is set
        require_password: Whether password rules apply (create, not update)

    Returns:
        Field-error map; empty when all rules pass
    """
    errors: FieldErrors = {}
    _validate_name(name, errors)
    _validate_email(email, errors)
    if require_password:
        _validate_password(password, errors)
    return errors
