"""
Credential validation - Structural checks on submitted registration data.

Validation is a pure function: it never touches the account store. The
uniqueness pre-check happens in the registration service, and the store's
constraint remains the authority on duplicates.
"""

import string
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from .models import Violation

EMAIL_MAX_LENGTH = 180
PASSWORD_MIN_LENGTH = 12
PASSWORD_MAX_LENGTH = 255
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 255


@dataclass(frozen=True)
class RegistrationInput:
    """Raw registration form fields as submitted."""

    email: str
    password: str
    password_confirmation: str
    first_name: str
    last_name: str
    agree_terms: bool

    def __repr__(self) -> str:
        return f"RegistrationInput(email={self.email!r})"


@dataclass(frozen=True)
class ValidatedRegistration:
    """Normalized registration data, safe to hash and persist."""

    email: str
    password: str
    first_name: str
    last_name: str

    def __repr__(self) -> str:
        return f"ValidatedRegistration(email={self.email!r})"


@dataclass(frozen=True)
class ValidationResult:
    """Either a validated record or the violations that prevented one."""

    record: ValidatedRegistration | None
    violations: tuple[Violation, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.violations


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def _check_email(email: str) -> str | None:
    if not email:
        return "Email is required."
    if len(email) > EMAIL_MAX_LENGTH:
        return f"Email must be at most {EMAIL_MAX_LENGTH} characters."
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return f'The email "{email}" is not valid.'
    return None


def _check_password(password: str) -> str | None:
    if not password:
        return "Password is required."
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters."
    if len(password) > PASSWORD_MAX_LENGTH:
        return f"Password must be at most {PASSWORD_MAX_LENGTH} characters."
    if not (
        any(c.islower() for c in password)
        and any(c.isupper() for c in password)
        and any(c in string.digits for c in password)
        and any(not c.isalnum() for c in password)
    ):
        return (
            "Password must contain an uppercase letter, a lowercase letter, "
            "a digit and a special character."
        )
    return None


def _check_name(value: str, label: str) -> str | None:
    if not value:
        return f"{label} is required."
    if len(value) < NAME_MIN_LENGTH:
        return f"{label} must be at least {NAME_MIN_LENGTH} characters."
    if len(value) > NAME_MAX_LENGTH:
        return f"{label} must be at most {NAME_MAX_LENGTH} characters."
    return None


def validate_registration(data: RegistrationInput) -> ValidationResult:
    """
    Check every registration field and collect all violations.

    Password length and complexity share one effective minimum
    (PASSWORD_MIN_LENGTH). Names are stripped before their length is
    checked; the password is never altered.

    Args:
        data: Raw form fields

    Returns:
        ValidationResult with a ValidatedRegistration when no rule fails,
        otherwise with at most one Violation per field, in field order
    """
    email = normalize_email(data.email)
    first_name = data.first_name.strip()
    last_name = data.last_name.strip()

    checks = [
        ("email", _check_email(email)),
        ("password", _check_password(data.password)),
        (
            "password_confirmation",
            None
            if data.password == data.password_confirmation
            else "Password and confirmation must match.",
        ),
        ("first_name", _check_name(first_name, "First name")),
        ("last_name", _check_name(last_name, "Last name")),
        (
            "agree_terms",
            None if data.agree_terms is True else "You must accept the terms of use.",
        ),
    ]
    violations = tuple(Violation(name, message) for name, message in checks if message)
    if violations:
        return ValidationResult(record=None, violations=violations)

    return ValidationResult(
        record=ValidatedRegistration(
            email=email,
            password=data.password,
            first_name=first_name,
            last_name=last_name,
        )
    )
