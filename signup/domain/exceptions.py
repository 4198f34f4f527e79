"""
Domain exceptions - Semantic error types for registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Token verification failures are deliberately absent: the link verifier
reports them as TokenRejection values, not exceptions.
"""

from collections.abc import Sequence

from .models import Violation


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class InvalidRegistration(RegistrationError):
    """Submitted registration data has one or more field-level violations."""

    def __init__(self, violations: Sequence[Violation]) -> None:
        self.violations = tuple(violations)
        fields = ", ".join(v.field for v in self.violations)
        super().__init__(f"Invalid registration: {fields}")


class EmailAlreadyRegistered(RegistrationError):
    """The store's uniqueness constraint rejected the email."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(email)


class AlreadyAuthenticated(RegistrationError):
    """Caller already holds an authenticated session."""

    pass


class DeliveryError(RegistrationError):
    """Notifier could not accept the message."""

    pass
