"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for account registration
and email-link verification. It defines its own port interfaces for
infrastructure abstraction, ensuring true hexagonal architecture decoupling.
"""

from .exceptions import (
    AlreadyAuthenticated,
    DeliveryError,
    EmailAlreadyRegistered,
    InvalidRegistration,
    RegistrationError,
)
from .models import DEFAULT_ROLE, Account, Violation, normalize_roles
from .ports import AccountRepository, Clock, Notifier, PasswordHasher
from .registration import ConfirmResult, ConfirmStatus, PendingVerification, RegistrationService
from .tokens import TokenCheck, TokenRejection, VerificationLinkSigner
from .validation import RegistrationInput, ValidationResult, validate_registration

__all__ = [
    "DEFAULT_ROLE",
    "Account",
    "AccountRepository",
    "AlreadyAuthenticated",
    "Clock",
    "ConfirmResult",
    "ConfirmStatus",
    "DeliveryError",
    "EmailAlreadyRegistered",
    "InvalidRegistration",
    "Notifier",
    "PasswordHasher",
    "PendingVerification",
    "RegistrationError",
    "RegistrationInput",
    "RegistrationService",
    "TokenCheck",
    "TokenRejection",
    "ValidationResult",
    "VerificationLinkSigner",
    "Violation",
    "normalize_roles",
    "validate_registration",
]
