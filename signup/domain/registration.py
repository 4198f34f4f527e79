"""
Registration domain service - Email verification state machine.

This module contains the core business logic for user registration,
confirming account ownership through a signed, time-limited email link.

Account Verification State Machine (Forward-Only)
=================================================

States:
- UNVERIFIED: Initial state after registration (account exists, no access)
- VERIFIED: Terminal state after a valid link is confirmed

Valid Transitions:
    UNVERIFIED -> UNVERIFIED  (token issued or re-issued, nothing stored)
    UNVERIFIED -> VERIFIED    (confirm succeeds; verified_at recorded once)

Invalid Transitions (never allowed):
    VERIFIED -> any           (a repeated confirm is a successful no-op)

Account creation and notification are not atomic: if the notifier fails,
the account stays created and unverified, and resend_verification() is the
recovery path.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from urllib.parse import urlencode

from jinja2 import Template

from .exceptions import (
    AlreadyAuthenticated,
    DeliveryError,
    EmailAlreadyRegistered,
    InvalidRegistration,
)
from .models import DEFAULT_ROLE, Account, Violation, normalize_roles
from .ports import AccountRepository, Clock, Notifier, PasswordHasher
from .tokens import TokenRejection, VerificationLinkSigner
from .validation import RegistrationInput, ValidatedRegistration, normalize_email, validate_registration

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "An account cannot be created with this email."
LINK_INVALID_MESSAGE = (
    "This confirmation link is invalid or has expired. "
    "Please register again or request a new link."
)
NEEDS_REGISTRATION_MESSAGE = "Please register to create an account."
VERIFIED_MESSAGE = "Your account has been verified, you can now sign in."

CONFIRMATION_EMAIL_TEMPLATE = Template(
    """\
<html>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
    <p>Hello {{ first_name }},</p>
    <p>Please confirm your email address by clicking the link below:</p>
    <p><a href="{{ confirmation_url }}">Confirm my account</a></p>
    <p>If you can't click the link, copy and paste this address into your browser:<br>
        {{ confirmation_url }}</p>
    <p>This link expires on {{ expires_at }}.</p>
</body>
</html>
""",
    autoescape=True,
)


class ConfirmStatus(Enum):
    """Outcome of a confirmation request."""

    VERIFIED = "verified"
    NEEDS_REGISTRATION = "needs_registration"
    LINK_INVALID = "link_invalid"


@dataclass(frozen=True)
class PendingVerification:
    """Result of a registration awaiting email confirmation."""

    account_id: int
    email: str
    expires_at: datetime
    notification_sent: bool


@dataclass(frozen=True)
class ConfirmResult:
    """Result of confirm(): status, rejection reason and user-facing message."""

    status: ConfirmStatus
    message: str
    reason: TokenRejection | None = None
    account_id: int | None = None
    newly_verified: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status is ConfirmStatus.VERIFIED


def compose_confirmation_email(account: Account, link: str, expires_at: datetime) -> str:
    """Render the HTML body of the confirmation message."""
    return CONFIRMATION_EMAIL_TEMPLATE.render(
        first_name=account.first_name,
        confirmation_url=link,
        expires_at=expires_at.strftime("%Y-%m-%d %H:%M UTC"),
    )


def build_account(record: ValidatedRegistration, password_hash: str, now: datetime) -> Account:
    """Map a validated registration onto a new, unverified Account."""
    return Account(
        email=record.email,
        password_hash=password_hash,
        first_name=record.first_name,
        last_name=record.last_name,
        roles=normalize_roles([DEFAULT_ROLE]),
        is_verified=False,
        created_at=now,
        updated_at=now,
    )


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the registration flow: validation, password hashing,
    account persistence, link issuance and notification; then link
    confirmation.
    """

    repository: AccountRepository
    notifier: Notifier
    password_hasher: PasswordHasher
    signer: VerificationLinkSigner
    clock: Clock
    verify_url: str
    confirmation_subject: str = "Confirm your account"

    def register(self, data: RegistrationInput, *, authenticated: bool = False) -> PendingVerification:
        """
        Register a new, unverified account and send its confirmation link.

        Args:
            data: Raw registration form fields
            authenticated: Whether the caller already holds a session

        Returns:
            PendingVerification; notification_sent is False when the
            notifier refused the message (the account still exists)

        Raises:
            AlreadyAuthenticated: If the caller is signed in
            InvalidRegistration: On any field violation, including a
                duplicate email (nothing is persisted or sent)
        """
        if authenticated:
            raise AlreadyAuthenticated()

        result = validate_registration(data)
        if not result.is_valid:
            raise InvalidRegistration(result.violations)
        record = result.record

        # Advisory only: the store's constraint decides concurrent races
        if self.repository.find_by_email(record.email) is not None:
            raise InvalidRegistration([Violation("email", DUPLICATE_EMAIL_MESSAGE)])

        account = build_account(record, self.password_hasher.hash(record.password), self.clock.now())
        try:
            account.id = self.repository.create(account)
        except EmailAlreadyRegistered:
            raise InvalidRegistration([Violation("email", DUPLICATE_EMAIL_MESSAGE)]) from None

        logger.info("Account %s created, awaiting email verification", account.id)
        return self._send_verification(account)

    def confirm(self, token: str | None) -> ConfirmResult:
        """
        Confirm account ownership from a verification link token.

        Missing or malformed tokens and unknown accounts ask the caller to
        register. Tampered, expired and stale links share one user-facing
        message. Confirming an already verified account succeeds without
        changing verified_at.
        """
        if token is None or not token.strip():
            return ConfirmResult(ConfirmStatus.NEEDS_REGISTRATION, NEEDS_REGISTRATION_MESSAGE)

        now = self.clock.now()
        check = self.signer.verify(token.strip(), self._find_account, now)

        if check.ok:
            account = check.account
            newly_verified = False
            if not account.is_verified:
                newly_verified = self.repository.mark_verified(account.id, now)
            if newly_verified:
                logger.info("Account %s verified", account.id)
            return ConfirmResult(
                ConfirmStatus.VERIFIED,
                VERIFIED_MESSAGE,
                account_id=account.id,
                newly_verified=newly_verified,
            )

        logger.warning("Verification link rejected: %s", check.rejection.value)
        if check.rejection in (TokenRejection.MALFORMED, TokenRejection.UNKNOWN_ACCOUNT):
            return ConfirmResult(
                ConfirmStatus.NEEDS_REGISTRATION,
                NEEDS_REGISTRATION_MESSAGE,
                reason=check.rejection,
            )
        return ConfirmResult(ConfirmStatus.LINK_INVALID, LINK_INVALID_MESSAGE, reason=check.rejection)

    def resend_verification(self, email: str) -> PendingVerification | None:
        """
        Issue and send a fresh link for an account that is still unverified.

        Returns:
            PendingVerification, or None when no unverified account has this
            email (nothing is sent)
        """
        account = self._find_by_email(normalize_email(email))
        if account is None or account.is_verified:
            return None
        return self._send_verification(account)

    def _send_verification(self, account: Account) -> PendingVerification:
        issued = self.signer.issue(account, self.clock.now())
        link = f"{self.verify_url}?{urlencode({'token': issued.token})}"
        body = compose_confirmation_email(account, link, issued.expires_at)

        notification_sent = True
        try:
            self.notifier.send(account.email, self.confirmation_subject, body)
        except DeliveryError:
            notification_sent = False
            logger.error(
                "Verification email for account %s could not be delivered",
                account.id,
                exc_info=True,
            )

        return PendingVerification(
            account_id=account.id,
            email=account.email,
            expires_at=issued.expires_at,
            notification_sent=notification_sent,
        )

    def _find_account(self, account_id: int) -> Account | None:
        account = self.repository.find_by_id(account_id)
        if account is not None:
            account.roles = normalize_roles(account.roles)
        return account

    def _find_by_email(self, email: str) -> Account | None:
        account = self.repository.find_by_email(email)
        if account is not None:
            account.roles = normalize_roles(account.roles)
        return account
