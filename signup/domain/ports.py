"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from datetime import datetime
from typing import Protocol

from .models import Account


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def create(self, account: Account) -> int:
        """
        Persist a new account and return its store-assigned identifier.

        The store's uniqueness constraint on email is authoritative: when
        two concurrent creates race for the same email, exactly one commits.

        Args:
            account: Account with id=None and a normalized email

        Returns:
            Identifier assigned by the store

        Raises:
            EmailAlreadyRegistered: If an account with this email exists
        """
        ...

    def find_by_id(self, account_id: int) -> Account | None:
        """Return the account with this identifier, or None."""
        ...

    def find_by_email(self, email: str) -> Account | None:
        """Return the account with this normalized email, or None."""
        ...

    def update(self, account: Account) -> None:
        """
        Overwrite the mutable fields of an existing account.

        Raises:
            EmailAlreadyRegistered: If the new email belongs to another account
        """
        ...

    def mark_verified(self, account_id: int, verified_at: datetime) -> bool:
        """
        Conditionally transition an account to verified.

        The write only applies while the account is still unverified, so
        concurrent confirmations record verified_at exactly once.

        Returns:
            True if this call performed the transition, False otherwise
        """
        ...


class Notifier(Protocol):
    """Port interface for outbound email delivery."""

    def send(self, to_address: str, subject: str, html_body: str) -> None:
        """
        Hand a message to the mail transport.

        Raises:
            DeliveryError: If the transport refuses the message
        """
        ...


class PasswordHasher(Protocol):
    """Port interface for one-way password hashing."""

    def hash(self, plaintext: str) -> str:
        """Return a salted, self-describing hash of plaintext."""
        ...


class Clock(Protocol):
    """Port interface for the current time."""

    def now(self) -> datetime:
        """Return the current timezone-aware UTC time."""
        ...
