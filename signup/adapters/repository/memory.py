"""
In-memory repository adapter - Implements AccountRepository protocol.

Used for development and tests. A single lock serializes every write, so
the email uniqueness check and the insert happen atomically, matching the
guarantee the PostgreSQL UNIQUE constraint gives.
"""

import threading
from dataclasses import replace
from datetime import datetime
from itertools import count

from signup.domain.exceptions import EmailAlreadyRegistered
from signup.domain.models import Account


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with a dict guarded by a lock.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Accounts are copied on the way in and out so callers never share state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._accounts: dict[int, Account] = {}
        self._ids = count(1)

    def create(self, account: Account) -> int:
        with self._lock:
            if self._id_for_email(account.email) is not None:
                raise EmailAlreadyRegistered(account.email)
            account_id = next(self._ids)
            self._accounts[account_id] = replace(account, id=account_id)
            return account_id

    def find_by_id(self, account_id: int) -> Account | None:
        with self._lock:
            account = self._accounts.get(account_id)
            return replace(account) if account is not None else None

    def find_by_email(self, email: str) -> Account | None:
        with self._lock:
            account_id = self._id_for_email(email)
            return replace(self._accounts[account_id]) if account_id is not None else None

    def update(self, account: Account) -> None:
        with self._lock:
            if account.id not in self._accounts:
                raise KeyError(f"Unknown account id: {account.id}")
            owner = self._id_for_email(account.email)
            if owner is not None and owner != account.id:
                raise EmailAlreadyRegistered(account.email)
            self._accounts[account.id] = replace(account)

    def mark_verified(self, account_id: int, verified_at: datetime) -> bool:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None or account.is_verified:
                return False
            account.is_verified = True
            account.verified_at = verified_at
            account.updated_at = verified_at
            return True

    def _id_for_email(self, email: str) -> int | None:
        for account_id, account in self._accounts.items():
            if account.email == email:
                return account_id
        return None
