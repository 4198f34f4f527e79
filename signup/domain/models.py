"""
Domain models - Plain data records for accounts.

Accounts are plain dataclasses. Validation lives in validation.py and
persistence mapping lives in the repository adapters.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

DEFAULT_ROLE = "ROLE_USER"


def normalize_roles(roles: Iterable[str]) -> tuple[str, ...]:
    """
    Remove duplicate roles (first occurrence wins) and guarantee DEFAULT_ROLE.

    Stores persist canonical roles as given; this is applied wherever an
    account crosses into the registration service.
    """
    normalized: list[str] = []
    for role in roles:
        if role not in normalized:
            normalized.append(role)
    if DEFAULT_ROLE not in normalized:
        normalized.append(DEFAULT_ROLE)
    return tuple(normalized)


@dataclass(frozen=True)
class Violation:
    """A single field-level validation failure."""

    field: str
    message: str


@dataclass
class Account:
    """A registered user's persisted identity and credential record."""

    email: str
    password_hash: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime
    roles: tuple[str, ...] = field(default=(DEFAULT_ROLE,))
    is_verified: bool = False
    verified_at: datetime | None = None
    id: int | None = None

    def __repr__(self) -> str:
        # password_hash stays out of logs and tracebacks
        return (
            f"Account(id={self.id!r}, email={self.email!r}, "
            f"is_verified={self.is_verified!r}, roles={self.roles!r})"
        )
