"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Environment defaults (in-memory store, cheap argon2 parameters)
- A controllable clock and a recording notifier
- A fully wired RegistrationService over the in-memory repository
"""

import os
import re
from datetime import UTC, datetime, timedelta
from urllib.parse import unquote

import pytest

# Must be set before any Settings instance is created
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("EMAIL_BACKEND", "console")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-bytes!!")
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "8192")

from signup.adapters.repository.memory import InMemoryAccountRepository  # noqa: E402
from signup.domain.passwords import Argon2PasswordHasher  # noqa: E402
from signup.domain.registration import RegistrationService  # noqa: E402
from signup.domain.tokens import VerificationLinkSigner  # noqa: E402
from signup.domain.validation import RegistrationInput  # noqa: E402

SECRET_KEY = "unit-test-signing-key-0123456789abcdef"
VERIFY_URL = "https://accounts.example.com/v1/verify/email"
TOKEN_PATTERN = re.compile(r"token=([A-Za-z0-9_\-.%]+)")


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, current: datetime) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


class RecordingNotifier:
    """Notifier that keeps every message it is handed."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def send(self, to_address: str, subject: str, html_body: str) -> None:
        self.sent.append((to_address, subject, html_body))

    def last_token(self) -> str:
        """Extract the token from the most recent message's link."""
        match = TOKEN_PATTERN.search(self.sent[-1][2])
        assert match is not None, "no confirmation link in message"
        return unquote(match.group(1))


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at a fixed UTC instant."""
    return FixedClock(datetime(2026, 3, 14, 9, 26, 53, tzinfo=UTC))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def signer() -> VerificationLinkSigner:
    return VerificationLinkSigner(secret_key=SECRET_KEY, ttl_seconds=3600)


@pytest.fixture
def password_hasher() -> Argon2PasswordHasher:
    """argon2id with minimal cost to keep tests fast."""
    return Argon2PasswordHasher(time_cost=1, memory_cost=8192, parallelism=1)


@pytest.fixture
def service(
    repository: InMemoryAccountRepository,
    notifier: RecordingNotifier,
    password_hasher: Argon2PasswordHasher,
    signer: VerificationLinkSigner,
    clock: FixedClock,
) -> RegistrationService:
    """RegistrationService wired to in-memory collaborators."""
    return RegistrationService(
        repository=repository,
        notifier=notifier,
        password_hasher=password_hasher,
        signer=signer,
        clock=clock,
        verify_url=VERIFY_URL,
    )


@pytest.fixture
def make_input():
    """Factory for valid registration input with per-field overrides."""

    def _make(**overrides) -> RegistrationInput:
        fields = {
            "email": "a@x.com",
            "password": "Abcdef1234!@",
            "password_confirmation": "Abcdef1234!@",
            "first_name": "Jean",
            "last_name": "Dupont",
            "agree_terms": True,
        }
        fields.update(overrides)
        if "password" in overrides and "password_confirmation" not in overrides:
            fields["password_confirmation"] = overrides["password"]
        return RegistrationInput(**fields)

    return _make
