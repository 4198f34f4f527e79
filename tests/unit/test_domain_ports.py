"""
Unit tests for domain ports, models and exceptions.

Tests verify:
- Adapters satisfy the port protocols structurally
- Role normalization and Account record behaviour
- Exceptions are properly structured
- Domain purity (no web or database framework imports)
"""

from datetime import UTC, datetime
from pathlib import Path

import pytest

import signup.domain
from signup.adapters.clock import SystemClock
from signup.adapters.repository.memory import InMemoryAccountRepository
from signup.adapters.smtp.console import ConsoleNotifier
from signup.domain.exceptions import (
    AlreadyAuthenticated,
    DeliveryError,
    EmailAlreadyRegistered,
    InvalidRegistration,
    RegistrationError,
)
from signup.domain.models import DEFAULT_ROLE, Account, Violation, normalize_roles
from signup.domain.ports import AccountRepository, Clock, Notifier, PasswordHasher
from signup.domain.passwords import Argon2PasswordHasher

DOMAIN_DIR = Path(signup.domain.__file__).parent


def make_account(**overrides) -> Account:
    now = datetime(2026, 1, 1, tzinfo=UTC)
    fields = {
        "email": "jean@example.com",
        "password_hash": "$argon2id$v=19$m=8192,t=1,p=1$c2FsdA$aGFzaA",
        "first_name": "Jean",
        "last_name": "Dupont",
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return Account(**fields)


class TestNormalizeRoles:
    """Tests for role normalization."""

    def test_empty_roles_get_default(self) -> None:
        assert normalize_roles([]) == (DEFAULT_ROLE,)

    def test_duplicates_removed_in_order(self) -> None:
        assert normalize_roles(["ROLE_ADMIN", "ROLE_USER", "ROLE_ADMIN"]) == ("ROLE_ADMIN", "ROLE_USER")

    def test_default_appended_when_missing(self) -> None:
        assert normalize_roles(["ROLE_EDITOR"]) == ("ROLE_EDITOR", DEFAULT_ROLE)

    def test_default_role_is_role_user(self) -> None:
        assert DEFAULT_ROLE == "ROLE_USER"


class TestAccount:
    """Tests for the Account record."""

    def test_defaults_to_unverified_with_default_role(self) -> None:
        account = make_account()
        assert account.is_verified is False
        assert account.verified_at is None
        assert account.roles == (DEFAULT_ROLE,)
        assert account.id is None

    def test_repr_hides_password_hash(self) -> None:
        account = make_account(password_hash="super-secret-hash")
        assert "super-secret-hash" not in repr(account)
        assert "jean@example.com" in repr(account)


class TestExceptions:
    """Tests for domain exception hierarchy."""

    @pytest.mark.parametrize(
        "exc_class",
        [InvalidRegistration, EmailAlreadyRegistered, AlreadyAuthenticated, DeliveryError],
    )
    def test_inherits_from_registration_error(self, exc_class: type) -> None:
        assert issubclass(exc_class, RegistrationError)

    def test_invalid_registration_keeps_violations(self) -> None:
        violations = [Violation("email", "bad"), Violation("password", "weak")]
        exc = InvalidRegistration(violations)
        assert exc.violations == tuple(violations)
        assert "email" in str(exc)
        assert "password" in str(exc)

    def test_email_already_registered_carries_email(self) -> None:
        exc = EmailAlreadyRegistered("jean@example.com")
        assert exc.email == "jean@example.com"
        assert "jean@example.com" in str(exc)


class TestPortCompliance:
    """Adapters satisfy ports through structural subtyping."""

    def test_adapters_accepted_by_ports(self) -> None:
        def wire(
            repository: AccountRepository,
            notifier: Notifier,
            hasher: PasswordHasher,
            clock: Clock,
        ) -> None:
            pass

        wire(InMemoryAccountRepository(), ConsoleNotifier(), Argon2PasswordHasher(), SystemClock())

    def test_adapters_do_not_inherit_protocols(self) -> None:
        for adapter in (InMemoryAccountRepository, ConsoleNotifier, SystemClock):
            assert adapter.__bases__ == (object,)

    def test_system_clock_is_timezone_aware(self) -> None:
        assert SystemClock().now().tzinfo is not None


class TestDomainPurity:
    """Domain layer stays free of web and database frameworks."""

    @pytest.mark.parametrize(
        "forbidden",
        ["from fastapi", "import fastapi", "from pydantic", "from psycopg", "import psycopg"],
    )
    def test_no_framework_imports_in_domain(self, forbidden: str) -> None:
        offenders = [
            path.name for path in DOMAIN_DIR.glob("*.py") if forbidden in path.read_text()
        ]
        assert offenders == [], f"{forbidden!r} found in {offenders}"
