"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from functools import lru_cache

from fastapi import Request

from signup.adapters.clock import SystemClock
from signup.adapters.smtp import ConsoleNotifier, SmtpNotifier
from signup.config.settings import get_settings
from signup.domain.ports import AccountRepository, Notifier, PasswordHasher
from signup.domain.passwords import build_password_hasher
from signup.domain.registration import RegistrationService
from signup.domain.tokens import VerificationLinkSigner

# Module-level singleton - SystemClock is stateless
_clock = SystemClock()


def get_repository(request: Request) -> AccountRepository:
    """Get the account repository created during app lifespan startup."""
    return request.app.state.repository


@lru_cache
def get_notifier() -> Notifier:
    """Build the configured notifier (singleton)."""
    settings = get_settings()
    if settings.email_backend == "smtp":
        return SmtpNotifier(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.mail_from,
            sender_name=settings.mail_from_name,
            username=settings.smtp_username,
            password=settings.smtp_password.get_secret_value() if settings.smtp_password else None,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout,
        )
    return ConsoleNotifier()


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Build the configured password hasher (singleton)."""
    settings = get_settings()
    return build_password_hasher(
        settings.password_hash_scheme,
        bcrypt_cost=settings.bcrypt_cost,
        argon2_time_cost=settings.argon2_time_cost,
        argon2_memory_cost=settings.argon2_memory_cost,
    )


@lru_cache
def get_signer() -> VerificationLinkSigner:
    """Build the link signer from the process-wide secret (singleton)."""
    settings = get_settings()
    return VerificationLinkSigner(
        secret_key=settings.secret_key.get_secret_value(),
        ttl_seconds=settings.verification_ttl_seconds,
    )


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository, notifier, hasher, signer and clock.
    """
    settings = get_settings()
    return RegistrationService(
        repository=get_repository(request),
        notifier=get_notifier(),
        password_hasher=get_password_hasher(),
        signer=get_signer(),
        clock=_clock,
        verify_url=settings.verify_url,
        confirmation_subject=settings.confirmation_subject,
    )


def get_is_authenticated(request: Request) -> bool:
    """
    Report whether an upstream session layer authenticated this request.

    Session handling lives outside this service; it marks authenticated
    requests by setting request.state.account_id.
    """
    return getattr(request.state, "account_id", None) is not None
