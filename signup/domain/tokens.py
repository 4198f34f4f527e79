"""
Verification links - Stateless signed tokens bound to account credentials.

A token is an HS256 JWT carrying the account identifier, issue and expiry
times, and a fingerprint of the account's email and password hash. Nothing
is stored server-side: changing either credential changes the fingerprint,
which invalidates every link issued before the change.

Token Lifecycle
===============

    Issued -> Pending -> Consumed   (verify succeeds)
                      -> Rejected   (MALFORMED, TAMPERED, EXPIRED,
                                     UNKNOWN_ACCOUNT, STALE)

Checks run in order and stop at the first rejection:
1. Decode and signature (the identifier is untrusted until this passes)
2. Expiry, against the injected clock rather than the host clock
3. Account lookup by identifier
4. Fingerprint comparison (constant-time)
"""

import hashlib
import hmac
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt

from .models import Account

TOKEN_ALGORITHM = "HS256"
TOKEN_TYPE = "email-verification"
_REQUIRED_CLAIMS = ["sub", "iat", "exp", "fpr", "typ"]


class TokenRejection(Enum):
    """Reason a verification token was not accepted."""

    MALFORMED = "malformed"
    TAMPERED = "tampered"
    EXPIRED = "expired"
    UNKNOWN_ACCOUNT = "unknown_account"
    STALE = "stale"


@dataclass(frozen=True)
class IssuedToken:
    """A freshly signed token and the moment it stops being valid."""

    token: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    """Decoded claims of a token whose signature has been checked."""

    subject: str
    issued_at: datetime
    expires_at: datetime
    fingerprint: str


@dataclass(frozen=True)
class TokenCheck:
    """Tagged result of verify(): exactly one of account or rejection is set."""

    account: Account | None = None
    rejection: TokenRejection | None = None

    @property
    def ok(self) -> bool:
        return self.rejection is None


class VerificationLinkSigner:
    """Issues and verifies email verification tokens."""

    def __init__(self, secret_key: str, ttl_seconds: int = 3600) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._secret = secret_key
        self.ttl_seconds = ttl_seconds

    def fingerprint(self, account: Account) -> str:
        """HMAC-SHA256 over the account's email and password hash."""
        message = f"{account.email}\x00{account.password_hash}".encode()
        return hmac.new(self._secret.encode(), message, hashlib.sha256).hexdigest()

    def issue(self, account: Account, now: datetime) -> IssuedToken:
        """
        Sign a token for a persisted account.

        Args:
            account: Account with a store-assigned id
            now: Issue time from the injected clock

        Returns:
            IssuedToken whose expires_at is now + ttl (whole seconds)
        """
        if account.id is None:
            raise ValueError("Cannot issue a verification token for an unsaved account")

        issued_at = now.replace(microsecond=0)
        expires_at = issued_at + timedelta(seconds=self.ttl_seconds)
        payload = {
            "sub": str(account.id),
            "iat": issued_at,
            "exp": expires_at,
            "fpr": self.fingerprint(account),
            "typ": TOKEN_TYPE,
        }
        token = jwt.encode(payload, self._secret, algorithm=TOKEN_ALGORITHM)
        return IssuedToken(token=token, expires_at=expires_at)

    def inspect(self, token: str, now: datetime) -> TokenClaims | TokenRejection:
        """
        Check signature and expiry only, without consulting any account.

        Returns:
            TokenClaims on success, otherwise the TokenRejection
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[TOKEN_ALGORITHM],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": _REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidSignatureError:
            return TokenRejection.TAMPERED
        except jwt.DecodeError:
            return TokenRejection.MALFORMED
        except jwt.InvalidTokenError:
            return TokenRejection.TAMPERED

        if payload["typ"] != TOKEN_TYPE:
            return TokenRejection.TAMPERED
        try:
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
        except (TypeError, ValueError, OverflowError):
            return TokenRejection.TAMPERED

        if now >= expires_at:
            return TokenRejection.EXPIRED

        return TokenClaims(
            subject=str(payload["sub"]),
            issued_at=issued_at,
            expires_at=expires_at,
            fingerprint=str(payload["fpr"]),
        )

    def verify(
        self,
        token: str,
        find_account: Callable[[int], Account | None],
        now: datetime,
    ) -> TokenCheck:
        """
        Run every check and resolve the token to its account.

        Args:
            token: Token string from the confirmation link
            find_account: Lookup by identifier, called only after the
                signature and expiry checks pass
            now: Current time from the injected clock

        Returns:
            TokenCheck with the current account on success, or the rejection
        """
        claims = self.inspect(token, now)
        if isinstance(claims, TokenRejection):
            return TokenCheck(rejection=claims)

        try:
            account_id = int(claims.subject)
        except ValueError:
            return TokenCheck(rejection=TokenRejection.UNKNOWN_ACCOUNT)

        account = find_account(account_id)
        if account is None:
            return TokenCheck(rejection=TokenRejection.UNKNOWN_ACCOUNT)

        if not secrets.compare_digest(self.fingerprint(account).encode(), claims.fingerprint.encode()):
            return TokenCheck(rejection=TokenRejection.STALE)

        return TokenCheck(account=account)
