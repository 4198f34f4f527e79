"""
Password hashing - Salted, adaptive one-way hashes.

argon2id (memory-hard) is the default scheme; bcrypt remains available for
deployments that already store bcrypt hashes. Both embed their own random
salt, so identical passwords never produce identical hashes.
"""

import bcrypt
from argon2 import PasswordHasher as Argon2Hasher
from argon2 import Type

from .ports import PasswordHasher

# bcrypt only reads the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72
BCRYPT_MIN_COST = 10


class Argon2PasswordHasher:
    """Implements PasswordHasher protocol with argon2id (argon2-cffi)."""

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4) -> None:
        self._hasher = Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )

    def hash(self, plaintext: str) -> str:
        return self._hasher.hash(plaintext)


class BcryptPasswordHasher:
    """Implements PasswordHasher protocol with bcrypt."""

    def __init__(self, cost: int = 12) -> None:
        if cost < BCRYPT_MIN_COST:
            raise ValueError(f"bcrypt cost must be >= {BCRYPT_MIN_COST}, got {cost}")
        self._cost = cost

    def hash(self, plaintext: str) -> str:
        pw_bytes = plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self._cost)).decode("utf-8")


def build_password_hasher(
    scheme: str,
    *,
    bcrypt_cost: int = 12,
    argon2_time_cost: int = 3,
    argon2_memory_cost: int = 65536,
) -> PasswordHasher:
    """
    Create the configured password hasher.

    Args:
        scheme: "argon2" or "bcrypt"

    Raises:
        ValueError: If scheme is not recognised
    """
    if scheme == "argon2":
        return Argon2PasswordHasher(time_cost=argon2_time_cost, memory_cost=argon2_memory_cost)
    if scheme == "bcrypt":
        return BcryptPasswordHasher(cost=bcrypt_cost)
    raise ValueError(f"Unknown password hash scheme: {scheme}")
