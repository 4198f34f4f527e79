"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Integrity Design:
-----------------
1. **UNIQUE (email)**: The constraint is the single authority on duplicate
   emails. The service's find_by_email pre-check is advisory; when two
   registrations race, the loser's INSERT raises UniqueViolation, which is
   translated to EmailAlreadyRegistered.

2. **Conditional verification**: mark_verified only updates rows where
   is_verified is still FALSE, so concurrent confirmations record
   verified_at exactly once and the flag never moves backwards.

3. **Canonical roles**: roles are stored exactly as given; the default role
   is added by the domain when accounts are read, not by SQL.
"""

import logging
from datetime import datetime
from pathlib import Path

from psycopg import errors
from psycopg_pool import ConnectionPool

from signup.domain.exceptions import EmailAlreadyRegistered
from signup.domain.models import Account

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, email, password_hash, roles, first_name, last_name, "
    "is_verified, created_at, updated_at, verified_at"
)


def _row_to_account(row: tuple) -> Account:
    (
        account_id,
        email,
        password_hash,
        roles,
        first_name,
        last_name,
        is_verified,
        created_at,
        updated_at,
        verified_at,
    ) = row
    return Account(
        id=account_id,
        email=email,
        password_hash=password_hash,
        roles=tuple(roles or ()),
        first_name=first_name,
        last_name=last_name,
        is_verified=is_verified,
        created_at=created_at,
        updated_at=updated_at,
        verified_at=verified_at,
    )


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def create(self, account: Account) -> int:
        """
        Insert a new account and return its generated id.

        Raises:
            EmailAlreadyRegistered: If the UNIQUE (email) constraint rejects it
        """
        sql = """
            INSERT INTO accounts (email, password_hash, roles, first_name, last_name,
                                  is_verified, created_at, updated_at, verified_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id
        """
        params = (
            account.email,
            account.password_hash,
            list(account.roles),
            account.first_name,
            account.last_name,
            account.is_verified,
            account.created_at,
            account.updated_at,
            account.verified_at,
        )

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                account_id = cursor.fetchone()[0]
                conn.commit()
        except errors.UniqueViolation:
            raise EmailAlreadyRegistered(account.email) from None
        return account_id

    def find_by_id(self, account_id: int) -> Account | None:
        sql = f"SELECT {_COLUMNS} FROM accounts WHERE id = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (account_id,))
            row = cursor.fetchone()
        return _row_to_account(row) if row is not None else None

    def find_by_email(self, email: str) -> Account | None:
        sql = f"SELECT {_COLUMNS} FROM accounts WHERE email = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return _row_to_account(row) if row is not None else None

    def update(self, account: Account) -> None:
        """
        Overwrite profile and credential columns of an existing account.

        Verification columns are owned by mark_verified and never written here.

        Raises:
            EmailAlreadyRegistered: If the new email belongs to another account
        """
        sql = """
            UPDATE accounts
            SET email = %s, password_hash = %s, roles = %s,
                first_name = %s, last_name = %s, updated_at = %s
            WHERE id = %s
        """
        params = (
            account.email,
            account.password_hash,
            list(account.roles),
            account.first_name,
            account.last_name,
            account.updated_at,
            account.id,
        )

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                conn.commit()
        except errors.UniqueViolation:
            raise EmailAlreadyRegistered(account.email) from None

    def mark_verified(self, account_id: int, verified_at: datetime) -> bool:
        """
        Set is_verified and verified_at if the account is still unverified.

        Returns:
            True if this call flipped the flag, False if it was already set
            (or the account does not exist)
        """
        sql = """
            UPDATE accounts
            SET is_verified = TRUE, verified_at = %s, updated_at = %s
            WHERE id = %s AND is_verified = FALSE
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (verified_at, verified_at, account_id))
            conn.commit()
            return cursor.rowcount == 1


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: signup/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))
    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))
    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
        logger.info("Migration complete: %s", sql_file.name)
