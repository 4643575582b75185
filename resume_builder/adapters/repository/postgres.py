"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
account port using psycopg3 with raw SQL, plus the migration runner.

Each method runs in its own pooled connection and commits before
returning. Driver errors on writes are re-raised as the domain's
PersistenceError so the workflows never see psycopg types. The UNIQUE
constraint on users.email is the real guard against two confirmations
for the same address.
"""

import logging
from dataclasses import replace
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from resume_builder.domain.exceptions import PersistenceError
from resume_builder.domain.models import Role, UserAccount

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = """
    id, first_name, last_name, email, password_hash,
    confirm_password_hash, role, join_date
"""


def _row_to_account(row: tuple) -> UserAccount:
    return UserAccount(
        id=row[0],
        first_name=row[1],
        last_name=row[2],
        email=row[3],
        password_hash=row[4],
        confirm_password_hash=row[5],
        role=Role(row[6]),
        join_date=row[7],
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

    def find_by_email(self, email: str) -> UserAccount | None:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM users WHERE email = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return _row_to_account(row) if row is not None else None

    def count(self) -> int:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT COUNT(*) FROM users")
            return cursor.fetchone()[0]

    def insert(self, account: UserAccount) -> UserAccount:
        """
        Insert a confirmed account.

        Returns:
            Copy of the account with its generated id

        Raises:
            PersistenceError: On any driver error, including a duplicate email
        """
        sql = """
            INSERT INTO users (first_name, last_name, email, password_hash,
                               confirm_password_hash, role, join_date)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING id
        """
        params = (
            account.first_name,
            account.last_name,
            account.email,
            account.password_hash,
            account.confirm_password_hash,
            account.role.value,
            account.join_date,
        )

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                account_id = cursor.fetchone()[0]
                conn.commit()
        except psycopg.Error as e:
            raise PersistenceError(f"Failed to insert account {account.email}") from e

        return replace(account, id=account_id)

    def update(self, account: UserAccount) -> int:
        """
        Write names and password hashes of an existing account.

        Role changes go through update_role(); join date never changes.

        Returns:
            Number of rows affected (0 if the id does not exist)
        """
        sql = """
            UPDATE users
            SET first_name = %s, last_name = %s,
                password_hash = %s, confirm_password_hash = %s
            WHERE id = %s
        """
        params = (
            account.first_name,
            account.last_name,
            account.password_hash,
            account.confirm_password_hash,
            account.id,
        )

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                conn.commit()
                return cursor.rowcount
        except psycopg.Error as e:
            raise PersistenceError(f"Failed to update account {account.email}") from e

    def get(self, account_id: int) -> UserAccount | None:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM users WHERE id = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (account_id,))
            row = cursor.fetchone()
        return _row_to_account(row) if row is not None else None

    def list_accounts(self, role: Role | None = None) -> list[UserAccount]:
        if role is None:
            sql, params = f"SELECT {_ACCOUNT_COLUMNS} FROM users ORDER BY id", ()
        else:
            sql = f"SELECT {_ACCOUNT_COLUMNS} FROM users WHERE role = %s ORDER BY id"
            params = (role.value,)

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            return [_row_to_account(row) for row in cursor.fetchall()]

    def delete(self, account_id: int) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM users WHERE id = %s", (account_id,))
            conn.commit()
            return cursor.rowcount == 1

    def update_role(self, account_id: int, role: Role) -> UserAccount | None:
        sql = f"UPDATE users SET role = %s WHERE id = %s RETURNING {_ACCOUNT_COLUMNS}"

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (role.value, account_id))
                row = cursor.fetchone()
                conn.commit()
        except psycopg.Error as e:
            raise PersistenceError(f"Failed to change role of account {account_id}") from e
        return _row_to_account(row) if row is not None else None

    def insert_many(self, accounts: list[UserAccount]) -> list[UserAccount]:
        """
        Insert accounts in a single transaction.

        Emails that already exist are skipped through ON CONFLICT rather
        than failing the batch.
        """
        sql = """
            INSERT INTO users (first_name, last_name, email, password_hash,
                               confirm_password_hash, role, join_date)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING id
        """
        created = []
        try:
            with self._pool.connection() as conn, conn.transaction(), conn.cursor() as cursor:
                for account in accounts:
                    cursor.execute(
                        sql,
                        (
                            account.first_name,
                            account.last_name,
                            account.email,
                            account.password_hash,
                            account.confirm_password_hash,
                            account.role.value,
                            account.join_date,
                        ),
                    )
                    row = cursor.fetchone()
                    if row is not None:
                        created.append(replace(account, id=row[0]))
        except psycopg.Error as e:
            raise PersistenceError(f"Failed to insert {len(accounts)} accounts") from e
        return created


MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """
    Apply pending SQL migration files in filename order.

    Applied filenames are recorded in schema_migrations, so each file
    runs once per database; a file and its bookkeeping row commit
    together.

    Returns:
        Names of the files applied by this call

    Raises:
        RuntimeError: If a migration fails (earlier files stay applied)
    """
    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return []

    with pool.connection() as conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_migrations ("
            " filename TEXT PRIMARY KEY,"
            " applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW())"
        )
        applied = {row[0] for row in conn.execute("SELECT filename FROM schema_migrations")}

    pending = [f for f in sorted(migrations_dir.glob("*.sql")) if f.name not in applied]
    if not pending:
        logger.info("Database schema is up to date")
        return []

    for sql_file in pending:
        logger.info("Applying migration %s", sql_file.name)
        try:
            with pool.connection() as conn, conn.transaction():
                conn.execute(sql_file.read_text())
                conn.execute(
                    "INSERT INTO schema_migrations (filename) VALUES (%s)", (sql_file.name,)
                )
        except psycopg.Error as e:
            logger.error("Migration %s failed: %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e

    return [f.name for f in pending]
