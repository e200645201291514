"""
PostgreSQL repository adapter - Implements the MatchStore protocol.

This module provides the PostgreSQL implementation of the domain's
store ports using psycopg3 with raw SQL.

Concurrency Design - Pair Serialization:
----------------------------------------
Each unit of work is one database transaction. StoreSession.lock() takes
transaction-scoped advisory locks:

1. **pg_advisory_xact_lock(hashtextextended(key, 0))**: keys are hashed
   to bigint. A hash collision only serializes two unrelated units of
   work; it never lets two related ones interleave.

2. **Sorted acquisition**: keys passed in one call are locked in sorted
   order, so two sessions locking the same pair cannot deadlock.

3. **Released on COMMIT/ROLLBACK**: no explicit unlock exists, so a
   failed transaction can never leak a lock.

Rows are read without FOR UPDATE. Every writer of a user row holds that
user's identity lock, and row locks taken while waiting on an advisory
lock would deadlock against the holder.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from psycopg import Connection
from psycopg_pool import ConnectionPool

from cupid.domain.models import Like, RegistrationStep, User

logger = logging.getLogger(__name__)

_USER_COLUMNS = (
    "id, name, birthday, registration_step, crush_name, crush_birthday, matched_with_user_id"
)
_LIKE_COLUMNS = "from_user_id, to_name, to_birthday, matched"


def _row_to_user(row: tuple) -> User:
    return User(
        id=row[0],
        name=row[1],
        birthday=row[2],
        registration_step=RegistrationStep(row[3]),
        crush_name=row[4],
        crush_birthday=row[5],
        matched_with_user_id=row[6],
    )


def _row_to_like(row: tuple) -> Like:
    return Like(from_user_id=row[0], to_name=row[1], to_birthday=row[2], matched=row[3])


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def find_by_id(self, user_id: str) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"
        with self._conn.cursor() as cursor:
            cursor.execute(sql, (user_id,))
            row = cursor.fetchone()
        return _row_to_user(row) if row is not None else None

    def find_by_name_and_birthday(self, name: str, birthday: str) -> list[User]:
        # Oldest registration first; callers needing one user take the head
        sql = f"""
            SELECT {_USER_COLUMNS} FROM users
            WHERE name = %s AND birthday = %s
            ORDER BY registered_at, id
        """
        with self._conn.cursor() as cursor:
            cursor.execute(sql, (name, birthday))
            return [_row_to_user(row) for row in cursor.fetchall()]

    def create(self, user: User) -> None:
        sql = f"""
            INSERT INTO users ({_USER_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s)
        """
        with self._conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    user.id,
                    user.name,
                    user.birthday,
                    int(user.registration_step),
                    user.crush_name,
                    user.crush_birthday,
                    user.matched_with_user_id,
                ),
            )

    def update(self, user: User) -> None:
        sql = """
            UPDATE users
            SET name = %s,
                birthday = %s,
                registration_step = %s,
                crush_name = %s,
                crush_birthday = %s,
                matched_with_user_id = %s,
                updated_at = NOW()
            WHERE id = %s
        """
        with self._conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    user.name,
                    user.birthday,
                    int(user.registration_step),
                    user.crush_name,
                    user.crush_birthday,
                    user.matched_with_user_id,
                    user.id,
                ),
            )


class PostgresLikeRepository:
    """
    Implements LikeRepository protocol via psycopg3.

    The UNIQUE constraint on from_user_id keeps one row per declarer.
    """

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def find_by_declarer(self, user_id: str) -> Like | None:
        sql = f"SELECT {_LIKE_COLUMNS} FROM likes WHERE from_user_id = %s"
        with self._conn.cursor() as cursor:
            cursor.execute(sql, (user_id,))
            row = cursor.fetchone()
        return _row_to_like(row) if row is not None else None

    def upsert(self, like: Like) -> None:
        """Insert the declaration or overwrite the declarer's existing row in place."""
        sql = f"""
            INSERT INTO likes ({_LIKE_COLUMNS})
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (from_user_id) DO UPDATE
            SET to_name = EXCLUDED.to_name,
                to_birthday = EXCLUDED.to_birthday,
                matched = EXCLUDED.matched,
                updated_at = NOW()
        """
        with self._conn.cursor() as cursor:
            cursor.execute(sql, (like.from_user_id, like.to_name, like.to_birthday, like.matched))

    def set_matched(self, user_id: str, matched: bool) -> None:
        sql = "UPDATE likes SET matched = %s, updated_at = NOW() WHERE from_user_id = %s"
        with self._conn.cursor() as cursor:
            cursor.execute(sql, (matched, user_id))


class PostgresStoreSession:
    """Repositories sharing one connection inside one transaction."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn
        self.users = PostgresUserRepository(conn)
        self.likes = PostgresLikeRepository(conn)

    def lock(self, *keys: str) -> None:
        with self._conn.cursor() as cursor:
            for key in sorted(set(keys)):
                cursor.execute("SELECT pg_advisory_xact_lock(hashtextextended(%s, 0))", (key,))


class PostgresMatchStore:
    """
    Implements MatchStore protocol via psycopg3.

    Each atomic() block borrows a pooled connection and wraps the block in
    a single transaction.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    @contextmanager
    def atomic(self) -> Iterator[PostgresStoreSession]:
        with self._pool.connection() as conn, conn.transaction():
            yield PostgresStoreSession(conn)


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: cupid/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
