"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for concurrent matching tests.
"""

import threading
from collections.abc import Callable, Generator, Mapping
from typing import Any

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from cupid.adapters.repository.postgres import PostgresMatchStore, run_migrations
from cupid.config.settings import get_settings
from cupid.domain.models import RegistrationStep, User
from cupid.domain.ports import NotificationKind

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


class RecordingNotifier:
    """Thread-safe Notifier that keeps every delivery in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.sent: list[tuple[str, NotificationKind, dict]] = []

    def notify(self, user_id: str, kind: NotificationKind, params: Mapping[str, Any]) -> None:
        with self._lock:
            self.sent.append((user_id, kind, dict(params)))

    def of_kind(self, kind: NotificationKind) -> list[tuple[str, dict]]:
        with self._lock:
            return [(user_id, params) for user_id, k, params in self.sent if k is kind]


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=20,
        open=True,
    )
    try:
        pool.wait(timeout=3.0)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def store(pool: ConnectionPool) -> PostgresMatchStore:
    return PostgresMatchStore(pool)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean users and likes before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM likes")
        conn.execute("DELETE FROM users")
    yield


@pytest.fixture
def create_user(store: PostgresMatchStore) -> Callable[[str, str, str], None]:
    """Insert a fully registered user."""

    def _create_user(user_id: str, name: str, birthday: str) -> None:
        with store.atomic() as session:
            session.users.create(
                User(
                    id=user_id,
                    name=name,
                    birthday=birthday,
                    registration_step=RegistrationStep.COMPLETE,
                )
            )

    return _create_user
