"""
In-memory repository adapter - Implements the MatchStore protocol.

Used by unit tests and local runs without PostgreSQL. One re-entrant
process lock serializes every unit of work, so per-key locks are
implied. Each unit of work edits copies of the tables that replace the
committed tables only when the block exits without raising.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace

from cupid.domain.models import Like, User


class InMemoryUserRepository:
    """Implements UserRepository over a dict keyed by user id."""

    def __init__(self, users: dict[str, User]) -> None:
        self._users = users

    def find_by_id(self, user_id: str) -> User | None:
        user = self._users.get(user_id)
        return replace(user) if user is not None else None

    def find_by_name_and_birthday(self, name: str, birthday: str) -> list[User]:
        return [
            replace(user)
            for user in self._users.values()
            if user.name == name and user.birthday == birthday
        ]

    def create(self, user: User) -> None:
        if user.id in self._users:
            raise ValueError(f"user already exists: {user.id}")
        self._users[user.id] = replace(user)

    def update(self, user: User) -> None:
        if user.id in self._users:
            self._users[user.id] = replace(user)


class InMemoryLikeRepository:
    """Implements LikeRepository over a dict keyed by declarer id."""

    def __init__(self, likes: dict[str, Like]) -> None:
        self._likes = likes

    def find_by_declarer(self, user_id: str) -> Like | None:
        like = self._likes.get(user_id)
        return replace(like) if like is not None else None

    def upsert(self, like: Like) -> None:
        self._likes[like.from_user_id] = replace(like)

    def set_matched(self, user_id: str, matched: bool) -> None:
        like = self._likes.get(user_id)
        if like is not None:
            like.matched = matched


class InMemoryStoreSession:
    def __init__(self, users: dict[str, User], likes: dict[str, Like]) -> None:
        self.users = InMemoryUserRepository(users)
        self.likes = InMemoryLikeRepository(likes)

    def lock(self, *keys: str) -> None:
        # The store-wide lock is already held for the whole unit of work
        pass


class InMemoryMatchStore:
    """Thread-safe dict-backed store with all-or-nothing units of work."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._likes: dict[str, Like] = {}
        self._lock = threading.RLock()

    @contextmanager
    def atomic(self) -> Iterator[InMemoryStoreSession]:
        with self._lock:
            users = {user_id: replace(user) for user_id, user in self._users.items()}
            likes = {user_id: replace(like) for user_id, like in self._likes.items()}
            yield InMemoryStoreSession(users, likes)
            self._users, self._likes = users, likes

    def get_user(self, user_id: str) -> User | None:
        """Committed copy of a user, for inspection."""
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user is not None else None

    def get_like(self, user_id: str) -> Like | None:
        """Committed copy of a user's Like row, for inspection."""
        with self._lock:
            like = self._likes.get(user_id)
            return replace(like) if like is not None else None

    def like_count(self) -> int:
        with self._lock:
            return len(self._likes)
