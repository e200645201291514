"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from collections.abc import Mapping
from contextlib import AbstractContextManager
from enum import Enum
from typing import Any, Protocol

from .models import Like, User


class NotificationKind(str, Enum):
    """
    Outbound message kinds selected by the domain.

    Rendering and delivery belong to the Notifier adapter; the domain only
    decides which kind is due and with which parameters.
    """

    MATCH_FOUND = "match_found"
    CRUSH_ACCEPTED_FIRST_TIME = "crush_accepted_first_time"
    CRUSH_ACCEPTED_UPDATE = "crush_accepted_update"
    UNMATCHED_INITIATOR = "unmatched_initiator"
    UNMATCHED_PARTNER = "unmatched_partner"
    REGISTRATION_FOLLOWUP = "registration_followup"
    PROFILE_UPDATED = "profile_updated"
    GREETING = "greeting"


class MatchOutcome(Enum):
    """
    Result of resolving one crush declaration.

    TARGET_NOT_FOUND and NOT_RECIPROCATED are normal outcomes, not errors.
    """

    MATCHED = "matched"
    TARGET_NOT_FOUND = "target_not_found"
    NOT_RECIPROCATED = "not_reciprocated"


class UserRepository(Protocol):
    """Port interface for the identity store."""

    def find_by_id(self, user_id: str) -> User | None:
        """Return the user with this external id, or None."""
        ...

    def find_by_name_and_birthday(self, name: str, birthday: str) -> list[User]:
        """
        Return every user whose identity is exactly (name, birthday).

        Callers that need a single user take the first element.
        """
        ...

    def create(self, user: User) -> None:
        ...

    def update(self, user: User) -> None:
        ...


class LikeRepository(Protocol):
    """Port interface for the interest store."""

    def find_by_declarer(self, user_id: str) -> Like | None:
        ...

    def upsert(self, like: Like) -> None:
        """Insert or overwrite the declarer's single Like row."""
        ...

    def set_matched(self, user_id: str, matched: bool) -> None:
        ...


class StoreSession(Protocol):
    """
    Repositories bound to one unit of work.

    Everything done through a session commits or rolls back together.
    """

    users: UserRepository
    likes: LikeRepository

    def lock(self, *keys: str) -> None:
        """
        Acquire exclusive locks held until the unit of work ends.

        Implementations must acquire the keys in a deterministic order so
        that two sessions locking overlapping key sets cannot deadlock.
        """
        ...


class MatchStore(Protocol):
    """Port interface for transactional access to users and likes."""

    def atomic(self) -> AbstractContextManager[StoreSession]:
        """
        Open a unit of work.

        Commits when the block exits normally, rolls back when it raises.
        """
        ...


class Notifier(Protocol):
    """Port interface for outbound message delivery."""

    def notify(self, user_id: str, kind: NotificationKind, params: Mapping[str, Any]) -> None:
        """
        Deliver one message of the given kind to a user.

        Args:
            user_id: External identity of the recipient
            kind: Which message to send
            params: Template parameters (e.g. partner_name)
        """
        ...
