"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory store and mocked notifier
- Wired domain services
- A factory for fully registered users
"""

from collections.abc import Callable
from unittest.mock import Mock

import pytest

from cupid.adapters.repository.memory import InMemoryMatchStore
from cupid.domain.matching import MatchingService
from cupid.domain.models import RegistrationStep, User
from cupid.domain.ports import NotificationKind
from cupid.domain.registration import RegistrationService, RegistrationStateMachine


@pytest.fixture
def store() -> InMemoryMatchStore:
    return InMemoryMatchStore()


@pytest.fixture
def notifier() -> Mock:
    return Mock()


@pytest.fixture
def matching(store: InMemoryMatchStore, notifier: Mock) -> MatchingService:
    return MatchingService(store=store, notifier=notifier)


@pytest.fixture
def registration(
    store: InMemoryMatchStore, notifier: Mock, matching: MatchingService
) -> RegistrationService:
    return RegistrationService(
        store=store,
        notifier=notifier,
        matching=matching,
        state_machine=RegistrationStateMachine(),
    )


@pytest.fixture
def make_user(store: InMemoryMatchStore) -> Callable[..., User]:
    """Insert a user who completed registration."""

    def _make_user(user_id: str, name: str, birthday: str) -> User:
        user = User(
            id=user_id,
            name=name,
            birthday=birthday,
            registration_step=RegistrationStep.COMPLETE,
        )
        with store.atomic() as session:
            session.users.create(user)
        return user

    return _make_user


@pytest.fixture
def sent(notifier: Mock) -> Callable[[NotificationKind], list[tuple[str, dict]]]:
    """List (user_id, params) of notifications of one kind sent so far."""

    def _sent(kind: NotificationKind) -> list[tuple[str, dict]]:
        return [
            (call.args[0], dict(call.args[2]))
            for call in notifier.notify.call_args_list
            if call.args[1] is kind
        ]

    return _sent
