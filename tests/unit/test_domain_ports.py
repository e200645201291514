"""
Unit tests for domain ports and exceptions.

Tests verify:
- Notification kinds and match outcomes are stable values
- Adapters satisfy the port protocols structurally
- Exceptions are properly structured
- Domain purity (zero framework imports)
"""

import json
from enum import Enum
from pathlib import Path

import pytest

import cupid.domain
from cupid.adapters.repository.memory import InMemoryMatchStore
from cupid.adapters.repository.postgres import PostgresMatchStore
from cupid.domain.exceptions import (
    CupidError,
    DuplicateUser,
    InvalidBirthday,
    InvalidName,
    MatchedUserExists,
    SelfDeclaration,
    UserNotRegistered,
)
from cupid.domain.ports import (
    LikeRepository,
    MatchOutcome,
    MatchStore,
    NotificationKind,
    StoreSession,
    UserRepository,
)


class TestNotificationKindEnum:
    def test_is_str_mixin(self) -> None:
        """NotificationKind uses str mixin for JSON serialization."""
        assert issubclass(NotificationKind, str)
        assert json.dumps(NotificationKind.MATCH_FOUND) == '"match_found"'

    @pytest.mark.parametrize(
        ("member", "value"),
        [
            (NotificationKind.MATCH_FOUND, "match_found"),
            (NotificationKind.CRUSH_ACCEPTED_FIRST_TIME, "crush_accepted_first_time"),
            (NotificationKind.CRUSH_ACCEPTED_UPDATE, "crush_accepted_update"),
            (NotificationKind.UNMATCHED_INITIATOR, "unmatched_initiator"),
            (NotificationKind.UNMATCHED_PARTNER, "unmatched_partner"),
            (NotificationKind.REGISTRATION_FOLLOWUP, "registration_followup"),
            (NotificationKind.PROFILE_UPDATED, "profile_updated"),
            (NotificationKind.GREETING, "greeting"),
        ],
    )
    def test_values(self, member: NotificationKind, value: str) -> None:
        assert member.value == value
        assert member == value


class TestMatchOutcomeEnum:
    def test_is_enum(self) -> None:
        assert issubclass(MatchOutcome, Enum)

    def test_members(self) -> None:
        assert {m.name for m in MatchOutcome} == {
            "MATCHED",
            "TARGET_NOT_FOUND",
            "NOT_RECIPROCATED",
        }


class TestStoreProtocols:
    """Adapters conform by structure, not inheritance."""

    def test_match_store_defines_atomic(self) -> None:
        assert hasattr(MatchStore, "atomic")

    def test_repository_methods(self) -> None:
        for name in ("find_by_id", "find_by_name_and_birthday", "create", "update"):
            assert hasattr(UserRepository, name)
        for name in ("find_by_declarer", "upsert", "set_matched"):
            assert hasattr(LikeRepository, name)
        assert hasattr(StoreSession, "lock")

    @pytest.mark.parametrize("adapter", [InMemoryMatchStore, PostgresMatchStore])
    def test_adapters_do_not_inherit_protocol(self, adapter: type) -> None:
        assert adapter.__bases__ == (object,)
        assert callable(adapter.atomic)

    def test_memory_session_satisfies_protocol(self) -> None:
        with InMemoryMatchStore().atomic() as session:
            for name in ("find_by_id", "find_by_name_and_birthday", "create", "update"):
                assert callable(getattr(session.users, name))
            for name in ("find_by_declarer", "upsert", "set_matched"):
                assert callable(getattr(session.likes, name))
            session.lock("user:U1", "identity:アイ|2000-01-01")


class TestDomainExceptions:
    @pytest.mark.parametrize(
        "exc_type",
        [
            SelfDeclaration,
            UserNotRegistered,
            DuplicateUser,
            MatchedUserExists,
            InvalidName,
            InvalidBirthday,
        ],
    )
    def test_inherits_cupid_error(self, exc_type: type) -> None:
        assert issubclass(exc_type, CupidError)

    def test_cupid_error_is_exception(self) -> None:
        assert issubclass(CupidError, Exception)

    def test_matched_user_exists_carries_partner_name(self) -> None:
        with pytest.raises(MatchedUserExists) as exc_info:
            raise MatchedUserExists("コバヤシミキ")
        assert exc_info.value.partner_name == "コバヤシミキ"

    def test_invalid_name_carries_message(self) -> None:
        exc = InvalidName("名前は2〜20文字で入力してください")
        assert exc.message == "名前は2〜20文字で入力してください"
        assert str(exc) == exc.message


class TestDomainPurity:
    """Domain layer has zero framework imports."""

    DOMAIN_DIR = Path(cupid.domain.__file__).parent

    @pytest.mark.parametrize("framework", ["fastapi", "pydantic", "psycopg", "cupid.adapters"])
    def test_no_framework_imports_in_domain(self, framework: str) -> None:
        offenders = []
        for path in self.DOMAIN_DIR.glob("*.py"):
            for line in path.read_text(encoding="utf-8").splitlines():
                stripped = line.strip()
                if stripped.startswith((f"from {framework}", f"import {framework}")):
                    offenders.append(f"{path.name}: {stripped}")
        assert offenders == [], f"{framework} import found: {offenders}"
