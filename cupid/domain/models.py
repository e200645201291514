"""
Domain models - User and Like records plus identity rules.

Users are keyed by their external chat identity. A Like is the single,
most recent crush declaration of one user, keyed on the declarer.
Identities (name + birthday) are compared by exact string equality.
"""

import re
from dataclasses import dataclass
from enum import IntEnum

BIRTHDAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)

# Full-width katakana (ァ..ヶ) and the prolonged sound mark
_KATAKANA_NAME = re.compile(r"^[ァ-ヶー]+$")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 20

NAME_LENGTH_MESSAGE = f"名前は{NAME_MIN_LENGTH}〜{NAME_MAX_LENGTH}文字で入力してください"
NAME_SCRIPT_MESSAGE = (
    f"名前は全角カタカナ{NAME_MIN_LENGTH}〜{NAME_MAX_LENGTH}文字で入力してください（スペース不可）"
)


class RegistrationStep(IntEnum):
    """
    Onboarding progress for the chat registration flow.

    Transitions (forward-only within the chat flow):
        AWAITING_NAME -> AWAITING_BIRTHDAY -> COMPLETE
    """

    AWAITING_NAME = 0
    AWAITING_BIRTHDAY = 1
    COMPLETE = 2


@dataclass
class User:
    """A registered (or registering) person."""

    id: str
    name: str = ""
    birthday: str = ""
    registration_step: RegistrationStep = RegistrationStep.AWAITING_NAME
    crush_name: str | None = None
    crush_birthday: str | None = None
    matched_with_user_id: str | None = None

    @property
    def is_registered(self) -> bool:
        return self.registration_step == RegistrationStep.COMPLETE

    def has_crush(self) -> bool:
        """True only when both crush fields are set."""
        return self.crush_name is not None and self.crush_birthday is not None

    def is_matched(self) -> bool:
        return self.matched_with_user_id is not None

    def is_same_person(self, name: str, birthday: str) -> bool:
        """Whether (name, birthday) is this user's own identity."""
        return self.name == name and self.birthday == birthday

    def declared(self, name: str, birthday: str) -> bool:
        """Whether this user's current crush is exactly (name, birthday)."""
        return self.crush_name == name and self.crush_birthday == birthday


@dataclass
class Like:
    """A user's single active crush declaration."""

    from_user_id: str
    to_name: str
    to_birthday: str
    matched: bool = False

    def points_at(self, name: str, birthday: str) -> bool:
        return self.to_name == name and self.to_birthday == birthday


def validate_name(name: str) -> str | None:
    """
    Check a self-registered name against the katakana name rule.

    Returns:
        None when valid, otherwise the user-facing guidance message.
        Length is checked before script so an empty or one-character name
        gets the length message.
    """
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        return NAME_LENGTH_MESSAGE
    if not _KATAKANA_NAME.fullmatch(name):
        return NAME_SCRIPT_MESSAGE
    return None


def is_valid_birthday(birthday: str) -> bool:
    """Literal YYYY-MM-DD shape check; the date is never parsed."""
    return BIRTHDAY_PATTERN.fullmatch(birthday) is not None


def identity_key(name: str, birthday: str) -> str:
    """Lock key for a (name, birthday) identity."""
    return f"identity:{name}|{birthday}"


def user_key(user_id: str) -> str:
    """Lock key for a user id."""
    return f"user:{user_id}"
