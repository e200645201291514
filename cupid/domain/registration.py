"""
Registration domain service - onboarding state machine and self registration.

Chat Registration State Machine (Forward-Only Transitions)
==========================================================

States:
- AWAITING_NAME: user exists, next free-text message is their name
- AWAITING_BIRTHDAY: name recorded, next message must be YYYY-MM-DD
- COMPLETE: registration finished, chat text no longer drives onboarding

Valid Transitions:
    AWAITING_NAME     -> AWAITING_BIRTHDAY  (non-empty name within length)
    AWAITING_BIRTHDAY -> COMPLETE           (birthday matches YYYY-MM-DD)

Malformed input is not an error: it yields a guidance reply and leaves
the user untouched. Revisiting earlier steps is only possible through
the structured register_self path.
"""

import logging
from dataclasses import dataclass, replace

from .exceptions import DuplicateUser, InvalidBirthday, InvalidName, MatchedUserExists, SelfDeclaration
from .matching import MatchingService
from .models import RegistrationStep, User, identity_key, is_valid_birthday, user_key, validate_name
from .outbox import Outbox
from .ports import MatchOutcome, MatchStore, NotificationKind, Notifier
from . import replies

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Advance:
    """
    Result of feeding one message to the state machine.

    ``user`` is the updated copy to persist, or None when nothing changed.
    """

    reply: str
    user: User | None = None


@dataclass(frozen=True)
class RegisterResult:
    is_first_registration: bool
    matched: bool = False


@dataclass
class RegistrationStateMachine:
    """Pure step function for the chat onboarding flow."""

    name_max_length: int = 50

    def advance(self, user: User, text: str) -> Advance:
        """
        Apply one inbound message to a user.

        Args:
            user: Current user record (never modified in place)
            text: Raw message text

        Returns:
            Advance with the reply and, on a transition, the updated user
        """
        if user.registration_step == RegistrationStep.AWAITING_NAME:
            return self._handle_name(user, text)
        if user.registration_step == RegistrationStep.AWAITING_BIRTHDAY:
            return self._handle_birthday(user, text)
        return Advance(replies.ALREADY_REGISTERED if user.has_crush() else replies.CRUSH_PROMPT)

    def _handle_name(self, user: User, text: str) -> Advance:
        name = text.strip()
        if not name:
            return Advance(replies.NAME_PROMPT)
        if len(name) > self.name_max_length:
            return Advance(replies.NAME_TOO_LONG.format(max_length=self.name_max_length))

        updated = replace(user, name=name, registration_step=RegistrationStep.AWAITING_BIRTHDAY)
        return Advance(replies.BIRTHDAY_PROMPT.format(name=name), updated)

    def _handle_birthday(self, user: User, text: str) -> Advance:
        birthday = text.strip()
        if not is_valid_birthday(birthday):
            return Advance(replies.BIRTHDAY_FORMAT_ERROR)

        updated = replace(user, birthday=birthday, registration_step=RegistrationStep.COMPLETE)
        return Advance(replies.REGISTRATION_COMPLETE, updated)


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the chat onboarding flow and the structured
    self-registration path, delegating match bookkeeping to
    MatchingService so both paths share one locking discipline.
    """

    store: MatchStore
    notifier: Notifier
    matching: MatchingService
    state_machine: RegistrationStateMachine

    def advance_registration(self, user_id: str, text: str) -> str:
        """
        Handle one free-text chat message.

        Creates the user on first contact, runs the state machine and
        persists any transition.

        Returns:
            Reply text for the user
        """
        outbox = Outbox()

        with self.store.atomic() as session:
            session.lock(user_key(user_id))
            user = session.users.find_by_id(user_id)
            if user is None:
                user = User(id=user_id)
                session.users.create(user)
                logger.info("Created user %s on first contact", user_id)

            result = self.state_machine.advance(user, text)
            if result.user is not None:
                session.users.update(result.user)
                if result.user.is_registered:
                    outbox.add(
                        user_id, NotificationKind.REGISTRATION_FOLLOWUP, name=result.user.name
                    )

        outbox.dispatch(self.notifier)
        return result.reply

    def greet(self, user_id: str) -> None:
        """Welcome a user who just followed the account and invite them to register."""
        outbox = Outbox()
        outbox.add(user_id, NotificationKind.GREETING)
        outbox.dispatch(self.notifier)

    def register_self(
        self,
        user_id: str,
        name: str,
        birthday: str,
        confirm_unmatch: bool = False,
    ) -> RegisterResult:
        """
        Create or update a user from a structured registration form.

        Args:
            user_id: External id of the user
            name: Full-width katakana name
            birthday: YYYY-MM-DD text
            confirm_unmatch: Allow an identity change that breaks a match

        Raises:
            InvalidName: Name fails the katakana rule
            InvalidBirthday: Birthday is not YYYY-MM-DD
            DuplicateUser: Another user already has this identity
            SelfDeclaration: New identity equals the user's own crush
            MatchedUserExists: Identity change would break an unconfirmed match
        """
        message = validate_name(name)
        if message is not None:
            raise InvalidName(message)
        if not is_valid_birthday(birthday):
            raise InvalidBirthday(birthday)

        outbox = Outbox()

        with self.store.atomic() as session:
            user, partner = self.matching.lock_participants(
                session, user_id, identity_key(name, birthday)
            )

            owners = session.users.find_by_name_and_birthday(name, birthday)
            if any(owner.id != user_id for owner in owners):
                raise DuplicateUser(user_id)

            if user is None:
                session.users.create(
                    User(
                        id=user_id,
                        name=name,
                        birthday=birthday,
                        registration_step=RegistrationStep.COMPLETE,
                    )
                )
                outbox.add(user_id, NotificationKind.REGISTRATION_FOLLOWUP, name=name)
                is_first, outcome = True, None
            else:
                if user.declared(name, birthday):
                    raise SelfDeclaration(user_id)

                if user.is_matched() and not user.is_same_person(name, birthday):
                    if not confirm_unmatch:
                        raise MatchedUserExists(partner.name if partner else "")
                    self.matching.release_match(session, user, partner, outbox)

                is_first = not user.is_registered
                user.name = name
                user.birthday = birthday
                user.registration_step = RegistrationStep.COMPLETE
                session.users.update(user)

                outcome, _ = self.matching.resolve(session, user, outbox)
                if is_first:
                    outbox.add(user_id, NotificationKind.REGISTRATION_FOLLOWUP, name=name)
                elif outcome is not MatchOutcome.MATCHED:
                    outbox.add(user_id, NotificationKind.PROFILE_UPDATED)

        logger.info("Registered %s (first=%s)", user_id, is_first)
        outbox.dispatch(self.notifier)
        return RegisterResult(
            is_first_registration=is_first,
            matched=outcome is MatchOutcome.MATCHED,
        )

