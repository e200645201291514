"""
Matching domain service - mutual crush resolution.

A crush declaration names a target by (name, birthday). A mutual match
exists when the target is a registered user whose own declaration names
the declarer back. Matches are recorded symmetrically:

    declarer.matched_with_user_id == target.id
    target.matched_with_user_id   == declarer.id
    both Like rows: matched = True

Both sides are always written in the same unit of work, so they are set
together or not at all.

Concurrency
===========
Every operation runs inside MatchStore.atomic() and locks, in order:

1. the acting user (``user:<id>``)
2. the sorted identity keys of everyone involved (``identity:<name>|<birthday>``)
   for the acting user, their crush target and their current partner

Two users racing to complete the same pair share both identity keys, so
one of them runs entirely after the other and only the second observes
the reciprocal row. That call is the only one that sends match
notifications.
"""

import logging
from dataclasses import dataclass

from .exceptions import MatchedUserExists, SelfDeclaration, UserNotRegistered
from .models import Like, User, identity_key, user_key
from .outbox import Outbox
from .ports import MatchOutcome, MatchStore, NotificationKind, Notifier, StoreSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrushResult:
    """Outcome of a crush declaration."""

    outcome: MatchOutcome
    matched_user_name: str | None
    is_first_declaration: bool

    @property
    def matched(self) -> bool:
        return self.outcome is MatchOutcome.MATCHED


@dataclass
class MatchingService:
    """
    Domain service for crush declarations, matches and unmatches.

    Holds no state of its own; all state lives behind the store port.
    """

    store: MatchStore
    notifier: Notifier

    def declare_crush(
        self,
        declarer_id: str,
        to_name: str,
        to_birthday: str,
        confirm_unmatch: bool = False,
    ) -> CrushResult:
        """
        Record the declarer's crush and resolve a mutual match.

        Args:
            declarer_id: External id of the declaring user
            to_name: Target's name, compared literally
            to_birthday: Target's birthday text, compared literally
            confirm_unmatch: Allow replacing a crush that is currently matched

        Returns:
            CrushResult with the outcome, the partner's name when matched,
            and whether this was the declarer's first declaration

        Raises:
            UserNotRegistered: Declarer missing or registration incomplete
            SelfDeclaration: Target identity is the declarer's own
            MatchedUserExists: Declarer is matched and did not confirm the unmatch
        """
        outbox = Outbox()

        with self.store.atomic() as session:
            declarer, partner = self.lock_participants(
                session, declarer_id, identity_key(to_name, to_birthday)
            )
            if declarer is None or not declarer.is_registered:
                raise UserNotRegistered(declarer_id)
            if declarer.is_same_person(to_name, to_birthday):
                raise SelfDeclaration(declarer_id)

            redeclaration = declarer.declared(to_name, to_birthday)
            if declarer.is_matched() and not redeclaration:
                if not confirm_unmatch:
                    raise MatchedUserExists(partner.name if partner else "")
                self.release_match(session, declarer, partner, outbox)

            is_first = session.likes.find_by_declarer(declarer.id) is None

            declarer.crush_name = to_name
            declarer.crush_birthday = to_birthday
            session.users.update(declarer)
            session.likes.upsert(Like(declarer.id, to_name, to_birthday, matched=False))

            outcome, target = self.resolve(session, declarer, outbox)

            if outcome is not MatchOutcome.MATCHED:
                kind = (
                    NotificationKind.CRUSH_ACCEPTED_FIRST_TIME
                    if is_first
                    else NotificationKind.CRUSH_ACCEPTED_UPDATE
                )
                outbox.add(declarer.id, kind)

        logger.info(
            "Crush declared by %s: outcome=%s first=%s",
            declarer_id,
            outcome.value,
            is_first,
        )
        outbox.dispatch(self.notifier)

        return CrushResult(
            outcome=outcome,
            matched_user_name=target.name if outcome is MatchOutcome.MATCHED else None,
            is_first_declaration=is_first,
        )

    def lock_participants(
        self, session: StoreSession, user_id: str, *extra_keys: str
    ) -> tuple[User | None, User | None]:
        """
        Lock a user and every identity their next operation may touch.

        The user is re-read after each round of locking until the locked
        set covers their own identity, their crush target and their
        current partner; rows read before the last round may be stale.

        Returns:
            (user, partner) as read under the locks
        """
        session.lock(user_key(user_id))
        locked: set[str] = set()

        while True:
            user = session.users.find_by_id(user_id)
            partner = None
            wanted = set(extra_keys)
            if user is not None:
                wanted.add(identity_key(user.name, user.birthday))
                if user.has_crush():
                    wanted.add(identity_key(user.crush_name, user.crush_birthday))
                if user.matched_with_user_id is not None:
                    partner = session.users.find_by_id(user.matched_with_user_id)
                    if partner is not None:
                        wanted.add(identity_key(partner.name, partner.birthday))

            missing = wanted - locked
            if not missing:
                return user, partner
            session.lock(*sorted(missing))
            locked |= missing

    def resolve(
        self, session: StoreSession, user: User, outbox: Outbox
    ) -> tuple[MatchOutcome, User | None]:
        """
        Check whether the user's current crush is mutual and record it.

        The caller must hold the identity locks for the user and their
        crush target. Match notifications are queued only when the pair
        was not already matched with each other.
        """
        if not user.has_crush():
            return MatchOutcome.TARGET_NOT_FOUND, None

        candidates = session.users.find_by_name_and_birthday(user.crush_name, user.crush_birthday)
        target = next((c for c in candidates if c.id != user.id), None)
        if target is None:
            return MatchOutcome.TARGET_NOT_FOUND, None

        target_like = session.likes.find_by_declarer(target.id)
        if target_like is None or not target_like.points_at(user.name, user.birthday):
            return MatchOutcome.NOT_RECIPROCATED, target
        if target.matched_with_user_id not in (None, user.id):
            logger.warning(
                "User %s reciprocates %s but is matched with %s",
                target.id,
                user.id,
                target.matched_with_user_id,
            )
            return MatchOutcome.NOT_RECIPROCATED, target

        already_matched = (
            user.matched_with_user_id == target.id and target.matched_with_user_id == user.id
        )

        session.likes.set_matched(user.id, True)
        session.likes.set_matched(target.id, True)
        user.matched_with_user_id = target.id
        target.matched_with_user_id = user.id
        session.users.update(user)
        session.users.update(target)

        if not already_matched:
            logger.info("Match formed between %s and %s", user.id, target.id)
            outbox.add(user.id, NotificationKind.MATCH_FOUND, partner_name=target.name)
            outbox.add(target.id, NotificationKind.MATCH_FOUND, partner_name=user.name)

        return MatchOutcome.MATCHED, target

    def release_match(
        self,
        session: StoreSession,
        initiator: User,
        partner: User | None,
        outbox: Outbox,
    ) -> None:
        """
        Clear a match on both sides and queue the unmatch notifications.

        The initiator is told they caused the unmatch; the partner is told
        the initiator changed their information. Callers must change the
        initiator's target or identity in the same unit of work, otherwise
        the two likes stay mutual and the next re-save matches them again.
        """
        partner_id = initiator.matched_with_user_id
        initiator.matched_with_user_id = None
        session.users.update(initiator)
        session.likes.set_matched(initiator.id, False)

        if partner is None:
            logger.warning("Matched partner %s of %s not found", partner_id, initiator.id)
            return

        partner.matched_with_user_id = None
        session.users.update(partner)
        session.likes.set_matched(partner.id, False)

        logger.info("Match released between %s and %s", initiator.id, partner.id)
        outbox.add(initiator.id, NotificationKind.UNMATCHED_INITIATOR, partner_name=partner.name)
        outbox.add(partner.id, NotificationKind.UNMATCHED_PARTNER, partner_name=initiator.name)
