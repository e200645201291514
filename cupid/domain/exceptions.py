"""
Domain exceptions - Semantic error types for registration and matching.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Storage failures are never wrapped here; they propagate unchanged.
"""


class CupidError(Exception):
    """Base class for registration and matching domain errors."""

    pass


class SelfDeclaration(CupidError):
    """Declared crush identity equals the declarer's own identity."""

    pass


class UserNotRegistered(CupidError):
    """User does not exist or has not completed registration."""

    pass


class DuplicateUser(CupidError):
    """Another user already owns the requested name and birthday."""

    pass


class MatchedUserExists(CupidError):
    """
    User is currently matched and did not confirm the unmatch.

    Carries the partner's display name so the caller can tell the user
    who they would lose the match with.
    """

    def __init__(self, partner_name: str) -> None:
        super().__init__("matched user exists")
        self.partner_name = partner_name


class InvalidName(CupidError):
    """Name fails the name rule; message is user-facing guidance."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidBirthday(CupidError):
    """Birthday is not in YYYY-MM-DD form."""

    pass
