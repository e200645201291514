"""
Domain layer - Pure business logic with zero framework imports.

This package contains the registration state machine and the mutual
crush matching resolver. It defines its own port interfaces for
infrastructure abstraction, ensuring true hexagonal architecture
decoupling.
"""

from .exceptions import (
    CupidError,
    DuplicateUser,
    InvalidBirthday,
    InvalidName,
    MatchedUserExists,
    SelfDeclaration,
    UserNotRegistered,
)
from .matching import CrushResult, MatchingService
from .models import Like, RegistrationStep, User
from .ports import (
    LikeRepository,
    MatchOutcome,
    MatchStore,
    NotificationKind,
    Notifier,
    StoreSession,
    UserRepository,
)
from .registration import RegisterResult, RegistrationService, RegistrationStateMachine

__all__ = [
    "CrushResult",
    "CupidError",
    "DuplicateUser",
    "InvalidBirthday",
    "InvalidName",
    "Like",
    "LikeRepository",
    "MatchOutcome",
    "MatchStore",
    "MatchedUserExists",
    "MatchingService",
    "Notifier",
    "NotificationKind",
    "RegisterResult",
    "RegistrationService",
    "RegistrationStateMachine",
    "RegistrationStep",
    "SelfDeclaration",
    "StoreSession",
    "User",
    "UserNotRegistered",
    "UserRepository",
]
