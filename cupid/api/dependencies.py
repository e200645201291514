"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Header, HTTPException, Request, status
from psycopg_pool import ConnectionPool

from cupid.adapters.messaging.console import ConsoleNotifier
from cupid.adapters.repository.postgres import PostgresMatchStore
from cupid.config.settings import get_settings
from cupid.domain.matching import MatchingService
from cupid.domain.registration import RegistrationService, RegistrationStateMachine

# Module-level singleton - ConsoleNotifier is stateless
_notifier = ConsoleNotifier()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_store(request: Request) -> PostgresMatchStore:
    """Create store with connection pool from app state."""
    pool = get_pool(request)
    return PostgresMatchStore(pool)


def get_notifier() -> ConsoleNotifier:
    """Get console notifier (singleton)."""
    return _notifier


def get_matching_service(request: Request) -> MatchingService:
    """Create matching service with injected dependencies."""
    return MatchingService(store=get_store(request), notifier=get_notifier())


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the store, notifier, matching service and the chat
    state machine for the domain service.
    """
    settings = get_settings()
    matching = get_matching_service(request)
    return RegistrationService(
        store=matching.store,
        notifier=matching.notifier,
        matching=matching,
        state_machine=RegistrationStateMachine(name_max_length=settings.chat_name_max_length),
    )


def get_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """
    Extract the caller's external user id from the X-User-ID header.

    Token verification happens upstream; the gateway forwards the verified
    id in this header. Missing or blank ids are rejected with 401.
    """
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "unauthorized"},
        )
    return x_user_id.strip()
