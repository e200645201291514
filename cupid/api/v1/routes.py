"""
API v1 routes.

Defines REST endpoints for the chat registration flow, structured self
registration, crush declarations and follow greetings. Handlers are
plain ``def`` so the blocking store calls run in FastAPI's threadpool.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from cupid.api.dependencies import get_matching_service, get_registration_service, get_user_id
from cupid.api.models import (
    ErrorResponse,
    FollowResponse,
    MessageRequest,
    MessageResponse,
    RegisterCrushRequest,
    RegisterCrushResponse,
    RegisterUserRequest,
    RegisterUserResponse,
)
from cupid.domain.exceptions import (
    DuplicateUser,
    InvalidBirthday,
    InvalidName,
    MatchedUserExists,
    SelfDeclaration,
    UserNotRegistered,
)
from cupid.domain.matching import MatchingService
from cupid.domain.registration import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])


def _matched_conflict(exc: MatchedUserExists) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "error": "matched_user_exists",
            "message": f"{exc.partner_name}さんとマッチング中です。変更するとマッチングが解除されます。",
        },
    )


@router.post(
    "/messages",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse, "description": "Missing user id"}},
    summary="Handle a chat message",
    description="Feed one free-text message to the registration state machine.",
)
def post_message(
    request_data: MessageRequest,
    user_id: str = Depends(get_user_id),
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    reply = service.advance_registration(user_id, request_data.text)
    return MessageResponse(reply=reply)


@router.post(
    "/users",
    response_model=RegisterUserResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid name/birthday or self registration"},
        409: {"model": ErrorResponse, "description": "Duplicate user or active match"},
    },
    summary="Register or update yourself",
)
def register_user(
    request_data: RegisterUserRequest,
    user_id: str = Depends(get_user_id),
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterUserResponse:
    """
    Register the caller's own identity.

    - **name**: Full-width katakana, 2-20 characters
    - **birthday**: YYYY-MM-DD
    - **confirm_unmatch**: Required to change identity while matched
    """
    try:
        result = service.register_self(
            user_id,
            request_data.name,
            request_data.birthday,
            confirm_unmatch=request_data.confirm_unmatch,
        )
    except InvalidName as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_name", "message": exc.message},
        ) from None
    except InvalidBirthday:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_birthday"},
        ) from None
    except SelfDeclaration:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "cannot_register_yourself"},
        ) from None
    except DuplicateUser:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "duplicate_user"},
        ) from None
    except MatchedUserExists as exc:
        raise _matched_conflict(exc) from None

    return RegisterUserResponse(
        status="ok",
        matched=result.matched,
        is_first_registration=result.is_first_registration,
    )


@router.post(
    "/crushes",
    response_model=RegisterCrushResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Self declaration"},
        409: {"model": ErrorResponse, "description": "Active match not confirmed"},
        428: {"model": ErrorResponse, "description": "Caller has not registered yet"},
    },
    summary="Declare a crush",
)
def register_crush(
    request_data: RegisterCrushRequest,
    user_id: str = Depends(get_user_id),
    service: MatchingService = Depends(get_matching_service),
) -> RegisterCrushResponse:
    """
    Declare (or replace) the caller's crush and resolve a mutual match.

    - **crush_name** / **crush_birthday**: compared literally against registered users
    - **confirm_unmatch**: Required to replace a crush that is currently matched
    """
    try:
        result = service.declare_crush(
            user_id,
            request_data.crush_name,
            request_data.crush_birthday,
            confirm_unmatch=request_data.confirm_unmatch,
        )
    except UserNotRegistered:
        raise HTTPException(
            status_code=status.HTTP_428_PRECONDITION_REQUIRED,
            detail={"error": "user_not_found", "message": "先に自分の情報を登録してください。"},
        ) from None
    except SelfDeclaration:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "cannot_register_yourself"},
        ) from None
    except MatchedUserExists as exc:
        raise _matched_conflict(exc) from None

    if result.matched:
        logger.info("Crush registered for %s: matched with %s", user_id, result.matched_user_name)

    return RegisterCrushResponse(
        status="ok",
        matched=result.matched,
        is_first_registration=result.is_first_declaration,
    )


@router.post(
    "/follows",
    response_model=FollowResponse,
    responses={401: {"model": ErrorResponse, "description": "Missing user id"}},
    summary="Greet a new follower",
    description="Send the welcome message that invites the caller to register.",
)
def post_follow(
    user_id: str = Depends(get_user_id),
    service: RegistrationService = Depends(get_registration_service),
) -> FollowResponse:
    service.greet(user_id)
    return FollowResponse(status="ok")
