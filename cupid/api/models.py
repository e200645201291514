"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from pydantic import BaseModel, Field


class MessageRequest(BaseModel):
    """Request model for an inbound chat message."""

    text: str = Field(..., description="Raw message text")


class MessageResponse(BaseModel):
    """Reply to send back to the user."""

    reply: str


class FollowResponse(BaseModel):
    status: str


class RegisterUserRequest(BaseModel):
    """Request model for structured self registration."""

    name: str = Field(..., description="Full-width katakana name (2-20 characters)")
    birthday: str = Field(..., description="Birthday as YYYY-MM-DD")
    confirm_unmatch: bool = Field(
        False, description="Allow an identity change that dissolves the current match"
    )


class RegisterUserResponse(BaseModel):
    status: str
    matched: bool
    is_first_registration: bool


class RegisterCrushRequest(BaseModel):
    """Request model for a crush declaration."""

    crush_name: str = Field(..., min_length=1, description="Crush's name, compared literally")
    crush_birthday: str = Field(..., min_length=1, description="Crush's birthday as YYYY-MM-DD")
    confirm_unmatch: bool = Field(
        False, description="Allow replacing a crush that is currently matched"
    )


class RegisterCrushResponse(BaseModel):
    status: str
    matched: bool
    is_first_registration: bool


class ErrorDetail(BaseModel):
    """Machine-readable error code plus optional user-facing message."""

    error: str
    message: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: ErrorDetail
